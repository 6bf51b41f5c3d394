"""Correlation topic interface."""

from __future__ import annotations

import asyncio
import secrets
from abc import ABC, abstractmethod
from collections.abc import Callable, Generator
from enum import Enum
from typing import Any

from ..constants import TOPIC_ID_BYTES, TopicKind

TopicFactory = Callable[[str], "Topic"]


def new_topic_id() -> str:
    return secrets.token_hex(TOPIC_ID_BYTES)


def topic_kind(kind: str | TopicKind) -> str:
    """Return the plain string name of a topic kind."""

    return kind.value if isinstance(kind, Enum) else str(kind)


class Topic(ABC):
    """Single-use channel that yields exactly one out-of-band response.

    Awaiting a topic starts waiting for the response; every await observes the
    same settlement, so the underlying wait runs at most once.
    """

    def __init__(self, kind: str | TopicKind, url: str) -> None:
        self.kind = topic_kind(kind)
        self.url = url
        self._settlement: asyncio.Future[Any] | None = None
        self._cancelled = False

    @abstractmethod
    async def _wait(self) -> Any:
        """Wait for the response and return its payload or raise."""

    def _on_cancel(self) -> None:
        """Release adapter resources held for an abandoned topic."""

    def _ensure_settlement(self) -> asyncio.Future[Any]:
        if self._settlement is None:
            self._settlement = asyncio.ensure_future(self._wait())
        return self._settlement

    def __await__(self) -> Generator[Any, None, Any]:
        if self._cancelled and self._settlement is None:
            raise asyncio.CancelledError(f"Topic {self.url} was cancelled")
        return self._ensure_settlement().__await__()

    def cancel(self) -> None:
        """Stop waiting on a topic that will never be awaited to completion."""

        if self._cancelled:
            return
        self._cancelled = True
        if self._settlement is not None and not self._settlement.done():
            self._settlement.cancel()
        self._on_cancel()

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def done(self) -> bool:
        return self._settlement is not None and self._settlement.done()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(kind={self.kind!r}, url={self.url!r})"
