"""Chasqui polling topics.

The signing app posts its response to the topic URL on the Chasqui relay; the
client polls the same URL until a message keyed by the topic kind shows up.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from typing import Any

import requests

from ..constants import (
    CHASQUI_URL,
    DEFAULT_MAX_POLLS,
    DEFAULT_POLLING_INTERVAL,
    DEFAULT_REQUEST_TIMEOUT,
    TopicKind,
)
from ..exceptions import RequestRejectedError, TopicError, TopicTimeoutError
from .base import Topic, new_topic_id

logger = logging.getLogger(__name__)

_PENDING = object()


class ChasquiTopic(Topic):
    """Topic settled by polling the Chasqui relay."""

    def __init__(
        self,
        kind: str | TopicKind,
        url: str,
        session: requests.Session,
        *,
        polling_interval: float = DEFAULT_POLLING_INTERVAL,
        max_polls: int = DEFAULT_MAX_POLLS,
        request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
    ) -> None:
        super().__init__(kind, url)
        self._session = session
        self._polling_interval = polling_interval
        self._max_polls = max_polls
        self._request_timeout = request_timeout

    async def _wait(self) -> Any:
        logger.debug(
            "Polling Chasqui topic %s (kind=%s, max_polls=%s, interval=%s)",
            self.url,
            self.kind,
            self._max_polls,
            self._polling_interval,
        )

        last_error: str | None = None
        for attempt in range(self._max_polls):
            try:
                response = await asyncio.to_thread(
                    self._session.get, self.url, timeout=self._request_timeout
                )
                response.raise_for_status()
            except requests.RequestException as exc:
                last_error = str(exc)
                logger.debug(
                    "Chasqui poll error (attempt %s/%s): %s", attempt + 1, self._max_polls, exc
                )
                await self._pause(attempt)
                continue

            payload = self._read_message(response)
            if payload is not _PENDING:
                logger.debug("Chasqui topic %s settled after %s polls", self.url, attempt + 1)
                await self._clear()
                return payload

            await self._pause(attempt)

        raise TopicTimeoutError(
            f"Timed out waiting for a response after {self._max_polls} polls",
            topic_url=self.url,
            attempts=self._max_polls,
            details={"last_error": last_error} if last_error else None,
        )

    async def _pause(self, attempt: int) -> None:
        if attempt + 1 < self._max_polls:
            await asyncio.sleep(self._polling_interval)

    def _read_message(self, response: requests.Response) -> Any:
        try:
            body = response.json()
        except ValueError as exc:
            raise TopicError(
                "Chasqui returned a non-JSON response",
                topic_url=self.url,
                details={"error": str(exc)},
            ) from exc

        message = body.get("message") if isinstance(body, Mapping) else None
        if not message:
            return _PENDING

        if not isinstance(message, Mapping):
            raise TopicError(
                "Chasqui message is not an object",
                topic_url=self.url,
                details={"message": message},
            )

        if message.get("error"):
            raise RequestRejectedError(
                "Request was rejected by the signing app",
                topic_url=self.url,
                reason=message["error"],
            )

        payload = message.get(self.kind)
        if payload:
            return payload
        return _PENDING

    async def _clear(self) -> None:
        try:
            await asyncio.to_thread(self._session.delete, self.url, timeout=self._request_timeout)
        except requests.RequestException as exc:
            logger.warning("Failed to clear Chasqui topic %s: %s", self.url, exc)


class ChasquiTopicFactory:
    """Create fresh Chasqui topics sharing one HTTP session."""

    def __init__(
        self,
        session: requests.Session | None = None,
        *,
        base_url: str = CHASQUI_URL,
        polling_interval: float = DEFAULT_POLLING_INTERVAL,
        max_polls: int = DEFAULT_MAX_POLLS,
        request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
    ) -> None:
        self._session = session or requests.Session()
        self._base_url = base_url.rstrip("/")
        self._polling_interval = polling_interval
        self._max_polls = max_polls
        self._request_timeout = request_timeout

    def __call__(self, kind: str | TopicKind) -> ChasquiTopic:
        return ChasquiTopic(
            kind,
            f"{self._base_url}/{new_topic_id()}",
            self._session,
            polling_interval=self._polling_interval,
            max_polls=self._max_polls,
            request_timeout=self._request_timeout,
        )
