"""Topics settled by the signing app redirecting back to the host app.

On mobile the signing app answers by opening the callback URL with the
response in the fragment, e.g. ``https://app.example/cb?topic=ab12#access_token=<jwt>``.
The host app passes that URL to :meth:`RedirectTopicFactory.deliver`.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Any
from urllib.parse import parse_qs, urldefrag, urlsplit

from ..constants import DEFAULT_REDIRECT_TIMEOUT, TopicKind
from ..exceptions import RequestRejectedError, TopicError, TopicTimeoutError
from .base import Topic, new_topic_id

logger = logging.getLogger(__name__)


class RedirectTopic(Topic):
    """Topic settled by an explicit delivery from the host app.

    Without a delivery within ``timeout`` seconds the topic rejects with
    :class:`TopicTimeoutError`; ``None`` waits indefinitely.
    """

    def __init__(
        self,
        kind: str | TopicKind,
        url: str,
        topic_id: str,
        *,
        on_discard: Callable[[str], None] | None = None,
        timeout: float | None = None,
    ) -> None:
        super().__init__(kind, url)
        self.topic_id = topic_id
        self._timeout = timeout
        self._on_discard = on_discard
        self._event = asyncio.Event()
        self._outcome: tuple[Any, BaseException | None] | None = None

    def settle(self, payload: Any = None, error: BaseException | None = None) -> None:
        if self._outcome is not None:
            raise TopicError("Topic has already settled", topic_url=self.url)
        self._outcome = (payload, error)
        self._event.set()

    async def _wait(self) -> Any:
        try:
            await asyncio.wait_for(self._event.wait(), self._timeout)
        except asyncio.TimeoutError as exc:
            raise TopicTimeoutError(
                f"No redirect arrived within {self._timeout} seconds",
                topic_url=self.url,
                attempts=1,
            ) from exc
        finally:
            self._release()

        assert self._outcome is not None
        payload, error = self._outcome
        if error is not None:
            raise error
        return payload

    def _release(self) -> None:
        if self._on_discard is not None:
            self._on_discard(self.topic_id)

    def _on_cancel(self) -> None:
        self._release()


class RedirectTopicFactory:
    """Create redirect topics and route returning redirects to them."""

    def __init__(
        self, callback_url: str, *, timeout: float | None = DEFAULT_REDIRECT_TIMEOUT
    ) -> None:
        self._callback_url, _ = urldefrag(callback_url)
        self._timeout = timeout
        self._pending: dict[str, RedirectTopic] = {}

    def __call__(self, kind: str | TopicKind) -> RedirectTopic:
        topic_id = new_topic_id()
        separator = "&" if urlsplit(self._callback_url).query else "?"
        topic = RedirectTopic(
            kind,
            f"{self._callback_url}{separator}topic={topic_id}",
            topic_id,
            on_discard=self.discard,
            timeout=self._timeout,
        )
        self._pending[topic_id] = topic
        return topic

    @property
    def pending(self) -> int:
        return len(self._pending)

    def discard(self, topic_id: str) -> None:
        self._pending.pop(topic_id, None)

    def deliver(self, url: str) -> RedirectTopic:
        """Settle the topic named in a callback URL with its fragment payload."""

        parts = urlsplit(url)
        topic_id = parse_qs(parts.query).get("topic", [None])[0]
        topic = self._pending.pop(topic_id, None) if topic_id else None
        if topic is None:
            raise TopicError(
                "Redirect does not match a pending topic",
                topic_url=url,
                details={"topic": topic_id},
            )

        response = parse_qs(parts.fragment)
        if response.get("error"):
            topic.settle(
                error=RequestRejectedError(
                    "Request was rejected by the signing app",
                    topic_url=topic.url,
                    reason=response["error"][0],
                )
            )
        elif response.get(topic.kind):
            topic.settle(response[topic.kind][0])
        else:
            topic.settle(
                error=TopicError(
                    f"Redirect carried no '{topic.kind}' response",
                    topic_url=topic.url,
                    details={"fragment": parts.fragment},
                )
            )

        logger.debug("Delivered redirect response to topic %s", topic.topic_id)
        return topic
