"""Display teardown around topic settlement."""

from __future__ import annotations

import logging
from collections.abc import Awaitable
from typing import Any

from .types import CloseHandler

logger = logging.getLogger(__name__)


def run_close_handler(close_handler: CloseHandler) -> None:
    """Invoke a close handler without letting its failure replace the outcome."""

    try:
        close_handler()
    except Exception:
        logger.exception("Close handler failed")


async def await_settlement(topic: Awaitable[Any], close_handler: CloseHandler | None) -> Any:
    """Await a topic, then close the display exactly once.

    The close handler runs before the result or error reaches the caller. With
    no close handler the topic is awaited as is.
    """

    if close_handler is None:
        return await topic

    try:
        return await topic
    finally:
        run_close_handler(close_handler)
