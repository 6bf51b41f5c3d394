"""Default topic factory selection."""

from __future__ import annotations

import requests

from ..constants import DEFAULT_MAX_POLLS, DEFAULT_POLLING_INTERVAL
from .base import TopicFactory
from .chasqui import ChasquiTopicFactory
from .redirect import RedirectTopicFactory


def default_topic_factory(
    is_mobile: bool,
    *,
    mobile_callback_url: str | None = None,
    session: requests.Session | None = None,
    polling_interval: float = DEFAULT_POLLING_INTERVAL,
    max_polls: int = DEFAULT_MAX_POLLS,
) -> TopicFactory:
    """Pick redirect topics on mobile when the app can receive them, else Chasqui."""

    if is_mobile and mobile_callback_url:
        return RedirectTopicFactory(mobile_callback_url)
    return ChasquiTopicFactory(
        session, polling_interval=polling_interval, max_polls=max_polls
    )
