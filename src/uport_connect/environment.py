"""Runtime environment helpers."""

from __future__ import annotations

import logging
import re
import webbrowser

logger = logging.getLogger(__name__)

_MOBILE_USER_AGENT = re.compile(
    r"iPhone|iPod|iPad|Android.+Mobile|Windows Phone|IEMobile|BlackBerry|BB10"
    r"|Opera Mini|Mobile Safari|webOS|Kindle|Silk",
    re.IGNORECASE,
)


def is_mobile_user_agent(user_agent: str | None) -> bool:
    """Return True when the user agent belongs to a phone or tablet browser."""

    if not user_agent:
        return False
    return bool(_MOBILE_USER_AGENT.search(user_agent))


def open_uri(uri: str) -> None:
    """Hand a request URI to the OS so the signing app can pick it up."""

    logger.debug("Redirecting to %s", uri)
    webbrowser.open(uri)
