"""Delivery of request URIs to the signing app."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from .exceptions import DispatchError
from .types import UriHandler

logger = logging.getLogger(__name__)


class Dispatcher(ABC):
    """Hand a request URI to exactly one handler."""

    environment: str = ""
    engages_display: bool = False

    @abstractmethod
    def dispatch(self, uri: str, uri_handler: UriHandler | None = None) -> None:
        pass

    def _invoke(self, handler: UriHandler | None, uri: str) -> None:
        if handler is None:
            raise DispatchError(
                f"No URI handler configured for {self.environment} requests",
                environment=self.environment,
            )

        try:
            handler(uri)
        except Exception as exc:
            raise DispatchError(
                f"URI handler failed for {self.environment} request",
                environment=self.environment,
                details={"uri": uri, "error": str(exc)},
            ) from exc


class RedirectDispatcher(Dispatcher):
    """Navigate to the request URI so the OS opens the signing app."""

    environment = "mobile"
    engages_display = False

    def __init__(self, mobile_uri_handler: UriHandler | None) -> None:
        self._mobile_uri_handler = mobile_uri_handler

    def dispatch(self, uri: str, uri_handler: UriHandler | None = None) -> None:
        logger.info("Redirecting to signing app")
        self._invoke(self._mobile_uri_handler, uri)


class DisplayDispatcher(Dispatcher):
    """Show the request URI for the user to scan."""

    environment = "display"
    engages_display = True

    def __init__(self, uri_handler: UriHandler | None) -> None:
        self._uri_handler = uri_handler

    def dispatch(self, uri: str, uri_handler: UriHandler | None = None) -> None:
        logger.info("Displaying request URI")
        self._invoke(uri_handler or self._uri_handler, uri)


def select_dispatcher(
    is_mobile: bool,
    *,
    uri_handler: UriHandler | None,
    mobile_uri_handler: UriHandler | None,
) -> Dispatcher:
    if is_mobile:
        return RedirectDispatcher(mobile_uri_handler)
    return DisplayDispatcher(uri_handler)
