"""Type definitions and data models for uport-connect."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:  # pragma: no cover - typing helper
    from .topics.base import Topic

UriHandler = Callable[[str], None]
CloseHandler = Callable[[], None]
CallIntent = Mapping[str, Any]
Address = str  # Ethereum address


@dataclass(frozen=True)
class Profile:
    """Verified identity returned from a credential request."""

    address: Address
    claims: Mapping[str, Any] = field(default_factory=dict)
    token: str | None = None

    @property
    def issuer(self) -> str | None:
        return self.claims.get("iss")


@dataclass(frozen=True)
class RequestEnvelope:
    """Everything one request/response round trip needs."""

    uri: str
    topic: Topic
    uri_handler: UriHandler | None = None
