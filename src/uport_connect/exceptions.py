"""Exception hierarchy for uport-connect."""

from typing import Any


class UportConnectError(Exception):
    """Base exception for all uport-connect errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ValidationError(UportConnectError):
    """Raised when a call intent or argument is malformed."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: Any | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.field = field
        self.value = value


class DispatchError(UportConnectError):
    """Raised when a request URI cannot be handed to the signing app."""

    def __init__(
        self,
        message: str,
        environment: str | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.environment = environment


class TopicError(UportConnectError):
    """Raised when the correlation topic fails to yield a response."""

    def __init__(
        self,
        message: str,
        topic_url: str | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.topic_url = topic_url


class TopicTimeoutError(TopicError):
    """Raised when no response was posted before the polling budget ran out."""

    def __init__(
        self,
        message: str,
        topic_url: str | None = None,
        attempts: int | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, topic_url, details)
        self.attempts = attempts


class RequestRejectedError(TopicError):
    """Raised when the signing app posts an error, e.g. the user declined."""

    def __init__(
        self,
        message: str,
        topic_url: str | None = None,
        reason: Any | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, topic_url, details)
        self.reason = reason


class VerificationError(UportConnectError):
    """Raised when a posted response fails signature or format checks."""

    def __init__(
        self,
        message: str,
        reason: str | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.reason = reason
