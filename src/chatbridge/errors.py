"""Exception hierarchy for chatbridge."""

from __future__ import annotations

from typing import ClassVar, Literal

ErrorKind = Literal[
    "authentication", "rate_limit", "invalid_request", "network", "generic"
]


class ChatBridgeError(Exception):
    """Base exception for all chatbridge errors."""

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.hint = hint


class ConfigurationError(ChatBridgeError):
    """Configuration validation or resolution failed."""


class ServiceError(ChatBridgeError):
    """A provider call failed.

    This class doubles as the generic kind (server errors, unexpected statuses,
    failed validation). Subclasses narrow the kind so callers can pick a retry
    policy with ``except RateLimitError`` rather than matching on text. The
    low-level error, when there is one, is chained as ``__cause__``.
    """

    kind: ClassVar[ErrorKind] = "generic"

    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        status_code: int | None = None,
        provider: str | None = None,
        reason: str | None = None,
        hint: str | None = None,
    ) -> None:
        super().__init__(message, hint=hint)
        self.code = code
        self.status_code = status_code
        self.provider = provider
        self.reason = reason

    @property
    def cause(self) -> BaseException | None:
        """The wrapped low-level error, if any."""
        return self.__cause__

    def describe(self) -> str:
        """Render a single user-facing line, e.g. for a chat transcript."""
        text = f"{self.reason}: {self.message}" if self.reason else self.message
        if self.code is not None:
            text = f"{text} (Code: {self.code})"
        return text


class AuthenticationError(ServiceError):
    """Credentials are missing, invalid, or were rejected (HTTP 401/403)."""

    kind = "authentication"


class RateLimitError(ServiceError):
    """Rate limit exceeded (HTTP 429)."""

    kind = "rate_limit"


class InvalidRequestError(ServiceError):
    """The request was rejected (HTTP 400) or the response broke the schema."""

    kind = "invalid_request"


class NetworkError(ServiceError):
    """Transport failed before an HTTP status was received."""

    kind = "network"
