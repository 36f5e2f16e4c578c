"""Response classification: HTTP status + body -> text or a typed ServiceError.

Providers share one error envelope (``{"error": {"message", "code"}}``) and
one success shape (``candidates[0].content.parts[0].text``), so a single
classifier serves both clients.
"""

from __future__ import annotations

import json
from typing import Any

from chatbridge._http import BAD_REQUEST, FORBIDDEN, TOO_MANY_REQUESTS, UNAUTHORIZED
from chatbridge.errors import (
    AuthenticationError,
    InvalidRequestError,
    NetworkError,
    RateLimitError,
    ServiceError,
)

_UNEXPECTED_SHAPE = "Unexpected response shape"


def _decode(body: bytes | str) -> str:
    if isinstance(body, bytes):
        return body.decode("utf-8", errors="replace")
    return body


def extract_text(data: Any) -> str | None:
    """Return ``candidates[0].content.parts[0].text`` if present and non-empty."""
    if not isinstance(data, dict):
        return None
    candidates = data.get("candidates")
    if not isinstance(candidates, list) or not candidates:
        return None
    first = candidates[0]
    content = first.get("content") if isinstance(first, dict) else None
    parts = content.get("parts") if isinstance(content, dict) else None
    if not isinstance(parts, list) or not parts:
        return None
    part = parts[0]
    text = part.get("text") if isinstance(part, dict) else None
    if not isinstance(text, str) or not text:
        return None
    return text


def parse_error_body(raw: str) -> tuple[str, str | None]:
    """Return ``(message, code)`` from an error envelope, else the raw body."""
    try:
        data = json.loads(raw)
    except ValueError:
        return raw, None

    error = data.get("error") if isinstance(data, dict) else None
    if not isinstance(error, dict):
        return raw, None

    message = error.get("message")
    code = error.get("code")
    return (
        message if isinstance(message, str) and message else raw,
        str(code) if code is not None else None,
    )


def _error_for_status(
    status_code: int, message: str, code: str | None, provider: str
) -> ServiceError:
    err_cls: type[ServiceError] = ServiceError
    if status_code == BAD_REQUEST:
        err_cls, reason = InvalidRequestError, "Bad request"
    elif status_code == UNAUTHORIZED:
        err_cls, reason = AuthenticationError, "Authentication failed"
    elif status_code == FORBIDDEN:
        err_cls, reason = AuthenticationError, "Access denied"
    elif status_code == TOO_MANY_REQUESTS:
        err_cls, reason = RateLimitError, "Rate limit exceeded"
    elif 500 <= status_code <= 599:
        reason = "Server error"
    else:
        reason = f"Unexpected status {status_code}"

    hint = None
    if err_cls is AuthenticationError:
        hint = "Check credentials/permissions for the configured provider."
    elif err_cls is RateLimitError:
        hint = "Retry later with backoff."

    return err_cls(
        message,
        code=code,
        status_code=status_code,
        provider=provider,
        reason=reason,
        hint=hint,
    )


def classify_response(status_code: int, body: bytes | str, *, provider: str) -> str:
    """Return the generated text for a 200, or raise the matching ServiceError.

    Raises:
        InvalidRequestError: HTTP 400, or a 200 whose body lacks generated text.
        AuthenticationError: HTTP 401 or 403.
        RateLimitError: HTTP 429.
        ServiceError: Any other non-200 status (5xx included).
    """
    raw = _decode(body)
    if status_code == 200:
        try:
            data = json.loads(raw)
        except ValueError as e:
            raise InvalidRequestError(
                f"{_UNEXPECTED_SHAPE} from {provider}: body is not JSON",
                status_code=status_code,
                provider=provider,
            ) from e
        text = extract_text(data)
        if text is None:
            raise InvalidRequestError(
                f"{_UNEXPECTED_SHAPE} from {provider}",
                status_code=status_code,
                provider=provider,
            )
        return text

    message, code = parse_error_body(raw)
    raise _error_for_status(status_code, message, code, provider)


def classify_transport_error(exc: BaseException, *, provider: str) -> NetworkError:
    """Wrap an httpx failure to send the request or read its response."""
    err = NetworkError(
        f"Network error occurred: {exc}" if str(exc) else "Network error occurred",
        provider=provider,
    )
    err.__cause__ = exc
    return err
