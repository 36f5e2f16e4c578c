"""Service-account credentials for Vertex AI.

The manager caches one bearer token and refreshes it when it is within five
minutes of expiry. Refreshes are single-flight: concurrent callers that find
the token stale wait on the same lock and reuse whatever the first refresh
produced.

API-key auth never touches this cache; the key rides on each request.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

from chatbridge.config import AuthMode
from chatbridge.errors import AuthenticationError, ConfigurationError

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from chatbridge.config import ProviderConfig

log = logging.getLogger(__name__)

CLOUD_PLATFORM_SCOPE = "https://www.googleapis.com/auth/cloud-platform"
REFRESH_MARGIN = timedelta(minutes=5)


@dataclass(frozen=True)
class Credential:
    """A bearer token and the moment it stops being accepted."""

    token: str
    expiry: datetime

    def is_fresh(self, now: datetime, margin: timedelta = REFRESH_MARGIN) -> bool:
        """True while *now* is earlier than ``expiry - margin``."""
        return now < self.expiry - margin

    def __str__(self) -> str:
        return f"Credential(token='[REDACTED]', expiry={self.expiry.isoformat()})"

    __repr__ = __str__


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def load_service_account_info(path: str | Path) -> dict[str, Any]:
    """Read and parse a service-account JSON key file.

    Raises:
        ConfigurationError: The file is missing, unreadable, or not a JSON object.
    """
    key_path = Path(path).expanduser()
    if not key_path.is_file():
        raise ConfigurationError(
            f"Service account file not found: {key_path}",
            hint="Set VERTEX_SERVICE_ACCOUNT_PATH to a downloaded JSON key file.",
        )
    try:
        info = json.loads(key_path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ConfigurationError(
            f"Service account file could not be read: {key_path}: {e}"
        ) from e
    if not isinstance(info, dict):
        raise ConfigurationError(
            f"Service account file is not a JSON object: {key_path}"
        )
    return info


async def exchange_service_account_token(info: dict[str, Any]) -> Credential:
    """Exchange service-account key material for a cloud-platform access token.

    google-auth performs the signed JWT grant synchronously, so the refresh
    runs in a worker thread to keep the event loop free.
    """
    from google.auth.transport.requests import Request
    from google.oauth2 import service_account

    creds = service_account.Credentials.from_service_account_info(
        info, scopes=[CLOUD_PLATFORM_SCOPE]
    )
    await asyncio.to_thread(creds.refresh, Request())

    token = creds.token
    if not isinstance(token, str) or not token:
        raise AuthenticationError("Token exchange returned no access token")
    expiry = creds.expiry
    if expiry is None:
        # No expiry reported; treat the token as already stale.
        expiry = _utcnow()
    elif expiry.tzinfo is None:
        expiry = expiry.replace(tzinfo=timezone.utc)
    return Credential(token=token, expiry=expiry)


class CredentialManager:
    """Obtain and cache an access token for service-account auth."""

    def __init__(
        self,
        *,
        exchanger: Callable[[dict[str, Any]], Awaitable[Credential]] | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._exchanger = exchanger or exchange_service_account_token
        self._clock = clock or _utcnow
        self._lock: asyncio.Lock | None = None
        self._lock_loop: asyncio.AbstractEventLoop | None = None
        self._cached: Credential | None = None
        self._cached_path: str | None = None
        #: Number of token exchanges performed; handy when diagnosing churn.
        self.refresh_count = 0

    def _refresh_lock(self) -> asyncio.Lock:
        # asyncio.Lock binds to the loop it first waits on; keep one per loop.
        loop = asyncio.get_running_loop()
        if self._lock is None or self._lock_loop is not loop:
            self._lock = asyncio.Lock()
            self._lock_loop = loop
        return self._lock

    def _cache_hit(self, path: str) -> Credential | None:
        cached = self._cached
        if cached is None or self._cached_path != path:
            return None
        return cached if cached.is_fresh(self._clock()) else None

    async def ensure_credential(self, config: ProviderConfig) -> Credential | None:
        """Return a fresh credential, or None when the config uses an API key.

        Raises:
            ConfigurationError: The key file is missing or unreadable.
            AuthenticationError: The token exchange failed.
        """
        if config.auth_mode is AuthMode.API_KEY:
            if not config.api_key:
                raise AuthenticationError("API key is required")
            return None

        path = config.service_account_path
        if not path:
            raise AuthenticationError("Service account path is required")

        cached = self._cache_hit(path)
        if cached is not None:
            return cached

        async with self._refresh_lock():
            # Another caller may have refreshed while we waited.
            cached = self._cache_hit(path)
            if cached is not None:
                return cached

            info = load_service_account_info(path)
            try:
                credential = await self._exchanger(info)
            except asyncio.CancelledError:
                raise
            except AuthenticationError:
                raise
            except Exception as e:
                raise AuthenticationError(
                    f"Authentication failed: {e}",
                    hint="Check that the service account has the Vertex AI User role.",
                ) from e

            self._cached = credential
            self._cached_path = path
            self.refresh_count += 1
            log.info("Obtained service account token (expires %s)", credential.expiry)
            return credential

    def clear(self) -> None:
        """Forget the cached token so the next call refreshes."""
        self._cached = None
        self._cached_path = None
