"""Gemini API provider (API key in the query string)."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from chatbridge.config import Provider
from chatbridge.errors import AuthenticationError, ConfigurationError
from chatbridge.providers import _transport
from chatbridge.providers._request import build_probe_request, build_request

if TYPE_CHECKING:
    import httpx

    from chatbridge.config import ProviderConfig

log = logging.getLogger(__name__)


class GeminiAPIClient:
    """Google Gemini API client."""

    def __init__(
        self,
        config: ProviderConfig,
        *,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Create a client; *config* must target the Gemini API."""
        if config.provider is not Provider.GEMINI_API:
            raise ConfigurationError(
                f"GeminiAPIClient requires provider 'gemini_api', "
                f"got {config.provider.value!r}"
            )
        self._config = config
        self._http_client = http_client

    @property
    def config(self) -> ProviderConfig:
        """The configuration this client was built from."""
        return self._config

    @property
    def name(self) -> str:
        """Human-readable provider label."""
        return "Gemini API"

    async def generate(self, prompt: str) -> str:
        """Generate a reply to *prompt*.

        Raises:
            AuthenticationError: The config is invalid or the key was rejected.
            RateLimitError: The API returned 429.
            InvalidRequestError: 400, or a success body without text.
            NetworkError: The request failed in transit or the reply was unreadable.
            ServiceError: Server errors and unexpected statuses.
        """
        if not self._config.is_valid:
            raise AuthenticationError(
                "Invalid configuration. Please check your API key.",
                provider=self.name,
                hint="Set GEMINI_API_KEY or save an API key in settings.",
            )

        request = build_request(prompt, self._config)
        return await _transport.send(
            request, provider=self.name, http_client=self._http_client
        )

    async def validate_configuration(self) -> bool:
        """Probe the API with a tiny request; any failure yields False."""
        try:
            if not self._config.is_valid:
                return False
            response = await _transport.post(
                build_probe_request(self._config),
                provider=self.name,
                http_client=self._http_client,
            )
            return response.status_code == 200
        except asyncio.CancelledError:
            raise
        except Exception as e:
            log.warning("Configuration validation failed: %s", e)
            return False
