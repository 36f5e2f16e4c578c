"""Vertex AI provider (regional endpoint, API key or service-account token)."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from chatbridge.config import Provider
from chatbridge.credentials import CredentialManager
from chatbridge.errors import AuthenticationError, ConfigurationError
from chatbridge.providers import _transport
from chatbridge.providers._request import build_probe_request, build_request

if TYPE_CHECKING:
    import httpx

    from chatbridge.config import ProviderConfig

log = logging.getLogger(__name__)


class VertexAIClient:
    """Google Vertex AI client.

    Service-account tokens are cached by the client's CredentialManager and
    refreshed shortly before they expire; API keys are sent with every call.
    """

    def __init__(
        self,
        config: ProviderConfig,
        *,
        http_client: httpx.AsyncClient | None = None,
        credentials: CredentialManager | None = None,
    ) -> None:
        """Create a client; *config* must target Vertex AI."""
        if config.provider is not Provider.VERTEX_AI:
            raise ConfigurationError(
                f"VertexAIClient requires provider 'vertex_ai', "
                f"got {config.provider.value!r}"
            )
        self._config = config
        self._http_client = http_client
        self._credentials = credentials or CredentialManager()

    @property
    def config(self) -> ProviderConfig:
        """The configuration this client was built from."""
        return self._config

    @property
    def name(self) -> str:
        """Human-readable provider label."""
        return "Vertex AI"

    @property
    def credentials(self) -> CredentialManager:
        """Token cache used for service-account auth."""
        return self._credentials

    async def generate(self, prompt: str) -> str:
        """Generate a reply to *prompt*.

        Raises:
            ConfigurationError: The service-account key file is unusable.
            AuthenticationError: Invalid config, failed token exchange, or 401/403.
            RateLimitError: The API returned 429.
            InvalidRequestError: 400, or a success body without text.
            NetworkError: The request failed in transit or the reply was unreadable.
            ServiceError: Server errors and unexpected statuses.
        """
        if not self._config.is_valid:
            raise AuthenticationError(
                "Invalid configuration. Please check your authentication settings.",
                provider=self.name,
                hint="Vertex AI needs a project id plus an API key or service account.",
            )

        credential = await self._credentials.ensure_credential(self._config)
        request = build_request(prompt, self._config, credential=credential)
        return await _transport.send(
            request, provider=self.name, http_client=self._http_client
        )

    async def validate_configuration(self) -> bool:
        """Authenticate and probe with a tiny request; any failure yields False."""
        try:
            if not self._config.is_valid:
                return False
            credential = await self._credentials.ensure_credential(self._config)
            response = await _transport.post(
                build_probe_request(self._config, credential=credential),
                provider=self.name,
                http_client=self._http_client,
            )
            return response.status_code == 200
        except asyncio.CancelledError:
            raise
        except Exception as e:
            log.warning("Configuration validation failed: %s", e)
            return False
