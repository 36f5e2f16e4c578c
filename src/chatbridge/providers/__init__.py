"""Provider implementations."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from chatbridge.config import Provider

from .base import ProviderClient
from .gemini_api import GeminiAPIClient
from .vertex import VertexAIClient

if TYPE_CHECKING:
    import httpx

    from chatbridge.config import ProviderConfig


def create_client(
    config: ProviderConfig,
    *,
    http_client: httpx.AsyncClient | None = None,
    **kwargs: Any,
) -> ProviderClient:
    """Build the client matching ``config.provider``.

    Extra keyword arguments go to the Vertex client (e.g. ``credentials``).
    """
    if config.provider is Provider.VERTEX_AI:
        return VertexAIClient(config, http_client=http_client, **kwargs)
    return GeminiAPIClient(config, http_client=http_client)


__all__ = [
    "GeminiAPIClient",
    "ProviderClient",
    "VertexAIClient",
    "create_client",
]
