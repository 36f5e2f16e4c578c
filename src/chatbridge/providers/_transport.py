"""One-shot HTTP POST shared by the provider clients."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

import httpx

from chatbridge.providers._response import (
    classify_response,
    classify_transport_error,
)

if TYPE_CHECKING:
    from chatbridge.providers.models import ProviderRequest

log = logging.getLogger(__name__)


async def _post(
    client: httpx.AsyncClient, request: ProviderRequest, provider: str
) -> httpx.Response:
    # The body is read inside post(), so decoding failures surface here too.
    try:
        return await client.post(
            request.url, content=request.content, headers=request.headers
        )
    except asyncio.CancelledError:
        raise
    except httpx.HTTPError as e:
        log.error("%s transport failure: %s", provider, type(e).__name__)
        raise classify_transport_error(e, provider=provider) from e


async def post(
    request: ProviderRequest,
    *,
    provider: str,
    http_client: httpx.AsyncClient | None = None,
) -> httpx.Response:
    """POST *request* once and return the raw response.

    Uses *http_client* when given (left open for the caller), otherwise a
    short-lived client with httpx's default timeout.

    Raises:
        NetworkError: The transport failed, or the response body could not be read.
    """
    if http_client is not None:
        return await _post(http_client, request, provider)
    async with httpx.AsyncClient() as client:
        return await _post(client, request, provider)


async def send(
    request: ProviderRequest,
    *,
    provider: str,
    http_client: httpx.AsyncClient | None = None,
) -> str:
    """POST *request* and classify the result into text or a ServiceError."""
    log.info("Making request to %s", provider)
    response = await post(request, provider=provider, http_client=http_client)
    log.info("Response status: %s", response.status_code)
    return classify_response(response.status_code, response.content, provider=provider)
