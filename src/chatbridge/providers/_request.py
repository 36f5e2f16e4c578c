"""Request construction for the generateContent endpoints.

Both providers accept the same JSON body; they differ only in URL shape and
in where the credential goes (``?key=`` query parameter or a bearer header).
Everything here is pure: no I/O, and identical inputs give identical output.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any
from urllib.parse import quote, urlencode

from chatbridge._http import GEMINI_API_BASE_URL, JSON_HEADERS, VERTEX_HOST_TEMPLATE
from chatbridge.config import AuthMode, Provider, ProviderConfig
from chatbridge.errors import AuthenticationError
from chatbridge.providers.models import ProviderRequest

if TYPE_CHECKING:
    from chatbridge.credentials import Credential

PROBE_PROMPT = "Hello"
PROBE_MAX_OUTPUT_TOKENS = 10

_SAFETY_CATEGORIES = (
    "HARM_CATEGORY_HARASSMENT",
    "HARM_CATEGORY_HATE_SPEECH",
    "HARM_CATEGORY_SEXUALLY_EXPLICIT",
    "HARM_CATEGORY_DANGEROUS_CONTENT",
)
_SAFETY_THRESHOLD = "BLOCK_MEDIUM_AND_ABOVE"


def safety_settings() -> list[dict[str, str]]:
    """Fixed content filters sent with every generation request."""
    return [
        {"category": category, "threshold": _SAFETY_THRESHOLD}
        for category in _SAFETY_CATEGORIES
    ]


def _contents(prompt: str) -> list[dict[str, Any]]:
    return [{"parts": [{"text": prompt}]}]


def build_body(prompt: str, config: ProviderConfig) -> dict[str, Any]:
    """Return the generateContent JSON body for a single-turn prompt."""
    return {
        "contents": _contents(prompt),
        "generationConfig": {
            "temperature": config.temperature,
            "topK": 1,
            "topP": 1,
            "maxOutputTokens": config.max_output_tokens,
        },
        "safetySettings": safety_settings(),
    }


def build_probe_body() -> dict[str, Any]:
    """Return the minimal body used to check that credentials work."""
    return {
        "contents": _contents(PROBE_PROMPT),
        "generationConfig": {"maxOutputTokens": PROBE_MAX_OUTPUT_TOKENS},
    }


def endpoint_url(config: ProviderConfig) -> str:
    """Return the generateContent URL without any credential attached."""
    model = quote(config.model, safe="-._")
    if config.provider is Provider.GEMINI_API:
        return f"{GEMINI_API_BASE_URL}/{model}:generateContent"

    host = VERTEX_HOST_TEMPLATE.format(location=config.location)
    return (
        f"{host}/v1/projects/{config.project_id}/locations/{config.location}"
        f"/publishers/google/models/{model}:generateContent"
    )


def _authorize(
    url: str, config: ProviderConfig, credential: Credential | None
) -> tuple[str, dict[str, str]]:
    headers = dict(JSON_HEADERS)
    uses_token = (
        config.provider is Provider.VERTEX_AI
        and config.auth_mode is AuthMode.SERVICE_ACCOUNT
    )
    if uses_token:
        if credential is None or not credential.token:
            raise AuthenticationError("No valid access token available")
        headers["Authorization"] = f"Bearer {credential.token}"
        return url, headers

    if not config.api_key:
        raise AuthenticationError("API key is required")
    return f"{url}?{urlencode({'key': config.api_key})}", headers


def build_request(
    prompt: str,
    config: ProviderConfig,
    *,
    credential: Credential | None = None,
) -> ProviderRequest:
    """Build the URL, headers and body for one generation call.

    Raises:
        AuthenticationError: The config's auth mode needs a credential or key
            that was not supplied.
    """
    url, headers = _authorize(endpoint_url(config), config, credential)
    return ProviderRequest(url=url, body=build_body(prompt, config), headers=headers)


def build_probe_request(
    config: ProviderConfig,
    *,
    credential: Credential | None = None,
) -> ProviderRequest:
    """Build the minimal validation call for *config*."""
    url, headers = _authorize(endpoint_url(config), config, credential)
    return ProviderRequest(url=url, body=build_probe_body(), headers=headers)
