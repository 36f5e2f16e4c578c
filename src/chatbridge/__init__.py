"""chatbridge: send chat prompts to Gemini via the Gemini API or Vertex AI.

Public API:
    - ProviderConfig: Immutable provider/auth/model configuration
    - ServiceSelector: Picks and caches the active provider client
    - GeminiAPIClient / VertexAIClient: The two provider clients
    - ChatSession: Display transcript over a selector
"""

from __future__ import annotations

import logging

from chatbridge.chat import ChatMessage, ChatSession
from chatbridge.config import AuthMode, Provider, ProviderConfig, config_from_env
from chatbridge.credentials import Credential, CredentialManager
from chatbridge.errors import (
    AuthenticationError,
    ChatBridgeError,
    ConfigurationError,
    InvalidRequestError,
    NetworkError,
    RateLimitError,
    ServiceError,
)
from chatbridge.providers import (
    GeminiAPIClient,
    ProviderClient,
    VertexAIClient,
    create_client,
)
from chatbridge.selector import ServiceSelector
from chatbridge.store import JsonSettingsStore, SettingsStore

try:
    from importlib.metadata import PackageNotFoundError, version

    __version__ = version("chatbridge")
except PackageNotFoundError:
    __version__ = "0.0.0+unknown"

# Library-level NullHandler: stay silent unless the consumer configures logging.
logging.getLogger("chatbridge").addHandler(logging.NullHandler())

__all__ = [
    "AuthMode",
    "AuthenticationError",
    "ChatBridgeError",
    "ChatMessage",
    "ChatSession",
    "ConfigurationError",
    "Credential",
    "CredentialManager",
    "GeminiAPIClient",
    "InvalidRequestError",
    "JsonSettingsStore",
    "NetworkError",
    "Provider",
    "ProviderClient",
    "ProviderConfig",
    "RateLimitError",
    "ServiceError",
    "ServiceSelector",
    "SettingsStore",
    "VertexAIClient",
    "config_from_env",
    "create_client",
]
