"""Configuration: frozen ProviderConfig plus environment and storage parsing.

A ``ProviderConfig`` is resolved once (from explicit fields, the persisted
settings store, or the environment) and then flows unchanged into a provider
client. Changing provider means building a new value, never mutating one.

Environment variables are read after ``python-dotenv`` has loaded a ``.env``
file from the working directory, mirroring how the chat application is
configured on a developer machine.
"""

from __future__ import annotations

from contextlib import suppress
from dataclasses import asdict, dataclass, replace
from enum import Enum
import logging
import os
from typing import TYPE_CHECKING, Any

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator

from chatbridge.errors import ConfigurationError

if TYPE_CHECKING:
    from collections.abc import Mapping

load_dotenv()

log = logging.getLogger(__name__)


class Provider(str, Enum):
    """Upstream generative-AI service."""

    GEMINI_API = "gemini_api"
    VERTEX_AI = "vertex_ai"


class AuthMode(str, Enum):
    """How requests are authenticated."""

    API_KEY = "api_key"
    SERVICE_ACCOUNT = "service_account"


DEFAULT_LOCATION = "us-central1"
DEFAULT_MODEL = "gemini-1.5-flash"
DEFAULT_GEMINI_API_MODEL = "gemini-1.5-flash-latest"
DEFAULT_TEMPERATURE = 0.9
DEFAULT_MAX_OUTPUT_TOKENS = 2048


@dataclass(frozen=True)
class ProviderConfig:
    """Immutable description of which provider to call and how.

    Example:
        config = ProviderConfig(
            provider=Provider.GEMINI_API,
            auth_mode=AuthMode.API_KEY,
            api_key="...",
        )
        assert config.is_valid
    """

    provider: Provider
    auth_mode: AuthMode
    api_key: str | None = None
    service_account_path: str | None = None
    project_id: str | None = None
    location: str = DEFAULT_LOCATION
    model: str = DEFAULT_MODEL
    #: Conventionally 0.0-1.0; passed through unchecked.
    temperature: float = DEFAULT_TEMPERATURE
    max_output_tokens: int = DEFAULT_MAX_OUTPUT_TOKENS

    @property
    def is_valid(self) -> bool:
        """Whether the provider/auth combination has its credentials populated."""
        if self.provider is Provider.GEMINI_API:
            return self.auth_mode is AuthMode.API_KEY and bool(self.api_key)

        if self.auth_mode is AuthMode.API_KEY:
            has_auth = bool(self.api_key)
        else:
            has_auth = bool(self.service_account_path)
        return has_auth and bool(self.project_id)

    def with_changes(self, **changes: Any) -> ProviderConfig:
        """Return a copy with *changes* applied."""
        return replace(self, **changes)

    def to_dict(self) -> dict[str, Any]:
        """Plain, JSON-friendly representation (includes secrets)."""
        data = asdict(self)
        data["provider"] = self.provider.value
        data["auth_mode"] = self.auth_mode.value
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ProviderConfig:
        """Build from a stored mapping, filling defaults for missing fields."""
        stored = StoredConfig.model_validate(dict(data))
        return cls(**stored.model_dump())

    def __str__(self) -> str:
        """Return a redacted, developer-friendly representation."""
        return (
            f"ProviderConfig(provider={self.provider.value!r}, "
            f"auth_mode={self.auth_mode.value!r}, model={self.model!r}, "
            f"api_key={'[REDACTED]' if self.api_key else None})"
        )

    __repr__ = __str__


# --- Persisted schema (pydantic wall) ---


class StoredConfig(BaseModel):
    """Schema for a persisted ProviderConfig blob.

    Stored blobs may come from older releases, so parsing is lenient: unknown
    provider or auth strings fall back to the Gemini API with key auth, and
    absent tuning fields take their defaults.
    """

    model_config = ConfigDict(extra="ignore")

    provider: Provider = Provider.GEMINI_API
    auth_mode: AuthMode = AuthMode.API_KEY
    api_key: str | None = None
    service_account_path: str | None = None
    project_id: str | None = None
    location: str = DEFAULT_LOCATION
    model: str = Field(default=DEFAULT_MODEL, min_length=1)
    temperature: float = DEFAULT_TEMPERATURE
    max_output_tokens: int = Field(default=DEFAULT_MAX_OUTPUT_TOKENS, gt=0)

    @field_validator("provider", mode="before")
    @classmethod
    def normalize_provider(cls, v: Any) -> Any:
        """Map provider spellings onto the enum; unknown values default."""
        if isinstance(v, Provider):
            return v
        return _parse_provider(v if isinstance(v, str) else None)

    @field_validator("auth_mode", mode="before")
    @classmethod
    def normalize_auth_mode(cls, v: Any) -> Any:
        """Accept ``api_key``/``service_account``; anything else is key auth."""
        if isinstance(v, AuthMode):
            return v
        if isinstance(v, str) and v.strip().lower() == AuthMode.SERVICE_ACCOUNT:
            return AuthMode.SERVICE_ACCOUNT
        return AuthMode.API_KEY

    @field_validator("location", "model", mode="before")
    @classmethod
    def drop_null(cls, v: Any, info: Any) -> Any:
        """Treat explicit nulls like missing fields."""
        if v is None:
            return DEFAULT_LOCATION if info.field_name == "location" else DEFAULT_MODEL
        return v

    @field_validator("temperature", "max_output_tokens", mode="before")
    @classmethod
    def default_null_numbers(cls, v: Any, info: Any) -> Any:
        """Treat explicit nulls like missing fields."""
        if v is None:
            return (
                DEFAULT_TEMPERATURE
                if info.field_name == "temperature"
                else DEFAULT_MAX_OUTPUT_TOKENS
            )
        return v


# --- Environment loading ---

_PROVIDER_ALIASES: dict[str, Provider] = {
    "gemini_api": Provider.GEMINI_API,
    "gemini": Provider.GEMINI_API,
    "vertex_ai": Provider.VERTEX_AI,
    "vertex": Provider.VERTEX_AI,
}

_OPTIONAL_ENV_VARS: dict[str, str] = {
    "AI_PROVIDER": "gemini_api or vertex_ai",
    "VERTEX_AUTH_TYPE": "api_key or service_account (for Vertex AI)",
    "VERTEX_LOCATION": f"{DEFAULT_LOCATION} (for Vertex AI)",
    "GEMINI_MODEL": f"{DEFAULT_GEMINI_API_MODEL} (for Gemini API)",
    "VERTEX_MODEL": f"{DEFAULT_MODEL} (for Vertex AI)",
    "TEMPERATURE": str(DEFAULT_TEMPERATURE),
    "MAX_OUTPUT_TOKENS": str(DEFAULT_MAX_OUTPUT_TOKENS),
}


def _parse_provider(value: str | None) -> Provider:
    if value is None:
        return Provider.GEMINI_API
    return _PROVIDER_ALIASES.get(value.strip().lower(), Provider.GEMINI_API)


def _env(environ: Mapping[str, str] | None) -> Mapping[str, str]:
    return os.environ if environ is None else environ


def _get(environ: Mapping[str, str], key: str, default: str) -> str:
    value = environ.get(key)
    return value if value else default


def _require(environ: Mapping[str, str], key: str) -> str:
    value = environ.get(key, "").strip()
    if not value or value == f"your_actual_{key.lower()}_here":
        raise ConfigurationError(
            f"{key} is required but not set in environment",
            hint=f"Set {key} in your environment or .env file.",
        )
    return value


def _float(environ: Mapping[str, str], key: str, default: float) -> float:
    with suppress(ValueError):
        return float(environ.get(key, ""))
    return default


def _int(environ: Mapping[str, str], key: str, default: int) -> int:
    with suppress(ValueError):
        return int(environ.get(key, ""))
    return default


def _vertex_auth_mode(environ: Mapping[str, str]) -> AuthMode:
    raw = _get(environ, "VERTEX_AUTH_TYPE", AuthMode.SERVICE_ACCOUNT.value)
    if raw.strip().lower() == AuthMode.API_KEY.value:
        return AuthMode.API_KEY
    return AuthMode.SERVICE_ACCOUNT


def provider_from_env(environ: Mapping[str, str] | None = None) -> Provider:
    """Return the provider named by ``AI_PROVIDER`` (Gemini API by default)."""
    return _parse_provider(_env(environ).get("AI_PROVIDER"))


def config_from_env(environ: Mapping[str, str] | None = None) -> ProviderConfig:
    """Resolve a ProviderConfig from environment variables.

    Raises:
        ConfigurationError: A variable required by the selected provider and
            auth mode is missing or still holds its template placeholder.
    """
    env = _env(environ)
    temperature = _float(env, "TEMPERATURE", DEFAULT_TEMPERATURE)
    max_output_tokens = _int(env, "MAX_OUTPUT_TOKENS", DEFAULT_MAX_OUTPUT_TOKENS)

    if provider_from_env(env) is Provider.GEMINI_API:
        return ProviderConfig(
            provider=Provider.GEMINI_API,
            auth_mode=AuthMode.API_KEY,
            api_key=_require(env, "GEMINI_API_KEY"),
            model=_get(env, "GEMINI_MODEL", DEFAULT_GEMINI_API_MODEL),
            temperature=temperature,
            max_output_tokens=max_output_tokens,
        )

    auth_mode = _vertex_auth_mode(env)
    if auth_mode is AuthMode.API_KEY:
        api_key: str | None = _require(env, "VERTEX_API_KEY")
        service_account_path = None
    else:
        api_key = None
        service_account_path = _require(env, "VERTEX_SERVICE_ACCOUNT_PATH")

    return ProviderConfig(
        provider=Provider.VERTEX_AI,
        auth_mode=auth_mode,
        api_key=api_key,
        service_account_path=service_account_path,
        project_id=_require(env, "VERTEX_PROJECT_ID"),
        location=_get(env, "VERTEX_LOCATION", DEFAULT_LOCATION),
        model=_get(env, "VERTEX_MODEL", DEFAULT_MODEL),
        temperature=temperature,
        max_output_tokens=max_output_tokens,
    )


def required_env_vars(environ: Mapping[str, str] | None = None) -> list[str]:
    """List the variables the currently selected provider needs."""
    env = _env(environ)
    if provider_from_env(env) is Provider.GEMINI_API:
        return ["GEMINI_API_KEY"]
    if _vertex_auth_mode(env) is AuthMode.API_KEY:
        return ["VERTEX_API_KEY", "VERTEX_PROJECT_ID"]
    return ["VERTEX_SERVICE_ACCOUNT_PATH", "VERTEX_PROJECT_ID"]


def optional_env_vars() -> dict[str, str]:
    """Map optional variable names to a short description of their values."""
    return dict(_OPTIONAL_ENV_VARS)


def has_valid_environment_config(environ: Mapping[str, str] | None = None) -> bool:
    """Return True if ``config_from_env`` would succeed."""
    try:
        config_from_env(environ)
    except ConfigurationError as exc:
        log.warning("Invalid environment configuration: %s", exc)
        return False
    return True
