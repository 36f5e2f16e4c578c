"""Pytest configuration and fixtures.

Provides environment isolation, logging configuration, marker handling,
and automatic API test skipping. Fixtures here are autouse unless noted.
"""

from __future__ import annotations

from contextlib import suppress
import logging
import os

import pytest

from chatbridge.config import AuthMode, Provider, ProviderConfig

# =============================================================================
# Shared configs
# =============================================================================

GEMINI_MODEL = "gemini-1.5-flash-latest"
VERTEX_MODEL = "gemini-1.5-flash"

_PROVIDER_ENV_PREFIXES = ("GEMINI_", "VERTEX_", "CHATBRIDGE_")
_PROVIDER_ENV_KEYS = {"AI_PROVIDER", "TEMPERATURE", "MAX_OUTPUT_TOKENS"}


@pytest.fixture
def gemini_config() -> ProviderConfig:
    """A valid Gemini API config with a dummy key."""
    return ProviderConfig(
        provider=Provider.GEMINI_API,
        auth_mode=AuthMode.API_KEY,
        api_key="test-key",
        model=GEMINI_MODEL,
    )


@pytest.fixture
def vertex_key_config() -> ProviderConfig:
    """A valid Vertex AI config using API-key auth."""
    return ProviderConfig(
        provider=Provider.VERTEX_AI,
        auth_mode=AuthMode.API_KEY,
        api_key="vertex-key",
        project_id="demo-project",
        location="europe-west4",
        model=VERTEX_MODEL,
    )


@pytest.fixture
def vertex_sa_config(tmp_path) -> ProviderConfig:
    """A valid Vertex AI config pointing at a throwaway key file."""
    key_file = tmp_path / "key.json"
    key_file.write_text('{"type": "service_account", "client_email": "x@y"}')
    return ProviderConfig(
        provider=Provider.VERTEX_AI,
        auth_mode=AuthMode.SERVICE_ACCOUNT,
        service_account_path=str(key_file),
        project_id="demo-project",
        model=VERTEX_MODEL,
    )


# =============================================================================
# Environment Isolation (Autouse)
# =============================================================================


@pytest.fixture(autouse=True)
def block_dotenv(request, monkeypatch):
    """Prevent python-dotenv from loading project .env files during tests.

    Opt-out: @pytest.mark.allow_dotenv
    """
    if request.node.get_closest_marker("allow_dotenv"):
        return
    with suppress(Exception):
        monkeypatch.setattr(
            "dotenv.load_dotenv", lambda *_args, **_kwargs: False, raising=False
        )


@pytest.fixture(autouse=True)
def isolate_provider_env(request, monkeypatch, tmp_path):
    """Ensure a clean provider environment for each test.

    Clears provider variables and points the settings file into tmp_path.
    Opt-out: @pytest.mark.allow_env_pollution or @pytest.mark.api
    """
    if request.node.get_closest_marker("allow_env_pollution") or (
        "api" in request.node.keywords
    ):
        return

    for key in list(os.environ.keys()):
        if key.startswith(_PROVIDER_ENV_PREFIXES) or key in _PROVIDER_ENV_KEYS:
            monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("CHATBRIDGE_SETTINGS_PATH", str(tmp_path / "settings.json"))


# =============================================================================
# Logging
# =============================================================================


@pytest.fixture(scope="session", autouse=True)
def quiet_noisy_libraries():
    """Suppress noisy third-party loggers."""
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)


# =============================================================================
# Pytest Hooks
# =============================================================================

API_TESTS_REASON = "API tests require ENABLE_API_TESTS=1"


def _api_tests_enabled() -> bool:
    return bool(os.getenv("ENABLE_API_TESTS"))


def pytest_collection_modifyitems(items):
    """Automatically skip API tests when not explicitly enabled."""
    if _api_tests_enabled():
        return
    skip_api = pytest.mark.skip(reason=API_TESTS_REASON)
    for item in items:
        if "api" in item.keywords:
            item.add_marker(skip_api)


# =============================================================================
# API Test Configuration
# =============================================================================


@pytest.fixture
def gemini_api_key():
    """Return GEMINI_API_KEY or skip the test if unavailable."""
    key = os.getenv("GEMINI_API_KEY")
    if not key:
        pytest.skip("GEMINI_API_KEY not set")
    return key
