"""Persisted provider settings.

The chat app keeps one serialized ProviderConfig under a fixed key. Here that
key lives in a small JSON document on disk; other backends can implement the
``SettingsStore`` protocol.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Protocol

from pydantic import ValidationError

from chatbridge.config import ProviderConfig
from chatbridge.errors import ConfigurationError

log = logging.getLogger(__name__)

CONFIG_KEY = "ai_service_config"
SETTINGS_PATH_ENV = "CHATBRIDGE_SETTINGS_PATH"


def default_settings_path() -> Path:
    """``$CHATBRIDGE_SETTINGS_PATH`` or ``~/.chatbridge/settings.json``."""
    override = os.environ.get(SETTINGS_PATH_ENV)
    if override:
        return Path(override).expanduser()
    return Path.home() / ".chatbridge" / "settings.json"


class SettingsStore(Protocol):
    """Get/set/clear of a single persisted ProviderConfig."""

    def load(self) -> ProviderConfig | None: ...

    def save(self, config: ProviderConfig) -> None: ...

    def clear(self) -> None: ...


class JsonSettingsStore:
    """SettingsStore backed by a JSON file."""

    def __init__(self, path: str | Path | None = None) -> None:
        self.path = Path(path) if path is not None else default_settings_path()

    def _read_document(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        data = json.loads(self.path.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError("settings document is not a JSON object")
        return data

    def has_config(self) -> bool:
        """Whether a config entry exists (it may still fail to parse)."""
        try:
            return CONFIG_KEY in self._read_document()
        except (OSError, ValueError):
            return False

    def load(self) -> ProviderConfig | None:
        """Return the saved config, or None if absent or unreadable."""
        try:
            entry = self._read_document().get(CONFIG_KEY)
            if entry is None:
                log.info("No saved configuration found")
                return None
            if not isinstance(entry, dict):
                raise ValueError("saved configuration is not a JSON object")
            config = ProviderConfig.from_dict(entry)
        except (OSError, ValueError, ValidationError) as e:
            log.warning("Failed to load configuration: %s", e)
            return None
        log.info("Configuration loaded: %s", config.provider.value)
        return config

    def save(self, config: ProviderConfig) -> None:
        """Persist *config*, replacing any previous entry.

        Raises:
            ConfigurationError: The settings file could not be written.
        """
        try:
            try:
                document = self._read_document()
            except ValueError:
                document = {}
            document[CONFIG_KEY] = config.to_dict()
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(document, indent=2), encoding="utf-8")
        except OSError as e:
            log.error("Failed to save configuration: %s", e)
            raise ConfigurationError(f"Failed to save configuration: {e}") from e
        log.info("Configuration saved: %s", config.provider.value)

    def clear(self) -> None:
        """Remove the saved config; other keys in the file are preserved."""
        try:
            document = self._read_document()
            if document.pop(CONFIG_KEY, None) is None:
                return
            self.path.write_text(json.dumps(document, indent=2), encoding="utf-8")
        except (OSError, ValueError) as e:
            log.warning("Failed to clear configuration: %s", e)
            return
        log.info("Configuration cleared")
