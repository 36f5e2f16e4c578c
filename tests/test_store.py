from __future__ import annotations

import json

import pytest

from chatbridge.config import ProviderConfig
from chatbridge.errors import ConfigurationError
from chatbridge.store import CONFIG_KEY, JsonSettingsStore, default_settings_path

pytestmark = pytest.mark.unit


def test_missing_file_loads_none(tmp_path) -> None:
    store = JsonSettingsStore(tmp_path / "settings.json")
    assert store.load() is None
    assert store.has_config() is False


def test_save_then_load(tmp_path, vertex_key_config: ProviderConfig) -> None:
    path = tmp_path / "nested" / "settings.json"
    store = JsonSettingsStore(path)

    store.save(vertex_key_config)

    assert store.has_config() is True
    assert store.load() == vertex_key_config
    assert json.loads(path.read_text())[CONFIG_KEY]["provider"] == "vertex_ai"


@pytest.mark.parametrize(
    "content",
    [
        "{not json",
        "[]",
        json.dumps({CONFIG_KEY: "just a string"}),
        json.dumps({CONFIG_KEY: {"max_output_tokens": -1}}),
    ],
)
def test_corrupt_settings_load_none(tmp_path, content: str) -> None:
    path = tmp_path / "settings.json"
    path.write_text(content)
    assert JsonSettingsStore(path).load() is None


def test_clear_keeps_other_keys(tmp_path, gemini_config: ProviderConfig) -> None:
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"theme": "dark"}))
    store = JsonSettingsStore(path)

    store.save(gemini_config)
    store.clear()

    assert store.load() is None
    assert json.loads(path.read_text()) == {"theme": "dark"}


def test_clear_without_file_is_noop(tmp_path) -> None:
    store = JsonSettingsStore(tmp_path / "settings.json")
    store.clear()
    assert not store.path.exists()


def test_save_failure_raises_configuration_error(
    tmp_path, gemini_config: ProviderConfig
) -> None:
    blocker = tmp_path / "file"
    blocker.write_text("")
    store = JsonSettingsStore(blocker / "settings.json")

    with pytest.raises(ConfigurationError, match="Failed to save"):
        store.save(gemini_config)


def test_default_path_honours_env(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    monkeypatch.setenv("CHATBRIDGE_SETTINGS_PATH", str(tmp_path / "s.json"))
    assert default_settings_path() == tmp_path / "s.json"
    assert JsonSettingsStore().path == tmp_path / "s.json"
