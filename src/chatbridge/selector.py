"""Provider selection with a single cached client.

The selector is the one piece of mutable state in the stack: it holds the
client built from the implicit configuration (persisted settings, then the
environment). Applications create one selector and pass it around; tests
create a fresh one per case.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from chatbridge.config import ProviderConfig, config_from_env
from chatbridge.errors import ConfigurationError, ServiceError
from chatbridge.providers import create_client

if TYPE_CHECKING:
    from collections.abc import Callable

    from chatbridge.providers.base import ProviderClient
    from chatbridge.store import SettingsStore

log = logging.getLogger(__name__)


class ServiceSelector:
    """Choose and cache the active ProviderClient."""

    def __init__(
        self,
        *,
        store: SettingsStore | None = None,
        env_loader: Callable[[], ProviderConfig] = config_from_env,
        client_factory: Callable[..., ProviderClient] = create_client,
        **client_kwargs: Any,
    ) -> None:
        self._store = store
        self._env_loader = env_loader
        self._client_factory = client_factory
        self._client_kwargs = client_kwargs
        self._cached: ProviderClient | None = None

    @property
    def cached(self) -> ProviderClient | None:
        """The cached implicit client, if one has been built."""
        return self._cached

    def resolve_config(self) -> ProviderConfig:
        """Resolve the implicit config: persisted settings, then environment.

        Raises:
            ConfigurationError: Nothing is saved and the environment is incomplete.
        """
        if self._store is not None:
            try:
                saved = self._store.load()
            except Exception as e:
                log.warning("Failed to load saved config, using environment: %s", e)
                saved = None
            if saved is not None:
                return saved
        return self._env_loader()

    def _build(self, config: ProviderConfig) -> ProviderClient:
        client = self._client_factory(config, **self._client_kwargs)
        log.info("Created %s service", client.name)
        return client

    def select(self, config: ProviderConfig | None = None) -> ProviderClient:
        """Return a client for *config*, or the cached implicit client.

        An explicit *config* always yields a new client and leaves the cache
        alone.
        """
        if config is not None:
            return self._build(config)
        if self._cached is None:
            self._cached = self._build(self.resolve_config())
        return self._cached

    async def select_and_validate(
        self, config: ProviderConfig | None = None
    ) -> ProviderClient:
        """Select a client and probe it.

        Raises:
            ServiceError: The probe failed.
        """
        client = self.select(config)
        log.info("Validating %s configuration...", client.name)
        if not await client.validate_configuration():
            raise ServiceError(
                f"Service configuration validation failed for {client.name}. "
                "Please check your authentication credentials and settings.",
                provider=client.name,
            )
        log.info("%s configuration validated successfully", client.name)
        return client

    def invalidate_cache(self) -> None:
        """Drop the cached client so the next ``select()`` re-resolves."""
        self._cached = None
        log.info("Service cache cleared")

    def save_config(self, config: ProviderConfig) -> None:
        """Persist *config* and invalidate the cache.

        Raises:
            ConfigurationError: No store is attached, or saving failed.
        """
        if self._store is None:
            raise ConfigurationError("No settings store configured")
        self._store.save(config)
        self.invalidate_cache()

    def clear_config(self) -> None:
        """Forget persisted settings and invalidate the cache."""
        if self._store is not None:
            self._store.clear()
        self.invalidate_cache()
