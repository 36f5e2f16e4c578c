"""Provider protocol: minimal interface for chat providers."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from chatbridge.config import ProviderConfig


@runtime_checkable
class ProviderClient(Protocol):
    """Minimal provider protocol: generate, validate, and a display name."""

    @property
    def config(self) -> ProviderConfig:
        """The configuration this client was built from."""
        ...

    @property
    def name(self) -> str:
        """Human-readable provider label."""
        ...

    async def generate(self, prompt: str) -> str:
        """Send *prompt* and return the first candidate's text."""
        ...

    async def validate_configuration(self) -> bool:
        """Return True if a minimal probe call succeeds."""
        ...
