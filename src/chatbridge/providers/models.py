"""Domain models for the provider transport layer."""

from __future__ import annotations

from dataclasses import dataclass, field
import json
from typing import Any


@dataclass(frozen=True)
class ProviderRequest:
    """A fully built generateContent call: where to POST and what to send."""

    url: str
    body: dict[str, Any]
    headers: dict[str, str] = field(default_factory=dict)

    @property
    def content(self) -> bytes:
        """Serialized body; identical bodies always produce identical bytes."""
        return json.dumps(self.body, separators=(",", ":"), ensure_ascii=False).encode(
            "utf-8"
        )

    def __str__(self) -> str:
        # The URL may carry ?key=...; never print it whole.
        base = self.url.split("?", 1)[0]
        return f"ProviderRequest(url={base!r}, headers={sorted(self.headers)!r})"

    __repr__ = __str__
