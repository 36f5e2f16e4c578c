"""Test helpers (small, reusable doubles).

Keep this file tiny and purpose-built: it exists to prevent test suites from
growing lots of one-off transports and clients as coverage expands.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
import json
from typing import Any

import httpx

from chatbridge.config import ProviderConfig
from chatbridge.credentials import Credential

NOW = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)


def candidate_body(text: str) -> dict[str, Any]:
    """Minimal successful generateContent response."""
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


@dataclass
class ScriptedTransport:
    """httpx transport that records requests and replays scripted responses.

    Script items are ``(status, json_body)`` tuples, raw ``httpx.Response``
    objects, or exceptions to raise. An empty script answers 200 "ok".
    """

    script: list[Any] = field(default_factory=list)
    requests: list[httpx.Request] = field(default_factory=list)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self.script:
            return httpx.Response(200, json=candidate_body("ok"))
        item = self.script.pop(0)
        if isinstance(item, BaseException):
            raise item
        if isinstance(item, httpx.Response):
            return item
        status, body = item
        if isinstance(body, (bytes, str)):
            return httpx.Response(status, content=body)
        return httpx.Response(status, json=body)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))

    @property
    def last_json(self) -> Any:
        return json.loads(self.requests[-1].content)


@dataclass
class FakeClient:
    """ProviderClient double for selector and chat tests."""

    config: ProviderConfig
    name: str = "Fake"
    replies: list[Any] = field(default_factory=list)
    valid: bool = True
    prompts: list[str] = field(default_factory=list)

    async def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if not self.replies:
            return f"echo:{prompt}"
        item = self.replies.pop(0)
        if isinstance(item, BaseException):
            raise item
        return item

    async def validate_configuration(self) -> bool:
        return self.valid


@dataclass
class FakeClock:
    """Settable clock for credential freshness tests."""

    now: datetime = NOW

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **delta: float) -> None:
        self.now = self.now + timedelta(**delta)


@dataclass
class CountingExchanger:
    """Token exchanger that issues numbered tokens valid for *lifetime*."""

    clock: FakeClock
    lifetime: timedelta = timedelta(hours=1)
    calls: int = 0
    error: BaseException | None = None

    async def __call__(self, info: dict[str, Any]) -> Credential:
        del info
        self.calls += 1
        if self.error is not None:
            raise self.error
        return Credential(
            token=f"token-{self.calls}", expiry=self.clock() + self.lifetime
        )
