"""Test helpers (small, reusable doubles).

Keep this file tiny and purpose-built: scripted HTTP, fake token sources and
a controllable clock cover every collaborator the dispatcher touches.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import json
from typing import Any

import httpx

from geminiapp.cache import AccessToken

ScriptItem = int | httpx.Response | dict[str, Any] | Exception


@dataclass
class ScriptedTransport:
    """Replay a scripted sequence of responses and record every request.

    Items may be a bare status code (empty JSON body), a dict (200 with that
    JSON body), a full ``httpx.Response``, or an exception to raise.
    """

    script: list[ScriptItem] = field(default_factory=list)
    requests: list[httpx.Request] = field(default_factory=list)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self.script:
            return httpx.Response(200, json={})
        item = self.script.pop(0)
        if isinstance(item, Exception):
            raise item
        if isinstance(item, httpx.Response):
            return item
        if isinstance(item, dict):
            return httpx.Response(200, json=item)
        return httpx.Response(item, text=f"status {item}")

    def client(self) -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(self))

    @property
    def calls(self) -> int:
        return len(self.requests)

    def last_json(self) -> Any:
        return json.loads(self.requests[-1].content)


@dataclass
class FakeClock:
    """Monotonic-enough wall clock the test advances by hand."""

    now: float = 1_000_000.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@dataclass
class FakeExchanger:
    """TokenExchanger double returning numbered tokens."""

    expires_in: float | None = 3600.0
    clock: FakeClock = field(default_factory=FakeClock)
    error: Exception | None = None
    calls: int = 0
    last_scopes: tuple[str, ...] = ()

    def exchange(self, info: Any, scopes: Any) -> AccessToken:
        self.calls += 1
        self.last_scopes = tuple(scopes)
        if self.error is not None:
            raise self.error
        expires_at = None if self.expires_in is None else self.clock() + self.expires_in
        return AccessToken(token=f"sa-token-{self.calls}", expires_at=expires_at)


@dataclass
class FakeAmbientProvider:
    """AmbientTokenProvider double."""

    token_value: str = "ambient-token"
    error: Exception | None = None
    calls: int = 0

    def token(self, scopes: Any) -> AccessToken:
        del scopes
        self.calls += 1
        if self.error is not None:
            raise self.error
        return AccessToken(token=self.token_value, expires_at=9_999_999_999.0)
