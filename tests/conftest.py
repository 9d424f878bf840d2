from __future__ import annotations

import asyncio
from typing import Any

import pytest

from httpcurtain import (
    CurtainConfig,
    CurtainSyncEngine,
    HttpEndpoint,
    HttpResponse,
    RegistrationConflict,
    TransportError,
)

CURRENT_URL = "http://device.local/position"
SET_URL = "http://device.local/set?pos=%d"
STATE_URL = "http://device.local/state"
TARGET_URL = "http://device.local/target"
IDENTIFY_URL = "http://device.local/identify"


class FakeTransport:
    """Answers requests from a url -> (status, body) table and records them."""

    def __init__(self, routes: dict[str, tuple[int, str] | Exception] | None = None) -> None:
        self.routes = dict(routes or {})
        self.requests: list[HttpEndpoint] = []
        self.gate: asyncio.Event | None = None

    async def request(self, endpoint: HttpEndpoint) -> HttpResponse:
        self.requests.append(endpoint)
        if self.gate is not None:
            await self.gate.wait()
        route = self.routes.get(endpoint.url, (404, "not found"))
        if isinstance(route, Exception):
            raise route
        status, body = route
        return HttpResponse(status=status, body=body)

    def urls(self) -> list[str]:
        return [e.url for e in self.requests]


class FakePushSource:
    def __init__(self, taken: set[str] | None = None) -> None:
        self.taken = set(taken or ())
        self.handlers: dict[str, Any] = {}
        self.secrets: dict[str, str | None] = {}
        self.unregistered: list[str] = []

    def register(self, identity, handler, secret) -> None:
        if identity in self.taken:
            raise RegistrationConflict(identity)
        self.handlers[identity] = handler
        self.secrets[identity] = secret

    def unregister(self, identity) -> None:
        self.unregistered.append(identity)
        self.handlers.pop(identity, None)


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport({CURRENT_URL: (200, "40"), SET_URL.replace("%d", "42"): (200, "")})


@pytest.fixture
def make_engine(transport):
    engines: list[CurtainSyncEngine] = []

    def _make(push_source=None, **overrides) -> CurtainSyncEngine:
        raw = {"name": "Living room", "get_current_pos_url": CURRENT_URL, "set_target_pos_url": SET_URL}
        raw.update(overrides)
        engine = CurtainSyncEngine(CurtainConfig.from_dict(raw))
        engine.activate(transport, push_source)
        engines.append(engine)
        return engine

    yield _make

    for engine in engines:
        engine.deactivate()


@pytest.fixture
def unreachable() -> TransportError:
    return TransportError("connection refused")
