"""Tests for the Home Assistant webhook push source."""

import json

import pytest

pytest.importorskip("homeassistant")

from httpcurtain import RegistrationConflict  # noqa: E402

from custom_components.http_curtain import webhook as webhook_module  # noqa: E402
from custom_components.http_curtain.webhook import WebhookPushSource  # noqa: E402


class _WebhookRegistry:
    """Stands in for homeassistant.components.webhook; keeps its duplicate check."""

    def __init__(self):
        self.handlers = {}

    def async_register(self, hass, domain, name, webhook_id, handler):
        if webhook_id in self.handlers:
            raise ValueError("Handler is already defined!")
        self.handlers[webhook_id] = handler

    def async_unregister(self, hass, webhook_id):
        self.handlers.pop(webhook_id, None)


class _Request:
    def __init__(self, body: str, headers=None):
        self._body = body
        self.headers = headers or {}

    async def json(self):
        return json.loads(self._body)


@pytest.fixture
def registry(monkeypatch) -> _WebhookRegistry:
    registry = _WebhookRegistry()
    monkeypatch.setattr(webhook_module, "webhook", registry)
    return registry


def _make_source(registry, secret=None):
    received = []
    source = WebhookPushSource(hass=object(), name="Living room")
    source.register("curtain-1", received.append, secret)
    return source, registry.handlers["curtain-1"], received


class TestWebhookPushSource:
    @pytest.mark.asyncio
    async def test_message_is_delivered(self, registry):
        _, handle, received = _make_source(registry)
        body = '{"characteristic": "CurrentPosition", "value": 40}'

        resp = await handle(None, "curtain-1", _Request(body))

        assert resp.status == 200
        assert received == [{"characteristic": "CurrentPosition", "value": 40}]

    @pytest.mark.asyncio
    async def test_wrong_password_is_rejected(self, registry):
        _, handle, received = _make_source(registry, secret="secret")
        body = '{"characteristic": "CurrentPosition", "value": 40, "password": "guess"}'

        resp = await handle(None, "curtain-1", _Request(body))

        assert resp.status == 401
        assert received == []

    @pytest.mark.asyncio
    async def test_password_in_body_or_header(self, registry):
        _, handle, received = _make_source(registry, secret="secret")

        resp = await handle(None, "curtain-1", _Request('{"characteristic": "PositionState", "value": 2, "password": "secret"}'))
        assert resp.status == 200
        resp = await handle(None, "curtain-1", _Request('{"characteristic": "PositionState", "value": 0}', {"X-Password": "secret"}))
        assert resp.status == 200
        assert len(received) == 2

    @pytest.mark.asyncio
    async def test_missing_password_is_rejected(self, registry):
        _, handle, received = _make_source(registry, secret="secret")
        resp = await handle(None, "curtain-1", _Request('{"characteristic": "CurrentPosition", "value": 1}'))
        assert resp.status == 401
        assert received == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", ["[1, 2]", "not json"])
    async def test_non_object_body_is_rejected(self, registry, body):
        _, handle, received = _make_source(registry)
        resp = await handle(None, "curtain-1", _Request(body))
        assert resp.status == 400
        assert received == []

    def test_duplicate_id_raises_conflict(self, registry):
        _make_source(registry)
        other = WebhookPushSource(hass=object(), name="Bedroom")
        with pytest.raises(RegistrationConflict):
            other.register("curtain-1", lambda message: None, None)

    def test_unregister(self, registry):
        source, _, _ = _make_source(registry)
        source.unregister("curtain-1")
        source.unregister("curtain-1")
        assert registry.handlers == {}
