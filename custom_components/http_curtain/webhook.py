from __future__ import annotations

import hmac
import json
import logging
from typing import Any

from aiohttp import web

from homeassistant.components import webhook
from homeassistant.core import HomeAssistant

from httpcurtain import RegistrationConflict
from httpcurtain.api import NotificationHandler

from .const import DOMAIN

_LOGGER = logging.getLogger(__name__)


class WebhookPushSource:
    """Delivers pushed {characteristic, value} messages through a HA webhook."""

    def __init__(self, hass: HomeAssistant, name: str) -> None:
        self.hass = hass
        self._name = name
        self._secrets: dict[str, str | None] = {}

    def register(self, identity: str, handler: NotificationHandler, secret: str | None) -> None:
        async def _handle(hass: HomeAssistant, webhook_id: str, request: web.Request) -> web.Response:
            try:
                message: dict[str, Any] = await request.json()
            except (json.JSONDecodeError, UnicodeDecodeError):
                return web.Response(status=400, text="Invalid JSON")
            if not isinstance(message, dict):
                return web.Response(status=400, text="Expected a JSON object")

            expected = self._secrets.get(webhook_id)
            if expected is not None:
                given = str(message.get("password") or request.headers.get("X-Password") or "")
                if not hmac.compare_digest(given.encode(), expected.encode()):
                    _LOGGER.warning("Rejected notification for %s: wrong password", webhook_id)
                    return web.Response(status=401, text="Unauthorized")

            handler(message)
            return web.Response(status=200)

        try:
            webhook.async_register(self.hass, DOMAIN, self._name, identity, _handle)
        except ValueError as e:
            raise RegistrationConflict(f"Webhook id '{identity}' is already registered") from e
        self._secrets[identity] = secret

    def unregister(self, identity: str) -> None:
        if identity in self._secrets:
            del self._secrets[identity]
            webhook.async_unregister(self.hass, identity)
