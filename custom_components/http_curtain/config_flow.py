from __future__ import annotations

import dataclasses
from typing import Any, Mapping

import voluptuous as vol

from homeassistant import config_entries
from homeassistant.core import HomeAssistant
from homeassistant.helpers.aiohttp_client import async_get_clientsession

from httpcurtain import (
    ConfigurationError,
    CurtainConfig,
    CurtainSyncEngine,
    HttpCurtainApi,
    InvalidResponseError,
    TransportError,
)

from .const import (
    DOMAIN,
    CONF_NAME,
    DEFAULT_NAME,
    CONF_GET_CURRENT_POS_URL,
    CONF_GET_CURRENT_POS_REGEX,
    CONF_SET_TARGET_POS_URL,
    CONF_SET_TARGET_POS_METHOD,
    CONF_SET_TARGET_POS_BODY,
    CONF_GET_POSITION_STATE_URL,
    CONF_GET_TARGET_POS_URL,
    CONF_GET_TARGET_POS_REGEX,
    CONF_IDENTIFY_URL,
    CONF_INVERT_POSITION,
    CONF_POLL_INTERVAL,
    CONF_TIMEOUT,
    DEFAULT_TIMEOUT_SECONDS,
    CONF_NOTIFICATION_ID,
    CONF_NOTIFICATION_PASSWORD,
)


def entry_to_config(data: Mapping[str, Any]) -> dict[str, Any]:
    """Fold the flat form fields into the library's configuration layout."""
    config = {
        k: v
        for k, v in data.items()
        if k not in (CONF_SET_TARGET_POS_METHOD, CONF_SET_TARGET_POS_BODY) and v not in ("", None)
    }
    if data.get(CONF_SET_TARGET_POS_URL):
        config[CONF_SET_TARGET_POS_URL] = {
            "url": data[CONF_SET_TARGET_POS_URL],
            "method": data.get(CONF_SET_TARGET_POS_METHOD) or "GET",
            "body": data.get(CONF_SET_TARGET_POS_BODY) or "",
        }
    return config


async def _validate(hass: HomeAssistant, data: Mapping[str, Any]) -> dict:
    config = CurtainConfig.from_dict(entry_to_config(data))
    # one-off read, no polling or notifications
    engine = CurtainSyncEngine(dataclasses.replace(config, poll_interval=None, notification_id=None))
    engine.activate(HttpCurtainApi(async_get_clientsession(hass), timeout=config.timeout))
    try:
        await engine.async_get_current_position()
    finally:
        engine.deactivate()
    return {
        "title": config.name,
        "unique_id": config.get_current_position.url,
    }


class HttpCurtainConfigFlow(config_entries.ConfigFlow, domain=DOMAIN):
    VERSION = 1

    async def async_step_user(self, user_input=None):
        errors = {}

        if user_input is not None:
            try:
                result = await _validate(self.hass, user_input)
            except ConfigurationError:
                errors["base"] = "invalid_config"
            except TransportError:
                errors["base"] = "cannot_connect"
            except InvalidResponseError:
                errors["base"] = "invalid_response"
            except Exception:
                errors["base"] = "unknown"
            else:
                await self.async_set_unique_id(result["unique_id"])
                self._abort_if_unique_id_configured()

                return self.async_create_entry(
                    title=result["title"],
                    data=user_input,
                )

        schema = vol.Schema(
            {
                vol.Required(CONF_NAME, default=DEFAULT_NAME): str,
                vol.Required(CONF_GET_CURRENT_POS_URL): str,
                vol.Optional(CONF_GET_CURRENT_POS_REGEX, default=""): str,
                vol.Required(CONF_SET_TARGET_POS_URL): str,
                vol.Optional(CONF_SET_TARGET_POS_METHOD, default="GET"): vol.In(
                    ["GET", "POST", "PUT", "PATCH"]
                ),
                vol.Optional(CONF_SET_TARGET_POS_BODY, default=""): str,
                vol.Optional(CONF_GET_POSITION_STATE_URL, default=""): str,
                vol.Optional(CONF_GET_TARGET_POS_URL, default=""): str,
                vol.Optional(CONF_GET_TARGET_POS_REGEX, default=""): str,
                vol.Optional(CONF_IDENTIFY_URL, default=""): str,
                vol.Optional(CONF_INVERT_POSITION, default=False): bool,
                vol.Optional(CONF_POLL_INTERVAL): vol.Coerce(float),
                vol.Optional(CONF_TIMEOUT, default=DEFAULT_TIMEOUT_SECONDS): vol.Coerce(float),
                vol.Optional(CONF_NOTIFICATION_ID, default=""): str,
                vol.Optional(CONF_NOTIFICATION_PASSWORD, default=""): str,
            }
        )

        return self.async_show_form(step_id="user", data_schema=schema, errors=errors)
