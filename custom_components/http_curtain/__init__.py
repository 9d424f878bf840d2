from __future__ import annotations

import logging

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.helpers.aiohttp_client import async_get_clientsession

from httpcurtain import ConfigurationError, CurtainConfig, CurtainSyncEngine, HttpCurtainApi

from .config_flow import entry_to_config
from .const import DOMAIN, PLATFORMS
from .webhook import WebhookPushSource

_LOGGER = logging.getLogger(__name__)


async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    try:
        config = CurtainConfig.from_dict(entry_to_config(entry.data))
    except ConfigurationError as e:
        _LOGGER.error("Aborting setup of '%s': %s", entry.title, e)
        return False

    api = HttpCurtainApi(async_get_clientsession(hass), timeout=config.timeout)
    engine = CurtainSyncEngine(config)
    engine.activate(api, WebhookPushSource(hass, config.name))

    hass.data.setdefault(DOMAIN, {})[entry.entry_id] = {"engine": engine}
    await hass.config_entries.async_forward_entry_setups(entry, PLATFORMS)
    entry.async_on_unload(entry.add_update_listener(async_reload_entry))
    return True


async def async_unload_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    unload_ok = await hass.config_entries.async_unload_platforms(entry, PLATFORMS)
    if unload_ok:
        data = hass.data[DOMAIN].pop(entry.entry_id, None)
        if data:
            data["engine"].deactivate()
    return unload_ok


async def async_reload_entry(hass: HomeAssistant, entry: ConfigEntry) -> None:
    await hass.config_entries.async_reload(entry.entry_id)
