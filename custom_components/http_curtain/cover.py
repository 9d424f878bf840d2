from __future__ import annotations

import logging
from typing import Any

from homeassistant.components.cover import ATTR_POSITION, CoverEntity, CoverEntityFeature
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.exceptions import HomeAssistantError
from homeassistant.helpers import entity_platform
from homeassistant.helpers.device_registry import DeviceInfo
from homeassistant.helpers.entity_platform import AddEntitiesCallback

from httpcurtain import CurtainSyncEngine, HttpCurtainError, PositionState

from .const import DOMAIN, MANUFACTURER, MODEL, SERVICE_IDENTIFY

_LOGGER = logging.getLogger(__name__)


async def async_setup_entry(
    hass: HomeAssistant, entry: ConfigEntry, async_add_entities: AddEntitiesCallback
) -> None:
    engine: CurtainSyncEngine = hass.data[DOMAIN][entry.entry_id]["engine"]
    async_add_entities([HttpCurtainCover(engine, entry.entry_id)], update_before_add=True)

    platform = entity_platform.async_get_current_platform()
    platform.async_register_entity_service(SERVICE_IDENTIFY, {}, "async_identify")


class HttpCurtainCover(CoverEntity):
    _attr_has_entity_name = True
    _attr_name = None
    _attr_supported_features = (
        CoverEntityFeature.OPEN | CoverEntityFeature.CLOSE | CoverEntityFeature.SET_POSITION
    )

    def __init__(self, engine: CurtainSyncEngine, entry_id: str) -> None:
        self.engine = engine
        self._attr_unique_id = f"{entry_id}_cover"
        # The engine's own timer refreshes state when polling is configured
        self._attr_should_poll = engine.poll_timer is None
        self._attr_device_info = DeviceInfo(
            identifiers={(DOMAIN, entry_id)},
            manufacturer=MANUFACTURER,
            model=MODEL,
            name=engine.name,
        )

    async def async_added_to_hass(self) -> None:
        self.async_on_remove(self.engine.state.add_listener(self.async_write_ha_state))

    @property
    def current_cover_position(self) -> int | None:
        return self.engine.state.current_position

    @property
    def is_closed(self) -> bool | None:
        pos = self.current_cover_position
        if pos is None:
            return None
        return pos <= 0

    @property
    def is_opening(self) -> bool:
        return self.engine.state.position_state == PositionState.INCREASING

    @property
    def is_closing(self) -> bool:
        return self.engine.state.position_state == PositionState.DECREASING

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        state = self.engine.state
        return {
            "target_position": state.target_position,
            "position_state": state.position_state.name if state.position_state is not None else None,
        }

    async def async_update(self) -> None:
        try:
            await self.engine.async_get_current_position()
            await self.engine.async_get_position_state()
        except HttpCurtainError as e:
            if self._attr_available:
                _LOGGER.warning("%s is unavailable: %s", self.engine.name, e)
            self._attr_available = False
            return
        self._attr_available = True

    async def _async_set_target(self, position: int) -> None:
        try:
            await self.engine.async_set_target_position(position)
        except HttpCurtainError as e:
            raise HomeAssistantError(f"Setting {self.engine.name} to {position}% failed: {e}") from e
        finally:
            self.async_write_ha_state()

    async def async_open_cover(self, **kwargs: Any) -> None:
        await self._async_set_target(100)

    async def async_close_cover(self, **kwargs: Any) -> None:
        await self._async_set_target(0)

    async def async_set_cover_position(self, **kwargs: Any) -> None:
        target = kwargs.get(ATTR_POSITION)
        if target is None:
            return
        await self._async_set_target(int(target))

    async def async_identify(self) -> None:
        try:
            await self.engine.async_identify()
        except HttpCurtainError as e:
            raise HomeAssistantError(f"Identify of {self.engine.name} failed: {e}") from e
