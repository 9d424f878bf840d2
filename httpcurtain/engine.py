from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Callable, Mapping

from .api import (
    HttpEndpoint,
    HttpResponse,
    InvalidResponseError,
    PushSource,
    RegistrationConflict,
    Transport,
    TransportError,
)
from .config import CurtainConfig
from .const import (
    CHAR_CURRENT_POSITION,
    CHAR_POSITION_STATE,
    CHAR_TARGET_POSITION,
    PositionState,
)
from .coordinator import PollTimer
from .position import ParseFailure, PositionTransform, decode

_LOGGER = logging.getLogger(__name__)

StateListener = Callable[[], None]


@dataclass
class CurtainState:
    current_position: int | None = None
    position_state: PositionState | None = None
    target_position: int = 0

    def __post_init__(self) -> None:
        self._listeners: list[StateListener] = []

    def add_listener(self, listener: StateListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    def update(self, **changes: Any) -> None:
        changed = False
        for key, value in changes.items():
            if getattr(self, key) != value:
                setattr(self, key, value)
                changed = True
        if changed:
            for listener in list(self._listeners):
                listener()


def _position_state(value: Any) -> PositionState:
    try:
        return PositionState(int(value))
    except (TypeError, ValueError) as e:
        raise InvalidResponseError(f"Unknown position state: {value!r}") from e


class CurtainSyncEngine:
    """Keeps a curtain's observable state in sync with its HTTP device.

    Two-phase setup: build it from a CurtainConfig, then activate() it with a
    transport and an optional push source. Every operation may run while
    others are in flight; the last write to the state wins.
    """

    def __init__(self, config: CurtainConfig) -> None:
        self.config = config
        self.name = config.name
        self.state = CurtainState()
        self.transform = PositionTransform(config.invert_position)
        self._transport: Transport | None = None
        self._push_source: PushSource | None = None
        self.poll_timer: PollTimer | None = None
        if config.poll_interval is not None:
            self.poll_timer = PollTimer(
                config.poll_interval,
                self.async_get_current_position,
                lambda value: self.state.update(current_position=value),
            )

    def activate(self, transport: Transport, push_source: PushSource | None = None) -> None:
        self._transport = transport
        if self.poll_timer is not None:
            self.poll_timer.start()

        if push_source is not None and self.config.notification_id:
            try:
                push_source.register(
                    self.config.notification_id,
                    self.handle_notification,
                    self.config.notification_password,
                )
            except RegistrationConflict:
                _LOGGER.debug("Notification id '%s' is already taken", self.config.notification_id)
            else:
                self._push_source = push_source

    def deactivate(self) -> None:
        if self.poll_timer is not None:
            self.poll_timer.stop()
        unregister = getattr(self._push_source, "unregister", None)
        if unregister is not None and self.config.notification_id:
            unregister(self.config.notification_id)
        self._push_source = None

    # ----- device I/O -----
    async def _request(self, endpoint: HttpEndpoint, operation: str) -> HttpResponse:
        if self._transport is None:
            raise TransportError(f"{operation}() called before activation")
        try:
            resp = await self._transport.request(endpoint)
        except TransportError as e:
            _LOGGER.error("%s() failed: %s", operation, e)
            raise
        if not resp.ok:
            _LOGGER.error("%s() returned http error: %s; body: %s", operation, resp.status, resp.body)
            raise TransportError(f"Got http error code {resp.status}", status=resp.status)
        return resp

    def _reset_poll(self) -> None:
        if self.poll_timer is not None:
            self.poll_timer.reset()

    def _decode_position(self, body: str, rule: re.Pattern[str] | None) -> int:
        value = decode(body, rule)
        if isinstance(value, ParseFailure):
            raise InvalidResponseError(f"No position in response body {value.body!r}: {value.reason}")
        return self.transform.to_internal(value)

    # ----- operations -----
    async def async_get_current_position(self) -> int:
        try:
            resp = await self._request(self.config.get_current_position, "getCurrentPosition")
        finally:
            self._reset_poll()
        position = self._decode_position(resp.body, self.config.current_position_rule)
        _LOGGER.info("Current position (retrieved via http): %s%%", position)
        self.state.update(current_position=position)
        return position

    async def async_get_position_state(self) -> PositionState:
        endpoint = self.config.get_position_state
        if endpoint is None:
            # Consumers compare current and target position instead
            _LOGGER.debug("Position state URL not configured, returning STOPPED")
            return PositionState.STOPPED

        try:
            resp = await self._request(endpoint, "getPositionState")
        finally:
            self._reset_poll()
        value = decode(resp.body)
        if isinstance(value, ParseFailure):
            raise InvalidResponseError(f"No position state in response body {value.body!r}")
        state = _position_state(value)
        _LOGGER.info("Position state: %s", state.name)
        self.state.update(position_state=state)
        return state

    async def async_set_target_position(self, value: int) -> None:
        # Cached before the request: the cache holds the desired target
        self.state.update(target_position=value)

        external = self.transform.to_external(value)
        endpoint = self.config.set_target_position.resolve(external)
        _LOGGER.info("Requesting: %s for value: %d", endpoint.url, external)
        await self._request(endpoint, "setTargetPosition")
        _LOGGER.debug("Successfully requested target position: %d%%", external)

    async def async_get_target_position(self) -> int:
        endpoint = self.config.get_target_position
        if endpoint is None:
            _LOGGER.info("Target position (retrieved from cache): %s%%", self.state.target_position)
            return self.state.target_position

        resp = await self._request(endpoint, "getTargetPosition")
        position = self._decode_position(resp.body, self.config.target_position_rule)
        _LOGGER.info("Target position (retrieved via http): %s%%", position)
        return position

    async def async_identify(self) -> None:
        _LOGGER.info("Identify requested")
        if self.config.identify is None:
            return
        await self._request(self.config.identify, "identify")

    # ----- notifications -----
    def handle_notification(self, message: Mapping[str, Any]) -> bool:
        return self.ingest(message.get("characteristic"), message.get("value"))

    def ingest(self, tag: str | None, value: Any) -> bool:
        """Apply a pushed value to the state; False when it was dropped.

        Pushed positions are taken as final and skip the inversion transform.
        """
        try:
            if tag == CHAR_CURRENT_POSITION:
                self.state.update(current_position=int(value))
                self._reset_poll()
            elif tag == CHAR_POSITION_STATE:
                self.state.update(position_state=_position_state(value))
            elif tag == CHAR_TARGET_POSITION:
                self.state.update(target_position=int(value))
            else:
                _LOGGER.warning("Encountered unknown characteristic handling notification: %s", tag)
                return False
        except (TypeError, ValueError, InvalidResponseError):
            _LOGGER.warning("Invalid value for %s in notification: %r", tag, value)
            return False

        _LOGGER.debug("Update received from device: %s: %s", tag, value)
        return True
