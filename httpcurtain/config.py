from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Mapping

import voluptuous as vol

from .api import HttpCurtainError, HttpEndpoint
from .const import (
    CONF_BODY,
    CONF_GET_CURRENT_POS_REGEX,
    CONF_GET_CURRENT_POS_URL,
    CONF_GET_POSITION_STATE_URL,
    CONF_GET_TARGET_POS_REGEX,
    CONF_GET_TARGET_POS_URL,
    CONF_HEADERS,
    CONF_IDENTIFY_URL,
    CONF_INVERT_POSITION,
    CONF_METHOD,
    CONF_NAME,
    CONF_NOTIFICATION_ID,
    CONF_NOTIFICATION_PASSWORD,
    CONF_POLL_INTERVAL,
    CONF_SET_TARGET_POS_URL,
    CONF_TIMEOUT,
    CONF_URL,
    DEFAULT_NAME,
    DEFAULT_TIMEOUT_SECONDS,
    HTTP_METHODS,
)

_LOGGER = logging.getLogger(__name__)


class ConfigurationError(HttpCurtainError):
    """Raised when a device configuration is rejected."""


def _extraction_rule(value: Any) -> re.Pattern[str] | None:
    if value is None or value == "":
        return None
    try:
        pattern = re.compile(str(value))
    except re.error as e:
        raise vol.Invalid(f"invalid regular expression: {e}") from e
    if pattern.groups < 1:
        raise vol.Invalid("regular expression needs at least one capture group")
    return pattern


def _endpoint(value: Any) -> HttpEndpoint:
    if isinstance(value, str):
        value = {CONF_URL: value}
    data = ENDPOINT_SCHEMA(value)
    return HttpEndpoint(
        url=data[CONF_URL],
        method=data[CONF_METHOD],
        body=data[CONF_BODY] or "",
        headers=dict(data[CONF_HEADERS]),
    )


def _optional_endpoint(value: Any) -> HttpEndpoint | None:
    if value is None or value == "" or (isinstance(value, Mapping) and not value.get(CONF_URL)):
        return None
    return _endpoint(value)


def _poll_interval(value: Any) -> timedelta | None:
    if value is None or value == "":
        return None
    seconds = vol.All(vol.Coerce(float), vol.Range(min=0, min_included=False))(value)
    return timedelta(seconds=seconds)


ENDPOINT_SCHEMA = vol.Schema(
    {
        vol.Required(CONF_URL): vol.All(str, vol.Length(min=1)),
        vol.Optional(CONF_METHOD, default="GET"): vol.All(str, vol.Upper, vol.In(HTTP_METHODS)),
        vol.Optional(CONF_BODY, default=""): vol.Any(None, str),
        vol.Optional(CONF_HEADERS, default={}): {str: vol.Coerce(str)},
    }
)

CONFIG_SCHEMA = vol.Schema(
    {
        vol.Optional(CONF_NAME, default=DEFAULT_NAME): str,
        vol.Required(CONF_GET_CURRENT_POS_URL): _endpoint,
        vol.Required(CONF_SET_TARGET_POS_URL): _endpoint,
        vol.Optional(CONF_GET_POSITION_STATE_URL): _optional_endpoint,
        vol.Optional(CONF_GET_TARGET_POS_URL): _optional_endpoint,
        vol.Optional(CONF_IDENTIFY_URL): _optional_endpoint,
        vol.Optional(CONF_GET_CURRENT_POS_REGEX): _extraction_rule,
        vol.Optional(CONF_GET_TARGET_POS_REGEX): _extraction_rule,
        vol.Optional(CONF_INVERT_POSITION, default=False): vol.Boolean(),
        vol.Optional(CONF_POLL_INTERVAL): _poll_interval,
        vol.Optional(CONF_TIMEOUT, default=DEFAULT_TIMEOUT_SECONDS): vol.All(
            vol.Coerce(float), vol.Range(min=0, min_included=False)
        ),
        vol.Optional(CONF_NOTIFICATION_ID): vol.Any(None, str),
        vol.Optional(CONF_NOTIFICATION_PASSWORD): vol.Any(None, str),
    },
    extra=vol.REMOVE_EXTRA,
)


@dataclass(frozen=True)
class CurtainConfig:
    get_current_position: HttpEndpoint
    set_target_position: HttpEndpoint
    name: str = DEFAULT_NAME
    get_position_state: HttpEndpoint | None = None
    get_target_position: HttpEndpoint | None = None
    identify: HttpEndpoint | None = None
    current_position_rule: re.Pattern[str] | None = None
    target_position_rule: re.Pattern[str] | None = None
    invert_position: bool = False
    poll_interval: timedelta | None = None
    timeout: float = DEFAULT_TIMEOUT_SECONDS
    notification_id: str | None = None
    notification_password: str | None = None

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> CurtainConfig:
        try:
            data = CONFIG_SCHEMA(dict(raw))
        except vol.Invalid as e:
            name = raw.get(CONF_NAME, DEFAULT_NAME)
            _LOGGER.warning("Configuration of '%s' rejected: %s", name, e)
            raise ConfigurationError(str(e)) from e

        return cls(
            name=data[CONF_NAME],
            get_current_position=data[CONF_GET_CURRENT_POS_URL],
            set_target_position=data[CONF_SET_TARGET_POS_URL],
            get_position_state=data.get(CONF_GET_POSITION_STATE_URL),
            get_target_position=data.get(CONF_GET_TARGET_POS_URL),
            identify=data.get(CONF_IDENTIFY_URL),
            current_position_rule=data.get(CONF_GET_CURRENT_POS_REGEX),
            target_position_rule=data.get(CONF_GET_TARGET_POS_REGEX),
            invert_position=data[CONF_INVERT_POSITION],
            poll_interval=data.get(CONF_POLL_INTERVAL),
            timeout=data[CONF_TIMEOUT],
            notification_id=data.get(CONF_NOTIFICATION_ID) or None,
            notification_password=data.get(CONF_NOTIFICATION_PASSWORD) or None,
        )
