from __future__ import annotations

from enum import IntEnum

DEFAULT_NAME = "HTTP Curtain"
DEFAULT_TIMEOUT_SECONDS = 8.0

# Substituted with the target position in set-target URLs and bodies
PLACEHOLDER = "%d"

CONF_NAME = "name"
CONF_GET_CURRENT_POS_URL = "get_current_pos_url"
CONF_SET_TARGET_POS_URL = "set_target_pos_url"
CONF_GET_POSITION_STATE_URL = "get_position_state_url"
CONF_GET_TARGET_POS_URL = "get_target_pos_url"
CONF_IDENTIFY_URL = "identify_url"
CONF_GET_CURRENT_POS_REGEX = "get_current_pos_regex"
CONF_GET_TARGET_POS_REGEX = "get_target_pos_regex"
CONF_INVERT_POSITION = "invert_position"
CONF_POLL_INTERVAL = "poll_interval"
CONF_TIMEOUT = "timeout"
CONF_NOTIFICATION_ID = "notification_id"
CONF_NOTIFICATION_PASSWORD = "notification_password"

CONF_URL = "url"
CONF_METHOD = "method"
CONF_BODY = "body"
CONF_HEADERS = "headers"

HTTP_METHODS = ("GET", "POST", "PUT", "PATCH", "DELETE", "HEAD")

# Notification characteristic tags
CHAR_CURRENT_POSITION = "CurrentPosition"
CHAR_POSITION_STATE = "PositionState"
CHAR_TARGET_POSITION = "TargetPosition"


class PositionState(IntEnum):
    # HomeKit codes
    DECREASING = 0
    INCREASING = 1
    STOPPED = 2
