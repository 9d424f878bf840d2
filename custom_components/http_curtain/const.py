from httpcurtain.const import (  # noqa: F401
    CONF_GET_CURRENT_POS_REGEX,
    CONF_GET_CURRENT_POS_URL,
    CONF_GET_POSITION_STATE_URL,
    CONF_GET_TARGET_POS_REGEX,
    CONF_GET_TARGET_POS_URL,
    CONF_IDENTIFY_URL,
    CONF_INVERT_POSITION,
    CONF_NAME,
    CONF_NOTIFICATION_ID,
    CONF_NOTIFICATION_PASSWORD,
    CONF_POLL_INTERVAL,
    CONF_SET_TARGET_POS_URL,
    CONF_TIMEOUT,
    DEFAULT_NAME,
    DEFAULT_TIMEOUT_SECONDS,
)

DOMAIN = "http_curtain"

PLATFORMS = ["cover"]

# Flat config flow fields for the set-target request
CONF_SET_TARGET_POS_METHOD = "set_target_pos_method"
CONF_SET_TARGET_POS_BODY = "set_target_pos_body"

SERVICE_IDENTIFY = "identify"

MANUFACTURER = "HTTP Curtain"
MODEL = "http_curtain"
