"""Position sync for window coverings driven by plain HTTP requests."""

from .api import (
    HttpCurtainApi,
    HttpCurtainError,
    HttpEndpoint,
    HttpResponse,
    InvalidResponseError,
    PushSource,
    RegistrationConflict,
    Transport,
    TransportError,
)
from .config import CONFIG_SCHEMA, ConfigurationError, CurtainConfig
from .const import PositionState
from .coordinator import PollTimer
from .engine import CurtainState, CurtainSyncEngine
from .position import ParseFailure, PositionTransform, decode

__version__ = "0.1.0"

__all__ = [
    "CONFIG_SCHEMA",
    "ConfigurationError",
    "CurtainConfig",
    "CurtainState",
    "CurtainSyncEngine",
    "HttpCurtainApi",
    "HttpCurtainError",
    "HttpEndpoint",
    "HttpResponse",
    "InvalidResponseError",
    "ParseFailure",
    "PollTimer",
    "PositionState",
    "PositionTransform",
    "PushSource",
    "RegistrationConflict",
    "Transport",
    "TransportError",
    "decode",
]
