"""Constants for the Lennox S40 integration."""

from enum import Enum, StrEnum
from typing import Final

import voluptuous as vol
from homeassistant.helpers import config_validation as cv

DOMAIN: Final[str] = "lennox_s40"

# Versioning for the config flow.
HA_CONFIG_VERSION = 1
HA_CONFIG_MINOR_VERSION = 1

# Configuration keys. `CONF_HOST` is taken from homeassistant.const.
CONF_CLIENT_ID: Final[str] = "client_id"
CONF_VERIFY_TLS: Final[str] = "verify_tls"
CONF_LONG_POLL_SECONDS: Final[str] = "long_poll_seconds"
CONF_LOG_BODIES: Final[str] = "log_bodies"
CONF_ZONE_IDS: Final[str] = "zone_ids"
CONF_HOLD_SCHEDULE_BASE: Final[str] = "hold_schedule_base"
CONF_SHARED_HOLD_SCHEDULE: Final[str] = "shared_hold_schedule"

DEFAULT_CLIENT_ID: Final[str] = "homeassistant"
DEFAULT_VERIFY_TLS: Final[bool] = False
DEFAULT_LONG_POLL_SECONDS: Final[int] = 15
DEFAULT_LOG_BODIES: Final[bool] = False
DEFAULT_ZONE_IDS: Final[list[int]] = [0]
DEFAULT_HOLD_SCHEDULE_BASE: Final[int] = 32
"""The device keeps the temporary hold schedule of zone `n` at schedule `32 + n`."""

MAX_LONG_POLL_SECONDS: Final[int] = 60

# Transport
LCC_TARGET_ID: Final[str] = "LCC"
"""The target of every message published to the device."""

REQUEST_TIMEOUT_SECONDS: Final[int] = 30
LONG_POLL_TIMEOUT_MARGIN_SECONDS: Final[int] = 15
"""Added to the server side long poll timeout to get the client side timeout."""

RETRIEVE_MESSAGE_COUNT: Final[int] = 10
LOG_BODY_MAX_LENGTH: Final[int] = 500

TOPIC_ZONES: Final[str] = "zones"
TOPIC_SCHEDULES: Final[str] = "schedules"

STARTUP_DATA_PATHS: Final[list[str]] = ["/devices", "/equipments", "/zones"]
ZONE_DATA_PATHS: Final[list[str]] = ["/zones"]

# Setpoint write protocol
DEADBAND_F: Final[int] = 3
"""Minimum gap in °F between the heat and the cool setpoint."""

WRITE_DEBOUNCE_SECONDS: Final[float] = 0.35
SNAPSHOT_DELAY_SECONDS: Final[float] = 0.15
"""Wait between writing the hold period and arming the hold."""

HOLD_PERIOD_ID: Final[int] = 0

# Retrieval pump
BACKOFF_INITIAL_SECONDS: Final[float] = 2
BACKOFF_MAX_SECONDS: Final[float] = 60

# Setpoints used until the device reports its own.
DEFAULT_HEAT_SETPOINT_F: Final[int] = 70
DEFAULT_COOL_SETPOINT_F: Final[int] = 73
DEFAULT_TEMPERATURE_C: Final[float] = 21.0

HEAT_SETPOINT_MIN_C: Final[float] = 4.5
HEAT_SETPOINT_MAX_C: Final[float] = 32
COOL_SETPOINT_MIN_C: Final[float] = 15.5
COOL_SETPOINT_MAX_C: Final[float] = 37
TEMPERATURE_STEP: Final[float] = 0.5

DEMAND_ACTIVE_THRESHOLD: Final[float] = 5
"""Demand percentage from which the equipment is considered to be running."""

EVENT_DIAGNOSTIC: Final[str] = "lennox_s40_diagnostic"


class HoldArmMethod(StrEnum):
    """The alternative commands that arm a temporary hold, in the order they are attempted."""

    CONFIG_TOGGLE = "config_toggle"
    """Toggle `config.scheduleHold` of the zone."""

    COMMAND_DIRECTIVE = "command_directive"
    """Send a zone command carrying the hold and the setpoints."""

    STATUS_DIRECTIVE = "status_directive"
    """Set `status.scheduleHold` of the zone."""


class SetpointSide(StrEnum):
    """The setpoint that was changed by the user, and which wins when the deadband is violated."""

    HEAT = "heat"
    COOL = "cool"


class SystemMode(StrEnum):
    """Zone system modes as reported in `status.period.systemMode`."""

    OFF = "off"
    HEAT = "heat"
    COOL = "cool"
    HEAT_AND_COOL = "heat and cool"


class TempOperation(StrEnum):
    """Values of `status.tempOperation` that describe what the equipment is doing."""

    OFF = "off"
    HEATING = "heating"
    COOLING = "cooling"


class Limits(float, Enum):
    """Limits for the long poll duration."""

    LONG_POLL_MIN = 1
    LONG_POLL_MAX = MAX_LONG_POLL_SECONDS


# Services
SERVICE_REQUEST_DATA: Final[str] = "request_data"
ATTR_PATHS: Final[str] = "paths"

REQUEST_DATA_SERVICE_SCHEMA: vol.Schema = vol.Schema(
    {
        vol.Optional(ATTR_PATHS, default=STARTUP_DATA_PATHS): vol.All(
            cv.ensure_list, [vol.All(cv.string, vol.Match(r"^/"))], vol.Length(min=1)
        ),
    }
)
