"""Zone models of the Lennox S40 API."""

import dataclasses
import logging
from typing import Any, Self

from pydantic.dataclasses import dataclass

from custom_components.lennox_s40.const import SetpointSide
from custom_components.lennox_s40.helpers.temperature import (
    celsius_to_fahrenheit,
    enforce_deadband,
    fahrenheit_to_celsius,
)

_LOGGER = logging.getLogger(__name__)


def _number(value: Any) -> float | None:
    if isinstance(value, bool) or not isinstance(value, int | float):
        return None

    return value


def _string(value: Any) -> str | None:
    return value if isinstance(value, str) else None


@dataclass(frozen=True)
class SetpointPair:
    """A heat and cool setpoint, in whole °F."""

    heat: int
    """Heat when the temperature drops below this setpoint."""

    cool: int
    """Cool when the temperature rises above this setpoint."""

    def with_deadband(self, anchor: SetpointSide = SetpointSide.HEAT) -> Self:
        """Return a pair that satisfies the deadband, keeping the setpoint on the `anchor` side."""

        heat, cool = enforce_deadband(self.heat, self.cool, anchor)
        if (heat, cool) == (self.heat, self.cool):
            return self

        _LOGGER.debug(
            "Setpoints %s/%s violate the deadband, adjusted to %s/%s", self.heat, self.cool, heat, cool
        )
        return type(self)(heat=heat, cool=cool)


@dataclass(frozen=True)
class ZoneStatus:
    """The status of a zone, as far as it has been reported by the thermostat.

    Telemetry is partial: every field is `None` until the thermostat has reported it.
    """

    temperature_f: float | None = None
    """Ambient temperature in °F"""

    temperature_c: float | None = None
    """Ambient temperature in °C"""

    humidity: int | None = None
    """Relative humidity in %, in the range [0, 100]"""

    heat_setpoint: int | None = None
    """Heat setpoint of the active period, in °F"""

    cool_setpoint: int | None = None
    """Cool setpoint of the active period, in °F"""

    system_mode: str | None = None
    """The system mode of the active period, see `SystemMode`."""

    temp_operation: str | None = None
    """What the equipment is currently doing, see `TempOperation`."""

    demand: float | None = None
    """Heating or cooling demand in %"""

    @classmethod
    def from_telemetry(cls, status: dict[str, Any]) -> Self:
        """Create a ZoneStatus from the `status` object of a zone in a retrieved message.

        Setpoints are reported either in °F (`hsp`, `csp`) or in °C (`hspC`, `cspC`), °F takes precedence.
        """

        period = status.get("period")
        if not isinstance(period, dict):
            period = {}

        humidity = _number(status.get("humidity"))

        return cls(
            temperature_f=_number(status.get("temperature")),
            temperature_c=_number(status.get("temperatureC")),
            humidity=None if humidity is None else min(100, max(0, round(humidity))),
            heat_setpoint=cls._setpoint(period, "hsp"),
            cool_setpoint=cls._setpoint(period, "csp"),
            system_mode=_string(period.get("systemMode")),
            temp_operation=_string(status.get("tempOperation")) or _string(status.get("op")),
            demand=_number(status.get("demand")),
        )

    @staticmethod
    def _setpoint(period: dict[str, Any], key: str) -> int | None:
        # °F is the unit the thermostat stores and the unit setpoints are written in.
        if (fahrenheit := _number(period.get(key))) is not None:
            return round(fahrenheit)

        if (celsius := _number(period.get(f"{key}C"))) is not None:
            return celsius_to_fahrenheit(celsius)

        return None

    def merged_with(self, update: "ZoneStatus") -> Self:
        """Return a copy of this status, overwritten with every field that is reported in `update`."""

        changes = {
            field.name: getattr(update, field.name)
            for field in dataclasses.fields(update)
            if getattr(update, field.name) is not None
        }

        return dataclasses.replace(self, **changes)

    @property
    def current_temperature(self) -> float | None:
        """Return the ambient temperature in °C."""

        if self.temperature_c is not None:
            return self.temperature_c

        if self.temperature_f is not None:
            return fahrenheit_to_celsius(self.temperature_f)

        return None

    @property
    def has_setpoints(self) -> bool:
        """Return whether this status carries at least one setpoint."""

        return self.heat_setpoint is not None or self.cool_setpoint is not None
