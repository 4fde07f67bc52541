"""Temperature conversion and setpoint deadband helpers."""

import math

from custom_components.lennox_s40.const import DEADBAND_F, SetpointSide


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def fahrenheit_to_celsius(value: float) -> float:
    """Convert a temperature in °F to °C, rounded to the nearest 0.5 °C.

    Halves are rounded up, so 70 °F (21.11 °C) becomes 21.0 and 71 °F (21.67 °C) becomes 21.5.
    """

    return _round_half_up((value - 32) * 5 / 9 * 2) / 2


def celsius_to_fahrenheit(value: float) -> int:
    """Convert a temperature in °C to whole °F, rounding halves up."""

    return _round_half_up(value * 9 / 5 + 32)


def enforce_deadband(
    heat: int, cool: int, anchor: SetpointSide = SetpointSide.HEAT, deadband: int = DEADBAND_F
) -> tuple[int, int]:
    """Make sure the cool setpoint is at least `deadband` degrees above the heat setpoint.

    The setpoint on the `anchor` side is kept as is, the other one is moved away from it.

    Args:
        heat (int): The heat setpoint.
        cool (int): The cool setpoint.
        anchor (SetpointSide): The setpoint that was just changed and must not be modified.
        deadband (int): The minimum gap between both setpoints.

    Returns:
        tuple[int, int]: The `(heat, cool)` setpoints, with `cool - heat >= deadband`.

    """

    if cool - heat >= deadband:
        return heat, cool

    if anchor == SetpointSide.HEAT:
        return heat, heat + deadband

    return cool - deadband, cool
