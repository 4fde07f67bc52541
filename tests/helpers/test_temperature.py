"""Tests for the temperature helpers."""

import pytest

from custom_components.lennox_s40.const import SetpointSide
from custom_components.lennox_s40.helpers.temperature import (
    celsius_to_fahrenheit,
    enforce_deadband,
    fahrenheit_to_celsius,
)


@pytest.mark.parametrize(
    ("fahrenheit", "celsius"),
    [(32, 0.0), (68, 20.0), (70, 21.0), (71, 21.5), (73, 23.0), (74, 23.5), (212, 100.0), (-40, -40.0)],
)
def test_fahrenheit_to_celsius(fahrenheit: int, celsius: float):
    """Test that °F are converted to °C with a resolution of 0.5 °C."""

    assert fahrenheit_to_celsius(fahrenheit) == celsius


@pytest.mark.parametrize(
    ("celsius", "fahrenheit"),
    [(0, 32), (20, 68), (21, 70), (21.5, 71), (22.5, 73), (23.5, 74), (4.5, 40), (37, 99)],
)
def test_celsius_to_fahrenheit(celsius: float, fahrenheit: int):
    """Test that °C are converted to whole °F."""

    assert celsius_to_fahrenheit(celsius) == fahrenheit


def test_celsius_to_fahrenheit_rounds_halves_up():
    """Test that a conversion that ends at exactly .5 °F rounds up, not to the nearest even number."""

    # 22.5 °C == 72.5 °F
    assert celsius_to_fahrenheit(22.5) == 73
    # 0.25 °C == 32.45 °F
    assert celsius_to_fahrenheit(0.25) == 32


def test_enforce_deadband_keeps_compliant_setpoints():
    """Test that setpoints that are far enough apart are not changed."""

    assert enforce_deadband(68, 74) == (68, 74)
    assert enforce_deadband(68, 71, anchor=SetpointSide.COOL) == (68, 71)


def test_enforce_deadband_moves_the_other_setpoint():
    """Test that the setpoint on the anchor side is kept and the other one is moved."""

    assert enforce_deadband(72, 73, anchor=SetpointSide.HEAT) == (72, 75)
    assert enforce_deadband(72, 73, anchor=SetpointSide.COOL) == (70, 73)
    assert enforce_deadband(80, 70, anchor=SetpointSide.HEAT) == (80, 83)
    assert enforce_deadband(80, 70, anchor=SetpointSide.COOL) == (67, 70)


@pytest.mark.parametrize("anchor", list(SetpointSide))
def test_enforce_deadband_invariant(anchor: SetpointSide):
    """Test that for all setpoints, the gap is respected and the anchored setpoint is unchanged."""

    for heat in range(40, 91):
        for cool in range(60, 100):
            new_heat, new_cool = enforce_deadband(heat, cool, anchor=anchor)

            assert new_cool - new_heat >= 3
            if cool - heat >= 3:
                assert (new_heat, new_cool) == (heat, cool)
            elif anchor == SetpointSide.HEAT:
                assert new_heat == heat
            else:
                assert new_cool == cool
