"""Platform for the climate entities of Lennox S40 zones."""

import logging
from typing import Any, Final

from homeassistant.components.climate import (
    ATTR_TARGET_TEMP_HIGH,
    ATTR_TARGET_TEMP_LOW,
    ClimateEntity,
    ClimateEntityFeature,
    HVACAction,
    HVACMode,
)
from homeassistant.config_entries import ConfigEntry
from homeassistant.const import CONF_HOST, PRECISION_HALVES, UnitOfTemperature
from homeassistant.core import HomeAssistant
from homeassistant.helpers.device_registry import DeviceInfo
from homeassistant.helpers.entity_platform import AddEntitiesCallback
from homeassistant.helpers.update_coordinator import CoordinatorEntity

from custom_components.lennox_s40.api import SetpointPair, ZoneStatus
from custom_components.lennox_s40.const import (
    COOL_SETPOINT_MAX_C,
    COOL_SETPOINT_MIN_C,
    DEFAULT_COOL_SETPOINT_F,
    DEFAULT_HEAT_SETPOINT_F,
    DEFAULT_TEMPERATURE_C,
    DEMAND_ACTIVE_THRESHOLD,
    DOMAIN,
    HEAT_SETPOINT_MAX_C,
    HEAT_SETPOINT_MIN_C,
    TEMPERATURE_STEP,
    SetpointSide,
    SystemMode,
    TempOperation,
)
from custom_components.lennox_s40.coordinator import LennoxUpdateCoordinator
from custom_components.lennox_s40.helpers.temperature import (
    celsius_to_fahrenheit,
    fahrenheit_to_celsius,
)

HVAC_MODE_TO_SYSTEM_MODE: Final[dict[HVACMode, SystemMode]] = {
    HVACMode.OFF: SystemMode.OFF,
    HVACMode.HEAT: SystemMode.HEAT,
    HVACMode.COOL: SystemMode.COOL,
    HVACMode.HEAT_COOL: SystemMode.HEAT_AND_COOL,
}

SYSTEM_MODE_TO_HVAC_MODE: Final[dict[str, HVACMode]] = {
    str(system_mode): hvac_mode for hvac_mode, system_mode in HVAC_MODE_TO_SYSTEM_MODE.items()
}

TEMP_OPERATION_TO_HVAC_ACTION: Final[dict[str, HVACAction]] = {
    TempOperation.OFF: HVACAction.IDLE,
    TempOperation.HEATING: HVACAction.HEATING,
    TempOperation.COOLING: HVACAction.COOLING,
}

_LOGGER = logging.getLogger(__name__)


async def async_setup_entry(
    hass: HomeAssistant, entry: ConfigEntry, async_add_entities: AddEntitiesCallback
) -> None:
    """Create a climate entity for every configured zone."""

    coordinator: LennoxUpdateCoordinator = entry.runtime_data["coordinator"]

    async_add_entities(
        [
            LennoxZoneClimate(coordinator=coordinator, host=entry.data[CONF_HOST], zone_id=zone_id)
            for zone_id in coordinator.zone_ids
        ]
    )


def zone_device_info(host: str, zone_id: int) -> DeviceInfo:
    """Return the device info of zone `zone_id` of the thermostat at `host`."""

    return DeviceInfo(
        identifiers={(DOMAIN, f"{host}_zone_{zone_id}")},
        manufacturer="Lennox",
        model="S40",
        name=f"Lennox S40 zone {zone_id}",
    )


class LennoxZoneClimate(CoordinatorEntity, ClimateEntity):
    """Climate entity for a single zone of a Lennox S40 thermostat.

    Setpoints are kept in whole °F, like the thermostat does, and shown in °C. Setpoint changes go
    through the write buffer of the zone; the entity shows them right away and corrects itself once
    the thermostat reports its actual setpoints.
    """

    _attr_has_entity_name = True
    _attr_name = None
    _attr_precision = PRECISION_HALVES
    _attr_should_poll: bool = False
    _attr_target_temperature_step: float = TEMPERATURE_STEP
    _attr_temperature_unit = UnitOfTemperature.CELSIUS
    _attr_min_temp = HEAT_SETPOINT_MIN_C
    _attr_max_temp = COOL_SETPOINT_MAX_C
    _attr_hvac_modes = list(HVAC_MODE_TO_SYSTEM_MODE)
    _attr_supported_features = (
        ClimateEntityFeature.TARGET_TEMPERATURE_RANGE
        | ClimateEntityFeature.TURN_OFF
        | ClimateEntityFeature.TURN_ON
    )

    def __init__(self, coordinator: LennoxUpdateCoordinator, host: str, zone_id: int):
        """Create a new climate entity."""
        super().__init__(coordinator)
        self.coordinator: LennoxUpdateCoordinator = coordinator
        self.zone_id: int = zone_id

        self._attr_unique_id = f"{host}_zone_{zone_id}"
        self._attr_device_info = zone_device_info(host, zone_id)

        self._heat_setpoint: int = DEFAULT_HEAT_SETPOINT_F
        self._cool_setpoint: int = DEFAULT_COOL_SETPOINT_F
        self._current_temperature: float = DEFAULT_TEMPERATURE_C
        self._current_humidity: int | None = None
        self._hvac_mode: HVACMode = HVACMode.HEAT_COOL
        self._hvac_action: HVACAction = HVACAction.IDLE

        _LOGGER.debug("Creating new Lennox S40 climate entity [%s]", self._attr_unique_id)

    async def async_added_to_hass(self) -> None:
        """Start observing the zone once added to Home Assistant."""

        await super().async_added_to_hass()
        self._update_from_status(self.coordinator.get_zone_status(self.zone_id))
        self.async_on_remove(self.coordinator.register_zone_observer(self.zone_id, self))

    def apply_zone_status(self, status: ZoneStatus) -> None:
        """Apply the status of the zone, as reported by the thermostat."""

        self._update_from_status(status)
        self.async_write_ha_state()

    def _update_from_status(self, status: ZoneStatus) -> None:
        if status.current_temperature is not None:
            self._current_temperature = status.current_temperature
        if status.humidity is not None:
            self._current_humidity = status.humidity
        if status.heat_setpoint is not None:
            self._heat_setpoint = status.heat_setpoint
        if status.cool_setpoint is not None:
            self._cool_setpoint = status.cool_setpoint
        if status.system_mode is not None:
            if status.system_mode in SYSTEM_MODE_TO_HVAC_MODE:
                self._hvac_mode = SYSTEM_MODE_TO_HVAC_MODE[status.system_mode]
            else:
                _LOGGER.debug(
                    "Zone %s reports unknown system mode '%s'", self.zone_id, status.system_mode
                )

        self._hvac_action = self._derive_hvac_action(status)

    def _derive_hvac_action(self, status: ZoneStatus) -> HVACAction:
        """Derive what the equipment is doing.

        The reported operation is used if there is one. Otherwise, a high demand combined with the
        ambient temperature being past a setpoint tells whether the zone heats or cools. If neither
        is conclusive, the previous action is kept.
        """

        if status.temp_operation in TEMP_OPERATION_TO_HVAC_ACTION:
            return TEMP_OPERATION_TO_HVAC_ACTION[status.temp_operation]

        if status.demand is not None and status.demand >= DEMAND_ACTIVE_THRESHOLD:
            if self._current_temperature >= fahrenheit_to_celsius(self._cool_setpoint):
                return HVACAction.COOLING
            if self._current_temperature <= fahrenheit_to_celsius(self._heat_setpoint):
                return HVACAction.HEATING

        return self._hvac_action

    @property
    def current_temperature(self) -> float | None:
        """Return the current zone temperature."""
        return self._current_temperature

    @property
    def current_humidity(self) -> float | None:
        """Return the current relative humidity."""
        return self._current_humidity

    @property
    def target_temperature_low(self) -> float | None:
        """Return the heat setpoint."""
        return fahrenheit_to_celsius(self._heat_setpoint)

    @property
    def target_temperature_high(self) -> float | None:
        """Return the cool setpoint."""
        return fahrenheit_to_celsius(self._cool_setpoint)

    @property
    def hvac_mode(self) -> HVACMode | None:
        """Return the current HVAC mode."""
        return self._hvac_mode

    @property
    def hvac_action(self) -> HVACAction | None:
        """Return the current HVAC action."""
        return self._hvac_action

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        """Return the zone id and the hold schedule that setpoint changes are written to."""

        return {
            "zone_id": self.zone_id,
            "hold_schedule_id": self.coordinator.hold_schedules.get(self.zone_id),
        }

    async def async_set_temperature(self, **kwargs) -> None:
        """Set new heat and/or cool setpoints.

        Only setpoints that actually changed are converted from °C; the other one keeps its exact °F
        value. If the new setpoints are too close together, the setpoint that was not changed gives way.
        """

        heat = self._heat_setpoint
        cool = self._cool_setpoint
        if (low := kwargs.get(ATTR_TARGET_TEMP_LOW)) is not None:
            heat = celsius_to_fahrenheit(
                min(HEAT_SETPOINT_MAX_C, max(HEAT_SETPOINT_MIN_C, float(low)))
            )
        if (high := kwargs.get(ATTR_TARGET_TEMP_HIGH)) is not None:
            cool = celsius_to_fahrenheit(
                min(COOL_SETPOINT_MAX_C, max(COOL_SETPOINT_MIN_C, float(high)))
            )

        heat_changed = heat != self._heat_setpoint
        cool_changed = cool != self._cool_setpoint
        anchor = SetpointSide.COOL if cool_changed and not heat_changed else SetpointSide.HEAT

        pair = self.coordinator.request_setpoint_change(
            self.zone_id, SetpointPair(heat=heat, cool=cool).with_deadband(anchor)
        )
        self._heat_setpoint = pair.heat
        self._cool_setpoint = pair.cool

        self.async_write_ha_state()

    async def async_set_hvac_mode(self, hvac_mode: HVACMode) -> None:
        """Set the new HVAC mode."""

        await self.coordinator.async_set_zone_mode(self.zone_id, HVAC_MODE_TO_SYSTEM_MODE[hvac_mode])
        self._hvac_mode = hvac_mode

        self.async_write_ha_state()
