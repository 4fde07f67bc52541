"""Platform for sensor entities in the Lennox S40 integration."""

import logging
from collections.abc import Callable
from dataclasses import dataclass

from homeassistant.components.sensor import (
    SensorDeviceClass,
    SensorEntity,
    SensorEntityDescription,
    SensorStateClass,
)
from homeassistant.config_entries import ConfigEntry
from homeassistant.const import CONF_HOST, PERCENTAGE, UnitOfTemperature
from homeassistant.core import HomeAssistant
from homeassistant.helpers.entity_platform import AddEntitiesCallback
from homeassistant.helpers.update_coordinator import CoordinatorEntity

from custom_components.lennox_s40.api import ZoneStatus
from custom_components.lennox_s40.climate import zone_device_info
from custom_components.lennox_s40.coordinator import LennoxUpdateCoordinator

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, kw_only=True)
class ZoneSensorEntityDescription(SensorEntityDescription):
    """Describe a sensor that reads a value from the status of a zone."""

    value_fn: Callable[[ZoneStatus], float | int | None]


ZONE_SENSORS: tuple[ZoneSensorEntityDescription, ...] = (
    ZoneSensorEntityDescription(
        key="temperature",
        name="Temperature",
        device_class=SensorDeviceClass.TEMPERATURE,
        native_unit_of_measurement=UnitOfTemperature.CELSIUS,
        state_class=SensorStateClass.MEASUREMENT,
        value_fn=lambda status: status.current_temperature,
    ),
    ZoneSensorEntityDescription(
        key="humidity",
        name="Humidity",
        device_class=SensorDeviceClass.HUMIDITY,
        native_unit_of_measurement=PERCENTAGE,
        state_class=SensorStateClass.MEASUREMENT,
        value_fn=lambda status: status.humidity,
    ),
)


async def async_setup_entry(
    hass: HomeAssistant, entry: ConfigEntry, async_add_entities: AddEntitiesCallback
) -> None:
    """Create the sensor entities of every zone."""

    coordinator: LennoxUpdateCoordinator = entry.runtime_data["coordinator"]

    async_add_entities(
        [
            LennoxZoneSensorEntity(
                coordinator=coordinator,
                host=entry.data[CONF_HOST],
                zone_id=zone_id,
                description=description,
            )
            for zone_id in coordinator.zone_ids
            for description in ZONE_SENSORS
        ]
    )


class LennoxZoneSensorEntity(CoordinatorEntity, SensorEntity):
    """Sensor for a value that is reported in the status of a zone."""

    entity_description: ZoneSensorEntityDescription

    _attr_has_entity_name = True
    _attr_should_poll = False

    def __init__(
        self,
        coordinator: LennoxUpdateCoordinator,
        host: str,
        zone_id: int,
        description: ZoneSensorEntityDescription,
    ):
        """Create a new sensor entity."""

        super().__init__(coordinator=coordinator)

        self.entity_description = description
        self._zone_id = zone_id
        self._attr_unique_id = f"{host}_zone_{zone_id}_{description.key}"
        self._attr_device_info = zone_device_info(host, zone_id)

    @property
    def native_value(self) -> float | int | None:
        """Return the value of this sensor, or `None` if the thermostat has not reported it yet."""

        status: ZoneStatus | None = (self.coordinator.data or {}).get("zones", {}).get(self._zone_id)
        if status is None:
            return None

        return self.entity_description.value_fn(status)
