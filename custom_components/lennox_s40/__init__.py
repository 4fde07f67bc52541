"""The Lennox S40 integration."""

import logging
from typing import TypedDict

from homeassistant.config_entries import (
    ConfigEntry,
    ConfigEntryError,
)
from homeassistant.const import Platform
from homeassistant.core import HomeAssistant

from custom_components.lennox_s40.api import LccApi
from custom_components.lennox_s40.const import (
    CONF_HOLD_SCHEDULE_BASE,
    CONF_SHARED_HOLD_SCHEDULE,
    CONF_ZONE_IDS,
    DEFAULT_HOLD_SCHEDULE_BASE,
    DEFAULT_ZONE_IDS,
)
from custom_components.lennox_s40.coordinator import LennoxUpdateCoordinator
from custom_components.lennox_s40.errors import ConfigurationError
from custom_components.lennox_s40.helpers import config_validation as lennox_cv
from custom_components.lennox_s40.helpers.validation import validate_entry_config
from custom_components.lennox_s40.services import register_services

PLATFORMS: list[Platform] = [
    Platform.CLIMATE,
    Platform.SENSOR,
]

_LOGGER = logging.getLogger(__name__)


class RuntimeData(TypedDict):
    """Describe the type of `ConfigEntry.runtime_data` in the lennox_s40 integration."""

    api: LccApi
    """The api instance to talk to the thermostat."""

    coordinator: LennoxUpdateCoordinator
    """The data update coordinator, which also owns the retrieval pump and the write buffers."""


type LennoxS40Config = ConfigEntry[RuntimeData]


async def async_setup_entry(hass: HomeAssistant, entry: LennoxS40Config) -> bool:
    """Set up Lennox S40 based on a config entry."""

    try:
        validate_entry_config(entry.data)
    except ConfigurationError as ex:
        _LOGGER.error("Not starting Lennox S40: %s", ex)
        raise ConfigEntryError(str(ex)) from ex

    api: LccApi = LccApi.create(hass, entry.data)
    coordinator = LennoxUpdateCoordinator(
        hass=hass,
        config_entry=entry,
        api=api,
        zone_ids=lennox_cv.zone_ids(entry.data.get(CONF_ZONE_IDS, DEFAULT_ZONE_IDS)),
        hold_schedule_base=entry.data.get(CONF_HOLD_SCHEDULE_BASE, DEFAULT_HOLD_SCHEDULE_BASE),
        shared_hold_schedule=entry.data.get(CONF_SHARED_HOLD_SCHEDULE, False),
    )

    # Opens both sessions and requests the initial state. Raises ConfigEntryNotReady
    # if the thermostat cannot be reached.
    await coordinator.async_config_entry_first_refresh()

    entry.runtime_data = RuntimeData(api=api, coordinator=coordinator)

    await hass.config_entries.async_forward_entry_setups(entry, PLATFORMS)

    # Start receiving telemetry once the entities are there to observe it.
    coordinator.async_start_pump()

    register_services(hass=hass)

    return True


async def async_unload_entry(hass: HomeAssistant, entry: LennoxS40Config) -> bool:
    """Unload the Lennox S40 configuration."""

    coordinator: LennoxUpdateCoordinator = entry.runtime_data["coordinator"]
    await coordinator.async_shutdown()

    return await hass.config_entries.async_unload_platforms(entry, PLATFORMS)
