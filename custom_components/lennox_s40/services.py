"""Lennox S40 service calls."""

import logging

from homeassistant.config_entries import ConfigEntryState
from homeassistant.core import HomeAssistant, ServiceCall

from custom_components.lennox_s40.const import (
    ATTR_PATHS,
    DOMAIN,
    REQUEST_DATA_SERVICE_SCHEMA,
    SERVICE_REQUEST_DATA,
)
from custom_components.lennox_s40.coordinator import LennoxUpdateCoordinator
from custom_components.lennox_s40.errors import LennoxServiceException, TransportError

_LOGGER = logging.getLogger(__name__)


def register_services(hass: HomeAssistant) -> None:
    """Register all services of this integration.

    Services act on every loaded config entry, so they are registered only once.
    """

    if hass.services.has_service(DOMAIN, SERVICE_REQUEST_DATA):
        return

    async def async_request_data(call: ServiceCall) -> None:
        paths: list[str] = call.data[ATTR_PATHS]

        for entry in hass.config_entries.async_entries(DOMAIN):
            if entry.state is not ConfigEntryState.LOADED:
                continue

            coordinator: LennoxUpdateCoordinator = entry.runtime_data["coordinator"]
            _LOGGER.debug("Requesting %s from %s", paths, entry.title)
            try:
                await coordinator.async_request_data(paths)
            except TransportError as e:
                raise LennoxServiceException(
                    translation_domain=DOMAIN,
                    translation_key="request_data_failed",
                    translation_placeholders={"title": entry.title},
                ) from e

    hass.services.async_register(
        domain=DOMAIN,
        service=SERVICE_REQUEST_DATA,
        service_func=async_request_data,
        schema=REQUEST_DATA_SERVICE_SCHEMA,
    )
