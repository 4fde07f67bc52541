"""Config flow for the Lennox S40 integration."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

import voluptuous as vol
from homeassistant.config_entries import (
    ConfigEntry,
    ConfigFlow,
    ConfigFlowResult,
)
from homeassistant.const import CONF_HOST
from homeassistant.helpers import config_validation as cv

from custom_components.lennox_s40.const import (
    CONF_CLIENT_ID,
    CONF_HOLD_SCHEDULE_BASE,
    CONF_LOG_BODIES,
    CONF_LONG_POLL_SECONDS,
    CONF_SHARED_HOLD_SCHEDULE,
    CONF_VERIFY_TLS,
    CONF_ZONE_IDS,
    DEFAULT_CLIENT_ID,
    DEFAULT_HOLD_SCHEDULE_BASE,
    DEFAULT_LOG_BODIES,
    DEFAULT_LONG_POLL_SECONDS,
    DEFAULT_VERIFY_TLS,
    DEFAULT_ZONE_IDS,
    DOMAIN,
    HA_CONFIG_MINOR_VERSION,
    HA_CONFIG_VERSION,
    Limits,
)
from custom_components.lennox_s40.helpers import config_validation as lennox_cv

_LOGGER = logging.getLogger(__name__)


def _connection_schema(current: Mapping[str, Any] | None = None) -> dict:
    """Return the schema of everything but the host, with defaults taken from `current` if given."""

    current = current or {}
    return {
        vol.Required(
            CONF_CLIENT_ID, default=current.get(CONF_CLIENT_ID, DEFAULT_CLIENT_ID)
        ): cv.string,
        vol.Required(
            CONF_VERIFY_TLS, default=current.get(CONF_VERIFY_TLS, DEFAULT_VERIFY_TLS)
        ): cv.boolean,
        vol.Required(
            CONF_LONG_POLL_SECONDS,
            default=current.get(CONF_LONG_POLL_SECONDS, DEFAULT_LONG_POLL_SECONDS),
        ): vol.All(
            vol.Coerce(int),
            vol.Range(min=int(Limits.LONG_POLL_MIN), max=int(Limits.LONG_POLL_MAX)),
        ),
        vol.Required(
            CONF_LOG_BODIES, default=current.get(CONF_LOG_BODIES, DEFAULT_LOG_BODIES)
        ): cv.boolean,
        vol.Required(
            CONF_ZONE_IDS,
            default=lennox_cv.zone_ids_to_str(current.get(CONF_ZONE_IDS, DEFAULT_ZONE_IDS)),
        ): cv.string,
        vol.Required(
            CONF_HOLD_SCHEDULE_BASE,
            default=current.get(CONF_HOLD_SCHEDULE_BASE, DEFAULT_HOLD_SCHEDULE_BASE),
        ): cv.positive_int,
        vol.Required(
            CONF_SHARED_HOLD_SCHEDULE, default=current.get(CONF_SHARED_HOLD_SCHEDULE, False)
        ): cv.boolean,
    }


def _validate_zone_ids(user_input: dict[str, Any], errors: dict[str, str]) -> dict[str, Any]:
    """Replace the zone ids string in `user_input` with a list of zone ids, or add an error."""

    try:
        return user_input | {CONF_ZONE_IDS: lennox_cv.zone_ids(user_input[CONF_ZONE_IDS])}
    except vol.Invalid:
        errors[CONF_ZONE_IDS] = "invalid_zone_ids"
        return user_input


class LennoxS40ConfigFlow(ConfigFlow, domain=DOMAIN):
    """Handle a config flow for Lennox S40."""

    VERSION = HA_CONFIG_VERSION
    MINOR_VERSION = HA_CONFIG_MINOR_VERSION

    async def async_step_user(self, user_input: dict[str, Any] | None = None) -> ConfigFlowResult:
        """Configure the connection to the thermostat."""

        errors: dict[str, str] = {}
        if user_input is not None:
            data = _validate_zone_ids(user_input, errors)
            if not errors:
                host: str = data[CONF_HOST].strip()

                # A single config entry per thermostat.
                await self.async_set_unique_id(host)
                self._abort_if_unique_id_configured()

                return self.async_create_entry(
                    title=f"Lennox S40 ({host})", data=data | {CONF_HOST: host}
                )

        return self.async_show_form(
            step_id="user",
            data_schema=vol.Schema(
                {
                    vol.Required(
                        CONF_HOST, default=user_input.get(CONF_HOST) if user_input else vol.UNDEFINED
                    ): cv.string,
                    **_connection_schema(),
                }
            ),
            errors=errors,
        )

    async def async_step_reconfigure(
        self, user_input: dict[str, Any] | None = None
    ) -> ConfigFlowResult:
        """Reconfigure the connection to the thermostat. The host cannot be changed."""

        errors: dict[str, str] = {}
        reconf_entry: ConfigEntry = self._get_reconfigure_entry()

        if user_input is not None:
            data = _validate_zone_ids(user_input, errors)
            if not errors:
                return self.async_update_reload_and_abort(reconf_entry, data_updates=data)

        return self.async_show_form(
            step_id="reconfigure",
            data_schema=vol.Schema(_connection_schema(current=reconf_entry.data)),
            errors=errors,
        )
