"""Validation helper functions."""

from collections.abc import Mapping
from typing import Any

import voluptuous as vol
from homeassistant.const import CONF_HOST

from custom_components.lennox_s40.const import CONF_ZONE_IDS, DEFAULT_ZONE_IDS
from custom_components.lennox_s40.errors import ConfigurationError
from custom_components.lennox_s40.helpers import config_validation as lennox_cv


def validate_entry_config(config: Mapping[str, Any]) -> None:
    """Validate the parameters that are required to start the integration.

    Args:
        config (Mapping[str, Any]): The config entry data.

    Raises:
        ConfigurationError: If the host is missing or no valid zone ids are configured.

    """

    host = config.get(CONF_HOST)
    if not isinstance(host, str) or not host.strip():
        raise ConfigurationError("Missing required configuration parameter 'host'")

    try:
        lennox_cv.zone_ids(config.get(CONF_ZONE_IDS, DEFAULT_ZONE_IDS))
    except vol.Invalid as e:
        raise ConfigurationError(f"Invalid configuration parameter 'zone_ids': {e}") from e
