"""Tests for setting up and unloading the lennox_s40 integration."""

from unittest.mock import AsyncMock

import pytest
from homeassistant.config_entries import ConfigEntryState
from homeassistant.const import CONF_HOST
from homeassistant.core import HomeAssistant
from pytest_homeassistant_custom_component.common import MockConfigEntry

from custom_components.lennox_s40.const import DOMAIN, SERVICE_REQUEST_DATA
from custom_components.lennox_s40.errors import TransportError

from .conftest import publish_messages, setup_platform, zone_message


async def test_setup_and_unload(
    hass: HomeAssistant, mock_lcc_api: AsyncMock, mock_config_entry: MockConfigEntry
):
    """Test a config entry that loads and unloads without problems."""

    await setup_platform(hass, mock_config_entry)

    assert mock_config_entry.state is ConfigEntryState.LOADED
    assert mock_config_entry.runtime_data["api"] is mock_lcc_api
    assert hass.services.has_service(DOMAIN, SERVICE_REQUEST_DATA)

    # The retrieval pump is running.
    await publish_messages(hass, mock_lcc_api, [zone_message(0, status={"humidity": 50})])
    coordinator = mock_config_entry.runtime_data["coordinator"]
    assert coordinator.get_zone_status(0).humidity == 50

    assert await hass.config_entries.async_unload(mock_config_entry.entry_id)
    await hass.async_block_till_done()

    assert mock_config_entry.state is ConfigEntryState.NOT_LOADED
    mock_lcc_api.async_close.assert_awaited_once()


@pytest.mark.parametrize(
    "mock_config_entry",
    [{CONF_HOST: ""}, {"zone_ids": []}, {"zone_ids": "one"}],
    indirect=True,
)
async def test_setup_invalid_config(
    hass: HomeAssistant, mock_lcc_api: AsyncMock, mock_config_entry: MockConfigEntry
):
    """Test that an invalid configuration does not start the integration."""

    mock_config_entry.add_to_hass(hass)
    assert not await hass.config_entries.async_setup(mock_config_entry.entry_id)
    await hass.async_block_till_done()

    assert mock_config_entry.state is ConfigEntryState.SETUP_ERROR
    mock_lcc_api.async_connect.assert_not_awaited()


async def test_setup_thermostat_unreachable(
    hass: HomeAssistant, mock_lcc_api: AsyncMock, mock_config_entry: MockConfigEntry
):
    """Test that setup is retried later if the initial data request fails."""

    mock_lcc_api.async_request_data.side_effect = TransportError("Offline")

    mock_config_entry.add_to_hass(hass)
    assert not await hass.config_entries.async_setup(mock_config_entry.entry_id)
    await hass.async_block_till_done()

    assert mock_config_entry.state is ConfigEntryState.SETUP_RETRY
