"""Fixtures for testing."""

import asyncio
from collections.abc import Generator
from typing import Any, Final
from unittest.mock import AsyncMock, patch

import pytest
from homeassistant.const import CONF_HOST
from homeassistant.core import HomeAssistant
from pytest_homeassistant_custom_component.common import MockConfigEntry

from custom_components.lennox_s40.api import LccApi
from custom_components.lennox_s40.const import (
    CONF_CLIENT_ID,
    CONF_HOLD_SCHEDULE_BASE,
    CONF_LOG_BODIES,
    CONF_LONG_POLL_SECONDS,
    CONF_SHARED_HOLD_SCHEDULE,
    CONF_VERIFY_TLS,
    CONF_ZONE_IDS,
    DEFAULT_CLIENT_ID,
    DOMAIN,
    HA_CONFIG_MINOR_VERSION,
    HA_CONFIG_VERSION,
)

TEST_HOST: Final[str] = "192.168.1.40"


def get_api() -> AsyncMock:
    """Create a mocked LccApi.

    `async_retrieve` blocks until a batch of messages is put on `api.messages`, like a long poll
    that waits for the thermostat to have something to say.
    """

    api = AsyncMock(spec=LccApi)
    api.async_connect.return_value = True
    api.async_connect_endpoint.return_value = True

    messages: asyncio.Queue[list[dict[str, Any]]] = asyncio.Queue()

    async def retrieve(*args, **kwargs) -> list[dict[str, Any]]:
        return await messages.get()

    api.async_retrieve.side_effect = retrieve
    api.messages = messages

    return api


def zone_message(zone_id: int, status: dict | None = None, hold_schedule_id: int | None = None):
    """Create a retrieved message that reports a single zone."""

    zone: dict[str, Any] = {"id": zone_id}
    if status is not None:
        zone["status"] = status
    if hold_schedule_id is not None:
        zone["config"] = {"scheduleHold": {"scheduleId": hold_schedule_id}}

    return {"MessageType": "PropertyChange", "Data": {"zones": [zone]}}


async def publish_messages(hass: HomeAssistant, api: AsyncMock, messages: list[dict]) -> None:
    """Let the mocked api return `messages` from its pending retrieve, and wait for the dispatch."""

    await api.messages.put(messages)

    # Give the retrieval pump a chance to pick up and dispatch the messages.
    await asyncio.sleep(0)
    await asyncio.sleep(0)
    await hass.async_block_till_done()


async def setup_platform(hass: HomeAssistant, config_entry: MockConfigEntry) -> None:
    """Set up the Lennox S40 integration for the given config entry."""

    config_entry.add_to_hass(hass)
    assert await hass.config_entries.async_setup(config_entry.entry_id)
    await hass.async_block_till_done()


@pytest.fixture(autouse=True)
def auto_enable_custom_integrations(enable_custom_integrations):
    """Enable custom integrations."""
    return


@pytest.fixture
def mock_setup_entry() -> Generator[AsyncMock]:
    """Override async_setup_entry."""
    with patch(
        "custom_components.lennox_s40.async_setup_entry", return_value=True
    ) as mock_setup_entry:
        yield mock_setup_entry


@pytest.fixture
def mock_lcc_api() -> Generator[AsyncMock]:
    """Replace the api that is created while setting up a config entry by a mock."""

    api = get_api()
    with patch(
        "custom_components.lennox_s40.api.LccApi.create",
        new=lambda *args, **kwargs: api,
    ):
        yield api


@pytest.fixture
def mock_config_entry(request) -> MockConfigEntry:
    """Create a mocked config entry.

    `request.param` is an optional dict that overrides entries of the config entry data, for example
    `{"zone_ids": [0, 3]}`.
    """

    overrides: dict[str, Any] = request.param if hasattr(request, "param") else {}

    return MockConfigEntry(
        domain=DOMAIN,
        title=f"Lennox S40 ({TEST_HOST})",
        unique_id=TEST_HOST,
        version=HA_CONFIG_VERSION,
        minor_version=HA_CONFIG_MINOR_VERSION,
        data={
            CONF_HOST: TEST_HOST,
            CONF_CLIENT_ID: DEFAULT_CLIENT_ID,
            CONF_VERIFY_TLS: False,
            CONF_LONG_POLL_SECONDS: 15,
            CONF_LOG_BODIES: False,
            CONF_ZONE_IDS: [0],
            CONF_HOLD_SCHEDULE_BASE: 32,
            CONF_SHARED_HOLD_SCHEDULE: False,
        }
        | overrides,
    )
