"""Coordinator for the telemetry and setpoint writes of a Lennox S40 thermostat."""

import asyncio
import contextlib
import logging
from collections.abc import Callable

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.helpers.update_coordinator import (
    DataUpdateCoordinator,
    UpdateFailed,
)

from custom_components.lennox_s40.api import (
    CoalescingWriteBuffer,
    DiagnosticEvent,
    HoldScheduleRegistry,
    LccApi,
    RetrievalPump,
    SetpointPair,
    SetpointWriteProtocol,
    ZoneObserver,
    ZoneRegistry,
    ZoneState,
    ZoneStatus,
)
from custom_components.lennox_s40.const import (
    DEFAULT_HOLD_SCHEDULE_BASE,
    DOMAIN,
    EVENT_DIAGNOSTIC,
    STARTUP_DATA_PATHS,
    WRITE_DEBOUNCE_SECONDS,
    SystemMode,
)
from custom_components.lennox_s40.errors import LennoxS40Error, TransportError

_LOGGER = logging.getLogger(__name__)


class LennoxUpdateCoordinator(DataUpdateCoordinator):
    """Lennox S40 coordinator.

    The thermostat pushes its state through a long poll, so there is no update interval. A refresh
    (re)opens the sessions and asks the thermostat to send everything; the retrieval pump then
    publishes every batch of zone updates with `async_set_updated_data`.
    """

    def __init__(
        self,
        hass: HomeAssistant,
        config_entry: ConfigEntry,
        api: LccApi,
        zone_ids: list[int],
        hold_schedule_base: int = DEFAULT_HOLD_SCHEDULE_BASE,
        shared_hold_schedule: bool = False,
        debounce: float = WRITE_DEBOUNCE_SECONDS,
    ):
        """Create a new instance of the Lennox S40 update coordinator."""

        super().__init__(
            hass,
            _LOGGER,
            name=DOMAIN,
            update_interval=None,
            always_update=False,
            config_entry=config_entry,
        )
        self._api: LccApi = api
        self._registry = HoldScheduleRegistry(
            base=hold_schedule_base,
            shared=shared_hold_schedule,
            on_diagnostic=self._fire_diagnostic_event,
        )
        self._protocol = SetpointWriteProtocol(
            api=api, registry=self._registry, on_diagnostic=self._fire_diagnostic_event
        )
        self._zones = ZoneRegistry(
            [
                ZoneState(
                    zone_id=zone_id,
                    buffer=CoalescingWriteBuffer(
                        zone_id=zone_id,
                        writer=self._protocol.async_write,
                        debounce=debounce,
                        on_diagnostic=self._fire_diagnostic_event,
                    ),
                )
                for zone_id in zone_ids
            ]
        )
        self._pump = RetrievalPump(
            api=api,
            registry=self._registry,
            zones=self._zones,
            on_dispatched=self._publish_zone_statuses,
            on_diagnostic=self._fire_diagnostic_event,
        )
        self._pump_task: asyncio.Task | None = None
        self._shut_down: bool = False

    async def _async_update_data(self) -> dict[str, dict[int, ZoneStatus]]:
        await self._pump.async_open_sessions()

        try:
            await self._api.async_request_data(STARTUP_DATA_PATHS)
        except TransportError as ex:
            raise UpdateFailed("Error while requesting data from the thermostat.") from ex

        return {"zones": self._zones.statuses()}

    def _publish_zone_statuses(self) -> None:
        self.async_set_updated_data({"zones": self._zones.statuses()})

    def _fire_diagnostic_event(self, event: DiagnosticEvent) -> None:
        self.hass.bus.async_fire(EVENT_DIAGNOSTIC, event.as_event_data())

    def async_start_pump(self) -> None:
        """Start retrieving telemetry in the background, until the config entry is unloaded."""

        if self._pump_task is not None:
            return

        self._pump_task = self.config_entry.async_create_background_task(
            self.hass, self._pump.async_run(), name=f"{DOMAIN} retrieval pump"
        )

    async def async_shutdown(self) -> None:
        """Stop the retrieval pump, cancel pending writes and disconnect from the thermostat."""

        await super().async_shutdown()
        if self._shut_down:
            return
        self._shut_down = True

        if self._pump_task is not None:
            self._pump_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._pump_task
            self._pump_task = None

        for zone in self._zones:
            await zone.buffer.async_shutdown()

        await self._api.async_close()

    @property
    def api(self) -> LccApi:
        """Return the api of this coordinator."""
        return self._api

    @property
    def hold_schedules(self) -> HoldScheduleRegistry:
        """Return the hold schedule registry."""
        return self._registry

    @property
    def zone_ids(self) -> list[int]:
        """Return the ids of the managed zones."""
        return self._zones.zone_ids

    def _zone(self, zone_id: int) -> ZoneState:
        zone = self._zones.get(zone_id)
        if zone is None:
            raise LennoxS40Error(f"Zone {zone_id} is not managed by this integration")

        return zone

    def get_zone_status(self, zone_id: int) -> ZoneStatus:
        """Return the last reported status of zone `zone_id`."""

        return self._zone(zone_id).status

    def register_zone_observer(self, zone_id: int, observer: ZoneObserver) -> Callable[[], None]:
        """Forward the status of zone `zone_id` to `observer` whenever it is reported.

        Returns:
            Callable[[], None]: Unregisters the observer.

        """

        return self._zone(zone_id).add_observer(observer)

    def request_setpoint_change(self, zone_id: int, pair: SetpointPair) -> SetpointPair:
        """Request the setpoints of zone `zone_id` to be changed to `pair`.

        The change is written once no further changes are requested for a short while.

        Returns:
            SetpointPair: The setpoints that will be written.

        """

        return self._zone(zone_id).buffer.request_write(pair)

    async def async_set_zone_mode(self, zone_id: int, mode: SystemMode) -> None:
        """Set the system mode of zone `zone_id`.

        Raises:
            TransportError: If the thermostat did not accept the new mode.

        """

        self._zone(zone_id)
        await self._api.async_set_zone_mode(zone_id, mode)

    async def async_request_data(self, paths: list[str]) -> None:
        """Ask the thermostat to send the current state of `paths`.

        Raises:
            TransportError: If the thermostat did not accept the request.

        """

        await self._api.async_request_data(paths)
