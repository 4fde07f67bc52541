"""Long poll loop that receives telemetry from the thermostat."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from custom_components.lennox_s40.const import BACKOFF_INITIAL_SECONDS, BACKOFF_MAX_SECONDS
from custom_components.lennox_s40.errors import TransportError

from .api import LccApi
from .diagnostics import (
    DiagnosticEvent,
    DiagnosticKind,
    DiagnosticSeverity,
    DiagnosticSink,
    emit,
)
from .hold_schedule import HoldScheduleRegistry
from .zone import ZoneStatus
from .zone_state import ZoneRegistry

_LOGGER = logging.getLogger(__name__)


def _zone_id(zone: dict[str, Any]) -> int | None:
    zone_id = zone.get("id")
    if isinstance(zone_id, bool) or not isinstance(zone_id, int):
        return None

    return zone_id


def _hold_schedule_id(zone: dict[str, Any]) -> int | None:
    config = zone.get("config")
    if not isinstance(config, dict):
        return None

    hold = config.get("scheduleHold")
    if not isinstance(hold, dict):
        return None

    schedule_id = hold.get("scheduleId")
    if isinstance(schedule_id, bool) or not isinstance(schedule_id, int):
        return None

    return schedule_id


class RetrievalPump:
    """Retrieve messages from the thermostat for as long as it runs, and dispatch them to the zones.

    When retrieving fails, both sessions are reopened and the next attempt is delayed by a backoff
    that doubles after every failure, up to a maximum. A successful retrieve resets the backoff.
    """

    def __init__(
        self,
        api: LccApi,
        registry: HoldScheduleRegistry,
        zones: ZoneRegistry,
        on_dispatched: Callable[[], None] | None = None,
        backoff_initial: float = BACKOFF_INITIAL_SECONDS,
        backoff_max: float = BACKOFF_MAX_SECONDS,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        on_diagnostic: DiagnosticSink | None = None,
    ):
        """Create a new retrieval pump.

        Args:
            api (LccApi): The transport.
            registry (HoldScheduleRegistry): Receives the hold schedule ids reported by the thermostat.
            zones (ZoneRegistry): The managed zones, which receive setpoint echoes and status updates.
            on_dispatched (Callable[[], None] | None): Called after a batch of zone updates was dispatched.
            backoff_initial (float): Seconds to wait after the first failure.
            backoff_max (float): Maximum seconds to wait between attempts.
            sleep (Callable[[float], Awaitable[None]]): The sleep function.
            on_diagnostic (DiagnosticSink | None): Receives an event for every failure.

        """
        self._api = api
        self._registry = registry
        self._zones = zones
        self._on_dispatched = on_dispatched
        self._backoff_initial = backoff_initial
        self._backoff_max = backoff_max
        self._sleep = sleep
        self._on_diagnostic = on_diagnostic
        self._backoff = backoff_initial

    @property
    def backoff(self) -> float:
        """Return the seconds that will be waited after the next failure."""
        return self._backoff

    async def async_run(self) -> None:
        """Retrieve and dispatch messages until cancelled."""

        _LOGGER.debug("Starting retrieval of thermostat messages")
        while True:
            await self.async_run_once()

    async def async_run_once(self) -> bool:
        """Perform a single retrieve, or recover from a failed one.

        Returns:
            bool: Whether the retrieve succeeded.

        """

        try:
            messages = await self._api.async_retrieve()
            self.dispatch(messages)
        except TransportError as e:
            await self._async_recover(e)
            return False
        except Exception as e:
            _LOGGER.exception("Unexpected error while retrieving or dispatching messages")
            await self._async_recover(e)
            return False

        self._backoff = self._backoff_initial
        return True

    async def _async_recover(self, error: Exception) -> None:
        _LOGGER.warning(
            "Retrieving messages failed, reconnecting and retrying in %ss: %s", self._backoff, error
        )
        emit(
            self._on_diagnostic,
            DiagnosticEvent(
                kind=DiagnosticKind.RETRIEVE_FAILED,
                severity=DiagnosticSeverity.WARNING,
                message=f"Retrieving messages failed, retrying in {self._backoff}s",
                error=error,
            ),
        )

        await self.async_open_sessions()
        await self._sleep(self._backoff)
        self._backoff = min(self._backoff * 2, self._backoff_max)

    async def async_open_sessions(self) -> None:
        """Open both sessions. Failing to open one is reported, but not fatal."""

        for name, connect in (
            ("message bus", self._api.async_connect),
            ("endpoint", self._api.async_connect_endpoint),
        ):
            if not await connect():
                emit(
                    self._on_diagnostic,
                    DiagnosticEvent(
                        kind=DiagnosticKind.SESSION_OPEN_FAILED,
                        severity=DiagnosticSeverity.WARNING,
                        message=f"Could not open the {name} session",
                    ),
                )

    def dispatch(self, messages: list[dict[str, Any]]) -> int:
        """Dispatch the zones in `messages`.

        Per zone, the reported hold schedule goes to the hold schedule registry first. Then, for managed
        zones, reported setpoints go to the write buffer and the status goes to the zone observers.

        Returns:
            int: The number of zone updates that were dispatched to managed zones.

        """

        dispatched = 0
        for message in messages:
            data = message.get("Data")
            if not isinstance(data, dict):
                continue

            zones = data.get("zones")
            if not isinstance(zones, list):
                continue

            for zone in zones:
                if isinstance(zone, dict) and self._dispatch_zone(zone):
                    dispatched += 1

        if dispatched and self._on_dispatched is not None:
            self._on_dispatched()

        return dispatched

    def _dispatch_zone(self, zone: dict[str, Any]) -> bool:
        zone_id = _zone_id(zone)
        if zone_id is None:
            return False

        schedule_id = _hold_schedule_id(zone)
        if schedule_id is not None:
            self._registry.observe(zone_id, schedule_id)

        state = self._zones.get(zone_id)
        if state is None:
            _LOGGER.debug("Ignoring zone %s, it is not managed", zone_id)
            return False

        raw_status = zone.get("status")
        if not isinstance(raw_status, dict):
            return False

        status = ZoneStatus.from_telemetry(raw_status)
        if status.has_setpoints:
            state.buffer.on_device_echo(heat=status.heat_setpoint, cool=status.cool_setpoint)

        state.apply_status(status)
        return True
