"""The sequence of commands that installs a pair of setpoints on the thermostat."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from custom_components.lennox_s40.const import (
    HOLD_PERIOD_ID,
    SNAPSHOT_DELAY_SECONDS,
    ZONE_DATA_PATHS,
    HoldArmMethod,
)
from custom_components.lennox_s40.errors import ProtocolPartialFailure, TransportError

from .api import LccApi
from .diagnostics import (
    DiagnosticEvent,
    DiagnosticKind,
    DiagnosticSeverity,
    DiagnosticSink,
    emit,
)
from .hold_schedule import HoldScheduleRegistry
from .zone import SetpointPair

_LOGGER = logging.getLogger(__name__)

type HoldArmStrategy = Callable[[int, int, SetpointPair], Awaitable[None]]
"""Arm a hold with `(zone_id, schedule_id, pair)`. Raises `TransportError` if unsupported or failed."""


@dataclass(frozen=True)
class WriteResult:
    """The outcome of a setpoint write."""

    zone_id: int
    schedule_id: int
    pair: SetpointPair
    hold_method: HoldArmMethod | None
    """The method that armed the hold, or `None` if every method failed."""

    partial_failure: ProtocolPartialFailure | None = None


class SetpointWriteProtocol:
    """Write setpoints by updating the hold schedule of a zone and then arming a hold on it.

    The thermostat has no single 'set temperature' command. Instead:
    1. period 0 of the hold schedule of the zone is overwritten with the new setpoints;
    2. after a short delay, a hold on that schedule is armed, using the first hold arm method that works;
    3. the thermostat is asked to send the state of the zones, so the result shows up quickly.

    Only step 1 is required to succeed.
    """

    def __init__(
        self,
        api: LccApi,
        registry: HoldScheduleRegistry,
        snapshot_delay: float = SNAPSHOT_DELAY_SECONDS,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        on_diagnostic: DiagnosticSink | None = None,
    ):
        """Create a new write protocol.

        Args:
            api (LccApi): The transport.
            registry (HoldScheduleRegistry): Source of the hold schedule id of each zone.
            snapshot_delay (float): Seconds to wait between writing the period and arming the hold.
            sleep (Callable[[float], Awaitable[None]]): The sleep function.
            on_diagnostic (DiagnosticSink | None): Receives an event for every soft failure.

        """
        self._api = api
        self._registry = registry
        self._snapshot_delay = snapshot_delay
        self._sleep = sleep
        self._on_diagnostic = on_diagnostic
        self._hold_strategies: list[tuple[HoldArmMethod, HoldArmStrategy]] = [
            (HoldArmMethod.CONFIG_TOGGLE, api.async_arm_hold_config),
            (HoldArmMethod.COMMAND_DIRECTIVE, api.async_arm_hold_command),
            (HoldArmMethod.STATUS_DIRECTIVE, api.async_arm_hold_status),
        ]

    async def async_write(self, zone_id: int, pair: SetpointPair) -> WriteResult:
        """Install `pair` on zone `zone_id`.

        Returns:
            WriteResult: Which hold schedule was written and which hold arm method succeeded.

        Raises:
            TransportError: If the schedule period could not be written. Nothing was changed in that case.

        """

        schedule_id = self._registry.get(zone_id)
        _LOGGER.debug(
            "Writing setpoints %s/%s to hold schedule %s of zone %s",
            pair.heat,
            pair.cool,
            schedule_id,
            zone_id,
        )

        await self._api.async_write_schedule_period(schedule_id, HOLD_PERIOD_ID, pair)

        # The thermostat needs a moment to take the new period into account.
        await self._sleep(self._snapshot_delay)

        hold_method, partial_failure = await self._async_arm_hold(zone_id, schedule_id, pair)
        await self._async_nudge(zone_id)

        return WriteResult(
            zone_id=zone_id,
            schedule_id=schedule_id,
            pair=pair,
            hold_method=hold_method,
            partial_failure=partial_failure,
        )

    async def _async_arm_hold(
        self, zone_id: int, schedule_id: int, pair: SetpointPair
    ) -> tuple[HoldArmMethod | None, ProtocolPartialFailure | None]:
        errors: dict[HoldArmMethod, Exception] = {}

        for method, strategy in self._hold_strategies:
            try:
                await strategy(zone_id, schedule_id, pair)
            except TransportError as e:
                _LOGGER.debug("Hold arm method %s failed for zone %s: %s", method, zone_id, e)
                errors[method] = e
                emit(
                    self._on_diagnostic,
                    DiagnosticEvent(
                        kind=DiagnosticKind.HOLD_ARM_FAILED,
                        severity=DiagnosticSeverity.WARNING,
                        message=f"Hold arm method {method} failed",
                        zone_id=zone_id,
                        method=method,
                        error=e,
                    ),
                )
                continue

            _LOGGER.info(
                "Armed hold on schedule %s for zone %s using %s", schedule_id, zone_id, method
            )
            return method, None

        failure = ProtocolPartialFailure(zone_id, schedule_id, errors)
        _LOGGER.warning("%s", failure)
        emit(
            self._on_diagnostic,
            DiagnosticEvent(
                kind=DiagnosticKind.HOLD_ARM_PARTIAL_FAILURE,
                severity=DiagnosticSeverity.WARNING,
                message=str(failure),
                zone_id=zone_id,
                error=failure,
            ),
        )
        return None, failure

    async def _async_nudge(self, zone_id: int) -> None:
        try:
            await self._api.async_request_data(ZONE_DATA_PATHS)
        except TransportError as e:
            _LOGGER.warning("Could not request fresh zone data after writing zone %s: %s", zone_id, e)
            emit(
                self._on_diagnostic,
                DiagnosticEvent(
                    kind=DiagnosticKind.NUDGE_FAILED,
                    severity=DiagnosticSeverity.WARNING,
                    message="Could not request fresh zone data",
                    zone_id=zone_id,
                    error=e,
                ),
            )
