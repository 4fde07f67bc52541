"""Registry of the schedules that carry the temporary hold of each zone."""

import logging

from custom_components.lennox_s40.const import DEFAULT_HOLD_SCHEDULE_BASE

from .diagnostics import (
    DiagnosticEvent,
    DiagnosticKind,
    DiagnosticSeverity,
    DiagnosticSink,
    emit,
)

_LOGGER = logging.getLogger(__name__)


class HoldScheduleRegistry:
    """Keep track of the hold schedule id of every zone.

    Until the thermostat reports the hold schedule of a zone, a deterministic default is used so
    setpoints can be written right after startup. Only telemetry updates the registry: a setpoint
    write never confirms the schedule id it used.
    """

    def __init__(
        self,
        base: int = DEFAULT_HOLD_SCHEDULE_BASE,
        shared: bool = False,
        on_diagnostic: DiagnosticSink | None = None,
    ):
        """Create a new registry.

        Args:
            base (int): The default hold schedule id of zone 0.
            shared (bool): Whether all zones share the hold schedule `base` by default.
            on_diagnostic (DiagnosticSink | None): Receives a diagnostic event for every change.

        """
        self._base = base
        self._shared = shared
        self._on_diagnostic = on_diagnostic
        self._schedule_ids: dict[int, int] = {}

    def default_for(self, zone_id: int) -> int:
        """Return the hold schedule id of `zone_id` as long as the thermostat has not reported it."""

        return self._base if self._shared else self._base + zone_id

    def get(self, zone_id: int) -> int:
        """Return the hold schedule id that is currently known for `zone_id`."""

        return self._schedule_ids.get(zone_id, self.default_for(zone_id))

    def observe(self, zone_id: int, schedule_id: int) -> bool:
        """Record the hold schedule id the thermostat reported for `zone_id`.

        Returns:
            bool: `True` if the known schedule id changed.

        """

        current = self.get(zone_id)
        if current == schedule_id:
            return False

        self._schedule_ids[zone_id] = schedule_id
        _LOGGER.info(
            "Hold schedule of zone %s changed from %s to %s", zone_id, current, schedule_id
        )
        emit(
            self._on_diagnostic,
            DiagnosticEvent(
                kind=DiagnosticKind.HOLD_SCHEDULE_CHANGED,
                severity=DiagnosticSeverity.INFO,
                message=f"Hold schedule changed from {current} to {schedule_id}",
                zone_id=zone_id,
            ),
        )
        return True
