"""Structured diagnostic events for soft failures and notable state changes."""

from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from custom_components.lennox_s40.const import HoldArmMethod


class DiagnosticSeverity(StrEnum):
    """Severity of a diagnostic event."""

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class DiagnosticKind(StrEnum):
    """What a diagnostic event is about."""

    HOLD_SCHEDULE_CHANGED = "hold_schedule_changed"
    HOLD_ARM_FAILED = "hold_arm_failed"
    HOLD_ARM_PARTIAL_FAILURE = "hold_arm_partial_failure"
    NUDGE_FAILED = "nudge_failed"
    SESSION_OPEN_FAILED = "session_open_failed"
    RETRIEVE_FAILED = "retrieve_failed"
    WRITE_FAILED = "write_failed"


@dataclass(frozen=True)
class DiagnosticEvent:
    """A single diagnostic event."""

    kind: DiagnosticKind
    severity: DiagnosticSeverity
    message: str
    zone_id: int | None = None
    method: HoldArmMethod | None = None
    """The hold arm method the event relates to, if any."""

    error: Exception | None = None

    def as_event_data(self) -> dict[str, Any]:
        """Return this event as Home Assistant event data."""

        return {
            "kind": str(self.kind),
            "severity": str(self.severity),
            "message": self.message,
            "zone_id": self.zone_id,
            "method": str(self.method) if self.method is not None else None,
            "error": repr(self.error) if self.error is not None else None,
        }


type DiagnosticSink = Callable[[DiagnosticEvent], None]


def emit(sink: DiagnosticSink | None, event: DiagnosticEvent) -> None:
    """Send `event` to `sink`, if there is one."""

    if sink is not None:
        sink(event)
