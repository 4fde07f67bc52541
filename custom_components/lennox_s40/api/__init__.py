"""Package containing all Lennox S40 API classes."""

__all__ = []

from .api import LccApi  # noqa: F401
from .diagnostics import (  # noqa: F401
    DiagnosticEvent,
    DiagnosticKind,
    DiagnosticSeverity,
    DiagnosticSink,
)
from .hold_schedule import HoldScheduleRegistry  # noqa: F401
from .pump import RetrievalPump  # noqa: F401
from .write_buffer import CoalescingWriteBuffer  # noqa: F401
from .write_protocol import SetpointWriteProtocol, WriteResult  # noqa: F401
from .zone import SetpointPair, ZoneStatus  # noqa: F401
from .zone_state import ZoneObserver, ZoneRegistry, ZoneState  # noqa: F401
