"""Per zone buffer that coalesces setpoint changes into as few writes as possible."""

import asyncio
import logging
from collections.abc import Awaitable, Callable

from custom_components.lennox_s40.const import WRITE_DEBOUNCE_SECONDS
from custom_components.lennox_s40.errors import TransportError

from .diagnostics import (
    DiagnosticEvent,
    DiagnosticKind,
    DiagnosticSeverity,
    DiagnosticSink,
    emit,
)
from .write_protocol import WriteResult
from .zone import SetpointPair

_LOGGER = logging.getLogger(__name__)

type SetpointWriter = Callable[[int, SetpointPair], Awaitable[WriteResult]]


class CoalescingWriteBuffer:
    """Debounce setpoint changes of one zone and recognize the thermostat echoing them back.

    A burst of changes, like dragging a slider, results in a single write of the last value. Values
    that the thermostat already reports are not written at all. While a write is in flight, telemetry
    that matches it acknowledges the write instead of being treated as an external change.
    """

    def __init__(
        self,
        zone_id: int,
        writer: SetpointWriter,
        debounce: float = WRITE_DEBOUNCE_SECONDS,
        on_diagnostic: DiagnosticSink | None = None,
    ):
        """Create a new write buffer.

        Args:
            zone_id (int): The zone this buffer writes to.
            writer (SetpointWriter): Performs the actual write, usually `SetpointWriteProtocol.async_write`.
            debounce (float): Seconds without new requests before the pending value is written.
            on_diagnostic (DiagnosticSink | None): Receives an event when a debounced write fails.

        """
        self._zone_id = zone_id
        self._writer = writer
        self._debounce = debounce
        self._on_diagnostic = on_diagnostic

        self._pending: SetpointPair | None = None
        self._in_flight: SetpointPair | None = None
        self._known_heat: int | None = None
        self._known_cool: int | None = None

        self._lock = asyncio.Lock()
        self._timer: asyncio.TimerHandle | None = None
        self._flush_tasks: set[asyncio.Task] = set()

    @property
    def zone_id(self) -> int:
        """Return the zone id of this buffer."""
        return self._zone_id

    @property
    def pending(self) -> SetpointPair | None:
        """Return the requested setpoints that have not been sent yet."""
        return self._pending

    @property
    def in_flight(self) -> SetpointPair | None:
        """Return the setpoints that are being written right now."""
        return self._in_flight

    @property
    def last_known_device_state(self) -> SetpointPair | None:
        """Return the setpoints the thermostat is believed to have, or `None` if only partially known."""

        if self._known_heat is None or self._known_cool is None:
            return None

        return SetpointPair(heat=self._known_heat, cool=self._known_cool)

    def request_write(self, pair: SetpointPair) -> SetpointPair:
        """Request `pair` to be written once no new requests arrive for the debounce interval.

        A pending request that has not been written yet is replaced.

        Returns:
            SetpointPair: The pair that will be written, after deadband enforcement.

        """

        pair = pair.with_deadband()
        self._pending = pair

        if self._timer is not None:
            self._timer.cancel()
        self._timer = asyncio.get_running_loop().call_later(self._debounce, self._on_timer)

        _LOGGER.debug(
            "Zone %s: setpoints %s/%s pending for %ss",
            self._zone_id,
            pair.heat,
            pair.cool,
            self._debounce,
        )
        return pair

    def _on_timer(self) -> None:
        self._timer = None
        task = asyncio.get_running_loop().create_task(self._async_flush_from_timer())
        self._flush_tasks.add(task)
        task.add_done_callback(self._flush_tasks.discard)

    async def _async_flush_from_timer(self) -> None:
        try:
            await self.async_flush()
        except TransportError as e:
            _LOGGER.error("Could not write setpoints of zone %s: %s", self._zone_id, e)
            emit(
                self._on_diagnostic,
                DiagnosticEvent(
                    kind=DiagnosticKind.WRITE_FAILED,
                    severity=DiagnosticSeverity.ERROR,
                    message="Could not write setpoints",
                    zone_id=self._zone_id,
                    error=e,
                ),
            )

    async def async_flush(self) -> WriteResult | None:
        """Write the pending setpoints now, unless the thermostat already has them.

        Only one flush runs at a time; a second flush waits for the first one to finish.

        Returns:
            WriteResult | None: The result of the write, or `None` if nothing was written.

        Raises:
            TransportError: If the write failed. The setpoints are pending again, so the next flush retries them.

        """

        async with self._lock:
            pair = self._pending
            if pair is None:
                return None

            self._pending = None
            if pair == self.last_known_device_state:
                _LOGGER.debug(
                    "Zone %s already has setpoints %s/%s, not writing",
                    self._zone_id,
                    pair.heat,
                    pair.cool,
                )
                return None

            self._in_flight = pair
            try:
                result = await self._writer(self._zone_id, pair)
            except TransportError:
                if self._in_flight == pair:
                    self._in_flight = None
                if self._pending is None:
                    self._pending = pair
                raise

            # Telemetry may have acknowledged the write already.
            if self._in_flight is not None:
                self._commit(self._in_flight)
                self._in_flight = None

            return result

    def on_device_echo(self, heat: int | None = None, cool: int | None = None) -> None:
        """Process setpoints reported by the thermostat.

        If a write is in flight and every reported setpoint matches it, the write is acknowledged.
        Otherwise the reported setpoints update the known state; setpoints that are not reported keep
        their previous value.
        """

        if heat is None and cool is None:
            return

        in_flight = self._in_flight
        if (
            in_flight is not None
            and (heat is None or heat == in_flight.heat)
            and (cool is None or cool == in_flight.cool)
        ):
            _LOGGER.debug(
                "Zone %s acknowledged setpoints %s/%s", self._zone_id, in_flight.heat, in_flight.cool
            )
            self._commit(in_flight)
            self._in_flight = None
            return

        if heat is not None:
            self._known_heat = heat
        if cool is not None:
            self._known_cool = cool

    def _commit(self, pair: SetpointPair) -> None:
        self._known_heat = pair.heat
        self._known_cool = pair.cool

    async def async_shutdown(self) -> None:
        """Cancel the debounce timer and any flush in progress."""

        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

        for task in list(self._flush_tasks):
            task.cancel()
        if self._flush_tasks:
            await asyncio.gather(*self._flush_tasks, return_exceptions=True)
