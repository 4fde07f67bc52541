"""Tests for the coalescing write buffer."""

import asyncio
from collections.abc import AsyncGenerator
from unittest.mock import AsyncMock

import pytest

from custom_components.lennox_s40.api import (
    CoalescingWriteBuffer,
    DiagnosticEvent,
    DiagnosticKind,
    SetpointPair,
    WriteResult,
)
from custom_components.lennox_s40.errors import TransportError

DEBOUNCE = 0.01


def _result(zone_id: int, pair: SetpointPair) -> WriteResult:
    return WriteResult(zone_id=zone_id, schedule_id=32 + zone_id, pair=pair, hold_method=None)


@pytest.fixture
def writer() -> AsyncMock:
    """Return a writer that always succeeds."""
    return AsyncMock(side_effect=_result)


@pytest.fixture
def events() -> list[DiagnosticEvent]:
    """Return the list that collects diagnostic events."""
    return []


@pytest.fixture
async def buffer(
    writer: AsyncMock, events: list[DiagnosticEvent]
) -> AsyncGenerator[CoalescingWriteBuffer]:
    """Return a write buffer for zone 0 with a short debounce interval."""

    buffer = CoalescingWriteBuffer(0, writer, debounce=DEBOUNCE, on_diagnostic=events.append)
    yield buffer
    await buffer.async_shutdown()


async def _debounce() -> None:
    """Wait until the debounce timer fired and the flush finished."""
    await asyncio.sleep(DEBOUNCE * 5)


async def test_coalesce(buffer: CoalescingWriteBuffer, writer: AsyncMock):
    """Test that a burst of requests results in a single write of the last request."""

    buffer.request_write(SetpointPair(heat=66, cool=74))
    buffer.request_write(SetpointPair(heat=67, cool=74))
    buffer.request_write(SetpointPair(heat=68, cool=74))

    assert buffer.pending == SetpointPair(heat=68, cool=74)
    writer.assert_not_awaited()

    await _debounce()

    writer.assert_awaited_once_with(0, SetpointPair(heat=68, cool=74))
    assert buffer.pending is None
    assert buffer.in_flight is None
    assert buffer.last_known_device_state == SetpointPair(heat=68, cool=74)


async def test_request_enforces_deadband(buffer: CoalescingWriteBuffer):
    """Test that the cool setpoint is raised when a request violates the deadband."""

    assert buffer.request_write(SetpointPair(heat=72, cool=73)) == SetpointPair(heat=72, cool=75)
    assert buffer.pending == SetpointPair(heat=72, cool=75)


async def test_no_op_write(buffer: CoalescingWriteBuffer, writer: AsyncMock):
    """Test that setpoints the thermostat already has are not written."""

    buffer.on_device_echo(heat=68, cool=74)
    buffer.request_write(SetpointPair(heat=68, cool=74))

    assert await buffer.async_flush() is None
    assert buffer.pending is None
    writer.assert_not_awaited()


async def test_flush_without_pending(buffer: CoalescingWriteBuffer, writer: AsyncMock):
    """Test that flushing an empty buffer does nothing."""

    assert await buffer.async_flush() is None
    writer.assert_not_awaited()


async def test_partial_device_state(buffer: CoalescingWriteBuffer):
    """Test that the device state is only known when both setpoints have been reported."""

    assert buffer.last_known_device_state is None

    buffer.on_device_echo(heat=68)
    assert buffer.last_known_device_state is None

    buffer.on_device_echo(cool=74)
    assert buffer.last_known_device_state == SetpointPair(heat=68, cool=74)

    buffer.on_device_echo(cool=76)
    assert buffer.last_known_device_state == SetpointPair(heat=68, cool=76)

    buffer.on_device_echo()
    assert buffer.last_known_device_state == SetpointPair(heat=68, cool=76)


async def test_echo_acknowledges_in_flight(buffer: CoalescingWriteBuffer, writer: AsyncMock):
    """Test that telemetry matching the write in flight acknowledges it."""

    pair = SetpointPair(heat=68, cool=74)

    async def echo(zone_id: int, written: SetpointPair) -> WriteResult:
        assert buffer.in_flight == pair
        buffer.on_device_echo(heat=68)
        assert buffer.in_flight is None
        assert buffer.last_known_device_state == pair
        return _result(zone_id, written)

    writer.side_effect = echo
    buffer.request_write(pair)

    result = await buffer.async_flush()

    assert result is not None
    assert result.pair == pair
    assert buffer.last_known_device_state == pair

    # The acknowledged setpoints are not written again.
    buffer.request_write(pair)
    assert await buffer.async_flush() is None
    writer.assert_awaited_once()


async def test_external_change_while_in_flight(buffer: CoalescingWriteBuffer, writer: AsyncMock):
    """Test that telemetry that does not match the write in flight is an external change."""

    pair = SetpointPair(heat=68, cool=74)

    async def external_change(zone_id: int, written: SetpointPair) -> WriteResult:
        buffer.on_device_echo(heat=60, cool=80)
        assert buffer.in_flight == pair
        assert buffer.last_known_device_state == SetpointPair(heat=60, cool=80)
        return _result(zone_id, written)

    writer.side_effect = external_change
    buffer.request_write(pair)
    await buffer.async_flush()

    # The completed write is committed.
    assert buffer.last_known_device_state == pair


async def test_write_fails(buffer: CoalescingWriteBuffer, writer: AsyncMock):
    """Test that failed setpoints are pending again."""

    pair = SetpointPair(heat=68, cool=74)
    writer.side_effect = TransportError("Offline")
    buffer.request_write(pair)

    with pytest.raises(TransportError):
        await buffer.async_flush()

    assert buffer.pending == pair
    assert buffer.in_flight is None
    assert buffer.last_known_device_state is None

    writer.side_effect = _result
    await buffer.async_flush()

    assert writer.await_count == 2
    assert buffer.last_known_device_state == pair


async def test_write_fails_with_newer_request(buffer: CoalescingWriteBuffer, writer: AsyncMock):
    """Test that a failed write does not replace a request that arrived while it was in flight."""

    newer = SetpointPair(heat=70, cool=74)

    async def fail(zone_id: int, written: SetpointPair) -> WriteResult:
        buffer.request_write(newer)
        raise TransportError("Offline")

    writer.side_effect = fail
    buffer.request_write(SetpointPair(heat=68, cool=74))

    with pytest.raises(TransportError):
        await buffer.async_flush()

    assert buffer.pending == newer


async def test_debounced_write_fails(
    buffer: CoalescingWriteBuffer, writer: AsyncMock, events: list[DiagnosticEvent]
):
    """Test that a failing debounced write is reported."""

    writer.side_effect = TransportError("Offline")
    buffer.request_write(SetpointPair(heat=68, cool=74))

    await _debounce()

    assert buffer.pending == SetpointPair(heat=68, cool=74)
    (event,) = events
    assert event.kind == DiagnosticKind.WRITE_FAILED
    assert event.zone_id == 0


async def test_request_while_in_flight(buffer: CoalescingWriteBuffer, writer: AsyncMock):
    """Test that a request during a write does not cancel it, and is written afterwards."""

    release = asyncio.Event()
    first = SetpointPair(heat=68, cool=74)
    second = SetpointPair(heat=69, cool=74)

    async def slow_write(zone_id: int, written: SetpointPair) -> WriteResult:
        if written == first:
            await release.wait()
        return _result(zone_id, written)

    writer.side_effect = slow_write

    buffer.request_write(first)
    await _debounce()
    assert buffer.in_flight == first

    buffer.request_write(second)
    await _debounce()

    # The second flush waits for the first one.
    assert writer.await_count == 1
    assert buffer.in_flight == first

    release.set()
    await _debounce()

    assert [c.args for c in writer.await_args_list] == [(0, first), (0, second)]
    assert buffer.last_known_device_state == second


async def test_shutdown(buffer: CoalescingWriteBuffer, writer: AsyncMock):
    """Test that shutting down cancels a pending write."""

    buffer.request_write(SetpointPair(heat=68, cool=74))
    await buffer.async_shutdown()
    await _debounce()

    writer.assert_not_awaited()
