"""Tests for the heartbeat loop scheduling."""

import asyncio
import logging
from unittest.mock import AsyncMock

import pytest

from src.core.event_loop import next_boundary, start_main_loop
from src.ports.delivery import DeliveryError
from src.ports.event import EventRecord
from src.ports.settings import SettingsPort

__all__ = []

PERIOD = 0.01


def make_settings(period: float = PERIOD, label: str = "test") -> SettingsPort:
    """Build settings for a fast loop."""
    return SettingsPort(
        period_in_sec=period,
        sink="http://test",
        source="https://example/1",
        event_type="demo.type",
        label=label,
    )


class RecordingSink:
    """Delivery stub that records events and stops the loop after N sends."""

    def __init__(self, stop: asyncio.Event, n: int, fail_on: set[int] | None = None) -> None:
        self.stop = stop
        self.n = n
        self.fail_on = fail_on or set()
        self.events: list[EventRecord] = []

    async def send(self, event: EventRecord) -> None:
        """Record event, stop after n sends, fail on selected sequences."""
        self.events.append(event)
        if len(self.events) >= self.n:
            self.stop.set()
        if event.sequence in self.fail_on:
            raise DeliveryError(f"sink rejected {event.sequence}")


@pytest.mark.asyncio
async def test_event_loop_sends_increasing_sequences() -> None:
    """Three ticks should deliver sequences 1, 2, 3 with the same metadata."""
    stop = asyncio.Event()
    sink = RecordingSink(stop, n=3)

    await asyncio.wait_for(start_main_loop(make_settings(), sink.send, stop), timeout=5)

    assert [e.data for e in sink.events] == [
        {"sequence": 1, "label": "test"},
        {"sequence": 2, "label": "test"},
        {"sequence": 3, "label": "test"},
    ]
    assert {(e.source, e.type) for e in sink.events} == {("https://example/1", "demo.type")}
    assert all(e.extensions == sink.events[0].extensions for e in sink.events)


@pytest.mark.asyncio
async def test_event_loop_does_not_tick_immediately() -> None:
    """No event should be sent before the first period has elapsed."""
    stop = asyncio.Event()
    stop.set()
    deliver = AsyncMock()

    await start_main_loop(make_settings(period=60), deliver, stop)

    deliver.assert_not_called()


@pytest.mark.asyncio
async def test_event_loop_waits_full_period_before_first_tick() -> None:
    """First event should be sent one full period after start."""
    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    sent_at: list[float] = []

    async def deliver(event: EventRecord) -> None:
        sent_at.append(loop.time())
        stop.set()

    started = loop.time()
    await asyncio.wait_for(start_main_loop(make_settings(period=0.2), deliver, stop), timeout=5)

    assert len(sent_at) == 1
    assert sent_at[0] - started >= 0.19


@pytest.mark.asyncio
async def test_event_loop_fires_one_pending_tick_after_overrun() -> None:
    """A slow delivery leaves one tick pending and drops the other missed ones."""
    period = 0.1
    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    sent_at: list[float] = []
    first_done: list[float] = []

    async def deliver(event: EventRecord) -> None:
        sent_at.append(loop.time() - started)
        if event.sequence == 1:
            await asyncio.sleep(2.5 * period)
            first_done.append(loop.time() - started)
        if event.sequence == 4:
            stop.set()

    started = loop.time()
    await asyncio.wait_for(start_main_loop(make_settings(period=period), deliver, stop), timeout=5)

    assert len(sent_at) == 4
    assert sent_at[0] == pytest.approx(period, abs=0.04)
    # Pending tick fires right after the slow delivery returns
    assert sent_at[1] - first_done[0] < 0.04
    # Boundaries at 0.2 and 0.3 are dropped, no catch-up burst
    assert sent_at[2] == pytest.approx(4 * period, abs=0.04)
    assert sent_at[3] == pytest.approx(5 * period, abs=0.04)


@pytest.mark.asyncio
async def test_event_loop_continues_after_delivery_failure(caplog) -> None:
    """A failed tick should be logged and not disturb the counter."""
    stop = asyncio.Event()
    sink = RecordingSink(stop, n=3, fail_on={2})

    with caplog.at_level(logging.WARNING, logger="src.core.event_loop"):
        await asyncio.wait_for(start_main_loop(make_settings(), sink.send, stop), timeout=5)

    assert [e.sequence for e in sink.events] == [1, 2, 3]
    assert "Failed to send event 2: sink rejected 2" in caplog.text


@pytest.mark.asyncio
async def test_event_loop_survives_unexpected_errors(caplog) -> None:
    """Unexpected delivery errors should be logged at ERROR and not stop the loop."""
    stop = asyncio.Event()
    calls: list[int] = []

    async def deliver(event: EventRecord) -> None:
        calls.append(event.sequence)
        if len(calls) >= 2:
            stop.set()
        raise RuntimeError("Connection failed")

    with caplog.at_level(logging.ERROR, logger="src.core.event_loop"):
        await asyncio.wait_for(start_main_loop(make_settings(), deliver, stop), timeout=5)

    assert calls == [1, 2]
    assert "Connection failed" in caplog.text


@pytest.mark.asyncio
async def test_event_loop_runs_until_cancelled_without_stop() -> None:
    """Without a stop event the loop only ends when its task is cancelled."""
    deliver = AsyncMock()
    task = asyncio.create_task(start_main_loop(make_settings(), deliver))

    await asyncio.sleep(PERIOD * 10)
    assert not task.done()

    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task
    assert deliver.await_count >= 1


@pytest.mark.asyncio
async def test_event_loop_rejects_non_positive_period() -> None:
    """A zero period cannot be scheduled."""
    with pytest.raises(ValueError, match="must be positive"):
        await start_main_loop(make_settings(period=0), AsyncMock(), asyncio.Event())


def test_next_boundary_on_time() -> None:
    """A tick consumed on time schedules the following boundary."""
    assert next_boundary(10.0, 10.0, 5.0) == 15.0
    assert next_boundary(10.0, 9.9, 5.0) == 15.0


def test_next_boundary_drops_missed_ticks() -> None:
    """Ticks missed during a long cycle are not caught up."""
    # Tick at 10 consumed at 22: boundaries 15 and 20 are gone, next is 25
    assert next_boundary(10.0, 22.0, 5.0) == 25.0
    assert next_boundary(10.0, 14.0, 5.0) == 15.0
