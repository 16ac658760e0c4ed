"""Main event loop that periodically emits heartbeat events."""

import asyncio
import logging
import math
from collections.abc import Awaitable, Callable

from src.core.envelope import build_event
from src.ports.delivery import DeliveryError
from src.ports.event import EventRecord
from src.ports.settings import SettingsPort

__all__ = ["start_main_loop", "get_now_time", "next_boundary"]

logger = logging.getLogger(__name__)


def get_now_time() -> float:
    """Get current monotonic time in seconds.

    Uses event loop's monotonic clock for accurate scheduling
    without wall-clock drift.

    Returns:
        Current time in seconds (monotonic).
    """
    return asyncio.get_running_loop().time()


def next_boundary(consumed_tick: float, consumed_at: float, period: float) -> float:
    """Return the first tick boundary strictly after consumed_at.

    Boundaries missed while a cycle was running are dropped, except the
    one that was pending when the cycle ended (already consumed here).

    Args:
        consumed_tick: Boundary whose tick was just consumed.
        consumed_at: Time at which the tick was consumed.
        period: Tick period in seconds (positive).

    Returns:
        Time of the next boundary.
    """
    if consumed_at < consumed_tick:
        return consumed_tick + period
    missed = math.floor((consumed_at - consumed_tick) / period)
    return consumed_tick + (missed + 1) * period


async def _wait_for_tick(stop: asyncio.Event | None, delay: float) -> bool:
    """Wait until the next tick or until stop is set.

    Returns:
        True if the loop should stop.
    """
    if stop is None:
        await asyncio.sleep(delay)
        return False
    if stop.is_set():
        return True
    try:
        await asyncio.wait_for(stop.wait(), timeout=delay)
    except asyncio.TimeoutError:
        return False
    return True


async def start_main_loop(
    settings: SettingsPort,
    deliver: Callable[[EventRecord], Awaitable[None]],
    stop: asyncio.Event | None = None,
) -> None:
    """Run the heartbeat loop.

    Every period:
    1. Wait for the next tick boundary (the first tick fires one full
       period after start).
    2. Increment the sequence number and build the event.
    3. Await delivery; failures are logged and never stop the loop.

    Args:
        settings: Runtime configuration (period, source, type, label).
        deliver: Async function used to send one event.
        stop: Optional event that ends the loop when set. Without it the
            loop runs until the task is cancelled.

    Notes:
        - Delivery is awaited in-line: a slow sink delays the next wait.
        - If a cycle overruns the period, one tick is pending and fires
          right away; further missed ticks are dropped, not caught up.
    """
    period = settings.period_in_sec
    if period <= 0:
        raise ValueError(f"period_in_sec must be positive (got: {period})")

    sequence = 0
    next_tick: float = get_now_time() + period

    while True:
        if await _wait_for_tick(stop, max(0.0, next_tick - get_now_time())):
            logger.info(f"Heartbeat loop stopped after {sequence} events.")
            return
        next_tick = next_boundary(next_tick, get_now_time(), period)

        sequence += 1
        event = build_event(
            sequence=sequence,
            label=settings.label,
            source=settings.source,
            event_type=settings.event_type,
        )

        try:
            await deliver(event)
        except DeliveryError as e:
            logger.warning(f"Failed to send event {sequence}: {e}")
        except Exception as e:  # noqa: BLE001
            logger.error(f"Unexpected error sending event {sequence}: {e}", exc_info=True)
        else:
            logger.debug(f"Sent event {sequence}")
