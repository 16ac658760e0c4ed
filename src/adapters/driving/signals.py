"""Signal handling for graceful shutdown."""

import asyncio
import logging
import signal

__all__ = ["make_stop_on_sigterm"]

logger = logging.getLogger(__name__)


def make_stop_on_sigterm() -> asyncio.Event:
    """Create SIGTERM-based stop event for the heartbeat loop.

    Registers SIGTERM/SIGINT handlers that set an asyncio.Event. The
    loop waits on it between ticks, so a signal ends the wait at once
    instead of after the current period.

    Returns:
        Event that is set when a termination signal has been received.
    """
    stop = asyncio.Event()
    loop = asyncio.get_running_loop()

    def handle_signal() -> None:
        """Signal handler that sets the stop event."""
        logger.info("Termination signal received, stopping heartbeats...")
        stop.set()

    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(sig, handle_signal)

    return stop
