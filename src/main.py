"""Application entrypoint."""

import asyncio
import logging
from collections.abc import Sequence

from src.adapters.driven.config.settings import load_settings
from src.adapters.driven.http.client import HttpClient
from src.adapters.driven.logging.logging_config import configure_logs
from src.adapters.driving.signals import make_stop_on_sigterm
from src.core.event_loop import start_main_loop
from src.ports.delivery import DeliveryError

__all__ = ["main", "run"]

logger = logging.getLogger(__name__)


async def main(argv: Sequence[str] | None = None) -> int:
    """Start the heartbeats service.

    Startup sequence:
    1. Configure logging.
    2. Load and validate configuration (flags + environment).
    3. Create the HTTP client bound to the sink.
    4. Run the heartbeat loop until SIGTERM/SIGINT.

    Args:
        argv: Command-line flags (defaults to sys.argv[1:]).

    Returns:
        Process exit status: 1 on startup failure, 0 after a requested stop.
    """
    configure_logs()
    logger.info("Starting heartbeats service...")

    try:
        config = load_settings(argv)
    except (RuntimeError, ValueError) as exc:
        logger.error(
            "Configuration error: %s\n"
            "Hint: check POD_NAME, POD_NAMESPACE and the --eventSource flag.",
            exc,
        )
        return 1

    settings_port = config.to_port()

    try:
        http_client = HttpClient(settings_port.sink, timeout_sec=settings_port.send_timeout_in_sec)
    except DeliveryError as exc:
        logger.error(f"Failed to create client: {exc}")
        return 1

    async with http_client as http:
        await start_main_loop(
            settings=settings_port,
            deliver=http.send,
            stop=make_stop_on_sigterm(),
        )

    logger.info("Heartbeats stopped.")
    return 0


def run() -> None:
    """Console script entrypoint."""
    try:
        raise SystemExit(asyncio.run(main()))
    except KeyboardInterrupt:
        logger.info("Shutdown requested by user (Ctrl+C).")


if __name__ == "__main__":
    run()
