"""Healthcheck validator for container orchestration."""

import logging
from collections.abc import Sequence

from src.adapters.driven.config.settings import load_settings
from src.adapters.driven.http.client import HttpClient
from src.adapters.driven.logging.logging_config import configure_logs
from src.ports.delivery import DeliveryError

__all__ = ["main"]

logger = logging.getLogger(__name__)


def main(argv: Sequence[str] | None = None) -> int:
    """Check that the service could start with the current configuration.

    Validates:
    - POD_NAME and POD_NAMESPACE are set.
    - The event source (explicit or derived) is a valid URI reference.
    - The sink is a valid HTTP(S) URL.

    Args:
        argv: Command-line flags, as given to the service.

    Returns:
        0 if healthy, 1 if unhealthy.
    """
    configure_logs()

    try:
        settings = load_settings(argv)
        _ = HttpClient(settings.sink)
    except (RuntimeError, ValueError, DeliveryError) as exc:
        logger.error(f"Heartbeats healthcheck FAILED: {exc}")
        return 1

    logger.info("Heartbeats healthcheck OK")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
