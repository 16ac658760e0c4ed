"""Console logging setup for the heartbeats service."""

import logging
import os

__all__ = ["configure_logs"]

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s:%(lineno)d - %(message)s"
DATE_FORMAT = "%d/%m/%y %H:%M:%S"
DEFAULT_APP_LEVEL = "DEBUG"

_handler: logging.Handler | None = None


def configure_logs(level: str | None = None) -> None:
    """Configure console logging.

    Sets up:
    - Root logger at INFO level with a single console handler.
    - Framework loggers (aiohttp, asyncio) at WARNING level.
    - Application loggers (src) at the given level, LOG_LEVEL, or DEBUG.
      Unknown level names fall back to DEBUG with a warning.

    Calling it twice does not duplicate the handler.

    Args:
        level: Level name for application loggers.
    """
    global _handler

    root = logging.getLogger()
    root.setLevel(logging.INFO)
    if _handler is None:
        _handler = logging.StreamHandler()
        _handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
        root.addHandler(_handler)

    logging.getLogger("aiohttp").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)

    app_level = (level or os.getenv("LOG_LEVEL") or DEFAULT_APP_LEVEL).upper()
    if app_level not in logging.getLevelNamesMapping():
        logging.getLogger(__name__).warning(
            f"Unknown log level {app_level!r}, using {DEFAULT_APP_LEVEL}"
        )
        app_level = DEFAULT_APP_LEVEL
    logging.getLogger("src").setLevel(app_level)
