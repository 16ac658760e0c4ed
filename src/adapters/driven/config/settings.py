"""Configuration loading from command-line flags and environment variables."""

import argparse
import logging
import os
from collections.abc import Sequence

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

from src.core.envelope import derive_source, is_uri_reference
from src.ports.settings import SettingsPort

__all__ = ["Settings", "load_settings", "parse_period", "build_parser"]

load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_PERIOD_IN_SEC = 5
DEFAULT_EVENT_TYPE = "dev.knative.eventing.samples.heartbeat"


class Settings(BaseModel, frozen=True):
    """Runtime configuration for the heartbeats service.

    Attributes:
        period_in_sec: Interval between heartbeats in seconds.
        sink: HTTP endpoint that will receive events.
        source: Event source, explicit or derived from pod identity.
        event_type: Event type tag.
        label: Label attached to every event (unquoted later).
        send_timeout_in_sec: Optional per-request delivery timeout.
    """

    period_in_sec: int = Field(..., gt=0, description="Interval between heartbeats in seconds.")
    sink: str = Field(default="", description="HTTP endpoint that will receive events.")
    source: str = Field(..., description="Event source URI reference.")
    event_type: str = Field(default=DEFAULT_EVENT_TYPE, min_length=1)
    label: str = Field(default="", description="Label attached to every event.")
    send_timeout_in_sec: float | None = Field(
        default=None,
        gt=0,
        description="Timeout for one delivery attempt. If not set, requests never time out.",
    )

    @field_validator("source")
    @classmethod
    def validate_source(cls, v: str) -> str:
        """Validate that source is a usable URI reference.

        Args:
            v: Source to validate.

        Returns:
            The validated source.

        Raises:
            ValueError: If source is empty or not a URI reference.
        """
        if not is_uri_reference(v):
            raise ValueError(f"Invalid event source: {v!r}")
        return v

    def to_port(self) -> SettingsPort:
        """Wrap settings into the port consumed by the core."""
        return SettingsPort(
            period_in_sec=self.period_in_sec,
            sink=self.sink,
            source=self.source,
            event_type=self.event_type,
            label=self.label,
            send_timeout_in_sec=self.send_timeout_in_sec,
        )


def parse_period(raw: str) -> int:
    """Parse the heartbeat period.

    Args:
        raw: Period in seconds as given on the command line.

    Returns:
        The period, or DEFAULT_PERIOD_IN_SEC if raw is not a positive integer.
    """
    try:
        period = int(raw)
    except (TypeError, ValueError):
        logger.warning(f"Invalid period {raw!r}, using {DEFAULT_PERIOD_IN_SEC}s")
        return DEFAULT_PERIOD_IN_SEC
    if period <= 0:
        logger.warning(f"Non-positive period {raw!r}, using {DEFAULT_PERIOD_IN_SEC}s")
        return DEFAULT_PERIOD_IN_SEC
    return period


def build_parser() -> argparse.ArgumentParser:
    """Create the command-line parser."""
    parser = argparse.ArgumentParser(
        prog="heartbeats",
        description="Send a heartbeat event to a sink on a fixed interval.",
    )
    parser.add_argument("--eventSource", default="", help="the event-source (CloudEvents)")
    parser.add_argument("--eventType", default=DEFAULT_EVENT_TYPE, help="the event-type (CloudEvents)")
    parser.add_argument("--sink", default="", help="the host url to heartbeat to")
    parser.add_argument("--label", default="", help="a special label")
    parser.add_argument("--period", default=str(DEFAULT_PERIOD_IN_SEC), help="the number of seconds between heartbeats")
    parser.add_argument("--send-timeout", default=None, help="optional timeout in seconds for each delivery")
    return parser


def load_settings(argv: Sequence[str] | None = None) -> Settings:
    """Load and validate settings from flags and environment.

    Required environment variables:
    - POD_NAME: Name of this pod.
    - POD_NAMESPACE: Namespace this pod exists in.

    Optional:
    - SINK: Overrides --sink when set.
    - SEND_TIMEOUT_IN_SECONDS: Overrides --send-timeout when set.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:]).

    Returns:
        Validated Settings object.

    Raises:
        RuntimeError: If required env vars missing.
        ValueError: If configuration is invalid.
    """
    args = build_parser().parse_args(list(argv) if argv is not None else None)

    try:
        pod_name = os.environ["POD_NAME"]
        pod_namespace = os.environ["POD_NAMESPACE"]
    except KeyError as e:
        raise RuntimeError(f"Missing required environment variable: {e.args[0]}") from e

    sink = os.getenv("SINK") or args.sink

    timeout_raw = os.getenv("SEND_TIMEOUT_IN_SECONDS") or args.send_timeout
    try:
        send_timeout = float(timeout_raw) if timeout_raw else None
    except ValueError as e:
        raise ValueError(f"Send timeout must be a number of seconds (got: {timeout_raw})") from e

    source = args.eventSource
    if not source:
        source = derive_source(pod_name, pod_namespace)
        logger.info(f"Heartbeats Source: {source}")

    settings = Settings(
        period_in_sec=parse_period(args.period),
        sink=sink,
        source=source,
        event_type=args.eventType,
        label=args.label,
        send_timeout_in_sec=send_timeout,
    )

    logger.info(
        f"Heartbeats configured: period={settings.period_in_sec}s, "
        f"sink={settings.sink or '<unset>'}, "
        f"type={settings.event_type}, "
        f"timeout={settings.send_timeout_in_sec or '<disabled>'}"
    )

    return settings
