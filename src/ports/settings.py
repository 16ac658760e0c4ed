"""Settings port definition (DTO)."""

from dataclasses import dataclass

__all__ = ["SettingsPort"]


@dataclass(frozen=True)
class SettingsPort:
    """Runtime settings for the core loop.

    Resolved once at startup and never mutated afterwards.

    Attributes:
        period_in_sec: Seconds between heartbeats.
        sink: URL where events are sent.
        source: Event source (explicit or derived from pod identity).
        event_type: Event type tag.
        label: Label attached to every event.
        send_timeout_in_sec: Optional per-request delivery timeout; None disables it.
    """

    period_in_sec: float
    sink: str
    source: str
    event_type: str
    label: str = ""
    send_timeout_in_sec: float | None = None
