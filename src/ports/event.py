"""Event port definition (DTO)."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

__all__ = ["EventRecord", "EXTENSIONS", "SPEC_VERSION"]

SPEC_VERSION = "0.2"

# Attached identically to every record
EXTENSIONS: Mapping[str, Any] = MappingProxyType(
    {
        "the": 42,
        "heart": "yes",
        "beats": True,
    }
)


@dataclass(slots=True, frozen=True)
class EventRecord:
    """Immutable heartbeat envelope handed to the delivery port.

    Attributes:
        sequence: Tick number, starting at 1.
        label: User label, already unquoted.
        source: URI reference identifying the emitting process.
        type: Event type tag.
        extensions: Fixed auxiliary attributes.
        spec_version: Envelope version tag.
    """

    sequence: int
    label: str
    source: str
    type: str
    extensions: Mapping[str, Any] = field(default_factory=lambda: EXTENSIONS)
    spec_version: str = SPEC_VERSION

    @property
    def data(self) -> dict[str, Any]:
        """Body payload carried by the envelope."""
        return {"sequence": self.sequence, "label": self.label}
