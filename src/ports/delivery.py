"""Delivery port definition (interface and error)."""

from __future__ import annotations

from typing import Protocol

from src.ports.event import EventRecord

__all__ = ["DeliveryError", "DeliveryPort"]


class DeliveryError(Exception):
    """Raised when an event could not be delivered to the sink."""


class DeliveryPort(Protocol):
    """Interface for sending one event to the configured destination.

    Implementations return normally on success and raise DeliveryError
    with a descriptive message otherwise. The core awaits every call
    before scheduling the next tick.
    """

    async def send(self, event: EventRecord, /) -> None:
        """Deliver a single event.

        Args:
            event: Fully built record to transmit.

        Raises:
            DeliveryError: If the event was not accepted.
        """
        ...
