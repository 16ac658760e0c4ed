"""HTTP client adapter sending events in CloudEvents binary mode."""

import asyncio
import logging
import uuid
from datetime import datetime, timezone
from types import TracebackType
from typing import Any

import aiohttp
from aiohttp import ClientTimeout
from pydantic import HttpUrl, TypeAdapter, ValidationError

from src.ports.delivery import DeliveryError, DeliveryPort
from src.ports.event import EventRecord

__all__ = ["HttpClient", "build_headers"]

logger = logging.getLogger(__name__)

_http_url_adapter = TypeAdapter(HttpUrl)

HEADER_PREFIX = "ce-"
CONTENT_TYPE = "application/json"


def _header_value(value: Any) -> str:
    """Render an attribute value as a header string."""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def build_headers(event: EventRecord, event_id: str, event_time: datetime) -> dict[str, str]:
    """Map envelope attributes to binary-mode HTTP headers.

    Args:
        event: Record to encode.
        event_id: Unique id for this delivery.
        event_time: Time the event is sent.

    Returns:
        Header mapping, extensions included.
    """
    headers = {
        f"{HEADER_PREFIX}specversion": event.spec_version,
        f"{HEADER_PREFIX}type": event.type,
        f"{HEADER_PREFIX}source": event.source,
        f"{HEADER_PREFIX}id": event_id,
        f"{HEADER_PREFIX}time": event_time.isoformat().replace("+00:00", "Z"),
        "Content-Type": CONTENT_TYPE,
    }
    for name, value in event.extensions.items():
        headers[f"{HEADER_PREFIX}{name}"] = _header_value(value)
    return headers


class HttpClient(DeliveryPort):
    """Delivery adapter posting each event to a single sink.

    Features:
    - Sink validated at construction time.
    - Context manager for proper resource cleanup.
    - Optional per-request timeout (disabled by default).
    - No retries: one POST per event.
    """

    def __init__(self, sink: str, timeout_sec: float | None = None) -> None:
        """Initialize HTTP client.

        Args:
            sink: HTTP(S) URL receiving the events.
            timeout_sec: Total timeout for one request; None waits forever.

        Raises:
            DeliveryError: If the sink is not a valid HTTP(S) URL.
        """
        try:
            _http_url_adapter.validate_python(sink)
        except ValidationError as e:
            raise DeliveryError(f"Invalid sink {sink!r}: {e}") from e
        self.sink = sink
        self.timeout = ClientTimeout(total=timeout_sec)
        self.session: aiohttp.ClientSession | None = None

    async def __aenter__(self) -> "HttpClient":
        """Enter async context manager (start session).

        Returns:
            Self for use in async with statement.
        """
        self.session = aiohttp.ClientSession(timeout=self.timeout)
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        """Exit async context manager (close session)."""
        if self.session:
            await self.session.close()

    async def send(self, event: EventRecord) -> None:
        """POST one event to the sink.

        Args:
            event: Record to send.

        Raises:
            RuntimeError: If session not initialized.
            DeliveryError: On network errors, timeouts or non-2xx responses.
        """
        if self.session is None:
            raise RuntimeError("Session not initialized; use 'async with' context manager")

        headers = build_headers(event, str(uuid.uuid4()), datetime.now(timezone.utc))
        try:
            async with self.session.post(self.sink, json=event.data, headers=headers) as resp:
                logger.debug(f"POST {self.sink} returned status {resp.status}")
                if not 200 <= resp.status < 300:
                    body = await resp.text(errors="replace")
                    raise DeliveryError(f"{self.sink} responded {resp.status}: {body[:200]}")
        except aiohttp.ClientError as e:
            raise DeliveryError(f"Request to {self.sink} failed: {e}") from e
        except asyncio.TimeoutError as e:
            raise DeliveryError(f"Request to {self.sink} timed out") from e
