"""Heartbeat envelope construction."""

import ast
from urllib.parse import urlsplit

from src.ports.event import EventRecord

__all__ = ["build_event", "derive_source", "is_uri_reference", "unquote_label"]

DEFAULT_SOURCE_BASE = "https://knative.dev/eventing-contrib/cmd/heartbeats/"


def _is_single_quoted(raw: str) -> bool:
    """Check that raw is one double-quoted literal with no bare quotes inside."""
    if len(raw) < 2 or raw[0] != '"' or raw[-1] != '"' or raw.startswith('"""'):
        return False
    escaped = False
    for ch in raw[1:-1]:
        if escaped:
            escaped = False
        elif ch == "\\":
            escaped = True
        elif ch == '"':
            return False
    return not escaped


def unquote_label(raw: str) -> str:
    """Strip literal double quotes from a label.

    Quoted labels are unescaped with Python string-literal rules, so
    '"a\\tb"' becomes 'a<TAB>b'. Anything but a single well-formed
    literal (concatenations, trailing comments, triple quotes) returns
    the input as is.

    Args:
        raw: Label as supplied by the user.

    Returns:
        The unquoted label, or raw when it is not a valid quoted string.
    """
    if not _is_single_quoted(raw):
        return raw
    try:
        node = ast.parse(raw, mode="eval").body
    except (ValueError, SyntaxError):
        return raw
    if not isinstance(node, ast.Constant) or not isinstance(node.value, str):
        return raw
    return node.value


def derive_source(name: str, namespace: str) -> str:
    """Build the default event source from pod identity.

    Args:
        name: Pod name.
        namespace: Pod namespace.

    Returns:
        Source URI embedding '<namespace>/<name>' as fragment.
    """
    return f"{DEFAULT_SOURCE_BASE}#{namespace}/{name}"


def is_uri_reference(value: str) -> bool:
    """Check that value can be used as an event source."""
    if not value or any(ch.isspace() or not ch.isprintable() for ch in value):
        return False
    try:
        urlsplit(value)
    except ValueError:
        return False
    return True


def build_event(sequence: int, label: str, source: str, event_type: str) -> EventRecord:
    """Build the envelope for one tick.

    Pure function: identical inputs yield equal records. The fixed
    extension attributes are attached by EventRecord itself.

    Args:
        sequence: Tick number (non-negative).
        label: User label; quoted labels are unescaped.
        source: Event source URI reference.
        event_type: Event type tag.

    Returns:
        Immutable event record.

    Raises:
        ValueError: If sequence is negative.
    """
    if sequence < 0:
        raise ValueError(f"sequence must be non-negative (got: {sequence})")
    return EventRecord(
        sequence=sequence,
        label=unquote_label(label),
        source=source,
        type=event_type,
    )
