# src/chat_insights/db/time.py
"""Time utilities for database rows."""

from datetime import UTC, datetime


def utcnow() -> datetime:
    """Return the current UTC time as a timezone-aware datetime."""
    return datetime.now(UTC)


def coerce_instant(value: object) -> datetime:
    """Return ``value`` as an aware UTC datetime.

    Accepts aware or naive datetimes (naive values are read as UTC, which is how
    SQLite hands back stored timestamps) and ISO-8601 strings, including the
    trailing ``Z`` form.

    Raises:
        ValueError: If the value is missing, cannot be parsed, or falls outside
            the range a UTC datetime can represent.
    """
    if value is None:
        raise ValueError("timestamp is missing")
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            raise ValueError("timestamp is empty")
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except OverflowError as exc:
            raise ValueError(f"timestamp out of range: {value!r}") from exc
    else:
        raise ValueError(f"unsupported timestamp type {type(value).__name__}")

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    try:
        return parsed.astimezone(UTC)
    except OverflowError as exc:
        raise ValueError(f"timestamp out of range: {value!r}") from exc
