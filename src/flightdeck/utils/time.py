"""Time utilities shared by the services."""

from collections.abc import Callable
from datetime import UTC, datetime

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    """Return the current UTC time as a timezone-aware datetime."""
    return datetime.now(UTC)


def to_iso(moment: datetime) -> str:
    """Render a timestamp in the ISO-8601 form stored and returned by the API."""
    return moment.astimezone(UTC).isoformat(timespec="seconds")


def parse_iso(value: object) -> datetime | None:
    """Parse a stored ISO-8601 timestamp, returning None when malformed."""
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed
