"""Time utility helpers for consistent timezone handling."""

from datetime import UTC, datetime


def ensure_utc(dt: datetime) -> datetime:
    """Return datetime guaranteed to be timezone-aware in UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def epoch_to_utc(epoch: float) -> datetime:
    """Convert a Unix epoch in seconds to an aware UTC datetime."""
    return datetime.fromtimestamp(epoch, tz=UTC)


def utc_isoformat(dt: datetime) -> str:
    """Serialize datetime as ISO 8601 string with trailing Z."""
    return ensure_utc(dt).isoformat().replace("+00:00", "Z")
