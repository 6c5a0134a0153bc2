"""Centralized Timezone Utilities - All message timestamps should use these functions."""

from datetime import datetime, timezone

UTC = timezone.utc


def utc_now() -> datetime:
    """Return timezone-aware UTC datetime."""
    return datetime.now(UTC)


def epoch_millis(dt: datetime) -> int:
    """Milliseconds since the Unix epoch for a datetime."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return int(dt.timestamp() * 1000)


def format_local_time(dt: datetime) -> str:
    """Format datetime as a server-local time-of-day string for chat display."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.astimezone().strftime("%H:%M:%S")
