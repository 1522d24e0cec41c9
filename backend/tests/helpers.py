"""
Time helpers shared by the test modules.
"""

from datetime import datetime, timezone

BOOKING_DAY = (2026, 1, 10)


def at(hour: int, minute: int = 0, day: int = BOOKING_DAY[2]) -> datetime:
    """A UTC timestamp on the fixed test day (2026-01-10 by default)."""
    return datetime(BOOKING_DAY[0], BOOKING_DAY[1], day, hour, minute, tzinfo=timezone.utc)


def as_utc(value) -> datetime:
    """Parse an API timestamp; SQLite hands back naive UTC values."""
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
