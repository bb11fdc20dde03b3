"""
Date utility functions.
"""

from datetime import UTC, datetime


def utcnow() -> datetime:
    """
    Return timezone-aware UTC datetime.

    Replaces deprecated datetime.utcnow() which is scheduled for removal in Python 3.14.
    See: https://docs.python.org/3/library/datetime.html#datetime.datetime.utcnow
    """
    return datetime.now(UTC)


def ensure_aware(value: datetime) -> datetime:
    """
    Attach UTC to naive datetimes.

    MongoDB returns naive datetimes unless the client is tz-aware, so every
    timestamp is normalized before arithmetic.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def hours_between(start: datetime, end: datetime) -> float:
    """Elapsed hours from start to end (negative if end precedes start)."""
    return (ensure_aware(end) - ensure_aware(start)).total_seconds() / 3600
