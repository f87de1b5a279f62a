"""
Timezone-aware datetime utilities.

This module provides utilities for working with timezone-aware datetimes,
ensuring consistent handling across the application.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

# UTC timezone constant
UTC = timezone.utc

# Smallest step the stores we target keep without rounding
TIMESTAMP_RESOLUTION = timedelta(microseconds=1)


def now_utc() -> datetime:
    """
    Get current UTC datetime (timezone-aware).

    Replaces datetime.utcnow() which is deprecated in Python 3.12+.

    Returns:
        datetime: Current UTC time with tzinfo set to UTC
    """
    return datetime.now(UTC)


def ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """
    Ensure datetime is timezone-aware and in UTC.

    Args:
        dt: datetime to convert (can be None, naive, or timezone-aware)

    Returns:
        Optional[datetime]: UTC timezone-aware datetime, or None if input is None
    """
    if dt is None:
        return None

    if dt.tzinfo is None:
        # Naive datetime - assume UTC (SQLite drops tzinfo)
        return dt.replace(tzinfo=UTC)

    # Already timezone-aware - convert to UTC
    return dt.astimezone(UTC)


def next_after(previous: Optional[datetime], candidate: Optional[datetime] = None) -> datetime:
    """
    Return a timestamp strictly later than ``previous``.

    Uses ``candidate`` (default: now) when it is already later, otherwise
    bumps ``previous`` by one resolution step. Keeps append order and
    timestamp order identical even when the clock does not advance.

    Example:
        >>> t = datetime(2024, 1, 20, 9, 0, tzinfo=UTC)
        >>> next_after(t, t)
        datetime(2024, 1, 20, 9, 0, 0, 1, tzinfo=timezone.utc)
    """
    current = ensure_utc(candidate) or now_utc()
    last = ensure_utc(previous)
    if last is not None and current <= last:
        return last + TIMESTAMP_RESOLUTION
    return current
