"""
UTC datetime utilities for consistent timezone handling.

All datetime values in the engine should be timezone-aware UTC.
Use these helpers instead of datetime.now() or datetime.utcnow().
"""

from datetime import UTC, datetime, timedelta


def utc_now() -> datetime:
    """
    Return the current UTC datetime with timezone info.

    Returns:
        Timezone-aware datetime in UTC
    """
    return datetime.now(UTC)


def ensure_utc(dt: datetime | None) -> datetime | None:
    """
    Ensure a datetime is UTC-aware.

    - If None, returns None
    - If naive, assumes UTC and attaches timezone
    - If aware, converts to UTC

    Use at repository/persistence boundaries and when parsing payload values.
    """
    if dt is None:
        return None

    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)

    return dt.astimezone(UTC)


def from_timestamp_ms_utc(timestamp_ms: int | float) -> datetime:
    """
    Create a UTC-aware datetime from a millisecond Unix timestamp.
    Common in JavaScript event sources that send epoch milliseconds.
    """
    return datetime.fromtimestamp(timestamp_ms / 1000, tz=UTC)


def add_days(value: datetime, days: int) -> datetime:
    """Return value shifted by a whole number of days (keeps tzinfo)."""
    return value + timedelta(days=days)


def year_month_prefix(value: datetime) -> str:
    """Return YYYYMM for value (used in tenant-scoped invoice numbers)."""
    return f"{value.year}{value.month:02d}"
