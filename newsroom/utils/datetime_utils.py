"""Datetime conversion utilities."""

from datetime import UTC, date, datetime


def datetime_to_iso(value: datetime | None) -> str | None:
    """Convert a datetime to an ISO-8601 string, or None."""
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).isoformat()


def to_iso(value: object) -> str | None:
    """Normalize a stored date/time value to an ISO-8601 UTC string.

    Accepts datetimes, dates, ISO strings and Unix timestamps. Anything
    that cannot be interpreted yields None instead of raising.
    """
    if value is None or isinstance(value, bool):
        return None
    try:
        if isinstance(value, datetime):
            return datetime_to_iso(value)
        if isinstance(value, date):
            return datetime_to_iso(datetime(value.year, value.month, value.day))
        if isinstance(value, int | float):
            return datetime.fromtimestamp(value, tz=UTC).isoformat()
        if isinstance(value, str):
            stripped = value.strip()
            if not stripped:
                return None
            return datetime_to_iso(datetime.fromisoformat(stripped))
    except (ValueError, OverflowError, OSError):
        return None
    return None
