"""UTC datetime utilities."""

from datetime import date, datetime, time, timezone
from typing import Any

from dateutil.parser import isoparse


def utc_now() -> datetime:
    """
    Return current UTC time as timezone-aware datetime.

    This function should be used instead of datetime.now() or datetime.utcnow()
    to ensure all timestamps are timezone-aware and stored in UTC.

    Returns:
        Timezone-aware datetime in UTC

    Example:
        >>> now = utc_now()
        >>> now.tzinfo
        datetime.timezone.utc
    """
    return datetime.now(timezone.utc)


def parse_datetime(value: Any) -> datetime:
    """
    Coerce a stay boundary to an aware datetime, keeping its own offset.

    Accepts ISO-8601 strings ("2026-03-01", "2026-03-01T15:00:00+01:00"),
    date and datetime objects. Dates and naive datetimes are read as UTC.
    The offset is kept so that ``.date()`` is the calendar day the caller
    wrote, not the UTC day.

    Args:
        value: Raw check-in or check-out value

    Returns:
        Timezone-aware datetime

    Raises:
        ValueError: If the value is empty or cannot be parsed
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime.combine(value, time.min)
    elif isinstance(value, str) and value.strip():
        parsed = isoparse(value.strip())
    else:
        raise ValueError(f"Unparseable date value: {value!r}")

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed
