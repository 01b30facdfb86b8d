"""
Timezone-aware datetime and calendar-date utilities.

This module provides utilities for working with timezone-aware datetimes
and the date-only values used for milestone scheduling.
"""

from datetime import date, datetime, timezone
from typing import Union
from zoneinfo import ZoneInfo

# UTC timezone constant
UTC = timezone.utc


def now_utc() -> datetime:
    """
    Get current UTC datetime (timezone-aware).

    Returns:
        datetime: Current UTC time with tzinfo set to UTC
    """
    return datetime.now(UTC)


def get_today(tz_name: str) -> date:
    """
    Get today's date in the given timezone.

    Args:
        tz_name: IANA timezone name (e.g., "Asia/Tokyo", "UTC")

    Returns:
        date: Today's date in that timezone

    Example:
        >>> get_today("Asia/Tokyo")  # When UTC is 2024-01-19 23:00
        date(2024, 1, 20)  # JST is 2024-01-20 08:00
    """
    return datetime.now(UTC).astimezone(ZoneInfo(tz_name)).date()


def parse_date(value: Union[date, datetime, str]) -> date:
    """
    Coerce a target-date input to a calendar date.

    Accepts ``date``, ``datetime`` (time part dropped) or an ISO 8601 string
    ("2024-06-01" or "2024-06-01T09:00:00Z").

    Raises:
        ValueError: If the string cannot be parsed
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = value.strip()
    if len(text) == 10:
        return date.fromisoformat(text)
    return datetime.fromisoformat(text.replace("Z", "+00:00")).date()


def days_between(start: date, end: date) -> int:
    """Signed number of days from ``start`` to ``end``."""
    return (end - start).days
