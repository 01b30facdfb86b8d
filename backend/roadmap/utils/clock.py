"""
Clock implementations.
"""

from datetime import date, datetime, time
from typing import Optional

from roadmap.core.config import get_settings
from roadmap.interfaces.clock import IClock
from roadmap.utils.datetime_utils import UTC, get_today, now_utc


class SystemClock(IClock):
    """Wall clock; "today" is taken in the configured application timezone."""

    def __init__(self, tz_name: Optional[str] = None):
        self._tz_name = tz_name or get_settings().APP_TIMEZONE

    def now(self) -> datetime:
        return now_utc()

    def today(self) -> date:
        return get_today(self._tz_name)


class FixedClock(IClock):
    """Clock pinned to a given date, for scripts and tests."""

    def __init__(self, today: date, now: Optional[datetime] = None):
        self._today = today
        self._now = now or datetime.combine(today, time(9, 0), tzinfo=UTC)

    def now(self) -> datetime:
        return self._now

    def today(self) -> date:
        return self._today

    def set(self, today: date) -> None:
        """Move the clock to another day."""
        self._today = today
        self._now = datetime.combine(today, time(9, 0), tzinfo=UTC)
