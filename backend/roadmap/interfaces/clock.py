"""
Clock interface.

Services ask the clock for "today" instead of reading the system time.
"""

from abc import ABC, abstractmethod
from datetime import date, datetime


class IClock(ABC):
    """Injectable time source."""

    @abstractmethod
    def now(self) -> datetime:
        """Current timezone-aware UTC datetime."""
        pass

    @abstractmethod
    def today(self) -> date:
        """Current calendar date in the application timezone."""
        pass
