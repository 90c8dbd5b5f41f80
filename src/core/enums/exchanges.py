"""
Exchange enumerations.

This module defines the exchanges benchmark instruments are traded on together
with their quote staleness rules.
"""

from datetime import date, timedelta
from enum import StrEnum


class Exchange(StrEnum):
    """
    Supported exchanges.

    Each exchange knows how old its last quote may be relative to a given date
    before it is considered stale (weekends and public holidays).
    """

    MOEX = "moex"
    SPB = "spb"
    US = "us"

    def min_last_working_day(self, day: date) -> date:
        """
        Get the earliest date the last trading session before `day` may fall on.

        Args:
            day: Date the quote is requested for

        Returns:
            Oldest acceptable quote date
        """
        if self in (Exchange.MOEX, Exchange.SPB):
            # Russian new year and May holidays
            if day.month == 1 and day.day < 10:
                return date(day.year - 1, 12, 30)
            if day.month in (3, 5) and day.day < 13:
                return day - timedelta(days=5)
            return day - timedelta(days=3)

        # A weekend adjacent to a public holiday
        return day - timedelta(days=4)

    @classmethod
    def from_string(cls, value: str) -> "Exchange":
        """
        Convert string to Exchange enum, with case-insensitive matching.

        Raises:
            ValueError: If exchange is not supported
        """
        try:
            return cls(value.lower())
        except ValueError:
            raise ValueError(
                f"Unsupported exchange: {value}. "
                f"Supported exchanges: {', '.join([e.value for e in cls])}"
            ) from None
