"""
Time and calendar helpers.

The current date is never read from the system directly: entry points take a
Clock, production wiring passes a RealClock and tests pass a FrozenClock.
"""

import calendar
from datetime import date, timedelta

from src.core.exceptions.backtest import CalculationError


class RealClock:
    """Clock that returns the actual current system date."""

    def today(self) -> date:
        """Return the current local date."""
        return date.today()


class FrozenClock:
    """Clock that always returns a fixed date (for deterministic tests)."""

    def __init__(self, today: date) -> None:
        self._today = today

    def today(self) -> date:
        """Return the frozen date."""
        return self._today

    def __repr__(self) -> str:
        return f"FrozenClock({self._today.isoformat()})"


def next_year_month(year: int, month: int) -> tuple[int, int]:
    """Get the (year, month) pair following the given one."""
    if month == 12:
        return year + 1, 1
    return year, month + 1


def last_day_of_month(year: int, month: int) -> date:
    """Get the last date of a month."""
    return date(year, month, calendar.monthrange(year, month)[1])


def next_capitalization_date(current: date, capitalization_day: int) -> date:
    """Get the next monthly capitalization date.

    Capitalization happens on the deposit's opening day of month; months that
    are too short capitalize on their last day instead, and the following
    month returns to the original day.

    Args:
        current: Current capitalization date
        capitalization_day: Day of month the deposit was opened on

    Returns:
        Next capitalization date

    Raises:
        CalculationError: If `current` can't be a capitalization date for the given day
    """
    is_clamped = current.day < capitalization_day and (current + timedelta(days=1)).month != current.month
    if current.day != capitalization_day and not is_clamped:
        raise CalculationError(
            f"Got an unexpected current capitalization date ({current.isoformat()}) "
            f"for capitalization day {capitalization_day}"
        )

    year, month = next_year_month(current.year, current.month)
    last_day = last_day_of_month(year, month)
    return last_day.replace(day=min(capitalization_day, last_day.day))
