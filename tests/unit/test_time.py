"""
Unit tests for time and calendar helpers.
"""

from datetime import date

import pytest

from src.core.exceptions.backtest import CalculationError
from src.core.utils.time import FrozenClock, RealClock, last_day_of_month, next_capitalization_date


class TestClocks:
    """Test suite for clock implementations."""

    def test_should_return_frozen_date(self) -> None:
        clock = FrozenClock(date(2021, 1, 1))

        assert clock.today() == date(2021, 1, 1)
        assert repr(clock) == "FrozenClock(2021-01-01)"

    def test_should_return_system_date(self) -> None:
        assert RealClock().today() == date.today()


class TestCapitalizationDates:
    """Test suite for monthly capitalization dates."""

    def test_should_capitalize_on_opening_day(self) -> None:
        assert next_capitalization_date(date(2020, 1, 15), 15) == date(2020, 2, 15)

    def test_should_clamp_to_short_months_and_return(self) -> None:
        assert next_capitalization_date(date(2021, 1, 31), 31) == date(2021, 2, 28)
        assert next_capitalization_date(date(2021, 2, 28), 31) == date(2021, 3, 31)

    def test_should_roll_over_year(self) -> None:
        assert next_capitalization_date(date(2020, 12, 31), 31) == date(2021, 1, 31)

    def test_should_reject_unexpected_date(self) -> None:
        with pytest.raises(CalculationError, match="unexpected current capitalization date"):
            next_capitalization_date(date(2021, 1, 15), 31)

    def test_should_find_last_day_of_month(self) -> None:
        assert last_day_of_month(2020, 2) == date(2020, 2, 29)
