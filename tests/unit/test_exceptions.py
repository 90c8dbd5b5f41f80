"""
Unit tests for the backtesting exception hierarchy.
"""

from datetime import date

import pytest

from src.core.exceptions.backtest import (
    BacktestException,
    CalculationError,
    ConfigurationError,
    DataUnavailableError,
    InputError,
    StaleDataError,
    UnsupportedCommissionError,
)


class TestExceptionHierarchy:
    """Test suite for exception inheritance."""

    @pytest.mark.parametrize(
        "error_type", [InputError, ConfigurationError, DataUnavailableError, CalculationError]
    )
    def test_should_derive_from_base_exception(self, error_type: type[Exception]) -> None:
        assert issubclass(error_type, BacktestException)

    def test_should_report_stale_data_as_unavailable_data(self) -> None:
        assert issubclass(StaleDataError, DataUnavailableError)

    def test_should_report_unsupported_commission_as_configuration_error(self) -> None:
        assert issubclass(UnsupportedCommissionError, ConfigurationError)


class TestExceptionContext:
    """Test suite for exception context attributes."""

    def test_should_keep_stale_data_context(self) -> None:
        error = StaleDataError("FXUS", date(2020, 1, 14), [date(2020, 1, 10), date(2020, 1, 20)])

        assert error.symbol == "FXUS"
        assert error.requested_date == date(2020, 1, 14)
        assert error.nearest_dates == (date(2020, 1, 10), date(2020, 1, 20))
        assert str(error) == (
            "There are no historical quotes for FXUS at 2020-01-14. "
            "The nearest quotes we have are at 2020-01-10 and 2020-01-20"
        )

    def test_should_keep_commission_context(self) -> None:
        error = UnsupportedCommissionError("S&P 500", "per share commissions are not supported")

        assert error.benchmark == "S&P 500"
        assert "S&P 500" in str(error)
        assert "per share" in str(error)
