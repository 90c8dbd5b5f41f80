"""
Custom exception hierarchy for the backtesting engine.

This module defines domain-specific exceptions for better error handling.
Fatal errors abort a single backtesting run; non-fatal outcomes (low solver
precision, non-computable performance) are not represented as exceptions.
"""

from collections.abc import Sequence
from datetime import date


class BacktestException(Exception):
    """Base exception for all backtesting-related errors."""

    pass


class InputError(BacktestException):
    """Raised when run inputs (cash flows, periods, chains) are invalid."""

    pass


class ConfigurationError(BacktestException):
    """Raised when configuration is invalid."""

    pass


class UnsupportedCommissionError(ConfigurationError):
    """Raised when a benchmark commission is not a simple percentage."""

    def __init__(self, benchmark: str, reason: str):
        self.benchmark = benchmark
        self.reason = reason
        super().__init__(f"Unsupported commission specification for {benchmark}: {reason}")


class DataUnavailableError(BacktestException):
    """Raised when quotes or currency rates required by a run are missing."""

    pass


class StaleDataError(DataUnavailableError):
    """Raised when the nearest known quote is too far from the requested date."""

    def __init__(self, symbol: str, requested_date: date, nearest_dates: Sequence[date]):
        self.symbol = symbol
        self.requested_date = requested_date
        self.nearest_dates = tuple(nearest_dates)
        nearest = " and ".join(day.isoformat() for day in self.nearest_dates)
        super().__init__(
            f"There are no historical quotes for {symbol} at {requested_date.isoformat()}. "
            f"The nearest quotes we have are at {nearest}"
        )


class CalculationError(BacktestException):
    """Raised when mathematical calculations fail."""

    pass
