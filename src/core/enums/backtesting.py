"""
Backtesting enumerations.

This module defines benchmark transition types, performance calculation
methods and simulation stepping modes.
"""

from enum import StrEnum


class TransitionType(StrEnum):
    """
    Kinds of benchmark instrument transitions.

    A rename keeps the held quantity, a conversion models a sale of the old
    instrument followed by a purchase of the new one.
    """

    CONVERT = "convert"
    RENAME = "rename"


class BenchmarkPerformanceType(StrEnum):
    """Methods of turning a cash-flow history into a performance figure."""

    VIRTUAL = "virtual"
    INFLATION_ADJUSTED = "inflation-adjusted"

    @classmethod
    def from_string(cls, value: str) -> "BenchmarkPerformanceType":
        """Convert string to performance type, accepting underscores."""
        normalized = value.lower().replace("_", "-")
        try:
            return cls(normalized)
        except ValueError:
            raise ValueError(
                f"Unsupported performance type: {value}. "
                f"Supported types: {', '.join([t.value for t in cls])}"
            ) from None


class SteppingMode(StrEnum):
    """
    Backtester stepping modes.

    FULL closes every day and records a daily series, FAST jumps between
    event dates and records only the final snapshot.
    """

    FULL = "full"
    FAST = "fast"

    @property
    def records_every_day(self) -> bool:
        """Check if every simulated day produces a result."""
        return self == self.FULL
