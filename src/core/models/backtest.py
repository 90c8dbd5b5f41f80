"""
Backtesting results models.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal

import pandas as pd

from src.core.enums import BenchmarkPerformanceType


@dataclass(frozen=True)
class BacktestingResult:
    """Snapshot of a virtual portfolio at the end of a day."""

    date: date
    net_value: Decimal
    performance: Decimal | None = None

    def to_dict(self) -> dict:
        """Convert result to dictionary."""
        return {
            "date": self.date.isoformat(),
            "net_value": str(self.net_value),
            "performance": None if self.performance is None else str(self.performance),
        }


@dataclass
class BenchmarkBacktestingResult:
    """Outcome of one (benchmark, currency, method) run."""

    name: str
    provider: str | None
    method: BenchmarkPerformanceType
    currency: str
    net_value: Decimal | None = None
    performance: Decimal | None = None
    daily: list[BacktestingResult] = field(default_factory=list)
    error_message: str | None = None

    @property
    def full_name(self) -> str:
        """Get the display name including the provider."""
        if self.provider:
            return f"{self.name} ({self.provider})"
        return self.name

    def is_successful(self) -> bool:
        """Check if the run completed."""
        return self.error_message is None

    def to_dict(self) -> dict:
        """Convert results to dictionary."""
        return {
            "name": self.name,
            "provider": self.provider,
            "method": self.method.value,
            "currency": self.currency,
            "net_value": None if self.net_value is None else str(self.net_value),
            "performance": None if self.performance is None else str(self.performance),
            "error_message": self.error_message,
            "daily": [result.to_dict() for result in self.daily],
        }


def results_to_frame(results: Sequence[BenchmarkBacktestingResult]) -> pd.DataFrame:
    """Build a summary table with one row per run.

    Decimal values are kept as objects so the reporting layer decides on rounding.
    """
    columns = ["benchmark", "provider", "method", "currency", "net_value", "performance", "error"]
    rows = [
        {
            "benchmark": result.name,
            "provider": result.provider,
            "method": result.method.value,
            "currency": result.currency,
            "net_value": result.net_value,
            "performance": result.performance,
            "error": result.error_message,
        }
        for result in results
    ]
    return pd.DataFrame(rows, columns=columns)


def daily_results_to_frame(result: BenchmarkBacktestingResult) -> pd.DataFrame:
    """Build a date-indexed net value and performance series of one run."""
    frame = pd.DataFrame(
        {
            "net_value": [day.net_value for day in result.daily],
            "performance": [day.performance for day in result.daily],
        },
        index=pd.DatetimeIndex([pd.Timestamp(day.date) for day in result.daily], name="date"),
    )
    return frame
