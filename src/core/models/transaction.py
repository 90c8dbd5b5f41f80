"""
Deposit emulation input models.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from src.core.exceptions.backtest import InputError
from src.core.types.financial import to_decimal


@dataclass(frozen=True)
class Transaction:
    """A signed cash delta applied to a deposit balance on a date."""

    date: date
    amount: Decimal

    def __post_init__(self) -> None:
        object.__setattr__(self, "amount", to_decimal(self.amount))


@dataclass(frozen=True)
class InterestPeriod:
    """A span over which a positive balance accrues daily interest.

    The start date is inclusive and the end date is the closing (capitalization) date.
    """

    start: date
    end: date

    def __post_init__(self) -> None:
        """Validate period bounds."""
        if self.start >= self.end:
            raise InputError(
                f"Invalid interest period: {self.start.isoformat()} - {self.end.isoformat()}"
            )

    def days(self) -> int:
        """Get the period duration in days."""
        return (self.end - self.start).days

    def __str__(self) -> str:
        return f"{self.start.isoformat()} - {self.end.isoformat()}"
