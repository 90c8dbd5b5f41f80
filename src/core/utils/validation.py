"""
Validation utilities for core domain models.

Provides consistent validation across the application.
"""

from collections.abc import Sequence
from datetime import date

from src.core.exceptions.backtest import InputError
from src.core.models.cash import CashAssets
from src.core.models.transaction import InterestPeriod, Transaction


def validate_chronological(transactions: Sequence[Transaction], param_name: str = "transactions") -> None:
    """Validate that transactions are ordered by date.

    Raises:
        InputError: If any transaction precedes the previous one
    """
    for previous, current in zip(transactions, transactions[1:]):
        if current.date < previous.date:
            raise InputError(
                f"{param_name} must be in chronological order: "
                f"{current.date.isoformat()} follows {previous.date.isoformat()}"
            )


def validate_interest_periods(periods: Sequence[InterestPeriod], start: date, end: date) -> None:
    """Validate that interest periods are ordered, disjoint and within [start, end].

    Adjacent periods may touch: one can end on the date the next one starts.

    Raises:
        InputError: If periods overlap, are unordered or exceed the emulation range
    """
    for previous, current in zip(periods, periods[1:]):
        if current.start < previous.end:
            raise InputError(f"Interest periods must be ordered and disjoint: {previous} and {current}")

    if periods:
        if periods[0].start < start:
            raise InputError(f"Interest period {periods[0]} starts before {start.isoformat()}")
        if periods[-1].end > end:
            raise InputError(f"Interest period {periods[-1]} ends after {end.isoformat()}")


def validate_transactions_range(transactions: Sequence[Transaction], start: date, end: date) -> None:
    """Validate that ordered transactions fall within [start, end].

    Raises:
        InputError: If a transaction is outside the range
    """
    if not transactions:
        return

    first, last = transactions[0].date, transactions[-1].date
    if first < start or last > end:
        raise InputError(
            f"Transactions ({first.isoformat()} - {last.isoformat()}) are out of "
            f"emulation range ({start.isoformat()} - {end.isoformat()})"
        )


def validate_cash_flows(cash_flows: Sequence[CashAssets], today: date) -> date:
    """Validate a run's cash flows and return its start date.

    Raises:
        InputError: If cash flows are empty, unordered, start today or contain future dates
    """
    if not cash_flows:
        raise InputError("An attempt to backtest an empty portfolio (without cash flows)")

    for previous, current in zip(cash_flows, cash_flows[1:]):
        if current.date < previous.date:
            raise InputError("Cash flows must be in chronological order")

    start_date = cash_flows[0].date
    if start_date > today or cash_flows[-1].date > today:
        raise InputError("The portfolio contains future cash flows")
    if start_date == today:
        raise InputError("An attempt to backtest portfolio which was created today")

    return start_date


def validate_currency(currency: str, param_name: str = "currency") -> str:
    """Validate and normalize a three-letter currency code.

    Raises:
        InputError: If the code is malformed
    """
    if not isinstance(currency, str) or len(currency) != 3 or not currency.isalpha():
        raise InputError(f"{param_name} must be a three-letter currency code, got {currency!r}")
    return currency.upper()
