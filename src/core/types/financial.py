"""
Financial data types for deposit emulation and backtesting calculations.

All money, price, quantity and rate values are `decimal.Decimal`. The equivalent
rate solver compares emulated balances at 0.01 percentage point granularity,
so binary float drift would make it oscillate or stop at the wrong step.

Conventions:
- Amounts are signed: positive values are deposits, negative are withdrawals
- Rates are annual percentages (7 means 7% per year)
- Rounding is applied only at presentation boundaries, never mid-simulation
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from src.core.constants import CASH_DECIMALS, PERCENTAGE_DECIMALS

ZERO = Decimal(0)
HUNDRED = Decimal(100)

_CASH_QUANTUM = Decimal(1).scaleb(-CASH_DECIMALS)
_PERCENTAGE_QUANTUM = Decimal(1).scaleb(-PERCENTAGE_DECIMALS)


def to_decimal(value: str | int | float | Decimal) -> Decimal:
    """Convert various numeric types to Decimal.

    Floats are converted through their shortest string representation, so
    `to_decimal(0.1)` is exactly `Decimal("0.1")`.

    Args:
        value: Numeric value to convert

    Returns:
        Decimal representation of the value

    Raises:
        ValueError: If the value is not a finite number

    Examples:
        >>> to_decimal(50000)
        Decimal('50000')
        >>> to_decimal('1.5')
        Decimal('1.5')
    """
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, float):
        result = Decimal(repr(value))
    else:
        try:
            result = Decimal(value)
        except InvalidOperation:
            raise ValueError(f"Invalid decimal value: {value!r}") from None

    if not result.is_finite():
        raise ValueError(f"Decimal value must be finite, got {value!r}")

    return result


def round_amount(amount: Decimal) -> Decimal:
    """Round a cash amount to cents.

    Args:
        amount: Amount value to round

    Returns:
        Rounded amount
    """
    return amount.quantize(_CASH_QUANTUM, rounding=ROUND_HALF_UP)


def round_percentage(percentage: Decimal) -> Decimal:
    """Round a percentage to the solver's finest resolution."""
    return percentage.quantize(_PERCENTAGE_QUANTUM, rounding=ROUND_HALF_UP)


def daily_rate(annual_rate: Decimal, days_in_year: int) -> Decimal:
    """Convert an annual percentage rate into a daily fraction.

    Args:
        annual_rate: Annual rate in percent
        days_in_year: Day count basis

    Returns:
        Daily interest as a fraction of principal
    """
    return annual_rate / HUNDRED / Decimal(days_in_year)
