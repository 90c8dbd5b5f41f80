"""
Equivalent bank deposit rate calculation.

Reverse-engineers the flat annual rate a bank deposit would need to turn an
irregular cash-flow history into the observed balance.
"""

from collections.abc import Sequence
from decimal import Decimal

from loguru import logger

from src.core.constants import MAX_SOLVER_MOVES_PER_STEP, PRECISION_WARNING_PERCENT, SOLVER_STEPS
from src.core.exceptions.backtest import InputError
from src.core.models.transaction import InterestPeriod, Transaction
from src.core.types.financial import HUNDRED, ZERO, round_amount, round_percentage

from .deposit_emulator import DepositEmulator


def compare_to_bank_deposit(
    transactions: Sequence[Transaction],
    interest_periods: Sequence[InterestPeriod],
    current_assets: Decimal,
    monthly_capitalization: bool = True,
) -> tuple[Decimal, Decimal] | None:
    """Find the deposit rate that best reproduces the current assets.

    Coordinate descent over the rate with shrinking steps: at each step size
    the search moves in the improving direction until the residual stops
    decreasing, then refines with the next step.

    Args:
        transactions: Cash flows in chronological order
        interest_periods: Periods the portfolio was active in
        current_assets: Observed balance to match
        monthly_capitalization: Capitalization mode of the emulated deposit

    Returns:
        (rate, residual) pair, or None if no finite rate fits the cash flows
        (e.g. a position received for free and then sold)

    Raises:
        InputError: If there are no transactions or interest periods
    """
    if not transactions or not interest_periods:
        raise InputError("An attempt to compare an empty cash-flow history to bank deposit")

    start_date = min(transactions[0].date, interest_periods[0].start)
    end_date = max(transactions[-1].date, interest_periods[-1].end)

    def residual(rate: Decimal) -> Decimal:
        balance = DepositEmulator(
            start_date,
            end_date,
            rate,
            monthly_capitalization=monthly_capitalization,
            interest_periods=interest_periods,
        ).emulate(transactions)
        return abs(current_assets - balance)

    rate = ZERO
    difference = residual(rate)

    for coarsest, step in enumerate(SOLVER_STEPS):
        decreasing_difference = residual(rate - step)
        increasing_difference = residual(rate + step)

        if decreasing_difference == increasing_difference:
            if decreasing_difference >= difference:
                if coarsest == 0:
                    # The balance doesn't depend on the rate at all
                    return None
                # Already as precise as this resolution allows
                break
        elif min(decreasing_difference, increasing_difference) >= difference:
            continue

        if decreasing_difference < increasing_difference:
            step = -step
            difference = decreasing_difference
        else:
            difference = increasing_difference
        rate += step

        for _ in range(MAX_SOLVER_MOVES_PER_STEP):
            next_rate = rate + step
            next_difference = residual(next_rate)
            if next_difference >= difference:
                break

            rate, difference = next_rate, next_difference
        else:
            logger.debug(f"Equivalent rate search hit the move limit at {rate}% (step {step}).")

    return rate, difference


def check_emulation_precision(
    name: str, currency: str, cash_scale: Decimal, difference: Decimal
) -> bool:
    """Check the solver residual against the cash scale of the history.

    Low precision is not an error: the best-effort rate is still usable, so it
    is only reported.

    Args:
        name: Name of what is being compared, for logging
        currency: Currency of the amounts
        cash_scale: Largest relevant cash amount of the history
        difference: Solver residual

    Returns:
        True if the result is precise enough
    """
    if cash_scale == ZERO:
        precision = ZERO if difference == ZERO else HUNDRED
    else:
        precision = abs(difference / cash_scale) * HUNDRED

    if precision >= PRECISION_WARNING_PERCENT:
        logger.warning(
            f"Failed to compare {name} {currency} performance to bank deposit: "
            f"got a result with too low precision ({round(precision, 3)}%, "
            f"{round_amount(difference)} {currency})."
        )
        return False

    logger.debug(
        f"Got a result of comparing {name} {currency} performance to bank deposit: "
        f"{round(precision, 4)}% precision ({round_amount(difference)} {currency})."
    )
    return True


def compare_instrument_to_bank_deposit(
    name: str,
    currency: str,
    transactions: Sequence[Transaction],
    interest_periods: Sequence[InterestPeriod],
    current_assets: Decimal,
) -> Decimal | None:
    """Calculate the equivalent deposit rate of an instrument's cash-flow history.

    Returns:
        Rate in percent rounded to the solver resolution, or None if performance
        isn't computable for this history
    """
    result = compare_to_bank_deposit(transactions, interest_periods, current_assets)
    if result is None:
        logger.warning(
            f"Unable to calculate {name} {currency} performance: "
            f"the balance doesn't depend on the deposit rate."
        )
        return None

    rate, difference = result

    cash_scale = max(
        abs(current_assets),
        max(abs(transaction.amount) for transaction in transactions),
    )
    check_emulation_precision(name, currency, cash_scale, difference)

    return round_percentage(rate)
