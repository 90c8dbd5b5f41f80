"""
Bank deposit emulation.

Simulates a single balance under dated transactions and a stack of interest
periods. Inside a period a strictly positive balance accrues simple daily
interest which is folded into the balance on capitalization dates (monthly on
the opening day of month, or only at the period end). Outside of periods the
balance stays as is.

All arithmetic is Decimal: the equivalent rate solver relies on repeated
emulations being bit-identical and on 0.01 rate steps being distinguishable.
"""

from collections import deque
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from loguru import logger

from src.core.constants import DAYS_IN_YEAR
from src.core.exceptions.backtest import CalculationError, InputError
from src.core.models.transaction import InterestPeriod, Transaction
from src.core.types.financial import ZERO, daily_rate, to_decimal
from src.core.utils.time import next_capitalization_date
from src.core.utils.validation import (
    validate_chronological,
    validate_interest_periods,
    validate_transactions_range,
)


@dataclass
class ActiveInterestPeriod:
    """Runtime state of the interest period the emulator is currently inside."""

    start_date: date
    next_capitalization_date: date
    accumulated_income: Decimal
    end_date: date
    monthly_capitalization: bool

    @classmethod
    def open(cls, period: InterestPeriod, monthly_capitalization: bool) -> "ActiveInterestPeriod":
        """Open a period and schedule its first capitalization."""
        active = cls(
            start_date=period.start,
            next_capitalization_date=period.start,
            accumulated_income=ZERO,
            end_date=period.end,
            monthly_capitalization=monthly_capitalization,
        )
        active.set_next_capitalization_date()
        return active

    def set_next_capitalization_date(self) -> None:
        """Advance the capitalization date, never past the period end."""
        if self.next_capitalization_date >= self.end_date:
            raise CalculationError(f"Interest period has already ended at {self.end_date.isoformat()}")

        if self.monthly_capitalization:
            self.next_capitalization_date = min(
                next_capitalization_date(self.next_capitalization_date, self.start_date.day),
                self.end_date,
            )
        else:
            self.next_capitalization_date = self.end_date


class DepositEmulator:
    """Date-stepped deposit balance simulator.

    Can be used one-shot via `emulate()` or driven incrementally with
    `process_transaction()` and `process_to()`; in the latter case
    `current_value` includes income accrued since the last capitalization.
    """

    def __init__(
        self,
        start_date: date,
        end_date: date,
        annual_rate: Decimal | int | str,
        monthly_capitalization: bool = True,
        interest_periods: Sequence[InterestPeriod] | None = None,
    ) -> None:
        """Initialize the emulator.

        Args:
            start_date: Date the emulation starts at
            end_date: Date the emulation ends at
            annual_rate: Annual interest in percent
            monthly_capitalization: Capitalize monthly instead of only at period end
            interest_periods: Ordered disjoint periods; defaults to the whole range

        Raises:
            InputError: If dates or periods are invalid
        """
        if start_date > end_date:
            raise InputError(
                f"Invalid emulation range: {start_date.isoformat()} - {end_date.isoformat()}"
            )

        if interest_periods is None:
            periods = [InterestPeriod(start_date, end_date)] if start_date != end_date else []
        else:
            periods = list(interest_periods)
            validate_interest_periods(periods, start_date, end_date)

        self._date = start_date
        self._end_date = end_date
        self._monthly_capitalization = monthly_capitalization
        self._daily_interest = daily_rate(to_decimal(annual_rate), DAYS_IN_YEAR)

        self._interest_periods: deque[InterestPeriod] = deque(periods)
        self._interest_period: ActiveInterestPeriod | None = None
        self._balance = ZERO

        self._select_interest_period()

    @property
    def date(self) -> date:
        """Date the emulation has been processed to."""
        return self._date

    @property
    def balance(self) -> Decimal:
        """Balance including capitalized income only."""
        return self._balance

    @property
    def current_value(self) -> Decimal:
        """Balance plus income accrued but not yet capitalized."""
        if self._interest_period is None:
            return self._balance
        return self._balance + self._interest_period.accumulated_income

    def emulate(self, transactions: Sequence[Transaction]) -> Decimal:
        """Apply transactions and run the emulation to its end date.

        Args:
            transactions: Transactions in non-decreasing date order

        Returns:
            Final balance

        Raises:
            InputError: If transactions are unordered or outside of the emulation range
        """
        validate_chronological(transactions)
        validate_transactions_range(transactions, self._date, self._end_date)

        for transaction in transactions:
            self.process_transaction(transaction)

        self.process_to(self._end_date)
        if self._interest_period is not None:
            raise CalculationError("Interest period is left open at the end of emulation")

        return self._balance

    def process_transaction(self, transaction: Transaction) -> None:
        """Accrue up to the transaction date, then apply the transaction."""
        self.process_to(transaction.date)
        self._balance += transaction.amount

    def process_to(self, day: date) -> None:
        """Advance the emulation to the given date.

        Raises:
            InputError: If the date precedes the current emulation date or its end
        """
        if day < self._date:
            raise InputError(
                f"An attempt to move deposit emulation back from {self._date.isoformat()} "
                f"to {day.isoformat()}"
            )
        if day > self._end_date:
            raise InputError(f"{day.isoformat()} is out of emulation range")

        while self._date < day:
            interest_period = self._interest_period

            if interest_period is not None:
                if day >= interest_period.next_capitalization_date:
                    self._accumulate_income_to(interest_period.next_capitalization_date)

                    if self._date == interest_period.end_date:
                        self._close_interest_period()
                    else:
                        self._capitalize()
                else:
                    self._accumulate_income_to(day)
            elif self._interest_periods:
                next_period = self._interest_periods[0]
                if day < next_period.start:
                    self._date = day
                else:
                    self._date = next_period.start
                    self._select_interest_period()
            else:
                self._date = day

    def _select_interest_period(self) -> None:
        if not self._interest_periods or self._date != self._interest_periods[0].start:
            return

        period = self._interest_periods.popleft()
        self._interest_period = ActiveInterestPeriod.open(period, self._monthly_capitalization)
        logger.trace(f"{self._date.isoformat()}: Opened {period} interest period.")

    def _active_period(self) -> ActiveInterestPeriod:
        if self._interest_period is None:
            raise CalculationError(f"No interest period is open at {self._date.isoformat()}")
        return self._interest_period

    def _accumulate_income_to(self, day: date) -> None:
        interest_period = self._active_period()

        # Zero and negative balances never earn interest
        if self._balance > ZERO:
            days = (day - self._date).days
            interest_period.accumulated_income += self._balance * self._daily_interest * days

        self._date = day

    def _capitalize(self) -> None:
        interest_period = self._active_period()

        self._balance += interest_period.accumulated_income
        interest_period.accumulated_income = ZERO
        interest_period.set_next_capitalization_date()

    def _close_interest_period(self) -> None:
        interest_period = self._active_period()

        self._balance += interest_period.accumulated_income
        self._interest_period = None
        logger.trace(f"{self._date.isoformat()}: Closed interest period.")

        self._select_interest_period()


def emulate(
    start: date,
    end: date,
    annual_rate: Decimal | int | str,
    periods: Sequence[InterestPeriod] | None,
    monthly_capitalization: bool,
    transactions: Sequence[Transaction],
) -> Decimal:
    """Emulate a bank deposit and return its balance at the end date."""
    emulator = DepositEmulator(
        start,
        end,
        annual_rate,
        monthly_capitalization=monthly_capitalization,
        interest_periods=periods,
    )
    return emulator.emulate(transactions)
