"""
Unit tests for the bank deposit emulator.
"""

from datetime import date
from decimal import Decimal

import pytest

from src.analysis.deposit_emulator import DepositEmulator, emulate
from src.core.exceptions.backtest import CalculationError, InputError
from src.core.models.transaction import InterestPeriod, Transaction
from src.core.types.financial import round_amount
from src.core.utils.time import next_capitalization_date

REAL_DEPOSIT = [
    (date(2018, 7, 28), Decimal("600000.00")),
    (date(2018, 8, 28), Decimal("603567.12")),
    (date(2018, 9, 28), Decimal("607155.45")),
    (date(2018, 10, 28), Decimal("610648.68")),
    (date(2018, 11, 28), Decimal("614279.11")),
    (date(2018, 12, 28), Decimal("617813.32")),
    (date(2019, 1, 28), Decimal("621486.34")),
]

DEPOSIT_WITH_CONTRIBUTIONS = [
    (date(2019, 2, 28), Decimal("301352.05")),
    (date(2019, 3, 31), Decimal("303143.65")),
    (date(2019, 4, 30), Decimal("304887.77")),
    (date(2019, 5, 31), Decimal("306700.39")),
    (date(2019, 6, 30), Decimal("308464.97")),
    (date(2019, 7, 31), Decimal("310298.85")),
]

DEPOSIT_WITHOUT_CAPITALIZATION = [
    (date(2018, 8, 28), Decimal("200805.48")),
    (date(2018, 9, 28), Decimal("201824.66")),
    (date(2018, 10, 28), Decimal("202810.96")),
    (date(2018, 11, 28), Decimal("203830.14")),
    (date(2018, 12, 28), Decimal("204816.44")),
    (date(2019, 1, 28), Decimal("205835.62")),
]


class TestDepositEmulator:
    """Test suite for DepositEmulator golden values."""

    @pytest.mark.parametrize(("capitalization_date", "expected"), REAL_DEPOSIT)
    def test_should_match_real_deposit_balance(self, capitalization_date: date, expected: Decimal) -> None:
        """Test monthly capitalization against a real bank deposit statement."""
        open_date = date(2018, 7, 28)
        transactions = [Transaction(open_date, Decimal(600_000))]

        result = DepositEmulator(open_date, capitalization_date, 7).emulate(transactions)

        assert round_amount(result) == expected

    @pytest.mark.parametrize(("capitalization_date", "expected"), REAL_DEPOSIT)
    def test_should_close_deposit_to_zero(self, capitalization_date: date, expected: Decimal) -> None:
        """Test that withdrawing the emulated balance at the close date leaves nothing."""
        open_date = date(2018, 7, 28)
        transactions = [
            Transaction(open_date, Decimal(600_000)),
            Transaction(capitalization_date, -expected),
        ]

        result = DepositEmulator(open_date, capitalization_date, 7).emulate(transactions)

        assert round_amount(result) == Decimal("0.00")

    @pytest.mark.parametrize(("capitalization_date", "expected"), DEPOSIT_WITH_CONTRIBUTIONS)
    def test_should_match_deposit_with_contributions(self, capitalization_date: date, expected: Decimal) -> None:
        """Test contributions and capitalization clamping for a deposit opened on the 31st."""
        open_date = date(2019, 1, 31)
        transactions = [
            Transaction(open_date, Decimal(190_000)),
            Transaction(date(2019, 2, 5), Decimal(60_000)),
            Transaction(date(2019, 2, 21), Decimal(50_000)),
        ]

        result = DepositEmulator(open_date, capitalization_date, 7).emulate(transactions)

        assert round_amount(result) == expected

    @pytest.mark.parametrize(("capitalization_date", "expected"), DEPOSIT_WITHOUT_CAPITALIZATION)
    def test_should_match_deposit_without_monthly_capitalization(
        self, capitalization_date: date, expected: Decimal
    ) -> None:
        """Test that income is capitalized only at the period end when monthly capitalization is off."""
        open_date = date(2018, 7, 28)
        transactions = [
            Transaction(open_date, Decimal(100_000)),
            Transaction(date(2018, 8, 10), Decimal(100_000)),
        ]

        emulator = DepositEmulator(open_date, capitalization_date, 6, monthly_capitalization=False)
        assert round_amount(emulator.emulate(transactions)) == expected

        closed = DepositEmulator(open_date, capitalization_date, 6, monthly_capitalization=False)
        closing = [*transactions, Transaction(capitalization_date, -expected)]
        assert round_amount(closed.emulate(closing)) == Decimal("0.00")

    def test_should_handle_joint_deposits_with_gaps(self) -> None:
        """Test multiple interest periods with no accrual between them."""
        open_date = date(2018, 1, 1)
        transactions = [
            Transaction(open_date, Decimal(200_000)),
            Transaction(date(2018, 7, 28), Decimal(400_000)),
        ]
        periods = [InterestPeriod(date(2018, 7, 28), date(2019, 1, 28))]

        result = emulate(open_date, date(2019, 1, 28), 7, periods, True, transactions)
        assert round_amount(result) == Decimal("621486.34")

        transactions.append(Transaction(date(2019, 1, 28), Decimal(100_000) - result))
        transactions.append(Transaction(date(2019, 1, 31), Decimal(90_000)))
        result = emulate(open_date, date(2019, 1, 31), 7, periods, True, transactions)
        assert round_amount(result) == Decimal("190000.00")

        periods.append(InterestPeriod(date(2019, 1, 31), date(2019, 7, 31)))
        result = emulate(open_date, date(2019, 7, 31), 7, periods, True, transactions)
        assert round_amount(result) == Decimal("196691.45")

        transactions.append(Transaction(date(2019, 2, 5), Decimal(60_000)))
        result = emulate(open_date, date(2019, 7, 31), 7, periods, True, transactions)
        assert round_amount(result) == Decimal("258745.30")

        transactions.append(Transaction(date(2019, 2, 21), Decimal(50_000)))
        result = emulate(open_date, date(2019, 7, 31), 7, periods, True, transactions)
        assert round_amount(result) == Decimal("310298.85")

        transactions.append(Transaction(date(2019, 7, 31), Decimal(100_000) - result))
        result = emulate(open_date, date(2020, 1, 1), 7, periods, True, transactions)
        assert round_amount(result) == Decimal("100000.00")


class TestDepositEmulatorProperties:
    """Test suite for DepositEmulator invariants."""

    @pytest.fixture
    def transactions(self) -> list[Transaction]:
        return [
            Transaction(date(2018, 3, 15), Decimal("1000.50")),
            Transaction(date(2018, 6, 1), Decimal("2500")),
            Transaction(date(2018, 6, 1), Decimal("-300.25")),
            Transaction(date(2019, 1, 31), Decimal("-1200")),
            Transaction(date(2019, 11, 2), Decimal("4000")),
        ]

    def test_should_be_deterministic(self, transactions: list[Transaction]) -> None:
        """Test that repeated emulations are bit-identical."""
        results = {
            DepositEmulator(date(2018, 3, 15), date(2020, 3, 15), "8.37").emulate(transactions)
            for _ in range(3)
        }
        assert len(results) == 1

    def test_should_conserve_amounts_at_zero_rate(self, transactions: list[Transaction]) -> None:
        """Test that a zero rate returns the exact sum of transactions."""
        result = DepositEmulator(date(2018, 3, 15), date(2020, 3, 15), 0).emulate(transactions)
        assert result == sum((t.amount for t in transactions), Decimal(0))

    def test_should_not_decrease_when_rate_increases(self, transactions: list[Transaction]) -> None:
        """Test balance monotonicity by rate for a non-negative balance history."""
        balances = [
            DepositEmulator(date(2018, 3, 15), date(2020, 3, 15), rate).emulate(transactions)
            for rate in ("0", "0.01", "1", "5", "10", "25")
        ]
        assert balances == sorted(balances)

    def test_should_not_accrue_on_negative_balance(self) -> None:
        """Test that overdrafts are not compounded."""
        transactions = [Transaction(date(2020, 1, 1), Decimal(-1000))]
        result = DepositEmulator(date(2020, 1, 1), date(2021, 1, 1), 10).emulate(transactions)
        assert result == Decimal(-1000)

    def test_should_apply_boundary_transaction_before_accrual(self) -> None:
        """Test that a deposit made on the period start earns interest from that day."""
        transactions = [Transaction(date(2020, 1, 1), Decimal(36_500))]
        emulator = DepositEmulator(date(2020, 1, 1), date(2020, 1, 11), 10, monthly_capitalization=False)
        assert round_amount(emulator.emulate(transactions)) == Decimal("36600.00")

    def test_should_report_accrued_income_in_current_value(self) -> None:
        """Test incremental usage: accrued income is visible before capitalization."""
        emulator = DepositEmulator(date(2020, 1, 1), date(2020, 12, 31), 10)
        emulator.process_transaction(Transaction(date(2020, 1, 1), Decimal(36_500)))

        emulator.process_to(date(2020, 1, 11))

        assert emulator.date == date(2020, 1, 11)
        assert emulator.balance == Decimal(36_500)
        assert round_amount(emulator.current_value) == Decimal("36600.00")

    def test_should_reject_moving_backwards(self) -> None:
        """Test that the emulation date can't go back."""
        emulator = DepositEmulator(date(2020, 1, 1), date(2020, 12, 31), 10)
        emulator.process_to(date(2020, 2, 1))

        with pytest.raises(InputError, match="back"):
            emulator.process_to(date(2020, 1, 15))

    def test_should_reject_unordered_transactions(self) -> None:
        """Test that transactions must be chronological."""
        transactions = [
            Transaction(date(2020, 2, 1), Decimal(1)),
            Transaction(date(2020, 1, 1), Decimal(1)),
        ]
        with pytest.raises(InputError, match="chronological"):
            DepositEmulator(date(2020, 1, 1), date(2020, 12, 31), 10).emulate(transactions)

    def test_should_reject_overlapping_interest_periods(self) -> None:
        """Test that interest periods must be disjoint."""
        periods = [
            InterestPeriod(date(2020, 1, 1), date(2020, 6, 1)),
            InterestPeriod(date(2020, 5, 1), date(2020, 9, 1)),
        ]
        with pytest.raises(InputError, match="disjoint"):
            DepositEmulator(date(2020, 1, 1), date(2020, 12, 31), 10, interest_periods=periods)


class TestNextCapitalizationDate:
    """Test suite for monthly capitalization stepping."""

    @pytest.mark.parametrize("day", range(1, 32))
    def test_should_move_from_december_to_january(self, day: int) -> None:
        assert next_capitalization_date(date(2018, 12, day), day) == date(2019, 1, day)

    @pytest.mark.parametrize("day", range(29, 32))
    def test_should_clamp_to_february_end(self, day: int) -> None:
        """Test that short months capitalize on their last day."""
        assert next_capitalization_date(date(2019, 1, day), day) == date(2019, 2, 28)

    @pytest.mark.parametrize("day", range(28, 32))
    def test_should_return_to_original_day_after_clamping(self, day: int) -> None:
        assert next_capitalization_date(date(2019, 2, 28), day) == date(2019, 3, day)

    @pytest.mark.parametrize("day", range(1, 28))
    def test_should_reject_inconsistent_capitalization_date(self, day: int) -> None:
        with pytest.raises(CalculationError):
            next_capitalization_date(date(2019, 2, 28), day)

    def test_should_capitalize_deposit_opened_on_31st_at_february_end(self) -> None:
        """Test clamping through the emulator: 2019-01-31 -> 2019-02-28 -> 2019-03-31."""
        emulator = DepositEmulator(date(2019, 1, 31), date(2019, 12, 31), 10)
        emulator.process_transaction(Transaction(date(2019, 1, 31), Decimal(36_500)))

        emulator.process_to(date(2019, 2, 27))
        assert emulator.balance == Decimal(36_500)

        emulator.process_to(date(2019, 2, 28))
        assert round_amount(emulator.balance) == Decimal("36780.00")

        emulator.process_to(date(2019, 3, 30))
        assert round_amount(emulator.balance) == Decimal("36780.00")

        emulator.process_to(date(2019, 3, 31))
        assert emulator.balance > Decimal(36_780)
