"""
Generic benchmark backtester.

Replays real cash flows into an instrument behavior and takes end-of-day
snapshots of the virtual portfolio:

- FULL stepping walks the calendar day by day and records every day starting
  from the requested performance date.
- FAST stepping jumps from one event to another (cash flows and instrument
  transitions) and records only today's snapshot.
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import date, timedelta
from decimal import Decimal

from loguru import logger

from src.analysis.deposit_performance import compare_instrument_to_bank_deposit
from src.analysis.inflation import DEFAULT_INFLATION_RATES, adjust_transactions
from src.core.constants import MIN_DAYS_FOR_PERFORMANCE
from src.core.enums import BenchmarkPerformanceType, SteppingMode
from src.core.interfaces.benchmark import IInstrumentBehavior
from src.core.models.backtest import BacktestingResult
from src.core.models.cash import CashAssets
from src.core.models.transaction import InterestPeriod, Transaction
from src.core.protocols import CurrencyConverter
from src.core.types.financial import round_amount
from src.core.utils.decorators import log_operation
from src.core.utils.validation import validate_cash_flows, validate_currency


@dataclass(frozen=True)
class PerformanceSettings:
    """Parameters of the performance calculation shared by all runs."""

    min_days: int = MIN_DAYS_FOR_PERFORMANCE
    inflation_rates: Mapping[str, Mapping[int, Decimal]] = field(default_factory=lambda: DEFAULT_INFLATION_RATES)


def calculate_backtesting_result(
    name: str,
    method: BenchmarkPerformanceType,
    currency: str,
    start_date: date,
    day: date,
    transactions: Sequence[Transaction],
    net_value: Decimal,
    settings: PerformanceSettings,
    with_performance: bool = True,
) -> BacktestingResult:
    """Build a snapshot, calculating performance when there is enough history.

    Args:
        name: Display name for logging
        method: Performance calculation method
        currency: Reporting currency
        start_date: Date of the first transaction
        day: Snapshot date
        transactions: Reporting currency transactions up to the snapshot date
        net_value: Unrounded net value at the snapshot date
        settings: Performance settings
        with_performance: Whether performance is requested for this date at all
    """
    performance = None

    if with_performance and transactions and (day - start_date).days >= settings.min_days:
        adjusted = adjust_transactions(method, currency, day, transactions, settings.inflation_rates)
        performance = compare_instrument_to_bank_deposit(
            name, currency, adjusted, [InterestPeriod(start_date, day)], net_value
        )

    return BacktestingResult(day, round_amount(net_value), performance)


class Backtester:
    """Drives one (benchmark, currency, method) run over an instrument behavior."""

    def __init__(
        self,
        behavior: IInstrumentBehavior,
        name: str,
        method: BenchmarkPerformanceType,
        currency: str,
        cash_flows: Sequence[CashAssets],
        today: date,
        converter: CurrencyConverter,
        performance_from: date | None = None,
        settings: PerformanceSettings | None = None,
    ) -> None:
        self._behavior = behavior
        self._name = name
        self._method = method
        self._currency = validate_currency(currency)
        self._cash_flows = cash_flows
        self._today = today
        self._converter = converter
        self._performance_from = performance_from
        self._settings = settings or PerformanceSettings()

        self._mode = SteppingMode.FAST if performance_from is None else SteppingMode.FULL
        self._start_date = today
        self._date = today
        self._transactions: list[Transaction] = []
        self._results: list[BacktestingResult] = []

    @property
    def mode(self) -> SteppingMode:
        return self._mode

    @log_operation
    def run(self) -> list[BacktestingResult]:
        """Replay the cash flows up to today.

        Returns:
            Daily snapshots in FULL mode, or a single snapshot for today in FAST mode

        Raises:
            InputError: If cash flows are invalid
            DataUnavailableError: If quotes or currency rates are missing
        """
        self._start_date = validate_cash_flows(self._cash_flows, self._today)
        self._date = self._start_date
        self._transactions = []
        self._results = []

        logger.info(
            f"Backtesting {self._name} {self._method} {self._currency} "
            f"from {self._start_date.isoformat()} ({self._mode} mode)."
        )
        self._behavior.start(self._start_date, self._today)

        for cash_flow in self._cash_flows:
            self._process_to(cash_flow.date)
            self._process_cash_flow(cash_flow)

        self._process_to(self._today)
        # Today's snapshot uses historical quotes only: live and historical
        # providers may disagree on instrument availability.
        self._close_day(self._today)

        return self._results

    def _process_cash_flow(self, cash_flow: CashAssets) -> None:
        day, cash = cash_flow.date, cash_flow.cash
        logger.debug(f"{day.isoformat()}: Processing {cash} cash flow.")

        self._behavior.process_cash_flow(day, cash)

        amount = self._converter.convert(cash.amount, cash.currency, self._currency, day)
        if self._transactions and self._transactions[-1].date == day:
            amount += self._transactions.pop().amount
        if amount:
            self._transactions.append(Transaction(day, amount))

    def _process_to(self, day: date) -> None:
        if self._mode.records_every_day:
            while self._date < day:
                self._close_day(self._date)
                self._date += timedelta(days=1)
                self._behavior.advance_to(self._date, self._mode)
            return

        while (event_date := self._behavior.next_event_date()) is not None and event_date <= day:
            self._behavior.advance_to(event_date, self._mode)
        self._behavior.advance_to(day, self._mode)
        self._date = day

    def _close_day(self, day: date) -> None:
        net_value = self._behavior.net_assets(day).total_assets(day, self._currency, self._converter)
        performance_from = min(self._performance_from or self._today, self._today)

        result = calculate_backtesting_result(
            self._name,
            self._method,
            self._currency,
            self._start_date,
            day,
            self._transactions,
            net_value,
            self._settings,
            with_performance=day >= performance_from,
        )
        self._results.append(result)
