"""
Backtesting orchestration.

Runs every benchmark for every reporting currency and performance method.
Runs are independent: each gets its own copy of the cash flows and shares
only read-only collaborators, so they may be executed in parallel.
"""

from collections.abc import Iterable, Mapping, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal

from loguru import logger

from src.core.constants import DEFAULT_CURRENCIES, PORTFOLIO_INSTRUMENT
from src.core.enums import BenchmarkPerformanceType
from src.core.exceptions.backtest import BacktestException, InputError
from src.core.interfaces.benchmark import IBenchmark
from src.core.models.backtest import BenchmarkBacktestingResult
from src.core.models.cash import CashAssets
from src.core.protocols import Clock, CurrencyConverter
from src.core.types.financial import ZERO
from src.core.utils.decorators import log_operation
from src.core.utils.validation import validate_cash_flows, validate_currency

from .backtester import PerformanceSettings, calculate_backtesting_result
from .benchmarks import DepositBenchmark
from .cash_flows import aggregate_cash_flows, cash_flows_to_transactions


@dataclass(frozen=True)
class BacktestRun:
    """One (benchmark, method, currency) combination."""

    benchmark: IBenchmark | None
    method: BenchmarkPerformanceType
    currency: str

    @property
    def name(self) -> str:
        return PORTFOLIO_INSTRUMENT if self.benchmark is None else self.benchmark.full_name

    def __str__(self) -> str:
        return f"{self.name} / {self.method} {self.currency}"


@log_operation
def backtest(
    benchmarks: Sequence[IBenchmark],
    cash_flows: Iterable[CashAssets],
    clock: Clock,
    converter: CurrencyConverter,
    currencies: Sequence[str] = DEFAULT_CURRENCIES,
    methods: Sequence[BenchmarkPerformanceType] = tuple(BenchmarkPerformanceType),
    portfolio_net_value: Mapping[str, Decimal] | None = None,
    with_metrics: timedelta | None = None,
    settings: PerformanceSettings | None = None,
    max_workers: int | None = None,
    cash_benchmarks: bool = True,
) -> list[BenchmarkBacktestingResult]:
    """Backtest a portfolio's cash flows against the benchmarks.

    Args:
        benchmarks: Benchmarks to replay the cash flows into
        cash_flows: Real portfolio cash flows in any currencies
        clock: Source of today's date
        converter: Currency converter shared by all runs
        currencies: Reporting currencies
        methods: Performance calculation methods
        portfolio_net_value: Current portfolio net value per reporting currency.
            When given, the portfolio itself is reported next to the benchmarks
        with_metrics: Minimum performance period; switches runs to full stepping
            with daily results starting from `start date + period`
        settings: Performance calculation settings
        max_workers: Number of threads to execute runs with (sequential if not set)
        cash_benchmarks: Also compare against keeping the money as cash in each
            reporting currency (a "<currency> cash" zero rate deposit)

    Returns:
        One result per run ordered by method, currency and benchmark. Failed
        runs carry an error message instead of values.

    Raises:
        InputError: If the cash flows can't be backtested at all
    """
    today = clock.today()
    settings = settings or PerformanceSettings()
    currencies = [validate_currency(currency) for currency in currencies]

    flows = aggregate_cash_flows(cash_flows)
    start_date = validate_cash_flows(flows, today)
    performance_from = None if with_metrics is None else start_date + with_metrics

    benchmarks = list(benchmarks)
    if cash_benchmarks:
        benchmarks.extend(
            DepositBenchmark(f"{currency} cash", currency, ZERO, converter, settings) for currency in currencies
        )

    runs = [
        BacktestRun(benchmark, method, currency)
        for method in methods
        for currency in currencies
        for benchmark in ([None] if portfolio_net_value is not None else []) + benchmarks
    ]
    logger.info(f"Backtesting {len(flows)} cash flows from {start_date.isoformat()}: {len(runs)} runs.")

    def execute(run: BacktestRun) -> BenchmarkBacktestingResult:
        if run.benchmark is None:
            return _portfolio_result(run, flows, start_date, today, converter, portfolio_net_value or {}, settings)
        return _benchmark_result(run, run.benchmark, list(flows), today, performance_from)

    if max_workers is None or max_workers <= 1:
        return [execute(run) for run in runs]

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        return list(executor.map(execute, runs))


def _benchmark_result(
    run: BacktestRun,
    benchmark: IBenchmark,
    cash_flows: list[CashAssets],
    today: date,
    performance_from: date | None,
) -> BenchmarkBacktestingResult:
    result = BenchmarkBacktestingResult(benchmark.name, benchmark.provider, run.method, run.currency)

    with logger.contextualize(run=str(run)):
        try:
            daily = benchmark.backtest(run.method, run.currency, cash_flows, today, performance_from)
        except BacktestException as e:
            logger.error(f"Failed to backtest {run}: {e}")
            result.error_message = str(e)
            return result

    result.net_value = daily[-1].net_value
    result.performance = daily[-1].performance
    if performance_from is not None:
        result.daily = daily

    return result


def _portfolio_result(
    run: BacktestRun,
    cash_flows: Sequence[CashAssets],
    start_date: date,
    today: date,
    converter: CurrencyConverter,
    portfolio_net_value: Mapping[str, Decimal],
    settings: PerformanceSettings,
) -> BenchmarkBacktestingResult:
    result = BenchmarkBacktestingResult(PORTFOLIO_INSTRUMENT, None, run.method, run.currency)

    with logger.contextualize(run=str(run)):
        try:
            net_value = portfolio_net_value.get(run.currency)
            if net_value is None:
                raise InputError(f"Portfolio net value in {run.currency} is not specified")

            transactions = cash_flows_to_transactions(cash_flows, run.currency, converter)
            snapshot = calculate_backtesting_result(
                PORTFOLIO_INSTRUMENT, run.method, run.currency, start_date, today,
                transactions, net_value, settings,
            )
        except BacktestException as e:
            logger.error(f"Failed to calculate {run}: {e}")
            result.error_message = str(e)
            return result

    result.net_value = snapshot.net_value
    result.performance = snapshot.performance
    return result
