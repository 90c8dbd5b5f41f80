"""
Benchmarks a portfolio can be backtested against.
"""

from collections.abc import Sequence
from dataclasses import replace
from datetime import date
from decimal import Decimal

from src.core.constants import SAME_CURRENCY_DEPOSIT_MIN_DAYS
from src.core.enums import BenchmarkPerformanceType
from src.core.interfaces.benchmark import IBenchmark
from src.core.models.backtest import BacktestingResult
from src.core.models.cash import CashAssets
from src.core.models.instrument import BenchmarkDefinition
from src.core.protocols import CurrencyConverter, QuotesProvider
from src.core.types.financial import to_decimal

from .backtester import Backtester, PerformanceSettings
from .behaviors import HeldInstrument, VirtualDeposit
from .timeline import BenchmarkInstrumentTimeline


class StockBenchmark(IBenchmark):
    """A benchmark instrument chain priced by a quotes provider."""

    def __init__(
        self,
        definition: BenchmarkDefinition,
        quotes: QuotesProvider,
        converter: CurrencyConverter,
        settings: PerformanceSettings | None = None,
    ) -> None:
        """Initialize the benchmark.

        Raises:
            UnsupportedCommissionError: If any chain entry has an unsupported commission
        """
        definition.validate_commissions()

        self._definition = definition
        self._timeline = BenchmarkInstrumentTimeline(definition, quotes)
        self._converter = converter
        self._settings = settings or PerformanceSettings()

    @property
    def name(self) -> str:
        return self._definition.name

    @property
    def provider(self) -> str | None:
        return self._definition.provider

    @property
    def definition(self) -> BenchmarkDefinition:
        return self._definition

    def backtest(
        self,
        method: BenchmarkPerformanceType,
        currency: str,
        cash_flows: Sequence[CashAssets],
        today: date,
        performance_from: date | None,
    ) -> list[BacktestingResult]:
        behavior = HeldInstrument(self._timeline, self._converter)
        return Backtester(
            behavior, self.full_name, method, currency, cash_flows, today,
            self._converter, performance_from, self._settings,
        ).run()


class DepositBenchmark(IBenchmark):
    """A virtual bank deposit in a fixed currency at a fixed annual rate."""

    def __init__(
        self,
        name: str,
        currency: str,
        interest: Decimal | int | str,
        converter: CurrencyConverter,
        settings: PerformanceSettings | None = None,
        monthly_capitalization: bool = True,
    ) -> None:
        self._name = name
        self._currency = currency.upper()
        self._interest = to_decimal(interest)
        self._converter = converter
        self._settings = settings or PerformanceSettings()
        self._monthly_capitalization = monthly_capitalization

    @property
    def name(self) -> str:
        return self._name

    @property
    def provider(self) -> str | None:
        return None

    @property
    def currency(self) -> str:
        return self._currency

    @property
    def interest(self) -> Decimal:
        return self._interest

    def backtest(
        self,
        method: BenchmarkPerformanceType,
        currency: str,
        cash_flows: Sequence[CashAssets],
        today: date,
        performance_from: date | None,
    ) -> list[BacktestingResult]:
        behavior = VirtualDeposit(
            self._currency, self._interest, self._converter, self._monthly_capitalization
        )
        settings = self._settings
        if currency.upper() == self._currency:
            settings = replace(settings, min_days=SAME_CURRENCY_DEPOSIT_MIN_DAYS)

        return Backtester(
            behavior, self.full_name, method, currency, cash_flows, today,
            self._converter, performance_from, settings,
        ).run()
