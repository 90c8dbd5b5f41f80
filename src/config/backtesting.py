"""
Pydantic models for backtesting configuration.

The models only validate and hold configuration; `to_definition()` and
`to_benchmark()` turn them into domain objects so the engine never depends
on pydantic.
"""

from datetime import date
from decimal import Decimal
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from src.analysis.backtesting.backtester import PerformanceSettings
from src.analysis.backtesting.benchmarks import DepositBenchmark, StockBenchmark
from src.analysis.inflation import merge_inflation_rates
from src.core.constants import DEFAULT_CURRENCIES, MIN_DAYS_FOR_PERFORMANCE, PORTFOLIO_INSTRUMENT
from src.core.enums import BenchmarkPerformanceType, Exchange, TransitionType
from src.core.exceptions.backtest import ConfigurationError
from src.core.models.instrument import BenchmarkDefinition, BenchmarkInstrument, CommissionSpec
from src.core.protocols import CurrencyConverter, QuotesProvider


class CommissionConfig(BaseModel):
    """Commission charged on benchmark instrument purchases."""

    percent: Decimal | None = Field(default=None, ge=0, lt=100, description="Percent of the volume")
    per_share: Decimal | None = Field(default=None, ge=0, description="Commission per share")
    minimum: Decimal | None = Field(default=None, ge=0, description="Minimum commission")
    maximum_percent: Decimal | None = Field(default=None, ge=0, description="Maximum percent of the volume")

    def to_spec(self) -> CommissionSpec:
        return CommissionSpec(
            percent=self.percent,
            per_share=self.per_share,
            minimum=self.minimum,
            maximum_percent=self.maximum_percent,
        )


class InstrumentTransition(BaseModel):
    """A benchmark instrument change effective from a date."""

    symbol: str = Field(..., min_length=1)
    exchange: Exchange | None = Field(default=None, description="Defaults to the benchmark exchange")
    aliases: list[str] = Field(default_factory=list)
    transition_type: TransitionType = Field(default=TransitionType.CONVERT, alias="type")
    commission: CommissionConfig | None = None

    model_config = {"populate_by_name": True}

    @field_validator("exchange", mode="before")
    @classmethod
    def parse_exchange(cls, v):
        if isinstance(v, str):
            return Exchange.from_string(v)
        return v


class BenchmarkConfig(BaseModel):
    """A benchmark backed by an exchange-traded instrument chain."""

    name: str = Field(..., min_length=1)
    provider: str | None = Field(default=None, description="Quotes provider the benchmark is bound to")
    symbol: str = Field(..., min_length=1)
    exchange: Exchange
    aliases: list[str] = Field(default_factory=list)
    commission: CommissionConfig | None = None
    transitions: dict[date, InstrumentTransition] = Field(default_factory=dict)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Reject the name reserved for the portfolio itself."""
        if v == PORTFOLIO_INSTRUMENT:
            raise ValueError(f"{PORTFOLIO_INSTRUMENT!r} is a reserved benchmark name")
        return v

    @field_validator("exchange", mode="before")
    @classmethod
    def parse_exchange(cls, v):
        if isinstance(v, str):
            return Exchange.from_string(v)
        return v

    def to_definition(self) -> BenchmarkDefinition:
        """Build the instrument chain.

        Raises:
            InputError: If transition dates are invalid
        """
        definition = BenchmarkDefinition.new(
            self.name,
            BenchmarkInstrument.new(
                self.symbol, self.exchange, self.aliases, self.commission.to_spec() if self.commission else None
            ),
            provider=self.provider,
        )

        for day, transition in sorted(self.transitions.items()):
            commission = transition.commission or self.commission
            instrument = BenchmarkInstrument.new(
                transition.symbol,
                transition.exchange or self.exchange,
                transition.aliases,
                commission.to_spec() if commission else None,
            )
            if transition.transition_type is TransitionType.RENAME:
                definition.then_rename(day, instrument)
            else:
                definition.then(day, instrument)

        return definition


class DepositBenchmarkConfig(BaseModel):
    """A virtual bank deposit benchmark."""

    name: str = Field(..., min_length=1)
    currency: str = Field(..., min_length=3, max_length=3)
    interest: Decimal = Field(..., ge=0, description="Annual interest in percent")
    monthly_capitalization: bool = True

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        if v == PORTFOLIO_INSTRUMENT:
            raise ValueError(f"{PORTFOLIO_INSTRUMENT!r} is a reserved benchmark name")
        return v

    @field_validator("currency")
    @classmethod
    def normalize_currency(cls, v: str) -> str:
        return v.upper()

    def to_benchmark(self, converter: CurrencyConverter, settings: PerformanceSettings) -> DepositBenchmark:
        return DepositBenchmark(
            self.name, self.currency, self.interest, converter, settings, self.monthly_capitalization
        )


class BacktestingConfig(BaseModel):
    """Complete backtesting configuration."""

    benchmarks: list[BenchmarkConfig] = Field(default_factory=list)
    deposit_benchmarks: list[DepositBenchmarkConfig] = Field(default_factory=list)
    currencies: list[str] = Field(default_factory=lambda: list(DEFAULT_CURRENCIES), min_length=1)
    methods: list[BenchmarkPerformanceType] = Field(default_factory=lambda: list(BenchmarkPerformanceType))
    inflation: dict[str, dict[int, Decimal]] = Field(
        default_factory=dict, description="Yearly inflation in percent per currency extending the built-in tables"
    )
    min_performance_days: int = Field(default=MIN_DAYS_FOR_PERFORMANCE, ge=1)
    cash_benchmarks: bool = Field(default=True, description="Compare against keeping cash in each reporting currency")

    @field_validator("currencies")
    @classmethod
    def normalize_currencies(cls, v: list[str]) -> list[str]:
        for currency in v:
            if len(currency) != 3 or not currency.isalpha():
                raise ValueError(f"Invalid currency code: {currency!r}")
        return [currency.upper() for currency in v]

    @field_validator("methods", mode="before")
    @classmethod
    def parse_methods(cls, v):
        if isinstance(v, list):
            return [BenchmarkPerformanceType.from_string(m) if isinstance(m, str) else m for m in v]
        return v

    @field_validator("inflation")
    @classmethod
    def normalize_inflation(cls, v: dict[str, dict[int, Decimal]]) -> dict[str, dict[int, Decimal]]:
        return {currency.upper(): rates for currency, rates in v.items()}

    @model_validator(mode="after")
    def validate_unique_names(self) -> "BacktestingConfig":
        """Reject benchmarks that can't be told apart in the results."""
        seen: set[tuple[str, str | None]] = set()
        keys = [(b.name, b.provider) for b in self.benchmarks] + [(d.name, None) for d in self.deposit_benchmarks]

        for key in keys:
            if key in seen:
                name, provider = key
                raise ValueError(f"Duplicated benchmark name: {name}" + (f" ({provider})" if provider else ""))
            seen.add(key)

        return self

    @classmethod
    def from_json_file(cls, path: str | Path) -> "BacktestingConfig":
        """Load configuration from a JSON file.

        Raises:
            ConfigurationError: If the file can't be read or is invalid
        """
        try:
            return cls.model_validate_json(Path(path).read_text(encoding="utf-8"))
        except OSError as e:
            raise ConfigurationError(f"Unable to read {path}: {e}") from e
        except ValidationError as e:
            raise ConfigurationError(f"Invalid backtesting configuration in {path}: {e}") from e

    def performance_settings(self) -> PerformanceSettings:
        return PerformanceSettings(
            min_days=self.min_performance_days, inflation_rates=merge_inflation_rates(self.inflation)
        )

    def build_benchmarks(
        self, quotes: QuotesProvider, converter: CurrencyConverter
    ) -> list[StockBenchmark | DepositBenchmark]:
        """Instantiate all configured benchmarks.

        Raises:
            InputError: If a benchmark chain is invalid
            UnsupportedCommissionError: If a commission can't be modeled
        """
        settings = self.performance_settings()

        benchmarks: list[StockBenchmark | DepositBenchmark] = [
            StockBenchmark(config.to_definition(), quotes, converter, settings) for config in self.benchmarks
        ]
        benchmarks.extend(config.to_benchmark(converter, settings) for config in self.deposit_benchmarks)

        return benchmarks
