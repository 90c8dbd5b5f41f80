"""
Benchmark instrument domain models.

A benchmark is an ordered chain of instruments keyed by the date each one
becomes effective. Consecutive entries are either renames of the same
underlying instrument or economic substitutions.
"""

from bisect import bisect_right
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal

from src.core.enums import Exchange
from src.core.exceptions.backtest import InputError, UnsupportedCommissionError
from src.core.types.financial import HUNDRED, ZERO


@dataclass(frozen=True)
class BenchmarkInstrumentId:
    """Identity of an instrument: equal ids mean the same underlying instrument."""

    symbol: str
    exchange: Exchange

    def __str__(self) -> str:
        return f"{self.symbol} ({self.exchange})"


@dataclass(frozen=True)
class CommissionSpec:
    """Commission charged when a benchmark instrument is bought.

    Only a plain percentage of the volume is supported by the backtester;
    the other fields exist so that richer broker plans are rejected explicitly.
    """

    percent: Decimal | None = None
    per_share: Decimal | None = None
    minimum: Decimal | None = None
    maximum_percent: Decimal | None = None

    def validate_simple_percentage(self, benchmark: str) -> Decimal:
        """Ensure the spec is a simple percentage and return it.

        Raises:
            UnsupportedCommissionError: If the spec has any non-percentage component
        """
        if self.per_share is not None:
            raise UnsupportedCommissionError(benchmark, "per share commissions are not supported")
        if self.minimum is not None or self.maximum_percent is not None:
            raise UnsupportedCommissionError(benchmark, "commission limits are not supported")
        if self.percent is None:
            raise UnsupportedCommissionError(benchmark, "commission percent is not specified")
        if self.percent < ZERO or self.percent >= HUNDRED:
            raise UnsupportedCommissionError(benchmark, f"invalid commission percent: {self.percent}")
        return self.percent

    def deduct(self, amount: Decimal) -> Decimal:
        """Get the amount left for purchase after the commission."""
        if self.percent is None:
            return amount
        return amount - amount * self.percent / HUNDRED


@dataclass(frozen=True)
class BenchmarkInstrument:
    """A chain entry: instrument identity plus lookup and commission details."""

    id: BenchmarkInstrumentId
    renamed_from: BenchmarkInstrumentId | None = None
    # Historical quote providers handle renames differently: some need the
    # old symbol for the old period, others rekey all history under the new one.
    aliases: tuple[str, ...] = ()
    commission: CommissionSpec | None = None

    @classmethod
    def new(
        cls,
        symbol: str,
        exchange: Exchange,
        aliases: Sequence[str] = (),
        commission: CommissionSpec | None = None,
    ) -> "BenchmarkInstrument":
        """Factory method to create an instrument that is not a rename."""
        if not symbol:
            raise InputError("Benchmark instrument symbol must be non-empty")
        return cls(
            id=BenchmarkInstrumentId(symbol, exchange),
            aliases=tuple(aliases),
            commission=commission,
        )

    def symbols(self) -> tuple[str, ...]:
        """Get the primary symbol followed by the aliases."""
        return (self.id.symbol, *self.aliases)


@dataclass
class BenchmarkDefinition:
    """Benchmark name plus its instrument chain ordered by effective date."""

    name: str
    provider: str | None = None
    _dates: list[date] = field(default_factory=list, init=False, repr=False)
    _instruments: list[BenchmarkInstrument] = field(default_factory=list, init=False, repr=False)

    @classmethod
    def new(
        cls,
        name: str,
        instrument: BenchmarkInstrument,
        provider: str | None = None,
        since: date = date.min,
    ) -> "BenchmarkDefinition":
        """Create a benchmark starting with the given instrument."""
        if not name:
            raise InputError("Benchmark name must be non-empty")
        benchmark = cls(name=name, provider=provider)
        benchmark._append(since, instrument)
        return benchmark

    @property
    def full_name(self) -> str:
        """Get the display name including the provider."""
        if self.provider:
            return f"{self.name} ({self.provider})"
        return self.name

    def then(self, day: date, instrument: BenchmarkInstrument) -> "BenchmarkDefinition":
        """Substitute the benchmark instrument starting from the given date."""
        self._append(day, instrument)
        return self

    def then_rename(self, day: date, instrument: BenchmarkInstrument) -> "BenchmarkDefinition":
        """Register a rename of the current last instrument starting from the given date."""
        last = self._last_instrument()
        renamed = BenchmarkInstrument(
            id=instrument.id,
            renamed_from=last.id,
            aliases=instrument.aliases,
            commission=instrument.commission,
        )
        self._append(day, renamed)
        return self

    def lookup(self, day: date) -> tuple[date, BenchmarkInstrument] | None:
        """Get the latest chain entry effective on or before the given date."""
        index = bisect_right(self._dates, day)
        if index == 0:
            return None
        return self._dates[index - 1], self._instruments[index - 1]

    def next_transition(self, effective_date: date) -> date | None:
        """Get the effective date of the entry following the given one."""
        index = bisect_right(self._dates, effective_date)
        if index == len(self._dates):
            return None
        return self._dates[index]

    def validate_commissions(self) -> None:
        """Reject chains with commission specs the backtester can't model.

        Raises:
            UnsupportedCommissionError: If any entry has a non-percentage commission
        """
        for instrument in self._instruments:
            if instrument.commission is not None:
                instrument.commission.validate_simple_percentage(self.full_name)

    def _last_instrument(self) -> BenchmarkInstrument:
        if not self._instruments:
            raise InputError(f"{self.full_name} benchmark has no instruments")
        return self._instruments[-1]

    def _append(self, day: date, instrument: BenchmarkInstrument) -> None:
        if self._dates:
            last_date = self._dates[-1]
            if day == last_date:
                raise InputError(f"An attempt to override {day.isoformat()} in {self.full_name} benchmark")
            if day < last_date:
                raise InputError("Benchmark instruments chain must be ordered by date")

        self._dates.append(day)
        self._instruments.append(instrument)
