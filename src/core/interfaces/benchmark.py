"""
Benchmark interfaces.
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from datetime import date

from src.core.enums import BenchmarkPerformanceType, SteppingMode
from src.core.models.backtest import BacktestingResult
from src.core.models.cash import Cash, CashAssets, MultiCurrencyCashAccount


class IInstrumentBehavior(ABC):
    """What the virtual portfolio is invested into.

    The generic backtester owns the calendar and the performance bookkeeping;
    a behavior owns the holdings and reacts to cash flows and elapsed time.
    """

    @abstractmethod
    def start(self, start_date: date, today: date) -> None:
        """Prepare holdings for a run starting at the given date."""
        pass

    @abstractmethod
    def next_event_date(self) -> date | None:
        """Get the next date the behavior must be advanced to, if any."""
        pass

    @abstractmethod
    def advance_to(self, day: date, mode: SteppingMode) -> None:
        """Process everything that happens between the last processed date and the given one."""
        pass

    @abstractmethod
    def process_cash_flow(self, day: date, cash: Cash) -> None:
        """Invest a real cash flow (positive or negative) into holdings."""
        pass

    @abstractmethod
    def net_assets(self, day: date) -> MultiCurrencyCashAccount:
        """Get holdings valued at the given date."""
        pass


class IBenchmark(ABC):
    """Abstract interface for something a portfolio can be backtested against."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Benchmark name."""
        pass

    @property
    @abstractmethod
    def provider(self) -> str | None:
        """Quotes provider the benchmark was configured for."""
        pass

    @property
    def full_name(self) -> str:
        """Get the display name including the provider."""
        if self.provider:
            return f"{self.name} ({self.provider})"
        return self.name

    @abstractmethod
    def backtest(
        self,
        method: BenchmarkPerformanceType,
        currency: str,
        cash_flows: Sequence[CashAssets],
        today: date,
        performance_from: date | None,
    ) -> list[BacktestingResult]:
        """Replay cash flows into the benchmark.

        `performance_from` selects full stepping with daily results starting
        from that date; None selects fast stepping with a single final result.
        """
        pass
