"""
Benchmark instrument timeline.

Resolves which instrument of a benchmark chain is active at a given date and
loads the historical quotes the backtester needs while it stays active.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from loguru import logger

from src.core.exceptions.backtest import DataUnavailableError, StaleDataError
from src.core.models.cash import Cash
from src.core.models.instrument import BenchmarkDefinition, BenchmarkInstrument
from src.core.models.quotes import HistoricalQuotes
from src.core.protocols import QuotesProvider
from src.core.types.financial import ZERO


@dataclass
class CurrentBenchmarkInstrument:
    """The instrument the virtual portfolio is currently invested into.

    Replaced wholesale at every transition; `until` is the exclusive end of its
    validity (None for the last chain entry).
    """

    spec: BenchmarkInstrument
    quotes: HistoricalQuotes
    until: date | None
    quantity: Decimal = ZERO

    def get_price(self, day: date) -> Cash:
        """Get the instrument price at the given date.

        An exact quote is preferred; otherwise the latest earlier quote is used
        if it is not older than the exchange's last working day.

        Raises:
            StaleDataError: If the nearest known quote is too old
            DataUnavailableError: If there are no quotes at all
        """
        nearest = []

        previous = self.quotes.last_at_or_before(day)
        if previous is not None:
            price_date, price = previous
            if price_date >= self.spec.id.exchange.min_last_working_day(day):
                return price
            nearest.append(price_date)

        following = self.quotes.first_at_or_after(day)
        if following is not None:
            nearest.append(following[0])

        if not nearest:
            raise DataUnavailableError(f"There are no historical quotes for {self.spec.id.symbol}")

        raise StaleDataError(self.spec.id.symbol, day, nearest)

    def get_value(self, day: date) -> Cash:
        """Get the position value at the given date."""
        return self.get_price(day) * self.quantity


class BenchmarkInstrumentTimeline:
    """A benchmark definition bound to a quotes provider."""

    def __init__(self, definition: BenchmarkDefinition, quotes: QuotesProvider) -> None:
        self._definition = definition
        self._quotes = quotes

    @property
    def definition(self) -> BenchmarkDefinition:
        return self._definition

    def select_instrument(
        self, as_of: date, horizon: date, is_first: bool
    ) -> tuple[date, CurrentBenchmarkInstrument]:
        """Select the instrument active at the given date.

        Args:
            as_of: Date to resolve the instrument for
            horizon: Last date quotes may be needed for when the instrument is the last one
            is_first: The instrument is the initial one of a run

        Returns:
            Transition date and the new current instrument with zero quantity

        Raises:
            DataUnavailableError: If the date predates the chain or there are no quotes
        """
        entry = self._definition.lookup(as_of)
        if entry is None:
            raise DataUnavailableError(
                f"There is no {self._definition.full_name} benchmark instrument for {as_of.isoformat()}"
            )
        effective_date, instrument = entry

        # Chain dates are chosen as low-volatility transition days, so they are
        # kept as is. The first instrument has no actual transition, which allows
        # a narrower quotes window.
        transition_date = as_of if is_first else effective_date

        until = self._definition.next_transition(effective_date)
        period = (
            instrument.id.exchange.min_last_working_day(transition_date),
            max(transition_date, until if until is not None else horizon),
        )

        logger.debug(
            f"Select new benchmark instrument for {as_of.isoformat()}+: {instrument.id.symbol} "
            f"({period[0].isoformat()} - {period[1].isoformat()})."
        )

        quotes = self._load_quotes(instrument, period)
        return transition_date, CurrentBenchmarkInstrument(spec=instrument, quotes=quotes, until=until)

    def _load_quotes(self, instrument: BenchmarkInstrument, period: tuple[date, date]) -> HistoricalQuotes:
        for symbol in instrument.symbols():
            quotes = self._quotes.get_historical(instrument.id.exchange, symbol, period)
            if quotes:
                if symbol != instrument.id.symbol:
                    logger.debug(f"Using {symbol} alias quotes for {instrument.id.symbol}.")
                return quotes

        raise DataUnavailableError(
            f"There are no historical quotes for {', '.join(instrument.symbols())} "
            f"({instrument.id.exchange}) within {period[0].isoformat()} - {period[1].isoformat()}"
        )
