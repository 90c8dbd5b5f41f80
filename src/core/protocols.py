"""
Collaborator protocols.

This module defines the structural interfaces of everything the simulation
core consumes but does not own: the time source, currency conversion and
quote providers. Implementations are shared read-only between concurrently
running backtests, so none of these interfaces exposes mutable state.
"""

from collections.abc import Sequence
from datetime import date
from decimal import Decimal
from typing import Protocol

from src.core.enums import Exchange
from src.core.models.cash import Cash
from src.core.models.quotes import HistoricalQuotes


class Clock(Protocol):
    """Time source answering "what is today?"."""

    def today(self) -> date:
        """Return the current date according to this clock."""
        ...


class CurrencyConverter(Protocol):
    """Protocol defining the currency conversion collaborator."""

    def convert(self, amount: Decimal, from_currency: str, to_currency: str, day: date) -> Decimal:
        """Convert an amount at the rate known for the given date.

        Raises:
            DataUnavailableError: If no rate is known for the date
        """
        ...

    def real_time_convert(self, amount: Decimal, from_currency: str, to_currency: str) -> Decimal:
        """Convert an amount at the current rate."""
        ...


class QuotesProvider(Protocol):
    """Protocol defining the quotes collaborator."""

    def get_historical(
        self, exchange: Exchange, symbol: str, period: tuple[date, date]
    ) -> HistoricalQuotes:
        """Get daily quotes within an inclusive period (possibly empty)."""
        ...

    def get_live(self, symbol: str, exchanges: Sequence[Exchange]) -> Cash:
        """Get the current price of a symbol from the first exchange that knows it."""
        ...
