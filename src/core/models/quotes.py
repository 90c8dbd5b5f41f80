"""
Historical quotes container.
"""

from collections.abc import Iterator, Mapping
from datetime import date

import pandas as pd

from src.core.models.cash import Cash


class HistoricalQuotes:
    """Daily closing prices ordered by date.

    Prices are kept in a date-indexed object Series so Decimal amounts stay
    exact. Provides the range lookups the backtester needs: the latest quote
    at or before a date and the earliest quote at or after a date.
    """

    def __init__(self, quotes: Mapping[date, Cash] | None = None) -> None:
        quotes = quotes or {}
        self._prices = self._normalize(
            pd.Series(
                list(quotes.values()),
                index=pd.DatetimeIndex([pd.Timestamp(day) for day in quotes], name="date"),
                dtype=object,
            )
        )

    @classmethod
    def from_series(cls, prices: pd.Series) -> "HistoricalQuotes":
        """Create quotes from a Series of Cash prices indexed by date.

        Duplicated dates keep the last price.
        """
        quotes = cls()
        quotes._prices = cls._normalize(
            pd.Series(prices.to_numpy(dtype=object), index=pd.DatetimeIndex(prices.index, name="date"), dtype=object)
        )
        return quotes

    @staticmethod
    def _normalize(prices: pd.Series) -> pd.Series:
        prices = prices[~prices.index.duplicated(keep="last")]
        return prices.sort_index()

    def __len__(self) -> int:
        return len(self._prices)

    def __bool__(self) -> bool:
        return not self._prices.empty

    def __iter__(self) -> Iterator[date]:
        return (timestamp.date() for timestamp in self._prices.index)

    def __contains__(self, day: object) -> bool:
        return isinstance(day, date) and pd.Timestamp(day) in self._prices.index

    def __getitem__(self, day: date) -> Cash:
        return self._prices[pd.Timestamp(day)]

    def items(self) -> Iterator[tuple[date, Cash]]:
        """Iterate over (date, price) pairs in chronological order."""
        for timestamp, price in self._prices.items():
            yield timestamp.date(), price

    def last_at_or_before(self, day: date) -> tuple[date, Cash] | None:
        """Get the latest quote dated on or before the given day."""
        position = self._prices.index.searchsorted(pd.Timestamp(day), side="right")
        if position == 0:
            return None
        return self._at(position - 1)

    def first_at_or_after(self, day: date) -> tuple[date, Cash] | None:
        """Get the earliest quote dated on or after the given day."""
        position = self._prices.index.searchsorted(pd.Timestamp(day), side="left")
        if position == len(self._prices):
            return None
        return self._at(position)

    def slice(self, start: date, end: date) -> "HistoricalQuotes":
        """Get the quotes within an inclusive date range."""
        quotes = HistoricalQuotes()
        quotes._prices = self._prices.loc[pd.Timestamp(start):pd.Timestamp(end)]
        return quotes

    def _at(self, position: int) -> tuple[date, Cash]:
        return self._prices.index[position].date(), self._prices.iloc[position]

    def __repr__(self) -> str:
        if self._prices.empty:
            return "HistoricalQuotes(empty)"
        return (
            f"HistoricalQuotes({len(self._prices)} quotes, "
            f"{self._prices.index[0].date().isoformat()} - {self._prices.index[-1].date().isoformat()})"
        )
