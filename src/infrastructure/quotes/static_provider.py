"""
In-memory quotes provider.

Quotes are loaded from pandas DataFrames (or CSV files) with one row per
daily close: `date, exchange, symbol, currency, price`.
"""

from collections.abc import Mapping, Sequence
from datetime import date
from pathlib import Path

import pandas as pd
from loguru import logger

from src.core.enums import Exchange
from src.core.exceptions.backtest import DataUnavailableError, InputError
from src.core.models.cash import Cash
from src.core.models.quotes import HistoricalQuotes
from src.core.types.financial import to_decimal

REQUIRED_COLUMNS = ("date", "exchange", "symbol", "currency", "price")


class StaticQuotesProvider:
    """Serves historical and live quotes from memory."""

    def __init__(
        self,
        historical: Mapping[tuple[Exchange, str], HistoricalQuotes] | None = None,
        live: Mapping[str, Cash] | None = None,
    ) -> None:
        self._historical: dict[tuple[Exchange, str], HistoricalQuotes] = dict(historical or {})
        self._live: dict[str, Cash] = dict(live or {})

    @classmethod
    def from_frame(cls, frame: pd.DataFrame, live: Mapping[str, Cash] | None = None) -> "StaticQuotesProvider":
        """Build a provider from a quotes table.

        Raises:
            InputError: If required columns are missing or values are invalid
        """
        missing = [column for column in REQUIRED_COLUMNS if column not in frame.columns]
        if missing:
            raise InputError(f"Quotes table is missing columns: {', '.join(missing)}")

        try:
            prices = pd.DataFrame(
                {
                    "date": pd.to_datetime(frame["date"]).dt.normalize().to_numpy(),
                    "exchange": [Exchange.from_string(str(exchange)) for exchange in frame["exchange"]],
                    "symbol": frame["symbol"].astype(str).to_numpy(),
                    "price": [
                        Cash(str(currency), to_decimal(str(price)))
                        for currency, price in zip(frame["currency"], frame["price"], strict=True)
                    ],
                }
            )
        except ValueError as e:
            raise InputError(f"Invalid quotes table: {e}") from e

        quotes = {
            (Exchange(exchange), symbol): HistoricalQuotes.from_series(group.set_index("date")["price"])
            for (exchange, symbol), group in prices.groupby(["exchange", "symbol"], sort=False)
        }

        logger.debug(f"Loaded {len(frame)} quotes for {len(quotes)} instruments.")
        return cls(quotes, live)

    @classmethod
    def read_csv(cls, path: str | Path, live: Mapping[str, Cash] | None = None) -> "StaticQuotesProvider":
        """Build a provider from a CSV file.

        Raises:
            DataUnavailableError: If the file can't be read
            InputError: If the file contents are invalid
        """
        try:
            # Prices are parsed as strings to keep them exact
            frame = pd.read_csv(path, dtype={"price": str, "symbol": str})
        except (OSError, pd.errors.ParserError, pd.errors.EmptyDataError) as e:
            raise DataUnavailableError(f"Unable to read quotes from {path}: {e}") from e
        return cls.from_frame(frame, live)

    def add(self, exchange: Exchange, symbol: str, quotes: HistoricalQuotes) -> None:
        self._historical[(exchange, symbol)] = quotes

    def get_historical(self, exchange: Exchange, symbol: str, period: tuple[date, date]) -> HistoricalQuotes:
        quotes = self._historical.get((exchange, symbol))
        if quotes is None:
            return HistoricalQuotes()
        return quotes.slice(*period)

    def get_live(self, symbol: str, exchanges: Sequence[Exchange]) -> Cash:
        price = self._live.get(symbol)
        if price is None:
            raise DataUnavailableError(
                f"There is no live quote for {symbol} ({', '.join(str(exchange) for exchange in exchanges)})"
            )
        return price
