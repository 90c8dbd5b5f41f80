"""
Unit tests for quotes providers and caching.
"""

from datetime import date
from decimal import Decimal
from pathlib import Path

import pandas as pd
import pytest

from src.core.enums import Exchange
from src.core.exceptions.backtest import DataUnavailableError, InputError
from src.core.models.cash import Cash
from src.infrastructure.quotes.cache import CachedQuotesProvider
from src.infrastructure.quotes.static_provider import StaticQuotesProvider
from tests.fakes import RecordingQuotesProvider, daily_quotes


@pytest.fixture
def quotes_frame() -> pd.DataFrame:
    return pd.DataFrame(
        {
            "date": ["2020-01-09", "2020-01-10", "2020-01-13", "2020-01-10"],
            "exchange": ["moex", "moex", "MOEX", "us"],
            "symbol": ["FXUS", "FXUS", "FXUS", "SPY"],
            "currency": ["rub", "rub", "rub", "usd"],
            "price": ["4500.5", "4510", "4520.25", "320.1"],
        }
    )


class TestStaticQuotesProvider:
    """Test suite for StaticQuotesProvider."""

    def test_should_load_quotes_from_frame(self, quotes_frame: pd.DataFrame) -> None:
        provider = StaticQuotesProvider.from_frame(quotes_frame)

        quotes = provider.get_historical(Exchange.MOEX, "FXUS", (date(2020, 1, 1), date(2020, 1, 31)))

        assert list(quotes) == [date(2020, 1, 9), date(2020, 1, 10), date(2020, 1, 13)]
        assert quotes[date(2020, 1, 9)] == Cash("RUB", Decimal("4500.5"))

    def test_should_slice_requested_period(self, quotes_frame: pd.DataFrame) -> None:
        provider = StaticQuotesProvider.from_frame(quotes_frame)

        quotes = provider.get_historical(Exchange.MOEX, "FXUS", (date(2020, 1, 10), date(2020, 1, 12)))

        assert list(quotes) == [date(2020, 1, 10)]

    def test_should_return_empty_quotes_for_unknown_symbol(self, quotes_frame: pd.DataFrame) -> None:
        provider = StaticQuotesProvider.from_frame(quotes_frame)

        assert not provider.get_historical(Exchange.US, "FXUS", (date(2020, 1, 1), date(2020, 1, 31)))

    def test_should_reject_frame_without_required_columns(self, quotes_frame: pd.DataFrame) -> None:
        with pytest.raises(InputError, match="currency"):
            StaticQuotesProvider.from_frame(quotes_frame.drop(columns=["currency"]))

    def test_should_reject_invalid_prices(self, quotes_frame: pd.DataFrame) -> None:
        quotes_frame.loc[0, "price"] = "n/a"
        with pytest.raises(InputError, match="Invalid quotes table"):
            StaticQuotesProvider.from_frame(quotes_frame)

    def test_should_read_csv(self, quotes_frame: pd.DataFrame, tmp_path: Path) -> None:
        path = tmp_path / "quotes.csv"
        quotes_frame.to_csv(path, index=False)

        provider = StaticQuotesProvider.read_csv(path)

        quotes = provider.get_historical(Exchange.US, "SPY", (date(2020, 1, 1), date(2020, 1, 31)))
        assert quotes[date(2020, 1, 10)] == Cash("USD", Decimal("320.1"))

    def test_should_fail_on_missing_csv(self, tmp_path: Path) -> None:
        with pytest.raises(DataUnavailableError, match="Unable to read quotes"):
            StaticQuotesProvider.read_csv(tmp_path / "missing.csv")

    def test_should_serve_live_quotes(self) -> None:
        provider = StaticQuotesProvider(live={"SPY": Cash("USD", Decimal(400))})

        assert provider.get_live("SPY", [Exchange.US]) == Cash("USD", Decimal(400))
        with pytest.raises(DataUnavailableError, match="no live quote for QQQ"):
            provider.get_live("QQQ", [Exchange.US])


class TestCachedQuotesProvider:
    """Test suite for CachedQuotesProvider."""

    @pytest.fixture
    def upstream(self) -> RecordingQuotesProvider:
        provider = RecordingQuotesProvider()
        provider.add(Exchange.US, "SPY", daily_quotes(date(2020, 1, 1), date(2020, 12, 31), "300"))
        return provider

    def test_should_cache_historical_quotes(self, upstream: RecordingQuotesProvider) -> None:
        provider = CachedQuotesProvider(upstream)
        period = (date(2020, 3, 1), date(2020, 4, 1))

        first = provider.get_historical(Exchange.US, "SPY", period)
        second = provider.get_historical(Exchange.US, "SPY", period)

        assert first is second
        assert len(upstream.requests) == 1
        assert provider.get_stats() == {"hits": 1, "misses": 1, "size": 1, "max_size": 1000}

    def test_should_key_cache_by_period(self, upstream: RecordingQuotesProvider) -> None:
        provider = CachedQuotesProvider(upstream)

        provider.get_historical(Exchange.US, "SPY", (date(2020, 3, 1), date(2020, 4, 1)))
        provider.get_historical(Exchange.US, "SPY", (date(2020, 3, 1), date(2020, 5, 1)))

        assert len(upstream.requests) == 2

    def test_should_evict_least_recently_used(self, upstream: RecordingQuotesProvider) -> None:
        provider = CachedQuotesProvider(upstream, cache_size=1)

        provider.get_historical(Exchange.US, "SPY", (date(2020, 3, 1), date(2020, 4, 1)))
        provider.get_historical(Exchange.US, "QQQ", (date(2020, 3, 1), date(2020, 4, 1)))
        provider.get_historical(Exchange.US, "SPY", (date(2020, 3, 1), date(2020, 4, 1)))

        assert len(upstream.requests) == 3

    def test_should_clear_cache(self, upstream: RecordingQuotesProvider) -> None:
        provider = CachedQuotesProvider(upstream)
        provider.get_historical(Exchange.US, "SPY", (date(2020, 3, 1), date(2020, 4, 1)))

        provider.clear()

        assert provider.get_stats()["size"] == 0

    def test_should_not_cache_live_quotes(self, upstream: RecordingQuotesProvider) -> None:
        with pytest.raises(DataUnavailableError):
            CachedQuotesProvider(upstream).get_live("SPY", [Exchange.US])

    def test_should_reject_invalid_cache_size(self, upstream: RecordingQuotesProvider) -> None:
        with pytest.raises(ValueError, match="positive"):
            CachedQuotesProvider(upstream, cache_size=0)
