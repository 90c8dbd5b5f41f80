"""
Quotes caching.

Backtesting runs request the same quote windows again and again (every run of
a benchmark walks the same chain), so historical responses are memoized by
(exchange, symbol, period). Live quotes are never cached.
"""

from collections.abc import Sequence
from datetime import date
from threading import RLock

from cachetools import LRUCache
from loguru import logger

from src.core.enums import Exchange
from src.core.models.cash import Cash
from src.core.models.quotes import HistoricalQuotes
from src.core.protocols import QuotesProvider

type QuotesKey = tuple[Exchange, str, date, date]


class CachedQuotesProvider:
    """Thread-safe LRU cache in front of another quotes provider."""

    DEFAULT_CACHE_SIZE = 1000

    def __init__(self, provider: QuotesProvider, cache_size: int = DEFAULT_CACHE_SIZE) -> None:
        if cache_size <= 0:
            raise ValueError("Cache size must be positive")

        self._provider = provider
        self._cache: LRUCache[QuotesKey, HistoricalQuotes] = LRUCache(maxsize=cache_size)
        self._cache_lock = RLock()
        self._hits = 0
        self._misses = 0

    def get_historical(self, exchange: Exchange, symbol: str, period: tuple[date, date]) -> HistoricalQuotes:
        key = (exchange, symbol, *period)

        with self._cache_lock:
            quotes = self._cache.get(key)
            if quotes is not None:
                self._hits += 1
                return quotes
            self._misses += 1

        # Fetched outside of the lock
        quotes = self._provider.get_historical(exchange, symbol, period)
        logger.debug(f"Cached {symbol} ({exchange}) quotes for {period[0].isoformat()} - {period[1].isoformat()}.")

        with self._cache_lock:
            self._cache[key] = quotes
        return quotes

    def get_live(self, symbol: str, exchanges: Sequence[Exchange]) -> Cash:
        return self._provider.get_live(symbol, exchanges)

    def clear(self) -> None:
        with self._cache_lock:
            self._cache.clear()
            logger.debug(f"Quotes cache cleared: {self._hits} hits, {self._misses} misses.")
            self._hits = 0
            self._misses = 0

    def get_stats(self) -> dict[str, int]:
        with self._cache_lock:
            return {
                "hits": self._hits,
                "misses": self._misses,
                "size": len(self._cache),
                "max_size": int(self._cache.maxsize),
            }
