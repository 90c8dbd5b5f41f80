"""
In-memory currency converter.

Rates are stored as the price of one unit of a currency in the base currency.
Conversions between two non-base currencies go through the base currency.
"""

from collections.abc import Mapping
from datetime import date, timedelta
from decimal import Decimal

from loguru import logger

from src.core.enums import Exchange
from src.core.exceptions.backtest import DataUnavailableError
from src.core.models.cash import Cash
from src.core.models.quotes import HistoricalQuotes
from src.core.protocols import Clock


class StaticCurrencyConverter:
    """Converts amounts using daily rate tables and the latest live rates."""

    def __init__(
        self,
        base_currency: str,
        rates: Mapping[str, Mapping[date, Decimal]],
        clock: Clock,
        live_rates: Mapping[str, Decimal] | None = None,
        strict: bool = True,
    ) -> None:
        """Initialize the converter.

        Args:
            base_currency: Currency all rates are quoted in
            rates: Daily rates per currency
            clock: Source of today's date
            live_rates: Current rates per currency for real time conversions
            strict: Reject conversions for dates after today
        """
        self._base_currency = base_currency.upper()
        self._rates = {
            currency.upper(): HistoricalQuotes(
                {day: Cash(self._base_currency, rate) for day, rate in daily_rates.items()}
            )
            for currency, daily_rates in rates.items()
        }
        self._live_rates = {currency.upper(): rate for currency, rate in (live_rates or {}).items()}
        self._clock = clock
        self._strict = strict

    def convert(self, amount: Decimal, from_currency: str, to_currency: str, day: date) -> Decimal:
        """Convert an amount using the rates known at the given date.

        Raises:
            DataUnavailableError: If there is no recent enough rate or the date is in the future
        """
        from_currency, to_currency = from_currency.upper(), to_currency.upper()
        if from_currency == to_currency:
            return amount

        today = self._clock.today()
        if self._strict and day > today:
            raise DataUnavailableError(f"An attempt to make currency conversion for future date: {day.isoformat()}")

        if from_currency != self._base_currency:
            amount *= self._get_rate(from_currency, day, today)
        if to_currency != self._base_currency:
            amount /= self._get_rate(to_currency, day, today)

        return amount

    def real_time_convert(self, amount: Decimal, from_currency: str, to_currency: str) -> Decimal:
        """Convert an amount using live rates.

        Raises:
            DataUnavailableError: If there is no live rate for a currency
        """
        from_currency, to_currency = from_currency.upper(), to_currency.upper()
        if from_currency == to_currency:
            return amount

        if from_currency != self._base_currency:
            amount *= self._get_live_rate(from_currency)
        if to_currency != self._base_currency:
            amount /= self._get_live_rate(to_currency)

        return amount

    def _get_rate(self, currency: str, day: date, today: date) -> Decimal:
        rates = self._rates.get(currency)
        if rates is None:
            raise DataUnavailableError(f"Unsupported currency conversion: {currency} -> {self._base_currency}")

        # Today's rate may be not published yet
        search_from = day - timedelta(days=1) if day == today else day
        min_date = Exchange.MOEX.min_last_working_day(day)

        found = rates.last_at_or_before(search_from)
        if found is None or found[0] < min_date:
            raise DataUnavailableError(
                f"Unable to find {currency} currency rate for {day.isoformat()} "
                f"with {(day - min_date).days} days precision"
            )

        rate_date, rate = found
        if rate_date != day:
            logger.trace(f"Using {rate_date.isoformat()} {currency} rate for {day.isoformat()}.")
        return rate.amount

    def _get_live_rate(self, currency: str) -> Decimal:
        rate = self._live_rates.get(currency)
        if rate is None:
            raise DataUnavailableError(f"There is no live {currency} currency rate")
        return rate
