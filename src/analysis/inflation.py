"""
Inflation adjustment of cash flows.
"""

from collections.abc import Mapping, Sequence
from datetime import date
from decimal import Decimal

from src.core.enums import BenchmarkPerformanceType
from src.core.exceptions.backtest import ConfigurationError
from src.core.models.transaction import Transaction
from src.core.types.financial import HUNDRED

# https://www.statbureau.org/ru/russia/inflation-tables
RUSSIA_INFLATION: dict[int, Decimal] = {
    year: Decimal(rate)
    for year, rate in {
        1991: "160.40", 1992: "2508.85", 1993: "839.87", 1994: "215.02", 1995: "131.33",
        1996: "21.81", 1997: "11.03", 1998: "84.44", 1999: "36.56", 2000: "20.20",
        2001: "18.58", 2002: "15.06", 2003: "11.99", 2004: "11.74", 2005: "10.91",
        2006: "9.00", 2007: "11.87", 2008: "13.28", 2009: "8.80", 2010: "8.78",
        2011: "6.10", 2012: "6.58", 2013: "6.45", 2014: "11.36", 2015: "12.91",
        2016: "5.38", 2017: "2.52", 2018: "4.27", 2019: "3.05", 2020: "4.91",
        2021: "8.39", 2022: "11.92", 2023: "7.42", 2024: "9.51",
    }.items()
}

# https://fred.stlouisfed.org/series/FPCPITOTLZGUSA
US_INFLATION: dict[int, Decimal] = {
    year: Decimal(rate)
    for year, rate in {
        1960: "1.45797598627786", 1961: "1.07072414764723", 1962: "1.19877334820185",
        1963: "1.2396694214876", 1964: "1.27891156462583", 1965: "1.58516926383669",
        1966: "3.01507537688439", 1967: "2.77278562259307", 1968: "4.27179615288534",
        1969: "5.4623862002875", 1970: "5.83825533848253", 1971: "4.29276668813045",
        1972: "3.27227824655283", 1973: "6.17776006377041", 1974: "11.0548048048048",
        1975: "9.14314686496534", 1976: "5.74481263549085", 1977: "6.50168399472839",
        1978: "7.63096383885602", 1979: "11.2544711292795", 1980: "13.5492019749684",
        1981: "10.3347153402771", 1982: "6.13142700027494", 1983: "3.21243523316063",
        1984: "4.30053547523427", 1985: "3.54564415209369", 1986: "1.89804772234275",
        1987: "3.66456321751691", 1988: "4.07774110744408", 1989: "4.82700303008949",
        1990: "5.39795643990322", 1991: "4.23496396453853", 1992: "3.0288196781497",
        1993: "2.95165696638554", 1994: "2.6074415921546", 1995: "2.80541968853655",
        1996: "2.9312041999344", 1997: "2.33768993730741", 1998: "1.55227909874362",
        1999: "2.18802719697358", 2000: "3.37685727149935", 2001: "2.82617111885402",
        2002: "1.58603162650603", 2003: "2.27009497336113", 2004: "2.67723669309173",
        2005: "3.39274684549547", 2006: "3.22594410070407", 2007: "2.85267248150136",
        2008: "3.83910029665101", 2009: "-0.35554626629975", 2010: "1.64004344238989",
        2011: "3.15684156862206", 2012: "2.06933726526059", 2013: "1.46483265562714",
        2014: "1.62222297740821", 2015: "0.118627135552435", 2016: "1.26158320570537",
        2017: "2.13011000365963", 2018: "2.44258329692818", 2019: "1.81221007526015",
        2020: "1.23358439630637", 2021: "4.69785886363739", 2022: "8.00279982052117",
        2023: "4.11633838374488", 2024: "2.9",
    }.items()
}

# Yearly inflation in percent per currency
DEFAULT_INFLATION_RATES: dict[str, dict[int, Decimal]] = {
    "RUB": RUSSIA_INFLATION,
    "USD": US_INFLATION,
}


def merge_inflation_rates(
    overrides: Mapping[str, Mapping[int, Decimal]],
    base: Mapping[str, Mapping[int, Decimal]] = DEFAULT_INFLATION_RATES,
) -> dict[str, dict[int, Decimal]]:
    """Extend per-currency inflation tables, overriding rates of the same years."""
    rates = {currency.upper(): dict(yearly_rates) for currency, yearly_rates in base.items()}
    for currency, yearly_rates in overrides.items():
        rates.setdefault(currency.upper(), {}).update(yearly_rates)
    return rates


class InflationCalc:
    """Inflates historical amounts to a target date using yearly inflation rates.

    Each calendar year contributes pro rata by the number of days spent in it;
    years without a known rate are treated as zero inflation.
    """

    def __init__(self, currency: str, today: date, yearly_rates: Mapping[int, Decimal]) -> None:
        self._currency = currency
        self._today = today
        self._yearly_rates = yearly_rates

    @classmethod
    def for_currency(
        cls, currency: str, today: date, rates: Mapping[str, Mapping[int, Decimal]]
    ) -> "InflationCalc":
        """Create a calculator from per-currency rate tables.

        Raises:
            ConfigurationError: If there are no rates for the currency
        """
        yearly_rates = rates.get(currency.upper())
        if yearly_rates is None:
            raise ConfigurationError(f"{currency} currency is not supported by inflation calculator")
        return cls(currency.upper(), today, yearly_rates)

    def adjust(self, day: date, amount: Decimal) -> Decimal:
        """Inflate an amount from the given date to the calculator's date."""
        while day < self._today:
            year = day.year
            next_year = date(year + 1, 1, 1)
            period_end = self._today if year == self._today.year else next_year

            inflation = self._yearly_rates.get(year)
            if inflation is not None:
                days_in_year = (next_year - date(year, 1, 1)).days
                days = (period_end - day).days
                amount += amount * inflation / HUNDRED * Decimal(days) / Decimal(days_in_year)

            day = period_end

        return amount


def adjust_transactions(
    method: BenchmarkPerformanceType,
    currency: str,
    today: date,
    transactions: Sequence[Transaction],
    inflation_rates: Mapping[str, Mapping[int, Decimal]],
) -> Sequence[Transaction]:
    """Prepare transactions for performance calculation with the given method."""
    if method is BenchmarkPerformanceType.VIRTUAL:
        return transactions

    calc = InflationCalc.for_currency(currency, today, inflation_rates)
    return [
        Transaction(transaction.date, calc.adjust(transaction.date, transaction.amount))
        for transaction in transactions
    ]
