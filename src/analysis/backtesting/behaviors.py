"""
Instrument behaviors driven by the generic backtester.

- HeldInstrument: a quantity of a priced instrument resolved from a benchmark
  chain, including renames and substitutions.
- VirtualDeposit: a bank deposit balance delegated to DepositEmulator.
"""

from datetime import date
from decimal import Decimal

from loguru import logger

from src.analysis.deposit_emulator import DepositEmulator
from src.core.enums import SteppingMode
from src.core.exceptions.backtest import DataUnavailableError, InputError
from src.core.interfaces.benchmark import IInstrumentBehavior
from src.core.models.cash import Cash, MultiCurrencyCashAccount
from src.core.models.instrument import CommissionSpec
from src.core.models.transaction import InterestPeriod, Transaction
from src.core.protocols import CurrencyConverter
from src.core.types.financial import ZERO, to_decimal

from .timeline import BenchmarkInstrumentTimeline, CurrentBenchmarkInstrument


class HeldInstrument(IInstrumentBehavior):
    """Holds the current benchmark instrument, keeping no idle cash between events."""

    def __init__(self, timeline: BenchmarkInstrumentTimeline, converter: CurrencyConverter) -> None:
        self._timeline = timeline
        self._converter = converter
        self._cash_assets = MultiCurrencyCashAccount()
        self._instrument: CurrentBenchmarkInstrument | None = None
        self._today: date | None = None

    @property
    def instrument(self) -> CurrentBenchmarkInstrument:
        if self._instrument is None:
            raise InputError("Held instrument is used before the run has started")
        return self._instrument

    def start(self, start_date: date, today: date) -> None:
        self._today = today
        self._cash_assets.clear()
        _, self._instrument = self._timeline.select_instrument(start_date, today, is_first=True)

    def next_event_date(self) -> date | None:
        return self.instrument.until

    def advance_to(self, day: date, mode: SteppingMode) -> None:
        while self.instrument.until is not None and day >= self.instrument.until:
            self._transition(self.instrument.until)

    def process_cash_flow(self, day: date, cash: Cash) -> None:
        self._cash_assets.deposit(cash)
        self._invest(self.instrument, day)

    def net_assets(self, day: date) -> MultiCurrencyCashAccount:
        net_assets = MultiCurrencyCashAccount()
        net_assets.add(self._cash_assets)
        net_assets.deposit(self.instrument.get_value(day))
        return net_assets

    def _transition(self, day: date) -> None:
        if self._today is None:
            raise InputError("Held instrument is used before the run has started")
        old_instrument = self.instrument

        transition_date, new_instrument = self._timeline.select_instrument(day, self._today, is_first=False)

        if new_instrument.spec.renamed_from == old_instrument.spec.id:
            new_instrument.quantity = old_instrument.quantity
        else:
            self._cash_assets.deposit(old_instrument.get_value(transition_date))
            self._invest(new_instrument, transition_date, new_instrument.spec.commission)

        logger.debug(
            f"Converted {old_instrument.quantity} {old_instrument.spec.id.symbol} -> "
            f"{new_instrument.quantity} {new_instrument.spec.id.symbol} at {transition_date.isoformat()}."
        )
        self._instrument = new_instrument

    def _invest(
        self, instrument: CurrentBenchmarkInstrument, day: date, commission: CommissionSpec | None = None
    ) -> None:
        price = instrument.get_price(day)
        if price.amount <= ZERO:
            raise DataUnavailableError(
                f"Got an invalid {instrument.spec.id.symbol} price at {day.isoformat()}: {price}"
            )

        cash = self._cash_assets.total_assets(day, price.currency, self._converter)
        if commission is not None and cash > ZERO:
            cash = commission.deduct(cash)

        instrument.quantity += cash / price.amount
        self._cash_assets.clear()


class VirtualDeposit(IInstrumentBehavior):
    """Keeps all money on a virtual bank deposit in a fixed currency."""

    def __init__(
        self,
        currency: str,
        annual_rate: Decimal | int | str,
        converter: CurrencyConverter,
        monthly_capitalization: bool = True,
    ) -> None:
        self._currency = currency.upper()
        self._annual_rate = to_decimal(annual_rate)
        self._converter = converter
        self._monthly_capitalization = monthly_capitalization
        self._emulator: DepositEmulator | None = None

    @property
    def emulator(self) -> DepositEmulator:
        if self._emulator is None:
            raise InputError("Virtual deposit is used before the run has started")
        return self._emulator

    def start(self, start_date: date, today: date) -> None:
        self._emulator = DepositEmulator(
            start_date,
            today,
            self._annual_rate,
            monthly_capitalization=self._monthly_capitalization,
            interest_periods=[InterestPeriod(start_date, today)],
        )
        logger.debug(
            f"{start_date.isoformat()}: Opening {self._annual_rate}% {self._currency} deposit "
            f"until {today.isoformat()}."
        )

    def next_event_date(self) -> date | None:
        return None

    def advance_to(self, day: date, mode: SteppingMode) -> None:
        self.emulator.process_to(day)

    def process_cash_flow(self, day: date, cash: Cash) -> None:
        amount = self._converter.convert(cash.amount, cash.currency, self._currency, day)
        logger.trace(f"{day.isoformat()}: {'+' if amount > ZERO else ''}{amount} {self._currency} to deposit.")
        self.emulator.process_transaction(Transaction(day, amount))

    def net_assets(self, day: date) -> MultiCurrencyCashAccount:
        self.emulator.process_to(day)
        return MultiCurrencyCashAccount.from_cash(Cash(self._currency, self.emulator.current_value))
