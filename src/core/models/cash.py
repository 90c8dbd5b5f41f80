"""
Cash domain models.

Cash values are currency-tagged Decimal amounts; the multi-currency account
holds at most one running balance per currency.
"""

from collections.abc import Iterator
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING

from src.core.exceptions.backtest import InputError
from src.core.types.financial import ZERO, round_amount, to_decimal

if TYPE_CHECKING:
    from src.core.protocols import CurrencyConverter


@dataclass(frozen=True)
class Cash:
    """An amount of money in a specific currency."""

    currency: str
    amount: Decimal

    def __post_init__(self) -> None:
        """Normalize currency code and amount."""
        if not self.currency:
            raise InputError("Cash currency must be a non-empty currency code")
        object.__setattr__(self, "currency", self.currency.upper())
        object.__setattr__(self, "amount", to_decimal(self.amount))

    @classmethod
    def zero(cls, currency: str) -> "Cash":
        """Create a zero amount in the given currency."""
        return cls(currency, ZERO)

    def is_zero(self) -> bool:
        """Check if the amount is zero."""
        return self.amount == ZERO

    def round(self) -> "Cash":
        """Round the amount to cents."""
        return Cash(self.currency, round_amount(self.amount))

    def __neg__(self) -> "Cash":
        return Cash(self.currency, -self.amount)

    def __add__(self, other: "Cash") -> "Cash":
        self._check_currency(other)
        return Cash(self.currency, self.amount + other.amount)

    def __sub__(self, other: "Cash") -> "Cash":
        self._check_currency(other)
        return Cash(self.currency, self.amount - other.amount)

    def __mul__(self, multiplier: Decimal) -> "Cash":
        return Cash(self.currency, self.amount * multiplier)

    def _check_currency(self, other: "Cash") -> None:
        if other.currency != self.currency:
            raise InputError(f"Currency mismatch: {self.currency} vs {other.currency}")

    def __str__(self) -> str:
        return f"{self.amount} {self.currency}"


@dataclass(frozen=True)
class CashAssets:
    """A dated cash flow: positive for deposits, negative for withdrawals."""

    date: date
    cash: Cash

    @classmethod
    def new(cls, day: date, currency: str, amount: Decimal | str | int) -> "CashAssets":
        """Factory method to create a cash flow from raw values."""
        return cls(day, Cash(currency, to_decimal(amount)))


@dataclass
class MultiCurrencyCashAccount:
    """Cash balances kept separately per currency.

    Balances are only mutated via deposit, withdraw and clear.
    """

    _assets: dict[str, Decimal] = field(default_factory=dict)

    @classmethod
    def from_cash(cls, amount: Cash) -> "MultiCurrencyCashAccount":
        """Create an account holding a single amount."""
        account = cls()
        account.deposit(amount)
        return account

    def get(self, currency: str) -> Cash | None:
        """Get the balance in the currency if any."""
        currency = currency.upper()
        amount = self._assets.get(currency)
        return None if amount is None else Cash(currency, amount)

    def __iter__(self) -> Iterator[Cash]:
        for currency, amount in self._assets.items():
            yield Cash(currency, amount)

    def clear(self) -> None:
        """Drop all balances."""
        self._assets.clear()

    def deposit(self, amount: Cash) -> None:
        """Add an amount to its currency balance."""
        self._assets[amount.currency] = self._assets.get(amount.currency, ZERO) + amount.amount

    def withdraw(self, amount: Cash) -> None:
        """Subtract an amount from its currency balance."""
        self.deposit(-amount)

    def add(self, other: "MultiCurrencyCashAccount") -> None:
        """Deposit all balances of another account."""
        for amount in other:
            self.deposit(amount)

    def total_assets(self, day: date, currency: str, converter: "CurrencyConverter") -> Decimal:
        """Sum all balances converted into a single currency at the given date.

        Args:
            day: Conversion date
            currency: Target currency
            converter: Currency conversion collaborator

        Returns:
            Total amount in the target currency
        """
        total = ZERO
        for assets in self:
            total += converter.convert(assets.amount, assets.currency, currency.upper(), day)
        return total
