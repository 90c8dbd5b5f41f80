"""
Cash-flow preparation for backtesting.
"""

from collections import defaultdict
from collections.abc import Iterable, Sequence
from datetime import date
from decimal import Decimal

from src.core.models.cash import CashAssets
from src.core.models.transaction import Transaction
from src.core.protocols import CurrencyConverter
from src.core.types.financial import ZERO


def aggregate_cash_flows(cash_flows: Iterable[CashAssets]) -> list[CashAssets]:
    """Merge cash flows per (date, currency) and order them chronologically.

    Flows that sum up to zero are dropped.
    """
    totals: dict[tuple[date, str], Decimal] = defaultdict(lambda: ZERO)
    for cash_flow in cash_flows:
        totals[(cash_flow.date, cash_flow.cash.currency)] += cash_flow.cash.amount

    return [
        CashAssets.new(day, currency, amount)
        for (day, currency), amount in sorted(totals.items())
        if amount != ZERO
    ]


def cash_flows_to_transactions(
    cash_flows: Sequence[CashAssets], currency: str, converter: CurrencyConverter
) -> list[Transaction]:
    """Convert chronological cash flows into reporting currency transactions.

    Same-date amounts are merged into one transaction.
    """
    transactions: list[Transaction] = []

    for cash_flow in cash_flows:
        amount = converter.convert(cash_flow.cash.amount, cash_flow.cash.currency, currency, cash_flow.date)

        if transactions and transactions[-1].date == cash_flow.date:
            amount += transactions.pop().amount
        transactions.append(Transaction(cash_flow.date, amount))

    return [transaction for transaction in transactions if transaction.amount != ZERO]
