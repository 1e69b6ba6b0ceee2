"""Additive fold of order facts and classified transactions into totals.

The fold only ever adds. Nothing is subtracted until the balance
calculator, so each bucket can be audited on its own.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, fields
from decimal import Decimal

from shop_ledger.extractor import OrderFinancials
from shop_ledger.models import ZERO, Transaction, TransactionCategory


@dataclass(frozen=True)
class AggregateTotals:
    """Category totals for one window, before any subtraction."""

    total_sales: Decimal = ZERO
    collected_sales: Decimal = ZERO
    total_product_cost: Decimal = ZERO
    paid_product_cost: Decimal = ZERO
    total_shipping_cost: Decimal = ZERO
    collected_shipping: Decimal = ZERO
    order_profit: Decimal = ZERO
    paid_shipping: Decimal = ZERO
    other_income: Decimal = ZERO
    other_expenses: Decimal = ZERO
    advertising_expenses: Decimal = ZERO
    order_payments: Decimal = ZERO
    total_collections: Decimal = ZERO
    total_payments: Decimal = ZERO
    order_count: int = 0
    transaction_count: int = 0


# Buckets a categorized transaction adds its amount to
TRANSACTION_BUCKETS: dict[TransactionCategory, tuple[str, ...]] = {
    TransactionCategory.ORDER_PAYMENT: ("order_payments", "total_collections"),
    TransactionCategory.OTHER_INCOME: ("other_income", "total_collections"),
    TransactionCategory.SHIPPING: ("paid_shipping", "total_payments"),
    TransactionCategory.ADVERTISING: ("advertising_expenses", "total_payments"),
    TransactionCategory.OTHER_EXPENSE: ("other_expenses", "total_payments"),
}


def aggregate(
    order_facts: Iterable[OrderFinancials],
    classified: Iterable[tuple[Transaction, TransactionCategory]],
) -> AggregateTotals:
    """Fold already period-filtered inputs into AggregateTotals.

    Pure: the accumulator is local to the call, so calling twice on the
    same inputs returns equal results.
    """
    acc: dict[str, Decimal] = {
        f.name: ZERO
        for f in fields(AggregateTotals)
        if f.name not in ("order_count", "transaction_count")
    }
    order_count = 0
    transaction_count = 0

    for facts in order_facts:
        order_count += 1
        acc["total_sales"] += facts.subtotal
        acc["collected_sales"] += facts.collected
        # Money received against orders is cash in the till
        acc["total_collections"] += facts.collected
        acc["total_product_cost"] += facts.cost
        acc["paid_product_cost"] += facts.cost
        acc["total_shipping_cost"] += facts.shipping_cost
        if facts.collected > 0:
            acc["collected_shipping"] += facts.shipping_cost
        acc["order_profit"] += facts.net_profit
        # Product cost is paid out of the till; shipping is not part of it
        acc["total_payments"] += facts.cost

    for transaction, category in classified:
        transaction_count += 1
        for bucket in TRANSACTION_BUCKETS[category]:
            acc[bucket] += transaction.amount

    return AggregateTotals(
        **acc,
        order_count=order_count,
        transaction_count=transaction_count,
    )
