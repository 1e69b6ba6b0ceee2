"""Account statement built from orders and journal transactions.

``build_summary`` is the whole reconciliation pipeline as a pure function:

    orders, transactions -> filter_by_period -> extract / classify
        -> aggregate -> calculate -> FinancialSummary

The remaining helpers feed the statement screens: a running-balance ledger,
category filters, outstanding balances and per-order profitability.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import UTC, datetime
from decimal import Decimal

import structlog

from shop_ledger.aggregator import aggregate
from shop_ledger.balance import calculate, check_shipping_non_overlap
from shop_ledger.classifier import TransactionClassifier
from shop_ledger.config.keywords import KeywordConfig
from shop_ledger.extractor import OrderFinancials, extract_all, profit_discrepancy
from shop_ledger.models import (
    ZERO,
    FinancialSummary,
    Order,
    Transaction,
    TransactionCategory,
)
from shop_ledger.period import Period, filter_by_period

logger = structlog.get_logger(__name__)

_EPOCH = datetime.min.replace(tzinfo=UTC)


def _classifier_for(
    keywords: KeywordConfig | None, classifier: TransactionClassifier | None
) -> TransactionClassifier:
    if classifier is not None:
        return classifier
    return TransactionClassifier(keywords)


def build_summary(
    orders: Sequence[Order],
    transactions: Sequence[Transaction],
    period: Period | None = None,
    keywords: KeywordConfig | None = None,
    classifier: TransactionClassifier | None = None,
) -> FinancialSummary:
    """Reconcile orders and transactions into a FinancialSummary for period."""
    period = period or Period.unbounded()
    classifier = _classifier_for(keywords, classifier)

    period_orders = filter_by_period(orders, period)
    period_transactions = filter_by_period(transactions, period)

    order_facts = extract_all(period_orders)
    classified = classifier.classify_all(period_transactions)

    totals = aggregate(order_facts, classified)
    summary = calculate(totals, period)
    check_shipping_non_overlap(totals, summary)
    logger.debug(
        "summary_built",
        orders=summary.order_count,
        transactions=summary.transaction_count,
        current_balance=str(summary.current_balance),
        net_profit=str(summary.net_profit),
    )
    return summary


@dataclass(frozen=True)
class StatementLine:
    """One journal transaction as it appears on the statement."""

    transaction: Transaction
    category: TransactionCategory
    label: str
    signed_amount: Decimal
    running_balance: Decimal


def build_ledger(
    transactions: Iterable[Transaction],
    period: Period | None = None,
    opening_balance: Decimal = ZERO,
    keywords: KeywordConfig | None = None,
    classifier: TransactionClassifier | None = None,
) -> list[StatementLine]:
    """Return statement lines oldest first with a running balance.

    Collections (order payments and other income) add to the balance;
    shipping, advertising and other expenses take from it. The sign follows
    the category, the same way the aggregator books it.
    """
    classifier = _classifier_for(keywords, classifier)
    selected = filter_by_period(transactions, period)
    ordered = sorted(selected, key=lambda t: t.created_at or _EPOCH)

    lines: list[StatementLine] = []
    balance = opening_balance
    for transaction in ordered:
        category, label = classifier.badge(transaction)
        signed = transaction.amount if category.is_collection else -transaction.amount
        balance += signed
        lines.append(
            StatementLine(
                transaction=transaction,
                category=category,
                label=label,
                signed_amount=signed,
                running_balance=balance,
            )
        )
    return lines


def filter_by_category(
    transactions: Iterable[Transaction],
    categories: TransactionCategory | Iterable[TransactionCategory],
    classifier: TransactionClassifier | None = None,
) -> list[Transaction]:
    """Keep transactions whose category is one of categories."""
    if isinstance(categories, TransactionCategory):
        wanted = {categories}
    else:
        wanted = set(categories)
    classifier = classifier or TransactionClassifier()
    return [t for t in transactions if classifier.classify(t) in wanted]


def transactions_for_order(
    transactions: Iterable[Transaction], serial: str
) -> list[Transaction]:
    """Journal entries explicitly linked to the order with this serial."""
    target = serial.strip()
    if not target:
        return []
    return [t for t in transactions if (t.order_serial or "").strip() == target]


def outstanding_orders(
    orders: Iterable[Order], period: Period | None = None
) -> list[OrderFinancials]:
    """Orders that still have money to collect, largest balance first."""
    facts = extract_all(filter_by_period(orders, period))
    pending = [f for f in facts if f.remaining > 0]
    return sorted(pending, key=lambda f: f.remaining, reverse=True)


@dataclass(frozen=True)
class OrderProfitability:
    """Profitability view of one order."""

    facts: OrderFinancials
    margin: Decimal
    discrepancy: Decimal


def order_profitability(
    orders: Iterable[Order], period: Period | None = None
) -> list[OrderProfitability]:
    """Per-order profit, margin and stored-vs-item discrepancy."""
    return [
        OrderProfitability(
            facts=facts,
            margin=facts.margin,
            discrepancy=profit_discrepancy(facts),
        )
        for facts in extract_all(filter_by_period(orders, period))
    ]
