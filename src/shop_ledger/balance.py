"""Canonical net profit and balance formulas.

- current_balance = total_collections - total_payments
- net_profit = sum(order.profit) + other_income - other_expenses - paid_shipping

paid_shipping comes only from journal transactions. Order-level cost is
derived as ``total - profit - shipping_cost``, so shipping never sits inside
it and is subtracted exactly once. ``check_shipping_non_overlap`` verifies a
summary against its totals on every build.
"""

from __future__ import annotations

from decimal import Decimal

from shop_ledger.aggregator import AggregateTotals
from shop_ledger.models import FinancialSummary
from shop_ledger.period import Period


class ShippingOverlapError(ValueError):
    """A summary counts shipping more than once."""

    def __init__(self, message: str, field_name: str | None = None):
        super().__init__(message)
        self.field_name = field_name


def current_balance(totals: AggregateTotals) -> Decimal:
    return totals.total_collections - totals.total_payments


def net_profit(totals: AggregateTotals) -> Decimal:
    return (
        totals.order_profit
        + totals.other_income
        - totals.other_expenses
        - totals.paid_shipping
    )


def check_shipping_non_overlap(totals: AggregateTotals, summary: FinancialSummary) -> None:
    """Verify summary subtracts shipping exactly once.

    Order-level shipping (``total_shipping_cost``) is reported only. It must
    not be taken off net profit and must not sit inside ``total_payments``;
    journal shipping (``paid_shipping``) is the single place shipping
    reduces either figure.

    Raises:
        ShippingOverlapError: if net profit or total payments differ from
            the single-count rebuild from totals.
    """
    expected_profit = net_profit(totals)
    if summary.net_profit != expected_profit:
        raise ShippingOverlapError(
            f"net_profit {summary.net_profit} != {expected_profit}: "
            f"shipping subtracted more than once",
            field_name="net_profit",
        )

    expected_payments = (
        totals.total_product_cost
        + totals.paid_shipping
        + totals.advertising_expenses
        + totals.other_expenses
    )
    if summary.total_payments != expected_payments:
        raise ShippingOverlapError(
            f"total_payments {summary.total_payments} != {expected_payments}: "
            f"order shipping {totals.total_shipping_cost} must not be a payment",
            field_name="total_payments",
        )


def calculate(totals: AggregateTotals, period: Period | None = None) -> FinancialSummary:
    """Turn aggregate totals into the FinancialSummary for period."""
    period = period or Period.unbounded()
    return FinancialSummary(
        period_start=period.start,
        period_end=period.end,
        total_sales=totals.total_sales,
        collected_sales=totals.collected_sales,
        total_product_cost=totals.total_product_cost,
        paid_product_cost=totals.paid_product_cost,
        total_shipping_cost=totals.total_shipping_cost,
        collected_shipping=totals.collected_shipping,
        paid_shipping=totals.paid_shipping,
        other_income=totals.other_income,
        other_expenses=totals.other_expenses,
        advertising_expenses=totals.advertising_expenses,
        total_collections=totals.total_collections,
        total_payments=totals.total_payments,
        net_profit=net_profit(totals),
        current_balance=current_balance(totals),
        order_count=totals.order_count,
        transaction_count=totals.transaction_count,
    )
