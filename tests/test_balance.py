"""Tests for the canonical balance and profit formulas."""

import random
from dataclasses import replace
from datetime import UTC, datetime, timedelta
from decimal import Decimal
from unittest.mock import patch

import pytest

from factories import make_order, make_transaction
from shop_ledger.aggregator import AggregateTotals, aggregate
from shop_ledger.balance import (
    ShippingOverlapError,
    calculate,
    check_shipping_non_overlap,
    current_balance,
    net_profit,
)
from shop_ledger.classifier import TransactionClassifier
from shop_ledger.extractor import extract_all
from shop_ledger.models import OrderItem
from shop_ledger.period import Period
from shop_ledger.statement import build_summary


class TestFormulas:
    def test_current_balance(self):
        totals = AggregateTotals(
            total_collections=Decimal("100"), total_payments=Decimal("30")
        )

        assert current_balance(totals) == Decimal("70")

    def test_net_profit(self):
        totals = AggregateTotals(
            order_profit=Decimal("40"),
            other_income=Decimal("10"),
            other_expenses=Decimal("5"),
            paid_shipping=Decimal("8"),
            advertising_expenses=Decimal("100"),
        )

        assert net_profit(totals) == Decimal("37")

    def test_calculate_copies_totals_and_period(self):
        period = Period(
            start=datetime(2024, 1, 1, tzinfo=UTC), end=datetime(2024, 1, 31, tzinfo=UTC)
        )
        totals = AggregateTotals(
            total_sales=Decimal("200"),
            total_collections=Decimal("50"),
            total_payments=Decimal("20"),
            order_count=1,
        )

        summary = calculate(totals, period)

        assert summary.period_start == period.start
        assert summary.period_end == period.end
        assert summary.total_sales == Decimal("200")
        assert summary.current_balance == Decimal("30")
        assert summary.order_count == 1


class TestShippingNonOverlap:
    """Shipping is subtracted once: via journal entries, never via order cost."""

    def test_order_shipping_does_not_change_net_profit(self):
        cheap = build_summary([make_order(total=120, profit=40, shipping=0)], [])
        pricey = build_summary([make_order(total=120, profit=40, shipping=60)], [])

        assert cheap.net_profit == pricey.net_profit == Decimal("40")
        # The shipping moved out of product cost instead
        assert cheap.total_product_cost - pricey.total_product_cost == Decimal("60")

    def test_paid_shipping_subtracted_once(self):
        orders = [make_order(total=200, profit=40, shipping=20, payments=200)]
        transactions = [make_transaction(20, "expense", "شحن")]

        summary = build_summary(orders, transactions)

        assert summary.paid_shipping == Decimal("20")
        assert summary.net_profit == Decimal("20")
        assert summary.total_payments == summary.total_product_cost + summary.paid_shipping

    def test_consistent_summary_passes(self):
        facts = extract_all([make_order(total=200, profit=40, shipping=20, payments=200)])
        classified = TransactionClassifier().classify_all([make_transaction(20, "expense", "شحن")])
        totals = aggregate(facts, classified)

        check_shipping_non_overlap(totals, calculate(totals))

    def test_order_shipping_subtracted_from_profit_is_reported(self):
        facts = extract_all([make_order(total=200, profit=40, shipping=20, payments=200)])
        totals = aggregate(facts, [])
        # A summary that also takes the order's shipping off its profit
        summary = replace(
            calculate(totals), net_profit=net_profit(totals) - totals.total_shipping_cost
        )

        with pytest.raises(ShippingOverlapError) as exc_info:
            check_shipping_non_overlap(totals, summary)

        assert exc_info.value.field_name == "net_profit"

    def test_order_shipping_in_payments_is_reported(self):
        facts = extract_all([make_order(total=200, profit=40, shipping=20, payments=200)])
        totals = aggregate(facts, [])
        summary = replace(
            calculate(totals), total_payments=totals.total_payments + totals.total_shipping_cost
        )

        with pytest.raises(ShippingOverlapError) as exc_info:
            check_shipping_non_overlap(totals, summary)

        assert exc_info.value.field_name == "total_payments"

    def test_build_summary_runs_the_check(self):
        with patch("shop_ledger.statement.check_shipping_non_overlap") as check:
            summary = build_summary([make_order(total=100, profit=20, shipping=10)], [])

        totals, checked = check.call_args.args
        assert checked == summary
        assert totals.total_shipping_cost == Decimal("10")


def _money(rng: random.Random, high: int = 1000) -> Decimal:
    return Decimal(rng.randint(0, high * 100)) / 100


def _random_inputs(rng: random.Random):
    base = datetime(2024, 1, 1, tzinfo=UTC)
    descriptions = ["", "تحصيل", "دفعة طلب", "شحن", "إعلان", "إيجار", "بيع", "misc"]
    serials = [None, "ORD-1", "MANUAL-1", "TRANSFER-1"]

    orders = []
    for idx in range(rng.randint(0, 8)):
        items = tuple(
            OrderItem(
                order_id=f"o{idx}",
                quantity=Decimal(rng.randint(1, 4)),
                unit_cost=_money(rng, 200),
                unit_price=_money(rng, 300),
                item_discount=_money(rng, 20),
            )
            for _ in range(rng.choice([0, 0, 1, 2]))
        )
        orders.append(
            make_order(
                id=f"o{idx}",
                total=_money(rng),
                profit=_money(rng, 300),
                shipping=_money(rng, 50),
                payments=_money(rng),
                items=items,
                order_date=base + timedelta(days=rng.randint(0, 60)),
            )
        )

    transactions = [
        make_transaction(
            amount=str(_money(rng) * rng.choice([1, -1])),
            transaction_type=rng.choice(["income", "expense", "bogus"]),
            description=rng.choice(descriptions),
            order_serial=rng.choice(serials),
            created_at=base + timedelta(days=rng.randint(0, 60), seconds=rng.randint(0, 86399)),
            id=f"t{idx}",
        )
        for idx in range(rng.randint(0, 15))
    ]
    return orders, transactions


class TestConservation:
    """current_balance == total_collections - total_payments for any input."""

    @pytest.mark.parametrize("seed", range(50))
    def test_random_inputs(self, seed):
        rng = random.Random(seed)
        orders, transactions = _random_inputs(rng)
        start = datetime(2024, 1, 1, tzinfo=UTC) + timedelta(days=rng.randint(0, 30))
        period = rng.choice([None, Period(start=start), Period(start, start + timedelta(days=20))])

        summary = build_summary(orders, transactions, period)

        assert summary.current_balance == summary.total_collections - summary.total_payments
        assert summary.total_collections == summary.collected_sales + sum(
            (t.amount for t in transactions if _in(period, t.created_at)), Decimal("0")
        ) - (summary.paid_shipping + summary.advertising_expenses + summary.other_expenses)

    @pytest.mark.parametrize("seed", range(20))
    def test_sub_windows_partition_the_whole(self, seed):
        rng = random.Random(seed)
        orders, transactions = _random_inputs(rng)
        split = datetime(2024, 1, 31, tzinfo=UTC)

        whole = build_summary(orders, transactions)
        first = build_summary(orders, transactions, Period(end=split))
        second = build_summary(
            orders, transactions, Period(start=split + timedelta(microseconds=1))
        )

        assert first.current_balance + second.current_balance == whole.current_balance
        assert first.net_profit + second.net_profit == whole.net_profit

    @pytest.mark.parametrize("seed", range(20))
    def test_idempotent_summary(self, seed):
        orders, transactions = _random_inputs(random.Random(seed))

        assert build_summary(orders, transactions) == build_summary(orders, transactions)


def _in(period, timestamp):
    return period is None or period.contains(timestamp)
