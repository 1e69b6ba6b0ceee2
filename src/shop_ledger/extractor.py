"""Per-order financial facts."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from decimal import Decimal

import structlog

from shop_ledger.models import ZERO, Order, OrderItem

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class OrderFinancials:
    """Financial facts derived from one order."""

    order_id: str
    serial: str
    subtotal: Decimal
    cost: Decimal
    shipping_cost: Decimal
    collected: Decimal
    remaining: Decimal
    net_profit: Decimal
    has_items: bool

    @property
    def margin(self) -> Decimal:
        """Profit as a fraction of subtotal (0 when there are no sales)."""
        if self.subtotal == 0:
            return ZERO
        return self.net_profit / self.subtotal


def derived_cost(order: Order) -> Decimal:
    """Product cost reconstructed from the order totals.

    Shipping is removed here so it is never part of an order's cost.
    """
    return order.total_amount - order.profit - order.shipping_cost


def extract(order: Order, items: Sequence[OrderItem] | None = None) -> OrderFinancials:
    """Derive subtotal, cost, shipping, collected, remaining and profit.

    Args:
        order: The order to extract from.
        items: Item lines; defaults to the items embedded in the order.

    Returns:
        OrderFinancials for the order. Inputs are not modified.
    """
    lines = order.items if items is None else tuple(items)

    if lines:
        subtotal = sum(
            ((item.unit_price - item.item_discount) * item.quantity for item in lines),
            ZERO,
        )
        cost = sum((item.unit_cost * item.quantity for item in lines), ZERO)
    else:
        subtotal = order.total_amount
        cost = derived_cost(order)

    return OrderFinancials(
        order_id=order.id,
        serial=order.serial,
        subtotal=subtotal,
        cost=cost,
        shipping_cost=order.shipping_cost,
        collected=order.payments_received,
        remaining=max(ZERO, order.total_amount - order.payments_received),
        net_profit=order.profit,
        has_items=bool(lines),
    )


def profit_discrepancy(facts: OrderFinancials) -> Decimal:
    """Difference between item-derived profit and the stored profit.

    Diagnostic only; the stored profit stays authoritative. Orders without
    items have nothing to cross-check and report 0.
    """
    if not facts.has_items:
        return ZERO
    return facts.subtotal - facts.cost - facts.net_profit


def extract_all(orders: Sequence[Order]) -> list[OrderFinancials]:
    """Extract every order, logging stored profits that disagree with items."""
    results: list[OrderFinancials] = []
    for order in orders:
        facts = extract(order)
        discrepancy = profit_discrepancy(facts)
        if discrepancy != 0:
            logger.warning(
                "order_profit_mismatch",
                order_id=order.id,
                serial=order.serial,
                stored_profit=str(facts.net_profit),
                item_profit=str(facts.subtotal - facts.cost),
            )
        results.append(facts)
    return results
