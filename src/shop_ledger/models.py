"""Domain records for orders, journal transactions and the summary value.

Rows arrive from the store as plain dicts with snake_case keys. The
``from_record`` constructors turn them into frozen dataclasses, applying
the normalization rules the engine relies on:

- money is always ``Decimal``; missing or null money fields become ``0``
- a transaction's ``amount`` is a magnitude (negative input is flipped)
- an unrecognized ``transaction_type`` is treated as an expense
- timestamps are timezone-aware; naive values are read as UTC
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, date, datetime, time
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any

import structlog

logger = structlog.get_logger(__name__)

ZERO = Decimal("0")


class TransactionType(str, Enum):
    """Direction of a manual journal entry."""

    INCOME = "income"
    EXPENSE = "expense"


class TransactionCategory(str, Enum):
    """Semantic category assigned to every journal transaction."""

    ORDER_PAYMENT = "order_payment"
    SHIPPING = "shipping"
    ADVERTISING = "advertising"
    OTHER_INCOME = "other_income"
    OTHER_EXPENSE = "other_expense"

    @property
    def is_collection(self) -> bool:
        """True for categories that bring money in."""
        return self in (TransactionCategory.ORDER_PAYMENT, TransactionCategory.OTHER_INCOME)


def to_decimal(value: Any, field_name: str = "amount") -> Decimal:
    """Parse a money value from the store, defaulting absent values to 0."""
    if value is None or value == "":
        return ZERO
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise ValueError(f"{field_name}: invalid money value {value!r}")
    try:
        # str() keeps floats like 0.1 from dragging binary noise along
        result = Decimal(str(value))
    except (InvalidOperation, ValueError) as exc:
        raise ValueError(f"{field_name}: invalid money value {value!r}") from exc
    if not result.is_finite():
        raise ValueError(f"{field_name}: invalid money value {value!r}")
    return result


def parse_timestamp(value: Any, field_name: str = "created_at") -> datetime | None:
    """Parse an ISO timestamp (or date) into an aware UTC datetime."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime.combine(value, time.min)
    elif isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError as exc:
            raise ValueError(f"{field_name}: invalid timestamp {value!r}") from exc
    else:
        raise ValueError(f"{field_name}: invalid timestamp {value!r}")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def normalize_transaction_type(value: Any) -> TransactionType:
    """Map a raw type flag to TransactionType, defaulting to expense."""
    if isinstance(value, TransactionType):
        return value
    normalized = str(value or "").strip().lower()
    try:
        return TransactionType(normalized)
    except ValueError:
        logger.warning("unknown_transaction_type", transaction_type=value)
        return TransactionType.EXPENSE


@dataclass(frozen=True)
class OrderItem:
    """One line of an order."""

    order_id: str
    product_name: str = ""
    size: str | None = None
    quantity: Decimal = Decimal("1")
    unit_cost: Decimal = ZERO
    unit_price: Decimal = ZERO
    item_discount: Decimal = ZERO
    total_price: Decimal | None = None
    profit: Decimal = ZERO

    @classmethod
    def from_record(cls, record: dict[str, Any], order_id: str | None = None) -> OrderItem:
        """Build an item from a store row."""
        quantity = record.get("quantity")
        total_price = record.get("total_price")
        return cls(
            order_id=str(record.get("order_id") or order_id or ""),
            product_name=str(record.get("product_name") or ""),
            size=record.get("size"),
            quantity=Decimal("1") if quantity is None else to_decimal(quantity, "quantity"),
            unit_cost=to_decimal(record.get("unit_cost") or record.get("cost"), "unit_cost"),
            unit_price=to_decimal(
                record.get("unit_price") if record.get("unit_price") is not None else record.get("price"),
                "unit_price",
            ),
            item_discount=to_decimal(record.get("item_discount"), "item_discount"),
            total_price=None if total_price is None else to_decimal(total_price, "total_price"),
            profit=to_decimal(record.get("profit"), "profit"),
        )


@dataclass(frozen=True)
class Order:
    """A customer order with its financial fields and item lines."""

    id: str
    serial: str = ""
    total_amount: Decimal = ZERO
    shipping_cost: Decimal = ZERO
    discount: Decimal = ZERO
    deposit: Decimal = ZERO
    profit: Decimal = ZERO
    payments_received: Decimal = ZERO
    remaining_amount: Decimal = ZERO
    status: str = ""
    order_date: datetime | None = None
    items: tuple[OrderItem, ...] = ()

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> Order:
        """Build an order (and its embedded items) from a store row."""
        order_id = str(record.get("id") or "")
        raw_items = (
            record.get("items")
            or record.get("order_items")
            or record.get("admin_order_items")
            or []
        )
        total = record.get("total_amount")
        if total is None:
            total = record.get("total")
        return cls(
            id=order_id,
            serial=str(record.get("serial") or ""),
            total_amount=to_decimal(total, "total_amount"),
            shipping_cost=to_decimal(record.get("shipping_cost"), "shipping_cost"),
            discount=to_decimal(record.get("discount"), "discount"),
            deposit=to_decimal(record.get("deposit"), "deposit"),
            profit=to_decimal(record.get("profit"), "profit"),
            payments_received=to_decimal(record.get("payments_received"), "payments_received"),
            remaining_amount=to_decimal(record.get("remaining_amount"), "remaining_amount"),
            status=str(record.get("status") or ""),
            order_date=parse_timestamp(
                record.get("order_date") or record.get("created_at"), "order_date"
            ),
            items=tuple(OrderItem.from_record(item, order_id) for item in raw_items),
        )


@dataclass(frozen=True)
class Transaction:
    """A manual journal entry. ``amount`` is always a magnitude."""

    id: str
    amount: Decimal
    transaction_type: TransactionType
    description: str = ""
    order_serial: str | None = None
    created_at: datetime | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.amount, Decimal):
            object.__setattr__(self, "amount", to_decimal(self.amount))
        if self.description is None:
            object.__setattr__(self, "description", "")
        # Direction comes from transaction_type alone
        if self.amount < 0:
            object.__setattr__(self, "amount", abs(self.amount))
        if not isinstance(self.transaction_type, TransactionType):
            object.__setattr__(
                self, "transaction_type", normalize_transaction_type(self.transaction_type)
            )

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> Transaction:
        """Build a transaction from a store row, normalizing sign and type."""
        serial = record.get("order_serial")
        return cls(
            id=str(record.get("id") or ""),
            amount=to_decimal(record.get("amount"), "amount"),
            transaction_type=normalize_transaction_type(record.get("transaction_type")),
            description=str(record.get("description") or ""),
            order_serial=(str(serial).strip() or None) if serial is not None else None,
            created_at=parse_timestamp(record.get("created_at")),
        )

    def to_record(self) -> dict[str, Any]:
        """Serialize for the store (amount as a string to keep precision)."""
        record: dict[str, Any] = {
            "amount": str(self.amount),
            "transaction_type": self.transaction_type.value,
            "description": self.description,
            "order_serial": self.order_serial,
        }
        if self.created_at is not None:
            record["created_at"] = self.created_at.isoformat()
        return record


@dataclass(frozen=True)
class FinancialSummary:
    """Account statement totals for one period. Recomputed per read."""

    period_start: datetime | None = None
    period_end: datetime | None = None
    total_sales: Decimal = ZERO
    collected_sales: Decimal = ZERO
    total_product_cost: Decimal = ZERO
    paid_product_cost: Decimal = ZERO
    total_shipping_cost: Decimal = ZERO
    collected_shipping: Decimal = ZERO
    paid_shipping: Decimal = ZERO
    other_income: Decimal = ZERO
    other_expenses: Decimal = ZERO
    advertising_expenses: Decimal = ZERO
    total_collections: Decimal = ZERO
    total_payments: Decimal = ZERO
    net_profit: Decimal = ZERO
    current_balance: Decimal = ZERO
    order_count: int = 0
    transaction_count: int = 0

    @property
    def is_empty(self) -> bool:
        """True when the period had no orders and no transactions."""
        return self.order_count == 0 and self.transaction_count == 0

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-friendly dict (money as strings)."""
        return {
            "period_start": self.period_start.isoformat() if self.period_start else None,
            "period_end": self.period_end.isoformat() if self.period_end else None,
            "total_sales": str(self.total_sales),
            "collected_sales": str(self.collected_sales),
            "total_product_cost": str(self.total_product_cost),
            "paid_product_cost": str(self.paid_product_cost),
            "total_shipping_cost": str(self.total_shipping_cost),
            "collected_shipping": str(self.collected_shipping),
            "paid_shipping": str(self.paid_shipping),
            "other_income": str(self.other_income),
            "other_expenses": str(self.other_expenses),
            "advertising_expenses": str(self.advertising_expenses),
            "total_collections": str(self.total_collections),
            "total_payments": str(self.total_payments),
            "net_profit": str(self.net_profit),
            "current_balance": str(self.current_balance),
            "order_count": self.order_count,
            "transaction_count": self.transaction_count,
        }
