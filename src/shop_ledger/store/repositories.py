"""Order and transaction repositories over the store client."""

from __future__ import annotations

from typing import Any

import structlog

from shop_ledger.models import Order, Transaction
from shop_ledger.period import Period
from shop_ledger.store.client import StoreAPIClient, StoreAPIError

logger = structlog.get_logger(__name__)

ORDERS_TABLE = "admin_orders"
ORDER_ITEMS_TABLE = "admin_order_items"
TRANSACTIONS_TABLE = "transactions"


def _range_params(
    user_id: str, period: Period | None, column: str = "created_at"
) -> dict[str, Any]:
    """PostgREST filters for one user's rows inside period."""
    params: dict[str, Any] = {"user_id": f"eq.{user_id}", "order": f"{column}.asc"}
    bounds: list[str] = []
    if period is not None and period.start is not None:
        bounds.append(f"{column}.gte.{period.start.isoformat()}")
    if period is not None and period.end is not None:
        bounds.append(f"{column}.lte.{period.end.isoformat()}")
    if bounds:
        params["and"] = f"({','.join(bounds)})"
    return params


def _parse_rows(rows: list[dict[str, Any]], parser: Any, kind: str) -> list[Any]:
    parsed = []
    for row in rows:
        try:
            parsed.append(parser(row))
        except ValueError as e:
            # A half-parsed set would skew every total, so fail the whole read
            raise StoreAPIError(
                f"Malformed {kind} record {row.get('id')!r}: {e}",
                details={"record": row},
            ) from e
    return parsed


class OrderRepository:
    """Reads orders with their item lines embedded."""

    def __init__(self, client: StoreAPIClient):
        self._client = client

    async def list(self, user_id: str, period: Period | None = None) -> list[Order]:
        """List the user's orders dated inside period."""
        # Orders can be backdated, so the window follows order_date
        params = _range_params(user_id, period, column="order_date")
        params["select"] = f"*,{ORDER_ITEMS_TABLE}(*)"
        result = await self._client.get(self._client.table_path(ORDERS_TABLE), params=params)
        orders = _parse_rows(self._client.extract_rows(result), Order.from_record, "order")
        logger.debug("orders_fetched", user_id=user_id, count=len(orders))
        return orders


class TransactionRepository:
    """Reads and writes manual journal transactions."""

    def __init__(self, client: StoreAPIClient):
        self._client = client

    @property
    def _path(self) -> str:
        return self._client.table_path(TRANSACTIONS_TABLE)

    async def list(self, user_id: str, period: Period | None = None) -> list[Transaction]:
        """List the user's transactions created inside period."""
        params = _range_params(user_id, period)
        params["select"] = "*"
        result = await self._client.get(self._path, params=params)
        transactions = _parse_rows(
            self._client.extract_rows(result), Transaction.from_record, "transaction"
        )
        logger.debug("transactions_fetched", user_id=user_id, count=len(transactions))
        return transactions

    async def insert(self, user_id: str, transaction: Transaction) -> Transaction:
        """Insert a transaction and return the stored row."""
        payload = transaction.to_record()
        payload["user_id"] = user_id
        result = await self._client.post(self._path, json=payload)
        rows = self._client.extract_rows(result)
        if not rows:
            raise StoreAPIError("Insert returned no row", details={"payload": payload})
        stored = Transaction.from_record(rows[0])
        logger.info(
            "transaction_inserted",
            transaction_id=stored.id,
            transaction_type=stored.transaction_type.value,
            amount=str(stored.amount),
        )
        return stored

    async def update(self, user_id: str, transaction: Transaction) -> Transaction:
        """Update a transaction in place; amount stays a magnitude."""
        if not transaction.id:
            raise ValueError("Transaction ID is required")
        result = await self._client.patch(
            self._path,
            json=transaction.to_record(),
            params={"id": f"eq.{transaction.id}", "user_id": f"eq.{user_id}"},
        )
        rows = self._client.extract_rows(result)
        if not rows:
            raise StoreAPIError(
                f"Transaction {transaction.id} not found", status_code=404
            )
        logger.info("transaction_updated", transaction_id=transaction.id)
        return Transaction.from_record(rows[0])

    async def delete(self, user_id: str, transaction: Transaction | str) -> None:
        """Delete a transaction (or transaction ID) owned by user_id."""
        transaction_id = transaction.id if isinstance(transaction, Transaction) else transaction
        if not transaction_id:
            raise ValueError("Transaction ID is required")
        await self._client.delete(
            self._path,
            params={"id": f"eq.{transaction_id}", "user_id": f"eq.{user_id}"},
        )
        logger.info("transaction_deleted", transaction_id=transaction_id)
