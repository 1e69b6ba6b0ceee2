"""Reconciliation service: fetch from the store, then reconcile.

Orders and transactions are fetched concurrently and joined before any
aggregation starts. If either fetch fails, or the caller is cancelled, the
sibling fetch is cancelled too and no summary is produced. Nothing is
cached between calls; every read goes back to the store.
"""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime
from decimal import Decimal

import structlog

from shop_ledger.classifier import TransactionClassifier
from shop_ledger.config.keywords import KeywordConfig
from shop_ledger.models import (
    FinancialSummary,
    Order,
    Transaction,
    TransactionCategory,
    TransactionType,
)
from shop_ledger.period import Period
from shop_ledger.statement import StatementLine, build_ledger, build_summary
from shop_ledger.store import OrderRepository, StoreAPIError, TransactionRepository

logger = structlog.get_logger(__name__)

TRANSFER_PREFIX = "TRANSFER-"
TRANSFER_DESCRIPTION = "تحويل إلى خزينة أخرى"


class ReconciliationError(Exception):
    """A statement could not be produced because the store read failed."""

    def __init__(self, message: str, user_id: str | None = None):
        super().__init__(message)
        self.user_id = user_id


class TransferRejectedError(ValueError):
    """A transfer amount is not positive or exceeds the available balance."""

    def __init__(self, message: str, amount: Decimal, available: Decimal | None = None):
        super().__init__(message)
        self.amount = amount
        self.available = available


class ReconciliationService:
    """Produces statements for one admin user from the remote store."""

    def __init__(
        self,
        orders: OrderRepository,
        transactions: TransactionRepository,
        keywords: KeywordConfig | None = None,
    ):
        self._orders = orders
        self._transactions = transactions
        self.classifier = TransactionClassifier(keywords)
        self._logger = logger.bind(component="reconciliation_service")

    async def fetch(
        self, user_id: str, period: Period | None = None
    ) -> tuple[list[Order], list[Transaction]]:
        """Fetch orders and transactions concurrently; return both or raise."""
        orders_task = asyncio.create_task(self._orders.list(user_id, period))
        transactions_task = asyncio.create_task(self._transactions.list(user_id, period))
        tasks = (orders_task, transactions_task)
        try:
            orders, transactions = await asyncio.gather(*tasks)
        except BaseException as e:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            if isinstance(e, StoreAPIError):
                self._logger.error(
                    "statement_fetch_failed",
                    user_id=user_id,
                    status_code=e.status_code,
                    error=str(e),
                )
                raise ReconciliationError(
                    f"Could not load ledger data: {e}", user_id=user_id
                ) from e
            raise
        return orders, transactions

    async def summarize(self, user_id: str, period: Period | None = None) -> FinancialSummary:
        """Build the FinancialSummary for period from a fresh fetch.

        Raises:
            ReconciliationError: if either store read failed. An empty period
                returns a summary whose ``is_empty`` is True instead.
        """
        orders, transactions = await self.fetch(user_id, period)
        return self._summarize(user_id, orders, transactions, period)

    def _summarize(
        self,
        user_id: str,
        orders: list[Order],
        transactions: list[Transaction],
        period: Period | None,
    ) -> FinancialSummary:
        summary = build_summary(orders, transactions, period, classifier=self.classifier)
        self._logger.info(
            "statement_summarized",
            user_id=user_id,
            orders=summary.order_count,
            transactions=summary.transaction_count,
            current_balance=str(summary.current_balance),
        )
        return summary

    async def ledger(self, user_id: str, period: Period | None = None) -> list[StatementLine]:
        """Running-balance statement lines for period from a fresh fetch."""
        _, transactions = await self.fetch(user_id, period)
        return build_ledger(transactions, period, classifier=self.classifier)

    async def statement(
        self, user_id: str, period: Period | None = None
    ) -> tuple[FinancialSummary, list[StatementLine]]:
        """Summary and ledger lines built from one fetch, so both share a snapshot."""
        orders, transactions = await self.fetch(user_id, period)
        summary = self._summarize(user_id, orders, transactions, period)
        return summary, build_ledger(transactions, period, classifier=self.classifier)

    async def record_transaction(self, user_id: str, transaction: Transaction) -> Transaction:
        """Insert a journal transaction. The next summary re-reads the store."""
        return await self._transactions.insert(user_id, transaction)

    async def update_transaction(self, user_id: str, transaction: Transaction) -> Transaction:
        return await self._transactions.update(user_id, transaction)

    async def delete_transaction(self, user_id: str, transaction: Transaction | str) -> None:
        await self._transactions.delete(user_id, transaction)

    async def record_transfer(
        self,
        user_id: str,
        amount: Decimal,
        description: str = "",
        now: datetime | None = None,
    ) -> Transaction:
        """Move money out of the shop balance as a TRANSFER- expense.

        The optional note is appended to the description. A note that would
        book the transfer as something other than an other-expense (for
        example one mentioning shipping) is rejected before anything is read
        or written.

        Raises:
            TransferRejectedError: if amount is not positive, the note changes
                the transfer's category, or amount exceeds the current balance.
        """
        if amount <= 0:
            raise TransferRejectedError("Transfer amount must be positive", amount)

        now = now or datetime.now(UTC)
        text = f"{TRANSFER_DESCRIPTION}: {description}" if description else TRANSFER_DESCRIPTION
        transfer = Transaction(
            id="",
            amount=amount,
            transaction_type=TransactionType.EXPENSE,
            description=text,
            order_serial=f"{TRANSFER_PREFIX}{int(now.timestamp() * 1000)}",
            created_at=now,
        )
        category = self.classifier.classify(transfer)
        if category != TransactionCategory.OTHER_EXPENSE:
            raise TransferRejectedError(
                f"Transfer note {description!r} would book the transfer as {category.value}",
                amount,
            )

        summary = await self.summarize(user_id)
        if amount > summary.current_balance:
            raise TransferRejectedError(
                f"Transfer of {amount} exceeds available balance {summary.current_balance}",
                amount,
                available=summary.current_balance,
            )

        stored = await self._transactions.insert(user_id, transfer)
        self._logger.info("transfer_recorded", user_id=user_id, amount=str(amount))
        return stored
