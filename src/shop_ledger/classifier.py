"""Deterministic classification of journal transactions.

Every transaction maps to exactly one TransactionCategory using a fixed
rule order:

1. an order-payment keyword in the description, or a real (non-synthetic)
   order serial -> ORDER_PAYMENT
2. a shipping keyword -> SHIPPING
3. an advertising keyword -> ADVERTISING
4. otherwise the type flag: income -> OTHER_INCOME, expense -> OTHER_EXPENSE

Keyword matches beat the type flag, so an income entry described as
"shipping" is still SHIPPING.
"""

from __future__ import annotations

from collections.abc import Iterable

from shop_ledger.config.keywords import KeywordConfig
from shop_ledger.models import Transaction, TransactionCategory, TransactionType


def _fold(text: str) -> str:
    return text.casefold()


class TransactionClassifier:
    """Classifies transactions against an injected keyword configuration."""

    def __init__(self, config: KeywordConfig | None = None):
        self.config = config or KeywordConfig()
        # Pre-folded so matching is case-insensitive for Latin terms
        self._terms: dict[TransactionCategory, tuple[str, ...]] = {
            category: tuple(_fold(term) for term in self.config.keywords_for(category))
            for category in TransactionCategory
        }
        self._prefixes = tuple(_fold(prefix) for prefix in self.config.synthetic_prefixes)

    def _matches(self, description: str, category: TransactionCategory) -> bool:
        return any(term in description for term in self._terms[category])

    def is_synthetic_serial(self, serial: str | None) -> bool:
        """True when serial is absent or was generated rather than taken from an order."""
        if serial is None:
            return True
        folded = _fold(str(serial).strip())
        if not folded:
            return True
        return folded.startswith(self._prefixes)

    def classify(self, transaction: Transaction) -> TransactionCategory:
        """Return the single category for transaction. Never raises."""
        description = _fold(transaction.description or "")

        if description and self._matches(description, TransactionCategory.ORDER_PAYMENT):
            return TransactionCategory.ORDER_PAYMENT
        if not self.is_synthetic_serial(transaction.order_serial):
            return TransactionCategory.ORDER_PAYMENT
        if description and self._matches(description, TransactionCategory.SHIPPING):
            return TransactionCategory.SHIPPING
        if description and self._matches(description, TransactionCategory.ADVERTISING):
            return TransactionCategory.ADVERTISING

        if transaction.transaction_type == TransactionType.INCOME:
            return TransactionCategory.OTHER_INCOME
        return TransactionCategory.OTHER_EXPENSE

    def classify_all(
        self, transactions: Iterable[Transaction]
    ) -> list[tuple[Transaction, TransactionCategory]]:
        """Pair each transaction with its category, preserving order."""
        return [(transaction, self.classify(transaction)) for transaction in transactions]

    def display_label(self, category: TransactionCategory) -> str:
        return self.config.label_for(category)

    def badge(self, transaction: Transaction) -> tuple[TransactionCategory, str]:
        """Return the (category, display label) pair shown next to a transaction."""
        category = self.classify(transaction)
        return category, self.display_label(category)


_default_classifier = TransactionClassifier()


def classify(
    transaction: Transaction, config: KeywordConfig | None = None
) -> TransactionCategory:
    """Classify with the built-in keyword set, or with config when given."""
    if config is None:
        return _default_classifier.classify(transaction)
    return TransactionClassifier(config).classify(transaction)
