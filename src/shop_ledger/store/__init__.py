"""Remote store access for the shop ledger."""

from shop_ledger.store.client import (
    AuthenticationError,
    RateLimitError,
    StoreAPIClient,
    StoreAPIError,
)
from shop_ledger.store.repositories import OrderRepository, TransactionRepository

__all__ = [
    # API Client
    "StoreAPIClient",
    "StoreAPIError",
    "AuthenticationError",
    "RateLimitError",
    # Repositories
    "OrderRepository",
    "TransactionRepository",
]
