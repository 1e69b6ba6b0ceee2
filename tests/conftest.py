"""Pytest configuration and fixtures."""

import os
from datetime import UTC, datetime
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

# Set test environment variables before importing settings
os.environ.setdefault("SHOP_STORE_URL", "http://localhost:54321")
os.environ.setdefault("SHOP_STORE_API_KEY", "test-anon-key")

from shop_ledger.models import Transaction, TransactionType  # noqa: E402


@pytest.fixture
def jan_15():
    return datetime(2024, 1, 15, 12, 0, tzinfo=UTC)


@pytest.fixture
def income_payment():
    return Transaction(
        id="t-pay",
        amount=Decimal("100"),
        transaction_type=TransactionType.INCOME,
        description="تحصيل من طلب",
    )


@pytest.fixture
def shipping_expense():
    return Transaction(
        id="t-ship",
        amount=Decimal("30"),
        transaction_type=TransactionType.EXPENSE,
        description="شحن",
    )


@pytest.fixture
def mock_httpx_client():
    """Create a mock httpx AsyncClient."""
    client = AsyncMock()
    client.request = AsyncMock()
    client.aclose = AsyncMock()
    return client


@pytest.fixture
def mock_orders_response():
    """Mock admin_orders rows with embedded items."""
    return [
        {
            "id": "11111111-1111-1111-1111-111111111111",
            "serial": "ORD-1001",
            "total_amount": 250,
            "shipping_cost": 25,
            "discount": 0,
            "deposit": 50,
            "profit": 75,
            "payments_received": 100,
            "remaining_amount": 150,
            "status": "processing",
            "created_at": "2024-01-10T09:30:00+00:00",
            "admin_order_items": [
                {
                    "order_id": "11111111-1111-1111-1111-111111111111",
                    "product_name": "Engraved mug",
                    "size": "L",
                    "quantity": 3,
                    "unit_cost": "50.00",
                    "unit_price": "75.00",
                    "item_discount": "0",
                    "total_price": "225.00",
                    "profit": "75.00",
                }
            ],
        },
        {
            "id": "22222222-2222-2222-2222-222222222222",
            "serial": "ORD-1002",
            "total_amount": "200.00",
            "shipping_cost": "20.00",
            "profit": "40.00",
            "payments_received": "200.00",
            "status": "delivered",
            "created_at": "2024-01-12T15:00:00Z",
        },
    ]


@pytest.fixture
def mock_transactions_response():
    """Mock transactions rows."""
    return [
        {
            "id": "33333333-3333-3333-3333-333333333333",
            "amount": 100,
            "transaction_type": "income",
            "description": "تحصيل من طلب",
            "order_serial": "ORD-1001",
            "created_at": "2024-01-11T10:00:00+00:00",
        },
        {
            "id": "44444444-4444-4444-4444-444444444444",
            "amount": -30,
            "transaction_type": "expense",
            "description": "شحن",
            "order_serial": "MANUAL-1704967200000",
            "created_at": "2024-01-11T11:00:00+00:00",
        },
    ]
