"""Shop ledger - account statement reconciliation for a small online shop."""

__version__ = "0.1.0"

from shop_ledger.aggregator import AggregateTotals, aggregate
from shop_ledger.balance import ShippingOverlapError, calculate, check_shipping_non_overlap
from shop_ledger.classifier import TransactionClassifier, classify
from shop_ledger.config import KeywordConfig, configure_logging, get_settings
from shop_ledger.extractor import OrderFinancials, extract
from shop_ledger.models import (
    FinancialSummary,
    Order,
    OrderItem,
    Transaction,
    TransactionCategory,
    TransactionType,
)
from shop_ledger.period import Period, filter_by_period
from shop_ledger.service import ReconciliationError, ReconciliationService
from shop_ledger.statement import build_ledger, build_summary

__all__ = [
    # Version
    "__version__",
    # Models
    "Order",
    "OrderItem",
    "Transaction",
    "TransactionType",
    "TransactionCategory",
    "FinancialSummary",
    # Engine
    "Period",
    "filter_by_period",
    "TransactionClassifier",
    "classify",
    "OrderFinancials",
    "extract",
    "AggregateTotals",
    "aggregate",
    "calculate",
    "check_shipping_non_overlap",
    "ShippingOverlapError",
    "build_summary",
    "build_ledger",
    # Service
    "ReconciliationService",
    "ReconciliationError",
    # Config
    "KeywordConfig",
    "get_settings",
    "configure_logging",
]
