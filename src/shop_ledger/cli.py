"""Command-line account statement."""

import asyncio
import json
import sys
from datetime import date

import structlog

from shop_ledger.config import configure_logging, load_keyword_config
from shop_ledger.models import FinancialSummary
from shop_ledger.period import Period
from shop_ledger.service import ReconciliationError, ReconciliationService
from shop_ledger.statement import StatementLine
from shop_ledger.store import OrderRepository, StoreAPIClient, TransactionRepository

logger = structlog.get_logger(__name__)

SUMMARY_ROWS = (
    ("Total sales", "total_sales"),
    ("Collected sales", "collected_sales"),
    ("Product cost", "total_product_cost"),
    ("Shipping (orders)", "total_shipping_cost"),
    ("Shipping paid", "paid_shipping"),
    ("Advertising", "advertising_expenses"),
    ("Other income", "other_income"),
    ("Other expenses", "other_expenses"),
    ("Total collections", "total_collections"),
    ("Total payments", "total_payments"),
    ("Net profit", "net_profit"),
    ("Current balance", "current_balance"),
)


def format_summary(summary: FinancialSummary) -> str:
    """Plain-text table of the summary (amounts unformatted)."""
    lines = []
    if summary.is_empty:
        lines.append("No orders or transactions in this period.")
    for label, attr in SUMMARY_ROWS:
        lines.append(f"{label:<20} {getattr(summary, attr):>14}")
    return "\n".join(lines)


def format_ledger(lines: list[StatementLine]) -> str:
    rows = []
    for line in lines:
        when = line.transaction.created_at.date().isoformat() if line.transaction.created_at else "-"
        rows.append(
            f"{when}  {line.label:<14} {line.signed_amount:>12} {line.running_balance:>12}  "
            f"{line.transaction.description}"
        )
    return "\n".join(rows)


async def main() -> None:
    """Print the account statement for a user and optional date window.

    Usage:
        python -m shop_ledger.cli --user=<uuid>
        python -m shop_ledger.cli --user=<uuid> --start=2024-01-01 --end=2024-01-31
        python -m shop_ledger.cli --user=<uuid> --ledger
        python -m shop_ledger.cli --user=<uuid> --json
    """
    import argparse

    configure_logging()

    parser = argparse.ArgumentParser(description="Shop account statement")
    parser.add_argument("--user", required=True, help="Admin user ID")
    parser.add_argument("--start", type=date.fromisoformat, help="First day (YYYY-MM-DD)")
    parser.add_argument("--end", type=date.fromisoformat, help="Last day (YYYY-MM-DD)")
    parser.add_argument("--ledger", action="store_true", help="Print statement lines too")
    parser.add_argument("--json", action="store_true", help="Print summary as JSON")
    args = parser.parse_args()

    try:
        period = Period.from_dates(args.start, args.end)
    except ValueError as e:
        parser.error(str(e))

    try:
        async with StoreAPIClient() as client:
            service = ReconciliationService(
                OrderRepository(client),
                TransactionRepository(client),
                keywords=load_keyword_config(),
            )
            summary, lines = await service.statement(args.user, period)
    except ReconciliationError as e:
        logger.error("statement_unavailable", error=str(e))
        sys.exit(1)

    if args.json:
        print(json.dumps(summary.to_dict(), ensure_ascii=False, indent=2))
    else:
        print(format_summary(summary))
    if args.ledger:
        print()
        print(format_ledger(lines))


def run() -> None:
    """Console script entry point."""
    asyncio.run(main())


if __name__ == "__main__":
    run()
