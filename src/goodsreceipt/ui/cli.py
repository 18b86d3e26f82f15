from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from goodsreceipt.app import initialise_database, reconcile_purchase_order
from goodsreceipt.config import ConfigurationError, configure_logging, parse_backend
from goodsreceipt.domain.reconciliation import LineStatus, MissingOrderNumber

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from goodsreceipt.app import OrderReconciliation
    from goodsreceipt.config import Backend

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Reconcile goods receipts against inventory")
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log reconciliation diagnostics at debug level",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    reconcile = subparsers.add_parser(
        "reconcile",
        help="Show which reported batches of a purchase order are still to be received",
    )
    reconcile.add_argument(
        "--order-id",
        type=str,
        required=True,
        help="Purchase order document id",
    )
    reconcile.add_argument(
        "--line-id",
        type=str,
        help="Restrict reconciliation to a single order line",
    )
    reconcile.add_argument(
        "--backend",
        type=str,
        help="Storage backend: sqlalchemy or firestore (defaults to GOODSRECEIPT_BACKEND)",
    )

    init_db = subparsers.add_parser("init-db", help="Create the SQLAlchemy schema")
    init_db.add_argument(
        "--database-uri",
        type=str,
        help="Database URI (defaults to DATABASE_URI or the local data directory)",
    )

    return parser.parse_args(list(argv))


def _parse_backend_option(value: str | None) -> Backend | None:
    if value is None:
        return None
    try:
        return parse_backend(value)
    except ConfigurationError as exc:
        raise ValueError(str(exc)) from exc


def _report(outcome: OrderReconciliation | MissingOrderNumber) -> None:
    if isinstance(outcome, MissingOrderNumber):
        log.warning(outcome.message)
        return

    for line in outcome.lines:
        issue = line.issue
        log.info(
            "Line %s (%s): status=%s, batches=%s, quantity=%s, reports=%s%s",
            line.line_item.id,
            line.line_item.name,
            line.status,
            len(line.result.batches),
            line.result.aggregate_quantity,
            line.result.reports_count,
            f" - {issue.message}" if issue is not None else "",
        )
        request = line.receiving_request
        if line.status is LineStatus.READY and request is not None:
            print(json.dumps(request.to_parameters(), ensure_ascii=False))  # noqa: T201


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args: argparse.Namespace
    backend: Backend | None = None
    try:
        parsed_args = _parse_args(args_list)
        if parsed_args.command == "reconcile":
            backend = _parse_backend_option(parsed_args.backend)
    except ValueError:
        configure_logging()
        log.exception("CLI validation error")
        sys.exit(2)

    configure_logging(diagnostics_level=logging.DEBUG if parsed_args.verbose else None)

    try:
        if parsed_args.command == "reconcile":
            outcome = asyncio.run(
                reconcile_purchase_order(
                    parsed_args.order_id,
                    line_item_id=parsed_args.line_id,
                    backend=backend,
                )
            )
            _report(outcome)
        elif parsed_args.command == "init-db":
            initialise_database(database_uri=parsed_args.database_uri)
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301

    except Exception:
        log.exception("Fatal error during reconciliation")
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
