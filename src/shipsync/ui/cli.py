from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from shipsync.app import (
    enhance_orders,
    import_product_catalog,
    list_order_lines,
    sync_open_orders_from_carrier,
)
from shipsync.config import configure_logging

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence
    from types import FrameType

    from shipsync.domain.model import OrderLineRecord

log = logging.getLogger(__name__)


def _positive_int(value: str) -> int:
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"Not an integer: {value}") from exc
    if parsed < 1:
        raise argparse.ArgumentTypeError("Must be at least 1")
    return parsed


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Reconcile open carrier orders")
    subparsers = parser.add_subparsers(dest="command", required=True)

    sync = subparsers.add_parser("sync", help="Fetch open orders and reconcile the record store")
    sync.add_argument(
        "--max-pages",
        type=_positive_int,
        default=None,
        help="Number of result pages to request (defaults to config)",
    )
    sync.add_argument(
        "--no-enhance",
        action="store_true",
        help="Skip customer name and product image backfill",
    )

    subparsers.add_parser("enhance", help="Backfill customer names and product images")

    catalog = subparsers.add_parser("catalog-import", help="Import a name,image product CSV")
    catalog.add_argument("path", type=Path, help="CSV file with name and image columns")

    show = subparsers.add_parser("show", help="Print stored order lines")
    show.add_argument("--order-id", type=str, help="Only show lines of this order")

    return parser.parse_args(list(argv))


def _format_record(record: OrderLineRecord) -> str:
    return "\t".join(
        str(value)
        for value in (
            record.surrogate_id,
            record.order_id,
            record.product_code,
            record.product_name,
            record.payment_type.value,
            record.allocated_total,
            record.prepaid_amount,
            record.collectable_amount,
            record.status.value,
            record.claimed_by or "-",
        )
    )


def _print_records(records: Iterable[OrderLineRecord]) -> None:
    for record in records:
        sys.stdout.write(_format_record(record) + "\n")


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    configure_logging()
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    try:
        parsed_args = _parse_args(args_list)
        if parsed_args.command == "catalog-import" and not parsed_args.path.is_file():
            raise ValueError(f"Catalog file not found: {parsed_args.path}")  # noqa: TRY301
    except ValueError:
        log.exception("CLI validation error")
        sys.exit(2)

    try:
        if parsed_args.command == "sync":
            result = sync_open_orders_from_carrier(
                max_pages=parsed_args.max_pages,
                enhance=False if parsed_args.no_enhance else None,
            )
            if result.enhancement is not None and result.enhancement.failed:
                log.warning("Enhancement failed; order lines were synced without it")
        elif parsed_args.command == "enhance":
            enhancement = enhance_orders()
            log.info(
                "Enhancement finished: updated=%s, misses=%s, failed=%s",
                len(enhancement.updated),
                enhancement.misses,
                enhancement.failed,
            )
        elif parsed_args.command == "catalog-import":
            import_product_catalog(parsed_args.path)
        elif parsed_args.command == "show":
            _print_records(list_order_lines(order_id=parsed_args.order_id))
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301

    except Exception:
        log.exception("Fatal error during %s", parsed_args.command)
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
