from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from oppsync.app import sync_opportunities
from oppsync.config import configure_logging

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Synchronise government contract opportunities")
    subparsers = parser.add_subparsers(dest="command", required=True)

    sync = subparsers.add_parser("sync", help="Collect, reconcile and report opportunities")
    sync.add_argument(
        "--csv",
        type=Path,
        help="SAM.gov contract opportunities CSV export (defaults to OPPSYNC_CSV_PATH)",
    )
    sync.add_argument(
        "--max-records",
        type=int,
        help="Maximum number of CSV rows to turn into candidates",
    )
    sync.add_argument(
        "--no-usaspending",
        action="store_true",
        help="Skip the USA Spending award search",
    )
    sync.add_argument(
        "--lookback-days",
        type=int,
        help="Days of USA Spending awards to request (default: 30)",
    )
    sync.add_argument(
        "--report-dir",
        type=Path,
        help="Directory for delta reports (defaults to OPPSYNC_REPORT_DIR or the data dir)",
    )
    sync.add_argument(
        "--no-report",
        action="store_true",
        help="Do not write JSON/CSV delta reports",
    )

    return parser.parse_args(list(argv))


def _validate_args(args: argparse.Namespace) -> None:
    if args.max_records is not None and args.max_records < 1:
        raise ValueError("--max-records must be positive")
    if args.lookback_days is not None and args.lookback_days < 0:
        raise ValueError("--lookback-days must be non-negative")


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    configure_logging()
    parsed_args: argparse.Namespace
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    try:
        parsed_args = _parse_args(args_list)
        _validate_args(parsed_args)
    except ValueError:
        log.exception("CLI validation error")
        sys.exit(2)

    try:
        if parsed_args.command == "sync":
            result = sync_opportunities(
                csv_path=parsed_args.csv,
                max_records=parsed_args.max_records,
                include_usaspending=not parsed_args.no_usaspending,
                lookback_days=parsed_args.lookback_days,
                report_dir=parsed_args.report_dir,
                write_reports=not parsed_args.no_report,
            )
            if result.collection.failed_sources:
                log.warning(
                    "Sources that failed this run: %s",
                    ", ".join(result.collection.failed_sources),
                )
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301

    except Exception:
        log.exception("Fatal error during sync")
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    """Console script entry point."""
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
