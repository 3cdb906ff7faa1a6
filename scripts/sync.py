#!/usr/bin/env python3
"""Synchronize the bill store with ilga.gov and notify subscribers.

Fetches the bill listing for one session, re-derives every bill whose actions
changed since the last run, writes the store, and POSTs the batch of progress
notifications.

Usage::

    python scripts/sync.py                         # GA/session from .env
    python scripts/sync.py --ga 101 --session 108  # explicit session
    python scripts/sync.py --dry-run               # no store write, no POST
    python scripts/sync.py --workers 4 --verbose
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

# Ensure the project is importable
ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT / "src"))

from rich.console import Console  # noqa: E402
from rich.table import Table  # noqa: E402

from ilga_sync import config as cfg  # noqa: E402
from ilga_sync.categories import CategoryError  # noqa: E402
from ilga_sync.config import SyncConfig  # noqa: E402
from ilga_sync.crawler import ListingError  # noqa: E402
from ilga_sync.run_log import RunLogger  # noqa: E402
from ilga_sync.store import JsonBillStore, StoreError  # noqa: E402
from ilga_sync.sync import SyncRun, refresh_bills  # noqa: E402


def _print_summary(run: SyncRun) -> None:
    table = Table(title="Sync summary")
    table.add_column("Bills", justify="right")
    table.add_column("Notifications", justify="right")
    table.add_column("Delivery", justify="right")
    table.add_row(
        str(len(run.bills)),
        str(len(run.notifications)),
        str(run.delivery_status) if run.delivery_status is not None else "-",
    )
    Console().print(table)


def main() -> None:
    parser = argparse.ArgumentParser(description="Incremental ilga.gov bill sync.")
    parser.add_argument("--ga", default=cfg.GA, help=f"General Assembly (default: {cfg.GA}).")
    parser.add_argument(
        "--session",
        default=cfg.SESSION_ID,
        help=f"Session ID (default: {cfg.SESSION_ID}).",
    )
    parser.add_argument(
        "--url",
        default=cfg.LISTING_URL_TEMPLATE,
        help="Listing URL template with two slots: GA, session.",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=cfg.MAX_WORKERS,
        help=f"Concurrent detail-page fetches (default: {cfg.MAX_WORKERS}).",
    )
    parser.add_argument("--store", type=Path, default=cfg.STORE_PATH, help="Bill store JSON file.")
    parser.add_argument(
        "--categories",
        type=Path,
        default=cfg.CATEGORIES_FILE,
        help="Committee category JSON file.",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Crawl and diff only; don't write the store or send notifications.",
    )
    parser.add_argument("--verbose", action="store_true", help="Debug logging.")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger = logging.getLogger("sync")

    meta = {"ga": args.ga, "session": args.session, "dry_run": args.dry_run}
    with RunLogger("sync", meta=meta) as log:
        try:
            config = SyncConfig.from_env(
                categories_file=args.categories,
                listing_url_template=args.url,
                max_workers=args.workers,
                store_path=args.store,
            )
            with log.phase("Open store"):
                store = JsonBillStore(config.store_path)
            with log.phase("Sync", detail=f"GA {args.ga}, session {args.session}"):
                run = refresh_bills(
                    config,
                    store,
                    args.ga,
                    args.session,
                    persist=not args.dry_run,
                )
        except (CategoryError, ListingError, StoreError) as exc:
            logger.error("Sync aborted: %s", exc)
            sys.exit(1)

        log.meta["bills"] = len(run.bills)
        log.meta["notifications"] = len(run.notifications)
        log.meta["delivery_status"] = run.delivery_status

    _print_summary(run)
    logger.info("Done!")


if __name__ == "__main__":
    main()
