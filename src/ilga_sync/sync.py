"""Incremental bill synchronization.

For each detail page the synchronizer:

1. derives the bill's natural key from the URL and loads the stored bill
   (a miss means the bill is new and everything is derived);
2. always refreshes the cheap fields (metadata, title, synopsis, sponsors);
3. fingerprints the actions table and, only when it differs from the stored
   fingerprint, rebuilds the actions, category, stage/notification and the
   secondary resources the new actions invalidate (full text, roll calls).

``refresh_bills`` drives a whole run: crawl, collect, persist, notify.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

import requests
from bs4 import BeautifulSoup

from .config import SyncConfig
from .crawler import build_session, crawl_bills, fetch_listing, listing_url
from .models import Bill, BillResult, Notification
from .notify import NotificationClient, NotificationError
from .progress import check_actions_for_updates, check_notification
from .scrapers.bill_page import (
    build_metadata,
    fingerprint_actions,
    parse_actions,
    parse_sponsors,
    parse_summaries,
    parse_title,
)
from .scrapers.full_text import fetch_full_text
from .scrapers.votes import fetch_votes
from .store import BillStore

LOGGER = logging.getLogger(__name__)


class BillSynchronizer:
    """Turns one detail page into an up-to-date :class:`Bill`."""

    def __init__(self, config: SyncConfig, store: BillStore, session: requests.Session) -> None:
        self.config = config
        self.store = store
        self.session = session

    def process_page(self, url: str, html: str) -> BillResult:
        metadata = build_metadata(url)  # MetadataError skips the bill
        soup = BeautifulSoup(html, "html.parser")

        stored = self.store.get(metadata)
        update_all = stored is None
        bill = stored if stored is not None else Bill()

        fingerprint = fingerprint_actions(soup)
        actions_changed = bill.actions_fingerprint != fingerprint

        bill.metadata = metadata
        bill.title = parse_title(soup)
        bill.short_summary, bill.full_summary = parse_summaries(soup)
        (
            bill.sponsor_ids,
            bill.house_primary_sponsor,
            bill.senate_primary_sponsor,
            bill.chief_sponsor,
        ) = parse_sponsors(soup)

        notification: Notification | None = None
        if update_all or actions_changed:
            actions, bill.category, bill.committee_id = parse_actions(soup, self.config.categories)
            update_text, update_votes = check_actions_for_updates(
                bill.actions, actions, refetch_votes=self.config.refetch_votes
            )
            notification, bill.viewable = check_notification(bill.actions, actions, metadata)
            bill.replace_actions(actions, fingerprint)

            if update_all or update_text:
                bill.full_text = fetch_full_text(
                    metadata, self.config.root_url, self.session, self.config.timeout
                )
            if update_all or update_votes:
                bill.vote_events = fetch_votes(soup, url, self.session, self.config.timeout)

        return BillResult(bill=bill, notification=notification)


@dataclass
class SyncRun:
    """Aggregate of one run, owned by the single result consumer."""

    bills: dict[tuple, Bill] = field(default_factory=dict)
    notifications: list[Notification] = field(default_factory=list)
    count: int = 0
    delivery_status: int | None = None  # HTTP status of the notification POST

    def collect(self, result: BillResult) -> None:
        bill = result.bill
        self.count += 1
        self.bills[bill.metadata.key] = bill
        if result.notification is not None:
            self.notifications.append(result.notification)
        LOGGER.info("Done: Bill #%d (%d)", bill.metadata.number, self.count)


def refresh_bills(
    config: SyncConfig,
    store: BillStore,
    ga: str,
    session_id: str,
    *,
    session: requests.Session | None = None,
    notifier: NotificationClient | None = None,
    persist: bool = True,
) -> SyncRun:
    """Run one full synchronization.

    Raises :class:`~ilga_sync.crawler.ListingError` when the listing can't be
    fetched.  Storage is written before notifications are delivered; a
    delivery failure is logged and does not undo it.
    """
    sess = session or build_session(config.max_workers)
    synchronizer = BillSynchronizer(config, store, sess)
    run = SyncRun()

    url = listing_url(config.listing_url_template, ga, session_id)
    links = fetch_listing(url, sess, config.root_url, config.timeout)
    crawl_bills(
        links,
        synchronizer.process_page,
        run.collect,
        sess,
        max_workers=config.max_workers,
        timeout=config.timeout,
    )

    if not persist:
        LOGGER.info(
            "Dry run: %d bills, %d notifications not persisted.",
            len(run.bills),
            len(run.notifications),
        )
        return run

    LOGGER.info("Starting upload of %d bills to store...", len(run.bills))
    for bill in run.bills.values():
        store.upsert(bill)
    store.flush()

    LOGGER.info("Sending %d notifications...", len(run.notifications))
    client = notifier or NotificationClient(config.notification_url, sess, config.timeout)
    try:
        run.delivery_status = client.send_batch(run.notifications)
    except NotificationError as exc:
        LOGGER.error("%s", exc)
    return run
