"""Bill detail page: metadata, sponsors, title/synopsis, actions, fingerprint.

Everything here is a pure function of the detail page (or its URL) so the
synchronizer can decide what to re-derive before touching the network again.
"""

from __future__ import annotations

import hashlib
import logging
import re
from datetime import datetime, timezone

from bs4 import BeautifulSoup, Tag as HtmlTag

from ..categories import CategoryLookup
from ..classifier import classify_action
from ..models import DNE, BillAction, BillMetadata, Chamber, Tag

LOGGER = logging.getLogger(__name__)

_RE_DOC_NUM = re.compile(r"DocNum=(\d+)", re.IGNORECASE)
_RE_DOC_TYPE = re.compile(r"DocTypeID=([A-Za-z]+)", re.IGNORECASE)
_RE_GA = re.compile(r"(?<![A-Za-z])GA=(\d+)", re.IGNORECASE)
_RE_MEMBER_ID = re.compile(r"MemberID=(\d+)", re.IGNORECASE)

_ACTIONS_TABLE = 'a[name="actions"] ~ table'
_ACTION_DATE_FORMAT = "%m/%d/%Y"


class MetadataError(ValueError):
    """The detail-page URL does not identify a bill."""


# ── Metadata ─────────────────────────────────────────────────────────────────


def build_metadata(url: str) -> BillMetadata:
    """Derive the bill's natural key from its detail-page URL."""
    num = _RE_DOC_NUM.search(url)
    if not num:
        raise MetadataError(f"couldn't get bill number from {url}")
    doc_type = _RE_DOC_TYPE.search(url)
    if not doc_type:
        raise MetadataError(f"couldn't get bill chamber from {url}")
    ga = _RE_GA.search(url)
    if not ga:
        raise MetadataError(f"couldn't get general assembly from {url}")

    dt = doc_type.group(1).upper()
    try:
        chamber = Chamber.from_doc_type(dt)
    except ValueError as exc:
        raise MetadataError(f"couldn't get bill chamber from {url}") from exc

    return BillMetadata(
        assembly=int(ga.group(1)),
        chamber=chamber,
        number=int(num.group(1)),
        url=url,
        doc_type=dt,
    )


# ── Title / synopsis ─────────────────────────────────────────────────────────


def _content_after(soup: BeautifulSoup, label: str) -> HtmlTag | None:
    return soup.select_one(f'span:-soup-contains("{label}") ~ span.content')


def parse_title(soup: BeautifulSoup) -> str:
    span = _content_after(soup, "Short Description")
    return span.get_text() if span else ""


def parse_summaries(soup: BeautifulSoup) -> tuple[str, str]:
    """Return ``(short_summary, full_summary)``.

    The short summary is the first content span after "Synopsis"; the full
    summary is every content span that follows it.
    """
    first = _content_after(soup, "Synopsis")
    if first is None:
        return ("", "")
    rest = first.find_next_siblings("span", class_="content")
    return (first.get_text(), "".join(span.get_text() for span in rest))


# ── Sponsors ─────────────────────────────────────────────────────────────────


def parse_sponsors(
    soup: BeautifulSoup,
) -> tuple[list[int | None], int | None, int | None, int | None]:
    """Return ``(sponsor_ids, house_primary, senate_primary, chief)``.

    Sponsors are the ``a.content`` links in page order; the chief sponsor is
    the first link and each chamber's primary is its first linked member.
    """
    sponsor_ids: list[int | None] = []
    house_primary: int | None = None
    senate_primary: int | None = None
    chief: int | None = None
    house_seen = senate_seen = False

    for i, link in enumerate(soup.select("a.content")):
        sponsor_id: int | None = None
        href = link.get("href")
        if href:
            m = _RE_MEMBER_ID.search(href)
            if m:
                sponsor_id = int(m.group(1))
            if i == 0:
                chief = sponsor_id
            if "house" in href:
                if not house_seen:
                    house_seen = True
                    house_primary = sponsor_id
            elif "senate" in href:
                if not senate_seen:
                    senate_seen = True
                    senate_primary = sponsor_id
        sponsor_ids.append(sponsor_id)

    return sponsor_ids, house_primary, senate_primary, chief


# ── Actions ──────────────────────────────────────────────────────────────────


def _actions_table(soup: BeautifulSoup) -> HtmlTag | None:
    return soup.select_one(_ACTIONS_TABLE)


def fingerprint_actions(soup: BeautifulSoup) -> str:
    """MD5 hex digest of the actions table's rendered text."""
    table = _actions_table(soup)
    text = table.get_text() if table else ""
    return hashlib.md5(text.encode("utf-8")).hexdigest()


def parse_action_date(raw: str) -> int | None:
    """``"1/13/2019"`` -> epoch milliseconds (UTC), or None."""
    try:
        parsed = datetime.strptime(raw.strip(), _ACTION_DATE_FORMAT)
    except ValueError:
        return None
    return int(parsed.replace(tzinfo=timezone.utc).timestamp() * 1000)


def parse_actions(
    soup: BeautifulSoup,
    categories: CategoryLookup,
) -> tuple[list[BillAction], str, str]:
    """Parse and tag the actions table.

    Returns ``(actions, category, committee_id)``.  The category comes from
    the committee link of the last "Assigned to" row.  Descriptions are kept
    exactly as published; the chamber cell is stripped because it is
    compared across runs and quoted in notification text.
    """
    actions: list[BillAction] = []
    category, committee_id = DNE, ""

    table = _actions_table(soup)
    if table is None:
        return actions, category, committee_id

    for row in table.find_all("tr"):
        cells = row.select("td.content")
        if len(cells) != 3:
            continue  # heading row
        description = cells[2].get_text()
        tag = classify_action(description)
        if tag is Tag.ASSIGNED:
            link = cells[2].find("a", href=True)
            category, committee_id = categories.resolve(link["href"] if link else None)
        actions.append(
            BillAction(
                date=parse_action_date(cells[0].get_text()),
                chamber=cells[1].get_text().strip(),
                description=description,
                tag=tag,
            )
        )
    return actions, category, committee_id
