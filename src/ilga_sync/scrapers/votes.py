"""Roll-call vote scraper.

Follows the "Votes" link of a bill detail page to the vote history page,
downloads each floor roll-call PDF, and rebuilds ``{legislator: code}``
from the PDF text with *pdfplumber*.

Roll-call PDFs lay the chamber out as a grid of ``<code> <name>`` cells, so
text is read row by row from the page layout rather than in reading order.
"""

from __future__ import annotations

import io
import logging
import time
from collections.abc import Iterable
from urllib.parse import urljoin

import pdfplumber
import requests
from bs4 import BeautifulSoup

from ..models import VoteEvent

LOGGER = logging.getLogger(__name__)

# Y=Yea, N=Nay, E=Excused, NV=Not Voting, P=Present
VOTE_CODES = frozenset({"Y", "N", "E", "NV", "P"})

# Words whose tops are within this many points share a row.
_ROW_TOLERANCE = 3.0


# ── Vote history page parsing ────────────────────────────────────────────────


def extract_vote_history_url(soup: BeautifulSoup, page_url: str) -> str | None:
    """Extract the "Votes" link from a bill detail page."""
    link = soup.select_one('a.legislinks:-soup-contains("Votes")')
    if link is None or not link.get("href"):
        return None
    return urljoin(page_url, link["href"])


def parse_vote_history(html: str, page_url: str) -> list[tuple[str, str]]:
    """Return ``[(pdf_url, chamber), ...]`` from the vote history page.

    Roll calls are the rows around the last "Voting Record" heading; the
    chamber is the row's second cell.
    """
    soup = BeautifulSoup(html, "html.parser")
    headings = soup.select('td.whiteheading:-soup-contains("Voting Record")')
    if not headings:
        return []
    heading_row = headings[-1].parent
    rows = list(reversed(heading_row.find_previous_siblings("tr")))
    rows += heading_row.find_next_siblings("tr")

    results: list[tuple[str, str]] = []
    for row in rows:
        link = row.find("a", href=True)
        if link is None:
            continue
        cells = row.find_all("td")
        chamber = cells[1].get_text().strip() if len(cells) > 1 else ""
        results.append((urljoin(page_url, link["href"]), chamber))
    return results


# ── PDF parsing ──────────────────────────────────────────────────────────────


def _page_rows(page: pdfplumber.page.Page) -> list[str]:
    """Group a page's words into rows by vertical position."""
    words = sorted(page.extract_words(), key=lambda w: (w["top"], w["x0"]))
    lines: list[tuple[float, list[dict]]] = []
    for word in words:
        if lines and abs(word["top"] - lines[-1][0]) <= _ROW_TOLERANCE:
            lines[-1][1].append(word)
        else:
            lines.append((word["top"], [word]))
    return [
        " ".join(w["text"] for w in sorted(line_words, key=lambda w: w["x0"]))
        for _, line_words in lines
    ]


def pdf_rows(pdf_bytes: bytes) -> list[str]:
    """Extract the text rows of every page of a PDF."""
    rows: list[str] = []
    with pdfplumber.open(io.BytesIO(pdf_bytes)) as pdf:
        for page in pdf.pages:
            rows.extend(_page_rows(page))
    return rows


def parse_vote_rows(rows: Iterable[str]) -> dict[str, str]:
    """Pair each vote code with the name that follows it.

    A name is only accepted when it starts with a letter, which drops tally
    numbers and other table debris.  A name seen twice keeps its last code.
    """
    votes: dict[str, str] = {}
    for row in rows:
        tokens = row.split()
        i = 0
        while i < len(tokens) - 1:
            code, name = tokens[i], tokens[i + 1]
            if code in VOTE_CODES and name[0].isalpha():
                votes[name] = code
                i += 2
            else:
                i += 1
    return votes


# ── Fetching ─────────────────────────────────────────────────────────────────


def fetch_vote_event(
    pdf_url: str,
    chamber: str,
    session: requests.Session,
    timeout: int = 20,
) -> VoteEvent | None:
    """Download one roll-call PDF; any failure yields None."""
    t0 = time.perf_counter()
    try:
        resp = session.get(pdf_url, timeout=timeout)
        resp.raise_for_status()
    except requests.RequestException as exc:
        LOGGER.warning("Failed to download vote PDF %s: %s", pdf_url, exc)
        return None

    try:
        rows = pdf_rows(resp.content)
    except Exception as exc:
        LOGGER.warning("Failed to parse vote PDF %s: %s", pdf_url, exc)
        return None

    votes = parse_vote_rows(rows)
    LOGGER.debug(
        "    Vote PDF parsed: %d votes (%.0fms) %s",
        len(votes),
        (time.perf_counter() - t0) * 1000,
        pdf_url,
    )
    return VoteEvent(chamber=chamber.lower(), votes=votes, url=pdf_url)


def fetch_votes(
    soup: BeautifulSoup,
    page_url: str,
    session: requests.Session,
    timeout: int = 20,
) -> list[VoteEvent]:
    """Collect every roll call linked from a bill detail page."""
    history_url = extract_vote_history_url(soup, page_url)
    if not history_url:
        return []

    try:
        resp = session.get(history_url, timeout=timeout)
        resp.raise_for_status()
    except requests.RequestException as exc:
        LOGGER.warning("Failed to fetch vote history %s: %s", history_url, exc)
        return []

    events: list[VoteEvent] = []
    for pdf_url, chamber in parse_vote_history(resp.text, history_url):
        event = fetch_vote_event(pdf_url, chamber, session, timeout)
        if event is not None:
            events.append(event)
    return events
