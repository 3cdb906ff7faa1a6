"""Crawl orchestration: listing page -> bounded-parallel detail pages.

The listing page is fetched once on the calling thread; every bill link on
it is handed to a fixed-width thread pool.  Each worker fetches one detail
page and runs the caller's page handler on it right away, so any secondary
fetches the handler makes (full text, vote PDFs) happen inside that worker.

Results flow back to the calling thread through ``as_completed``; that loop
is the only place the run's aggregate is touched, so it needs no lock.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor, as_completed

import requests
from bs4 import BeautifulSoup
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .models import BillResult
from .scrapers.bill_page import MetadataError

LOGGER = logging.getLogger(__name__)

PageHandler = Callable[[str, str], BillResult]
ResultCallback = Callable[[BillResult], None]


class ListingError(RuntimeError):
    """The bill listing page could not be fetched; nothing to enumerate."""


# ── Session builder ──────────────────────────────────────────────────────────


def build_session(max_workers: int = 10) -> requests.Session:
    """Session shared by all workers; each request is retried once."""
    session = requests.Session()
    retry = Retry(
        total=1,
        backoff_factor=1.0,
        status_forcelist=[429, 500, 502, 503, 504],
    )
    adapter = HTTPAdapter(max_retries=retry, pool_connections=max_workers, pool_maxsize=max_workers)
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    return session


# ── Listing page ─────────────────────────────────────────────────────────────


def listing_url(template: str, ga: str, session_id: str) -> str:
    """Fill the two session slots of the listing URL template."""
    if "{" in template:
        return template.format(ga, session_id)
    return template % (ga, session_id)


def absolute_url(href: str, root_url: str) -> str:
    """Make a listing link absolute.

    Links already under *root_url* are returned as-is and root-relative
    links (``/legislation/...``) are prefixed; anything else is rejected.
    """
    root = root_url.rstrip("/")
    if href.startswith(root):
        return href
    if href.startswith("/"):
        return root + href
    raise ValueError(f"couldn't derive absolute url from {href!r}")


def parse_listing(html: str, root_url: str) -> list[str]:
    """Return one absolute detail-page URL per ``<li>`` link, de-duplicated."""
    soup = BeautifulSoup(html, "html.parser")
    seen: set[str] = set()
    links: list[str] = []
    for item in soup.find_all("li"):
        anchor = item.find("a")
        if anchor is None or not anchor.get("href"):
            continue
        try:
            link = absolute_url(anchor["href"], root_url)
        except ValueError as exc:
            LOGGER.warning("Dropping listing link: %s", exc)
            continue
        if link not in seen:
            seen.add(link)
            links.append(link)
    return links


def fetch_listing(url: str, session: requests.Session, root_url: str, timeout: int = 20) -> list[str]:
    LOGGER.info("Fetching bill listing: %s", url)
    try:
        resp = session.get(url, timeout=timeout)
        resp.raise_for_status()
    except requests.RequestException as exc:
        raise ListingError(f"couldn't fetch bill listing {url}: {exc}") from exc
    links = parse_listing(resp.text, root_url)
    LOGGER.info("Found %d bill links.", len(links))
    return links


# ── Worker ───────────────────────────────────────────────────────────────────


def _fetch_and_handle(
    url: str,
    handle_page: PageHandler,
    session: requests.Session,
    timeout: int,
) -> BillResult:
    resp = session.get(url, timeout=timeout)
    resp.raise_for_status()
    return handle_page(url, resp.text)


# ── Public API ───────────────────────────────────────────────────────────────


def crawl_bills(
    links: list[str],
    handle_page: PageHandler,
    on_result: ResultCallback,
    session: requests.Session,
    max_workers: int = 10,
    timeout: int = 20,
) -> int:
    """Process every detail page with at most *max_workers* in flight.

    *on_result* is called once per successfully handled page, on the
    calling thread, in completion order.  Fetch and metadata failures are
    logged and skip only that bill.  Returns the number of bills handled.
    """
    total = len(links)
    completed = 0
    handled = 0
    t_start = time.perf_counter()

    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        future_to_url = {
            pool.submit(_fetch_and_handle, url, handle_page, session, timeout): url
            for url in links
        }
        for future in as_completed(future_to_url):
            completed += 1
            url = future_to_url[future]
            try:
                result = future.result()
            except MetadataError as exc:
                LOGGER.warning("  [%d/%d] Skipped %s: %s", completed, total, url, exc)
                continue
            except requests.RequestException as exc:
                LOGGER.warning("  [%d/%d] Failed to fetch %s: %s", completed, total, url, exc)
                continue
            except Exception:
                LOGGER.exception("  [%d/%d] Error processing %s", completed, total, url)
                continue
            handled += 1
            on_result(result)

    LOGGER.info(
        "Crawl complete: %d/%d bills in %.1fs",
        handled,
        total,
        time.perf_counter() - t_start,
    )
    return handled
