"""Full bill text from the ILGA HTML rendering.

ILGA publishes each bill's latest text at a predictable URL::

    /legislation/{GA}/{DocType}/{GA}00{DocType}{Num:04d}.htm

Example: ``HB0012`` in the 101st GA ->
``http://www.ilga.gov/legislation/101/HB/10100HB0012.htm``

The page is a table with one row per numbered line; the text lives in the
``td.xsl`` cell and line-numbered rows carry a non-empty ``td.number``.
"""

from __future__ import annotations

import logging

import requests
from bs4 import BeautifulSoup

from ..models import BillMetadata, FullText

LOGGER = logging.getLogger(__name__)


def full_text_url(metadata: BillMetadata, root_url: str) -> str:
    ga = metadata.assembly
    dt = metadata.doc_type
    return f"{root_url.rstrip('/')}/legislation/{ga}/{dt}/{ga}00{dt}{metadata.number:04d}.htm"


def parse_full_text(html: str) -> str:
    """Concatenate the text cells of every line-numbered row."""
    soup = BeautifulSoup(html, "html.parser")
    parts: list[str] = []
    for row in soup.find_all("tr"):
        if row.select_one(".xsl") is None:
            continue
        number = row.select_one("td.number")
        if number is None or not number.get_text():
            continue
        parts.append("".join(td.get_text() for td in row.select("td.xsl")))
    return "".join(parts)


def fetch_full_text(
    metadata: BillMetadata,
    root_url: str,
    session: requests.Session,
    timeout: int = 20,
) -> FullText:
    """Fetch and parse the bill text.

    A failed fetch still records the URL, with empty text.
    """
    url = full_text_url(metadata, root_url)
    try:
        resp = session.get(url, timeout=timeout)
        resp.raise_for_status()
    except requests.RequestException as exc:
        LOGGER.warning("Failed to fetch full text %s: %s", url, exc)
        return FullText(url=url, text="")
    return FullText(url=url, text=parse_full_text(resp.text))
