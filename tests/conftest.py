from __future__ import annotations

import pytest
import requests

from ilga_sync.categories import CategoryLookup
from ilga_sync.config import SyncConfig
from ilga_sync.models import BillAction, BillMetadata, Chamber, Tag

ROOT_URL = "http://www.ilga.gov"

DETAIL_URL = (
    "http://www.ilga.gov/legislation/BillStatus.asp?DocNum=12&GAID=15&GA=101"
    "&DocTypeID=HB&LegID=115810&SessionID=108"
)
FULL_TEXT_URL = "http://www.ilga.gov/legislation/101/HB/10100HB0012.htm"
VOTE_HISTORY_URL = (
    "http://www.ilga.gov/legislation/votehistory.asp?DocNum=12&GAID=15"
    "&DocTypeID=HB&LegID=115810&SessionID=108&GA=101"
)
VOTE_PDF_URL = "http://www.ilga.gov/legislation/votehistory/101/house/10100HB0012_04102019_034000T.pdf"
LISTING_URL = "http://www.ilga.gov/legislation/grplist.asp?DocTypeID=HB&GA=101&SessionID=108"

# ── HTML fixtures ─────────────────────────────────────────────────────────────

_ACTION_ROW = (
    '<tr><td class="content">{date}</td><td class="content">{chamber}</td>'
    '<td class="content">{text}</td></tr>\n'
)

BASE_ACTION_ROWS = [
    ("1/9/2019", "House", "Filed with the Clerk by Rep. Jane Doe"),
    ("1/9/2019", "House", "First Reading"),
    ("1/9/2019", "House", "Referred to Rules Committee"),
    (
        "1/22/2019",
        "House",
        'Assigned to <a href="/house/committees/members.asp?committeeID=2301&amp;GA=101">'
        "Elementary &amp; Secondary Education</a>",
    ),
]


def detail_page(action_rows: list[tuple[str, str, str]] = BASE_ACTION_ROWS) -> str:
    rows = "".join(
        _ACTION_ROW.format(date=d, chamber=c, text=t) for d, c, t in action_rows
    )
    return (
        "<html><body>\n"
        '<span class="heading2">Short Description:</span> '
        '<span class="content">SCHOOL CODE-TEACHER PAY</span><br>\n'
        '<span class="heading2">House Sponsors</span>\n'
        '<a class="content" href="/house/Rep.asp?GA=101&amp;MemberID=2345">Rep. Jane Doe</a>\n'
        '<a class="content" href="/house/Rep.asp?GA=101&amp;MemberID=2400">Rep. John Roe</a>\n'
        '<span class="heading2">Senate Sponsors</span>\n'
        '<a class="content" href="/senate/Senator.asp?GA=101&amp;MemberID=2900">Sen. Ann Poe</a>\n'
        '<a class="legislinks" href="votehistory.asp?DocNum=12&amp;GAID=15&amp;DocTypeID=HB'
        '&amp;LegID=115810&amp;SessionID=108&amp;GA=101">Votes</a>\n'
        '<span class="heading2">Synopsis As Introduced</span>\n'
        '<span class="content">Amends the School Code.</span>\n'
        '<span class="content">Raises the minimum teacher salary.</span>\n'
        '<span class="content">Effective immediately.</span>\n'
        '<a name="actions"></a>\n'
        "<table>\n"
        '<tr><td class="heading">Date</td><td class="heading">Chamber</td>'
        '<td class="heading">Action</td></tr>\n'
        f"{rows}"
        "</table>\n"
        "</body></html>\n"
    )


FULL_TEXT_PAGE = (
    "<html><body><table>\n"
    '<tr><td class="number">1</td><td class="xsl">AN ACT concerning education.</td></tr>\n'
    '<tr><td class="number"></td><td class="xsl">(page header)</td></tr>\n'
    '<tr><td class="number">2</td><td class="xsl"> Be it enacted.</td></tr>\n'
    "<tr><td>footer</td></tr>\n"
    "</table></body></html>\n"
)

VOTE_HISTORY_PAGE = (
    "<html><body><table>\n"
    '<tr><td class="whiteheading">Voting Record</td><td class="whiteheading">Chamber</td></tr>\n'
    '<tr><td><a href="/legislation/votehistory/101/house/10100HB0012_04102019_034000T.pdf">'
    "Third Reading</a></td><td>House</td></tr>\n"
    "</table></body></html>\n"
)

LISTING_PAGE = (
    "<html><body><ul>\n"
    '<li><a href="/legislation/BillStatus.asp?DocNum=12&amp;GAID=15&amp;GA=101'
    '&amp;DocTypeID=HB&amp;LegID=115810&amp;SessionID=108">HB0012</a></li>\n'
    '<li><a href="http://www.ilga.gov/legislation/BillStatus.asp?DocNum=13&amp;GAID=15'
    '&amp;GA=101&amp;DocTypeID=HB&amp;LegID=115811&amp;SessionID=108">HB0013</a></li>\n'
    '<li><a href="/legislation/BillStatus.asp?DocNum=12&amp;GAID=15&amp;GA=101'
    '&amp;DocTypeID=HB&amp;LegID=115810&amp;SessionID=108">duplicate</a></li>\n'
    '<li><a href="javascript:void(0)">Print</a></li>\n'
    "<li>No link here</li>\n"
    "</ul></body></html>\n"
)


# ── Fake HTTP ─────────────────────────────────────────────────────────────────


class FakeResponse:
    def __init__(self, url: str, status_code: int = 200, text: str = "", content: bytes = b""):
        self.url = url
        self.status_code = status_code
        self.text = text
        self.content = content or text.encode("utf-8")

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} for {self.url}")


class FakeSession:
    """Minimal stand-in for ``requests.Session`` serving canned pages."""

    def __init__(self, pages: dict[str, str | bytes] | None = None):
        self.pages = dict(pages or {})
        self.requested: list[str] = []
        self.posted: list[tuple[str, dict]] = []

    def get(self, url: str, timeout: int | None = None, **kwargs: object) -> FakeResponse:
        self.requested.append(url)
        body = self.pages.get(url)
        if body is None:
            return FakeResponse(url, status_code=404)
        if isinstance(body, bytes):
            return FakeResponse(url, content=body)
        return FakeResponse(url, text=body)

    def post(self, url: str, json: dict | None = None, timeout: int | None = None) -> FakeResponse:
        self.posted.append((url, json or {}))
        return FakeResponse(url, status_code=200)

    def count(self, url: str) -> int:
        return self.requested.count(url)


# ── Fixtures ──────────────────────────────────────────────────────────────────


@pytest.fixture
def categories() -> CategoryLookup:
    return CategoryLookup.from_categories(
        {"Education": [123, 2301], "Transportation": [2290]},
    )


@pytest.fixture
def sync_config(categories: CategoryLookup, tmp_path) -> SyncConfig:
    return SyncConfig(
        root_url=ROOT_URL,
        listing_url_template=LISTING_URL.replace("GA=101", "GA=%s").replace(
            "SessionID=108", "SessionID=%s"
        ),
        max_workers=2,
        timeout=5,
        refetch_votes=False,
        store_path=tmp_path / "bills.json",
        notification_url="http://notify.example/push",
        categories=categories,
    )


@pytest.fixture
def house_bill() -> BillMetadata:
    return BillMetadata(
        assembly=101,
        chamber=Chamber.HOUSE,
        number=12,
        url=DETAIL_URL,
        doc_type="HB",
    )


def action(text: str, tag: Tag, chamber: str = "House", date: int | None = None) -> BillAction:
    return BillAction(date=date, chamber=chamber, description=text, tag=tag)
