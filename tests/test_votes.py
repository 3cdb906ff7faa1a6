"""Tests for the roll-call scraper (vote history page + PDF rows)."""

from __future__ import annotations

import pytest
from bs4 import BeautifulSoup
from conftest import (
    DETAIL_URL,
    VOTE_HISTORY_PAGE,
    VOTE_HISTORY_URL,
    VOTE_PDF_URL,
    FakeSession,
    detail_page,
)

from ilga_sync.models import VoteEvent
from ilga_sync.scrapers import votes
from ilga_sync.scrapers.votes import (
    extract_vote_history_url,
    fetch_vote_event,
    fetch_votes,
    parse_vote_history,
    parse_vote_rows,
)

ROLL_CALL_ROWS = [
    "101ST GENERAL ASSEMBLY",
    "HOUSE BILL 12 THIRD READING PASSED",
    "111 YEAS 0 NAYS 0 PRESENT",
    "Y Ammons Y Andrade N Bailey NV Batinick",
    "E Bennett P Bourne Y Buckner",
]


class TestParseVoteRows:
    def test_pairs(self) -> None:
        assert parse_vote_rows(["Y Smith N Jones"]) == {"Smith": "Y", "Jones": "N"}

    def test_roll_call_page(self) -> None:
        assert parse_vote_rows(ROLL_CALL_ROWS) == {
            "Ammons": "Y",
            "Andrade": "Y",
            "Bailey": "N",
            "Batinick": "NV",
            "Bennett": "E",
            "Bourne": "P",
            "Buckner": "Y",
        }

    def test_numbers_are_not_names(self) -> None:
        assert parse_vote_rows(["Y 111 N 0 Y Smith"]) == {"Smith": "Y"}

    def test_last_code_wins(self) -> None:
        assert parse_vote_rows(["Y Smith", "N Smith"]) == {"Smith": "N"}

    def test_odd_token_count(self) -> None:
        assert parse_vote_rows(["Y Smith N"]) == {"Smith": "Y"}

    def test_empty(self) -> None:
        assert parse_vote_rows([]) == {}
        assert parse_vote_rows(["", "   "]) == {}


class TestVoteHistoryPage:
    def test_extract_history_url(self) -> None:
        soup = BeautifulSoup(detail_page(), "html.parser")
        assert extract_vote_history_url(soup, DETAIL_URL) == VOTE_HISTORY_URL

    def test_no_votes_link(self) -> None:
        soup = BeautifulSoup("<p></p>", "html.parser")
        assert extract_vote_history_url(soup, DETAIL_URL) is None

    def test_parse_history(self) -> None:
        assert parse_vote_history(VOTE_HISTORY_PAGE, VOTE_HISTORY_URL) == [
            (VOTE_PDF_URL, "House")
        ]

    def test_rows_on_both_sides_of_heading(self) -> None:
        html = (
            "<table>"
            '<tr><td><a href="/v/a.pdf">Third Reading</a></td><td>Senate</td></tr>'
            '<tr><td class="whiteheading">Voting Record</td></tr>'
            '<tr><td><a href="/v/b.pdf">Concurrence</a></td><td>House</td></tr>'
            "<tr><td>no link</td></tr>"
            "</table>"
        )
        assert parse_vote_history(html, VOTE_HISTORY_URL) == [
            ("http://www.ilga.gov/v/a.pdf", "Senate"),
            ("http://www.ilga.gov/v/b.pdf", "House"),
        ]

    def test_no_heading(self) -> None:
        assert parse_vote_history("<table><tr><td>x</td></tr></table>", VOTE_HISTORY_URL) == []


@pytest.fixture
def fake_pdf(monkeypatch):
    monkeypatch.setattr(votes, "pdf_rows", lambda content: ["Y Smith N Jones"])


class TestFetch:
    def test_fetch_vote_event(self, fake_pdf) -> None:
        session = FakeSession({VOTE_PDF_URL: b"%PDF-1.4"})
        event = fetch_vote_event(VOTE_PDF_URL, "House", session)
        assert event == VoteEvent(
            chamber="house", votes={"Smith": "Y", "Jones": "N"}, url=VOTE_PDF_URL
        )

    def test_download_failure(self, fake_pdf) -> None:
        assert fetch_vote_event(VOTE_PDF_URL, "House", FakeSession()) is None

    def test_parse_failure(self, monkeypatch) -> None:
        def broken(content: bytes) -> list[str]:
            raise ValueError("not a pdf")

        monkeypatch.setattr(votes, "pdf_rows", broken)
        session = FakeSession({VOTE_PDF_URL: b"garbage"})
        assert fetch_vote_event(VOTE_PDF_URL, "House", session) is None

    def test_fetch_votes(self, fake_pdf) -> None:
        session = FakeSession({VOTE_HISTORY_URL: VOTE_HISTORY_PAGE, VOTE_PDF_URL: b"%PDF-1.4"})
        soup = BeautifulSoup(detail_page(), "html.parser")
        events = fetch_votes(soup, DETAIL_URL, session)
        assert len(events) == 1
        assert events[0].chamber == "house"
        assert events[0].votes == {"Smith": "Y", "Jones": "N"}

    def test_history_unavailable(self, fake_pdf) -> None:
        soup = BeautifulSoup(detail_page(), "html.parser")
        assert fetch_votes(soup, DETAIL_URL, FakeSession()) == []

    def test_failed_pdf_dropped(self, fake_pdf) -> None:
        session = FakeSession({VOTE_HISTORY_URL: VOTE_HISTORY_PAGE})
        soup = BeautifulSoup(detail_page(), "html.parser")
        assert fetch_votes(soup, DETAIL_URL, session) == []


class StubPage:
    """Stands in for a pdfplumber page; only ``extract_words`` is used."""

    def __init__(self, words: list[dict]) -> None:
        self._words = words

    def extract_words(self) -> list[dict]:
        return list(self._words)


def _word(text: str, x0: float, top: float) -> dict:
    return {"text": text, "x0": x0, "top": top}


# Two columns of "<code> <name>" cells; tops drift a little within a row and
# words arrive in column order rather than row order.
ROLL_CALL_WORDS = [
    _word("N", 300.0, 101.5),
    _word("Jones", 320.0, 101.2),
    _word("P", 300.0, 121.0),
    _word("Bourne", 320.0, 120.8),
    _word("Y", 50.0, 100.0),
    _word("Smith", 70.0, 100.4),
    _word("E", 50.0, 120.0),
    _word("Bennett", 70.0, 120.3),
]


class TestLayoutRows:
    def test_words_grouped_into_rows_by_position(self) -> None:
        rows = votes._page_rows(StubPage(ROLL_CALL_WORDS))
        assert rows == ["Y Smith N Jones", "E Bennett P Bourne"]

    def test_rows_parse_into_votes(self) -> None:
        rows = votes._page_rows(StubPage(ROLL_CALL_WORDS))
        assert parse_vote_rows(rows) == {"Smith": "Y", "Jones": "N", "Bennett": "E", "Bourne": "P"}

    def test_rows_beyond_tolerance_split(self) -> None:
        words = [_word("Y", 50.0, 100.0), _word("Smith", 70.0, 104.0)]
        assert votes._page_rows(StubPage(words)) == ["Y", "Smith"]

    def test_empty_page(self) -> None:
        assert votes._page_rows(StubPage([])) == []

    def test_pdf_rows_reads_every_page(self, monkeypatch) -> None:
        opened: list[bytes] = []

        class StubPdf:
            pages = [
                StubPage(ROLL_CALL_WORDS[:2] + ROLL_CALL_WORDS[4:6]),
                StubPage([_word("NV", 50.0, 90.0), _word("Batinick", 70.0, 90.0)]),
            ]

            def __enter__(self):
                return self

            def __exit__(self, *exc):
                return None

        def fake_open(stream):
            opened.append(stream.read())
            return StubPdf()

        monkeypatch.setattr(votes.pdfplumber, "open", fake_open)
        assert votes.pdf_rows(b"%PDF-1.4") == ["Y Smith N Jones", "NV Batinick"]
        assert opened == [b"%PDF-1.4"]
