from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

DNE = "DNE"  # bill never assigned to a committee
UNCLASSIFIED = "unclassified"  # committee missing from the category lookup


class Chamber(str, Enum):
    HOUSE = "House"
    SENATE = "Senate"

    @classmethod
    def from_doc_type(cls, doc_type: str) -> Chamber:
        """``HB``/``HR``/``HJR`` -> House, ``SB``/``SR``/``SJR`` -> Senate."""
        prefix = doc_type[:1].upper()
        if prefix == "H":
            return cls.HOUSE
        if prefix == "S":
            return cls.SENATE
        raise ValueError(f"unknown doc type {doc_type!r}")


class Tag(str, Enum):
    """Semantic stage of a single action row."""

    FIRST_READING = "first_reading"
    SECOND_READING = "second_reading"
    THIRD_READING_CALENDAR = "third_reading_calendar"
    BILL_VOTE_PASS = "bill_vote_pass"
    BILL_VOTE_FAIL = "bill_vote_fail"
    ASSIGNED = "assigned"
    COMMITTEE_DEBATE = "committee_debate"
    AMENDED = "amended"
    CO_SPONSOR = "co_sponsor"
    SPONSOR_REMOVED = "sponsor_removed"
    FISCAL_REQUEST = "fiscal_request"
    ARRIVAL_IN_HOUSE = "arrival_in_house"
    ARRIVAL_IN_SENATE = "arrival_in_senate"
    DUAL_PASSED = "dual_passed"
    SENT_TO_GOVERNOR = "sent_to_governor"
    GOVERNOR_APPROVED = "governor_approved"
    PUBLIC_ACT = "public_act"
    EFFECTIVE_DATE = "effective_date"
    OTHER = "other"


@dataclass(frozen=True)
class BillMetadata:
    assembly: int  # e.g. 101
    chamber: Chamber
    number: int  # e.g. 1234
    url: str  # detail page the metadata was derived from
    doc_type: str = ""  # e.g. "HB", "SB"

    @property
    def key(self) -> tuple[int, Chamber, int]:
        """Natural key -- unique per bill."""
        return (self.assembly, self.chamber, self.number)

    @property
    def storage_key(self) -> str:
        return f"{self.assembly}:{self.chamber.value}:{self.number}"

    @property
    def label(self) -> str:
        """Human bill number, e.g. ``HB1234``."""
        prefix = self.doc_type or ("HB" if self.chamber is Chamber.HOUSE else "SB")
        return f"{prefix}{self.number}"


@dataclass(frozen=True)
class BillAction:
    date: int | None  # epoch ms UTC, None when the row has no parseable date
    chamber: str  # as published, e.g. "House"
    description: str
    tag: Tag = Tag.OTHER


@dataclass
class VoteEvent:
    chamber: str  # lowercase, e.g. "senate"
    votes: dict[str, str] = field(default_factory=dict)  # name -> Y/N/E/NV/P
    url: str = ""


@dataclass
class FullText:
    url: str = ""
    text: str = ""


@dataclass
class Bill:
    metadata: BillMetadata | None = None
    title: str = ""
    short_summary: str = ""
    full_summary: str = ""
    sponsor_ids: list[int | None] = field(default_factory=list)
    house_primary_sponsor: int | None = None
    senate_primary_sponsor: int | None = None
    chief_sponsor: int | None = None
    actions: list[BillAction] = field(default_factory=list)
    actions_fingerprint: str = ""
    category: str = DNE
    committee_id: str = ""
    created: int | None = None  # date of the first action
    viewable: bool = False
    vote_events: list[VoteEvent] = field(default_factory=list)
    full_text: FullText = field(default_factory=FullText)

    def replace_actions(self, actions: list[BillAction], fingerprint: str) -> None:
        """Swap in a freshly derived action list together with its fingerprint."""
        self.actions = list(actions)
        self.actions_fingerprint = fingerprint
        self.created = self.actions[0].date if self.actions else None


@dataclass(frozen=True)
class Notification:
    bill_info: BillMetadata
    text: str  # e.g. "Bill HB12 update: Passed in House"


@dataclass
class BillResult:
    """What a worker hands back to the collector for one detail page."""

    bill: Bill
    notification: Notification | None = None
