"""Tag raw ILGA action descriptions with a semantic stage.

Classification is an ordered table of ``(predicate, tag)`` rules evaluated
top to bottom; the first matching rule wins and a description that matches
nothing is ``Tag.OTHER``.  The order is the disambiguation priority: e.g.
"Assigned to" beats every later keyword in the same description.

Two rules map to ``Tag.OTHER``.  An "Arrived in" row naming
neither chamber and a "Third Reading" row that neither passed nor failed stop
the cascade there, so later keywords in those rows are never consulted.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from .models import Tag


@dataclass(frozen=True)
class Rule:
    name: str
    predicate: Callable[[str], bool]
    tag: Tag

    def matches(self, text: str) -> bool:
        return self.predicate(text)


def _has(*needles: str) -> Callable[[str], bool]:
    """Predicate: every needle occurs in the text (case-sensitive)."""

    def predicate(text: str) -> bool:
        return all(n in text for n in needles)

    return predicate


RULES: tuple[Rule, ...] = (
    Rule("assigned", _has("Assigned to"), Tag.ASSIGNED),
    Rule("effective_date", _has("Effective Date"), Tag.EFFECTIVE_DATE),
    Rule("arrived_house", _has("Arrived in", "House"), Tag.ARRIVAL_IN_HOUSE),
    Rule("arrived_senate", _has("Arrived in", "Senate"), Tag.ARRIVAL_IN_SENATE),
    Rule("arrived_unknown", _has("Arrived in"), Tag.OTHER),
    Rule("co_sponsor", _has("Added as", "Sponsor"), Tag.CO_SPONSOR),
    Rule(
        "third_reading_calendar",
        _has("Placed on Calendar Order of 3rd Reading"),
        Tag.THIRD_READING_CALENDAR,
    ),
    Rule("do_pass", _has("Do Pass"), Tag.COMMITTEE_DEBATE),
    Rule("alternate_chief", _has("Alternate Chief"), Tag.SPONSOR_REMOVED),
    Rule("fiscal_note", _has("Fiscal Note Requested"), Tag.FISCAL_REQUEST),
    Rule("passed_both", _has("Passed Both Houses"), Tag.DUAL_PASSED),
    Rule("sent_to_governor", _has("Sent", "Governor"), Tag.SENT_TO_GOVERNOR),
    Rule("governor_approved", _has("Governor Approved"), Tag.GOVERNOR_APPROVED),
    Rule("public_act", _has("Public Act"), Tag.PUBLIC_ACT),
    Rule("third_reading_passed", _has("Third Reading", "Passed"), Tag.BILL_VOTE_PASS),
    Rule("third_reading_failed", _has("Third Reading", "Failed"), Tag.BILL_VOTE_FAIL),
    Rule("third_reading_other", _has("Third Reading"), Tag.OTHER),
    Rule("amendment_adopted", _has("Amendment", "Adopted"), Tag.AMENDED),
    Rule("first_reading", _has("First Reading"), Tag.FIRST_READING),
    Rule("second_reading", _has("Second Reading"), Tag.SECOND_READING),
)


def matching_rule(text: str, rules: tuple[Rule, ...] = RULES) -> Rule | None:
    """Return the first rule that matches *text*, or None."""
    for rule in rules:
        if rule.matches(text):
            return rule
    return None


def classify_action(text: str) -> Tag:
    """Map a raw action description to exactly one :class:`Tag`."""
    rule = matching_rule(text)
    return rule.tag if rule else Tag.OTHER
