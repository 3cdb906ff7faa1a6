"""Legislative life-cycle tracking and notification decisions.

A bill's stage is the furthest state of a small deterministic automaton fed
with its tagged actions, oldest first.  The template walks both chambers and
then the governor::

    0 -FIRST_READING-> 1 -SECOND_READING-> 2 -BILL_VOTE_PASS-> 3
      -FIRST_READING-> 4 -SECOND_READING-> 5 -BILL_VOTE_PASS-> 6
      -SENT_TO_GOVERNOR-> 7 -PUBLIC_ACT-> 8

Any action whose tag is not the one the current state requires leaves the
state unchanged, so the final state is the longest template prefix that
occurs as a subsequence of the action list (earliest match per step).
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from .models import BillAction, BillMetadata, Notification, Tag

LOGGER = logging.getLogger(__name__)

TEMPLATE: tuple[Tag, ...] = (
    Tag.FIRST_READING,
    Tag.SECOND_READING,
    Tag.BILL_VOTE_PASS,
    Tag.FIRST_READING,
    Tag.SECOND_READING,
    Tag.BILL_VOTE_PASS,
    Tag.SENT_TO_GOVERNOR,
    Tag.PUBLIC_ACT,
)

FINAL_STATE = len(TEMPLATE)

# state -> (required tag, next state)
TRANSITIONS: dict[int, tuple[Tag, int]] = {
    state: (tag, state + 1) for state, tag in enumerate(TEMPLATE)
}

# Bills become visible once the originating chamber has passed them.
VIEWABLE_STATE = 3

_PHRASES = {
    Tag.FIRST_READING: "Arrived in {chamber}",
    Tag.SECOND_READING: "Debating in {chamber}",
    Tag.BILL_VOTE_PASS: "Passed in {chamber}",
    Tag.SENT_TO_GOVERNOR: "Passed both chambers and waiting for governor",
    Tag.PUBLIC_ACT: "Bill passed into law!",
}


@dataclass(frozen=True)
class Stage:
    state: int = 0
    action: BillAction | None = None  # action that caused the last transition

    @property
    def matched(self) -> bool:
        return self.state > 0

    @property
    def viewable(self) -> bool:
        return self.state >= VIEWABLE_STATE

    def same_position(self, other: Stage) -> bool:
        """True when both stages ended on an action with the same tag and chamber."""
        if self.action is None or other.action is None:
            return self.action is other.action
        return (self.action.tag, self.action.chamber) == (
            other.action.tag,
            other.action.chamber,
        )


def advance(stage: Stage, action: BillAction) -> Stage:
    """Single automaton step."""
    transition = TRANSITIONS.get(stage.state)
    if transition is None:
        return stage
    required, next_state = transition
    if action.tag is required:
        return Stage(next_state, action)
    return stage


def current_stage(actions: Iterable[BillAction]) -> Stage:
    stage = Stage()
    for action in actions:
        stage = advance(stage, action)
        if stage.state == FINAL_STATE:
            break
    return stage


def notification_text(metadata: BillMetadata, action: BillAction) -> str:
    phrase = _PHRASES.get(action.tag, "")
    return f"Bill {metadata.label} update: " + phrase.format(chamber=action.chamber)


def check_notification(
    old: Sequence[BillAction],
    new: Sequence[BillAction],
    metadata: BillMetadata,
) -> tuple[Notification | None, bool]:
    """Compare old vs. new stage.

    Returns ``(notification, viewable)`` where *notification* is None when
    the stage did not move and *viewable* reflects the new action list.
    """
    old_stage = current_stage(old)
    new_stage = current_stage(new)

    if not new_stage.matched:
        return None, False
    if old_stage.matched and old_stage.same_position(new_stage):
        return None, new_stage.viewable

    text = notification_text(metadata, new_stage.action)
    LOGGER.debug("%s moved from state %d to %d", metadata.label, old_stage.state, new_stage.state)
    return Notification(bill_info=metadata, text=text), new_stage.viewable


def check_actions_for_updates(
    old: Sequence[BillAction],
    new: Sequence[BillAction],
    *,
    refetch_votes: bool = False,
) -> tuple[bool, bool]:
    """Decide which secondary resources the appended actions invalidate.

    Only ``new[len(old):]`` is scanned.  Returns ``(update_text,
    update_votes)``.  A new third-reading vote only requests a vote refetch
    when *refetch_votes* is set; by default vote records are fetched only
    for bills seen for the first time.
    """
    update_text = False
    update_votes = False
    for action in new[len(old):]:
        if action.tag is Tag.AMENDED:
            update_text = True
        if action.tag in (Tag.BILL_VOTE_PASS, Tag.BILL_VOTE_FAIL) and refetch_votes:
            update_votes = True
    return update_text, update_votes
