"""Bill storage collaborator.

``JsonBillStore`` keeps every bill in one JSON document keyed by the bill's
natural key (``"<assembly>:<chamber>:<number>"``).  The document is read once
when the store is opened and rewritten atomically on :meth:`flush`.
"""

from __future__ import annotations

import copy
import json
import logging
from dataclasses import asdict
from pathlib import Path
from typing import Protocol

from .models import (
    DNE,
    Bill,
    BillAction,
    BillMetadata,
    Chamber,
    FullText,
    Tag,
    VoteEvent,
)

LOGGER = logging.getLogger(__name__)


class StoreError(RuntimeError):
    """The store could not be opened or written."""


class BillStore(Protocol):
    def get(self, metadata: BillMetadata) -> Bill | None: ...

    def upsert(self, bill: Bill) -> None: ...

    def flush(self) -> None: ...


# ── Serialization ────────────────────────────────────────────────────────────


def bill_to_dict(bill: Bill) -> dict:
    """Serialize a Bill to a JSON-safe dict."""
    d = asdict(bill)
    if bill.metadata is not None:
        d["metadata"]["chamber"] = bill.metadata.chamber.value
    for action in d["actions"]:
        action["tag"] = Tag(action["tag"]).value
    return d


def _metadata_from_dict(d: dict | None) -> BillMetadata | None:
    if not d:
        return None
    return BillMetadata(
        assembly=int(d["assembly"]),
        chamber=Chamber(d["chamber"]),
        number=int(d["number"]),
        url=d.get("url", ""),
        doc_type=d.get("doc_type", ""),
    )


def _tag_from_value(value: str) -> Tag:
    try:
        return Tag(value)
    except ValueError:
        return Tag.OTHER


def bill_from_dict(d: dict) -> Bill:
    """Deserialize a Bill from a stored dict."""
    actions = [
        BillAction(
            date=a.get("date"),
            chamber=a.get("chamber", ""),
            description=a.get("description", ""),
            tag=_tag_from_value(a.get("tag", Tag.OTHER.value)),
        )
        for a in d.get("actions", [])
        if isinstance(a, dict)
    ]
    vote_events = [
        VoteEvent(chamber=v.get("chamber", ""), votes=v.get("votes", {}), url=v.get("url", ""))
        for v in d.get("vote_events", [])
        if isinstance(v, dict)
    ]
    ft = d.get("full_text") or {}

    return Bill(
        metadata=_metadata_from_dict(d.get("metadata")),
        title=d.get("title", ""),
        short_summary=d.get("short_summary", ""),
        full_summary=d.get("full_summary", ""),
        sponsor_ids=d.get("sponsor_ids", []),
        house_primary_sponsor=d.get("house_primary_sponsor"),
        senate_primary_sponsor=d.get("senate_primary_sponsor"),
        chief_sponsor=d.get("chief_sponsor"),
        actions=actions,
        actions_fingerprint=d.get("actions_fingerprint", ""),
        category=d.get("category", DNE),
        committee_id=d.get("committee_id", ""),
        created=d.get("created"),
        viewable=d.get("viewable", False),
        vote_events=vote_events,
        full_text=FullText(url=ft.get("url", ""), text=ft.get("text", "")),
    )


# ── JSON file store ──────────────────────────────────────────────────────────


class JsonBillStore:
    """Whole-file JSON store; reads are safe from many threads once opened."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self._bills: dict[str, Bill] = self._load()

    def _load(self) -> dict[str, Bill]:
        if not self.path.exists():
            LOGGER.info("No bill store at %s; starting empty.", self.path)
            return {}
        try:
            with open(self.path, encoding="utf-8") as f:
                raw = json.load(f)
            bills = {key: bill_from_dict(d) for key, d in raw.items()}
        except (OSError, ValueError, KeyError, TypeError) as exc:
            raise StoreError(f"couldn't open bill store {self.path}: {exc}") from exc
        LOGGER.info("Loaded %d bills from %s.", len(bills), self.path)
        return bills

    def __len__(self) -> int:
        return len(self._bills)

    def get(self, metadata: BillMetadata) -> Bill | None:
        """Copy of the stored bill for this natural key, or None when never seen."""
        bill = self._bills.get(metadata.storage_key)
        return copy.deepcopy(bill) if bill is not None else None

    def upsert(self, bill: Bill) -> None:
        if bill.metadata is None:
            raise StoreError("can't store a bill without metadata")
        self._bills[bill.metadata.storage_key] = bill

    def flush(self) -> None:
        """Write every bill to disk (atomic replace)."""
        data = {key: bill_to_dict(b) for key, b in self._bills.items()}
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            tmp_path.replace(self.path)
        except OSError as exc:
            raise StoreError(f"couldn't write bill store {self.path}: {exc}") from exc
        LOGGER.info("Saved %d bills to %s", len(data), self.path)
