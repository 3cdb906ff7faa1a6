"""Committee -> category lookup.

The lookup file is keyed the human-readable way round::

    {"Education": [2301, 2410], "Transportation": [2290]}

and is inverted once at startup so action rows can resolve a committee ID
straight to its category label.
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Mapping
from pathlib import Path
from types import MappingProxyType

from .models import DNE, UNCLASSIFIED

LOGGER = logging.getLogger(__name__)

_RE_COMMITTEE_ID = re.compile(r"committeeID=(\d+)")


class CategoryError(ValueError):
    """The category file exists but can't be read as ``{category: [ids]}``."""


class CategoryLookup:
    """Read-only committee_id -> category map."""

    def __init__(self, by_committee: Mapping[str, str] | None = None) -> None:
        self._by_committee = MappingProxyType(dict(by_committee or {}))

    @classmethod
    def from_categories(cls, categories: Mapping[str, list]) -> CategoryLookup:
        """Invert ``{category: [committee ids]}`` into ``{committee id: category}``."""
        by_committee: dict[str, str] = {}
        for category, committee_ids in categories.items():
            for committee_id in committee_ids:
                by_committee[str(int(committee_id))] = category
        return cls(by_committee)

    @classmethod
    def from_file(cls, path: Path) -> CategoryLookup:
        """Load the lookup file; a missing file yields an empty lookup.

        Raises :class:`CategoryError` when the file exists but is unreadable or
        not shaped ``{category: [committee ids]}``.
        """
        if not path.exists():
            LOGGER.warning("Category file %s not found; all committees unclassified.", path)
            return cls()
        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
            lookup = cls.from_categories(data)
        except (OSError, ValueError, TypeError, AttributeError) as exc:
            raise CategoryError(f"couldn't load category file {path}: {exc}") from exc
        LOGGER.info("Loaded %d committee categories from %s.", len(lookup), path)
        return lookup

    def __len__(self) -> int:
        return len(self._by_committee)

    def get(self, committee_id: str) -> str | None:
        return self._by_committee.get(committee_id)

    def resolve(self, href: str | None) -> tuple[str, str]:
        """Return ``(category, committee_id)`` for a committee link.

        No ``committeeID`` in the link -> ``("DNE", "")``; an ID that is not
        in the lookup -> ``("unclassified", id)``.
        """
        if not href:
            return (DNE, "")
        m = _RE_COMMITTEE_ID.search(href)
        if not m:
            return (DNE, "")
        committee_id = m.group(1)
        return (self._by_committee.get(committee_id, UNCLASSIFIED), committee_id)
