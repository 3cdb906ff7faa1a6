"""Centralized configuration for the bill synchronizer.

All settings live here so they can be overridden by environment variables or a
``.env`` file without touching source code.

**Profile system:** Set ``ILGA_SYNC_PROFILE=dev`` (default) or
``ILGA_SYNC_PROFILE=prod`` to get sensible defaults for each environment.  Any
individual ``ILGA_SYNC_*`` var still overrides the profile value.

Components never read these constants directly; the CLI builds one
:class:`SyncConfig` at startup and passes it down::

    from ilga_sync.config import SyncConfig

    config = SyncConfig.from_env()
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, replace
from pathlib import Path

from dotenv import load_dotenv

from .categories import CategoryLookup

# Load .env from current working directory
load_dotenv()

LOGGER = logging.getLogger(__name__)

# ── Profile: one knob for the whole environment ──────────────────────────────

PROFILE: str = os.getenv("ILGA_SYNC_PROFILE", "dev").lower().strip()

_PROFILE_DEFAULTS: dict[str, dict[str, str]] = {
    "dev": {
        "ILGA_SYNC_NOTIFICATION_URL": "",
    },
    "prod": {
        "ILGA_SYNC_MAX_WORKERS": "10",
    },
}

if PROFILE not in _PROFILE_DEFAULTS:
    LOGGER.warning("Unknown ILGA_SYNC_PROFILE=%r, falling back to 'dev'.", PROFILE)
    PROFILE = "dev"

_defaults = _PROFILE_DEFAULTS[PROFILE]


def _env(key: str, fallback: str = "") -> str:
    """Read an env var, falling back to profile default then *fallback*."""
    return os.getenv(key, _defaults.get(key, fallback))


# ── Site ─────────────────────────────────────────────────────────────────────
ROOT_URL: str = _env("ILGA_SYNC_ROOT_URL", "http://www.ilga.gov").rstrip("/")

# Two %-slots: general assembly, session id.
LISTING_URL_TEMPLATE: str = _env(
    "ILGA_SYNC_LISTING_URL",
    ROOT_URL + "/legislation/grplist.asp?num1=1&num2=9999&DocTypeID=HB&GA=%s&SessionID=%s",
)

# 101st General Assembly, regular session.
GA: str = _env("ILGA_SYNC_GA", "101")
SESSION_ID: str = _env("ILGA_SYNC_SESSION_ID", "108")

# ── Crawl ────────────────────────────────────────────────────────────────────
MAX_WORKERS: int = int(_env("ILGA_SYNC_MAX_WORKERS", "10"))
TIMEOUT: int = int(_env("ILGA_SYNC_TIMEOUT", "20"))
# Vote PDFs are refetched on a new 3rd-reading vote only when enabled.
REFETCH_VOTES: bool = _env("ILGA_SYNC_REFETCH_VOTES", "0") == "1"

# ── Collaborators ────────────────────────────────────────────────────────────
CATEGORIES_FILE: Path = Path(_env("ILGA_SYNC_CATEGORIES_FILE", "categories.json"))
STORE_PATH: Path = Path(_env("ILGA_SYNC_STORE_PATH", "cache/bills.json"))
NOTIFICATION_URL: str = _env("ILGA_SYNC_NOTIFICATION_URL").strip()

if PROFILE == "prod" and not NOTIFICATION_URL:
    LOGGER.warning("ILGA_SYNC_PROFILE=prod but ILGA_SYNC_NOTIFICATION_URL is empty.")


@dataclass(frozen=True)
class SyncConfig:
    """Everything a sync run needs, built once and passed by reference."""

    root_url: str = ROOT_URL
    listing_url_template: str = LISTING_URL_TEMPLATE
    max_workers: int = MAX_WORKERS
    timeout: int = TIMEOUT
    refetch_votes: bool = REFETCH_VOTES
    store_path: Path = STORE_PATH
    notification_url: str = NOTIFICATION_URL
    categories: CategoryLookup = field(default_factory=CategoryLookup)

    @classmethod
    def from_env(cls, categories_file: Path | None = None, **overrides: object) -> SyncConfig:
        """Build the run configuration, loading the category lookup once."""
        categories = CategoryLookup.from_file(categories_file or CATEGORIES_FILE)
        return replace(cls(categories=categories), **overrides)
