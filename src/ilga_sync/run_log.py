"""Append-only run log for sync runs.

One JSON object per line in ``.run_log.jsonl`` (``ILGA_SYNC_RUN_LOG``
overrides the path) recording the phases of a run, their durations, the
final status and a few counts.

Usage::

    with RunLogger("sync", meta={"ga": "101"}) as log:
        with log.phase("Crawl", detail="5000 links"):
            ...
        log.meta["bills"] = 5000
"""

from __future__ import annotations

import json
import logging
import os
import time
import uuid
from contextlib import contextmanager
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path

LOGGER = logging.getLogger(__name__)

DEFAULT_LOG_PATH = Path(".run_log.jsonl")


def get_log_path() -> Path:
    return Path(os.environ.get("ILGA_SYNC_RUN_LOG", str(DEFAULT_LOG_PATH)))


@dataclass
class RunRecord:
    """One line in the run log."""

    run_id: str
    task: str
    started_at: str  # ISO
    ended_at: str | None = None
    duration_s: float | None = None
    status: str = "running"  # ok | error | running
    phases: list[dict] = field(default_factory=list)  # [{name, duration_s, detail}]
    error: str | None = None
    meta: dict = field(default_factory=dict)  # e.g. bills, notifications

    def to_json_line(self) -> str:
        return json.dumps(asdict(self))


class RunLogger:
    """Times the phases of one run and appends the record on exit."""

    def __init__(self, task: str, *, log_path: Path | None = None, meta: dict | None = None):
        self.task = task
        self.log_path = log_path if log_path is not None else get_log_path()
        self.meta = dict(meta or {})
        self.run_id = uuid.uuid4().hex[:8]
        self.phases: list[dict] = []
        self._started_at = ""
        self._t0 = 0.0

    @contextmanager
    def phase(self, name: str, detail: str | None = None):
        t0 = time.perf_counter()
        try:
            yield
        finally:
            self.phases.append(
                {
                    "name": name,
                    "duration_s": round(time.perf_counter() - t0, 2),
                    "detail": detail,
                }
            )

    def __enter__(self) -> RunLogger:
        self._started_at = datetime.now(timezone.utc).isoformat()
        self._t0 = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        status, error = "ok", None
        if exc_type is not None:
            status = "error"
            error = f"{exc_type.__name__}: {exc_val}" if exc_val else exc_type.__name__
        record = RunRecord(
            run_id=self.run_id,
            task=self.task,
            started_at=self._started_at,
            ended_at=datetime.now(timezone.utc).isoformat(),
            duration_s=round(time.perf_counter() - self._t0, 2),
            status=status,
            phases=self.phases,
            error=error,
            meta=self.meta,
        )
        try:
            self.log_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.log_path, "a", encoding="utf-8") as f:
                f.write(record.to_json_line() + "\n")
        except OSError as e:
            LOGGER.warning("Run log append failed: %s", e)
        return None  # do not suppress
