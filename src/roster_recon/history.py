"""Explicit JSON state for the last imported roster and comparison.

Nothing in the reconciliation core reads this state. The pipeline calls the
store after a run so the next session can display what was last imported and
compared; a reconciliation always starts from freshly loaded inputs.

Files under state_dir:
    roster.json      last imported roster (entries, file name, import time)
    history.json     last N roster snapshots, newest first
    comparison.json  last RosterDiff with its timestamp
"""

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable

from pydantic import BaseModel, Field, ValidationError

from roster_recon.logging import get_logger
from roster_recon.models import RosterDiff, RosterEntry

logger = get_logger(__name__)


class SavedRoster(BaseModel):
    entries: list[RosterEntry] = Field(default_factory=list)
    file_name: str = ""
    imported_at: str = ""


class HistorySnapshot(BaseModel):
    """One past extraction: when, from where, and what was seen."""

    captured_at: str
    source: str  # file name or "extraction"
    student_count: int = 0
    entries: list[RosterEntry] = Field(default_factory=list)


class SavedComparison(BaseModel):
    compared_at: str
    diff: RosterDiff


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class StateStore:
    """Reads and writes reconciliation state files in one directory."""

    def __init__(self, state_dir: str | Path = "data/state", max_history: int = 10) -> None:
        self.state_dir = Path(state_dir)
        self.max_history = max_history
        self.roster_file = self.state_dir / "roster.json"
        self.history_file = self.state_dir / "history.json"
        self.comparison_file = self.state_dir / "comparison.json"

    def _read(self, path: Path) -> Any | None:
        if not path.exists():
            return None
        try:
            with open(path, encoding="utf-8") as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("state_file_unreadable", path=str(path), error=str(e))
            return None

    def _write(self, path: Path, payload: Any) -> Path:
        self.state_dir.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2, ensure_ascii=False)
        return path

    # Roster

    def save_roster(self, entries: Iterable[RosterEntry], file_name: str) -> SavedRoster:
        roster = SavedRoster(entries=list(entries), file_name=file_name, imported_at=_now())
        self._write(self.roster_file, roster.model_dump(mode="json"))
        logger.info("roster_saved", path=str(self.roster_file), entries=len(roster.entries))
        return roster

    def load_roster(self) -> SavedRoster | None:
        payload = self._read(self.roster_file)
        if payload is None:
            return None
        try:
            return SavedRoster.model_validate(payload)
        except ValidationError as e:
            logger.warning("state_file_invalid", path=str(self.roster_file), error=str(e))
            return None

    # History

    def load_history(self) -> list[HistorySnapshot]:
        payload = self._read(self.history_file)
        if not isinstance(payload, list):
            return []
        snapshots = []
        for item in payload:
            try:
                snapshots.append(HistorySnapshot.model_validate(item))
            except ValidationError:
                logger.warning("history_snapshot_invalid", path=str(self.history_file))
        return snapshots

    def append_history(self, entries: Iterable[RosterEntry], source: str) -> list[HistorySnapshot]:
        """Record a snapshot, newest first, trimmed to max_history."""
        entries = list(entries)
        snapshot = HistorySnapshot(
            captured_at=_now(),
            source=source,
            student_count=len({e.student_name for e in entries if e.student_name}),
            entries=entries,
        )
        history = [snapshot, *self.load_history()][: self.max_history]
        self._write(self.history_file, [s.model_dump(mode="json") for s in history])
        return history

    # Comparison

    def save_comparison(self, diff: RosterDiff) -> SavedComparison:
        saved = SavedComparison(compared_at=_now(), diff=diff)
        self._write(self.comparison_file, saved.model_dump(mode="json"))
        return saved

    def load_comparison(self) -> SavedComparison | None:
        payload = self._read(self.comparison_file)
        if payload is None:
            return None
        try:
            return SavedComparison.model_validate(payload)
        except ValidationError as e:
            logger.warning("state_file_invalid", path=str(self.comparison_file), error=str(e))
            return None

    def clear(self) -> None:
        """Delete every state file."""
        for path in (self.roster_file, self.history_file, self.comparison_file):
            if path.exists():
                path.unlink()
                logger.info("state_cleared", path=str(path))
