"""High-level orchestration: load both rosters, reconcile, write reports."""

from pathlib import Path

from roster_recon.classroom import ClassroomClient, PlatformSnapshot
from roster_recon.engine import reconcile
from roster_recon.history import StateStore
from roster_recon.ingest import load_roster_csv
from roster_recon.logging import get_logger
from roster_recon.models import ImportResult, RosterDiff
from roster_recon.report import render_summary, write_diff_json, write_markdown

logger = get_logger(__name__)

DIFF_FILE = "roster_diff.json"
REPORT_FILE = "roster_report.md"


def load_platform(
    *,
    snapshot_path: Path | None = None,
    client: ClassroomClient | None = None,
) -> PlatformSnapshot:
    """Platform courses and rosters from a saved snapshot or a live client."""
    if snapshot_path is not None:
        return PlatformSnapshot.load(snapshot_path)
    if client is not None:
        return client.snapshot()
    raise ValueError("Either snapshot_path or client is required")


def run_reconciliation(
    *,
    roster_path: Path,
    out_dir: Path,
    platform: PlatformSnapshot,
    allow_swapped: bool = False,
    store: StateStore | None = None,
) -> tuple[ImportResult, RosterDiff]:
    """Run one full reconciliation and write roster_diff.json + roster_report.md.

    Returns the import result (with any rejected rows) and the diff.
    """
    imported = load_roster_csv(roster_path)

    diff = reconcile(
        imported.entries,
        platform.courses,
        platform.students,
        allow_swapped=allow_swapped,
    )
    logger.info(
        "reconciliation_complete",
        periods=len(diff.comparisons),
        unmatched=len(diff.unmatched_periods),
        **diff.summary.model_dump(),
    )

    write_diff_json(out_dir / DIFF_FILE, diff)
    write_markdown(out_dir / REPORT_FILE, render_summary(diff))

    if store is not None:
        store.save_roster(imported.entries, roster_path.name)
        store.append_history(imported.entries, roster_path.name)
        store.save_comparison(diff)

    return imported, diff
