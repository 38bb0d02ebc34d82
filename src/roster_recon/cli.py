"""Command-line entry point for roster reconciliation.

Compare:  roster-recon compare --roster sis.csv --snapshot classroom.json
Live:     roster-recon compare --roster sis.csv --fetch
Snapshot: roster-recon fetch --output data/classroom.json
Export:   roster-recon export --roster raw.csv --output sis-roster.csv

Exit codes:
  0 = success, no discrepancies
  1 = error (message on stderr)
  2 = reconciliation finished with missing or extra students
"""

import argparse
import sys
from pathlib import Path

from dotenv import load_dotenv

from roster_recon.classroom import ClassroomClient, PlatformSnapshot
from roster_recon.config import ReconConfig, get_config
from roster_recon.engine import overview
from roster_recon.errors import RosterReconError
from roster_recon.history import StateStore
from roster_recon.ingest import dedupe_entries, load_roster_csv
from roster_recon.logging import get_logger, setup_logging
from roster_recon.models import ImportResult
from roster_recon.pipeline import REPORT_FILE, load_platform, run_reconciliation
from roster_recon.report import default_export_name, write_roster_csv

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_DISCREPANCIES = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="roster-recon",
        description="Reconcile an SIS roster export against Google Classroom.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    compare = subparsers.add_parser("compare", help="Reconcile SIS roster with the platform")
    compare.add_argument("--roster", type=Path, required=True, help="SIS roster CSV file.")
    source = compare.add_mutually_exclusive_group(required=True)
    source.add_argument("--snapshot", type=Path, help="Platform snapshot JSON (from `fetch`).")
    source.add_argument("--fetch", action="store_true", help="Fetch courses live from Classroom.")
    compare.add_argument("--out-dir", type=Path, default=None, help="Report directory.")
    compare.add_argument(
        "--allow-swapped",
        action="store_true",
        default=None,
        help="Also match names with first/last swapped (more matches, more false positives).",
    )
    compare.add_argument(
        "--overview",
        action="store_true",
        help="Also list students missing or extra anywhere, ignoring periods.",
    )
    compare.add_argument("--no-state", action="store_true", help="Do not update saved state.")

    fetch = subparsers.add_parser("fetch", help="Save a snapshot of Classroom courses and rosters")
    fetch.add_argument("--output", type=Path, required=True, help="Snapshot JSON path.")
    fetch.add_argument(
        "--state",
        action="append",
        dest="states",
        default=None,
        help="Course state to include (repeatable, default ACTIVE).",
    )

    export = subparsers.add_parser("export", help="Re-export a roster as the standard CSV")
    export.add_argument("--roster", type=Path, required=True, help="Roster CSV to read.")
    export.add_argument("--output", type=Path, default=None, help="CSV output path.")

    subparsers.add_parser("clear-state", help="Delete saved roster, history and comparison")

    return parser


def _client(config: ReconConfig) -> ClassroomClient:
    return ClassroomClient(
        config.classroom_token,
        base_url=config.classroom_base_url,
        page_size=config.page_size,
        timeout=config.request_timeout,
    )


def _report_issues(imported: ImportResult) -> None:
    for issue in imported.issues:
        print(f"  row {issue.row}: {issue.message}", file=sys.stderr)


def _progress(done: int, total: int) -> None:
    print(f"\r  fetched {done}/{total} course rosters", end="", file=sys.stderr)
    if done == total:
        print(file=sys.stderr)


def _cmd_compare(args: argparse.Namespace, config: ReconConfig) -> int:
    allow_swapped = config.allow_swapped_names if args.allow_swapped is None else args.allow_swapped
    out_dir = args.out_dir or Path(config.out_dir)
    store = None if args.no_state else StateStore(config.state_dir, config.max_history)
    client = _client(config) if args.fetch else None
    platform = load_platform(snapshot_path=args.snapshot, client=client)

    imported, diff = run_reconciliation(
        roster_path=args.roster,
        out_dir=out_dir,
        platform=platform,
        allow_swapped=allow_swapped,
        store=store,
    )
    if imported.issues:
        print(f"{len(imported.issues)} roster row problem(s):", file=sys.stderr)
        _report_issues(imported)

    s = diff.summary
    print(
        f"Matched {s.total_matched} of {s.total_source} SIS students; "
        f"{s.total_missing} missing from platform, {s.total_extra} extra on platform."
    )
    for period in diff.unmatched_periods:
        print(f"  period {period}: no platform course found")
    print(f"Report: {out_dir / REPORT_FILE}")

    if args.overview:
        result = overview(imported.entries, platform.all_students(), allow_swapped=allow_swapped)
        for issue in result.issues:
            print(f"  [{issue.severity}] {issue.message}")

    return EXIT_DISCREPANCIES if diff.has_discrepancies else EXIT_OK


def _cmd_fetch(args: argparse.Namespace, config: ReconConfig) -> int:
    snapshot: PlatformSnapshot = _client(config).snapshot(
        states=args.states or ("ACTIVE",), progress=_progress
    )
    path = snapshot.save(args.output)
    print(f"Saved {len(snapshot.courses)} courses to {path}")
    return EXIT_OK


def _cmd_export(args: argparse.Namespace, config: ReconConfig) -> int:
    imported = load_roster_csv(args.roster)
    if imported.issues:
        _report_issues(imported)
    entries = dedupe_entries(imported.entries)
    output = args.output or Path(config.out_dir) / default_export_name()
    write_roster_csv(output, entries)
    print(f"Wrote {len(entries)} roster rows to {output}")
    return EXIT_OK


def _cmd_clear_state(args: argparse.Namespace, config: ReconConfig) -> int:
    StateStore(config.state_dir, config.max_history).clear()
    print("All saved state cleared")
    return EXIT_OK


COMMANDS = {
    "compare": _cmd_compare,
    "fetch": _cmd_fetch,
    "export": _cmd_export,
    "clear-state": _cmd_clear_state,
}


def main(argv: list[str] | None = None) -> int:
    load_dotenv()
    parser = build_parser()
    args = parser.parse_args(argv)

    config = get_config()
    setup_logging(json_output=config.log_json, log_level=config.log_level)

    try:
        return COMMANDS[args.command](args, config)
    except (RosterReconError, FileNotFoundError, ValueError) as e:
        logger.error("command_failed", command=args.command, error=str(e), type=type(e).__name__)
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_ERROR


if __name__ == "__main__":  # pragma: no cover - exercised via console script
    raise SystemExit(main())
