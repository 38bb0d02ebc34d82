"""Rendering utilities for machine-readable and human-readable outputs."""

import csv
import io
import json
from datetime import date
from pathlib import Path
from typing import Iterable

from roster_recon.models import RosterDiff, RosterEntry

ROSTER_CSV_HEADERS = ["Student Name", "Course", "Section", "Period", "Day", "Teacher"]


def _roster_rows(entries: Iterable[RosterEntry]) -> Iterable[list[str]]:
    for entry in entries:
        yield [
            entry.student_name,
            entry.course_label,
            entry.section,
            entry.period,
            entry.day,
            entry.teacher_name,
        ]


def roster_csv(entries: Iterable[RosterEntry]) -> str:
    """Roster as CSV text with standard double-quote escaping."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(ROSTER_CSV_HEADERS)
    writer.writerows(_roster_rows(entries))
    return buffer.getvalue()


def write_roster_csv(path: Path, entries: Iterable[RosterEntry]) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", newline="", encoding="utf-8") as handle:
        writer = csv.writer(handle)
        writer.writerow(ROSTER_CSV_HEADERS)
        writer.writerows(_roster_rows(entries))
    return path


def default_export_name(today: date | None = None) -> str:
    today = today or date.today()
    return f"sis-roster-{today.isoformat()}.csv"


def write_diff_json(path: Path, diff: RosterDiff) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as handle:
        json.dump(diff.model_dump(mode="json"), handle, indent=2, ensure_ascii=False)
    return path


def _escape(text: str) -> str:
    return text.replace("|", "\\|")


def render_summary(diff: RosterDiff) -> str:
    """Markdown report: totals, then one section per period."""
    summary = diff.summary
    lines = ["# Roster Reconciliation Report", ""]
    lines.append("## Overview")
    lines.append("")
    lines.append(f"- SIS students (per period): **{summary.total_source}**")
    lines.append(f"- Platform students (matched courses): **{summary.total_platform}**")
    lines.append(f"- Matched: **{summary.total_matched}**")
    lines.append(f"- Missing from platform: **{summary.total_missing}**")
    lines.append(f"- Extra on platform: **{summary.total_extra}**")
    lines.append("")

    if diff.unmatched_periods:
        lines.append("## Periods without a platform course")
        lines.append("")
        for period in diff.unmatched_periods:
            lines.append(f"- Period {period}")
        lines.append("")

    if diff.ambiguous_periods:
        lines.append("## Periods claimed by several courses")
        lines.append("")
        for period, course_ids in diff.ambiguous_periods.items():
            lines.append(f"- Period {period}: {', '.join(course_ids)} (first one used)")
        lines.append("")

    if not diff.comparisons:
        lines.append("No SIS roster entries to compare.")
        return "\n".join(lines)

    lines.append("## Periods")
    lines.append("")
    lines.append("| Period | SIS course | Platform course | SIS | Platform | Matched | Missing | Extra |")
    lines.append("| --- | --- | --- | --- | --- | --- | --- | --- |")
    for c in diff.comparisons:
        lines.append(
            "| {period} | {course} | {platform} | {sis} | {plat} | {matched} | {missing} | {extra} |".format(
                period=c.period,
                course=_escape(c.course_name),
                platform=_escape(c.platform_course_name or "(none)"),
                sis=len(c.source_names),
                plat=len(c.platform_names),
                matched=len(c.matched),
                missing=len(c.missing_from_platform),
                extra=len(c.extra_in_platform),
            )
        )
    lines.append("")

    for c in diff.comparisons:
        if c.is_clean:
            continue
        lines.append(f"### Period {c.period}: {c.course_name or 'Unknown course'}")
        lines.append("")
        if c.missing_from_platform:
            lines.append("Missing from platform:")
            lines.extend(f"- {name}" for name in c.missing_from_platform)
            lines.append("")
        if c.extra_in_platform:
            lines.append("Extra on platform:")
            lines.extend(f"- {name}" for name in c.extra_in_platform)
            lines.append("")

    if not diff.has_discrepancies:
        lines.append("All SIS students are enrolled on the platform. No extras found.")

    return "\n".join(lines)


def write_markdown(path: Path, content: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as handle:
        handle.write(content)
    return path
