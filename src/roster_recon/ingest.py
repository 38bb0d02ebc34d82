"""Read SIS roster exports into validated RosterEntry records.

This is the only place raw rows become RosterEntry values. Rows that lack a
student name or a period are rejected with a RowIssue (row index + message)
instead of being defaulted, so the caller can show them to the user.
"""

import csv
import re
from pathlib import Path
from typing import Iterable, Mapping

from roster_recon.errors import RosterFormatError
from roster_recon.logging import get_logger
from roster_recon.models import ImportResult, RosterEntry, RowIssue
from roster_recon.names import collapse_whitespace

log = get_logger(__name__)

ONEROSTER_INDICATORS = frozenset({"sourcedid", "status", "datelastmodified"})
FRONTLINE_INDICATORS = frozenset({"studentid", "firstname", "lastname", "email"})

# Normalized header variants -> RosterEntry field (plus first/last helpers).
# Covers the CSV this tool exports, SIS student/course exports and the raw
# attendance-grid column ids.
HEADER_ALIASES: dict[str, str] = {
    "student_name": "student_name",
    "studentname": "student_name",
    "student": "student_name",
    "student_full_name": "student_name",
    "studentfullname": "student_name",
    "full_name": "student_name",
    "name": "student_name",
    "firstname": "first_name",
    "first_name": "first_name",
    "givenname": "first_name",
    "given_name": "first_name",
    "lastname": "last_name",
    "last_name": "last_name",
    "familyname": "last_name",
    "family_name": "last_name",
    "course": "course_label",
    "course_name": "course_label",
    "coursename": "course_label",
    "course_description": "course_label",
    "loccourseshortdesc": "course_label",
    "course_id": "course_label",
    "courseid": "course_label",
    "title": "course_label",
    "class": "course_label",
    "period": "period",
    "periods": "period",
    "per": "period",
    "class_period": "period",
    "stucalperiodid": "period",
    "section": "section",
    "section_id": "section",
    "sectionid": "section",
    "day": "day",
    "day_code": "day",
    "rotation_day": "day",
    "rfdcaldaycodeid": "day",
    "teacher": "teacher_name",
    "teacher_name": "teacher_name",
    "teachername": "teacher_name",
    "instructor": "teacher_name",
}

_HEADER_SPACE_RE = re.compile(r"\s+")


def normalize_header(header: str | None) -> str:
    """Lowercase, trim and underscore a header: "Student Name" -> student_name."""
    if not header:
        return ""
    return _HEADER_SPACE_RE.sub("_", header.strip().lower())


def resolve_columns(headers: Iterable[str]) -> dict[str, str]:
    """Map each recognised normalized header to its target field.

    The first header claiming a field wins; later duplicates are ignored.
    """
    resolved: dict[str, str] = {}
    claimed: set[str] = set()
    for header in headers:
        target = HEADER_ALIASES.get(normalize_header(header))
        if target is None or target in claimed:
            continue
        resolved[header] = target
        claimed.add(target)
    return resolved


def detect_csv_format(headers: Iterable[str]) -> str:
    """Classify a header row: sis_export, frontline, oneroster or unknown."""
    normalized = {normalize_header(h) for h in headers}

    if normalized & ONEROSTER_INDICATORS:
        return "oneroster"
    if FRONTLINE_INDICATORS.issubset(normalized):
        return "frontline"

    fields = set(resolve_columns(normalized).values())
    has_name = "student_name" in fields or {"first_name", "last_name"} <= fields
    if has_name and "period" in fields:
        return "sis_export"
    return "unknown"


def _row_to_fields(row: Mapping[str, str | None], columns: dict[str, str]) -> dict[str, str]:
    fields: dict[str, str] = {}
    for header, target in columns.items():
        fields[target] = collapse_whitespace(row.get(header))

    first = fields.pop("first_name", "")
    last = fields.pop("last_name", "")
    if not fields.get("student_name") and (first or last):
        fields["student_name"] = f"{last}, {first}" if last and first else last or first
    return fields


def parse_roster_rows(
    rows: Iterable[Mapping[str, str | None]],
    *,
    fieldnames: list[str] | None = None,
    csv_format: str = "sis_export",
) -> ImportResult:
    """Validate raw row mappings and build RosterEntry records.

    Args:
        rows: One mapping per data row, keyed by the original headers.
        fieldnames: Header row; taken from the first row when omitted.
        csv_format: Format label recorded on the result.

    Returns:
        ImportResult with accepted entries and one RowIssue per rejected field.
    """
    rows = list(rows)
    if fieldnames is None:
        fieldnames = list(rows[0].keys()) if rows else []
    columns = resolve_columns(fieldnames)

    result = ImportResult(format=csv_format, fieldnames=list(fieldnames))
    for index, row in enumerate(rows, start=1):
        fields = _row_to_fields(row, columns)
        problems = []
        if not fields.get("student_name"):
            problems.append(
                RowIssue(row=index, field="student_name", message="Missing required field: student_name")
            )
        if not fields.get("period"):
            problems.append(
                RowIssue(
                    row=index,
                    field="period",
                    message="Missing required field: period",
                    value=fields.get("student_name") or None,
                )
            )
        if problems:
            result.issues.extend(problems)
            continue
        result.entries.append(RosterEntry(**fields))

    log.info(
        "roster_rows_parsed",
        format=csv_format,
        accepted=len(result.entries),
        rejected_fields=len(result.issues),
    )
    return result


def _sniff_delimiter(sample: str) -> str:
    """Detect a CSV delimiter, defaulting to comma when uncertain."""

    try:
        dialect = csv.Sniffer().sniff(sample, delimiters=",;\t")
        return dialect.delimiter
    except csv.Error:
        counts = {d: sample.count(d) for d in (",", ";", "\t")}
        return max(counts, key=lambda d: counts[d]) if any(counts.values()) else ","


def load_roster_csv(path: Path) -> ImportResult:
    """Load an SIS roster CSV file.

    Raises:
        FileNotFoundError: If the file does not exist.
        RosterFormatError: If the header row matches no known layout.
    """
    if not path.exists():
        raise FileNotFoundError(path)

    with path.open(newline="", encoding="utf-8-sig") as handle:
        sample = handle.read(4096)
        handle.seek(0)
        reader = csv.DictReader(handle, delimiter=_sniff_delimiter(sample))

        if reader.fieldnames is None:
            raise RosterFormatError(f"No header row in {path}")

        csv_format = detect_csv_format(reader.fieldnames)
        if csv_format == "unknown":
            raise RosterFormatError(
                f"Unrecognised roster columns in {path}: {', '.join(reader.fieldnames)}"
            )
        return parse_roster_rows(
            reader, fieldnames=list(reader.fieldnames), csv_format=csv_format
        )


def dedupe_entries(entries: Iterable[RosterEntry]) -> list[RosterEntry]:
    """Drop exact repeats of (student, course, period, day), keeping the first."""
    seen: set[tuple[str, str, str, str]] = set()
    unique: list[RosterEntry] = []
    for entry in entries:
        key = (entry.student_name, entry.course_label, entry.period, entry.day)
        if key in seen:
            continue
        seen.add(key)
        unique.append(entry)
    return unique
