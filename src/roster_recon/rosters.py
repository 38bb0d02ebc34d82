"""Group raw SIS rows into one record per (student, period)."""

from collections import Counter
from typing import Iterable

from roster_recon.logging import get_logger
from roster_recon.models import RosterEntry
from roster_recon.names import name_key
from roster_recon.periods import normalize_period, period_sort_key

log = get_logger(__name__)


def group_by_period(entries: Iterable[RosterEntry]) -> dict[str, list[RosterEntry]]:
    """Group entries by normalized period, one entry per student per period.

    Groups and the entries inside them keep the order in which they were
    first seen; on duplicates the first entry wins. Rows whose name
    normalizes to nothing are dropped.
    """
    groups: dict[str, list[RosterEntry]] = {}
    seen: dict[str, set[str]] = {}
    skipped = 0

    for entry in entries:
        key = name_key(entry.student_name)
        if not key:
            skipped += 1
            continue
        period = normalize_period(entry.period)
        period_seen = seen.setdefault(period, set())
        if key in period_seen:
            continue
        period_seen.add(key)
        groups.setdefault(period, []).append(entry)

    if skipped:
        log.debug("roster_rows_without_name_skipped", count=skipped)
    return groups


def unique_periods(entries: Iterable[RosterEntry]) -> list[str]:
    """Distinct normalized periods, numeric ascending."""
    periods = {normalize_period(entry.period) for entry in entries}
    return sorted(periods, key=period_sort_key)


def primary_course_label(entries: Iterable[RosterEntry]) -> str:
    """Most common non-empty course label; ties go to the label seen first."""
    counts = Counter(entry.course_label for entry in entries if entry.course_label)
    if not counts:
        return ""
    # most_common is stable, so equal counts keep first-seen order
    label, _ = counts.most_common(1)[0]
    return label
