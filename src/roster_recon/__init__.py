"""Roster reconciliation between an SIS export and Google Classroom.

The core (names, periods, rosters, engine) is pure; ingest, classroom,
history and report are the I/O edges around it.
"""

from roster_recon.engine import compare_period, overview, reconcile
from roster_recon.models import (
    CanonicalName,
    ComparisonResult,
    Course,
    PlatformStudent,
    RosterDiff,
    RosterEntry,
    RosterSummary,
)
from roster_recon.names import names_match, normalize
from roster_recon.periods import extract_period, match_course_for_period, normalize_period
from roster_recon.rosters import group_by_period, primary_course_label

__all__ = [
    "CanonicalName",
    "ComparisonResult",
    "Course",
    "PlatformStudent",
    "RosterDiff",
    "RosterEntry",
    "RosterSummary",
    "compare_period",
    "extract_period",
    "group_by_period",
    "match_course_for_period",
    "names_match",
    "normalize",
    "normalize_period",
    "overview",
    "primary_course_label",
    "reconcile",
]
