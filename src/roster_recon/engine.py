"""Roster reconciliation engine.

Compares the SIS roster (source of truth) against platform course rosters,
period by period. Pure and deterministic: no I/O, no hidden state, and no
exceptions for malformed input. Problems surface as data in the RosterDiff
(unmatched_periods, ambiguous_periods, missing and extra names).
"""

from typing import Iterable, Mapping, Sequence

from roster_recon.logging import get_logger
from roster_recon.models import (
    ComparisonResult,
    Course,
    OverviewCounts,
    PlatformStudent,
    RosterDiff,
    RosterEntry,
    RosterIssue,
    RosterOverview,
    RosterSummary,
    StudentDiscrepancy,
)
from roster_recon.names import find_match, name_key
from roster_recon.periods import courses_for_period, normalize_period
from roster_recon.rosters import group_by_period, primary_course_label, unique_periods

log = get_logger(__name__)


def _split_names(
    source_names: list[str],
    platform_names: list[str],
    *,
    allow_swapped: bool,
) -> tuple[list[str], list[str], list[str], list[str]]:
    """Return (matched, missing_from_platform, matched_platform, extra_in_platform).

    Matching can be many-to-one ("John Doe" and "John Michael Doe" both match
    "Doe, John"), so each side is partitioned on its own.
    """
    matched: list[str] = []
    missing: list[str] = []
    for name in source_names:
        if find_match(name, platform_names, allow_swapped=allow_swapped) is not None:
            matched.append(name)
        else:
            missing.append(name)

    matched_platform: list[str] = []
    extra: list[str] = []
    for name in platform_names:
        if find_match(name, source_names, allow_swapped=allow_swapped) is not None:
            matched_platform.append(name)
        else:
            extra.append(name)
    return matched, missing, matched_platform, extra


def compare_names(
    period: str,
    course_name: str,
    source_names: list[str],
    platform_names: list[str],
    *,
    course: Course | None = None,
    allow_swapped: bool = False,
) -> ComparisonResult:
    """Classify both name lists for one period.

    Without a course, every source name is missing and the platform side is
    left empty.
    """
    if course is None:
        return ComparisonResult(
            period=period,
            course_name=course_name,
            source_names=list(source_names),
            missing_from_platform=list(source_names),
        )

    matched, missing, matched_platform, extra = _split_names(
        source_names, platform_names, allow_swapped=allow_swapped
    )
    return ComparisonResult(
        period=period,
        course_name=course_name,
        platform_course_id=course.id,
        platform_course_name=course.name,
        source_names=list(source_names),
        platform_names=list(platform_names),
        missing_from_platform=missing,
        extra_in_platform=extra,
        matched=matched,
        matched_platform=matched_platform,
    )


def compare_period(
    period: str,
    source_entries: Iterable[RosterEntry],
    platform_students: Sequence[PlatformStudent],
    *,
    course: Course | None = None,
    allow_swapped: bool = False,
) -> ComparisonResult:
    """Compare one SIS period against an explicitly chosen platform roster.

    Used when a user picks the platform class by hand instead of relying
    on period extraction from course names.
    """
    target = normalize_period(period)
    group = group_by_period(source_entries).get(target, [])
    if course is None:
        course = Course(id=platform_students[0].course_id if platform_students else "")
    return compare_names(
        target,
        primary_course_label(group),
        [entry.student_name for entry in group],
        [student.full_name for student in platform_students],
        course=course,
        allow_swapped=allow_swapped,
    )


def reconcile(
    source_entries: Iterable[RosterEntry],
    platform_courses: Sequence[Course],
    platform_students_by_course: Mapping[str, Sequence[PlatformStudent]],
    *,
    allow_swapped: bool = False,
) -> RosterDiff:
    """Reconcile the SIS roster against every platform course.

    Each SIS period is paired with the first platform course whose name
    carries the same period number. When several courses claim a period the
    first one in supplied order is used and all claimants are reported in
    ambiguous_periods.
    """
    entries = list(source_entries)
    groups = group_by_period(entries)
    comparisons: list[ComparisonResult] = []
    unmatched: list[str] = []
    ambiguous: dict[str, list[str]] = {}

    for period in unique_periods(entries):
        group = groups.get(period)
        if not group:
            # period only seen on rows without a student name
            continue
        course_name = primary_course_label(group)
        source_names = [entry.student_name for entry in group]

        claimants = courses_for_period(period, platform_courses)
        course = claimants[0] if claimants else None
        if len(claimants) > 1:
            ambiguous[period] = [c.id for c in claimants]
            log.warning(
                "period_claimed_by_multiple_courses",
                period=period,
                course_ids=ambiguous[period],
                chosen=course.id,
            )

        if course is None:
            unmatched.append(period)
            platform_names: list[str] = []
        else:
            platform_names = [
                student.full_name
                for student in platform_students_by_course.get(course.id, ())
            ]

        comparisons.append(
            compare_names(
                period,
                course_name,
                source_names,
                platform_names,
                course=course,
                allow_swapped=allow_swapped,
            )
        )

    summary = RosterSummary(
        total_source=sum(len(c.source_names) for c in comparisons),
        total_platform=sum(len(c.platform_names) for c in comparisons),
        total_missing=sum(len(c.missing_from_platform) for c in comparisons),
        total_extra=sum(len(c.extra_in_platform) for c in comparisons),
        total_matched=sum(len(c.matched) for c in comparisons),
    )
    return RosterDiff(
        comparisons=comparisons,
        unmatched_periods=unmatched,
        ambiguous_periods=ambiguous,
        summary=summary,
    )


def _collect_students(
    rows: Iterable[tuple[str, str, str]],
) -> dict[str, dict]:
    """Unique students keyed by canonical name: display name, email, courses."""
    students: dict[str, dict] = {}
    for display_name, email, course in rows:
        key = name_key(display_name)
        if not key:
            continue
        student = students.setdefault(
            key, {"name": display_name, "email": email, "courses": []}
        )
        if course and course not in student["courses"]:
            student["courses"].append(course)
    return students


def overview(
    source_entries: Iterable[RosterEntry],
    platform_students: Iterable[PlatformStudent],
    *,
    allow_swapped: bool = False,
) -> RosterOverview:
    """Course-agnostic comparison: who is enrolled anywhere on each side.

    Catches students that exist on the platform but under a class whose
    period could not be aligned.
    """
    source = _collect_students(
        (entry.student_name, "", entry.course_label or "Unknown")
        for entry in source_entries
    )
    platform = _collect_students(
        (student.full_name, student.email, student.course_name or "Unknown")
        for student in platform_students
    )

    def _present(key: str, others: dict[str, dict]) -> bool:
        if key in others:
            return True
        return find_match(key, list(others), allow_swapped=allow_swapped) is not None

    missing = [
        StudentDiscrepancy(name=s["name"], courses=s["courses"], source="sis")
        for key, s in source.items()
        if not _present(key, platform)
    ]
    extra = [
        StudentDiscrepancy(
            name=s["name"], email=s["email"], courses=s["courses"], source="platform"
        )
        for key, s in platform.items()
        if not _present(key, source)
    ]

    issues = [
        RosterIssue(
            type="missing",
            severity="error",
            message=f"{s.name} is in the SIS but NOT on the platform",
            student=s.name,
            courses=s.courses,
        )
        for s in sorted(missing, key=lambda s: s.name.lower())
    ] + [
        RosterIssue(
            type="extra",
            severity="warning",
            message=f"{s.name} is on the platform but NOT in the SIS",
            student=s.name,
            email=s.email,
            courses=s.courses,
        )
        for s in sorted(extra, key=lambda s: s.name.lower())
    ]

    counts = OverviewCounts(
        total_source=len(source),
        total_platform=len(platform),
        matched=len(source) - len(missing),
        missing=len(missing),
        extra=len(extra),
    )
    return RosterOverview(
        counts=counts,
        missing_from_platform=missing,
        extra_in_platform=extra,
        issues=issues,
    )
