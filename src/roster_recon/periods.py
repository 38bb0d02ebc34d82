"""Align SIS class periods with platform courses.

Platform course names carry the period in free text ("3 Chemistry",
"Chemistry - Period 3", "Chem (3)", "P3 Chem", "Pd 3 Chem"). The period is
pulled out with a fixed list of patterns, tried in order.
"""

import re
from typing import Iterable

from roster_recon.models import Course

PERIOD_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"^([0-9]+)[\s-]"),  # "3 Chemistry", "3-Chemistry"
    re.compile(r"period\s*([0-9]+)", re.IGNORECASE),  # "Period 3", "period03"
    re.compile(r"\(([0-9]+)\)"),  # "Chemistry (3)"
    re.compile(r"\bp([0-9]+)\b", re.IGNORECASE),  # "P3 Chemistry"
    re.compile(r"\bpd\s*([0-9]+)\b", re.IGNORECASE),  # "Pd 3 Chemistry"
)

_LEADING_INT_RE = re.compile(r"^\s*([0-9]+)")
_DIGITS_RE = re.compile(r"[0-9]+")


def extract_period(course_name: str | None) -> str | None:
    """Return the period digits embedded in a course name, or None."""
    if not course_name:
        return None
    for pattern in PERIOD_PATTERNS:
        match = pattern.search(course_name)
        if match:
            return match.group(1)
    return None


def normalize_period(period: str | None) -> str:
    """Canonical join key for periods: "03" -> "3", "00" -> "0".

    Only the leading integer counts ("3A" -> "3"). Text without one, such as
    "HR", is returned trimmed and otherwise unchanged.
    """
    if period is None:
        return ""
    match = _LEADING_INT_RE.match(period)
    if not match:
        return period.strip()
    return _strip_zeros(match.group(1))


def _strip_zeros(digits: str) -> str:
    # no int(): it rejects very long digit strings
    return digits.lstrip("0") or "0"


def period_sort_key(period: str) -> tuple[int, int, str]:
    """Numeric periods first in ascending order, then the rest by text.

    Only ASCII digits count as numeric; "²" sorts as text.
    """
    if _DIGITS_RE.fullmatch(period):
        key = _strip_zeros(period)
        return (0, len(key), key)
    return (1, 0, period)


def courses_for_period(period: str, courses: Iterable[Course]) -> list[Course]:
    """Every course whose name carries the given period, in supplied order."""
    target = normalize_period(period)
    claimants = []
    for course in courses:
        course_period = extract_period(course.name)
        if course_period is not None and normalize_period(course_period) == target:
            claimants.append(course)
    return claimants


def match_course_for_period(period: str, courses: Iterable[Course]) -> Course | None:
    """First course, in supplied order, whose name carries the given period."""
    target = normalize_period(period)
    for course in courses:
        course_period = extract_period(course.name)
        if course_period is not None and normalize_period(course_period) == target:
            return course
    return None
