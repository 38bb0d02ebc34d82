import pytest

from roster_recon.models import Course
from roster_recon.periods import (
    courses_for_period,
    extract_period,
    match_course_for_period,
    normalize_period,
    period_sort_key,
)


@pytest.mark.parametrize(
    "name, expected",
    [
        ("3 Chemistry", "3"),
        ("3-Chemistry", "3"),
        ("Period 04", "04"),
        ("Chemistry period3", "3"),
        ("Chemistry (5)", "5"),
        ("P7 Biology", "7"),
        ("Biology p12", "12"),
        ("Pd 2 History", "2"),
        ("pd6 History", "6"),
        ("Chemistry", None),
        ("", None),
        ("AP Physics", None),
    ],
)
def test_extract_period(name, expected):
    assert extract_period(name) == expected


def test_extract_period_prefers_leading_number():
    assert extract_period("2 Chemistry (Period 5)") == "2"


def test_extract_period_handles_none():
    assert extract_period(None) is None


@pytest.mark.parametrize(
    "raw, expected",
    [("04", "4"), ("4", "4"), ("00", "0"), (" 010 ", "10"), ("3A", "3"), ("HR", "HR"), ("", "")],
)
def test_normalize_period(raw, expected):
    assert normalize_period(raw) == expected


def test_period_sort_key_orders_numbers_numerically():
    assert sorted(["10", "HR", "2", "1"], key=period_sort_key) == ["1", "2", "10", "HR"]


def test_non_ascii_digits_are_not_periods():
    assert normalize_period("\u00b2") == "\u00b2"
    assert extract_period("Chemistry (\u0663)") is None
    assert sorted(["\u00b2", "2", "HR"], key=period_sort_key) == ["2", "HR", "\u00b2"]


def test_very_long_periods_normalize_and_sort():
    long_period = "0" + "1" * 5000
    assert normalize_period(long_period) == "1" * 5000
    assert sorted([long_period, "9", "010"], key=period_sort_key) == ["9", "010", long_period]


def test_match_course_for_period_uses_normalized_periods():
    courses = [Course(id="a", name="Art"), Course(id="b", name="Chemistry - Period 03")]
    assert match_course_for_period("3", courses).id == "b"
    assert match_course_for_period("03", courses).id == "b"
    assert match_course_for_period("4", courses) is None
    assert match_course_for_period("3", []) is None


def test_match_course_for_period_first_claimant_wins():
    courses = [Course(id="x", name="3 Chemistry"), Course(id="y", name="Physics (3)")]
    assert match_course_for_period("3", courses).id == "x"
    assert match_course_for_period("3", list(reversed(courses))).id == "y"
    assert [c.id for c in courses_for_period("3", courses)] == ["x", "y"]
