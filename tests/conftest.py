import pytest

from roster_recon.config import reset_config
from roster_recon.models import Course, PlatformStudent, RosterEntry


def make_entry(name: str, period: str = "3", course: str = "Chemistry", **extra) -> RosterEntry:
    return RosterEntry(student_name=name, period=period, course_label=course, **extra)


def make_student(name: str, course_id: str = "c1", course_name: str = "3 Chemistry") -> PlatformStudent:
    email = name.lower().replace(" ", ".") + "@school.test"
    return PlatformStudent(full_name=name, email=email, course_id=course_id, course_name=course_name)


@pytest.fixture
def sis_entries() -> list[RosterEntry]:
    """Two periods, with A/B rotation-day duplicates as the SIS exports them."""
    return [
        make_entry("Doe, John", "03", day="A", section="01", teacher_name="Curie, Marie"),
        make_entry("Doe, John", "03", day="B", section="01", teacher_name="Curie, Marie"),
        make_entry("Smith, Jane", "3", day="A", section="01", teacher_name="Curie, Marie"),
        make_entry("Lovelace, Ada Augusta", "1", course="Algebra II", day="A"),
        make_entry("Turing, Alan", "1", course="Algebra II", day="A"),
    ]


@pytest.fixture
def platform_courses() -> list[Course]:
    return [
        Course(id="c1", name="3 Chemistry"),
        Course(id="c2", name="Algebra II - Period 01"),
        Course(id="c9", name="Staff Room"),
    ]


@pytest.fixture
def platform_students() -> dict[str, list[PlatformStudent]]:
    return {
        "c1": [make_student("John Doe")],
        "c2": [
            make_student("Ada Lovelace", "c2", "Algebra II - Period 01"),
            make_student("Grace Hopper", "c2", "Algebra II - Period 01"),
        ],
    }


@pytest.fixture(autouse=True)
def clean_config(monkeypatch):
    """Keep tests independent of the developer's environment and .env file."""
    monkeypatch.delenv("ROSTER_RECON_CLASSROOM_TOKEN", raising=False)
    monkeypatch.delenv("ROSTER_RECON_ALLOW_SWAPPED_NAMES", raising=False)
    reset_config()
    yield
    reset_config()
