"""Pydantic models for roster data and reconciliation results.

All data structures use Pydantic v2 for validation, serialization, and type safety.
Input records are frozen: once produced by an importer or API client they are
never mutated.
"""

from typing import Any

from pydantic import BaseModel, Field, field_validator


def _coerce_text(value: Any) -> Any:
    """Missing values become empty strings; numbers (e.g. period 3) become text."""
    if value is None:
        return ""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return value


class RosterEntry(BaseModel):
    """One student-in-class observation from the SIS (source of truth).

    One entry exists per (student, class, rotation day) seen in an export or
    extraction, so the same student usually appears several times.
    """

    student_name: str = ""  # "Last, First Middle" or "First Last"
    course_label: str = ""  # Course description or course id
    period: str = ""  # May carry leading zeros, e.g. "03"
    section: str = ""
    day: str = ""  # Rotation-day code ("A", "B", ...), empty on fixed schedules
    teacher_name: str = ""

    model_config = {"frozen": True, "str_strip_whitespace": True}

    @field_validator("*", mode="before")
    @classmethod
    def _text_fields(cls, value: Any) -> Any:
        return _coerce_text(value)


class Course(BaseModel):
    """A course on the classroom platform."""

    id: str
    name: str = ""
    section: str = ""
    course_state: str = ""  # ACTIVE, ARCHIVED, PROVISIONED, ...

    model_config = {"frozen": True}

    @field_validator("id", "name", "section", "course_state", mode="before")
    @classmethod
    def _text_fields(cls, value: Any) -> Any:
        return _coerce_text(value)

    @classmethod
    def from_api(cls, payload: dict[str, Any]) -> "Course":
        """Build from a Classroom API `courses` resource."""
        return cls(
            id=payload.get("id", ""),
            name=payload.get("name", ""),
            section=payload.get("section", ""),
            course_state=payload.get("courseState", ""),
        )


class PlatformStudent(BaseModel):
    """A student enrolled in a platform course."""

    full_name: str = ""
    email: str = ""
    course_id: str = ""
    course_name: str = ""  # Denormalised for course-agnostic comparisons

    model_config = {"frozen": True}

    @field_validator("*", mode="before")
    @classmethod
    def _text_fields(cls, value: Any) -> Any:
        return _coerce_text(value)

    @classmethod
    def from_api(cls, payload: dict[str, Any], course_name: str = "") -> "PlatformStudent":
        """Build from a Classroom API `courses.students` resource."""
        profile = payload.get("profile") or {}
        name = profile.get("name") or {}
        full_name = name.get("fullName") or " ".join(
            part for part in (name.get("givenName"), name.get("familyName")) if part
        )
        return cls(
            full_name=full_name,
            email=profile.get("emailAddress", ""),
            course_id=payload.get("courseId", ""),
            course_name=course_name,
        )


class CanonicalName(BaseModel):
    """Lowercase, single-spaced name used for identity comparison."""

    first: str = ""
    last: str = ""
    full: str = ""

    model_config = {"frozen": True}


class ComparisonResult(BaseModel):
    """Outcome of comparing one SIS period against its platform course.

    source_names splits exactly into matched + missing_from_platform, and
    platform_names into matched_platform + extra_in_platform. matched holds
    SIS names; matched_platform holds the platform names they matched.
    """

    period: str
    course_name: str = ""
    platform_course_id: str | None = None
    platform_course_name: str | None = None
    source_names: list[str] = Field(default_factory=list)
    platform_names: list[str] = Field(default_factory=list)
    missing_from_platform: list[str] = Field(default_factory=list)
    extra_in_platform: list[str] = Field(default_factory=list)
    matched: list[str] = Field(default_factory=list)
    matched_platform: list[str] = Field(default_factory=list)

    @property
    def is_clean(self) -> bool:
        return not self.missing_from_platform and not self.extra_in_platform


class RosterSummary(BaseModel):
    total_source: int = 0
    total_platform: int = 0
    total_missing: int = 0
    total_extra: int = 0
    total_matched: int = 0  # SIS side


class RosterDiff(BaseModel):
    """Aggregate diff report for one reconciliation run."""

    comparisons: list[ComparisonResult] = Field(default_factory=list)
    unmatched_periods: list[str] = Field(default_factory=list)
    # period -> every platform course id that claimed it (only when > 1)
    ambiguous_periods: dict[str, list[str]] = Field(default_factory=dict)
    summary: RosterSummary = Field(default_factory=RosterSummary)

    @property
    def has_discrepancies(self) -> bool:
        return bool(self.summary.total_missing or self.summary.total_extra)

    def comparison_for(self, period: str) -> ComparisonResult | None:
        for comparison in self.comparisons:
            if comparison.period == period:
                return comparison
        return None


class StudentDiscrepancy(BaseModel):
    """A student present on only one side of a course-agnostic comparison."""

    name: str
    email: str = ""
    courses: list[str] = Field(default_factory=list)
    source: str  # "sis" or "platform"


class RosterIssue(BaseModel):
    """Display-ready line item derived from a StudentDiscrepancy."""

    type: str  # "missing" or "extra"
    severity: str  # "error" or "warning"
    message: str
    student: str
    email: str = ""
    courses: list[str] = Field(default_factory=list)


class OverviewCounts(BaseModel):
    total_source: int = 0
    total_platform: int = 0
    matched: int = 0
    missing: int = 0
    extra: int = 0


class RosterOverview(BaseModel):
    """Student-level comparison that ignores which class a student is in."""

    counts: OverviewCounts = Field(default_factory=OverviewCounts)
    missing_from_platform: list[StudentDiscrepancy] = Field(default_factory=list)
    extra_in_platform: list[StudentDiscrepancy] = Field(default_factory=list)
    issues: list[RosterIssue] = Field(default_factory=list)


class RowIssue(BaseModel):
    """A problem with one CSV data row (1-based row index, header excluded)."""

    row: int
    field: str
    message: str
    value: str | None = None


class ImportResult(BaseModel):
    """Validated roster entries plus every row that was rejected."""

    entries: list[RosterEntry] = Field(default_factory=list)
    issues: list[RowIssue] = Field(default_factory=list)
    format: str = "unknown"
    fieldnames: list[str] = Field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.issues
