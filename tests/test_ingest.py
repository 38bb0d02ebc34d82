from pathlib import Path

import pytest

from roster_recon import ingest
from roster_recon.errors import RosterFormatError
from roster_recon.models import RosterEntry


def test_normalize_header():
    assert ingest.normalize_header("  Student   Name ") == "student_name"
    assert ingest.normalize_header(None) == ""


@pytest.mark.parametrize(
    "headers, expected",
    [
        (["Student Name", "Course", "Section", "Period", "Day", "Teacher"], "sis_export"),
        (["studentId", "firstName", "lastName", "email", "period"], "frontline"),
        (["sourcedId", "status", "dateLastModified", "givenName"], "oneroster"),
        (["First Name", "Last Name", "Per"], "sis_export"),
        (["Student Name", "Course"], "unknown"),
        ([], "unknown"),
    ],
)
def test_detect_csv_format(headers, expected):
    assert ingest.detect_csv_format(headers) == expected


def test_parse_roster_rows_builds_entries():
    rows = [
        {"Student Name": " Doe,  John ", "Course": "Chemistry", "Period": "03", "Day": "A", "Teacher": "Curie"},
    ]
    result = ingest.parse_roster_rows(rows)
    assert result.is_valid
    assert result.entries == [
        RosterEntry(
            student_name="Doe, John",
            course_label="Chemistry",
            period="03",
            day="A",
            teacher_name="Curie",
        )
    ]


def test_parse_roster_rows_reports_missing_fields_with_row_index():
    rows = [
        {"Student Name": "Doe, John", "Period": "3"},
        {"Student Name": "", "Period": "4"},
        {"Student Name": "Smith, Jane", "Period": None},
    ]
    result = ingest.parse_roster_rows(rows)

    assert [e.student_name for e in result.entries] == ["Doe, John"]
    assert [(i.row, i.field) for i in result.issues] == [(2, "student_name"), (3, "period")]
    assert result.issues[1].value == "Smith, Jane"
    assert not result.is_valid


def test_parse_roster_rows_joins_first_and_last_names():
    rows = [{"firstName": "Ada", "lastName": "Lovelace", "period": "1", "studentId": "9"}]
    result = ingest.parse_roster_rows(rows, csv_format="frontline")
    assert result.entries[0].student_name == "Lovelace, Ada"
    assert result.format == "frontline"


def test_parse_roster_rows_empty():
    result = ingest.parse_roster_rows([])
    assert result.entries == []
    assert result.is_valid


def test_load_roster_csv_reads_export_layout(tmp_path: Path):
    path = tmp_path / "roster.csv"
    path.write_text(
        "Student Name,Course,Section,Period,Day,Teacher\n"
        '"Doe, John",Chemistry,01,03,A,"Curie, Marie"\n'
        '"Smith, Jane",Chemistry,01,3,B,"Curie, Marie"\n',
        encoding="utf-8",
    )
    result = ingest.load_roster_csv(path)

    assert result.format == "sis_export"
    assert [e.student_name for e in result.entries] == ["Doe, John", "Smith, Jane"]
    assert result.entries[0].teacher_name == "Curie, Marie"
    assert result.entries[0].section == "01"


def test_load_roster_csv_semicolon_and_bom(tmp_path: Path):
    path = tmp_path / "roster.csv"
    path.write_text("\ufeffStudent;Period;Course\nDoe, John;2;Art\n", encoding="utf-8")
    result = ingest.load_roster_csv(path)
    assert result.entries == [RosterEntry(student_name="Doe, John", period="2", course_label="Art")]


def test_load_roster_csv_unknown_layout(tmp_path: Path):
    path = tmp_path / "bad.csv"
    path.write_text("foo,bar\n1,2\n", encoding="utf-8")
    with pytest.raises(RosterFormatError):
        ingest.load_roster_csv(path)


def test_load_roster_csv_missing_file(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        ingest.load_roster_csv(tmp_path / "nope.csv")


def test_dedupe_entries_keeps_first():
    a = RosterEntry(student_name="Doe, John", course_label="Chem", period="3", day="A", teacher_name="X")
    b = RosterEntry(student_name="Doe, John", course_label="Chem", period="3", day="A", teacher_name="Y")
    c = RosterEntry(student_name="Doe, John", course_label="Chem", period="3", day="B")
    assert ingest.dedupe_entries([a, b, c]) == [a, c]
