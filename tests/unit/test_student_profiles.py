from __future__ import annotations

from roster_sync.importers.student_profiles import (
    FALLBACK_STUDENT_NAME,
    STUDENT_PROFILE_CSV_HEADERS,
    build_import_row,
    build_template_csv,
    parse_student_profile_csv,
)
from roster_sync.models.enums import ProfileLifecycleStatus, UserType


def test_full_name_from_first_and_last_name():
    result = parse_student_profile_csv(
        "primaryEmail,student.firstName,student.lastName\nalice@x.com,Alice,Smith\n"
    )
    assert result.errors == []
    row = result.rows[0]
    assert row.errors == []
    assert row.profile is not None
    assert row.profile.student.full_name == "Alice Smith"
    assert row.profile.display_name == "Alice Smith"
    assert row.profile.legal_name == "Alice Smith"
    assert row.profile.user_type is UserType.STUDENT
    assert row.profile.status is ProfileLifecycleStatus.ACTIVE


def test_missing_primary_email():
    result = parse_student_profile_csv("primaryEmail,student.firstName\n,Alice\n")
    row = result.rows[0]
    assert row.errors == ["Primary email is required."]
    assert row.profile is None
    assert row.primary_email is None
    assert not row.is_actionable
    assert result.actionable_rows == []


def test_invalid_social_assistance_flag():
    result = parse_student_profile_csv(
        "primaryEmail,student.receivesSocialAssistance\nalice@x.com,maybe\n"
    )
    row = result.rows[0]
    assert len(row.errors) == 1
    assert "yes/no/unknown" in row.errors[0]
    assert row.profile is None


def test_invalid_primary_email():
    row = build_import_row({"primaryEmail": "not-an-email"}, 2)
    assert row.errors == ["Primary email must be a valid email address."]
    assert row.primary_email == "not-an-email"


def test_every_field_error_is_reported():
    row = build_import_row(
        {
            "primaryEmail": "kid@x.com",
            "status": "gone",
            "student.dateOfBirth": "31/02/2012",
            "student.motherEmail": "mom",
            "student.fatherEmail": "dad@",
            "student.livesWithBothParents": "sometimes",
        },
        7,
    )
    assert row.row_number == 7
    assert row.errors == [
        "Invalid status value: gone",
        "Dates must use DD/MM/YYYY format (received: 31/02/2012).",
        "Mother email must be a valid email address.",
        "Father email must be a valid email address.",
        "Lives with both parents must be one of: yes/no/unknown.",
    ]
    assert row.profile is None


def test_name_derived_from_email_local_part():
    row = build_import_row({"primaryEmail": "Carol.White@School.example"}, 2)
    assert row.errors == []
    assert row.warnings == []
    assert row.primary_email == "carol.white@school.example"
    assert row.profile.student.full_name == "carol white"


def test_fallback_name_when_email_has_no_usable_local_part():
    row = build_import_row({"primaryEmail": "._@x.com"}, 2)
    assert row.errors == []
    assert row.warnings == ["Student name missing; using primary email as identifier."]
    assert row.profile.student.full_name == FALLBACK_STUDENT_NAME
    assert row.profile.display_name is None


def test_all_student_fields_are_normalized(student_csv_text):
    result = parse_student_profile_csv(student_csv_text)
    assert [r.row_number for r in result.rows] == [2, 3, 4]
    alice = result.rows[0].profile
    assert alice.status is ProfileLifecycleStatus.ACTIVE
    assert alice.student.date_of_birth == "2012-03-05"
    assert alice.student.receives_social_assistance is True
    bob = result.rows[1].profile
    assert bob.student.date_of_birth == "2011-09-01"
    assert bob.student.receives_social_assistance is False
    assert len(result.actionable_rows) == 3


def test_unknown_columns_are_kept_in_raw():
    result = parse_student_profile_csv("primaryEmail,favouriteColour\na@x.com,blue\n")
    assert result.rows[0].raw["favouriteColour"] == "blue"
    assert result.rows[0].errors == []


def test_file_level_errors():
    assert parse_student_profile_csv("").errors == ["CSV file is empty."]
    result = parse_student_profile_csv("\na@x.com\n")
    assert result.errors == ["CSV header row is empty."]
    assert result.rows == []


def test_header_only_file_has_no_rows():
    result = parse_student_profile_csv("primaryEmail,status\n")
    assert result.errors == []
    assert result.rows == []


def test_build_template_csv():
    text = build_template_csv()
    assert text.endswith("\n")
    assert text.strip().split(",") == list(STUDENT_PROFILE_CSV_HEADERS)
    assert parse_student_profile_csv(text).rows == []
