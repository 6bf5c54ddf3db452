from __future__ import annotations

import logging
import re

from ..csvfile.reader import CsvReadError, read_csv_records
from ..models.enums import UserType
from ..models.import_row import ImportParseResult, ImportRow, ProfileRecord, StudentProfile
from .validators import (
    build_full_name,
    is_valid_email,
    normalize_email,
    optional_boolean,
    optional_date,
    optional_email,
    optional_string,
    parse_status,
)

"""Student profile CSV import.

Turns CSV text into ImportRow objects. Only ``primaryEmail`` is required;
every other column in STUDENT_PROFILE_CSV_HEADERS is optional and unknown
columns are kept in ``raw`` but otherwise ignored.
"""

__all__ = [
    "STUDENT_PROFILE_CSV_HEADERS",
    "FALLBACK_STUDENT_NAME",
    "parse_student_profile_csv",
    "build_import_row",
    "build_template_csv",
]

logger = logging.getLogger(__name__)

STUDENT_PROFILE_CSV_HEADERS: tuple[str, ...] = (
    "primaryEmail",
    "status",
    "student.firstName",
    "student.lastName",
    "student.dateOfBirth",
    "student.motherName",
    "student.motherEmail",
    "student.motherPhone",
    "student.motherProfession",
    "student.fatherName",
    "student.fatherEmail",
    "student.fatherPhone",
    "student.fatherProfession",
    "student.healthNotes",
    "student.receivesSocialAssistance",
    "student.livesWithBothParents",
    "student.livesWithParentsDetails",
    "student.comments",
    "student.homeAddress",
    "student.homeCity",
)

FALLBACK_STUDENT_NAME = "Student"
_LOCAL_PART_SEPARATORS = re.compile(r"[.\-_]")


def parse_student_profile_csv(text: str) -> ImportParseResult:
    """Parse a student profile CSV.

    File-level failures are returned in ``result.errors`` with no rows; row
    problems are attached to each row. Nothing is raised for bad input.
    """
    try:
        table = read_csv_records(text)
    except CsvReadError as e:
        return ImportParseResult(rows=[], header=[], errors=[str(e)])

    rows = [build_import_row(record.values, record.row_number) for record in table.records]
    logger.debug(
        "parsed student profile csv rows=%d actionable=%d",
        len(rows),
        sum(1 for row in rows if row.is_actionable),
    )
    return ImportParseResult(rows=rows, header=table.header, errors=[])


def build_import_row(raw: dict[str, str], row_number: int) -> ImportRow:
    errors: list[str] = []
    warnings: list[str] = []

    primary_email = normalize_email(raw.get("primaryEmail", ""))
    if primary_email is None:
        errors.append("Primary email is required.")
    elif not is_valid_email(primary_email):
        errors.append("Primary email must be a valid email address.")

    status = parse_status(raw.get("status", ""), errors)

    combined_name = build_full_name(
        optional_string(raw.get("student.firstName")),
        optional_string(raw.get("student.lastName")),
    )
    full_name = combined_name or _name_from_email(primary_email)
    if not full_name:
        warnings.append("Student name missing; using primary email as identifier.")

    date_of_birth = optional_date(raw.get("student.dateOfBirth"), errors)
    mother_email = optional_email(raw.get("student.motherEmail"), errors, "Mother email")
    father_email = optional_email(raw.get("student.fatherEmail"), errors, "Father email")
    receives_social_assistance = optional_boolean(
        raw.get("student.receivesSocialAssistance"), errors, "Receives social assistance"
    )
    lives_with_both_parents = optional_boolean(
        raw.get("student.livesWithBothParents"), errors, "Lives with both parents"
    )

    profile: ProfileRecord | None = None
    if primary_email and not errors:
        student = StudentProfile(
            full_name=full_name or FALLBACK_STUDENT_NAME,
            date_of_birth=date_of_birth,
            mother_name=optional_string(raw.get("student.motherName")),
            mother_email=mother_email,
            mother_phone=optional_string(raw.get("student.motherPhone")),
            mother_profession=optional_string(raw.get("student.motherProfession")),
            father_name=optional_string(raw.get("student.fatherName")),
            father_email=father_email,
            father_phone=optional_string(raw.get("student.fatherPhone")),
            father_profession=optional_string(raw.get("student.fatherProfession")),
            health_notes=optional_string(raw.get("student.healthNotes")),
            receives_social_assistance=receives_social_assistance,
            lives_with_both_parents=lives_with_both_parents,
            lives_with_parents_details=optional_string(raw.get("student.livesWithParentsDetails")),
            comments=optional_string(raw.get("student.comments")),
            home_address=optional_string(raw.get("student.homeAddress")),
            home_city=optional_string(raw.get("student.homeCity")),
        )
        profile = ProfileRecord(
            user_type=UserType.STUDENT,
            status=status,
            display_name=full_name,
            legal_name=full_name,
            primary_email=primary_email,
            student=student,
        )

    return ImportRow(
        row_number=row_number,
        primary_email=primary_email,
        profile=profile,
        errors=errors,
        warnings=warnings,
        raw=raw,
    )


def build_template_csv() -> str:
    return ",".join(STUDENT_PROFILE_CSV_HEADERS) + "\n"


def _name_from_email(primary_email: str | None) -> str | None:
    if not primary_email:
        return None
    local_part = primary_email.split("@", 1)[0]
    return _LOCAL_PART_SEPARATORS.sub(" ", local_part).strip() or None
