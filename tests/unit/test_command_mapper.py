from __future__ import annotations

from roster_sync.importers.student_profiles import build_import_row
from roster_sync.models.enums import ProfileLifecycleStatus
from roster_sync.services.command_mapper import (
    UpsertProfileCommand,
    build_student_profile_values,
    build_upsert_profile_command,
)


def _row(**raw: str):
    base = {"primaryEmail": "Alice@X.com", "student.firstName": "Alice", "student.lastName": "Smith"}
    base.update(raw)
    return build_import_row(base, 2)


def test_values_for_actionable_row():
    values = build_student_profile_values(_row(), "user-1")
    assert values is not None
    assert values.user_id == "user-1"
    assert values.profile.primary_email == "alice@x.com"


def test_values_for_row_with_errors_is_none():
    assert build_student_profile_values(_row(status="nope"), "user-1") is None


def test_command_flattens_profile():
    values = build_student_profile_values(
        _row(**{"student.motherEmail": "Mom@X.com", "status": "draft"}), "  user-1  "
    )
    command = build_upsert_profile_command(values)
    assert isinstance(command, UpsertProfileCommand)
    assert command.user_id == "user-1"
    assert command.user_type == "STUDENT"
    assert command.status == "DRAFT"
    assert command.display_name == "Alice Smith"
    assert command.primary_email == "alice@x.com"
    assert command.secondary_emails == []
    assert command.student["full_name"] == "Alice Smith"
    assert command.student["mother_email"] == "mom@x.com"
    assert command.archived_at is None
    assert command.last_reviewed_at is None


def test_command_overrides():
    values = build_student_profile_values(_row(), "user-1")
    command = build_upsert_profile_command(
        values,
        status=ProfileLifecycleStatus.ARCHIVED,
        archived_at="2024-06-30T00:00:00Z",
    )
    assert command.status == "ARCHIVED"
    assert command.archived_at == "2024-06-30T00:00:00Z"
    assert command.deactivated_at is None


def test_to_dict_has_every_column():
    from roster_sync.db.profile_store import PROFILE_COLUMNS

    command = build_upsert_profile_command(build_student_profile_values(_row(), "u"))
    assert set(command.to_dict()) == set(PROFILE_COLUMNS)
