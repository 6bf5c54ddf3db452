from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any

from ..importers.validators import normalize_email
from ..models.enums import ProfileLifecycleStatus
from ..models.import_row import ImportRow, ProfileRecord, StudentProfile

"""Mapping of validated rows to profile upsert commands.

The command is what the profile writer persists. Lifecycle timestamps are
never derived from the CSV; they stay None unless the caller passes them.
"""

__all__ = [
    "StudentProfileValues",
    "UpsertProfileCommand",
    "build_student_profile_values",
    "build_upsert_profile_command",
]


@dataclass(frozen=True)
class StudentProfileValues:
    """An actionable row's profile bound to a resolved user id."""
    user_id: str
    profile: ProfileRecord


@dataclass(frozen=True)
class UpsertProfileCommand:
    user_id: str
    user_type: str
    status: str
    display_name: str | None
    legal_name: str | None
    preferred_name: str | None
    primary_email: str | None
    secondary_emails: list[str]
    phone_numbers: list[str]
    tags: list[str]
    notes: str | None
    student: dict[str, Any]
    archived_at: str | None = None
    deactivated_at: str | None = None
    completed_at: str | None = None
    last_reviewed_at: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def build_student_profile_values(row: ImportRow, user_id: str) -> StudentProfileValues | None:
    """Bind a row's profile to ``user_id``; None when the row is not actionable."""
    if row.profile is None or row.errors:
        return None
    return StudentProfileValues(user_id=user_id, profile=row.profile)


def build_upsert_profile_command(
    values: StudentProfileValues,
    *,
    status: ProfileLifecycleStatus | None = None,
    archived_at: str | None = None,
    deactivated_at: str | None = None,
    completed_at: str | None = None,
    last_reviewed_at: str | None = None,
) -> UpsertProfileCommand:
    profile = values.profile
    return UpsertProfileCommand(
        user_id=values.user_id.strip(),
        user_type=profile.user_type.value,
        status=(status or profile.status).value,
        display_name=profile.display_name,
        legal_name=profile.legal_name,
        preferred_name=profile.preferred_name,
        primary_email=normalize_email(profile.primary_email),
        secondary_emails=[email.lower() for email in profile.secondary_emails],
        phone_numbers=list(profile.phone_numbers),
        tags=list(profile.tags),
        notes=profile.notes,
        student=_student_input(profile.student),
        archived_at=archived_at,
        deactivated_at=deactivated_at,
        completed_at=completed_at,
        last_reviewed_at=last_reviewed_at,
    )


def _student_input(student: StudentProfile) -> dict[str, Any]:
    data = asdict(student)
    data["mother_email"] = normalize_email(student.mother_email)
    data["father_email"] = normalize_email(student.father_email)
    return data
