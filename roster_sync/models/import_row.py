from __future__ import annotations

from dataclasses import dataclass, field

from .enums import ProfileLifecycleStatus, UserType

"""Row models for CSV imports.

An ImportRow is the parsed, validated form of one data line. Row numbers are
1-based and count the header line, so the first data line is row 2.
"""

__all__ = [
    "StudentProfile",
    "ProfileRecord",
    "ImportRow",
    "ImportParseResult",
    "UserRoleImportRow",
    "UserRoleImportParseResult",
]


@dataclass(frozen=True)
class StudentProfile:
    """Student-specific section of a profile. Only full_name is required."""
    full_name: str
    date_of_birth: str | None = None  # ISO YYYY-MM-DD
    mother_name: str | None = None
    mother_email: str | None = None
    mother_phone: str | None = None
    mother_profession: str | None = None
    father_name: str | None = None
    father_email: str | None = None
    father_phone: str | None = None
    father_profession: str | None = None
    health_notes: str | None = None
    receives_social_assistance: bool | None = None
    lives_with_both_parents: bool | None = None
    lives_with_parents_details: str | None = None
    comments: str | None = None
    home_address: str | None = None
    home_city: str | None = None


@dataclass(frozen=True)
class ProfileRecord:
    """Normalized profile built from an error-free row."""
    user_type: UserType
    status: ProfileLifecycleStatus
    display_name: str | None
    legal_name: str | None
    primary_email: str | None
    student: StudentProfile
    preferred_name: str | None = None
    secondary_emails: list[str] = field(default_factory=list)
    phone_numbers: list[str] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)
    notes: str | None = None


@dataclass(frozen=True)
class ImportRow:
    """One parsed data line.

    profile is set iff errors is empty; warnings never block the row.
    """
    row_number: int
    primary_email: str | None
    profile: ProfileRecord | None
    errors: list[str]
    warnings: list[str]
    raw: dict[str, str]

    @property
    def is_actionable(self) -> bool:
        return self.profile is not None and not self.errors


@dataclass(frozen=True)
class ImportParseResult:
    """Result of parsing a whole file.

    errors holds file-level failures (empty file, empty header); row problems
    live on the rows themselves.
    """
    rows: list[ImportRow]
    header: list[str]
    errors: list[str]

    @property
    def actionable_rows(self) -> list[ImportRow]:
        return [row for row in self.rows if row.is_actionable]


@dataclass(frozen=True)
class UserRoleImportRow:
    row_number: int
    primary_email: str | None
    roles: list[str]
    notes: str | None
    errors: list[str]
    warnings: list[str]
    raw: dict[str, str]

    @property
    def is_actionable(self) -> bool:
        return not self.errors and bool(self.primary_email) and bool(self.roles)


@dataclass(frozen=True)
class UserRoleImportParseResult:
    rows: list[UserRoleImportRow]
    header: list[str]
    errors: list[str]

    @property
    def actionable_rows(self) -> list[UserRoleImportRow]:
        return [row for row in self.rows if row.is_actionable]
