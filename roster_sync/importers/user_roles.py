from __future__ import annotations

import re

from ..csvfile.reader import CsvReadError, read_csv_records
from ..models.import_row import UserRoleImportParseResult, UserRoleImportRow
from .validators import is_valid_email, normalize_email, optional_string

"""User role assignment CSV import.

Columns: primaryEmail, roles, notes. Header names are matched
case-insensitively. Role tokens are checked for shape only here; mapping to
the canonical vocabulary happens when claims are built.
"""

__all__ = [
    "USER_ROLE_IMPORT_HEADERS",
    "NOTES_MAX_LENGTH",
    "InvalidRoleNameError",
    "parse_user_role_csv",
    "split_role_tokens",
    "build_template_csv",
]

USER_ROLE_IMPORT_HEADERS: tuple[str, ...] = ("primaryEmail", "roles", "notes")
NOTES_MAX_LENGTH = 1000

_ROLE_SEPARATORS = re.compile(r"[\s,;]+")
_ROLE_TOKEN_PATTERN = re.compile(r"^[A-Za-z0-9_+=,.@-]{1,128}$")
_CANONICAL_HEADERS = {name.lower(): name for name in USER_ROLE_IMPORT_HEADERS}


class InvalidRoleNameError(ValueError):
    """Raised when a roles cell contains a token that cannot be a group name."""


def parse_user_role_csv(text: str) -> UserRoleImportParseResult:
    """Parse a role assignment CSV.

    Missing required columns are file-level errors, but rows are still parsed
    and returned so the caller can show them.
    """
    try:
        table = read_csv_records(text)
    except CsvReadError as e:
        return UserRoleImportParseResult(rows=[], header=[], errors=[str(e)])

    canonical = [_canonicalize_header(token) for token in table.header]
    errors: list[str] = []
    if "primaryEmail" not in canonical:
        errors.append("CSV header must include a 'primaryEmail' column.")
    if "roles" not in canonical:
        errors.append("CSV header must include a 'roles' column.")

    rows: list[UserRoleImportRow] = []
    for record in table.records:
        raw: dict[str, str] = {}
        for token, name in zip(table.header, canonical, strict=True):
            raw[name] = record.values.get(token, "")
        rows.append(_build_row(raw, record.row_number))
    return UserRoleImportParseResult(rows=rows, header=table.header, errors=errors)


def split_role_tokens(value: str) -> list[str]:
    """Split a roles cell on whitespace, commas or semicolons, keeping order.

    Raises:
        InvalidRoleNameError: a token has characters outside the group-name set
    """
    tokens = [token.strip() for token in _ROLE_SEPARATORS.split(value) if token.strip()]
    unique: list[str] = []
    for token in tokens:
        if not _ROLE_TOKEN_PATTERN.match(token):
            raise InvalidRoleNameError(f"Invalid role name: {token}")
        if token not in unique:
            unique.append(token)
    return unique


def build_template_csv() -> str:
    return ",".join(USER_ROLE_IMPORT_HEADERS) + "\n"


def _build_row(raw: dict[str, str], row_number: int) -> UserRoleImportRow:
    errors: list[str] = []
    warnings: list[str] = []

    primary_email = normalize_email(raw.get("primaryEmail", ""))
    if primary_email is None:
        errors.append("Primary email is required.")
    elif not is_valid_email(primary_email):
        errors.append("Primary email must be a valid email address.")

    roles: list[str] = []
    roles_raw = raw.get("roles", "")
    if not roles_raw.strip():
        errors.append("At least one role is required.")
    else:
        try:
            roles = split_role_tokens(roles_raw)
        except InvalidRoleNameError as e:
            errors.append(str(e))
        else:
            if not roles:
                errors.append("At least one role is required.")

    notes = optional_string(raw.get("notes", ""))
    if notes and len(notes) > NOTES_MAX_LENGTH:
        warnings.append(f"Notes will be truncated to {NOTES_MAX_LENGTH} characters.")

    return UserRoleImportRow(
        row_number=row_number,
        primary_email=primary_email,
        roles=roles,
        notes=notes,
        errors=errors,
        warnings=warnings,
        raw=raw,
    )


def _canonicalize_header(value: str) -> str:
    trimmed = value.strip()
    return _CANONICAL_HEADERS.get(trimmed.lower(), trimmed)
