from __future__ import annotations

from collections.abc import Iterable
from enum import StrEnum
from types import MappingProxyType

"""Canonical user role vocabulary and role-name normalization.

Role names reach us from several places (identity-provider groups, custom
token claims, CSV cells) with inconsistent casing and padding. Everything is
folded onto the closed UserRole vocabulary; anything else is dropped.
"""

__all__ = [
    "UserRole",
    "USER_ROLES",
    "is_user_role",
    "normalize_role_name",
    "normalize_roles",
]


class UserRole(StrEnum):
    ADMIN = "Admin"
    STAFF = "Staff"
    TEACHER = "Teacher"
    STUDENT = "Student"
    PARENT = "Parent"
    IT = "IT"
    IT_ADMINS = "ITAdmins"
    HR = "HR"


USER_ROLES: tuple[UserRole, ...] = tuple(UserRole)

# Exact spelling and lowercase spelling both resolve to the canonical member
_ROLE_ALIASES = MappingProxyType(
    {alias: role for role in UserRole for alias in (role.value, role.value.lower())}
)
_CANONICAL_NAMES = frozenset(role.value for role in UserRole)


def is_user_role(value: object) -> bool:
    return isinstance(value, str) and value in _CANONICAL_NAMES


def normalize_role_name(value: str) -> UserRole | None:
    """Return the canonical role for ``value`` or None when it is not a role."""
    trimmed = value.strip()
    if not trimmed:
        return None
    return _ROLE_ALIASES.get(trimmed) or _ROLE_ALIASES.get(trimmed.lower())


def normalize_roles(raw_roles: Iterable[object]) -> list[UserRole]:
    """Fold raw role strings onto the vocabulary.

    Output keeps first-seen order and has no duplicates. Non-strings and
    unknown names are skipped without error.
    """
    seen: dict[UserRole, None] = {}
    for raw in raw_roles:
        if not isinstance(raw, str):
            continue
        role = normalize_role_name(raw)
        if role is not None:
            seen.setdefault(role, None)
    return list(seen)
