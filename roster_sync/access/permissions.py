from __future__ import annotations

from collections.abc import Iterable, Mapping
from enum import StrEnum
from types import MappingProxyType

from .roles import UserRole

"""Application permissions and the static role -> permission table."""

__all__ = [
    "AppPermission",
    "APP_PERMISSIONS",
    "ROLE_PERMISSIONS",
    "permissions_for_role",
    "roles_to_permissions",
]


class AppPermission(StrEnum):
    DASHBOARD_VIEW = "dashboard.view"
    DEVICE_LOAN_REQUEST = "deviceLoan.request"
    DEVICE_LOAN_MANAGE = "deviceLoan.manage"
    PC_LAB_REQUEST = "pcLab.request"
    PC_LAB_MANAGE = "pcLab.manage"
    SPORTS_FIELD_REQUEST = "sportsField.request"
    SPORTS_FIELD_MANAGE = "sportsField.manage"
    ROLE_ASSIGNMENTS_MANAGE = "roleAssignments.manage"
    STUDENT_PROFILES_MANAGE = "studentProfiles.manage"


APP_PERMISSIONS: tuple[AppPermission, ...] = tuple(AppPermission)

_P = AppPermission

ROLE_PERMISSIONS: Mapping[UserRole, tuple[AppPermission, ...]] = MappingProxyType({
    UserRole.ADMIN: APP_PERMISSIONS,
    UserRole.STAFF: (_P.DASHBOARD_VIEW, _P.DEVICE_LOAN_REQUEST, _P.PC_LAB_REQUEST, _P.SPORTS_FIELD_REQUEST),
    UserRole.TEACHER: (_P.DASHBOARD_VIEW, _P.DEVICE_LOAN_REQUEST, _P.PC_LAB_REQUEST, _P.SPORTS_FIELD_REQUEST),
    UserRole.STUDENT: (_P.DASHBOARD_VIEW, _P.DEVICE_LOAN_REQUEST, _P.SPORTS_FIELD_REQUEST),
    UserRole.PARENT: (_P.DASHBOARD_VIEW, _P.SPORTS_FIELD_REQUEST),
    UserRole.IT: (_P.DASHBOARD_VIEW, _P.DEVICE_LOAN_MANAGE, _P.PC_LAB_MANAGE),
    UserRole.IT_ADMINS: (
        _P.DASHBOARD_VIEW,
        _P.DEVICE_LOAN_REQUEST,
        _P.DEVICE_LOAN_MANAGE,
        _P.PC_LAB_REQUEST,
        _P.PC_LAB_MANAGE,
        _P.SPORTS_FIELD_REQUEST,
    ),
    UserRole.HR: (_P.DASHBOARD_VIEW, _P.SPORTS_FIELD_MANAGE, _P.STUDENT_PROFILES_MANAGE),
})


def permissions_for_role(role: UserRole | str) -> tuple[AppPermission, ...]:
    return ROLE_PERMISSIONS.get(role, ())  # type: ignore[call-overload]


def roles_to_permissions(roles: Iterable[UserRole | str]) -> list[AppPermission]:
    """Union of the permissions granted by ``roles``, in first-granted order.

    >>> roles_to_permissions([])
    []
    >>> len(roles_to_permissions(["Admin"])) == len(APP_PERMISSIONS)
    True
    """
    granted: dict[AppPermission, None] = {}
    for role in roles:
        for permission in permissions_for_role(role):
            granted.setdefault(permission, None)
    return list(granted)
