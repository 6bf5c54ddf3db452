"""Role normalization and permission derivation."""

from .claims import ClaimSource, TokenSet, build_claim_overrides, extract_roles, extract_roles_from_tokens
from .permissions import APP_PERMISSIONS, ROLE_PERMISSIONS, AppPermission, roles_to_permissions
from .roles import USER_ROLES, UserRole, normalize_role_name, normalize_roles

__all__ = [
    "APP_PERMISSIONS",
    "AppPermission",
    "ClaimSource",
    "ROLE_PERMISSIONS",
    "TokenSet",
    "USER_ROLES",
    "UserRole",
    "build_claim_overrides",
    "extract_roles",
    "extract_roles_from_tokens",
    "normalize_role_name",
    "normalize_roles",
    "roles_to_permissions",
]
