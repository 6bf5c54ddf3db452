from __future__ import annotations

import json
import logging
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from .permissions import roles_to_permissions
from .roles import UserRole, normalize_roles

"""Role extraction from authentication token claims.

Roles can arrive through three claims, each with its own encoding:

- ``cognito:groups``  identity-provider groups, a list or comma-joined string
- ``app_roles``       custom claim, comma-joined string
- ``app_roles_json``  custom claim, JSON-encoded array of strings

Each ClaimSource has exactly one adapter that turns the claim value into a
list of raw role strings. Malformed values contribute no roles.
"""

__all__ = [
    "ClaimSource",
    "TokenSet",
    "collect_raw_roles",
    "extract_roles",
    "extract_roles_from_tokens",
    "build_claim_overrides",
]

logger = logging.getLogger(__name__)

TokenPayload = Mapping[str, Any]


class ClaimSource(Enum):
    COGNITO_GROUPS = "cognito:groups"
    APP_ROLES = "app_roles"
    APP_ROLES_JSON = "app_roles_json"

    @property
    def claim_name(self) -> str:
        return self.value


def _split_delimited_claim(value: Any) -> list[str]:
    if isinstance(value, str):
        entries: Iterable[Any] = [value]
    elif isinstance(value, (list, tuple)):
        entries = value
    else:
        return []
    tokens: list[str] = []
    for entry in entries:
        if not isinstance(entry, str):
            continue
        tokens.extend(token.strip() for token in entry.split(",") if token.strip())
    return tokens


def _parse_json_array_claim(value: Any) -> list[str]:
    if not isinstance(value, str):
        return []
    try:
        parsed = json.loads(value)
    except json.JSONDecodeError:
        logger.debug("ignoring malformed JSON role claim: %r", value)
        return []
    if not isinstance(parsed, list):
        return []
    return [entry.strip() for entry in parsed if isinstance(entry, str) and entry.strip()]


CLAIM_ADAPTERS: Mapping[ClaimSource, Callable[[Any], list[str]]] = {
    ClaimSource.COGNITO_GROUPS: _split_delimited_claim,
    ClaimSource.APP_ROLES: _split_delimited_claim,
    ClaimSource.APP_ROLES_JSON: _parse_json_array_claim,
}


@dataclass(frozen=True)
class TokenSet:
    """Decoded payloads of the tokens held by a signed-in session."""
    id_payload: TokenPayload | None = None
    access_payload: TokenPayload | None = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> TokenSet:
        """Build from ``{"id_token": {...}, "access_token": {...}}``; both keys optional."""
        id_payload = data.get("id_token")
        access_payload = data.get("access_token")
        return cls(
            id_payload=id_payload if isinstance(id_payload, Mapping) else None,
            access_payload=access_payload if isinstance(access_payload, Mapping) else None,
        )

    def payloads(self) -> list[TokenPayload]:
        return [p for p in (self.id_payload, self.access_payload) if p]


def collect_raw_roles(*payloads: TokenPayload | None) -> list[str]:
    """Gather raw role strings from every claim source of every payload."""
    raw: list[str] = []
    for payload in payloads:
        if not payload:
            continue
        for source in ClaimSource:
            raw.extend(CLAIM_ADAPTERS[source](payload.get(source.claim_name)))
    return raw


def extract_roles_from_tokens(
    id_payload: TokenPayload | None = None,
    access_payload: TokenPayload | None = None,
) -> list[UserRole]:
    return normalize_roles(collect_raw_roles(id_payload, access_payload))


def extract_roles(tokens: TokenSet) -> list[UserRole]:
    return normalize_roles(collect_raw_roles(*tokens.payloads()))


def build_claim_overrides(
    roles: Iterable[str],
    existing_groups: Iterable[str] = (),
) -> dict[str, Any]:
    """Build the claim overrides attached to freshly issued tokens.

    Group overrides keep any groups already present and append the canonical
    roles. Permissions are derived from the canonical roles only.
    """
    canonical = normalize_roles(roles)
    groups: dict[str, None] = {}
    for group in existing_groups:
        if isinstance(group, str) and group.strip():
            groups.setdefault(group.strip(), None)
    for role in canonical:
        groups.setdefault(role.value, None)
    group_list = list(groups)
    permissions = [p.value for p in roles_to_permissions(canonical)]

    return {
        "groupsToOverride": group_list,
        "claimsToAddOrOverride": {
            "app_roles": ",".join(group_list),
            "app_roles_json": json.dumps(group_list, separators=(",", ":")),
            "app_permissions": ",".join(permissions),
            "app_permissions_json": json.dumps(permissions, separators=(",", ":")),
        },
    }
