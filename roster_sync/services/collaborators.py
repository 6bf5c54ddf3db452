from __future__ import annotations

import uuid
from typing import Protocol

from ..models.import_row import UserRoleImportRow
from .command_mapper import UpsertProfileCommand

"""Collaborator contracts used by the import runner.

The runner never talks to a database directly. It resolves identities and
writes records through these protocols; roster_sync.db.profile_store backs
them with PostgreSQL and DryRunStore backs them with memory.
"""

__all__ = [
    "IdentityResolver",
    "ProfileWriter",
    "RoleAssignmentWriter",
    "ImportStore",
    "DryRunStore",
]

# Namespace for deterministic dry-run user ids
DRY_RUN_NAMESPACE = uuid.UUID("6f1c8a34-2b7e-4b8e-9a53-1f0d2c7e5a10")


class IdentityResolver(Protocol):
    def resolve_user_id(self, primary_email: str) -> str | None: ...


class ProfileWriter(Protocol):
    def upsert_profile(self, command: UpsertProfileCommand) -> None: ...


class RoleAssignmentWriter(Protocol):
    def upsert_role_assignment(self, row: UserRoleImportRow) -> None: ...


class ImportStore(IdentityResolver, ProfileWriter, RoleAssignmentWriter, Protocol):
    """Everything the runner needs, plus per-file transaction hooks."""

    def begin(self) -> None: ...

    def commit(self) -> None: ...

    def rollback(self) -> None: ...


class DryRunStore:
    """In-memory store for runs without a database.

    Every email resolves to a stable uuid5 id and writes are only recorded,
    so a dry run reports exactly which rows would have been written.
    """

    def __init__(self, known_emails: set[str] | None = None) -> None:
        self.known_emails = {e.lower() for e in known_emails} if known_emails is not None else None
        self.profiles: list[UpsertProfileCommand] = []
        self.role_assignments: list[UserRoleImportRow] = []

    def resolve_user_id(self, primary_email: str) -> str | None:
        email = primary_email.lower()
        if self.known_emails is not None and email not in self.known_emails:
            return None
        return str(uuid.uuid5(DRY_RUN_NAMESPACE, email))

    def upsert_profile(self, command: UpsertProfileCommand) -> None:
        self.profiles.append(command)

    def upsert_role_assignment(self, row: UserRoleImportRow) -> None:
        self.role_assignments.append(row)

    def begin(self) -> None:
        pass

    def commit(self) -> None:
        pass

    def rollback(self) -> None:
        pass
