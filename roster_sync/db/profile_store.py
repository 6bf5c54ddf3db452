from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from psycopg2.extras import Json

from ..importers.user_roles import NOTES_MAX_LENGTH
from ..models.import_row import UserRoleImportRow
from ..services.command_mapper import UpsertProfileCommand

"""PostgreSQL store for roster imports (psycopg2).

Tables (owned by the application, not created here):
- user_role_assignments(id, primary_email, primary_email_lower UNIQUE, roles text[], notes)
- user_profiles(user_id UNIQUE, ..., student jsonb, lifecycle timestamps)

Each row write runs inside a SAVEPOINT so a failing row does not abort the
surrounding per-file transaction.
"""

__all__ = [
    "ProfileStoreError",
    "WriteMetrics",
    "PostgresImportStore",
    "PROFILE_COLUMNS",
]

logger = logging.getLogger(__name__)

PROFILE_COLUMNS: tuple[str, ...] = (
    "user_id",
    "user_type",
    "status",
    "display_name",
    "legal_name",
    "preferred_name",
    "primary_email",
    "secondary_emails",
    "phone_numbers",
    "tags",
    "notes",
    "student",
    "archived_at",
    "deactivated_at",
    "completed_at",
    "last_reviewed_at",
)

_SAVEPOINT = "roster_row"


class ProfileStoreError(Exception):
    pass


@dataclass(frozen=True)
class WriteMetrics:
    """Timing for a single row write."""
    table: str
    elapsed_seconds: float
    succeeded: bool


def _profile_upsert_sql() -> str:
    cols_sql = ",".join(f'"{c}"' for c in PROFILE_COLUMNS)
    placeholders = ",".join(["%s"] * len(PROFILE_COLUMNS))
    updates = ",".join(f'"{c}"=EXCLUDED."{c}"' for c in PROFILE_COLUMNS if c != "user_id")
    return (
        f"INSERT INTO user_profiles ({cols_sql}) VALUES ({placeholders}) "
        f'ON CONFLICT ("user_id") DO UPDATE SET {updates}'
    )


PROFILE_UPSERT_SQL = _profile_upsert_sql()

ROLE_ASSIGNMENT_UPSERT_SQL = (
    'INSERT INTO user_role_assignments ("primary_email","primary_email_lower","roles","notes") '
    "VALUES (%s,%s,%s,%s) "
    'ON CONFLICT ("primary_email_lower") DO UPDATE SET "roles"=EXCLUDED."roles","notes"=EXCLUDED."notes"'
)

IDENTITY_SELECT_SQL = (
    'SELECT "id", COALESCE("primary_email_lower", LOWER("primary_email")) FROM user_role_assignments'
)


class PostgresImportStore:
    """ImportStore backed by a psycopg2 cursor.

    The email -> user id map is loaded once, on the first lookup.
    """

    def __init__(
        self,
        cursor: Any,
        metrics_callback: Callable[[WriteMetrics], None] | None = None,
    ) -> None:
        self.cursor = cursor
        self.metrics_callback = metrics_callback
        self._identities: dict[str, str] | None = None

    def load_identities(self) -> dict[str, str]:
        try:
            self.cursor.execute(IDENTITY_SELECT_SQL)
            rows = self.cursor.fetchall()
        except Exception as e:
            raise ProfileStoreError(f"failed loading user role assignments: {e}") from e
        identities: dict[str, str] = {}
        for user_id, email in rows:
            if user_id and email:
                identities[str(email).lower()] = str(user_id)
        logger.debug("loaded %d user identities", len(identities))
        return identities

    def resolve_user_id(self, primary_email: str) -> str | None:
        if self._identities is None:
            self._identities = self.load_identities()
        return self._identities.get(primary_email.lower())

    def upsert_profile(self, command: UpsertProfileCommand) -> None:
        data = command.to_dict()
        data["student"] = Json(data["student"])
        params = [data[c] for c in PROFILE_COLUMNS]
        self._write("user_profiles", PROFILE_UPSERT_SQL, params)

    def upsert_role_assignment(self, row: UserRoleImportRow) -> None:
        if not row.primary_email:
            raise ProfileStoreError("role assignment row has no primary email")
        notes = row.notes[:NOTES_MAX_LENGTH] if row.notes else None
        params = [row.primary_email, row.primary_email.lower(), list(row.roles), notes]
        self._write("user_role_assignments", ROLE_ASSIGNMENT_UPSERT_SQL, params)

    def begin(self) -> None:
        self.cursor.execute("BEGIN")

    def commit(self) -> None:
        self.cursor.execute("COMMIT")

    def rollback(self) -> None:
        self.cursor.execute("ROLLBACK")

    def _write(self, table: str, sql: str, params: list[Any]) -> None:
        start = time.time()
        succeeded = False
        try:
            self.cursor.execute(f"SAVEPOINT {_SAVEPOINT}")
            try:
                self.cursor.execute(sql, params)
            except Exception:
                self.cursor.execute(f"ROLLBACK TO SAVEPOINT {_SAVEPOINT}")
                raise
            self.cursor.execute(f"RELEASE SAVEPOINT {_SAVEPOINT}")
            succeeded = True
        except Exception as e:
            raise ProfileStoreError(str(e)) from e
        finally:
            if self.metrics_callback is not None:
                self.metrics_callback(
                    WriteMetrics(table=table, elapsed_seconds=time.time() - start, succeeded=succeeded)
                )
