from __future__ import annotations

from dataclasses import dataclass, field

"""Config dataclasses for the roster import tool.

Built by roster_sync.config.loader from config/import.yml after schema
validation. Defaults here mirror the defaults declared in the schema.
"""

IMPORT_KIND_STUDENT_PROFILES = "student_profiles"
IMPORT_KIND_USER_ROLES = "user_roles"

DEFAULT_ENCODINGS: tuple[str, ...] = ("utf-8", "windows-1250", "windows-1252", "iso-8859-1")
DEFAULT_BATCH_SIZE = 10


@dataclass(frozen=True)
class DatabaseConfig:
    """Database connection fallback.

    Environment variables take precedence over these values.
    """
    host: str | None = None
    port: int | None = None
    user: str | None = None
    password: str | None = None
    database: str | None = None
    dsn: str | None = None


@dataclass(frozen=True)
class ImportConfig:
    """Root configuration object for an import run."""
    source_directory: str  # directory scanned for .csv files
    import_kind: str = IMPORT_KIND_STUDENT_PROFILES
    batch_size: int = DEFAULT_BATCH_SIZE  # actionable rows written between progress reports
    encodings: tuple[str, ...] = DEFAULT_ENCODINGS  # tried in order when decoding
    results_directory: str = "./results"
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
