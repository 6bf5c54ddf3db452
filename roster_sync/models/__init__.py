"""Domain models for the roster import tool.

Row, profile, result and configuration types shared by the importers, the
import runner and the CLI.
"""

from .config_models import DatabaseConfig, ImportConfig
from .enums import JobStatus, ProfileLifecycleStatus, RowStatus, UserType
from .import_row import (
    ImportParseResult,
    ImportRow,
    ProfileRecord,
    StudentProfile,
    UserRoleImportParseResult,
    UserRoleImportRow,
)
from .processing_result import FileStat, ProcessingResult
from .row_result import RowResult

__all__ = [
    # Configuration models
    "DatabaseConfig",
    "ImportConfig",
    # Enums
    "JobStatus",
    "ProfileLifecycleStatus",
    "RowStatus",
    "UserType",
    # Row models
    "ImportParseResult",
    "ImportRow",
    "ProfileRecord",
    "StudentProfile",
    "UserRoleImportParseResult",
    "UserRoleImportRow",
    # Results
    "FileStat",
    "ProcessingResult",
    "RowResult",
]
