from __future__ import annotations

from enum import Enum

"""Profile and job enums for the roster import tool.

ProfileLifecycleStatus is the closed status vocabulary accepted in the
``status`` CSV column. JobStatus tracks one CSV file through the import run.
"""

__all__ = [
    "ProfileLifecycleStatus",
    "UserType",
    "JobStatus",
    "RowStatus",
]


class ProfileLifecycleStatus(Enum):
    """Lifecycle of a user profile record.

    Imports default to ACTIVE when the column is blank.
    """
    DRAFT = "DRAFT"
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    ARCHIVED = "ARCHIVED"


class UserType(Enum):
    STUDENT = "STUDENT"
    STAFF = "STAFF"
    PARENT = "PARENT"
    OTHER = "OTHER"


class JobStatus(Enum):
    """Status of one import file.

    State transitions: pending → processing → (succeeded | failed)
    """
    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"


class RowStatus(Enum):
    SUCCESS = "SUCCESS"
    ERROR = "ERROR"
