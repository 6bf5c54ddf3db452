from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

from .enums import RowStatus

"""RowResult model for the per-file result artifact.

Each processed data row yields exactly one RowResult. They are written as
JSON Lines with a fixed key set so downstream tooling can rely on it.
"""

__all__ = [
    "RowResult",
]


@dataclass(frozen=True)
class RowResult:
    """Outcome of one data row.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        file: CSV file name the row came from
        row: Row number (1-based, header is row 1). Use -1 for file-level errors
        primary_email: Normalized primary email, if one was parsed
        status: SUCCESS or ERROR
        message: Joined error messages, or None on success
    """
    timestamp: str
    file: str
    row: int
    primary_email: str | None
    status: str
    message: str | None

    @staticmethod
    def create(
        file: str,
        row: int,
        primary_email: str | None,
        status: RowStatus,
        message: str | None = None,
    ) -> RowResult:
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return RowResult(
            timestamp=ts,
            file=file,
            row=row,
            primary_email=primary_email,
            status=status.value,
            message=message,
        )

    @property
    def succeeded(self) -> bool:
        return self.status == RowStatus.SUCCESS.value

    def to_json_line(self) -> str:
        return json.dumps(asdict(self), ensure_ascii=False)
