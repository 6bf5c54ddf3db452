from __future__ import annotations

from dataclasses import replace
from datetime import UTC, datetime
from pathlib import Path

import pandas as pd

from ..models.enums import RowStatus
from ..models.row_result import RowResult

"""Per-file result artifact.

Row outcomes are buffered in memory and flushed as JSON Lines to
``<results_directory>/<csv stem>-YYYYmmdd-HHMMSS.jsonl`` (UTC). The path is
fixed on first access so repeated flushes append to the same file.
"""

__all__ = [
    "RowResult",
    "RowResultLog",
]

TIMESTAMP_FMT = "%Y%m%d-%H%M%S"


class RowResultLog:
    """Buffer of RowResult records for one source file."""

    def __init__(self, results_directory: Path, source_name: str) -> None:
        self.results_directory = results_directory
        self.source_name = source_name
        self._records: list[RowResult] = []
        self._all: list[RowResult] = []
        self._file_path: Path | None = None

    @property
    def file_path(self) -> Path:
        if self._file_path is None:
            self.results_directory.mkdir(parents=True, exist_ok=True)
            stamp = datetime.now(UTC).strftime(TIMESTAMP_FMT)
            stem = Path(self.source_name).stem
            self._file_path = self.results_directory / f"{stem}-{stamp}.jsonl"
        return self._file_path

    def append(self, record: RowResult) -> None:
        self._records.append(record)
        self._all.append(record)

    @property
    def records(self) -> list[RowResult]:
        """Every record appended so far, flushed or not, in append order."""
        return list(self._all)

    def roll_back(self, reason: str) -> int:
        """Turn buffered SUCCESS records into ERROR records carrying ``reason``.

        Used when the writes behind those rows were rolled back. Records that
        were already flushed are left alone. Returns the number changed.
        """
        replaced: dict[int, RowResult] = {}
        for index, record in enumerate(self._records):
            if record.succeeded:
                failed = replace(record, status=RowStatus.ERROR.value, message=reason)
                replaced[id(record)] = failed
                self._records[index] = failed
        self._all = [replaced.get(id(record), record) for record in self._all]
        return len(replaced)

    def __len__(self) -> int:
        return len(self._records)

    def flush(self) -> Path:
        fp = self.file_path
        if not self._records:
            return fp
        with fp.open("a", encoding="utf-8") as f:
            for r in self._records:
                f.write(r.to_json_line() + "\n")
        self._records.clear()
        return fp

    def to_frame(self) -> pd.DataFrame:
        """All outcomes as a DataFrame sorted by row number."""
        frame = pd.DataFrame(
            [
                {"row": r.row, "primary_email": r.primary_email, "status": r.status, "message": r.message}
                for r in self._all
            ],
            columns=["row", "primary_email", "status", "message"],
        )
        return frame.sort_values("row", kind="stable").reset_index(drop=True)

    def export_csv(self, path: Path | None = None) -> Path:
        """Write all outcomes as CSV next to the JSON Lines artifact."""
        target = path or self.file_path.with_suffix(".csv")
        target.parent.mkdir(parents=True, exist_ok=True)
        self.to_frame().to_csv(target, index=False)
        return target
