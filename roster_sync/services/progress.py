from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

from tqdm import tqdm
from tqdm.std import tqdm as TqdmType

"""Progress display with tqdm (TTY only).

A single file-level bar for the run plus a lightweight per-file row counter
that is refreshed after every write batch. Both are silent when stdout is
not a terminal so CI logs stay free of control sequences.
"""

__all__ = [
    "ProgressTracker",
    "is_tty_enabled",
    "RowProgressIndicator",
]


def is_tty_enabled() -> bool:
    return sys.stdout.isatty()


class ProgressTracker:
    """File-level progress bar for an import run."""

    def __init__(self, total_files: int, *, description: str = "Importing files") -> None:
        self.total_files = total_files
        self.description = description

        self.enabled = is_tty_enabled()
        self.pbar: TqdmType[Any] | None
        if self.enabled:
            self.pbar = tqdm(
                total=total_files,
                desc=description,
                unit="file",
                disable=False,
                leave=True,
                position=0,
                ncols=80,
                ascii=True,
            )
        else:
            self.pbar = None

    def start_file(self, file_path: Path) -> None:
        if self.enabled and self.pbar is not None:
            self.pbar.set_description(f"{self.description} ({file_path.name})")

    def finish_file(self) -> None:
        if self.enabled and self.pbar is not None:
            self.pbar.update(1)
            self.pbar.set_description(self.description)

    def set_postfix(self, **kwargs: Any) -> None:
        if self.enabled and self.pbar is not None:
            self.pbar.set_postfix(**kwargs)

    def close(self) -> None:
        if self.enabled and self.pbar is not None:
            self.pbar.close()
            self.pbar = None

    def __enter__(self) -> ProgressTracker:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()


class RowProgressIndicator:
    """Row counter for one file, updated once per batch.

    Mirrors the job status message ``Processing N/M rows...``.
    """

    def __init__(self, file_name: str, total_rows: int) -> None:
        self.file_name = file_name
        self.total_rows = total_rows
        self.processed_rows = 0
        self.enabled = is_tty_enabled()

    @property
    def message(self) -> str:
        return f"Processing {self.processed_rows}/{self.total_rows} rows..."

    def update(self, processed_rows: int) -> None:
        self.processed_rows = processed_rows
        if self.enabled:
            print(f"\r  {self.file_name}: {self.message}", end="", flush=True)

    def finish(self, success: bool = True) -> None:
        if self.enabled:
            status = "✓" if success else "✗"
            print(f"\r  {self.file_name}: {self.processed_rows}/{self.total_rows} rows {status}")
