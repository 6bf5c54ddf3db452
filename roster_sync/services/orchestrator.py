from __future__ import annotations

import logging
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from ..csvfile.reader import read_csv_file
from ..importers.student_profiles import parse_student_profile_csv
from ..importers.user_roles import parse_user_role_csv
from ..logging.result_log import RowResultLog
from ..models.config_models import IMPORT_KIND_STUDENT_PROFILES, IMPORT_KIND_USER_ROLES, ImportConfig
from ..models.enums import JobStatus, RowStatus
from ..models.import_row import ImportRow, UserRoleImportRow
from ..models.processing_result import BatchStatsAccumulator, FileStat, ProcessingResult
from ..models.row_result import RowResult
from .collaborators import DryRunStore, ImportStore
from .command_mapper import build_student_profile_values, build_upsert_profile_command
from .progress import ProgressTracker, RowProgressIndicator

"""Import runner.

Scans the source directory for CSV files and imports each one as a job:

1. decode and parse the file (file-level errors fail the job with no rows)
2. report every non-actionable row as an error up front
3. write actionable rows in batches, one row at a time, through the store
4. flush the per-file result artifact and record a FileStat

A failing row never stops the rows after it.
"""

logger = logging.getLogger(__name__)

NO_MATCHING_ACCOUNT = "No matching user account found. Create the account first."
INVALID_ROW = "Invalid row data."
FILE_LEVEL_ROW = -1


class ProcessingError(Exception):
    """Fatal error that prevents the run from starting."""


@dataclass(frozen=True)
class FileOutcome:
    stat: FileStat
    results: list[RowResult]
    result_path: Path | None


def scan_csv_files(directory: Path) -> list[Path]:
    """List .csv files in ``directory`` (non-recursive, sorted by name).

    Raises:
        ProcessingError: If directory doesn't exist or can't be read
    """
    if not directory.exists():
        raise ProcessingError(f"Directory not found: {directory}")

    if not directory.is_dir():
        raise ProcessingError(f"Path is not a directory: {directory}")

    try:
        return sorted(
            (p for p in directory.iterdir() if p.is_file() and p.suffix.lower() == ".csv"),
            key=lambda p: p.name,
        )
    except OSError as e:
        raise ProcessingError(f"Error reading directory {directory}: {e}") from e


def process_all(
    config: ImportConfig,
    store: ImportStore | None = None,
    *,
    export_csv: bool = False,
) -> ProcessingResult:
    """Import every CSV file in the configured directory.

    Without a store the run is a dry run against DryRunStore. With
    ``export_csv`` each result artifact also gets a CSV copy.

    Raises:
        ProcessingError: unknown import kind or unreadable source directory
    """
    start_time = datetime.now(UTC)
    if store is None:
        store = DryRunStore()
    if config.import_kind not in _ROW_WRITERS:
        raise ProcessingError(f"Unknown import kind: {config.import_kind}")

    file_paths = scan_csv_files(Path(config.source_directory))

    file_stats: list[FileStat] = []
    success_files = 0
    failed_files = 0
    total_rows = 0
    success_rows = 0
    failed_rows = 0

    with ProgressTracker(len(file_paths), description="Importing files") as progress:
        for file_path in file_paths:
            progress.start_file(file_path)
            outcome = process_file(file_path, config, store, export_csv=export_csv)
            stat = outcome.stat

            if stat.status == JobStatus.SUCCEEDED.value:
                success_files += 1
            else:
                failed_files += 1
            total_rows += stat.total_rows
            success_rows += stat.success_rows
            failed_rows += stat.failed_rows
            file_stats.append(stat)

            progress.set_postfix(success=success_files, failed=failed_files, rows=total_rows)
            progress.finish_file()

    end_time = datetime.now(UTC)
    elapsed_seconds = (end_time - start_time).total_seconds()
    processed = success_rows + failed_rows
    throughput_rps = processed / elapsed_seconds if elapsed_seconds > 0 else 0.0

    return ProcessingResult(
        success_files=success_files,
        failed_files=failed_files,
        total_rows=total_rows,
        success_rows=success_rows,
        failed_rows=failed_rows,
        start_time=start_time,
        end_time=end_time,
        elapsed_seconds=elapsed_seconds,
        throughput_rows_per_sec=throughput_rps,
        file_stats=file_stats,
    )


def process_file(
    file_path: Path,
    config: ImportConfig,
    store: ImportStore,
    *,
    export_csv: bool = False,
) -> FileOutcome:
    """Run one import job for ``file_path``. Never raises for bad input."""
    file_start = time.monotonic()
    result_log = RowResultLog(Path(config.results_directory), file_path.name)
    logger.info("file=%s status=%s kind=%s", file_path.name, JobStatus.PROCESSING.value, config.import_kind)

    encoding: str | None = None
    batch_stats = BatchStatsAccumulator()
    total = 0
    error_message: str | None = None
    try:
        text, encoding = read_csv_file(file_path, config.encodings)
        parse = _PARSERS[config.import_kind]
        parsed = parse(text)

        if parsed.errors:
            # File-level problems abort the job before any row is touched
            error_message = "\n".join(parsed.errors)
        else:
            total = len(parsed.rows)
            store.begin()
            try:
                _run_rows(
                    file_path.name,
                    parsed.rows,
                    _ROW_WRITERS[config.import_kind],
                    store,
                    config.batch_size,
                    result_log,
                    batch_stats,
                )
                store.commit()
            except Exception as e:
                store.rollback()
                # Nothing from this file was persisted
                undone = result_log.roll_back(f"Rolled back: {e}")
                logger.warning("file=%s rolled back %d written rows", file_path.name, undone)
                raise
    except Exception as e:
        logger.error("file=%s import failed: %s", file_path.name, e)
        error_message = str(e) or type(e).__name__

    if error_message is not None:
        result_log.append(
            RowResult.create(file_path.name, FILE_LEVEL_ROW, None, RowStatus.ERROR, error_message)
        )
    return _finish(
        file_path,
        result_log,
        file_start,
        encoding,
        total,
        batch_stats,
        error_message,
        export_csv=export_csv,
    )


def _run_rows(
    file_name: str,
    rows: Sequence[ImportRow | UserRoleImportRow],
    write_row: Callable[[Any, ImportStore], str | None],
    store: ImportStore,
    batch_size: int,
    result_log: RowResultLog,
    batch_stats: BatchStatsAccumulator,
) -> None:
    indicator = RowProgressIndicator(file_name, len(rows))
    processed = 0

    for row in rows:
        for warning in row.warnings:
            logger.warning("file=%s row=%d %s", file_name, row.row_number, warning)
        if not row.is_actionable:
            message = "; ".join(row.errors) if row.errors else INVALID_ROW
            result_log.append(
                RowResult.create(file_name, row.row_number, row.primary_email, RowStatus.ERROR, message)
            )
            processed += 1
    indicator.update(processed)

    actionable = [row for row in rows if row.is_actionable]
    for offset in range(0, len(actionable), batch_size):
        batch = actionable[offset:offset + batch_size]
        batch_start = time.monotonic()
        for row in batch:
            try:
                error = write_row(row, store)
            except Exception as e:
                logger.debug("file=%s row=%d write failed", file_name, row.row_number, exc_info=True)
                error = str(e) or "Failed to save row."
            status = RowStatus.SUCCESS if error is None else RowStatus.ERROR
            result_log.append(RowResult.create(file_name, row.row_number, row.primary_email, status, error))
            processed += 1
        batch_stats.add_batch_time(time.monotonic() - batch_start)
        indicator.update(processed)

    indicator.finish(success=all(r.succeeded for r in result_log.records))


def _write_student_profile(row: ImportRow, store: ImportStore) -> str | None:
    """Resolve the row's account and upsert its profile. Returns an error message or None."""
    if not row.primary_email:
        return "Primary email missing after normalization."
    user_id = store.resolve_user_id(row.primary_email)
    if not user_id:
        return NO_MATCHING_ACCOUNT
    values = build_student_profile_values(row, user_id)
    if values is None:
        return "Row data invalid after normalization."
    store.upsert_profile(build_upsert_profile_command(values))
    return None


def _write_role_assignment(row: UserRoleImportRow, store: ImportStore) -> str | None:
    store.upsert_role_assignment(row)
    return None


_PARSERS: dict[str, Callable[[str], Any]] = {
    IMPORT_KIND_STUDENT_PROFILES: parse_student_profile_csv,
    IMPORT_KIND_USER_ROLES: parse_user_role_csv,
}

_ROW_WRITERS: dict[str, Callable[[Any, ImportStore], str | None]] = {
    IMPORT_KIND_STUDENT_PROFILES: _write_student_profile,
    IMPORT_KIND_USER_ROLES: _write_role_assignment,
}


def _finish(
    file_path: Path,
    result_log: RowResultLog,
    file_start: float,
    encoding: str | None,
    total_rows: int,
    batch_stats: BatchStatsAccumulator,
    error_message: str | None,
    *,
    export_csv: bool = False,
) -> FileOutcome:
    results = result_log.records
    row_results = [r for r in results if r.row != FILE_LEVEL_ROW]
    success_rows = sum(1 for r in row_results if r.succeeded)
    failed_rows = len(row_results) - success_rows
    failed = error_message is not None or failed_rows > 0
    status = JobStatus.FAILED if failed else JobStatus.SUCCEEDED

    if error_message is not None:
        message = error_message
    else:
        message = (
            f"Processed {len(row_results)}/{total_rows} rows. "
            f"Successes: {success_rows}. Failures: {failed_rows}."
        )

    result_path: Path | None
    try:
        result_path = result_log.flush()
        if export_csv:
            result_log.export_csv()
    except OSError as e:
        logger.error("file=%s could not write result artifact: %s", file_path.name, e)
        result_path = None

    total_batches, avg_batch, p95_batch = batch_stats.get_stats()
    logger.info("file=%s status=%s %s", file_path.name, status.value, message)
    stat = FileStat(
        file_name=file_path.name,
        status=status.value,
        total_rows=total_rows,
        success_rows=success_rows,
        failed_rows=failed_rows,
        elapsed_seconds=time.monotonic() - file_start,
        encoding=encoding,
        message=message,
        total_batches=total_batches,
        avg_batch_seconds=avg_batch,
        p95_batch_seconds=p95_batch,
    )
    return FileOutcome(stat=stat, results=results, result_path=result_path)
