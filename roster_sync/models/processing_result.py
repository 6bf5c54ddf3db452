from __future__ import annotations

import statistics
from dataclasses import dataclass
from datetime import datetime

"""Processing result models for the roster import tool.

Aggregates per-file row outcomes into the figures printed on the SUMMARY line.
"""


@dataclass(frozen=True)
class FileStat:
    """Per-file processing statistics.

    status is the final JobStatus value of the file (SUCCEEDED/FAILED).
    """
    file_name: str
    status: str
    total_rows: int  # data rows parsed (header excluded)
    success_rows: int
    failed_rows: int
    elapsed_seconds: float
    encoding: str | None = None  # encoding the file was decoded with
    message: str | None = None  # final job message
    total_batches: int = 0
    avg_batch_seconds: float = 0.0
    p95_batch_seconds: float = 0.0


@dataclass(frozen=True)
class ProcessingResult:
    """Aggregated results for one run over the source directory."""
    success_files: int
    failed_files: int
    total_rows: int
    success_rows: int
    failed_rows: int
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float
    throughput_rows_per_sec: float  # processed rows / elapsed
    file_stats: list[FileStat] | None = None


class BatchStatsAccumulator:
    """Collects per-batch write timings for a FileStat."""

    def __init__(self) -> None:
        self.batch_times: list[float] = []

    def add_batch_time(self, elapsed_seconds: float) -> None:
        self.batch_times.append(elapsed_seconds)

    def get_stats(self) -> tuple[int, float, float]:
        """Calculate batch statistics.

        Returns:
            tuple: (total_batches, avg_batch_seconds, p95_batch_seconds)
        """
        if not self.batch_times:
            return (0, 0.0, 0.0)

        total_batches = len(self.batch_times)
        avg_batch_seconds = statistics.mean(self.batch_times)

        if total_batches == 1:
            p95_batch_seconds = self.batch_times[0]
        else:
            # 19th of 20 inclusive quantiles
            p95_batch_seconds = statistics.quantiles(
                self.batch_times, n=20, method='inclusive'
            )[18]

        return (total_batches, avg_batch_seconds, p95_batch_seconds)
