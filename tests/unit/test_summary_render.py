from __future__ import annotations

import re
from datetime import datetime, timezone

import pytest

from roster_sync.models.processing_result import ProcessingResult
from roster_sync.services.summary import _format_number, render_summary_line

SUMMARY_PATTERN = re.compile(
    r"^SUMMARY\s+files=([0-9]+)/(\1)\s+success=([0-9]+)\s+failed=([0-9]+)\s+"
    r"rows=([0-9]+)\s+row_failures=([0-9]+)\s+elapsed_sec=([0-9]+\.?[0-9]*)\s+"
    r"throughput_rps=([0-9]+\.?[0-9]*)$"
)


def _result(**overrides) -> ProcessingResult:
    start = datetime(2024, 1, 1, 10, 0, 0, tzinfo=timezone.utc)
    end = datetime(2024, 1, 1, 10, 0, 2, tzinfo=timezone.utc)
    values = dict(
        success_files=1,
        failed_files=0,
        total_rows=40,
        success_rows=40,
        failed_rows=0,
        start_time=start,
        end_time=end,
        elapsed_seconds=2.0,
        throughput_rows_per_sec=20.0,
    )
    values.update(overrides)
    return ProcessingResult(**values)


def test_render_summary_line_all_success():
    line = render_summary_line(1, _result())
    assert line == "SUMMARY files=1/1 success=1 failed=0 rows=40 row_failures=0 elapsed_sec=2 throughput_rps=20"
    assert SUMMARY_PATTERN.match(line)


def test_render_summary_line_partial_failure():
    line = render_summary_line(
        3,
        _result(success_files=2, failed_files=1, total_rows=12, success_rows=9, failed_rows=3,
                elapsed_seconds=1.23456, throughput_rows_per_sec=9.7214),
    )
    match = SUMMARY_PATTERN.match(line)
    assert match
    assert match.group(6) == "3"
    assert "elapsed_sec=1.235" in line
    assert "throughput_rps=9.721" in line


def test_render_summary_line_empty_run():
    line = render_summary_line(
        0,
        _result(success_files=0, total_rows=0, success_rows=0, elapsed_seconds=0.0, throughput_rows_per_sec=0.0),
    )
    assert line == "SUMMARY files=0/0 success=0 failed=0 rows=0 row_failures=0 elapsed_sec=0 throughput_rps=0"


@pytest.mark.parametrize(
    "value,expected",
    [(0, "0"), (3.0, "3"), (0.0005, "0.0005"), (0.004, "0.004"), (12.34567, "12.346")],
)
def test_format_number(value, expected):
    assert _format_number(value) == expected
