from __future__ import annotations

import json
import re
from pathlib import Path

import pandas as pd

from roster_sync.logging.result_log import RowResultLog
from roster_sync.models.enums import RowStatus
from roster_sync.models.row_result import RowResult


def test_row_result_json_line():
    rec = RowResult.create("students.csv", 3, "a@x.com", RowStatus.ERROR, "Primary email is required.")
    data = json.loads(rec.to_json_line())
    assert set(data) == {"timestamp", "file", "row", "primary_email", "status", "message"}
    assert data["timestamp"].endswith("Z")
    assert data["status"] == "ERROR"
    assert not rec.succeeded
    assert RowResult.create("s.csv", 2, None, RowStatus.SUCCESS).succeeded


def test_result_log_flush(temp_workdir: Path):
    log = RowResultLog(temp_workdir / "results", "students.csv")
    log.append(RowResult.create("students.csv", 2, "a@x.com", RowStatus.SUCCESS))
    log.append(RowResult.create("students.csv", 3, None, RowStatus.ERROR, "bad"))
    assert len(log) == 2
    path = log.flush()
    assert re.fullmatch(r"students-\d{8}-\d{6}\.jsonl", path.name)
    lines = path.read_text(encoding="utf-8").splitlines()
    assert [json.loads(line)["row"] for line in lines] == [2, 3]
    # buffer is cleared, history is kept
    assert len(log) == 0
    assert len(log.records) == 2


def test_result_log_flush_appends_to_same_file(temp_workdir: Path):
    log = RowResultLog(temp_workdir / "out", "x.csv")
    log.append(RowResult.create("x.csv", 2, None, RowStatus.SUCCESS))
    first = log.flush()
    log.append(RowResult.create("x.csv", 3, None, RowStatus.SUCCESS))
    assert log.flush() == first
    assert len(first.read_text(encoding="utf-8").splitlines()) == 2


def test_empty_flush_creates_no_file(temp_workdir: Path):
    log = RowResultLog(temp_workdir / "results", "x.csv")
    path = log.flush()
    assert not path.exists()


def test_to_frame_and_export_csv(temp_workdir: Path):
    log = RowResultLog(temp_workdir / "results", "x.csv")
    log.append(RowResult.create("x.csv", 5, "b@x.com", RowStatus.SUCCESS))
    log.append(RowResult.create("x.csv", 2, None, RowStatus.ERROR, "Primary email is required."))
    frame = log.to_frame()
    assert list(frame["row"]) == [2, 5]
    target = log.export_csv()
    assert target.suffix == ".csv"
    exported = pd.read_csv(target)
    assert list(exported.columns) == ["row", "primary_email", "status", "message"]
    assert list(exported["status"]) == ["ERROR", "SUCCESS"]


def test_roll_back_rewrites_buffered_successes(temp_workdir: Path):
    log = RowResultLog(temp_workdir / "results", "x.csv")
    log.append(RowResult.create("x.csv", 2, "a@x.com", RowStatus.SUCCESS))
    flushed = log.flush()
    log.append(RowResult.create("x.csv", 3, "b@x.com", RowStatus.SUCCESS))
    log.append(RowResult.create("x.csv", 4, None, RowStatus.ERROR, "Primary email is required."))

    assert log.roll_back("Rolled back: connection lost") == 1
    assert [(r.row, r.status, r.message) for r in log.records] == [
        (2, "SUCCESS", None),
        (3, "ERROR", "Rolled back: connection lost"),
        (4, "ERROR", "Primary email is required."),
    ]
    log.flush()
    lines = [json.loads(line) for line in flushed.read_text(encoding="utf-8").splitlines()]
    assert [line["status"] for line in lines] == ["SUCCESS", "ERROR", "ERROR"]
