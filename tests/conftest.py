# Shared pytest fixtures
from __future__ import annotations

import tempfile
from pathlib import Path

import pytest

from roster_sync.logging.init import reset_logging


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "results").mkdir()
        monkeypatch.chdir(p)
        # Never reach for a real database from the test suite
        monkeypatch.setenv("DISABLE_DB_CONNECT", "1")
        yield p


@pytest.fixture()
def sample_config_yaml() -> str:
    return """source_directory: ./data
import_kind: student_profiles
batch_size: 2
results_directory: ./results
database:
  host: localhost
  port: 5432
  user: appuser
  password: secret
  database: appdb
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "import.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def student_csv_text() -> str:
    return (
        "primaryEmail,status,student.firstName,student.lastName,student.dateOfBirth,"
        "student.receivesSocialAssistance\n"
        "alice@school.example,active,Alice,Smith,05/03/2012,yes\n"
        "bob@school.example,,Bob,Jones,2011-09-01,no\n"
        "carol.white@school.example,,,,,\n"
    )


@pytest.fixture()
def student_csv_file(temp_workdir: Path, student_csv_text: str) -> Path:
    f = temp_workdir / "data" / "students.csv"
    f.write_text(student_csv_text, encoding="utf-8")
    return f


@pytest.fixture()
def fresh_logging():
    reset_logging()
    yield
    reset_logging()
