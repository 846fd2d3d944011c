# Shared pytest fixtures
from __future__ import annotations
import tempfile
from pathlib import Path

import pandas as pd
import pytest

from learner_report.models.config_models import ReportConfig, Thresholds


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        yield p


@pytest.fixture()
def sample_config_yaml() -> str:
    return """thresholds:
  no_progress_max: 4
  in_progress_max: 14
report:
  period_label: August 2025
  subject: Your Learners Report - AUGUST 2025
  output_directory: ./out
sources:
  chapters: ./data/chapters.xlsx
  assessment: ./data/assessment.xlsx
  attendance: ./data/attendance.xlsx
email:
  host: smtp.example.com
  port: 587
  user: reports@example.com
  password: secret
whatsapp:
  endpoint: https://relay.example.com/send-template
  token: test-token
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "report.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def clean_env(monkeypatch):
    for name in ("OUTLOOK_USER", "OUTLOOK_PASS", "SMTP_USER", "SMTP_PASSWORD", "WHATSAPP_TOKEN"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture()
def thresholds() -> Thresholds:
    return Thresholds(no_progress_max=4, in_progress_max=14)


@pytest.fixture()
def report_config() -> ReportConfig:
    return ReportConfig(
        period_label="August 2025",
        subject="Your Learners Report - AUGUST 2025",
        output_directory=".",
    )


def _write_excel(path: Path, rows: list[dict[str, object]], sheet: str = "Sheet1") -> Path:
    pd.DataFrame(rows).to_excel(path, sheet_name=sheet, index=False)
    return path


@pytest.fixture()
def make_excel():
    """Write rows (header from dict keys) as a single-sheet workbook."""
    return _write_excel


@pytest.fixture()
def chapters_rows() -> list[dict[str, object]]:
    return [
        {"Name": "Jane Doe", "Email": "jane@example.com", "Phone": "919800000001", "Chapter Completion": "6/17"},
        {"Name": "Nobody Here", "Email": "nobody@example.com", "Phone": "", "Chapter Completion": "1/17"},
        {"Name": "Ravi Kumar", "Email": "ravi@example.com", "Phone": "919800000002", "Chapter Completion": "16 OUT OF 17"},
    ]


@pytest.fixture()
def assessment_rows() -> list[dict[str, object]]:
    return [
        {"Name": "jane doe", "Email": "jane@example.com", "Marks Obtained": 18, "Maximum Marks": 20, "Skipped Questions": 1},
        {"Name": "Ravi Kumar", "Email": "ravi@example.com", "Marks Obtained": 12, "Maximum Marks": 20, "Skipped Questions": 0},
    ]


@pytest.fixture()
def attendance_rows() -> list[dict[str, object]]:
    return [
        {"Name": "Jane Doe", "OCS 1": "Attended", "OCS 2": "Not Attended"},
        {"Name": "RAVI KUMAR ", "OCS 1 Status": "Attended", "OCS 2 Status": "Attended"},
    ]


@pytest.fixture()
def source_files(temp_workdir: Path, chapters_rows, assessment_rows, attendance_rows) -> dict[str, Path]:
    data = temp_workdir / "data"
    return {
        "chapters": _write_excel(data / "chapters.xlsx", chapters_rows),
        "assessment": _write_excel(data / "assessment.xlsx", assessment_rows),
        "attendance": _write_excel(data / "attendance.xlsx", attendance_rows),
    }
