from __future__ import annotations

from pathlib import Path

from learner_report.cli import main as cli_main
from learner_report.logging.init import reset_logging

"""Exit code contract: 0 all good, 2 partial failure, 1 fatal startup error."""


def test_exit_code_fatal_missing_config(temp_workdir: Path, capsys):
    reset_logging()
    code = cli_main([])
    assert code == 1
    assert "ERROR config: config file not found" in capsys.readouterr().out


def test_exit_code_fatal_inverted_threshold_flags(write_config, source_files, capsys):
    reset_logging()
    code = cli_main(["--no-progress-max", "14", "--in-progress-max", "4"])
    assert code == 1
    assert "ERROR config: invalid thresholds" in capsys.readouterr().out


def test_exit_code_fatal_missing_source(temp_workdir: Path, capsys):
    reset_logging()
    (temp_workdir / "config" / "report.yml").write_text("report:\n  period_label: Aug\n", encoding="utf-8")
    code = cli_main(["--chapters", "data/chapters.xlsx"])
    assert code == 1
    assert "ERROR missing source file(s): assessment, attendance" in capsys.readouterr().out


def test_exit_code_fatal_unconfigured_channel(temp_workdir: Path, source_files, capsys):
    reset_logging()
    (temp_workdir / "config" / "report.yml").write_text(
        "report:\n  period_label: Aug\nsources:\n"
        "  chapters: ./data/chapters.xlsx\n  assessment: ./data/assessment.xlsx\n  attendance: ./data/attendance.xlsx\n",
        encoding="utf-8",
    )
    code = cli_main(["--send", "email"])
    assert code == 1
    assert "ERROR notify: email channel requested but no 'email' section in config" in capsys.readouterr().out


def test_exit_code_success(write_config, source_files, clean_env, capsys):
    reset_logging()
    assert cli_main([]) == 0


def test_exit_code_partial_when_source_file_missing_on_disk(write_config, source_files, capsys):
    reset_logging()
    source_files["assessment"].unlink()
    assert cli_main([]) == 2
