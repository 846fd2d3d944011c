from __future__ import annotations

import re
from pathlib import Path
from unittest.mock import MagicMock, patch

from learner_report.cli import main as cli_main
from learner_report.logging.init import reset_logging

"""End-to-end run: three workbooks in, cards + exports + notifications out."""


def test_run_prints_cards_and_summary(write_config, source_files, temp_workdir: Path, clean_env, capsys):
    reset_logging()

    code = cli_main(["--html", "cards.html", "--csv", "cards.csv", "--ocs1-date", "9 Aug"])

    out = capsys.readouterr().out
    assert code == 0
    assert "#1 Jane Doe  [In Progress]" in out
    assert "  Monthly Assessment Test: 18 out of 20" in out
    assert "  OCS 1 (9 Aug): Attended" in out
    assert "#3 Ravi Kumar  [Completed]" in out
    assert "Nobody Here" not in out
    assert re.search(
        r"SUMMARY sources=3/3 primary_rows=3 matched=2 completed=1 in_progress=1 no_progress=0 elapsed_sec=[0-9.]+$",
        out,
        re.MULTILINE,
    )
    assert (temp_workdir / "out" / "cards.html").exists()
    assert (temp_workdir / "out" / "cards.csv").read_text(encoding="utf-8").startswith("card_number,name,")
    assert not list((temp_workdir / "logs").glob("errors-*.log"))


def test_threshold_flags_override_config(write_config, source_files, clean_env, capsys):
    reset_logging()

    code = cli_main(["--no-progress-max", "6", "--in-progress-max", "15"])

    out = capsys.readouterr().out
    assert code == 0
    assert "#1 Jane Doe  [No Progress]" in out
    assert "#3 Ravi Kumar  [Completed]" in out
    assert "INFO thresholds: no_progress_max=6 in_progress_max=15" in out


def test_run_sends_email_and_whatsapp(write_config, source_files, clean_env, capsys):
    reset_logging()
    relay_ok = MagicMock(status_code=200, ok=True, reason="OK")
    relay_ok.json.return_value = {"status": "sent"}

    with patch("learner_report.notify.channels.smtplib.SMTP") as smtp_cls, \
            patch("learner_report.notify.channels.requests.post", return_value=relay_ok) as post:
        code = cli_main(["--send", "email,whatsapp"])

    out = capsys.readouterr().out
    assert code == 0
    smtp = smtp_cls.return_value.__enter__.return_value
    assert smtp.send_message.call_count == 2
    assert post.call_count == 2
    assert [c.kwargs["json"]["to"] for c in post.call_args_list] == ["919800000001", "919800000002"]
    assert out.rstrip().endswith("sent=4 failed=0")


def test_inspect_data_prints_headers_and_exits(write_config, source_files, capsys):
    reset_logging()

    code = cli_main(["--inspect-data"])

    out = capsys.readouterr().out
    assert code == 0
    assert "CHAPTERS: chapters.xlsx" in out
    assert "cols=['Name', 'Email', 'Phone', 'Chapter Completion'] rows=3" in out
    assert "SUMMARY" not in out
