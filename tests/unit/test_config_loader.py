from __future__ import annotations

from pathlib import Path

import pytest

from learner_report.config.loader import ConfigError, load_config, validate_thresholds
from learner_report.models.config_models import Thresholds


def test_load_config_defaults(temp_workdir: Path, clean_env):
    cfg_path = temp_workdir / "config" / "report.yml"
    cfg_path.write_text("report:\n  period_label: August 2025\n", encoding="utf-8")

    cfg = load_config(cfg_path)

    assert cfg.thresholds == Thresholds(no_progress_max=4, in_progress_max=14)
    assert cfg.report.subject == "Your Learners Report - AUGUST 2025"
    assert cfg.report.output_directory == "."
    assert cfg.report.organization == "MedTrain"
    assert cfg.sources.chapters is None
    assert cfg.email is None
    assert cfg.whatsapp is None


def test_load_config_full(write_config: Path, clean_env):
    cfg = load_config(write_config)
    assert cfg.sources.chapters == "./data/chapters.xlsx"
    assert cfg.email is not None
    assert cfg.email.host == "smtp.example.com"
    assert cfg.email.sender == "reports@example.com"
    assert cfg.email.password == "secret"
    assert cfg.email.use_starttls is True
    assert cfg.whatsapp is not None
    assert cfg.whatsapp.template_name == "reportassist"
    assert cfg.whatsapp.token == "test-token"
    assert cfg.whatsapp.timeout_seconds == 30.0


def test_env_overrides_credentials(write_config: Path, clean_env, monkeypatch):
    monkeypatch.setenv("SMTP_USER", "smtp-user@example.com")
    monkeypatch.setenv("OUTLOOK_PASS", "from-env")
    monkeypatch.setenv("WHATSAPP_TOKEN", "env-token")

    cfg = load_config(write_config)

    assert cfg.email.user == "smtp-user@example.com"
    assert cfg.email.password == "from-env"
    assert cfg.whatsapp.token == "env-token"


def test_outlook_user_wins_over_smtp_user(write_config: Path, clean_env, monkeypatch):
    monkeypatch.setenv("SMTP_USER", "smtp-user@example.com")
    monkeypatch.setenv("OUTLOOK_USER", "outlook@example.com")
    assert load_config(write_config).email.user == "outlook@example.com"


def test_missing_file(temp_workdir: Path):
    with pytest.raises(ConfigError, match="config file not found"):
        load_config(temp_workdir / "config" / "nope.yml")


def test_invalid_yaml(temp_workdir: Path):
    p = temp_workdir / "config" / "report.yml"
    p.write_text("report: [unclosed\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="invalid yaml"):
        load_config(p)


@pytest.mark.parametrize(
    "text",
    [
        "- just\n- a list\n",
        "thresholds:\n  no_progress_max: 4\n  in_progress_max: 14\n",
        "report:\n  period_label: Aug\n  unknown_key: 1\n",
        "report:\n  period_label: Aug\nthresholds:\n  no_progress_max: -1\n  in_progress_max: 14\n",
        "report:\n  period_label: Aug\nthresholds:\n  no_progress_max: 4\n",
        "report:\n  period_label: Aug\nemail:\n  port: 25\n",
    ],
)
def test_schema_violations(temp_workdir: Path, text: str):
    p = temp_workdir / "config" / "report.yml"
    p.write_text(text, encoding="utf-8")
    with pytest.raises(ConfigError, match="config validation failed"):
        load_config(p)


def test_inverted_thresholds_rejected(temp_workdir: Path):
    p = temp_workdir / "config" / "report.yml"
    p.write_text(
        "report:\n  period_label: Aug\nthresholds:\n  no_progress_max: 14\n  in_progress_max: 4\n",
        encoding="utf-8",
    )
    with pytest.raises(ConfigError, match="invalid thresholds"):
        load_config(p)


def test_validate_thresholds():
    assert validate_thresholds(0, 1) == Thresholds(no_progress_max=0, in_progress_max=1)
    with pytest.raises(ConfigError, match="lower than"):
        validate_thresholds(5, 5)
    with pytest.raises(ConfigError, match=">= 0"):
        validate_thresholds(-1, 3)
    with pytest.raises(ConfigError, match="must be an integer"):
        validate_thresholds(True, 3)
    with pytest.raises(ConfigError, match="must be an integer"):
        validate_thresholds(4, "14")
