from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..models.config_models import (
    DEFAULT_IN_PROGRESS_MAX,
    DEFAULT_NO_PROGRESS_MAX,
    AppConfig,
    EmailConfig,
    ReportConfig,
    SourcesConfig,
    Thresholds,
    WhatsAppConfig,
)

"""Config loader.

Responsibilities:
- Load YAML config (default config/report.yml)
- Validate against the bundled JSON schema (config_schema.json)
- Apply defaults (thresholds 4/14, SMTP port 587, template "reportassist")
- Resolve credentials: environment variables win over the file
- Enforce no_progress_max < in_progress_max
"""

SCHEMA_PATH = Path(__file__).with_name("config_schema.json")
DEFAULT_CONFIG_PATH = Path("config/report.yml")
DEFAULT_SUBJECT = "Your Learners Report"

# 認証情報の環境変数 (先頭ほど優先)
EMAIL_USER_ENV = ("OUTLOOK_USER", "SMTP_USER")
EMAIL_PASSWORD_ENV = ("OUTLOOK_PASS", "SMTP_PASSWORD")
WHATSAPP_TOKEN_ENV = ("WHATSAPP_TOKEN",)


class ConfigError(Exception):
    pass


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the bundled JSON schema.

    Raises:
        ConfigError: schema file missing / not valid JSON, or the config data
            fails validation (missing keys, wrong types, unknown keys).
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")
    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def validate_thresholds(no_progress_max: Any, in_progress_max: Any) -> Thresholds:
    """Build Thresholds, rejecting negative values and inverted / equal bounds."""
    for label, value in (("no_progress_max", no_progress_max), ("in_progress_max", in_progress_max)):
        if isinstance(value, bool) or not isinstance(value, int):
            raise ConfigError(f"invalid thresholds: {label} must be an integer, got {value!r}")
        if value < 0:
            raise ConfigError(f"invalid thresholds: {label} must be >= 0, got {value}")
    if no_progress_max >= in_progress_max:
        raise ConfigError(
            "invalid thresholds: no_progress_max must be lower than in_progress_max "
            f"(got {no_progress_max} >= {in_progress_max})"
        )
    return Thresholds(no_progress_max=no_progress_max, in_progress_max=in_progress_max)


def _env_first(names: tuple[str, ...], fallback: str | None) -> str | None:
    for name in names:
        val = os.getenv(name)
        if val:
            return val
    return fallback


def _build_email(raw: dict[str, Any] | None) -> EmailConfig | None:
    if raw is None:
        return None
    user = _env_first(EMAIL_USER_ENV, raw.get("user"))
    return EmailConfig(
        host=raw["host"],
        port=raw.get("port", 587),
        use_starttls=raw.get("use_starttls", True),
        sender=raw.get("sender") or user,
        user=user,
        password=_env_first(EMAIL_PASSWORD_ENV, raw.get("password")),
        timeout_seconds=float(raw.get("timeout_seconds", 30)),
    )


def _build_whatsapp(raw: dict[str, Any] | None) -> WhatsAppConfig | None:
    if raw is None:
        return None
    return WhatsAppConfig(
        endpoint=raw["endpoint"],
        template_name=raw.get("template_name", "reportassist"),
        token=_env_first(WHATSAPP_TOKEN_ENV, raw.get("token")),
        timeout_seconds=float(raw.get("timeout_seconds", 30)),
    )


def load_config(path: Path) -> AppConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config validation failed: top level must be a mapping, got {type(data).__name__}")

    _validate_config_schema(data)

    th_raw = data.get("thresholds", {})
    thresholds = validate_thresholds(
        th_raw.get("no_progress_max", DEFAULT_NO_PROGRESS_MAX),
        th_raw.get("in_progress_max", DEFAULT_IN_PROGRESS_MAX),
    )

    report_raw = data["report"]
    period = report_raw["period_label"]
    report = ReportConfig(
        period_label=period,
        subject=report_raw.get("subject", f"{DEFAULT_SUBJECT} - {period.upper()}"),
        output_directory=report_raw.get("output_directory", "."),
        organization=report_raw.get("organization", "MedTrain"),
        course_name=report_raw.get("course_name"),
        support_contact=report_raw.get("support_contact"),
    )

    src_raw = data.get("sources", {})
    sources = SourcesConfig(
        chapters=src_raw.get("chapters"),
        assessment=src_raw.get("assessment"),
        attendance=src_raw.get("attendance"),
    )

    return AppConfig(
        thresholds=thresholds,
        report=report,
        sources=sources,
        email=_build_email(data.get("email")),
        whatsapp=_build_whatsapp(data.get("whatsapp")),
    )
