from __future__ import annotations

from dataclasses import dataclass

"""Config dataclasses for the learner report tool.

Domain models for the configuration tree. The loader in
learner_report/config/loader.py builds these from YAML after schema validation.
"""

DEFAULT_NO_PROGRESS_MAX = 4
DEFAULT_IN_PROGRESS_MAX = 14


@dataclass(frozen=True)
class Thresholds:
    """Chapter-count thresholds used by the progress classifier.

    ``no_progress_max < in_progress_max`` is expected. It is enforced at the
    configuration boundary (``validate_thresholds``), not here, so that the
    classifier stays total for any pair of integers.
    """
    no_progress_max: int = DEFAULT_NO_PROGRESS_MAX  # <= this -> No Progress
    in_progress_max: int = DEFAULT_IN_PROGRESS_MAX  # <= this -> In Progress, above -> Completed


@dataclass(frozen=True)
class ReportConfig:
    """Report presentation settings."""
    period_label: str  # e.g. "August 2025"
    subject: str  # email subject line
    output_directory: str  # where --html/--csv relative paths land
    organization: str = "MedTrain"  # sender organisation in greetings / sign-off
    course_name: str | None = None
    support_contact: str | None = None  # phone or address for technical / academic help


@dataclass(frozen=True)
class SourcesConfig:
    """Default input paths (CLI flags win)."""
    chapters: str | None = None
    assessment: str | None = None
    attendance: str | None = None


@dataclass(frozen=True)
class EmailConfig:
    """SMTP transport configuration.

    Environment variables take precedence over user/password (see loader).
    """
    host: str
    port: int = 587
    use_starttls: bool = True
    sender: str | None = None
    user: str | None = None
    password: str | None = None
    timeout_seconds: float = 30.0


@dataclass(frozen=True)
class WhatsAppConfig:
    """Template-messaging relay configuration."""
    endpoint: str
    template_name: str = "reportassist"
    token: str | None = None  # bearer credential
    timeout_seconds: float = 30.0


@dataclass(frozen=True)
class AppConfig:
    """Root configuration object for one processing run."""
    thresholds: Thresholds
    report: ReportConfig
    sources: SourcesConfig
    email: EmailConfig | None = None
    whatsapp: WhatsAppConfig | None = None
