"""Domain models for the learner report tool."""

from .candidate import NOT_AVAILABLE, Candidate, Status
from .config_models import (
    AppConfig,
    EmailConfig,
    ReportConfig,
    SourcesConfig,
    Thresholds,
    WhatsAppConfig,
)
from .delivery import DeliveryRecord, DispatchResult, NotificationRequest
from .processing_result import ReportResult, SourceLoad
from .row_data import RowData

__all__ = [
    # Configuration models
    "AppConfig",
    "EmailConfig",
    "ReportConfig",
    "SourcesConfig",
    "Thresholds",
    "WhatsAppConfig",
    # Processing models
    "Candidate",
    "NOT_AVAILABLE",
    "RowData",
    "ReportResult",
    "SourceLoad",
    "Status",
    # Notification models
    "DeliveryRecord",
    "DispatchResult",
    "NotificationRequest",
]
