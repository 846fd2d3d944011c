from __future__ import annotations

from dataclasses import dataclass, field

from .candidate import Candidate

"""Notification boundary models.

NotificationRequest is what a channel consumes (candidate + optional OCS
session dates), DeliveryRecord is what it returns for a single call.
"""

__all__ = [
    "NotificationRequest",
    "DeliveryRecord",
    "DispatchResult",
]


@dataclass(frozen=True)
class NotificationRequest:
    candidate: Candidate
    ocs1_date: str | None = None
    ocs2_date: str | None = None


@dataclass(frozen=True)
class DeliveryRecord:
    """Outcome of one channel call for one candidate."""
    channel: str
    candidate_id: str
    recipient: str | None
    success: bool
    message: str  # human-readable status / provider response
    provider_status: int | None = None  # HTTP status for relay channels


@dataclass(frozen=True)
class DispatchResult:
    """Outcome of one dispatch batch."""
    records: list[DeliveryRecord] = field(default_factory=list)

    @property
    def sent(self) -> int:
        return sum(1 for r in self.records if r.success)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.records if not r.success)
