from __future__ import annotations

import logging
from collections.abc import Sequence

from ..logging.error_log import ErrorLogBuffer
from ..models.candidate import Candidate
from ..models.delivery import DeliveryRecord, DispatchResult, NotificationRequest
from ..services.progress import ProgressTracker
from .channels import NotificationChannel

"""Batch notification dispatch.

Calls every channel once per candidate, sequentially. Each call is isolated:
a failed delivery is logged and recorded, never retried, and never stops the
remaining calls. The candidate list itself is not touched.
"""

__all__ = [
    "build_requests",
    "dispatch",
]

logger = logging.getLogger(__name__)


def build_requests(
    candidates: Sequence[Candidate], ocs1_date: str | None = None, ocs2_date: str | None = None
) -> list[NotificationRequest]:
    return [NotificationRequest(candidate=c, ocs1_date=ocs1_date, ocs2_date=ocs2_date) for c in candidates]


def _record_failure(error_log: ErrorLogBuffer, request: NotificationRequest, record: DeliveryRecord) -> None:
    error_log.add(
        source=record.channel,
        subject=request.candidate.id,
        card_number=request.candidate.card_number,
        error_type="DELIVERY_ERROR",
        message=record.message,
    )


def dispatch(
    requests: Sequence[NotificationRequest],
    channels: Sequence[NotificationChannel],
    error_log: ErrorLogBuffer | None = None,
) -> DispatchResult:
    """Send every request through every channel.

    Args:
        requests: one entry per candidate
        channels: configured channels (email / whatsapp)
        error_log: optional buffer receiving failed deliveries

    Returns:
        DispatchResult with one DeliveryRecord per (candidate, channel) call
    """
    records: list[DeliveryRecord] = []
    sent = failed = 0
    with ProgressTracker(len(requests)) as progress:
        for request in requests:
            progress.start_item(request.candidate.name)
            for channel in channels:
                try:
                    record = channel.send(request)
                except Exception as e:
                    # 想定外の例外もこの 1 件の失敗として扱い、バッチは継続
                    logger.exception(f"{channel.name}: unexpected failure for card={request.candidate.card_number}")
                    record = DeliveryRecord(
                        channel=channel.name,
                        candidate_id=request.candidate.id,
                        recipient=None,
                        success=False,
                        message=f"unexpected error: {e}",
                    )
                if record.success:
                    sent += 1
                else:
                    failed += 1
                    if error_log is not None:
                        _record_failure(error_log, request, record)
                records.append(record)
            progress.set_postfix(sent=sent, failed=failed)
            progress.finish_item()
    return DispatchResult(records=records)
