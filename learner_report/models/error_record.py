from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

"""ErrorRecord model for error logging.

Structured record for the JSON Lines error log. Decode failures use the source
label as ``source`` and ``subject="<FILE_LEVEL>"``; delivery failures use the
channel name as ``source`` and the candidate id as ``subject``.
"""

__all__ = [
    "ErrorRecord",
]


@dataclass(frozen=True)
class ErrorRecord:
    """Structured error record for JSON Lines logging.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        source: source label (chapters/assessment/attendance) or channel name
        subject: file name or candidate id the error is about
        card_number: candidate card number, -1 when not candidate-specific
        error_type: Error classification in UPPER_SNAKE_CASE format
        message: underlying error message
    """
    timestamp: str  # ISO8601 UTC
    source: str
    subject: str
    card_number: int  # 不明な場合 -1
    error_type: str  # UPPER_SNAKE
    message: str

    @staticmethod
    def create(source: str, subject: str, card_number: int, error_type: str, message: str) -> ErrorRecord:
        """Create a new ErrorRecord stamped with the current UTC time."""
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return ErrorRecord(
            timestamp=ts,
            source=source,
            subject=subject,
            card_number=card_number,
            error_type=error_type,
            message=message,
        )

    def to_json_line(self) -> str:
        """Serialize to one JSON line (no extra keys)."""
        return json.dumps(asdict(self), ensure_ascii=False)
