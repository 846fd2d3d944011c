from __future__ import annotations

import threading
from datetime import UTC, datetime
from pathlib import Path

from ..models.error_record import ErrorRecord

"""Run-scoped error log.

Decode failures (one per source file) and delivery failures (one per
candidate and channel) are kept in memory while the run is in progress and
written once at the end as JSON Lines, ``logs/errors-YYYYMMDD-HHMMSS.log``
(UTC, stamped when the run started). A clean run leaves no file behind.
"""

__all__ = [
    "ErrorRecord",
    "ErrorLogBuffer",
]

LOGS_DIR = Path("./logs")
TIMESTAMP_FMT = "%Y%m%d-%H%M%S"


class ErrorLogBuffer:
    """Collects ErrorRecords; flush() appends them to the run's log file.

    The three sources are decoded on worker threads, so appends are guarded.
    """

    def __init__(self, logs_dir: Path | None = None) -> None:
        self._lock = threading.Lock()
        self._pending: list[ErrorRecord] = []
        self.file_path = (logs_dir or LOGS_DIR) / f"errors-{datetime.now(UTC).strftime(TIMESTAMP_FMT)}.log"

    @property
    def records(self) -> list[ErrorRecord]:
        with self._lock:
            return list(self._pending)

    def append(self, record: ErrorRecord) -> None:
        with self._lock:
            self._pending.append(record)

    def add(self, *, source: str, subject: str, error_type: str, message: str, card_number: int = -1) -> ErrorRecord:
        """Create, buffer and return a record stamped now."""
        rec = ErrorRecord.create(
            source=source,
            subject=subject,
            card_number=card_number,
            error_type=error_type,
            message=message,
        )
        self.append(rec)
        return rec

    def __len__(self) -> int:
        with self._lock:
            return len(self._pending)

    def flush(self) -> Path | None:
        """Write pending records; None (and no file) when nothing is pending."""
        with self._lock:
            pending, self._pending = self._pending, []
        if not pending:
            return None
        self.file_path.parent.mkdir(parents=True, exist_ok=True)
        with self.file_path.open("a", encoding="utf-8") as f:
            f.writelines(r.to_json_line() + "\n" for r in pending)
        return self.file_path
