from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime

from .candidate import Candidate, Status
from .row_data import RowData

"""Processing result models for one report run.

SourceLoad captures the outcome of decoding one input sheet, ReportResult
aggregates the merge outcome plus everything the SUMMARY line needs.
"""

__all__ = [
    "SourceLoad",
    "ReportResult",
]


@dataclass(frozen=True)
class SourceLoad:
    """Decode outcome for a single source (chapters / assessment / attendance)."""
    label: str  # source label
    file_name: str | None  # None = not supplied
    rows: list[RowData] = field(default_factory=list)
    error: str | None = None  # user-facing decode failure message

    @property
    def ok(self) -> bool:
        return self.error is None and self.file_name is not None


@dataclass(frozen=True)
class ReportResult:
    """Aggregated outcome of one merge run.

    ``error`` is set when the merge itself failed (all-or-nothing: candidates
    are then empty). ``empty_join`` flags the distinct "inputs do not overlap"
    condition, which is not an error.
    """
    candidates: list[Candidate]
    sources: dict[str, SourceLoad]
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float
    error: str | None = None
    empty_join: bool = False
    awaiting_sources: list[str] = field(default_factory=list)  # labels not yet loaded

    @property
    def primary_rows(self) -> int:
        load = self.sources.get("chapters")
        return len(load.rows) if load is not None else 0

    @property
    def source_errors(self) -> dict[str, str]:
        return {label: s.error for label, s in self.sources.items() if s.error}

    @property
    def loaded_sources(self) -> int:
        return sum(1 for s in self.sources.values() if s.ok)

    def status_counts(self) -> dict[Status, int]:
        counts = Counter(c.status for c in self.candidates)
        return {status: counts.get(status, 0) for status in Status}

    @property
    def messages(self) -> list[str]:
        """User-visible messages in display order."""
        out = list(self.source_errors.values())
        if self.error:
            out.append(self.error)
        if self.empty_join:
            out.append(
                "No matching candidates found across all three sheets. "
                "Please ensure candidate names or emails align."
            )
        return out
