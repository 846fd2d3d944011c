from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any

"""Candidate domain model and Status enum.

A Candidate is the merged, display-ready record built from one matched
(chapter-completion, assessment, attendance) row triple. Values are recomputed
fresh on every run.
"""

__all__ = [
    "Candidate",
    "Status",
    "NOT_AVAILABLE",
]

NOT_AVAILABLE = "N/A"


class Status(Enum):
    """Progress status derived from the completed chapter count.

    - COMPLETED: count > in_progress_max
    - IN_PROGRESS: no_progress_max < count <= in_progress_max
    - NO_PROGRESS: count <= no_progress_max
    """
    COMPLETED = "Completed"
    IN_PROGRESS = "In Progress"
    NO_PROGRESS = "No Progress"


@dataclass(frozen=True)
class Candidate:
    """Merged candidate record.

    ``id`` is unique within one run (join key + primary row ordinal) and
    ``card_number`` is the 1-based position in the original primary sequence.
    """
    id: str
    card_number: int
    name: str
    email: str
    chapter_completion: str  # original display string, e.g. "6/17"
    marks_obtained: int | float
    max_marks: int | float
    skipped_questions: int | float
    status: Status
    ocs1_status: str
    ocs2_status: str
    phone: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Plain dict with the status rendered as its display label."""
        data = asdict(self)
        data["status"] = self.status.value
        return data
