from __future__ import annotations

import re
from typing import Any

from ..models.candidate import Status
from ..models.config_models import Thresholds

"""Progress classifier.

extract_count pulls the completed chapter count out of free text
("6/17", "6 OUT OF 17", "Completed 6 chapters"), classify maps it onto a
Status with the configured thresholds.
"""

__all__ = [
    "classify",
    "extract_count",
]

_DIGITS_RE = re.compile(r"\d+", re.ASCII)  # 全角数字等は対象外


def extract_count(value: Any) -> int:
    """First run of decimal digits in ``str(value)``; 0 when there is none.

    None (absent cell) is treated as the empty string.
    """
    text = "" if value is None else str(value)
    m = _DIGITS_RE.search(text)
    if m is None:
        return 0
    return int(m.group(0))


def classify(count: int, thresholds: Thresholds) -> Status:
    """Map a completed chapter count to a Status.

    Branches are evaluated top-down, so with a degenerate configuration
    (no_progress_max >= in_progress_max) In Progress can never be returned:
    counts above in_progress_max are Completed and everything else is
    No Progress.
    """
    if count > thresholds.in_progress_max:
        return Status.COMPLETED
    if count > thresholds.no_progress_max:
        return Status.IN_PROGRESS
    return Status.NO_PROGRESS
