from __future__ import annotations

import logging
import math
from collections.abc import Mapping, Sequence
from typing import Any

from ..models.candidate import NOT_AVAILABLE, Candidate
from ..models.config_models import Thresholds
from .classifier import classify, extract_count
from .matching import EMAIL_FIELD, NAME_FIELD, LinkedRows, link_records, resolve

"""Candidate assembly.

Turns one linked (chapters, assessment, attendance) row triple into a
Candidate with field fallbacks applied, and runs the whole
link -> classify -> assemble pipeline for a run (merge_candidates).

Field fallbacks:
- email: chapters row, then assessment row, then "N/A" (attendance row is
  never consulted)
- chapter completion: original display string, "N/A" when absent
- marks / max marks / skipped: numeric, 0 when absent or not a number
- OCS n: "OCS n" then "OCS n Status", "N/A" when both are empty
"""

__all__ = [
    "assemble_candidate",
    "merge_candidates",
    "to_number",
]

logger = logging.getLogger(__name__)

PHONE_FIELD = "Phone"
CHAPTER_COMPLETION_FIELD = "Chapter Completion"
MARKS_OBTAINED_FIELD = "Marks Obtained"
MAX_MARKS_FIELD = "Maximum Marks"
SKIPPED_QUESTIONS_FIELD = "Skipped Questions"
OCS_FIELDS = {
    1: ("OCS 1", "OCS 1 Status"),
    2: ("OCS 2", "OCS 2 Status"),
}


def to_number(value: Any) -> int | float:
    """Lenient numeric coercion; malformed / empty values degrade to 0.

    Integral values come back as int so "18" and 18.0 both display as 18.
    """
    if value is None or isinstance(value, bool):
        return int(bool(value))
    if isinstance(value, (int, float)):
        num = float(value)
    else:
        text = str(value).strip()
        if not text:
            return 0
        try:
            num = float(text)
        except ValueError:
            return 0
    if math.isnan(num) or math.isinf(num):
        return 0
    return int(num) if num.is_integer() else num


def _text_or_na(*values: Any) -> str:
    # 空文字 / 0 / None は次の候補へ
    for v in values:
        if v:
            return str(v)
    return NOT_AVAILABLE


def assemble_candidate(linked: LinkedRows, thresholds: Thresholds) -> Candidate:
    """Build the Candidate for one matched triple."""
    primary, secondary, tertiary = linked.primary, linked.secondary, linked.tertiary

    name = resolve(primary, NAME_FIELD)
    phone = resolve(primary, PHONE_FIELD)
    chapter_value = resolve(primary, CHAPTER_COMPLETION_FIELD)

    ocs = {
        n: _text_or_na(*(resolve(tertiary, f) for f in fields))
        for n, fields in OCS_FIELDS.items()
    }

    return Candidate(
        id=f"{linked.join_key}-{linked.ordinal}",
        card_number=linked.ordinal + 1,
        name=str(name) if name is not None else NOT_AVAILABLE,
        email=_text_or_na(resolve(primary, EMAIL_FIELD), resolve(secondary, EMAIL_FIELD)),
        phone=str(phone) if phone else None,
        chapter_completion=str(chapter_value) if chapter_value is not None else NOT_AVAILABLE,
        marks_obtained=to_number(resolve(secondary, MARKS_OBTAINED_FIELD)),
        max_marks=to_number(resolve(secondary, MAX_MARKS_FIELD)),
        skipped_questions=to_number(resolve(secondary, SKIPPED_QUESTIONS_FIELD)),
        status=classify(extract_count(chapter_value), thresholds),
        ocs1_status=ocs[1],
        ocs2_status=ocs[2],
    )


def merge_candidates(
    primary_rows: Sequence[Mapping[str, Any]],
    secondary_rows: Sequence[Mapping[str, Any]],
    tertiary_rows: Sequence[Mapping[str, Any]],
    thresholds: Thresholds,
) -> list[Candidate]:
    """Join the three sources and return candidates in primary order.

    Pure function: identical inputs and thresholds give identical output.
    """
    candidates = [
        assemble_candidate(linked, thresholds)
        for linked in link_records(primary_rows, secondary_rows, tertiary_rows)
    ]
    logger.debug(
        "merge: primary=%d assessment=%d attendance=%d matched=%d",
        len(primary_rows),
        len(secondary_rows),
        len(tertiary_rows),
        len(candidates),
    )
    return candidates
