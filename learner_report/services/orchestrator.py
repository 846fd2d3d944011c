from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import UTC, datetime
from pathlib import Path

from ..excel.reader import SheetDecodeError, read_sheet
from ..logging.error_log import ErrorLogBuffer
from ..models.config_models import Thresholds
from ..models.processing_result import ReportResult, SourceLoad
from .assembler import merge_candidates

"""Run orchestration for the learner report tool.

Coordinates one processing run:
1. decode the three sources (independently, concurrently)
2. merge + classify once all three are loaded
3. fold the outcome into a ReportResult following the error taxonomy:
   - decode failure: per source, rows cleared, other sources unaffected
   - empty join: distinct, non-error condition
   - merge failure: caught once per run, partial output discarded
"""

logger = logging.getLogger(__name__)

CHAPTERS = "chapters"
ASSESSMENT = "assessment"
ATTENDANCE = "attendance"
SOURCE_LABELS = (CHAPTERS, ASSESSMENT, ATTENDANCE)

SOURCE_TITLES = {
    CHAPTERS: "Sheet 1 (Chapter Completion)",
    ASSESSMENT: "Sheet 2 (Monthly Assessment)",
    ATTENDANCE: "Sheet 3 (OCS Attendance)",
}


class ProcessingError(Exception):
    """Base exception for processing errors."""
    pass


def _decode_failure_message(label: str) -> str:
    title = SOURCE_TITLES.get(label, label)
    return f"Failed to parse {title}. Please check the file format and column names."


def load_source(label: str, path: Path | None, error_log: ErrorLogBuffer | None = None) -> SourceLoad:
    """Decode one source; decode errors become a per-source failure, never an exception."""
    if path is None:
        return SourceLoad(label=label, file_name=None)
    try:
        sheet = read_sheet(path)
    except SheetDecodeError as e:
        logger.warning(f"{label}: {e}")
        if error_log is not None:
            error_log.add(source=label, subject=path.name, error_type="DECODE_ERROR", message=str(e))
        return SourceLoad(label=label, file_name=path.name, rows=[], error=_decode_failure_message(label))
    logger.info(f"{label}: {path.name} sheet={sheet.sheet_name} rows={len(sheet.rows)}")
    logger.debug(f"{label}: columns={sheet.columns}")
    return SourceLoad(label=label, file_name=path.name, rows=sheet.rows)


def load_sources(
    paths: dict[str, Path | None], error_log: ErrorLogBuffer | None = None
) -> dict[str, SourceLoad]:
    """Decode all three sources concurrently (each writes only its own SourceLoad)."""
    unknown = set(paths) - set(SOURCE_LABELS)
    if unknown:
        raise ProcessingError(f"unknown source labels: {sorted(unknown)}")
    with ThreadPoolExecutor(max_workers=len(SOURCE_LABELS)) as pool:
        futures = {
            label: pool.submit(load_source, label, paths.get(label), error_log)
            for label in SOURCE_LABELS
        }
        return {label: fut.result() for label, fut in futures.items()}


def build_report(sources: dict[str, SourceLoad], thresholds: Thresholds) -> ReportResult:
    """Merge the loaded sources into a ReportResult (full recomputation)."""
    start_time = datetime.now(UTC)

    def _finish(**kwargs) -> ReportResult:
        end_time = datetime.now(UTC)
        return ReportResult(
            sources=sources,
            start_time=start_time,
            end_time=end_time,
            elapsed_seconds=(end_time - start_time).total_seconds(),
            **kwargs,
        )

    awaiting = [
        label for label in SOURCE_LABELS
        if label not in sources or not sources[label].ok or not sources[label].rows
    ]
    if awaiting:
        logger.info(f"merge skipped, waiting for sources: {', '.join(awaiting)}")
        return _finish(candidates=[], awaiting_sources=awaiting)

    try:
        candidates = merge_candidates(
            sources[CHAPTERS].rows,
            sources[ASSESSMENT].rows,
            sources[ATTENDANCE].rows,
            thresholds,
        )
    except Exception as e:
        # all-or-nothing: 途中結果は破棄
        logger.exception("merge failed")
        return _finish(candidates=[], error=f"An error occurred during data processing: {e}")

    if not candidates:
        logger.warning("no matching candidates across all three sheets")
    return _finish(candidates=candidates, empty_join=not candidates)


def recompute(result: ReportResult, thresholds: Thresholds) -> ReportResult:
    """Re-run the merge on the same three row sets with new thresholds."""
    return build_report(result.sources, thresholds)


def process_all(
    paths: dict[str, Path | None],
    thresholds: Thresholds,
    error_log: ErrorLogBuffer | None = None,
) -> ReportResult:
    """Load the three sources and build the report.

    Args:
        paths: source label -> file path (None = not supplied)
        thresholds: active threshold configuration
        error_log: optional buffer receiving decode failures

    Returns:
        ReportResult; per-source decode failures are carried inside it.
    """
    sources = load_sources(paths, error_log)
    return build_report(sources, thresholds)
