from __future__ import annotations

from ..models.candidate import Status
from ..models.delivery import DispatchResult
from ..models.processing_result import ReportResult

"""Summary line rendering.

Format:
SUMMARY sources={loaded}/3 primary_rows={n} matched={m} completed={a}
in_progress={b} no_progress={c} elapsed_sec={s}

When notifications were dispatched, ``sent={x} failed={y}`` is appended.
"""


def _format_seconds(value: float) -> str:
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    if value < 0.01:
        # 指数表記回避
        return f"{value:.6f}".rstrip("0").rstrip(".")
    return str(round(value, 3))


def render_summary_line(result: ReportResult, dispatch: DispatchResult | None = None) -> str:
    """Render the SUMMARY line for a run.

    Examples:
        >>> from datetime import datetime, timezone
        >>> t = datetime(2025, 8, 1, tzinfo=timezone.utc)
        >>> r = ReportResult(candidates=[], sources={}, start_time=t, end_time=t, elapsed_seconds=0.0)
        >>> render_summary_line(r)
        'SUMMARY sources=0/3 primary_rows=0 matched=0 completed=0 in_progress=0 no_progress=0 elapsed_sec=0'
    """
    counts = result.status_counts()
    line = (
        f"SUMMARY sources={result.loaded_sources}/3 "
        f"primary_rows={result.primary_rows} "
        f"matched={len(result.candidates)} "
        f"completed={counts[Status.COMPLETED]} "
        f"in_progress={counts[Status.IN_PROGRESS]} "
        f"no_progress={counts[Status.NO_PROGRESS]} "
        f"elapsed_sec={_format_seconds(result.elapsed_seconds)}"
    )
    if dispatch is not None:
        line += f" sent={dispatch.sent} failed={dispatch.failed}"
    return line
