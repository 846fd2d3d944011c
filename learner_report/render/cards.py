from __future__ import annotations

from collections.abc import Sequence
from html import escape
from pathlib import Path

import pandas as pd

from ..models.candidate import Candidate, Status

"""Report card rendering.

One card per candidate: identity, status badge, chapter completion,
"marks out of max", skipped questions and the two OCS attendance rows, each
optionally annotated with the session date.
"""

__all__ = [
    "attendance_badge",
    "export_candidates_csv",
    "render_card_text",
    "render_cards_html",
]

STATUS_BADGES = {
    Status.COMPLETED: "completed",
    Status.IN_PROGRESS: "in-progress",
    Status.NO_PROGRESS: "no-progress",
}

CSV_COLUMNS = [
    "card_number",
    "name",
    "email",
    "phone",
    "chapter_completion",
    "marks_obtained",
    "max_marks",
    "skipped_questions",
    "status",
    "ocs1_status",
    "ocs2_status",
]


def attendance_badge(status: str) -> str:
    """CSS class for an OCS status: attended / not-attended / other."""
    s = status.strip().lower()
    if s == "attended":
        return "attended"
    if s == "not attended":
        return "not-attended"
    return "other"


def _ocs_label(session: int, date: str | None) -> str:
    return f"OCS {session} ({date})" if date else f"OCS {session}"


def render_card_text(candidate: Candidate, ocs1_date: str | None = None, ocs2_date: str | None = None) -> str:
    """Plain-text card for terminal output."""
    c = candidate
    lines = [
        f"#{c.card_number} {c.name}  [{c.status.value}]",
        f"  Email: {c.email}",
    ]
    if c.phone:
        lines.append(f"  Phone: {c.phone}")
    lines += [
        f"  Chapter Completion: {c.chapter_completion}",
        f"  Monthly Assessment Test: {c.marks_obtained} out of {c.max_marks}",
        f"  Skipped Questions: {c.skipped_questions}",
        f"  {_ocs_label(1, ocs1_date)}: {c.ocs1_status}",
        f"  {_ocs_label(2, ocs2_date)}: {c.ocs2_status}",
    ]
    return "\n".join(lines)


def _card_html(c: Candidate, ocs1_date: str | None, ocs2_date: str | None) -> str:
    phone = f'<p class="phone">{escape(c.phone)}</p>' if c.phone else ""
    rows = [
        ("Chapter Completion", escape(c.chapter_completion)),
        ("Monthly Assessment Test", f"{c.marks_obtained} out of {c.max_marks}"),
        ("Skipped Questions", str(c.skipped_questions)),
        (
            escape(_ocs_label(1, ocs1_date)),
            f'<span class="ocs {attendance_badge(c.ocs1_status)}">{escape(c.ocs1_status)}</span>',
        ),
        (
            escape(_ocs_label(2, ocs2_date)),
            f'<span class="ocs {attendance_badge(c.ocs2_status)}">{escape(c.ocs2_status)}</span>',
        ),
    ]
    info = "\n".join(f'    <div class="row"><span class="label">{k}</span><span class="value">{v}</span></div>' for k, v in rows)
    return (
        f'<article class="card" id="{escape(c.id)}">\n'
        f'  <div class="number">{c.card_number}</div>\n'
        f'  <h2>{escape(c.name)}</h2>\n'
        f'  <p class="email">{escape(c.email)}</p>{phone}\n'
        f'  <div class="status {STATUS_BADGES[c.status]}">{escape(c.status.value)}</div>\n'
        f'  <div class="info">\n{info}\n  </div>\n'
        f"</article>"
    )


_STYLE = """
body { font-family: sans-serif; background: #0f172a; color: #f1f5f9; }
.cards { display: grid; grid-template-columns: repeat(auto-fill, minmax(320px, 1fr)); gap: 1.5rem; }
.card { background: #1e293b; border: 1px solid #334155; border-radius: 0.75rem; padding: 1.25rem; }
.status.completed { color: #4ade80; } .status.in-progress { color: #22d3ee; } .status.no-progress { color: #f87171; }
.ocs.attended { color: #4ade80; } .ocs.not-attended { color: #f87171; }
.row { display: flex; justify-content: space-between; }
"""


def render_cards_html(
    candidates: Sequence[Candidate],
    ocs1_date: str | None = None,
    ocs2_date: str | None = None,
    title: str = "Assessment Reporting Assistant",
) -> str:
    """Standalone HTML page with one card per candidate."""
    cards = "\n".join(_card_html(c, ocs1_date, ocs2_date) for c in candidates)
    return (
        "<!DOCTYPE html>\n<html>\n<head>\n<meta charset=\"utf-8\">\n"
        f"<title>{escape(title)}</title>\n<style>{_STYLE}</style>\n</head>\n<body>\n"
        f"<h1>{escape(title)}</h1>\n<section class=\"cards\">\n{cards}\n</section>\n</body>\n</html>\n"
    )


def export_candidates_csv(candidates: Sequence[Candidate], path: Path) -> Path:
    """Write the candidate list as CSV (one row per candidate)."""
    df = pd.DataFrame([c.to_dict() for c in candidates], columns=CSV_COLUMNS)
    path.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(path, index=False, encoding="utf-8")
    return path
