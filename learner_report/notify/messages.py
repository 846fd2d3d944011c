from __future__ import annotations

from html import escape

from ..models.candidate import NOT_AVAILABLE, Status
from ..models.config_models import ReportConfig
from ..models.delivery import NotificationRequest

"""Message composition for the notification channels.

Both channels share the same inputs (candidate + OCS session dates + report
settings); only the rendering differs: an HTML email body or the ordered
parameter list of the messaging template.
"""

__all__ = [
    "COMPLETION_STEPS",
    "STATUS_MESSAGES",
    "email_html",
    "needs_attendance_reminder",
    "ocs_line",
    "template_parameters",
]

_EXPEDITE_MESSAGE = (
    "We appreciate the effort you are putting in, and we kindly request you to expedite "
    "the completion of the lectures within the allocated timeframe. We would like to hear "
    "about any difficulties or challenges you may be facing."
)

STATUS_MESSAGES: dict[Status, str] = {
    Status.COMPLETED: (
        "Congratulations, we sincerely appreciate the dedication you have shown in completing "
        "the courses. We encourage you to continue with your efforts."
    ),
    Status.IN_PROGRESS: _EXPEDITE_MESSAGE,
    Status.NO_PROGRESS: _EXPEDITE_MESSAGE,
}

ATTENDANCE_REMINDER = (
    "Kindly request you to attend all the Online-Contact-Sessions which is a mandatory "
    "and essential part of your course."
)

NOT_ATTENDED = "not attended"

# 動画視聴後の完了操作手順
COMPLETION_STEPS = (
    "Step 1\N{VARIATION SELECTOR-16}\N{COMBINING ENCLOSING KEYCAP} | Finish Viewing the Video on your Media Player.",
    "Step 2\N{VARIATION SELECTOR-16}\N{COMBINING ENCLOSING KEYCAP} | Click on the \"Complete &amp; Continue\" button located at the "
    "Bottom Right of the media player. (On some devices, you might find this option under the "
    "3 dots \N{VERTICAL ELLIPSIS} Menu button at the Top Right of the media player).",
)
COMPLETION_STEPS_FOOTNOTE = "Kindly Ignore the above message if already done."


def ocs_line(session: int, status: str, date: str | None, sep: str = ":") -> str:
    """``OCS 1 (2025-08-09): Attended``; missing date shows as N/A."""
    return f"OCS {session} ({date or NOT_AVAILABLE}){sep} {status}"


def needs_attendance_reminder(request: NotificationRequest) -> bool:
    c = request.candidate
    return any(s.strip().lower() == NOT_ATTENDED for s in (c.ocs1_status, c.ocs2_status))


def email_html(request: NotificationRequest, report: ReportConfig) -> str:
    """HTML body of the report email (all candidate values escaped)."""
    c = request.candidate
    course = f" - {escape(report.course_name)}" if report.course_name else ""
    parts = [
        f"<h3>Dear {escape(c.name)},</h3>",
        "<br>",
        f"<p>Greetings from {escape(report.organization)}{course}.</p>",
        "<p>Please find the below-mentioned table of your progress for the month of "
        f"{escape(report.period_label)}.</p>",
        f"<p><b>Chapter Completion:</b> {escape(c.chapter_completion)}</p>",
        f"<p><b>Assessment:</b> {c.marks_obtained}/{c.max_marks}</p>",
        f"<p><b>OCS 1 ({escape(request.ocs1_date or NOT_AVAILABLE)}):</b> {escape(c.ocs1_status)}</p>",
        f"<p><b>OCS 2 ({escape(request.ocs2_date or NOT_AVAILABLE)}):</b> {escape(c.ocs2_status)}</p>",
    ]
    if needs_attendance_reminder(request):
        parts.append(f"<p>{ATTENDANCE_REMINDER}</p>")
    parts += [
        f"<p><b>Status:</b> {escape(c.status.value)}</p>",
        f"<p>{STATUS_MESSAGES[c.status]}</p>",
    ]
    if report.support_contact:
        parts.append(
            f"<p>For Technical and Academic challenges please contact - {escape(report.support_contact)}.</p>"
        )
    parts += [
        "<p>Note: We request you to rename yourself to your registered name during online "
        "sessions to ensure your attendance is marked correctly.</p>",
        "<p><b>Note</b>:<ul>" + "".join(f"<li>{step}</li>" for step in COMPLETION_STEPS) + "</ul></p>",
        f"<p>{COMPLETION_STEPS_FOOTNOTE}</p>",
        "<br>",
        "<p>Thanks and Regards,</p>",
        f"<p>{escape(report.organization)} Team</p>",
    ]
    return "\n".join(parts)


def template_parameters(request: NotificationRequest, report: ReportConfig) -> list[str]:
    """Body parameters of the messaging template, in template slot order."""
    c = request.candidate
    return [
        c.name,
        c.chapter_completion,
        str(c.marks_obtained),
        str(c.max_marks),
        str(c.skipped_questions),
        ocs_line(1, c.ocs1_status, request.ocs1_date, sep=" :"),
        ocs_line(2, c.ocs2_status, request.ocs2_date, sep=" :"),
        c.status.value,
        report.period_label,
    ]
