"""Report card rendering (terminal text, HTML page, CSV export)."""

from .cards import attendance_badge, export_candidates_csv, render_card_text, render_cards_html

__all__ = [
    "attendance_badge",
    "export_candidates_csv",
    "render_card_text",
    "render_cards_html",
]
