"""Export-Modul: Tabellenzeilen für die Terminal-Anzeige (Rich)."""

from export.tui_renderer import (
    render_booking_rows,
    render_subject_rows,
    render_teacher_rows,
    render_week_rows,
)

__all__ = [
    "render_booking_rows",
    "render_subject_rows",
    "render_teacher_rows",
    "render_week_rows",
]
