"""Gemeinsamer Renderer für die Terminal-Anzeige (Rich-Tabellen in main.py).

Liefert nur Tabellenzeilen als Strings; das Layout übernimmt der Aufrufer.
"""

from datetime import datetime
from typing import TYPE_CHECKING

from analysis.statistics import is_past

if TYPE_CHECKING:
    from analysis.statistics import PastStats
    from models.booking import Booking, BookingSet
    from models.week import SlotInfo

FREE = "frei"


def render_week_rows(
    slots: list["SlotInfo"],
    bookings: "BookingSet",
    periods: int,
) -> list[list[str]]:
    """Gibt Tabellenzeilen für das Wochenraster zurück.

    Jede Zeile: [Tag + Datum, Std. 1, ..., Std. periods]
    Gebuchte Slots zeigen die Lehrkraft, freie Slots "frei".
    """
    rows: list[list[str]] = []
    for i in range(0, len(slots), periods):
        day_slots = slots[i:i + periods]
        first = day_slots[0]
        cells = [f"{first.day_name} {first.date_str}"]
        for slot in day_slots:
            booking = bookings.get(slot.slot_key)
            cells.append(FREE if booking is None else booking.teacher_name)
        rows.append(cells)
    return rows


def render_booking_rows(
    entries: list[tuple[str, "Booking"]],
    now: datetime,
) -> list[list[str]]:
    """Zeilen für Buchungslisten: Slot, Lehrkraft, Fach, Klasse, Tag, Std., Status."""
    rows = []
    for key, b in entries:
        rows.append([
            key,
            b.teacher_name,
            b.subject,
            b.grade,
            f"{b.day_name} {b.date_str}",
            str(b.period),
            "beendet" if is_past(b, now) else "",
        ])
    return rows


def render_teacher_rows(stats: "PastStats") -> list[list[str]]:
    """Zeilen je Lehrkraft, absteigend nach Anzahl Buchungen."""
    rows = []
    ranked = sorted(stats.teacher_stats.items(), key=lambda kv: (-kv[1].count, kv[0]))
    for name, ts in ranked:
        last = ts.dates[0] if ts.dates else None
        rows.append([
            name,
            str(ts.count),
            ", ".join(sorted(ts.subjects)),
            ", ".join(sorted(ts.months)),
            f"{last.day} {last.date} ({last.period}.)" if last else "-",
        ])
    return rows


def render_subject_rows(stats: "PastStats") -> list[list[str]]:
    rows = []
    ranked = sorted(stats.subject_stats.items(),
                    key=lambda kv: (-kv[1].total_bookings, kv[0]))
    for name, ss in ranked:
        details = ", ".join(
            f"{teacher} ({count})"
            for teacher, count in sorted(ss.teacher_details.items(),
                                         key=lambda kv: (-kv[1], kv[0]))
        )
        rows.append([name, str(ss.total_bookings), str(len(ss.teachers)), details])
    return rows
