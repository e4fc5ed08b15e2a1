"""Abgeleitete Kalender-Objekte: Schulwoche und einzelner Slot im Wochenraster."""

from dataclasses import dataclass
from datetime import date


@dataclass(frozen=True)
class Week:
    """Eine Schulwoche (So–Do), nummeriert ab Beginn des Schuljahres.

    Wird bei Bedarf aus dem heutigen Datum erzeugt und nie gespeichert.
    """

    # 1-basiert; Woche 1 beginnt am ersten Sonntag ab 1. September
    week_number: int
    week_start: date   # Sonntag
    week_end: date     # Donnerstag
    label: str

    def __str__(self) -> str:
        return self.label


@dataclass(frozen=True)
class SlotInfo:
    """Eine Zelle im Wochenraster: Kalendertag × Stunde."""

    slot_key: str
    day_name: str
    date_str: str      # "T/M", z.B. "10/3"
    period: int
    date: date

    def __repr__(self) -> str:
        return f"SlotInfo({self.day_name} {self.date_str}, Std.{self.period})"
