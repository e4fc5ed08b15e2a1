"""Buchungsfenster: welche Woche nimmt heute neue Buchungen an?

- vergangene Wochen: nie
- Woche 0 (Tage vor dem ersten Sonntag im September): nie
- laufende Woche: immer
- Folgewoche: ab Donnerstag der laufenden Woche
- alle späteren Wochen: nie
"""

from typing import Optional

from models.week import Week
from booking.calendar import (
    DateLike,
    THURSDAY,
    week_number_of,
    week_start,
    weekday_index,
)


def week_offset(week_number: int, today: DateLike) -> int:
    """Abstand in Wochen zwischen ``week_number`` und der laufenden Woche."""
    current_start = week_start(week_number_of(today), today)
    selected_start = week_start(week_number, today)
    return round((selected_start - current_start).days / 7)


def can_book_in_week(week_number: int, today: DateLike,
                     opens_weekday: int = THURSDAY) -> bool:
    if week_number < 1:
        return False
    diff = week_offset(week_number, today)
    if diff < 0:
        return False
    if diff == 0:
        return True
    if diff == 1:
        return weekday_index(today) >= opens_weekday
    return False


def default_week(today: DateLike, weeks: list[Week],
                 opens_weekday: int = THURSDAY) -> Optional[int]:
    """Vorauswahl beim Start: laufende Woche, sonst Folgewoche, sonst erste buchbare."""
    current = week_number_of(today)
    for candidate in (current, current + 1):
        if can_book_in_week(candidate, today, opens_weekday):
            return candidate
    for week in weeks:
        if can_book_in_week(week.week_number, today, opens_weekday):
            return week.week_number
    return None
