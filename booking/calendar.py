"""Schuljahres-Kalender: Wochennummern, Wochenbeginn und Wochenliste.

Das Schuljahr beginnt am ersten Sonntag ab dem 1. September und endet mit dem
letzten Donnerstag bis einschließlich 31. Mai des Folgejahres. Woche 1 ist die
Woche, die mit diesem Sonntag beginnt. Alle Funktionen hängen nur vom
übergebenen "heute" ab und speichern nichts zwischen.
"""

from datetime import date, datetime, timedelta
from typing import Union

from models.week import SlotInfo, Week
from booking.slot_key import slot_key

DateLike = Union[date, datetime]

SCHOOL_DAYS = 5          # So..Do
THURSDAY = 4             # Wochentag-Index mit So=0
ACADEMIC_YEAR_MONTH = 9  # September


def _as_date(value: DateLike) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def weekday_index(day: DateLike) -> int:
    """Wochentag mit Sonntag=0 .. Samstag=6."""
    return (_as_date(day).weekday() + 1) % 7


def start_of_week(day: DateLike) -> date:
    """Sonntag der Woche, die ``day`` enthält."""
    d = _as_date(day)
    return d - timedelta(days=weekday_index(d))


def academic_year(today: DateLike) -> int:
    """Kalenderjahr, in dem das laufende Schuljahr begonnen hat."""
    d = _as_date(today)
    return d.year if d.month >= ACADEMIC_YEAR_MONTH else d.year - 1


def academic_year_start(today: DateLike) -> date:
    september_first = date(academic_year(today), ACADEMIC_YEAR_MONTH, 1)
    offset = (7 - weekday_index(september_first)) % 7
    return september_first + timedelta(days=offset)


def academic_year_end(today: DateLike) -> date:
    """Letzter Donnerstag am oder vor dem 31. Mai des Folgejahres."""
    may_last = date(academic_year(today) + 1, 5, 31)
    return may_last - timedelta(days=(weekday_index(may_last) - THURSDAY) % 7)


def week_number_of(today: DateLike) -> int:
    elapsed = (_as_date(today) - academic_year_start(today)).days
    return elapsed // 7 + 1


def week_start(week_number: int, today: DateLike) -> date:
    """Sonntag der Woche ``week_number``. Keine Bereichsprüfung."""
    return academic_year_start(today) + timedelta(days=(week_number - 1) * 7)


def week_label(week_number: int, start: date, end: date,
               month_names: list[str]) -> str:
    return (
        f"Woche {week_number} - {start.day}. {month_names[start.month - 1]} "
        f"bis {end.day}. {month_names[end.month - 1]} {start.year}"
    )


def enumerate_weeks(today: DateLike, month_names: list[str]) -> list[Week]:
    """Alle Schulwochen des laufenden Schuljahres.

    Eine Woche wird nur aufgenommen, wenn ihr Donnerstag nicht nach dem
    letzten Schultag (academic_year_end) liegt.
    """
    first_sunday = academic_year_start(today)
    last_thursday = academic_year_end(today)

    weeks: list[Week] = []
    start = first_sunday
    while True:
        end = start + timedelta(days=SCHOOL_DAYS - 1)
        if end > last_thursday:
            break
        number = len(weeks) + 1
        weeks.append(Week(
            week_number=number,
            week_start=start,
            week_end=end,
            label=week_label(number, start, end, month_names),
        ))
        start += timedelta(days=7)
    return weeks


def slot_for(week_number: int, day_index: int, period: int,
             today: DateLike, day_names: list[str]) -> SlotInfo:
    """Slot einer Woche; ``day_index`` 0=So .. 4=Do."""
    if not 0 <= day_index < SCHOOL_DAYS:
        raise ValueError(f"Tag muss zwischen 0 (So) und 4 (Do) liegen: {day_index}")
    day = week_start(week_number, today) + timedelta(days=day_index)
    return SlotInfo(
        slot_key=slot_key(day, period),
        day_name=day_names[day_index],
        date_str=f"{day.day}/{day.month}",
        period=period,
        date=day,
    )


def week_slots(week_number: int, today: DateLike, day_names: list[str],
               periods: int) -> list[SlotInfo]:
    """Alle Slots einer Woche, zeilenweise: Tag für Tag, darin Stunde 1..periods."""
    return [
        slot_for(week_number, day_index, period, today, day_names)
        for day_index in range(SCHOOL_DAYS)
        for period in range(1, periods + 1)
    ]
