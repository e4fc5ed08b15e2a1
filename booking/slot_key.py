"""Slot-Keys: eindeutiger String je Kalendertag × Stunde.

Format ``"{jahr}-{monat0}-{tag}-{stunde}"`` mit 0-basiertem Monat
(z.B. ``"2025-2-10-2"`` für den 10. März 2025, 2. Stunde). Das Format ist
Teil der gespeicherten Daten und darf sich nicht ändern.
"""

from datetime import date

from models.booking import MAX_PERIOD

SEPARATOR = "-"


def _check_period(period: int) -> None:
    if not 1 <= period <= MAX_PERIOD:
        raise ValueError(f"Stunde muss zwischen 1 und {MAX_PERIOD} liegen: {period}")


def slot_key(day: date, period: int) -> str:
    _check_period(period)
    return SEPARATOR.join(
        str(part) for part in (day.year, day.month - 1, day.day, period)
    )


def parse_slot_key(key: str) -> tuple[date, int]:
    """Zerlegt einen Slot-Key in (Datum, Stunde). ValueError bei ungültigem Key."""
    parts = key.split(SEPARATOR)
    if len(parts) != 4:
        raise ValueError(f"Ungültiger Slot-Key: {key!r}")
    try:
        year, month0, day, period = (int(p) for p in parts)
    except ValueError:
        raise ValueError(f"Ungültiger Slot-Key: {key!r}") from None
    _check_period(period)
    return date(year, month0 + 1, day), period
