"""Datenmodell für eine Raumbuchung (Pydantic v2).

Gespeichert wird ein einziges JSON-Objekt ``{slotKey: Booking}``. Die Feldnamen
im gespeicherten Dokument sind camelCase (``teacherName``, ``dateStr``, ...);
in Python werden die snake_case-Namen verwendet.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

MAX_PERIOD = 8


class Booking(BaseModel):
    """Eine bestätigte Reservierung des Raums für genau einen Slot."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    teacher_name: str = Field(alias="teacherName")
    subject: str
    lesson: str                                  # Thema der Stunde (Freitext)
    grade: str                                   # Klasse, z.B. "7b"
    day_name: str = Field(alias="dayName")       # Anzeige, abgeleitet
    date_str: str = Field(alias="dateStr")       # "T/M", abgeleitet
    period: int = Field(ge=1, le=MAX_PERIOD)
    week_number: int = Field(alias="weekNumber", ge=1)
    # Kalenderjahr des Slots; fehlt bei Altdaten
    year: Optional[int] = None

    @property
    def day(self) -> int:
        return int(self.date_str.split("/")[0])

    @property
    def month(self) -> int:
        """Monat 1..12 aus date_str."""
        return int(self.date_str.split("/")[1])

    def to_document(self) -> dict:
        """Serialisiert in die gespeicherte camelCase-Form."""
        return self.model_dump(by_alias=True, exclude_none=True)


# Slot-Key → Buchung. Wird bei jeder Änderung komplett ersetzt.
BookingSet = dict[str, Booking]


def booking_set_from_document(document: Optional[dict]) -> BookingSet:
    """Liest ein gespeichertes Dokument ``{slotKey: {...}}`` ein."""
    if not document:
        return {}
    return {key: Booking.model_validate(value) for key, value in document.items()}


def booking_set_to_document(bookings: BookingSet) -> dict:
    """Gegenstück zu booking_set_from_document."""
    return {key: booking.to_document() for key, booking in bookings.items()}
