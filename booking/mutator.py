"""Änderungen am Buchungsbestand: Buchen und Stornieren.

Alle Funktionen sind rein: sie verändern den übergebenen Bestand nicht, sondern
geben einen neuen Bestand zurück, der anschließend als Ganzes gespeichert wird.
"""

import hmac
from datetime import datetime
from typing import Optional, Protocol

from models.booking import Booking, BookingSet
from models.week import SlotInfo
from analysis.statistics import is_past
from booking.errors import (
    BookingInPast,
    IncompleteBooking,
    NotFound,
    SlotOccupied,
    Unauthorized,
)
from booking.slot_key import parse_slot_key

# Feldname → Anzeigename in Fehlermeldungen
REQUIRED_FIELDS = {
    "teacher_name": "Lehrkraft",
    "subject": "Fach",
    "lesson": "Thema",
    "grade": "Klasse",
}


class CancelAuthorizer(Protocol):
    """Entscheidet, ob mit dem übergebenen Nachweis storniert werden darf."""

    def authorize_cancel(self, credential: Optional[str]) -> bool:
        ...


class SharedSecretAuthorizer:
    """Ein gemeinsames Passwort für alle. Kein Eigentümer je Buchung."""

    def __init__(self, secret: str):
        self._secret = secret

    def authorize_cancel(self, credential: Optional[str]) -> bool:
        if credential is None:
            return False
        return hmac.compare_digest(credential.encode("utf-8"),
                                   self._secret.encode("utf-8"))


def validate_details(details: dict) -> None:
    """IncompleteBooking wenn eines der Pflichtfelder leer ist."""
    missing = [
        label for field, label in REQUIRED_FIELDS.items()
        if not str(details.get(field) or "").strip()
    ]
    if missing:
        raise IncompleteBooking(missing)


def build_booking(slot: SlotInfo, week_number: int, details: dict) -> Booking:
    """Erzeugt eine Buchung aus Formulardaten und dem gewählten Slot."""
    validate_details(details)
    return Booking(
        teacher_name=details["teacher_name"].strip(),
        subject=details["subject"].strip(),
        lesson=details["lesson"].strip(),
        grade=details["grade"].strip(),
        day_name=slot.day_name,
        date_str=slot.date_str,
        period=slot.period,
        week_number=week_number,
        year=slot.date.year,
    )


def check_slot_consistency(key: str, booking: Booking) -> None:
    """Datum und Stunde der Buchung müssen zum Slot-Key passen."""
    day, period = parse_slot_key(key)
    if period != booking.period or (day.day, day.month) != (booking.day, booking.month):
        raise ValueError(
            f"Buchung ({booking.date_str}, Std.{booking.period}) passt nicht zu Slot {key}"
        )
    if booking.year is not None and booking.year != day.year:
        raise ValueError(f"Jahr {booking.year} passt nicht zu Slot {key}")


def confirm(current: BookingSet, key: str, booking: Booking) -> BookingSet:
    validate_details(booking.model_dump())
    check_slot_consistency(key, booking)
    if key in current:
        raise SlotOccupied(key)
    updated = dict(current)
    updated[key] = booking
    return updated


def remove(current: BookingSet, key: str) -> BookingSet:
    if key not in current:
        raise NotFound(key)
    return {k: v for k, v in current.items() if k != key}


def cancel(current: BookingSet, key: str, credential: Optional[str],
           authorizer: CancelAuthorizer,
           now: Optional[datetime] = None) -> BookingSet:
    """Storniert genau eine Buchung.

    Reihenfolge der Prüfungen: Passwort, Slot belegt, und (mit ``now``) ob die
    Stunde noch bevorsteht.
    """
    if not authorizer.authorize_cancel(credential):
        raise Unauthorized()
    booking = current.get(key)
    if booking is not None and now is not None and is_past(booking, now):
        raise BookingInPast(key)
    return remove(current, key)
