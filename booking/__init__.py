"""Buchungs-Kern: Kalender, Buchungsfenster, Slot-Keys und Buchungsänderungen."""

from .calendar import (
    academic_year_end,
    academic_year_start,
    enumerate_weeks,
    slot_for,
    week_number_of,
    week_slots,
    week_start,
)
from .eligibility import can_book_in_week, default_week
from .errors import (
    BookingError,
    BookingInPast,
    IncompleteBooking,
    NotFound,
    SaveInProgress,
    SlotOccupied,
    StoreUnavailable,
    Unauthorized,
    WeekNotBookable,
)
from .mutator import SharedSecretAuthorizer, build_booking, cancel, confirm
from .slot_key import parse_slot_key, slot_key

__all__ = [
    "academic_year_end",
    "academic_year_start",
    "enumerate_weeks",
    "slot_for",
    "week_number_of",
    "week_slots",
    "week_start",
    "can_book_in_week",
    "default_week",
    "BookingError",
    "BookingInPast",
    "IncompleteBooking",
    "NotFound",
    "SaveInProgress",
    "SlotOccupied",
    "StoreUnavailable",
    "Unauthorized",
    "WeekNotBookable",
    "SharedSecretAuthorizer",
    "build_booking",
    "cancel",
    "confirm",
    "parse_slot_key",
    "slot_key",
]
