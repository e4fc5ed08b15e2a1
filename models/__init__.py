from models.booking import (
    Booking,
    BookingSet,
    MAX_PERIOD,
    booking_set_from_document,
    booking_set_to_document,
)
from models.week import SlotInfo, Week

__all__ = [
    "Booking",
    "BookingSet",
    "MAX_PERIOD",
    "booking_set_from_document",
    "booking_set_to_document",
    "SlotInfo",
    "Week",
]
