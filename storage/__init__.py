"""Speicher-Backends für den Buchungsbestand (lokale JSON-Datei oder HTTP-Dokument)."""

from .base import BookingStore
from .factory import create_store
from .local_store import LocalBookingStore
from .remote_store import RemoteBookingStore

__all__ = [
    "BookingStore",
    "create_store",
    "LocalBookingStore",
    "RemoteBookingStore",
]
