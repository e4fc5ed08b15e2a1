"""Schnittstelle zum Buchungsspeicher.

Der Speicher hält genau ein Dokument ``{slotKey: Booking}``. Neben dem
Lesen und kompletten Ersetzen bietet jede Implementierung ein bedingtes
Schreiben über einen Versions-Token an. Darauf bauen ``update`` und
``insert_if_absent`` auf: zwei Clients, die gleichzeitig verschiedene Slots
buchen, überschreiben sich dadurch nicht mehr gegenseitig.
"""

import logging
from abc import ABC, abstractmethod
from typing import Callable, Optional

from models.booking import Booking, BookingSet
from booking.errors import StoreUnavailable
from booking.mutator import confirm

logger = logging.getLogger(__name__)

# Wie oft bei einem Versionskonflikt neu gelesen und neu angewendet wird
MAX_CONFLICT_ATTEMPTS = 5

SnapshotCallback = Callable[[BookingSet], None]
Unsubscribe = Callable[[], None]


class BookingStore(ABC):
    """Basisklasse für lokalen und Netzwerk-Speicher."""

    mode: str = ""
    supports_subscription: bool = False

    @abstractmethod
    def read_versioned(self) -> tuple[BookingSet, Optional[str]]:
        """Aktueller Bestand und Versions-Token (None = Dokument existiert nicht)."""

    @abstractmethod
    def replace(self, bookings: BookingSet) -> None:
        """Ersetzt das Dokument bedingungslos. StoreUnavailable bei Fehler."""

    @abstractmethod
    def replace_if_version(self, expected_version: Optional[str],
                           bookings: BookingSet) -> bool:
        """Ersetzt das Dokument nur, wenn es noch ``expected_version`` hat.

        Gibt False bei Versionskonflikt zurück, StoreUnavailable bei Fehler.
        """

    def read(self) -> BookingSet:
        return self.read_versioned()[0]

    def subscribe(self, callback: SnapshotCallback) -> Unsubscribe:
        raise NotImplementedError(
            f"Speicher '{self.mode}' bietet keine Änderungsbenachrichtigung."
        )

    def close(self) -> None:
        pass

    # ─── Änderungen mit Versionsprüfung ───

    def update(self, change: Callable[[BookingSet], BookingSet]) -> BookingSet:
        """Liest, wendet ``change`` an und schreibt bedingt zurück.

        Bei einem Versionskonflikt wird ``change`` auf dem frisch gelesenen
        Bestand erneut ausgeführt; fachliche Fehler aus ``change`` (z.B.
        SlotOccupied) werden unverändert weitergereicht.
        """
        for attempt in range(1, MAX_CONFLICT_ATTEMPTS + 1):
            current, version = self.read_versioned()
            updated = change(current)
            if self.replace_if_version(version, updated):
                return updated
            logger.info(f"Versionskonflikt beim Speichern (Versuch {attempt}), lese neu")
        raise StoreUnavailable(
            f"Speichern nach {MAX_CONFLICT_ATTEMPTS} Versionskonflikten abgebrochen."
        )

    def insert_if_absent(self, key: str, booking: Booking) -> BookingSet:
        """Trägt die Buchung ein, sofern der Slot noch frei ist."""
        return self.update(lambda current: confirm(current, key, booking))
