"""BookingSession: verbindet Kalender, Buchungsregeln, Speicher und Statistik.

Hält den zuletzt bekannten Buchungsbestand eines Clients.

- lokaler Modus: der Bestand wird nach erfolgreichem Speichern übernommen
- Netzwerk-Modus: der Bestand wird ausschließlich über das Abonnement
  aktualisiert, auch nach eigenen Schreibvorgängen

Während gespeichert wird ist ``saving`` True; ein zweiter Speichervorgang
desselben Clients wird dann mit SaveInProgress abgelehnt.
"""

import logging
import threading
from contextlib import contextmanager
from datetime import datetime
from typing import Callable, Optional

from models.booking import Booking, BookingSet
from models.week import SlotInfo, Week
from analysis.statistics import (
    PastStats,
    all_bookings_sorted,
    future_bookings,
    past_stats,
    week_bookings,
)
from booking.calendar import enumerate_weeks, slot_for, week_number_of, week_slots
from booking.eligibility import can_book_in_week, default_week
from booking.errors import SaveInProgress, StoreUnavailable, WeekNotBookable
from booking.mutator import CancelAuthorizer, SharedSecretAuthorizer, build_booking, cancel
from config.schema import BookingConfig
from storage.base import BookingStore, Unsubscribe

logger = logging.getLogger(__name__)


class BookingSession:
    """Buchungs-Ablauf eines Clients."""

    def __init__(self, store: BookingStore, config: BookingConfig,
                 clock: Callable[[], datetime] = datetime.now,
                 authorizer: Optional[CancelAuthorizer] = None):
        self.store = store
        self.config = config
        self.clock = clock
        self.authorizer = authorizer or SharedSecretAuthorizer(
            config.security.cancel_secret
        )
        self.saving = False
        self._bookings: BookingSet = {}
        self._state_lock = threading.Lock()
        self._unsubscribe: Optional[Unsubscribe] = None
        self._listeners: list[Callable[[BookingSet], None]] = []

    @property
    def mode(self) -> str:
        return self.store.mode

    @property
    def bookings(self) -> BookingSet:
        """Kopie des aktuellen Bestands."""
        with self._state_lock:
            return dict(self._bookings)

    # ─── Start / Stop ───

    def start(self) -> None:
        """Lädt den Bestand; im Netzwerk-Modus zusätzlich Abonnement starten."""
        self._apply(self.store.read())
        if self.store.supports_subscription:
            self._unsubscribe = self.store.subscribe(self._apply)

    def stop(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self.store.close()

    def on_change(self, listener: Callable[[BookingSet], None]) -> None:
        self._listeners.append(listener)

    def _apply(self, bookings: BookingSet) -> None:
        with self._state_lock:
            self._bookings = dict(bookings)
        for listener in self._listeners:
            listener(dict(bookings))

    @contextmanager
    def _saving(self):
        if self.saving:
            raise SaveInProgress()
        self.saving = True
        try:
            yield
        except StoreUnavailable as e:
            logger.error(f"Speichern fehlgeschlagen ({self.mode}): {e}")
            raise
        finally:
            self.saving = False

    def _after_write(self, updated: BookingSet) -> None:
        if not self.store.supports_subscription:
            self._apply(updated)

    # ─── Kalender ───

    def weeks(self) -> list[Week]:
        return enumerate_weeks(self.clock(), self.config.calendar.month_names)

    def current_week(self) -> int:
        return week_number_of(self.clock())

    def can_book(self, week_number: int) -> bool:
        return can_book_in_week(week_number, self.clock(),
                                self.config.calendar.next_week_opens_weekday)

    def default_week(self) -> Optional[int]:
        return default_week(self.clock(), self.weeks(),
                            self.config.calendar.next_week_opens_weekday)

    def slots(self, week_number: int) -> list[SlotInfo]:
        cal = self.config.calendar
        return week_slots(week_number, self.clock(), cal.day_names, cal.periods_per_day)

    # ─── Buchen / Stornieren ───

    def confirm(self, week_number: int, day_index: int, period: int,
                details: dict) -> tuple[str, Booking]:
        """Bucht einen Slot. Gibt (Slot-Key, Buchung) zurück."""
        now = self.clock()
        cal = self.config.calendar
        if period > cal.periods_per_day:
            raise ValueError(f"Stunde {period} > {cal.periods_per_day} Stunden pro Tag")
        if not self.can_book(week_number):
            raise WeekNotBookable(week_number)
        slot = slot_for(week_number, day_index, period, now, cal.day_names)
        booking = build_booking(slot, week_number, details)
        with self._saving():
            updated = self.store.insert_if_absent(slot.slot_key, booking)
        self._after_write(updated)
        logger.info(
            f"Gebucht: {slot.slot_key} ({booking.teacher_name}, {booking.subject})"
        )
        return slot.slot_key, booking

    def cancel(self, key: str, credential: Optional[str]) -> None:
        """Storniert die Buchung ``key`` mit dem Storno-Passwort.

        Nur bevorstehende Buchungen; beendete lösen BookingInPast aus.
        """
        with self._saving():
            updated = self.store.update(
                lambda current: cancel(current, key, credential, self.authorizer,
                                       now=self.clock())
            )
        self._after_write(updated)
        logger.info(f"Storniert: {key}")

    # ─── Auswertungen ───

    def past_stats(self) -> PastStats:
        return past_stats(self.bookings, self.clock(), self.config.calendar.month_names)

    def upcoming(self) -> list[tuple[str, Booking]]:
        return future_bookings(self.bookings, self.clock(),
                               self.config.calendar.future_window_months)

    def all_sorted(self) -> list[tuple[str, Booking]]:
        return all_bookings_sorted(self.bookings, self.clock())

    def week_bookings(self, week_number: int) -> list[tuple[str, Booking]]:
        return week_bookings(self.bookings, week_number, self.clock())
