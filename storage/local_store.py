"""Lokaler Speicher: alle Buchungen in einer JSON-Datei.

Geschrieben wird immer das komplette Dokument, zuerst in eine temporäre Datei
im selben Verzeichnis, die dann per ``os.replace`` die alte Datei ersetzt.
Der Versions-Token ist der SHA-256-Hash des Dateiinhalts.
"""

import hashlib
import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Optional

from models.booking import BookingSet, booking_set_from_document, booking_set_to_document
from booking.errors import StoreUnavailable
from storage.base import BookingStore

logger = logging.getLogger(__name__)


class LocalBookingStore(BookingStore):
    """JSON-Datei ohne Änderungsbenachrichtigung (nur ein Client)."""

    mode = "local"
    supports_subscription = False

    def __init__(self, path: Path):
        self.path = Path(path)
        self._lock = threading.Lock()

    def _read_raw(self) -> Optional[bytes]:
        try:
            return self.path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.error(f"Buchungsdatei nicht lesbar: {self.path}: {e}")
            raise StoreUnavailable(f"Buchungsdatei nicht lesbar: {self.path}") from e

    def read_versioned(self) -> tuple[BookingSet, Optional[str]]:
        raw = self._read_raw()
        if raw is None:
            return {}, None
        try:
            bookings = booking_set_from_document(json.loads(raw.decode("utf-8")))
        except ValueError as e:
            logger.error(f"Buchungsdatei beschädigt: {self.path}: {e}")
            raise StoreUnavailable(f"Buchungsdatei beschädigt: {self.path}") from e
        return bookings, hashlib.sha256(raw).hexdigest()

    def _write(self, bookings: BookingSet) -> None:
        payload = json.dumps(booking_set_to_document(bookings),
                             ensure_ascii=False, indent=2)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.path.parent,
                                            prefix=f".{self.path.name}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(payload)
                os.replace(tmp_name, self.path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            logger.error(f"Speichern fehlgeschlagen: {self.path}: {e}")
            raise StoreUnavailable(f"Speichern fehlgeschlagen: {self.path}") from e
        logger.info(f"{len(bookings)} Buchungen gespeichert: {self.path}")

    def replace(self, bookings: BookingSet) -> None:
        with self._lock:
            self._write(bookings)

    def replace_if_version(self, expected_version: Optional[str],
                           bookings: BookingSet) -> bool:
        with self._lock:
            raw = self._read_raw()
            current_version = hashlib.sha256(raw).hexdigest() if raw is not None else None
            if current_version != expected_version:
                return False
            self._write(bookings)
            return True
