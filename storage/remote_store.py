"""Netzwerk-Speicher: ein JSON-Dokument hinter einer HTTP-Schnittstelle.

Dokument-URL: ``{base_url}/{collection}/{document}``.

- ``GET``  liefert das Dokument samt ``ETag``; 404 = noch nicht angelegt
- ``PUT``  ersetzt das komplette Dokument
- ``If-Match`` / ``If-None-Match: *`` für bedingtes Schreiben, 412 = Konflikt
- ohne ``ETag`` dient ein SHA-256 über den Inhalt als Version; vor dem PUT
  wird dann neu gelesen und verglichen

Änderungen anderer Clients werden per Polling erkannt. Jeder Abonnent erhält
bei jeder Änderung den vollständigen Bestand, auch nach eigenen Schreibvorgängen.
"""

import hashlib
import json
import logging
import threading
from typing import Optional

import requests

from models.booking import BookingSet, booking_set_from_document, booking_set_to_document
from booking.errors import StoreUnavailable
from config.schema import RemoteStorageConfig
from storage.base import BookingStore, SnapshotCallback, Unsubscribe

logger = logging.getLogger(__name__)

# Versionsmarke ohne ETag: Hash über den Dokumentinhalt
CONTENT_VERSION_PREFIX = "sha256:"


class RemoteBookingStore(BookingStore):
    """HTTP-Dokumentenspeicher mit Änderungs-Abonnement."""

    mode = "remote"
    supports_subscription = True

    def __init__(self, config: RemoteStorageConfig,
                 session: Optional[requests.Session] = None):
        if not config.base_url:
            raise ValueError("Netzwerk-Speicher benötigt storage.remote.base_url")
        self.config = config
        self.url = f"{config.base_url.rstrip('/')}/{config.collection}/{config.document}"
        self.session = session or requests.Session()
        self._subscribers: list[SnapshotCallback] = []
        self._subscribers_lock = threading.Lock()
        self._poll_thread: Optional[threading.Thread] = None
        self._stop = threading.Event()

    # ---------- HTTP ----------

    def _headers(self, extra: Optional[dict] = None) -> dict:
        headers = {"Accept": "application/json"}
        if self.config.api_key:
            headers["Authorization"] = f"Bearer {self.config.api_key}"
        if extra:
            headers.update(extra)
        return headers

    def _request(self, method: str, expected=(200,), **kwargs) -> requests.Response:
        try:
            response = self.session.request(
                method,
                self.url,
                headers=self._headers(kwargs.pop("headers", None)),
                timeout=self.config.timeout_seconds,
                **kwargs,
            )
        except requests.RequestException as e:
            logger.error(f"{method} {self.url} fehlgeschlagen: {e}")
            raise StoreUnavailable(f"Speicher nicht erreichbar: {e}") from e
        if response.status_code not in expected:
            logger.error(f"{method} {self.url} -> {response.status_code}: {response.text}")
            raise StoreUnavailable(
                f"{method} {self.url} -> HTTP {response.status_code}"
            )
        return response

    @staticmethod
    def _content_version(document) -> str:
        raw = json.dumps(document, sort_keys=True, ensure_ascii=False)
        return CONTENT_VERSION_PREFIX + hashlib.sha256(raw.encode("utf-8")).hexdigest()

    def _version(self, response: requests.Response, document) -> str:
        """ETag des Servers, sonst ein Inhalts-Hash. Nie ``None`` für ein vorhandenes Dokument."""
        return response.headers.get("ETag") or self._content_version(document)

    # ---------- Lesen / Schreiben ----------

    def _get(self) -> Optional[tuple[BookingSet, str]]:
        response = self._request("GET", expected=(200, 404))
        if response.status_code == 404:
            return None
        try:
            document = response.json()
            bookings = booking_set_from_document(document)
        except ValueError as e:
            logger.error(f"Ungültiges Buchungsdokument von {self.url}: {e}")
            raise StoreUnavailable("Ungültiges Buchungsdokument") from e
        return bookings, self._version(response, document)

    def read_versioned(self) -> tuple[BookingSet, Optional[str]]:
        current = self._get()
        if current is not None:
            return current
        # Dokument anlegen, damit spätere bedingte Schreibvorgänge greifen
        created = self._request(
            "PUT", expected=(200, 201, 204, 412),
            json={}, headers={"If-None-Match": "*"},
        )
        if created.status_code != 412:
            return {}, self._version(created, {})
        # Ein anderer Client war schneller: genau ein weiterer Leseversuch
        current = self._get()
        if current is None:
            logger.error(f"{self.url}: Anlegen meldet 412, Dokument fehlt weiterhin")
            raise StoreUnavailable("Buchungsdokument kann nicht angelegt werden")
        return current

    def replace(self, bookings: BookingSet) -> None:
        self._request("PUT", expected=(200, 201, 204),
                      json=booking_set_to_document(bookings))
        logger.info(f"{len(bookings)} Buchungen gespeichert: {self.url}")

    def replace_if_version(self, expected_version: Optional[str],
                           bookings: BookingSet) -> bool:
        if expected_version is None:
            condition = {"If-None-Match": "*"}
        elif expected_version.startswith(CONTENT_VERSION_PREFIX):
            # Server ohne ETag: Inhalt vergleichen, dann unbedingt schreiben
            current = self._get()
            if current is None or current[1] != expected_version:
                return False
            condition = {}
        else:
            condition = {"If-Match": expected_version}
        response = self._request(
            "PUT", expected=(200, 201, 204, 412),
            json=booking_set_to_document(bookings), headers=condition,
        )
        if response.status_code == 412:
            return False
        logger.info(f"{len(bookings)} Buchungen gespeichert: {self.url}")
        return True

    # ---------- Abonnement ----------

    def subscribe(self, callback: SnapshotCallback) -> Unsubscribe:
        with self._subscribers_lock:
            self._subscribers.append(callback)
            self._stop.clear()
            if self._poll_thread is None or not self._poll_thread.is_alive():
                self._poll_thread = threading.Thread(
                    target=self._poll_loop, name="booking-poll", daemon=True
                )
                self._poll_thread.start()

        def unsubscribe() -> None:
            with self._subscribers_lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)
                if not self._subscribers:
                    self._stop.set()

        return unsubscribe

    def poll_once(self, last_seen: Optional[tuple]) -> Optional[tuple]:
        """Liest einmal und benachrichtigt alle Abonnenten bei einer Änderung.

        ``last_seen`` ist (ETag, Bestand) des letzten Abrufs; zurückgegeben wird
        der neue Stand. Fehler werden protokolliert, der alte Stand bleibt.
        """
        try:
            bookings, version = self.read_versioned()
        except StoreUnavailable as e:
            logger.warning(f"Abruf für Änderungsbenachrichtigung fehlgeschlagen: {e}")
            return last_seen
        seen = (version, bookings)
        if last_seen is not None and last_seen == seen:
            return last_seen
        with self._subscribers_lock:
            subscribers = list(self._subscribers)
        for callback in subscribers:
            try:
                callback(dict(bookings))
            except Exception:
                logger.exception("Fehler in Abonnent für Buchungsänderungen")
        return seen

    def _poll_loop(self) -> None:
        last_seen = self.poll_once(None)
        while not self._stop.wait(self.config.poll_interval_seconds):
            last_seen = self.poll_once(last_seen)

    def close(self) -> None:
        self._stop.set()
        if self._poll_thread is not None:
            self._poll_thread.join(timeout=self.config.timeout_seconds)
        self.session.close()
