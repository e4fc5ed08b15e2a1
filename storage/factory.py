"""Wählt beim Start den Speicher: Netzwerk wenn konfiguriert, sonst lokal."""

import logging
from pathlib import Path
from typing import Optional

import requests

from config.schema import BookingConfig
from storage.base import BookingStore
from storage.local_store import LocalBookingStore
from storage.remote_store import RemoteBookingStore

logger = logging.getLogger(__name__)


def create_store(config: BookingConfig,
                 session: Optional[requests.Session] = None) -> BookingStore:
    remote = config.storage.remote
    if remote.is_configured:
        logger.info(f"Netzwerk-Speicher: {remote.base_url}")
        return RemoteBookingStore(remote, session=session)
    logger.warning(
        "Netzwerk-Speicher nicht konfiguriert, lokaler Modus "
        f"({config.storage.local.path}). Keine Synchronisation zwischen Clients."
    )
    return LocalBookingStore(Path(config.storage.local.path))
