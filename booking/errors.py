"""Fehlerklassen der Raumbuchung.

Keiner dieser Fehler beendet das Programm; die CLI meldet sie dem Nutzer
und der Datenbestand bleibt unverändert.
"""


class BookingError(Exception):
    """Basisklasse aller fachlichen Buchungsfehler."""


class IncompleteBooking(BookingError):
    """Pflichtfeld (Lehrkraft, Fach, Thema, Klasse) fehlt oder ist leer."""

    def __init__(self, missing: list[str]):
        self.missing = missing
        super().__init__(f"Pflichtfelder fehlen: {', '.join(missing)}")


class SlotOccupied(BookingError):
    """Der Slot ist bereits gebucht."""

    def __init__(self, slot_key: str):
        self.slot_key = slot_key
        super().__init__(f"Slot {slot_key} ist bereits gebucht. Bitte neu auswählen.")


class Unauthorized(BookingError):
    """Falsches Storno-Passwort."""

    def __init__(self):
        super().__init__("Passwort ist nicht korrekt.")


class NotFound(BookingError):
    """Die zu stornierende Buchung existiert nicht (mehr)."""

    def __init__(self, slot_key: str):
        self.slot_key = slot_key
        super().__init__(f"Keine Buchung für Slot {slot_key} gefunden.")


class BookingInPast(BookingError):
    """Die Stunde hat bereits begonnen; vergangene Buchungen bleiben für die Statistik erhalten."""

    def __init__(self, slot_key: str):
        self.slot_key = slot_key
        super().__init__(f"Buchung {slot_key} ist bereits beendet und kann nicht storniert werden.")


class WeekNotBookable(BookingError):
    """Die gewählte Woche ist (noch) nicht für Buchungen freigegeben."""

    def __init__(self, week_number: int):
        self.week_number = week_number
        super().__init__(f"Woche {week_number} ist derzeit nicht buchbar.")


class StoreUnavailable(BookingError):
    """Lesen, Schreiben oder Abonnieren des Speichers ist fehlgeschlagen.

    Wird nicht automatisch wiederholt; der Nutzer kann es erneut versuchen.
    """


class SaveInProgress(BookingError):
    """Es läuft bereits ein Speichervorgang dieses Clients."""

    def __init__(self):
        super().__init__("Speichervorgang läuft bereits. Bitte warten.")
