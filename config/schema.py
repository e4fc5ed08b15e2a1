from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Optional
from enum import Enum


class LogLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


# ─── KALENDER (Schulwoche So–Do) ───

class CalendarConfig(BaseModel):
    """Kalender- und Buchungsfenster-Einstellungen.

    Das Schuljahr beginnt am ersten Sonntag ab dem 1. September und endet
    mit dem letzten Donnerstag bis einschließlich 31. Mai.
    Eine Schulwoche läuft von Sonntag bis Donnerstag.
    """
    # Namen der fünf Schultage, beginnend mit Sonntag
    day_names: list[str] = Field(
        default=["Sonntag", "Montag", "Dienstag", "Mittwoch", "Donnerstag"],
        description="Namen der Schultage (So–Do)")
    # Monatsnamen für Wochen-Labels und Statistik (Januar = Index 0)
    month_names: list[str] = Field(
        default=[
            "Januar", "Februar", "März", "April", "Mai", "Juni",
            "Juli", "August", "September", "Oktober", "November", "Dezember",
        ],
        description="Lokalisierte Monatsnamen")
    # Anzahl Unterrichtsstunden pro Tag
    periods_per_day: int = Field(8, ge=1, le=8,
        description="Stunden pro Tag")
    # Ab welchem Wochentag (So=0) die Folgewoche buchbar ist
    next_week_opens_weekday: int = Field(4, ge=0, le=6,
        description="Folgewoche buchbar ab Wochentag (So=0, Do=4)")
    # Zeitfenster für die Liste kommender Buchungen (Monate)
    future_window_months: int = Field(1, ge=1, le=12,
        description="Vorschau kommender Buchungen in Monaten")

    @field_validator("day_names")
    @classmethod
    def _five_days(cls, v: list[str]) -> list[str]:
        if len(v) != 5:
            raise ValueError(f"Genau 5 Tagesnamen erwartet, erhalten: {len(v)}")
        return v

    @field_validator("month_names")
    @classmethod
    def _twelve_months(cls, v: list[str]) -> list[str]:
        if len(v) != 12:
            raise ValueError(f"Genau 12 Monatsnamen erwartet, erhalten: {len(v)}")
        return v


# ─── FÄCHER + KLASSEN ───

class CatalogConfig(BaseModel):
    """Auswahllisten für das Buchungsformular."""
    # Fächer, die für eine Buchung gewählt werden können
    subjects: list[str] = Field(description="Wählbare Fächer")
    # Klassen (Jahrgang + Zug), z.B. "7b"
    grades: list[str] = Field(description="Wählbare Klassen")

    @model_validator(mode='after')
    def _check_unique(self):
        for label, values in (("Fach", self.subjects), ("Klasse", self.grades)):
            if not values:
                raise ValueError(f"Liste '{label}' darf nicht leer sein.")
            seen = set()
            for v in values:
                if v in seen:
                    raise ValueError(f"{label} '{v}' ist doppelt eingetragen.")
                seen.add(v)
        return self


# ─── SPEICHER ───

class LocalStorageConfig(BaseModel):
    """Lokaler Speicher: eine JSON-Datei mit allen Buchungen."""
    path: str = Field("output/bookings.json",
        description="Pfad der lokalen Buchungsdatei")


class RemoteStorageConfig(BaseModel):
    """Netzwerk-Speicher: ein JSON-Dokument hinter einer HTTP-Schnittstelle."""
    # Basis-URL des Dokumentenspeichers; leer = lokaler Modus
    base_url: Optional[str] = Field(None,
        description="Basis-URL (leer = lokaler Modus)")
    collection: str = Field("school-bookings",
        description="Sammlung")
    document: str = Field("allBookings",
        description="Dokument-ID")
    # Optionaler Bearer-Token
    api_key: Optional[str] = None
    timeout_seconds: float = Field(10.0, gt=0,
        description="HTTP-Timeout (Sekunden)")
    # Abfrageintervall für Änderungsbenachrichtigungen
    poll_interval_seconds: float = Field(5.0, gt=0,
        description="Abfrageintervall für Änderungen (Sekunden)")

    @property
    def is_configured(self) -> bool:
        return bool(self.base_url)


class StorageConfig(BaseModel):
    """Auswahl des Speichers: Netzwerk wenn konfiguriert, sonst lokal."""
    local: LocalStorageConfig = Field(default_factory=LocalStorageConfig)
    remote: RemoteStorageConfig = Field(default_factory=RemoteStorageConfig)


# ─── SICHERHEIT ───

class SecurityConfig(BaseModel):
    """Gemeinsames Passwort zum Stornieren von Buchungen."""
    cancel_secret: str = Field("2410", min_length=1,
        description="Storno-Passwort (für alle Lehrkräfte gleich)")


class LoggingConfig(BaseModel):
    level: LogLevel = Field(LogLevel.INFO)


# ─── GESAMT-CONFIG ───

class BookingConfig(BaseModel):
    """Gesamtkonfiguration der Raumbuchung."""
    # Name der Schule
    school_name: str = Field("Muster-Schule",
        description="Name der Schule")
    # Name des gemeinsam genutzten Raums
    room_name: str = Field("Lernressourcenraum",
        description="Name des Raums")
    # Kalender und Buchungsfenster
    calendar: CalendarConfig = Field(default_factory=CalendarConfig)
    # Fächer- und Klassenlisten
    catalog: CatalogConfig
    # Speicher-Backend
    storage: StorageConfig = Field(default_factory=StorageConfig)
    # Storno-Passwort
    security: SecurityConfig = Field(default_factory=SecurityConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
