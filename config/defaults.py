from config.schema import (
    BookingConfig,
    CalendarConfig,
    CatalogConfig,
)


# ─── FÄCHER ───
# Reihenfolge = Reihenfolge im Buchungsformular.

DEFAULT_SUBJECTS: list[str] = [
    "Mathematik",
    "Deutsch",
    "Englisch",
    "Physik",
    "Chemie",
    "Biologie",
    "Informatik",
    "Erdkunde",
    "Geschichte",
    "Politik",
    "Religion",
    "Kunst",
    "Musik",
]

# Jahrgang → Züge
DEFAULT_SECTIONS: dict[int, list[str]] = {
    5: ["a", "b", "c"],
    6: ["a", "b", "c"],
    7: ["a", "b", "c"],
    8: ["a", "b", "c"],
    9: ["a", "b"],
    10: ["a", "b"],
}


def default_grades() -> list[str]:
    """Standard-Klassenliste: 5a, 5b, ... 10b."""
    return [
        f"{grade}{section}"
        for grade, sections in DEFAULT_SECTIONS.items()
        for section in sections
    ]


def default_catalog() -> CatalogConfig:
    return CatalogConfig(subjects=list(DEFAULT_SUBJECTS), grades=default_grades())


def default_booking_config() -> BookingConfig:
    """Komplette Default-Konfiguration (lokaler Speicher, Woche So–Do, 8 Stunden)."""
    return BookingConfig(
        school_name="Muster-Schule",
        room_name="Lernressourcenraum",
        calendar=CalendarConfig(),
        catalog=default_catalog(),
    )
