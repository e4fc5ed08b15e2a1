"""Auswertungen über den Buchungsbestand.

- Statistik vergangener Buchungen je Lehrkraft und je Fach
- Liste kommender Buchungen (ab heute, ein Monat)
- Gesamtliste, neueste zuerst

Der Zeitpunkt einer Buchung wird aus ``date_str`` ("T/M") und der Stunde
abgeleitet: Stunde n beginnt um (n + 7) Uhr. Das Jahr kommt aus ``year``;
Altdaten ohne Jahr werden dem Kalenderjahr von ``now`` zugeordnet.
"""

import calendar
import json
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta

from models.booking import Booking, BookingSet

FIRST_PERIOD_HOUR = 8


def booking_datetime(booking: Booking, now: datetime) -> datetime:
    """Beginn der gebuchten Stunde.

    Ein Tag über dem Monatsende läuft in den Folgemonat über (29/2 in einem
    Nicht-Schaltjahr ergibt den 1. März).
    """
    year = booking.year if booking.year is not None else now.year
    day = date(year, booking.month, 1) + timedelta(days=booking.day - 1)
    return datetime.combine(day, time(hour=booking.period + FIRST_PERIOD_HOUR - 1))


def is_past(booking: Booking, now: datetime) -> bool:
    return booking_datetime(booking, now) < now


def add_months(moment: datetime, months: int) -> datetime:
    """Addiert Monate; der Tag wird auf das Monatsende begrenzt (31.1. + 1 → 28./29.2.)."""
    month_index = moment.month - 1 + months
    year = moment.year + month_index // 12
    month = month_index % 12 + 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


@dataclass
class BookingDate:
    """Ein Termin in der Terminliste einer Lehrkraft."""

    date: str
    day: str
    period: int


@dataclass
class TeacherStats:
    """Vergangene Buchungen einer Lehrkraft."""

    count: int = 0
    subjects: set[str] = field(default_factory=set)
    months: set[str] = field(default_factory=set)
    lessons: set[str] = field(default_factory=set)
    # Neueste zuerst
    dates: list[BookingDate] = field(default_factory=list)


@dataclass
class SubjectStats:
    """Vergangene Buchungen eines Fachs."""

    total_bookings: int = 0
    teachers: set[str] = field(default_factory=set)
    teacher_details: dict[str, int] = field(default_factory=dict)


@dataclass
class PastStats:
    teacher_stats: dict[str, TeacherStats] = field(default_factory=dict)
    subject_stats: dict[str, SubjectStats] = field(default_factory=dict)
    total_bookings: int = 0

    def to_dict(self) -> dict:
        """Serialisiert die Statistik (Mengen als sortierte Listen)."""
        return {
            "total_bookings": self.total_bookings,
            "teachers": {
                name: {
                    "count": ts.count,
                    "subjects": sorted(ts.subjects),
                    "months": sorted(ts.months),
                    "lessons": sorted(ts.lessons),
                    "dates": [
                        {"date": d.date, "day": d.day, "period": d.period}
                        for d in ts.dates
                    ],
                }
                for name, ts in self.teacher_stats.items()
            },
            "subjects": {
                name: {
                    "total_bookings": ss.total_bookings,
                    "teachers": sorted(ss.teachers),
                    "teacher_details": dict(ss.teacher_details),
                }
                for name, ss in self.subject_stats.items()
            },
        }

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)


def past_stats(bookings: BookingSet, now: datetime,
               month_names: list[str]) -> PastStats:
    """Statistik aller Buchungen, deren Stunde spätestens ``now`` beginnt."""
    past = [
        b for b in bookings.values()
        if booking_datetime(b, now) <= now
    ]
    stats = PastStats(total_bookings=len(past))
    # Für die Terminliste: neueste Buchung zuerst
    past.sort(key=lambda b: booking_datetime(b, now), reverse=True)

    for b in past:
        ts = stats.teacher_stats.setdefault(b.teacher_name, TeacherStats())
        ts.count += 1
        ts.subjects.add(b.subject)
        ts.months.add(month_names[b.month - 1])
        ts.lessons.add(b.lesson)
        ts.dates.append(BookingDate(date=b.date_str, day=b.day_name, period=b.period))

        ss = stats.subject_stats.setdefault(b.subject, SubjectStats())
        ss.total_bookings += 1
        ss.teachers.add(b.teacher_name)
        ss.teacher_details[b.teacher_name] = ss.teacher_details.get(b.teacher_name, 0) + 1

    return stats


def future_bookings(bookings: BookingSet, now: datetime,
                    months: int = 1) -> list[tuple[str, Booking]]:
    """Buchungen von heute 0 Uhr bis einschließlich heute + ``months``, früheste zuerst."""
    start = datetime.combine(now.date(), time())
    end = add_months(start, months)
    upcoming = [
        (key, b) for key, b in bookings.items()
        if start <= booking_datetime(b, now) <= end
    ]
    upcoming.sort(key=lambda item: booking_datetime(item[1], now))
    return upcoming


def all_bookings_sorted(bookings: BookingSet, now: datetime) -> list[tuple[str, Booking]]:
    """Alle Buchungen, neueste zuerst."""
    return sorted(
        bookings.items(),
        key=lambda item: booking_datetime(item[1], now),
        reverse=True,
    )


def week_bookings(bookings: BookingSet, week_number: int,
                  now: datetime) -> list[tuple[str, Booking]]:
    """Buchungen einer Schulwoche in zeitlicher Reihenfolge."""
    return sorted(
        ((key, b) for key, b in bookings.items() if b.week_number == week_number),
        key=lambda item: booking_datetime(item[1], now),
    )
