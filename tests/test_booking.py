"""Tests für Buchen/Stornieren (rein) und den Buchungsablauf (BookingSession)."""

from datetime import date, datetime
from pathlib import Path

import pytest

from config.defaults import default_booking_config
from config.schema import BookingConfig, LocalStorageConfig, StorageConfig
from models.booking import Booking
from models.week import SlotInfo
from booking.errors import (
    BookingInPast,
    IncompleteBooking,
    NotFound,
    SaveInProgress,
    SlotOccupied,
    StoreUnavailable,
    Unauthorized,
    WeekNotBookable,
)
from booking.mutator import (
    SharedSecretAuthorizer,
    build_booking,
    cancel,
    check_slot_consistency,
    confirm,
    validate_details,
)
from booking.session import BookingSession
from storage.local_store import LocalBookingStore

WEEK5_WEDNESDAY = datetime(2025, 10, 8, 10, 0)
WEEK5_THURSDAY = datetime(2025, 10, 9, 10, 0)

DETAILS = {
    "teacher_name": "Müller",
    "subject": "Physik",
    "lesson": "Optik",
    "grade": "7b",
}


def _slot(day: date = date(2025, 10, 8), period: int = 2) -> SlotInfo:
    return SlotInfo(
        slot_key=f"{day.year}-{day.month - 1}-{day.day}-{period}",
        day_name="Mittwoch",
        date_str=f"{day.day}/{day.month}",
        period=period,
        date=day,
    )


def _config(tmp_path: Path) -> BookingConfig:
    config = default_booking_config()
    storage = StorageConfig(local=LocalStorageConfig(path=str(tmp_path / "bookings.json")))
    return config.model_copy(update={"storage": storage})


def _session(tmp_path: Path, now: datetime = WEEK5_WEDNESDAY) -> BookingSession:
    config = _config(tmp_path)
    store = LocalBookingStore(Path(config.storage.local.path))
    session = BookingSession(store, config, clock=lambda: now)
    session.start()
    return session


# ─── REINE FUNKTIONEN ─────────────────────────────────────────────────────────

class TestMutator:
    def test_build_booking_fills_slot_fields(self):
        b = build_booking(_slot(), 5, DETAILS)
        assert b.day_name == "Mittwoch"
        assert b.date_str == "8/10"
        assert b.period == 2
        assert b.week_number == 5
        assert b.year == 2025

    def test_build_booking_strips_whitespace(self):
        b = build_booking(_slot(), 5, {**DETAILS, "teacher_name": "  Müller "})
        assert b.teacher_name == "Müller"

    @pytest.mark.parametrize("field", ["teacher_name", "subject", "lesson", "grade"])
    def test_missing_field(self, field):
        with pytest.raises(IncompleteBooking) as exc:
            validate_details({**DETAILS, field: "  "})
        assert len(exc.value.missing) == 1

    def test_all_missing_fields_reported(self):
        with pytest.raises(IncompleteBooking) as exc:
            validate_details({})
        assert exc.value.missing == ["Lehrkraft", "Fach", "Thema", "Klasse"]

    def test_confirm_free_slot(self):
        current = {}
        b = build_booking(_slot(), 5, DETAILS)
        updated = confirm(current, "2025-9-8-2", b)
        assert updated == {"2025-9-8-2": b}
        assert current == {}

    def test_confirm_occupied_slot(self):
        first = build_booking(_slot(), 5, DETAILS)
        current = {"2025-9-8-2": first}
        second = build_booking(_slot(), 5, {**DETAILS, "teacher_name": "Schmidt"})
        with pytest.raises(SlotOccupied):
            confirm(current, "2025-9-8-2", second)
        assert current["2025-9-8-2"].teacher_name == "Müller"

    def test_confirm_rejects_empty_field(self):
        b = Booking(teacher_name="", subject="Physik", lesson="Optik", grade="7b",
                    day_name="Mittwoch", date_str="8/10", period=2, week_number=5)
        with pytest.raises(IncompleteBooking):
            confirm({}, "2025-9-8-2", b)

    def test_confirm_rejects_key_mismatch(self):
        b = build_booking(_slot(), 5, DETAILS)
        with pytest.raises(ValueError):
            confirm({}, "2025-9-8-3", b)

    def test_slot_consistency_legacy_without_year(self):
        b = Booking(teacher_name="A", subject="Physik", lesson="Optik", grade="7b",
                    day_name="Mittwoch", date_str="8/10", period=2, week_number=5)
        check_slot_consistency("2024-9-8-2", b)

    def test_cancel_removes_exactly_one(self):
        auth = SharedSecretAuthorizer("2410")
        a = build_booking(_slot(period=1), 5, DETAILS)
        b = build_booking(_slot(period=2), 5, DETAILS)
        current = {"2025-9-8-1": a, "2025-9-8-2": b}
        updated = cancel(current, "2025-9-8-1", "2410", auth)
        assert updated == {"2025-9-8-2": b}
        assert len(current) == 2

    def test_cancel_wrong_secret(self):
        auth = SharedSecretAuthorizer("2410")
        current = {"2025-9-8-2": build_booking(_slot(), 5, DETAILS)}
        with pytest.raises(Unauthorized):
            cancel(current, "2025-9-8-2", "0000", auth)
        with pytest.raises(Unauthorized):
            cancel(current, "2025-9-8-2", None, auth)

    def test_cancel_checks_secret_before_existence(self):
        with pytest.raises(Unauthorized):
            cancel({}, "2025-9-8-2", "falsch", SharedSecretAuthorizer("2410"))

    def test_cancel_missing_key(self):
        with pytest.raises(NotFound):
            cancel({}, "2025-9-8-2", "2410", SharedSecretAuthorizer("2410"))

    def test_cancel_past_booking(self):
        auth = SharedSecretAuthorizer("2410")
        current = {"2025-9-8-2": build_booking(_slot(), 5, DETAILS)}
        with pytest.raises(BookingInPast):
            cancel(current, "2025-9-8-2", "2410", auth, now=datetime(2025, 10, 8, 9, 1))
        assert cancel(current, "2025-9-8-2", "2410", auth,
                      now=datetime(2025, 10, 8, 9, 0)) == {}

    def test_cancel_past_checks_secret_first(self):
        current = {"2025-9-8-2": build_booking(_slot(), 5, DETAILS)}
        with pytest.raises(Unauthorized):
            cancel(current, "2025-9-8-2", "falsch", SharedSecretAuthorizer("2410"),
                   now=datetime(2025, 11, 20))

    def test_custom_authorizer(self):
        class AllowAll:
            def authorize_cancel(self, credential):
                return True

        current = {"2025-9-8-2": build_booking(_slot(), 5, DETAILS)}
        assert cancel(current, "2025-9-8-2", None, AllowAll()) == {}


# ─── BUCHUNGSABLAUF (lokaler Modus) ───────────────────────────────────────────

class TestSessionLocal:
    def test_start_with_empty_store(self, tmp_path: Path):
        session = _session(tmp_path)
        assert session.mode == "local"
        assert session.bookings == {}
        assert session.saving is False

    def test_confirm_updates_state_and_file(self, tmp_path: Path):
        session = _session(tmp_path)
        key, booking = session.confirm(5, 3, 2, DETAILS)
        assert key == "2025-9-8-2"
        assert session.bookings == {key: booking}
        assert (tmp_path / "bookings.json").exists()

        reopened = _session(tmp_path)
        assert reopened.bookings[key].teacher_name == "Müller"

    def test_confirmed_booking_appears_once_in_lists(self, tmp_path: Path):
        session = _session(tmp_path)
        key, _ = session.confirm(5, 0, 1, DETAILS)  # Sonntag 5.10., schon vorbei
        assert [k for k, _ in session.all_sorted()] == [key]
        stats = session.past_stats()
        assert stats.total_bookings == 1
        assert stats.teacher_stats["Müller"].count == 1

    def test_week_not_bookable(self, tmp_path: Path):
        session = _session(tmp_path)
        with pytest.raises(WeekNotBookable):
            session.confirm(6, 0, 1, DETAILS)
        with pytest.raises(WeekNotBookable):
            session.confirm(4, 0, 1, DETAILS)

    def test_next_week_from_thursday(self, tmp_path: Path):
        session = _session(tmp_path, now=WEEK5_THURSDAY)
        key, booking = session.confirm(6, 0, 1, DETAILS)
        assert key == "2025-9-12-1"
        assert booking.week_number == 6

    def test_slot_occupied_keeps_existing(self, tmp_path: Path):
        session = _session(tmp_path)
        key, _ = session.confirm(5, 3, 2, DETAILS)
        with pytest.raises(SlotOccupied):
            session.confirm(5, 3, 2, {**DETAILS, "teacher_name": "Schmidt"})
        assert session.bookings[key].teacher_name == "Müller"
        assert session.saving is False

    def test_incomplete_booking_not_stored(self, tmp_path: Path):
        session = _session(tmp_path)
        with pytest.raises(IncompleteBooking):
            session.confirm(5, 3, 2, {**DETAILS, "lesson": ""})
        assert not (tmp_path / "bookings.json").exists()

    def test_period_above_config_rejected(self, tmp_path: Path):
        session = _session(tmp_path)
        cal = session.config.calendar.model_copy(update={"periods_per_day": 6})
        session.config = session.config.model_copy(update={"calendar": cal})
        with pytest.raises(ValueError):
            session.confirm(5, 3, 7, DETAILS)

    def test_cancel_with_secret(self, tmp_path: Path):
        session = _session(tmp_path)
        key1, _ = session.confirm(5, 3, 4, DETAILS)
        key2, _ = session.confirm(5, 3, 5, DETAILS)
        session.cancel(key1, "2410")
        assert list(session.bookings) == [key2]

    def test_cancel_wrong_secret_leaves_file_unchanged(self, tmp_path: Path):
        session = _session(tmp_path)
        key, _ = session.confirm(5, 3, 2, DETAILS)
        before = (tmp_path / "bookings.json").read_bytes()
        with pytest.raises(Unauthorized):
            session.cancel(key, "1234")
        assert (tmp_path / "bookings.json").read_bytes() == before
        assert key in session.bookings

    def test_cancel_finished_booking_rejected(self, tmp_path: Path):
        """Beendete Buchungen bleiben für die Statistik erhalten."""
        now = [datetime(2025, 10, 8, 7, 0)]
        config = _config(tmp_path)
        session = BookingSession(LocalBookingStore(tmp_path / "bookings.json"), config,
                                 clock=lambda: now[0])
        session.start()
        key, _ = session.confirm(5, 3, 1, DETAILS)
        before = (tmp_path / "bookings.json").read_bytes()

        now[0] = datetime(2025, 11, 20, 10, 0)
        with pytest.raises(BookingInPast):
            session.cancel(key, "2410")
        assert key in session.bookings
        assert (tmp_path / "bookings.json").read_bytes() == before
        assert session.past_stats().total_bookings == 1

    def test_cancel_unknown_key(self, tmp_path: Path):
        session = _session(tmp_path)
        with pytest.raises(NotFound):
            session.cancel("2025-9-8-2", "2410")

    def test_week_zero_before_school_year(self, tmp_path: Path):
        """Mittwoch vor dem ersten Sonntag im September: Woche 0 ist nicht buchbar."""
        session = _session(tmp_path, now=datetime(2025, 9, 3, 10, 0))
        assert session.current_week() == 0
        assert session.can_book(0) is False
        assert session.default_week() is None
        with pytest.raises(WeekNotBookable):
            session.confirm(0, 1, 2, DETAILS)
        assert not (tmp_path / "bookings.json").exists()

    def test_overlapping_save_rejected(self, tmp_path: Path):
        session = _session(tmp_path)
        session.saving = True
        with pytest.raises(SaveInProgress):
            session.confirm(5, 3, 2, DETAILS)

    def test_store_failure_leaves_state(self, tmp_path: Path):
        class BrokenStore(LocalBookingStore):
            def replace_if_version(self, expected_version, bookings):
                raise StoreUnavailable("Platte voll")

        config = _config(tmp_path)
        session = BookingSession(BrokenStore(tmp_path / "bookings.json"), config,
                                 clock=lambda: WEEK5_WEDNESDAY)
        session.start()
        with pytest.raises(StoreUnavailable):
            session.confirm(5, 3, 2, DETAILS)
        assert session.bookings == {}
        assert session.saving is False

    def test_default_week_and_slots(self, tmp_path: Path):
        session = _session(tmp_path)
        assert session.default_week() == 5
        assert session.current_week() == 5
        assert len(session.slots(5)) == 40
        assert len(session.weeks()) == 38

    def test_change_listener(self, tmp_path: Path):
        session = _session(tmp_path)
        seen = []
        session.on_change(seen.append)
        session.confirm(5, 3, 2, DETAILS)
        assert len(seen) == 1 and "2025-9-8-2" in seen[0]


# ─── BUCHUNGSABLAUF (Netzwerk-Modus) ──────────────────────────────────────────

class SubscribingStore(LocalBookingStore):
    """Lokale Datei, die sich wie ein Netzwerk-Speicher mit Abonnement verhält."""

    mode = "remote"
    supports_subscription = True

    def __init__(self, path):
        super().__init__(path)
        self.callbacks = []

    def subscribe(self, callback):
        self.callbacks.append(callback)
        return lambda: self.callbacks.remove(callback)

    def push(self):
        for cb in list(self.callbacks):
            cb(self.read())


class TestSessionRemote:
    def test_state_only_from_subscription(self, tmp_path: Path):
        store = SubscribingStore(tmp_path / "bookings.json")
        session = BookingSession(store, _config(tmp_path), clock=lambda: WEEK5_WEDNESDAY)
        session.start()
        key, _ = session.confirm(5, 3, 2, DETAILS)
        assert session.bookings == {}
        store.push()
        assert key in session.bookings

    def test_stop_unsubscribes(self, tmp_path: Path):
        store = SubscribingStore(tmp_path / "bookings.json")
        session = BookingSession(store, _config(tmp_path), clock=lambda: WEEK5_WEDNESDAY)
        session.start()
        assert len(store.callbacks) == 1
        session.stop()
        assert store.callbacks == []
