"""Tests für das Konfigurationssystem."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from config.schema import (
    BookingConfig,
    CalendarConfig,
    CatalogConfig,
    LogLevel,
    RemoteStorageConfig,
)
from config.defaults import (
    DEFAULT_SUBJECTS,
    default_booking_config,
    default_grades,
)
from config.manager import (
    ENV_CANCEL_SECRET,
    ENV_REMOTE_API_KEY,
    ENV_REMOTE_URL,
    ConfigManager,
)


# ─── DEFAULT-KONFIGURATION ────────────────────────────────────────────────────

class TestDefaultConfig:
    def test_default_config_valid(self):
        """Vollständige Default-Config ist valide."""
        config = default_booking_config()
        assert config.room_name == "Lernressourcenraum"
        assert config.security.cancel_secret == "2410"
        assert config.logging.level == LogLevel.INFO
        assert not config.storage.remote.is_configured

    def test_default_calendar(self):
        cal = CalendarConfig()
        assert cal.day_names[0] == "Sonntag"
        assert cal.day_names[-1] == "Donnerstag"
        assert cal.periods_per_day == 8
        assert cal.next_week_opens_weekday == 4
        assert cal.month_names[2] == "März"

    def test_default_grades(self):
        """5a-8c (je drei Züge) und 9a-10b (je zwei Züge)."""
        grades = default_grades()
        assert len(grades) == 16
        assert grades[0] == "5a"
        assert grades[-1] == "10b"
        assert "9c" not in grades

    def test_default_subjects_unique(self):
        assert len(DEFAULT_SUBJECTS) == len(set(DEFAULT_SUBJECTS))


# ─── VALIDIERUNG ──────────────────────────────────────────────────────────────

class TestValidation:
    def test_exactly_five_days(self):
        with pytest.raises(ValidationError):
            CalendarConfig(day_names=["So", "Mo", "Di", "Mi"])

    def test_exactly_twelve_months(self):
        with pytest.raises(ValidationError):
            CalendarConfig(month_names=["Januar"])

    def test_periods_range(self):
        with pytest.raises(ValidationError):
            CalendarConfig(periods_per_day=9)
        with pytest.raises(ValidationError):
            CalendarConfig(periods_per_day=0)

    def test_duplicate_subject(self):
        with pytest.raises(ValidationError):
            CatalogConfig(subjects=["Physik", "Physik"], grades=["7b"])

    def test_empty_grades(self):
        with pytest.raises(ValidationError):
            CatalogConfig(subjects=["Physik"], grades=[])

    def test_catalog_required(self):
        with pytest.raises(ValidationError):
            BookingConfig()

    def test_empty_cancel_secret(self):
        with pytest.raises(ValidationError):
            BookingConfig.model_validate({
                "catalog": {"subjects": ["Physik"], "grades": ["7b"]},
                "security": {"cancel_secret": ""},
            })

    def test_remote_configured(self):
        assert RemoteStorageConfig(base_url="https://example.org/api").is_configured
        assert not RemoteStorageConfig(base_url="").is_configured


# ─── YAML SPEICHERN / LADEN ───────────────────────────────────────────────────

class TestConfigManager:
    def test_save_and_load_roundtrip(self, tmp_path: Path):
        """Config speichern, laden und validieren: vollständiger Roundtrip."""
        config = default_booking_config()
        mgr = ConfigManager()
        mgr.CONFIG_DIR = tmp_path
        mgr.DEFAULT_CONFIG = tmp_path / "raumbuchung.yaml"

        mgr.save(config)
        assert mgr.DEFAULT_CONFIG.exists()

        loaded = mgr.load(mgr.DEFAULT_CONFIG, env={})
        assert loaded == config

    def test_saved_yaml_has_comments(self, tmp_path: Path):
        mgr = ConfigManager()
        target = tmp_path / "raumbuchung.yaml"
        mgr.save(default_booking_config(), target)
        text = target.read_text(encoding="utf-8")
        assert text.startswith("# ====")
        assert "Speicher" in text
        assert "RAUMBUCHUNG_CANCEL_SECRET" in text

    def test_first_run_check_no_file(self, tmp_path: Path):
        """first_run_check gibt True zurück wenn keine Config existiert."""
        mgr = ConfigManager()
        mgr.DEFAULT_CONFIG = tmp_path / "nonexistent.yaml"
        assert mgr.first_run_check() is True

    def test_first_run_check_with_file(self, tmp_path: Path):
        """first_run_check gibt False zurück wenn Config existiert."""
        mgr = ConfigManager()
        mgr.CONFIG_DIR = tmp_path
        mgr.DEFAULT_CONFIG = tmp_path / "raumbuchung.yaml"
        mgr.save(default_booking_config())
        assert mgr.first_run_check() is False

    def test_load_nonexistent_raises(self, tmp_path: Path):
        """Laden einer nicht-existenten Datei → FileNotFoundError."""
        mgr = ConfigManager()
        with pytest.raises(FileNotFoundError):
            mgr.load(tmp_path / "not_there.yaml")

    def test_load_invalid_raises_value_error(self, tmp_path: Path):
        target = tmp_path / "raumbuchung.yaml"
        target.write_text("calendar:\n  periods_per_day: 12\n", encoding="utf-8")
        with pytest.raises(ValueError, match="ungültig"):
            ConfigManager().load(target, env={})

    def test_partial_yaml_uses_defaults(self, tmp_path: Path):
        target = tmp_path / "raumbuchung.yaml"
        target.write_text(
            "catalog:\n  subjects: [Physik]\n  grades: [7b]\n", encoding="utf-8"
        )
        config = ConfigManager().load(target, env={})
        assert config.calendar.periods_per_day == 8
        assert config.storage.local.path == "output/bookings.json"


# ─── UMGEBUNGSVARIABLEN ───────────────────────────────────────────────────────

class TestEnvOverrides:
    def test_no_env_keeps_config(self):
        config = default_booking_config()
        assert ConfigManager().apply_env_overrides(config, env={}) == config

    def test_remote_from_env(self):
        env = {ENV_REMOTE_URL: "https://example.org/api", ENV_REMOTE_API_KEY: "geheim"}
        config = ConfigManager().apply_env_overrides(default_booking_config(), env=env)
        assert config.storage.remote.is_configured
        assert config.storage.remote.base_url == "https://example.org/api"
        assert config.storage.remote.api_key == "geheim"

    def test_cancel_secret_from_env(self):
        env = {ENV_CANCEL_SECRET: "9999"}
        config = ConfigManager().apply_env_overrides(default_booking_config(), env=env)
        assert config.security.cancel_secret == "9999"

    def test_empty_env_value_ignored(self):
        env = {ENV_CANCEL_SECRET: ""}
        config = ConfigManager().apply_env_overrides(default_booking_config(), env=env)
        assert config.security.cancel_secret == "2410"

    def test_load_applies_env(self, tmp_path: Path):
        target = tmp_path / "raumbuchung.yaml"
        mgr = ConfigManager()
        mgr.save(default_booking_config(), target)
        config = mgr.load(target, env={ENV_REMOTE_URL: "http://localhost:8080"})
        assert config.storage.remote.base_url == "http://localhost:8080"


# ─── MAIN.PY CLI ──────────────────────────────────────────────────────────────

class TestCli:
    def test_help(self):
        """main.py --help gibt Usage aus."""
        from click.testing import CliRunner
        from main import cli
        runner = CliRunner()
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "Usage" in result.output

    def test_config_show_no_file(self, tmp_path: Path, monkeypatch):
        """config show ohne Konfiguration → Fehlermeldung."""
        from click.testing import CliRunner
        from main import cli
        monkeypatch.setattr(ConfigManager, "DEFAULT_CONFIG", tmp_path / "fehlt.yaml")
        result = CliRunner().invoke(cli, ["config", "show"])
        assert result.exit_code == 1
        assert "Keine Konfiguration" in result.output

    @pytest.mark.parametrize("command", [
        "setup", "weeks", "show", "book", "cancel", "stats", "upcoming", "list",
    ])
    def test_command_exists(self, command):
        from click.testing import CliRunner
        from main import cli
        result = CliRunner().invoke(cli, [command, "--help"])
        assert result.exit_code == 0
