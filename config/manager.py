"""Konfigurationsmanager: Laden, Speichern und Validieren.

Nutzt ruamel.yaml für YAML-Serialisierung mit Kommentaren.
Einzelne Werte lassen sich über Umgebungsvariablen überschreiben, damit
Zugangsdaten für den Netzwerk-Speicher nicht in der YAML-Datei stehen müssen.
"""

import json
import os
from datetime import date
from pathlib import Path
from typing import Mapping, Optional

from rich.console import Console
from ruamel.yaml import YAML
from ruamel.yaml.comments import CommentedMap

from config.schema import BookingConfig

console = Console()
yaml = YAML()
yaml.default_flow_style = False
yaml.width = 120


# ─── UMGEBUNGSVARIABLEN ───

ENV_REMOTE_URL = "RAUMBUCHUNG_REMOTE_URL"
ENV_REMOTE_API_KEY = "RAUMBUCHUNG_REMOTE_API_KEY"
ENV_CANCEL_SECRET = "RAUMBUCHUNG_CANCEL_SECRET"


# ─── YAML-KOMMENTAR-AUFBAU ───

_YAML_HEADER = f"""\
# ============================================
# Raumbuchung - Konfiguration
# Version: 1.0
# Erstellt: {date.today().isoformat()}
# ============================================
"""

_SECTION_COMMENTS = {
    "calendar": (
        "Kalender",
        "Schulwoche So–Do. Die Folgewoche wird ab next_week_opens_weekday buchbar\n"
        "(So=0, Do=4). Weiter entfernte Wochen sind nie buchbar.",
    ),
    "catalog": (
        "Fächer & Klassen",
        None,
    ),
    "storage": (
        "Speicher",
        "Ist remote.base_url gesetzt, wird der Netzwerk-Speicher verwendet,\n"
        "sonst die lokale JSON-Datei.",
    ),
    "security": (
        "Storno",
        "Ein gemeinsames Passwort für alle Lehrkräfte.",
    ),
    "logging": (
        "Protokoll",
        None,
    ),
}


class ConfigManager:
    CONFIG_DIR = Path("config")
    DEFAULT_CONFIG = CONFIG_DIR / "raumbuchung.yaml"

    def first_run_check(self) -> bool:
        """Gibt True zurück wenn noch keine Config existiert (Erstaufruf)."""
        return not self.DEFAULT_CONFIG.exists()

    # ─── Laden ───

    def load(self, path: Optional[Path] = None,
             env: Optional[Mapping[str, str]] = None) -> BookingConfig:
        """Lade Config aus YAML. Validiert automatisch via Pydantic.

        Danach werden Umgebungsvariablen angewendet (siehe apply_env_overrides).
        """
        target = path or self.DEFAULT_CONFIG
        if not target.exists():
            raise FileNotFoundError(
                f"Konfigurationsdatei nicht gefunden: {target}\n"
                f"Führen Sie 'raumbuchung setup' aus, um die Konfiguration anzulegen."
            )
        with open(target, "r", encoding="utf-8") as f:
            raw = yaml.load(f)
        try:
            config = BookingConfig.model_validate(dict(raw or {}))
        except Exception as e:
            raise ValueError(
                f"Konfigurationsdatei ungültig: {target}\n"
                f"Pydantic-Fehler: {e}"
            ) from e
        return self.apply_env_overrides(config, env)

    def apply_env_overrides(self, config: BookingConfig,
                            env: Optional[Mapping[str, str]] = None) -> BookingConfig:
        """Überschreibt Remote-URL, API-Key und Storno-Passwort aus der Umgebung."""
        env = os.environ if env is None else env

        remote_update = {}
        if env.get(ENV_REMOTE_URL):
            remote_update["base_url"] = env[ENV_REMOTE_URL]
        if env.get(ENV_REMOTE_API_KEY):
            remote_update["api_key"] = env[ENV_REMOTE_API_KEY]
        if remote_update:
            remote = config.storage.remote.model_copy(update=remote_update)
            storage = config.storage.model_copy(update={"remote": remote})
            config = config.model_copy(update={"storage": storage})

        if env.get(ENV_CANCEL_SECRET):
            security = config.security.model_copy(
                update={"cancel_secret": env[ENV_CANCEL_SECRET]}
            )
            config = config.model_copy(update={"security": security})
        return config

    # ─── Speichern ───

    def save(self, config: BookingConfig, path: Optional[Path] = None) -> None:
        """Speichere Config als YAML mit deutschen Kommentaren."""
        target = path or self.DEFAULT_CONFIG
        target.parent.mkdir(parents=True, exist_ok=True)

        data = self._build_commented_yaml(config)

        with open(target, "w", encoding="utf-8") as f:
            f.write(_YAML_HEADER + "\n")
            yaml.dump(data, f)

        console.print(f"[green]✓[/green] Konfiguration gespeichert: {target}")

    def _build_commented_yaml(self, config: BookingConfig) -> CommentedMap:
        """Baut die YAML-Struktur mit Kommentaren auf."""
        raw = json.loads(config.model_dump_json())
        cm = CommentedMap(raw)

        for field, (label, comment) in _SECTION_COMMENTS.items():
            cm.yaml_set_comment_before_after_key(
                field,
                before=f"\n─── {label} ───" + (f"\n{comment}" if comment else ""),
            )

        # Inline-Kommentar für das Storno-Passwort
        if "security" in cm:
            security_map = CommentedMap(cm["security"])
            security_map.yaml_add_eol_comment(
                "oder RAUMBUCHUNG_CANCEL_SECRET", "cancel_secret"
            )
            cm["security"] = security_map

        return cm
