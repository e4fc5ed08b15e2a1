"""Raumbuchung - Haupt-CLI.

Verwendung:
  raumbuchung setup                        Standard-Konfiguration anlegen
  raumbuchung config show                  Konfiguration anzeigen
  raumbuchung weeks                        Schulwochen mit Buchbarkeit
  raumbuchung show [--week N]              Wochenraster (Tag × Stunde)
  raumbuchung book --week N --day D ...    Slot buchen
  raumbuchung cancel <slot-key>            Buchung stornieren (Passwort)
  raumbuchung stats [--json]               Statistik vergangener Buchungen
  raumbuchung upcoming                     Buchungen des kommenden Monats
  raumbuchung list                         Alle Buchungen, neueste zuerst
"""

import logging
import sys
from datetime import datetime
from typing import Optional

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table
from rich import box

console = Console()
# Protokoll nach stderr, damit z.B. `stats --json` unverfälscht bleibt
log_console = Console(stderr=True)


def _now() -> datetime:
    return datetime.now()


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=log_console, show_path=False)],
        force=True,
    )


def _load_config_or_abort():
    """Lädt die Konfiguration oder bricht mit Fehlermeldung ab."""
    from config.manager import ConfigManager
    mgr = ConfigManager()
    if mgr.first_run_check():
        console.print(
            "[red]Keine Konfiguration gefunden.[/red]\n"
            "Führen Sie zunächst [bold]raumbuchung setup[/bold] aus."
        )
        sys.exit(1)
    try:
        config = mgr.load()
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)
    _setup_logging(config.logging.level.value)
    return mgr, config


def _open_session_or_abort(config):
    """Öffnet den Speicher und lädt den Buchungsbestand."""
    from booking.errors import StoreUnavailable
    from booking.session import BookingSession
    from storage.factory import create_store

    session = BookingSession(create_store(config), config, clock=lambda: _now())
    try:
        session.start()
    except StoreUnavailable as e:
        console.print(f"[red bold]Speicher nicht verfügbar:[/red bold] {e}")
        sys.exit(1)
    return session


def _booking_table(title: str, rows: list[list[str]]) -> Table:
    table = Table(title=title, box=box.ROUNDED)
    for col in ("Slot", "Lehrkraft", "Fach", "Klasse", "Tag", "Std.", ""):
        table.add_column(col)
    for row in rows:
        table.add_row(*row)
    return table


# ─── SETUP ────────────────────────────────────────────────────────────────────

@click.command("setup")
def cmd_setup():
    """Ersteinrichtung: Standard-Konfiguration anlegen."""
    from config.defaults import default_booking_config
    from config.manager import ConfigManager

    mgr = ConfigManager()
    if not mgr.first_run_check():
        console.print(
            "[yellow]Eine Konfiguration existiert bereits:[/yellow] "
            f"{mgr.DEFAULT_CONFIG}"
        )
        if not click.confirm("Überschreiben?", default=False):
            return

    mgr.save(default_booking_config())
    console.print("[bold green]Einrichtung abgeschlossen![/bold green]")
    console.print(f"Fächer, Klassen und Speicher in [bold]{mgr.DEFAULT_CONFIG}[/bold] anpassen.")


# ─── CONFIG ───────────────────────────────────────────────────────────────────

@click.group("config")
def cmd_config():
    """Konfiguration anzeigen."""


@cmd_config.command("show")
def config_show():
    """Zeigt die aktuelle Konfiguration an."""
    mgr, config = _load_config_or_abort()
    remote = config.storage.remote
    mode = f"Netzwerk ({remote.base_url})" if remote.is_configured \
        else f"lokal ({config.storage.local.path})"

    console.print(Panel(
        f"[bold]{config.school_name}[/bold]  |  {config.room_name}  |  Speicher: {mode}",
        title="Raumbuchung",
        border_style="cyan",
    ))

    cal = config.calendar
    table = Table(title="Kalender", box=box.ROUNDED)
    table.add_column("Parameter", style="bold")
    table.add_column("Wert")
    table.add_row("Schultage", ", ".join(cal.day_names))
    table.add_row("Stunden pro Tag", str(cal.periods_per_day))
    table.add_row("Folgewoche buchbar ab", cal.day_names[cal.next_week_opens_weekday]
                  if cal.next_week_opens_weekday < len(cal.day_names)
                  else str(cal.next_week_opens_weekday))
    table.add_row("Vorschau (Monate)", str(cal.future_window_months))
    console.print(table)

    console.print(f"\n[bold]Fächer:[/bold] {', '.join(config.catalog.subjects)}")
    console.print(f"[bold]Klassen:[/bold] {', '.join(config.catalog.grades)}")


# ─── WEEKS ────────────────────────────────────────────────────────────────────

@click.command("weeks")
@click.option("--all", "show_all", is_flag=True, default=False,
              help="Auch vergangene Wochen anzeigen.")
def cmd_weeks(show_all: bool):
    """Listet die Schulwochen des laufenden Schuljahres."""
    from booking.calendar import enumerate_weeks, week_number_of
    from booking.eligibility import can_book_in_week

    mgr, config = _load_config_or_abort()
    now = _now()
    current = week_number_of(now)
    opens = config.calendar.next_week_opens_weekday

    table = Table(title="Schulwochen", box=box.ROUNDED)
    table.add_column("Woche", style="bold")
    table.add_column("Zeitraum")
    table.add_column("Buchbar")
    for week in enumerate_weeks(now, config.calendar.month_names):
        if not show_all and week.week_number < current:
            continue
        bookable = can_book_in_week(week.week_number, now, opens)
        marker = "[green]✓[/green]" if bookable else "[dim]–[/dim]"
        if week.week_number == current:
            marker += " [cyan](aktuell)[/cyan]"
        table.add_row(str(week.week_number), week.label, marker)
    console.print(table)


# ─── SHOW ─────────────────────────────────────────────────────────────────────

@click.command("show")
@click.option("--week", "week_number", type=int, default=None,
              help="Wochennummer (Standard: erste buchbare Woche).")
def cmd_show(week_number: Optional[int]):
    """Zeigt das Wochenraster mit freien und gebuchten Slots."""
    from export.tui_renderer import FREE, render_booking_rows, render_week_rows

    mgr, config = _load_config_or_abort()
    session = _open_session_or_abort(config)
    try:
        if week_number is None:
            week_number = session.default_week() or session.current_week()
        periods = config.calendar.periods_per_day

        status = "[green]buchbar[/green]" if session.can_book(week_number) \
            else "[yellow]nicht buchbar[/yellow]"
        table = Table(title=f"Woche {week_number} – {status}", box=box.ROUNDED)
        table.add_column("Tag", style="bold")
        for p in range(1, periods + 1):
            table.add_column(f"{p}.", justify="center")
        for day_label, *cells in render_week_rows(session.slots(week_number),
                                                  session.bookings, periods):
            table.add_row(day_label, *[
                f"[green]{c}[/green]" if c == FREE else f"[red]{c}[/red]"
                for c in cells
            ])
        console.print(table)

        rows = render_booking_rows(session.week_bookings(week_number), _now())
        if rows:
            console.print(_booking_table(f"Buchungen Woche {week_number}", rows))
    finally:
        session.stop()


# ─── BOOK ─────────────────────────────────────────────────────────────────────

@click.command("book")
@click.option("--week", "week_number", type=int, default=None,
              help="Wochennummer (Standard: erste buchbare Woche).")
@click.option("--day", "day_index", type=click.IntRange(0, 4), required=True,
              help="Tag: 0=So, 1=Mo, 2=Di, 3=Mi, 4=Do.")
@click.option("--period", type=click.IntRange(1, 8), required=True,
              help="Stunde (1–8).")
@click.option("--teacher", default="", help="Name der Lehrkraft.")
@click.option("--subject", default="", help="Fach.")
@click.option("--lesson", default="", help="Thema der Stunde.")
@click.option("--grade", default="", help="Klasse, z.B. 7b.")
def cmd_book(week_number: Optional[int], day_index: int, period: int,
             teacher: str, subject: str, lesson: str, grade: str):
    """Bucht einen Slot im Raum."""
    from booking.errors import BookingError

    mgr, config = _load_config_or_abort()
    if subject and subject not in config.catalog.subjects:
        console.print(f"[red]Unbekanntes Fach:[/red] {subject}")
        sys.exit(1)
    if grade and grade not in config.catalog.grades:
        console.print(f"[red]Unbekannte Klasse:[/red] {grade}")
        sys.exit(1)

    session = _open_session_or_abort(config)
    try:
        if week_number is None:
            week_number = session.default_week()
            if week_number is None:
                console.print("[red]Derzeit ist keine Woche buchbar.[/red]")
                sys.exit(1)
        key, booking = session.confirm(
            week_number, day_index, period,
            {"teacher_name": teacher, "subject": subject,
             "lesson": lesson, "grade": grade},
        )
    except (BookingError, ValueError) as e:
        console.print(f"[red bold]Buchung fehlgeschlagen:[/red bold] {e}")
        sys.exit(1)
    finally:
        session.stop()

    console.print(
        f"[green]✓[/green] Gebucht: {booking.day_name} {booking.date_str}, "
        f"{booking.period}. Stunde – {booking.teacher_name} ({booking.subject}, "
        f"{booking.grade})  [dim]{key}[/dim]"
    )


# ─── CANCEL ───────────────────────────────────────────────────────────────────

@click.command("cancel")
@click.argument("slot_key")
@click.option("--secret", default=None, help="Storno-Passwort (sonst Abfrage).")
def cmd_cancel(slot_key: str, secret: Optional[str]):
    """Storniert eine Buchung. Erfordert das Storno-Passwort."""
    from booking.errors import BookingError

    mgr, config = _load_config_or_abort()
    if secret is None:
        secret = click.prompt("Storno-Passwort", hide_input=True)

    session = _open_session_or_abort(config)
    try:
        session.cancel(slot_key, secret)
    except BookingError as e:
        console.print(f"[red bold]Stornierung fehlgeschlagen:[/red bold] {e}")
        sys.exit(1)
    finally:
        session.stop()
    console.print(f"[green]✓[/green] Buchung {slot_key} storniert.")


# ─── STATS ────────────────────────────────────────────────────────────────────

@click.command("stats")
@click.option("--json", "as_json", is_flag=True, default=False,
              help="Statistik als JSON ausgeben.")
def cmd_stats(as_json: bool):
    """Statistik vergangener Buchungen je Lehrkraft und Fach."""
    from export.tui_renderer import render_subject_rows, render_teacher_rows

    mgr, config = _load_config_or_abort()
    session = _open_session_or_abort(config)
    try:
        stats = session.past_stats()
    finally:
        session.stop()

    if as_json:
        click.echo(stats.to_json())
        return

    console.print(f"[bold]Vergangene Buchungen:[/bold] {stats.total_bookings}")
    if not stats.total_bookings:
        return

    table = Table(title="Lehrkräfte", box=box.ROUNDED)
    for col in ("Lehrkraft", "Buchungen", "Fächer", "Monate", "Zuletzt"):
        table.add_column(col)
    for row in render_teacher_rows(stats):
        table.add_row(*row)
    console.print(table)

    table2 = Table(title="Fächer", box=box.ROUNDED)
    for col in ("Fach", "Buchungen", "Lehrkräfte", "Verteilung"):
        table2.add_column(col)
    for row in render_subject_rows(stats):
        table2.add_row(*row)
    console.print(table2)


# ─── UPCOMING / LIST ──────────────────────────────────────────────────────────

@click.command("upcoming")
def cmd_upcoming():
    """Buchungen von heute bis in einem Monat, früheste zuerst."""
    from export.tui_renderer import render_booking_rows

    mgr, config = _load_config_or_abort()
    session = _open_session_or_abort(config)
    try:
        entries = session.upcoming()
    finally:
        session.stop()
    if not entries:
        console.print("[dim]Keine kommenden Buchungen.[/dim]")
        return
    console.print(_booking_table("Kommende Buchungen", render_booking_rows(entries, _now())))


@click.command("list")
def cmd_list():
    """Alle Buchungen, neueste zuerst."""
    from export.tui_renderer import render_booking_rows

    mgr, config = _load_config_or_abort()
    session = _open_session_or_abort(config)
    try:
        entries = session.all_sorted()
    finally:
        session.stop()
    if not entries:
        console.print("[dim]Keine Buchungen vorhanden.[/dim]")
        return
    console.print(_booking_table("Alle Buchungen", render_booking_rows(entries, _now())))


# ─── HAUPT-CLI ────────────────────────────────────────────────────────────────

@click.group()
def cli():
    """Raumbuchung für den gemeinsamen Lernressourcenraum.

    Starten Sie mit: raumbuchung setup
    """


def main():
    """Einstiegspunkt. Legt beim ersten Aufruf ohne Argumente die Konfiguration an."""
    from config.manager import ConfigManager
    mgr = ConfigManager()

    if len(sys.argv) == 1 and mgr.first_run_check():
        console.print(Panel(
            "[bold]Willkommen bei der Raumbuchung![/bold]\n\n"
            "Keine Konfiguration gefunden.\n"
            "Die Standard-Konfiguration wird jetzt angelegt...",
            border_style="cyan",
        ))
        sys.argv.append("setup")

    cli()


# Befehle registrieren
cli.add_command(cmd_setup)
cli.add_command(cmd_config)
cli.add_command(cmd_weeks)
cli.add_command(cmd_show)
cli.add_command(cmd_book)
cli.add_command(cmd_cancel)
cli.add_command(cmd_stats)
cli.add_command(cmd_upcoming)
cli.add_command(cmd_list)


if __name__ == "__main__":
    main()
