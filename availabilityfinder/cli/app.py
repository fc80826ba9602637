"""
Main CLI application using Typer.
"""

import asyncio
import logging
from pathlib import Path
from typing import Annotated, List, Optional

import pendulum
import typer
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from ..adapters.file_schedule_provider import FileScheduleProvider
from ..config import AppConfig, get_default_config_path
from ..domain.date_ranges import build_date_ranges, group_by_calendar_date
from ..domain.exceptions import AvailabilityError
from ..services.availability_finder import AvailabilityFinderService

app = typer.Typer(
    name="availabilityfinder",
    help="Find common bookable time from working hours, date overrides and busy times",
    add_completion=False
)

console = Console()

ConfigOption = Annotated[
    Optional[Path],
    typer.Option("--config", "-c", help="Path to config file. Defaults to $AVAILABILITYFINDER_CONFIG or ./config.yaml"),
]
StartOption = Annotated[Optional[str], typer.Option("--start", help="Start date (YYYY-MM-DD)")]
EndOption = Annotated[Optional[str], typer.Option("--end", help="End date (YYYY-MM-DD)")]
VerboseOption = Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging.")]


def _configure_logging(verbose: bool) -> None:
    """Route log records through Rich."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _load_config(config_file: Optional[Path]) -> AppConfig:
    config_path = config_file or get_default_config_path()
    return AppConfig.load_from_yaml(config_path)


def _determine_time_range(
    *,
    tz: str,
    search_days: int,
    start_option: Optional[str],
    end_option: Optional[str]
):
    """
    Resolve the search window from explicit dates or the configured defaults.
    Returns (start_date, end_date).
    """
    if start_option:
        try:
            start_date = pendulum.from_format(start_option, "YYYY-MM-DD", tz=tz).start_of("day")
        except ValueError as e:
            console.print(f"[red]Could not parse start date: {e}[/red]")
            raise typer.Exit(1)
    else:
        start_date = pendulum.now(tz).start_of("day")

    if end_option:
        try:
            end_date = pendulum.from_format(end_option, "YYYY-MM-DD", tz=tz).end_of("day")
        except ValueError as e:
            console.print(f"[red]Could not parse end date: {e}[/red]")
            raise typer.Exit(1)
    else:
        end_date = start_date.add(days=search_days).end_of("day")

    return start_date, end_date


@app.command()
def find(
    participants: Annotated[List[str], typer.Argument(help="Participant names or emails (e.g. 'alice bob').")],
    config_file: ConfigOption = None,
    start: StartOption = None,
    end: EndOption = None,
    duration: Annotated[Optional[int], typer.Option("--duration", "-d", help="Minimum slot length in minutes")] = None,
    verbose: VerboseOption = False,
):
    """
    Find time when all participants are available.

    Examples:

        availabilityfinder find alice bob
        availabilityfinder find alice bob --duration 60
        availabilityfinder find alice bob --start 2024-01-15 --end 2024-01-19
    """
    _configure_logging(verbose)

    try:
        config = _load_config(config_file)
        tz = config.timezone

        start_date, end_date = _determine_time_range(
            tz=tz,
            search_days=config.defaults.search_days,
            start_option=start,
            end_option=end,
        )
        min_duration = duration if duration is not None else config.defaults.duration_minutes

        participant_emails = [p.email.lower() for p in config.resolve_participants(participants)]

        console.print("[bold cyan]Search[/bold cyan]")
        console.print(f"   Participants: {', '.join(participant_emails)}")
        console.print(f"   Window: {start_date.format('YYYY-MM-DD HH:mm')} - {end_date.format('YYYY-MM-DD HH:mm')} ({tz})")
        console.print(f"   Minimum duration: {min_duration} minutes")
        console.print()

        provider = FileScheduleProvider(config=config)
        service = AvailabilityFinderService(schedule_provider=provider)

        slots = asyncio.run(
            service.find_slots(
                participants=participant_emails,
                start_date=start_date,
                end_date=end_date,
                min_duration_minutes=min_duration,
            )
        )

        if not slots:
            console.print(
                "[yellow]No common slots found.[/yellow]\n"
                "Try a longer window or a shorter minimum duration."
            )
        else:
            console.print(f"[bold green]{len(slots)} slot(s) found:[/bold green]\n")
            for slot in slots:
                console.print(f"  {slot.format_display(tz)}")

        console.print()

    except (FileNotFoundError, AvailabilityError, ValidationError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def ranges(
    participant: Annotated[str, typer.Argument(help="Participant name or email.")],
    config_file: ConfigOption = None,
    start: StartOption = None,
    end: EndOption = None,
    verbose: VerboseOption = False,
):
    """
    Show a participant's available ranges per day, before busy times.
    """
    _configure_logging(verbose)

    try:
        config = _load_config(config_file)
        configured = config.resolve_participant(participant)

        start_date, end_date = _determine_time_range(
            tz=configured.timezone,
            search_days=config.defaults.search_days,
            start_option=start,
            end_option=end,
        )

        date_ranges = build_date_ranges(
            configured.availability,
            configured.timezone,
            start_date,
            end_date,
        )

        if not date_ranges:
            console.print("[yellow]No availability in this window.[/yellow]")
            return

        table = Table(
            title=f"Availability of {configured.display_name()} ({configured.timezone})",
            show_header=True,
            header_style="bold cyan"
        )
        table.add_column("Date", style="bold yellow")
        table.add_column("Ranges")

        for day, day_ranges in group_by_calendar_date(date_ranges).items():
            table.add_row(
                day,
                ", ".join(
                    f"{r.start.format('HH:mm')} - {r.end.format('HH:mm')}" for r in day_ranges
                ),
            )

        console.print()
        console.print(table)
        console.print()

    except (FileNotFoundError, AvailabilityError, ValidationError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def list_participants(
    config_file: ConfigOption = None,
):
    """
    List all configured participants.
    """
    try:
        config = _load_config(config_file)

        if not config.participants:
            console.print("[yellow]No participants defined in the config file.[/yellow]")
            return

        table = Table(
            title="Configured participants",
            show_header=True,
            header_style="bold cyan"
        )
        table.add_column("Name (Alias)", style="bold yellow")
        table.add_column("E-Mail", style="dim")
        table.add_column("Timezone")
        table.add_column("Rules", justify="right")

        for participant in config.participants:
            table.add_row(
                participant.name,
                participant.email,
                participant.timezone,
                str(len(participant.availability)),
            )

        console.print()
        console.print(table)
        console.print()

    except (FileNotFoundError, ValidationError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]availabilityfinder[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
