"""
Main CLI application using Typer.
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import Annotated, List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from ..adapters.json_store import JsonScheduleStore
from ..config import AppConfig, get_default_config_path
from ..domain.exceptions import BookingSlotsError
from ..domain.models import AgendaEntry, Granularity, SlotCandidate
from ..services.availability import AvailabilityService

app = typer.Typer(
    name="bookingslots",
    help="Compute bookable slots and day agendas for service providers",
    add_completion=False
)

console = Console()

ConfigOption = Annotated[
    Optional[Path],
    typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml"),
]


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _load(config_file: Optional[Path], verbose: bool = False):
    """Load config and data store; returns (config, store, service)."""
    config_path = config_file or get_default_config_path()
    config = AppConfig.load_from_yaml(config_path)
    _setup_logging("DEBUG" if verbose else config.log_level)

    store = JsonScheduleStore.load(config.data_file)
    service = AvailabilityService(
        repository=store,
        shop_id=config.shop_id,
        default_zone=config.default_timezone,
        dst_policy=config.dst_policy,
    )
    return config, store, service


def _slots_table(slots: List[SlotCandidate], title: str) -> Table:
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Tier", style="bold yellow")
    table.add_column("Local")
    table.add_column("UTC", style="dim")

    for slot in slots:
        table.add_row(
            slot.granularity.value,
            slot.format_display(),
            f"{slot.start_utc.format('HH:mm')} - {slot.end_utc.format('HH:mm')}",
        )
    return table


def _agenda_table(entries: List[AgendaEntry], title: str) -> Table:
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Type", style="bold yellow")
    table.add_column("Local")
    table.add_column("UTC", style="dim")
    table.add_column("Details")

    for entry in entries:
        kind = entry.kind.value
        if entry.subtype is not None:
            kind = f"{kind} ({entry.subtype.value})"
        details = entry.metadata.get("reason") or entry.metadata.get("booking_id") or ""
        table.add_row(
            kind,
            str(entry.interval),
            f"{entry.interval.start_utc.format('HH:mm')} - {entry.interval.end_utc.format('HH:mm')}",
            str(details),
        )
    return table


@app.command()
def slots(
    provider: Annotated[str, typer.Argument(help="Provider id")],
    date: Annotated[str, typer.Argument(help="Date in the shop's zone (YYYY-MM-DD)")],
    config_file: ConfigOption = None,
    zone: Annotated[Optional[str], typer.Option("--zone", "-z", help="IANA zone override")] = None,
    fine: Annotated[Optional[int], typer.Option("--fine", help="Fine granularity in minutes")] = None,
    coarse: Annotated[Optional[int], typer.Option("--coarse", help="Coarse granularity in minutes")] = None,
    service_minutes: Annotated[Optional[int], typer.Option("--service-minutes", "-s", help="Only starts that fit a service of this length")] = None,
    as_json: Annotated[bool, typer.Option("--json", help="Print JSON instead of a table")] = False,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Debug logging")] = False,
):
    """
    Show bookable slots for a provider on a date.

    Examples:

        bookingslots slots emp-1 2025-03-12
        bookingslots slots emp-1 2025-03-12 --zone Europe/Berlin --json
    """
    try:
        config, _, service = _load(config_file, verbose)

        result = asyncio.run(
            service.compute_slots(
                provider,
                date,
                zone=zone,
                fine_minutes=fine if fine is not None else config.slots.fine_minutes,
                coarse_minutes=coarse if coarse is not None else config.slots.coarse_minutes,
                service_minutes=service_minutes,
            )
        )

        if as_json:
            typer.echo(json.dumps({"slots": [slot.to_dict() for slot in result]}, indent=2))
            return

        if not result:
            console.print("[yellow]⚠ No bookable slots for this date.[/yellow]")
            return

        coarse_count = sum(1 for slot in result if slot.granularity is Granularity.COARSE)
        console.print()
        console.print(_slots_table(result, f"Slots for {provider} on {date}"))
        console.print(
            f"[bold green]✓ {coarse_count} coarse and {len(result) - coarse_count} fine slot(s)[/bold green]\n"
        )

    except (BookingSlotsError, FileNotFoundError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def agenda(
    provider: Annotated[str, typer.Argument(help="Provider id")],
    date: Annotated[str, typer.Argument(help="Date in the shop's zone (YYYY-MM-DD)")],
    config_file: ConfigOption = None,
    zone: Annotated[Optional[str], typer.Option("--zone", "-z", help="IANA zone override")] = None,
    working_window: Annotated[bool, typer.Option("--working-window/--no-working-window", help="Include the working window entry")] = True,
    as_json: Annotated[bool, typer.Option("--json", help="Print JSON instead of a table")] = False,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Debug logging")] = False,
):
    """
    Show the merged day agenda of a provider.
    """
    try:
        _, _, service = _load(config_file, verbose)

        if as_json:
            document = asyncio.run(
                service.agenda_document(provider, date, zone=zone, include_working_window=working_window)
            )
            typer.echo(json.dumps(document, indent=2))
            return

        entries = asyncio.run(
            service.compute_agenda(provider, date, zone=zone, include_working_window=working_window)
        )

        if not entries:
            console.print("[yellow]⚠ Nothing on the agenda for this date.[/yellow]")
            return

        console.print()
        console.print(_agenda_table(entries, f"Agenda for {provider} on {date}"))
        console.print()

    except (BookingSlotsError, FileNotFoundError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def providers(config_file: ConfigOption = None):
    """
    List all providers in the schedule data.
    """
    try:
        _, store, _ = _load(config_file)

        if not store.providers:
            console.print("[yellow]No providers defined in the data file.[/yellow]")
            return

        table = Table(
            title="Providers",
            show_header=True,
            header_style="bold cyan"
        )
        table.add_column("Id", style="bold yellow")
        table.add_column("Name")
        table.add_column("Shop", style="dim")

        for provider in store.providers:
            table.add_row(provider.id, provider.name, provider.shop_id)

        console.print()
        console.print(table)
        console.print()

    except (FileNotFoundError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]bookingslots[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
