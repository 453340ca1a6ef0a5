"""Rich terminal display functions for Spectrum Allocator."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from spectrum_allocator.core.config import MHZ
from spectrum_allocator.core.grid import format_units

if TYPE_CHECKING:
    from spectrum_allocator.allocation.results import AllocationResult
    from spectrum_allocator.storage.models import AllocationRecord, Band, ChannelStatus, Occupancy


# Global console instance
_console: Console | None = None


def get_console() -> Console:
    """Get the global rich console instance."""
    global _console
    if _console is None:
        _console = Console()
    return _console


def set_console(console: Console) -> None:
    """Replace the global console (e.g. a recording console in tests)."""
    global _console
    _console = console


def print_banner(title: str, subtitle: str | None = None) -> None:
    """Print a styled banner.

    Args:
        title: Main title text.
        subtitle: Optional subtitle.
    """
    text = Text(title, style="bold cyan")
    if subtitle:
        text.append(f"\n{subtitle}", style="dim")
    get_console().print(Panel(text, border_style="cyan"))


def print_success(message: str) -> None:
    get_console().print(f"[bold green]✓[/] {message}")


def print_warning(message: str) -> None:
    get_console().print(f"[bold yellow]⚠[/] {message}")


def print_error(message: str) -> None:
    get_console().print(f"[bold red]✗[/] {message}")


def mhz(value: int) -> str:
    """Format a Hz value as an exact MHz label."""
    return f"{format_units(value, MHZ)} MHz"


def display_result(result: AllocationResult) -> None:
    """Print an allocation result: status line, then any values."""
    if not result.ok:
        detail = result.message
        if result.field:
            detail = f"{detail} [dim](field: {result.field})[/]"
        print_error(detail)
        return

    if result.exact:
        print_success(result.message)
    else:
        print_warning(result.message)
    if result.data:
        display_values(result.data)


def display_values(values: list[int], title: str = "Frequencies") -> None:
    """Display a list of channel values."""
    table = Table(title=title, show_header=True, header_style="bold magenta")
    table.add_column("#", justify="right", style="dim", width=4)
    table.add_column("Frequency", justify="right", style="cyan")
    for i, value in enumerate(values, 1):
        table.add_row(str(i), mhz(value))
    get_console().print(table)


def display_bands(bands: list[Band]) -> None:
    """Display the band catalog."""
    console = get_console()
    if not bands:
        console.print("[dim]No bands defined.[/]")
        return

    table = Table(title="Bands", show_header=True, header_style="bold magenta")
    table.add_column("ID", style="dim")
    table.add_column("Name", style="bold")
    table.add_column("From", justify="right", style="cyan")
    table.add_column("To", justify="right", style="cyan")
    table.add_column("Spacing", justify="right", style="yellow")
    table.add_column("Channels", justify="right", style="green")

    for band in bands:
        table.add_row(
            band.id,
            band.name,
            f"{band.from_mhz} MHz",
            f"{band.to_mhz} MHz",
            f"{band.spacing_khz} kHz",
            str(band.channel_count),
        )
    console.print(table)


def display_statistics(stats: dict[str, int]) -> None:
    """Display store-wide occupancy counts."""
    summary = Text()
    summary.append("Held: ", style="dim")
    summary.append(f"{stats['frequencies_count'] - stats['forbidden_count']}", style="cyan")
    summary.append(f" by {stats['holder_count']} holders\n", style="dim")
    summary.append("Forbidden: ", style="dim")
    summary.append(f"{stats['forbidden_count']}\n", style="red")
    summary.append("History records: ", style="dim")
    summary.append(f"{stats['frequency_history_count']}", style="yellow")
    get_console().print(Panel(summary, title="[bold]Occupancy[/]", border_style="green"))


def display_channels(band: Band, statuses: list[ChannelStatus]) -> None:
    """Display a band's grid with per-channel occupancy."""
    console = get_console()

    free = sum(1 for status in statuses if status.is_free)
    forbidden = sum(1 for status in statuses if status.is_forbidden)
    summary = Text()
    summary.append("Channels: ", style="dim")
    summary.append(f"{len(statuses)}\n", style="cyan")
    summary.append("Free: ", style="dim")
    summary.append(f"{free}\n", style="bold green")
    summary.append("Forbidden: ", style="dim")
    summary.append(f"{forbidden}", style="red")
    console.print(Panel(summary, title=f"[bold]{band.name}[/]", border_style="green"))

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Frequency", justify="right", style="cyan")
    table.add_column("Holder")
    table.add_column("Location", style="dim")
    table.add_column("Acquired", style="dim")

    for status in statuses:
        occupancy = status.occupancy
        if occupancy is None:
            table.add_row(status.value_mhz, "[green]free[/]", "N/A", "N/A")
        elif occupancy.is_forbidden:
            table.add_row(status.value_mhz, "[red]forbidden[/]", "N/A", "N/A")
        else:
            table.add_row(
                status.value_mhz,
                occupancy.email,
                f"{occupancy.latitude}, {occupancy.longitude}",
                occupancy.created_at.strftime("%Y-%m-%d %H:%M"),
            )
    console.print(table)


def display_occupancies(occupancies: list[Occupancy], title: str = "Held Frequencies") -> None:
    console = get_console()
    if not occupancies:
        console.print("[dim]No frequencies held.[/]")
        return

    table = Table(title=title, show_header=True, header_style="bold magenta")
    table.add_column("Frequency", justify="right", style="cyan")
    table.add_column("Location", style="dim")
    table.add_column("Acquired", style="dim")
    for occupancy in occupancies:
        table.add_row(
            occupancy.value_mhz,
            f"{occupancy.latitude}, {occupancy.longitude}",
            occupancy.created_at.strftime("%Y-%m-%d %H:%M"),
        )
    console.print(table)


def display_history(value: int, records: list[AllocationRecord]) -> None:
    """Display allocation history for one value."""
    console = get_console()
    if not records:
        console.print(f"[dim]No allocation history for {mhz(value)}.[/]")
        return

    table = Table(title=f"Allocation data for {mhz(value)}", show_header=True, header_style="bold magenta")
    table.add_column("Holder")
    table.add_column("Email")
    table.add_column("Location", style="dim")
    table.add_column("Acquired", style="dim")
    for record in records:
        table.add_row(
            record.holder_id,
            record.email,
            f"{record.latitude}, {record.longitude}",
            record.created_at.strftime("%Y-%m-%d %H:%M"),
        )
    console.print(table)
