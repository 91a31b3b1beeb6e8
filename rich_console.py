"""
Rich console configuration for the grid overlay preview tool.

Provides styled terminal output with panels, tables, and Rich logging.
"""

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.theme import Theme
from rich.panel import Panel
from rich.table import Table

# Custom theme matching the overlay's dark tech palette
GRID_THEME = Theme({
    "info": "cyan",
    "warning": "yellow",
    "error": "bold red",
    "success": "bold green",
    "highlight": "bold magenta",
    "muted": "dim",
    "cell": "bold cyan",
    "gps": "green",
})

# Global console instance
console = Console(theme=GRID_THEME)


def setup_rich_logging(verbose: bool = False) -> None:
    """
    Configure logging to use Rich handler.

    Args:
        verbose: Enable DEBUG level logging with full details
    """
    level = logging.DEBUG if verbose else logging.WARNING

    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[
            RichHandler(
                console=console,
                show_time=verbose,
                show_path=verbose,
                rich_tracebacks=True,
                tracebacks_show_locals=verbose,
                markup=False,
            )
        ],
        force=True,  # Override any existing configuration
    )

    # Pillow logs every font/plugin probe at DEBUG
    logging.getLogger("PIL").setLevel(logging.WARNING)


def print_banner(version: str = "1.0.0") -> None:
    """
    Print a styled startup banner.

    Args:
        version: Version string to display
    """
    banner = """
[bold cyan] 4 │ 9 │ 2 [/]
[bold cyan]───┼───┼───[/]
[bold cyan] 3 │ 5 │ 7 [/]
[bold cyan]───┼───┼───[/]
[bold cyan] 8 │ 1 │ 6 [/]
[dim]Nine-Palace Grid Overlay[/]
"""
    console.print(banner)
    console.print(f"[muted]Version {version}[/]\n")


def print_config_summary(
    latitude: float,
    longitude: float,
    heading: float,
    accuracy: float,
    width: int,
    height: int,
    output_file: Optional[str] = None,
    cell_degrees: Optional[float] = None,
    lng_buffer: str = "flat",
    show_debug_info: bool = False,
) -> None:
    """
    Print a styled configuration summary panel.

    Args:
        latitude, longitude: Rendered position in degrees
        heading: Device heading in degrees
        accuracy: Horizontal accuracy in meters
        width, height: Viewport size in pixels
        output_file: PNG output path, if any
        cell_degrees: Preview grid step in degrees
        lng_buffer: Longitude buffer mode
        show_debug_info: Whether watermarks include the k level
    """
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column("Key", style="dim")
    table.add_column("Value", style="bold")

    table.add_row("Position", f"[gps]{latitude:.6f}, {longitude:.6f}[/]")
    table.add_row("Heading", f"{heading:.1f}°")
    table.add_row("Accuracy", f"{accuracy:.1f} m")
    table.add_row("Viewport", f"{width} x {height}")
    if cell_degrees is not None:
        table.add_row("Cell Size", f"{cell_degrees:g}°")
    table.add_row("Longitude Buffer", lng_buffer)
    table.add_row("Debug Info", "on" if show_debug_info else "[dim]off[/]")
    table.add_row("Output", f"[green]{output_file}[/]" if output_file else "[dim]none[/]")

    panel = Panel(
        table,
        title="[bold]Configuration[/]",
        border_style="cyan",
        padding=(1, 2),
    )
    console.print(panel)
    console.print()


def print_frame_summary(frame, output_file: Optional[str] = None) -> None:
    """
    Print a styled summary of a rendered frame.

    Args:
        frame: grid_renderer.Frame
        output_file: Path the image was written to (optional)
    """
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column("Metric", style="dim")
    table.add_column("Value", style="bold green")

    if frame.skipped:
        table.add_row("Status", f"[warning]skipped ({frame.skipped_reason})[/]")
    else:
        table.add_row("Visible Cells", f"[cell]{len(frame.cell_indices):,}[/]")
        table.add_row("Primitives", f"{len(frame.primitives):,}")
        if frame.scale is not None:
            table.add_row("Cell Height", f"{frame.scale.cell_height_meters:.2f} m"
                          + (" [warning](fallback)[/]" if frame.scale.degraded else ""))
        if frame.position_code is not None:
            table.add_row("Position Code", str(frame.position_code))
            neighbors = ", ".join(
                f"{code}" if direction is None else f"{code}@{direction.name}"
                for direction, code in frame.adjacent
            )
            table.add_row("Adjacent", neighbors)
        else:
            table.add_row("Position Code", "[dim]accuracy too low[/]")
    if output_file:
        table.add_row("Output", output_file)

    title = "[bold yellow]Skipped[/]" if frame.skipped else "[bold green]Complete[/]"
    panel = Panel(
        table,
        title=title,
        border_style="yellow" if frame.skipped else "green",
        padding=(1, 2),
    )
    console.print()
    console.print(panel)


def print_error(message: str, hint: Optional[str] = None) -> None:
    """
    Print a styled error message.

    Args:
        message: Error message
        hint: Optional hint for resolution
    """
    console.print(f"\n[error]Error:[/] {message}")
    if hint:
        console.print(f"[muted]Hint: {hint}[/]")
