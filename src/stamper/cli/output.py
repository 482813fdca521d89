"""Rich terminal output for generation runs.

Status lines, the expansion progress bar, the favorites table and error
reporting all go through here so the emoji and styling stay consistent.
"""

from __future__ import annotations

from pathlib import Path

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    TextColumn,
    TimeElapsedColumn,
)
from rich.table import Table

from stamper.errors import ConfigurationError, StamperError
from stamper.loader.errors import ErrorFormatter
from stamper.models.config import AppConfig

WRENCH = "\U0001f527"
SPARKLE = "✨"
WARN = "⚠️ "
ERROR = "⛔"


def create_walk_progress(console: Console) -> Progress | None:
    """Create the progress bar shown while files are expanded.

    Returns None if the console is not a terminal (CI/pipe mode),
    so the caller can skip progress display.
    """
    if not console.is_terminal:
        return None

    return Progress(
        TextColumn("[bold blue]{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    )


def print_status(console: Console, message: str) -> None:
    console.print(f"{WRENCH} [bold]{escape(message)}[/bold] [bold]...[/bold]")


def print_moving(console: Console, project_dir: Path) -> None:
    console.print(
        f"{WRENCH} [bold]Moving generated files into:[/bold] "
        f"[bold yellow]`{escape(str(project_dir))}`[/bold yellow][bold]...[/bold]"
    )


def print_done(console: Console, project_dir: Path) -> None:
    console.print(
        f"{SPARKLE} [bold green]Done![/bold green] [bold]New project created[/bold] "
        f"[underline]{escape(str(project_dir))}[/underline]"
    )


def print_rename_warning(console: Console, user_input: str, kebab: str) -> None:
    console.print(
        f"{WARN}[bold]Renaming project called[/bold] [bold yellow]`{escape(user_input)}`"
        f"[/bold yellow] [bold]to[/bold] [bold green]`{escape(kebab)}`[/bold green]"
        "[bold]...[/bold]"
    )


def render_favorites(app_config: AppConfig, console: Console) -> None:
    """Print the configured favorites as a table."""
    if not app_config.favorites:
        console.print("No favorites defined.")
        return

    table = Table(box=box.SIMPLE, padding=(0, 2))
    table.add_column("Favorite", style="bold")
    table.add_column("Source")
    table.add_column("Description", style="dim")
    for name in sorted(app_config.favorites):
        favorite = app_config.favorites[name]
        source = favorite.git or favorite.path or name
        if favorite.subfolder:
            source = f"{source} ({favorite.subfolder})"
        table.add_row(escape(name), escape(source), escape(favorite.description or ""))
    console.print(table)


def report_error(error: StamperError, console: Console) -> None:
    """Print a fatal error, with validation details for config errors."""
    stage = f" [dim](during {error.stage})[/dim]" if error.stage else ""
    console.print(f"{ERROR} [bold red]Error:[/bold red] {escape(error.message)}{stage}")
    if isinstance(error, ConfigurationError) and error.errors:
        formatter = ErrorFormatter()
        console.print(
            formatter.format_all(error.errors, error.source, error.filename),
            markup=False,
            highlight=False,
        )
