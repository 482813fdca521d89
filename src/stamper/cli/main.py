"""stamper CLI entry point."""

import typer

from stamper import __version__
from stamper.cli.generate_cmd import generate

app = typer.Typer(
    name="stamper",
    help="Scaffold new projects from templates",
    no_args_is_help=True,
)

app.command()(generate)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"stamper {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """Scaffold new projects from templates."""
