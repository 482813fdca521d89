"""stamper generate -- expand a template into a new project."""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console

from stamper.cli.output import report_error
from stamper.errors import StamperError
from stamper.models.args import GenerateArgs, Vcs
from stamper.scaffold.pipeline import generate as run_generate

err_console = Console(stderr=True)


def generate(
    template: Optional[str] = typer.Argument(
        None, help="Favorite name, git URL, gh:/gl:/bb: abbreviation or local path"
    ),
    subfolder: Optional[str] = typer.Argument(
        None, help="Subfolder inside the template holding the template"
    ),
    git: Optional[str] = typer.Option(None, "--git", help="Git repository to clone"),
    branch: Optional[str] = typer.Option(None, "--branch", "-b", help="Branch to use"),
    path: Optional[Path] = typer.Option(None, "--path", help="Local template directory"),
    list_favorites: bool = typer.Option(
        False, "--list-favorites", help="List the favorites from the app config"
    ),
    name: Optional[str] = typer.Option(None, "--name", "-n", help="Project name"),
    force: bool = typer.Option(
        False, "--force", "-f", help="Keep the project name exactly as given"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Report ignored files"),
    template_values_file: Optional[Path] = typer.Option(
        None, "--template-values-file", help="TOML or YAML file with a values table"
    ),
    silent: bool = typer.Option(
        False, "--silent", "-s", help="Never prompt; fail on missing values"
    ),
    config: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Application config file"
    ),
    vcs: Vcs = typer.Option(Vcs.git, "--vcs", help="Version control to initialize"),
    lib: bool = typer.Option(False, "--lib", help="Generate a library project"),
    bin: bool = typer.Option(False, "--bin", help="Generate a binary project (default)"),
    identity: Optional[Path] = typer.Option(
        None, "--identity", "-i", help="SSH private key used to clone"
    ),
    define: Optional[List[str]] = typer.Option(
        None, "--define", "-d", help="Template value as key=value; repeatable"
    ),
    init: bool = typer.Option(
        False, "--init", help="Generate into the current directory"
    ),
    destination: Optional[Path] = typer.Option(
        None, "--destination", help="Parent directory of the new project"
    ),
    force_git_init: bool = typer.Option(
        False, "--force-git-init", help="Initialize git even with --init"
    ),
    allow_commands: bool = typer.Option(
        False, "--allow-commands", "-a", help="Let hooks run without asking"
    ),
) -> None:
    """Generate a new project from a template."""
    if lib and bin:
        err_console.print("[red]--lib and --bin cannot be used together[/red]")
        raise typer.Exit(code=1)

    args = GenerateArgs(
        template=template,
        subfolder=subfolder,
        git=git,
        path=path,
        branch=branch,
        name=name,
        force=force,
        verbose=verbose,
        template_values_file=template_values_file,
        silent=silent,
        config=config,
        vcs=vcs,
        lib=lib,
        bin=bin,
        ssh_identity=identity,
        define=list(define or []),
        init=init,
        destination=destination,
        force_git_init=force_git_init,
        allow_commands=allow_commands,
        list_favorites=list_favorites,
    )

    try:
        run_generate(args)
    except StamperError as e:
        report_error(e, err_console)
        raise typer.Exit(code=1)
