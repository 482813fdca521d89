"""Interactive prompts for project names, placeholders and hook commands."""

from __future__ import annotations

from typing import Any

from rich.console import Console
from rich.markup import escape
from rich.prompt import Confirm, Prompt

from stamper.models.slots import BoolSlot, Slot, StringSlot, Value

console = Console()

PROJECT_NAME_PROMPT = "\U0001f937 Project Name"


def _ask(prompt: str, default: str | None = None, choices: list[str] | None = None) -> str:
    kwargs: dict[str, Any] = {"console": console}
    if default is not None:
        kwargs["default"] = default
    if choices is not None:
        kwargs["choices"] = choices
    return Prompt.ask(f"\U0001f937 {escape(prompt)}", **kwargs)


def name() -> str:
    """Ask for the project name until a non-blank answer is given."""
    while True:
        answer = Prompt.ask(PROJECT_NAME_PROMPT, console=console).strip()
        if answer:
            return answer
        console.print("[yellow]⚠️  The project name cannot be empty[/yellow]")


def choose(prompt: str, choices: list[str], default: str | None = None) -> str:
    """Ask the user to pick one of choices."""
    return _ask(prompt, default=default, choices=choices)


def variable(slot: Slot) -> Value:
    """Ask for a placeholder value, re-asking until it satisfies the slot."""
    if isinstance(slot, BoolSlot):
        return Confirm.ask(
            f"\U0001f937 {escape(slot.prompt)}",
            default=slot.default if slot.default is not None else False,
            console=console,
        )

    assert isinstance(slot, StringSlot)
    if slot.choices:
        return choose(slot.prompt, slot.choices, slot.default)
    while True:
        answer = _ask(slot.prompt, default=slot.default)
        if slot.matches_regex(answer):
            return answer
        console.print(
            f"[red]⛔ Sorry, \"{escape(answer)}\" is not a valid value "
            f"for {escape(slot.var_name)}[/red]"
        )


def confirm_command(command: str) -> bool:
    """Ask whether a hook may run an external command."""
    console.print(f"[yellow]⚠️  The template wants to run:[/yellow] {escape(command)}")
    return Confirm.ask("Allow this command?", default=False, console=console)
