"""Pre and post expansion hooks.

Hooks are scripts shipped inside the template and listed in the
``[hooks]`` table. Each one runs as a child process. The resolved
variables are handed over in a JSON file named by ``STAMPER_VARIABLES``;
whatever the hook writes back into that file is merged into the live
variable context before the next hook (or the tree walker) runs.

Environment passed to every hook:

* ``STAMPER_VARIABLES``: path of the JSON variables file.
* ``STAMPER_PROJECT_DIR``: directory the project is expanded into.
* ``STAMPER_TEMPLATE_DIR``: scratch copy of the template.
* ``STAMPER_HOOK_STAGE``: ``pre`` or ``post``.
"""

from __future__ import annotations

import json
import os
import subprocess
import sys
import tempfile
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from rich.console import Console
from rich.markup import escape

from stamper.errors import HookError, HookFailed, HookPermissionError
from stamper.models.template_config import TemplateConfig
from stamper.scaffold.context import VariableContext

VARIABLES_ENV = "STAMPER_VARIABLES"
PROJECT_DIR_ENV = "STAMPER_PROJECT_DIR"
TEMPLATE_DIR_ENV = "STAMPER_TEMPLATE_DIR"
HOOK_STAGE_ENV = "STAMPER_HOOK_STAGE"

console = Console()


@dataclass
class HookPolicy:
    """How hooks are allowed to run.

    Attributes:
        allow_commands: Run hooks without asking.
        silent: Never ask; a hook without permission is an error.
        confirm: Interactive collaborator asked before each hook when
            commands are not allowed up front.
        verbose: Echo each hook before it runs.
    """

    allow_commands: bool = False
    silent: bool = False
    confirm: Callable[[str], bool] | None = None
    verbose: bool = False


def hook_command(script: Path) -> list[str]:
    """Return the argv that runs script."""
    if script.suffix == ".py":
        return [sys.executable, str(script)]
    if script.suffix == ".sh":
        return ["sh", str(script)]
    if not os.access(script, os.X_OK):
        raise HookError(f"Hook '{script.name}' is not executable")
    return [str(script)]


def _check_permission(hook: str, command: list[str], policy: HookPolicy) -> None:
    if policy.allow_commands:
        return
    if policy.silent or policy.confirm is None:
        raise HookPermissionError(hook)
    if not policy.confirm(" ".join(command)):
        raise HookPermissionError(hook)


def _read_back(hook: str, variables_file: Path, context: VariableContext) -> None:
    try:
        returned = json.loads(variables_file.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise HookError(f"Hook '{hook}' left an unreadable variables file: {exc}") from exc
    if not isinstance(returned, dict):
        raise HookError(f"Hook '{hook}' must leave a JSON object in ${VARIABLES_ENV}")
    for name, value in returned.items():
        if not isinstance(value, (str, bool)):
            raise HookError(
                f"Hook '{hook}' set '{name}' to a {type(value).__name__}; "
                "only strings and booleans are supported"
            )
        context.set(name, value)


def run_hook(
    hook: str,
    stage: str,
    template_dir: Path,
    project_dir: Path,
    cwd: Path,
    context: VariableContext,
    policy: HookPolicy,
) -> None:
    """Run one hook script and merge the variables it returns.

    Raises:
        HookError: If the script is missing or returns bad variables.
        HookPermissionError: If running commands was not permitted.
        HookFailed: If the script exits with a non-zero status.
    """
    script = (template_dir / hook).resolve()
    if not script.is_file():
        raise HookError(f"Hook file not found: {hook}")
    command = hook_command(script)
    _check_permission(hook, command, policy)

    if policy.verbose:
        console.print(f"[dim]Running {stage} hook: {escape(hook)}[/dim]")

    with context.lease() as leased, tempfile.TemporaryDirectory(prefix="stamper-hook-") as tmp:
        variables_file = Path(tmp) / "variables.json"
        variables_file.write_text(json.dumps(dict(leased), indent=2), encoding="utf-8")
        env = {
            **os.environ,
            VARIABLES_ENV: str(variables_file),
            PROJECT_DIR_ENV: str(project_dir),
            TEMPLATE_DIR_ENV: str(template_dir),
            HOOK_STAGE_ENV: stage,
        }
        try:
            completed = subprocess.run(
                command,
                cwd=cwd,
                env=env,
                capture_output=True,
                text=True,
                check=False,
            )
        except OSError as exc:
            raise HookError(f"Failed to start hook '{hook}': {exc}") from exc

        if completed.stdout:
            console.print(escape(completed.stdout.rstrip("\n")))
        if completed.returncode != 0:
            raise HookFailed(hook, completed.returncode, completed.stderr)
        _read_back(hook, variables_file, leased)


def run_pre_hooks(
    config: TemplateConfig,
    template_dir: Path,
    project_dir: Path,
    context: VariableContext,
    policy: HookPolicy,
) -> None:
    """Run the pre hooks in declared order inside the template directory."""
    hooks = config.hooks.pre if config.hooks and config.hooks.pre else []
    for hook in hooks:
        run_hook(hook, "pre", template_dir, project_dir, template_dir, context, policy)


def run_post_hooks(
    config: TemplateConfig,
    template_dir: Path,
    project_dir: Path,
    context: VariableContext,
    policy: HookPolicy,
) -> None:
    """Run the post hooks in declared order inside the generated project."""
    hooks = config.hooks.post if config.hooks and config.hooks.post else []
    for hook in hooks:
        run_hook(hook, "post", template_dir, project_dir, project_dir, context, policy)


def remove_hook_files(config: TemplateConfig, *roots: Path) -> list[Path]:
    """Delete every hook script below each of roots.

    Returns:
        The paths that were removed.
    """
    removed: list[Path] = []
    for root in roots:
        for hook in config.get_hook_files():
            path = root / hook
            if path.is_file():
                path.unlink()
                removed.append(path)
    return removed
