"""Built-in template variables and pre-supplied values.

Every template can use these variables without declaring them:

``project-name``
    The project name, kebab-cased unless ``--force`` was given.
``crate_name``
    The project name in snake case.
``crate_type``
    ``bin`` or ``lib``.
``authors``
    ``Name <email>`` from the environment or git config.
``username``
    The login name of the current user.
``os-arch``
    Operating system and machine, e.g. ``linux-x86_64``.
``is_init``
    True when expanding into the current directory.
``within_cargo_project``
    True when the destination lies inside an existing Cargo project.
"""

from __future__ import annotations

import getpass
import os
import platform
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from stamper.casing import kebab_case, snake_case
from stamper.errors import ConfigurationError
from stamper.loader.validator import load_values_file
from stamper.models.args import CrateType, GenerateArgs
from stamper.models.slots import Value

TEMPLATE_VALUES_ENV = "STAMPER_TEMPLATE_VALUES"

_NAME_ENV_VARS = ("STAMPER_NAME", "GIT_AUTHOR_NAME", "GIT_COMMITTER_NAME")
_EMAIL_ENV_VARS = ("STAMPER_EMAIL", "GIT_AUTHOR_EMAIL", "GIT_COMMITTER_EMAIL")
_FALLBACK_NAME_ENV_VARS = ("USER", "USERNAME", "NAME")


@dataclass(frozen=True)
class ProjectName:
    """The project name as typed by the user, with its derived forms."""

    user_input: str

    def raw(self) -> str:
        return self.user_input

    def kebab_case(self) -> str:
        return kebab_case(self.user_input)

    def snake_case(self) -> str:
        return snake_case(self.user_input)

    def is_crate_name(self) -> bool:
        """True if the input is already in its canonical kebab form."""
        return self.user_input == self.kebab_case()


def _first_env(names: tuple[str, ...]) -> str | None:
    for name in names:
        value = os.environ.get(name)
        if value:
            return value
    return None


def _git_config(key: str) -> str | None:
    try:
        completed = subprocess.run(
            ["git", "config", "--get", key],
            capture_output=True,
            text=True,
            check=False,
        )
    except OSError:
        return None
    value = completed.stdout.strip()
    return value if completed.returncode == 0 and value else None


def get_authors() -> str:
    """Return ``Name <email>``, or just the name when no email is known."""
    name = (
        _first_env(_NAME_ENV_VARS)
        or _git_config("user.name")
        or _first_env(_FALLBACK_NAME_ENV_VARS)
        or ""
    )
    email = _first_env(_EMAIL_ENV_VARS) or _git_config("user.email") or os.environ.get("EMAIL")
    if email:
        return f"{name} <{email}>".strip()
    return name


def get_username() -> str:
    try:
        return getpass.getuser()
    except (KeyError, OSError):
        return _first_env(_FALLBACK_NAME_ENV_VARS) or ""


def get_os_arch() -> str:
    return f"{platform.system().lower()}-{platform.machine().lower()}"


def within_cargo_project(project_dir: Path) -> bool:
    """True if any parent of project_dir contains a Cargo.toml."""
    for parent in project_dir.resolve().parents:
        if (parent / "Cargo.toml").is_file():
            return True
    return False


def create_builtin_variables(
    args: GenerateArgs,
    project_dir: Path,
    name: ProjectName,
    crate_type: CrateType,
) -> dict[str, Value]:
    """Build the variables available to every template."""
    return {
        "project-name": name.raw() if args.force else name.kebab_case(),
        "crate_name": name.snake_case(),
        "crate_type": crate_type.value,
        "authors": get_authors(),
        "username": get_username(),
        "os-arch": get_os_arch(),
        "is_init": args.init,
        "within_cargo_project": within_cargo_project(project_dir),
    }


def parse_defines(defines: list[str]) -> dict[str, str]:
    """Parse ``key=value`` pairs given with ``--define``.

    Raises:
        ConfigurationError: If an entry has no ``=`` or an empty key.
    """
    values: dict[str, str] = {}
    for define in defines:
        key, sep, value = define.partition("=")
        if not sep or not key.strip():
            raise ConfigurationError(
                f"Invalid --define '{define}': expected the form key=value"
            )
        values[key.strip()] = value
    return values


def load_env_and_args_template_values(args: GenerateArgs) -> dict[str, Any]:
    """Collect values from the environment file, the values file and --define.

    Later sources win: ``$STAMPER_TEMPLATE_VALUES``, then
    ``--template-values-file``, then ``--define``.
    """
    values: dict[str, Any] = {}
    env_file = os.environ.get(TEMPLATE_VALUES_ENV)
    if env_file:
        values.update(load_values_file(Path(env_file)))
    if args.template_values_file is not None:
        values.update(load_values_file(args.template_values_file))
    values.update(parse_defines(args.define))
    return values
