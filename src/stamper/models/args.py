"""Arguments for a single generation run.

The CLI builds a GenerateArgs from its options; tests and library
callers construct it directly.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


class Vcs(str, Enum):
    """Version control system to initialize in the generated project."""

    git = "git"
    none = "none"

    def is_none(self) -> bool:
        return self is Vcs.none


class CrateType(str, Enum):
    """Kind of project being generated, exposed as ``crate_type``."""

    bin = "bin"
    lib = "lib"


@dataclass
class GenerateArgs:
    """Options controlling one invocation of generate().

    Attributes:
        template: Favorite name, git URL, abbreviation or local path.
        subfolder: Subfolder inside the template holding the template.
        git: Explicit git repository to clone.
        path: Explicit local template directory.
        branch: Branch to check out when cloning.
        name: Project name; prompted for when missing.
        force: Keep the name exactly as given instead of kebab-casing it.
        verbose: Report every filtered path.
        template_values_file: TOML/YAML file with a ``values`` table.
        silent: Never prompt; missing values are errors.
        config: Explicit application config path.
        vcs: Version control system to initialize.
        lib: Generate a library project.
        bin: Generate a binary project.
        ssh_identity: SSH private key used for cloning.
        define: ``key=value`` pairs from the command line.
        init: Expand into the current directory.
        destination: Parent directory for the new project.
        force_git_init: Initialize git even with ``init``.
        allow_commands: Permit hooks to run external commands.
        list_favorites: List favorites instead of generating.
    """

    template: str | None = None
    subfolder: str | None = None
    git: str | None = None
    path: Path | None = None
    branch: str | None = None
    name: str | None = None
    force: bool = False
    verbose: bool = False
    template_values_file: Path | None = None
    silent: bool = False
    config: Path | None = None
    vcs: Vcs = Vcs.git
    lib: bool = False
    bin: bool = False
    ssh_identity: Path | None = None
    define: list[str] = field(default_factory=list)
    init: bool = False
    destination: Path | None = None
    force_git_init: bool = False
    allow_commands: bool = False
    list_favorites: bool = False

    @property
    def crate_type(self) -> CrateType:
        return CrateType.lib if self.lib else CrateType.bin
