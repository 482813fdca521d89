"""Fetching a template into a scratch directory and finding its root.

Templates are never expanded in place. A git template is shallow-cloned
and a local template is copied into a fresh temporary directory; the
caller owns that directory and removes it when the run is over.
"""

from __future__ import annotations

import os
import shutil
import subprocess
import tempfile
from collections.abc import Callable
from pathlib import Path

from stamper.errors import SourceError, SubfolderError
from stamper.models.template_config import CONFIG_FILE_NAMES
from stamper.scaffold.filtering import GIT_DIR_NAME
from stamper.source.location import GitLocation, PathLocation, TemplateLocation

DEFAULT_BRANCH = "main"

Chooser = Callable[[str, list[str], str], str]


def _make_scratch_dir() -> Path:
    return Path(tempfile.mkdtemp(prefix="stamper-"))


def remove_history(directory: Path) -> None:
    """Delete the ``.git`` entry of a freshly fetched template."""
    git_path = directory / GIT_DIR_NAME
    if git_path.is_dir():
        shutil.rmtree(git_path)
    elif git_path.exists():
        git_path.unlink()


def _current_branch(repo_dir: Path) -> str:
    completed = subprocess.run(
        ["git", "rev-parse", "--abbrev-ref", "HEAD"],
        cwd=repo_dir,
        capture_output=True,
        text=True,
        check=False,
    )
    branch = completed.stdout.strip()
    if completed.returncode != 0 or not branch or branch == "HEAD":
        return DEFAULT_BRANCH
    return branch


def clone_git_template_into_temp(
    url: str,
    branch: str | None = None,
    identity: Path | None = None,
) -> tuple[Path, str]:
    """Shallow-clone url into a new scratch directory.

    Returns:
        The scratch directory and the branch that was checked out.

    Raises:
        SourceError: If git is missing or the clone fails.
    """
    scratch = _make_scratch_dir()
    command = ["git", "clone", "--depth", "1"]
    if branch:
        command += ["--branch", branch]
    command += [url, str(scratch)]

    env = dict(os.environ)
    if identity is not None:
        env["GIT_SSH_COMMAND"] = f'ssh -i "{Path(identity).expanduser()}" -o IdentitiesOnly=yes'

    try:
        completed = subprocess.run(command, env=env, capture_output=True, text=True, check=False)
    except OSError as exc:
        shutil.rmtree(scratch, ignore_errors=True)
        raise SourceError(f"Failed to run git: {exc}") from exc
    if completed.returncode != 0:
        shutil.rmtree(scratch, ignore_errors=True)
        raise SourceError(
            f"Failed to clone {url}: {completed.stderr.strip()}\n"
            "Please check if the Git user / repository exists."
        )

    checked_out = branch or _current_branch(scratch)
    remove_history(scratch)
    return scratch, checked_out


def copy_path_template_into_temp(src: Path) -> Path:
    """Copy a local template directory into a new scratch directory.

    Symbolic links are copied as links so that the tree walker can
    reject them.

    Raises:
        SourceError: If src is not a directory.
    """
    if not src.is_dir():
        raise SourceError(f"Template path is not a directory: {src}")
    scratch = _make_scratch_dir()
    shutil.copytree(src, scratch, symlinks=True, dirs_exist_ok=True)
    remove_history(scratch)
    return scratch


def get_source_template_into_temp(location: TemplateLocation) -> tuple[Path, str]:
    """Fetch the template named by location.

    Returns:
        The scratch directory and the branch name to use for the new
        repository.
    """
    if isinstance(location, GitLocation):
        return clone_git_template_into_temp(location.url, location.branch, location.identity)
    assert isinstance(location, PathLocation)
    return copy_path_template_into_temp(location.path), DEFAULT_BRANCH


def _has_config(directory: Path) -> bool:
    return any((directory / name).is_file() for name in CONFIG_FILE_NAMES)


def locate_template_configs(base_dir: Path) -> list[str]:
    """Return the directories below base_dir holding a config file, sorted."""
    found: list[str] = []
    stack = [base_dir]
    while stack:
        current = stack.pop()
        for entry in os.scandir(current):
            if entry.name == GIT_DIR_NAME or not entry.is_dir(follow_symlinks=False):
                continue
            path = Path(entry.path)
            if _has_config(path):
                found.append(path.relative_to(base_dir).as_posix())
            stack.append(path)
    return sorted(found)


def auto_locate_template_dir(base_dir: Path, choose: Chooser | None = None) -> Path:
    """Pick the template root inside base_dir.

    A config file in base_dir itself wins. Otherwise a single nested
    config file marks the root; several nested ones are offered as a
    choice.

    Raises:
        SubfolderError: If several templates exist and there is no one
            to ask.
    """
    if _has_config(base_dir):
        return base_dir
    candidates = locate_template_configs(base_dir)
    if not candidates:
        return base_dir
    if len(candidates) == 1:
        return base_dir / candidates[0]
    if choose is None:
        raise SubfolderError(
            "Multiple templates found: " + ", ".join(candidates)
            + ". Name one of them as the subfolder."
        )
    return base_dir / choose("Which template should be expanded?", candidates, candidates[0])


def resolve_template_dir(
    base_dir: Path,
    subfolder: str | None = None,
    choose: Chooser | None = None,
) -> Path:
    """Return the template root, honouring an explicit subfolder.

    Raises:
        SubfolderError: If the subfolder is missing, escapes base_dir or
            is not a directory.
    """
    base = base_dir.resolve()
    if subfolder is None:
        return auto_locate_template_dir(base, choose)

    candidate = base / subfolder
    if not candidate.exists():
        raise SubfolderError(f"not able to find subfolder '{subfolder}' in source template")
    template_dir = candidate.resolve()
    if template_dir != base and base not in template_dir.parents:
        raise SubfolderError("Invalid subfolder. Must be part of the template folder structure.")
    if not template_dir.is_dir():
        raise SubfolderError("The specified subfolder must be a valid folder.")
    return auto_locate_template_dir(template_dir, choose)


def locate_template_file(base_dir: Path, template_dir: Path) -> Path | None:
    """Find the config file for template_dir, searching up to base_dir.

    Returns:
        The nearest config file, or None if there is none.
    """
    base = base_dir.resolve()
    current = template_dir.resolve()
    while True:
        for name in CONFIG_FILE_NAMES:
            path = current / name
            if path.is_file():
                return path
        if current == base or current.parent == current:
            return None
        current = current.parent
