"""Version control setup for the generated project."""

from __future__ import annotations

import subprocess
from pathlib import Path

from stamper.errors import VcsError
from stamper.models.args import Vcs


def _git(args: list[str], cwd: Path) -> subprocess.CompletedProcess[str]:
    try:
        return subprocess.run(["git", *args], cwd=cwd, capture_output=True, text=True, check=False)
    except OSError as exc:
        raise VcsError(f"Failed to run git: {exc}") from exc


def is_inside_git_repo(directory: Path) -> bool:
    completed = _git(["rev-parse", "--is-inside-work-tree"], directory)
    return completed.returncode == 0 and completed.stdout.strip() == "true"


def init_git_repo(project_dir: Path, branch: str, force: bool = False) -> bool:
    """Run ``git init`` in project_dir with branch as the initial branch.

    A project that already lives inside a work tree is left alone unless
    force is set.

    Returns:
        True if a repository was created.

    Raises:
        VcsError: If git is missing or fails.
    """
    if not force and is_inside_git_repo(project_dir):
        return False
    completed = _git(["init"], project_dir)
    if completed.returncode != 0:
        raise VcsError(f"git init failed: {completed.stderr.strip()}")
    completed = _git(["symbolic-ref", "HEAD", f"refs/heads/{branch}"], project_dir)
    if completed.returncode != 0:
        raise VcsError(f"Failed to set initial branch '{branch}': {completed.stderr.strip()}")
    return True


def initialize(vcs: Vcs, project_dir: Path, branch: str, force: bool = False) -> bool:
    """Put project_dir under the requested version control system."""
    if vcs.is_none():
        return False
    return init_git_repo(project_dir, branch, force)
