"""Include/exclude/ignore filtering of the template tree.

Patterns follow gitignore conventions:

* a pattern without a slash matches a path component at any depth;
* a pattern containing a slash is anchored at the template root;
* ``**`` spans directories while ``*``, ``?`` and ``[...]`` stay
  within one segment;
* a trailing slash restricts the pattern to directories;
* a leading ``!`` negates a pattern (the last matching pattern wins);
* a pattern matching a directory covers everything beneath it.

The filter decision for every path is computed once, before any file is
rendered, and is not changed during the walk.
"""

from __future__ import annotations

import os
import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath

from rich.console import Console
from rich.markup import escape

GIT_DIR_NAME = ".git"
IGNORE_FILE_NAME = ".genignore"

console = Console()


@dataclass(frozen=True)
class GlobPattern:
    """A single compiled gitignore-style glob."""

    source: str
    regex: re.Pattern[str]
    negated: bool = False
    dir_only: bool = False

    def matches(self, rel_path: str, is_dir: bool = False) -> bool:
        """Return True if rel_path or one of its parent directories matches."""
        parts = rel_path.strip("/").split("/")
        for depth in range(1, len(parts) + 1):
            candidate_is_dir = depth < len(parts) or is_dir
            if self.dir_only and not candidate_is_dir:
                continue
            if self.regex.match("/".join(parts[:depth])):
                return True
        return False


def _translate(glob: str) -> str:
    """Translate a glob body into a regular expression body."""
    out: list[str] = []
    i = 0
    n = len(glob)
    while i < n:
        char = glob[i]
        if glob.startswith("**/", i):
            out.append("(?:.*/)?")
            i += 3
        elif glob.startswith("**", i):
            out.append(".*")
            i += 2
        elif char == "*":
            out.append("[^/]*")
            i += 1
        elif char == "?":
            out.append("[^/]")
            i += 1
        elif char == "[":
            end = glob.find("]", i + 2)
            if end == -1:
                out.append(re.escape(char))
                i += 1
                continue
            body = glob[i + 1 : end]
            if body.startswith("!"):
                body = "^" + body[1:]
            out.append("[" + body.replace("\\", "\\\\") + "]")
            i = end + 1
        else:
            out.append(re.escape(char))
            i += 1
    return "".join(out)


def compile_glob(pattern: str) -> GlobPattern:
    """Compile a gitignore-style pattern.

    >>> compile_glob("src/**/*.rs").matches("src/bin/main.rs")
    True
    >>> compile_glob("*.md").matches("docs/guide/README.md")
    True
    """
    source = pattern
    negated = pattern.startswith("!")
    if negated:
        pattern = pattern[1:]
    dir_only = pattern.endswith("/")
    pattern = pattern.rstrip("/")
    anchored = "/" in pattern
    pattern = pattern.lstrip("/")
    prefix = "" if anchored else "(?:.*/)?"
    regex = re.compile(f"^{prefix}{_translate(pattern)}$")
    return GlobPattern(source=source, regex=regex, negated=negated, dir_only=dir_only)


class PatternSet:
    """An ordered list of globs where the last matching pattern decides."""

    def __init__(self, patterns: Iterable[str] | None = None) -> None:
        self.patterns = [compile_glob(p) for p in patterns or () if p.strip()]

    def __bool__(self) -> bool:
        return bool(self.patterns)

    def matches(self, rel_path: str, is_dir: bool = False) -> bool:
        matched = False
        for pattern in self.patterns:
            if pattern.matches(rel_path, is_dir):
                matched = not pattern.negated
        return matched


@dataclass(frozen=True)
class FilterResult:
    """Immutable keep/delete decision for every path of a template tree.

    Attributes:
        render: Files to render into the destination.
        delete: Files and directories that must not reach the destination.
    """

    render: frozenset[str] = field(default_factory=frozenset)
    delete: frozenset[str] = field(default_factory=frozenset)

    def is_deleted(self, rel_path: str) -> bool:
        return rel_path in self.delete


def read_ignore_file(template_dir: Path) -> list[str]:
    """Return the patterns listed in the template's .genignore file."""
    ignore_file = template_dir / IGNORE_FILE_NAME
    if not ignore_file.is_file():
        return []
    patterns = []
    for line in ignore_file.read_text(encoding="utf-8").splitlines():
        line = line.strip()
        if line and not line.startswith("#"):
            patterns.append(line)
    return patterns


def classify(
    rel_path: str,
    include: PatternSet,
    exclude: PatternSet,
    ignore: PatternSet,
) -> bool:
    """Return True if a file should be rendered, False if it is deleted.

    Ignore always wins; otherwise the file must match include (when any
    include patterns exist) and must not match exclude.
    """
    if ignore.matches(rel_path):
        return False
    if include and not include.matches(rel_path):
        return False
    return not exclude.matches(rel_path)


def _emptied_dirs(dirs: list[str], render: set[str], delete: set[str]) -> set[str]:
    """Directories whose files were all filtered out.

    A directory that never held a file is kept as it is.
    """
    emptied = set()
    for rel in dirs:
        prefix = rel + "/"
        if any(path.startswith(prefix) for path in render):
            continue
        if any(path.startswith(prefix) for path in delete):
            emptied.add(rel)
    return emptied


def compute_filter(
    template_dir: Path,
    include: list[str] | None = None,
    exclude: list[str] | None = None,
    ignore: list[str] | None = None,
    hook_files: list[str] | None = None,
    verbose: bool = False,
) -> FilterResult:
    """Classify every file below template_dir as render or delete.

    Args:
        template_dir: Root of the template tree.
        include: If given, only matching files are rendered.
        exclude: Matching files are not rendered.
        ignore: Matching files and directories are always deleted;
            patterns from ``.genignore`` are added to these.
        hook_files: Hook scripts, which never reach the destination.
        verbose: Print one line per deleted path.

    Returns:
        The FilterResult for the tree as it is now.
    """
    include_set = PatternSet(include)
    exclude_set = PatternSet(exclude)
    ignore_set = PatternSet([*(ignore or []), *read_ignore_file(template_dir)])
    hooks = {PurePosixPath(h).as_posix() for h in hook_files or []}

    render: set[str] = set()
    delete: set[str] = set()
    dirs: list[str] = []
    stack: list[Path] = [template_dir]
    while stack:
        current = stack.pop()
        for entry in sorted(os.scandir(current), key=lambda e: e.name):
            if entry.name == GIT_DIR_NAME:
                continue
            rel = Path(entry.path).relative_to(template_dir).as_posix()
            if entry.is_dir(follow_symlinks=False):
                if ignore_set.matches(rel, is_dir=True):
                    delete.add(rel)
                else:
                    dirs.append(rel)
                    stack.append(Path(entry.path))
                continue
            if rel in hooks or rel == IGNORE_FILE_NAME:
                delete.add(rel)
            elif classify(rel, include_set, exclude_set, ignore_set):
                render.add(rel)
            else:
                delete.add(rel)

    delete.update(_emptied_dirs(dirs, render, delete))

    if verbose:
        for rel in sorted(delete):
            console.print(f"[dim]Ignoring: {escape(rel)}[/dim]")

    return FilterResult(render=frozenset(render), delete=frozenset(delete))
