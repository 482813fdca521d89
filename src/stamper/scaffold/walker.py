"""Expansion of a filtered template tree into the destination directory.

The walk happens in two passes over the same plan. The first pass only
computes every destination path and checks that none of them exists, so
a collision aborts the run before a single byte is written. The second
pass creates directories, renders text files and copies binary files.

Only paths in the filter's delete set are skipped, so files that a
pre-hook adds to the template after filtering are still expanded.
"""

from __future__ import annotations

import os
import shutil
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from pathlib import Path

from stamper.errors import (
    DestinationExistsError,
    FilesystemError,
    RenderError,
    SymlinkNotSupported,
)
from stamper.models.slots import Value
from stamper.scaffold.filtering import GIT_DIR_NAME, FilterResult
from stamper.scaffold.rendering import TemplateError, TemplateRenderer, is_binary

ProgressCallback = Callable[[str], None]


@dataclass(frozen=True)
class PlannedEntry:
    """One template path and the destination it expands to."""

    rel_path: str
    source: Path
    destination: Path
    is_dir: bool


class TreeWalker:
    """Walks a template directory and writes the expanded project.

    Args:
        template_dir: Root of the (scratch copy of the) template.
        destination: Directory the project is expanded into.
        variables: Resolved variables, read once when the walker is built.
        filter_result: Precomputed keep/delete decision for every path.
    """

    def __init__(
        self,
        template_dir: Path,
        destination: Path,
        variables: Mapping[str, Value],
        filter_result: FilterResult,
    ) -> None:
        self.template_dir = template_dir
        self.destination = destination
        self.filter_result = filter_result
        self.renderer = TemplateRenderer(variables)

    def _render_segment(self, rel_path: str, name: str) -> str:
        try:
            rendered = self.renderer.render_name(name)
        except TemplateError as exc:
            raise RenderError(rel_path, str(exc)) from exc
        # a rendered segment may contain "/" and create nested directories
        if any(part in ("", ".", "..") for part in rendered.split("/")) or "\\" in rendered:
            raise RenderError(rel_path, f"path segment '{name}' renders to '{rendered}'")
        return rendered

    def plan(self) -> list[PlannedEntry]:
        """Compute the destination of every kept path, parents first.

        Raises:
            SymlinkNotSupported: If the tree contains a symbolic link.
            RenderError: If a path segment fails to render.
        """
        entries: list[PlannedEntry] = []
        stack: list[tuple[Path, Path]] = [(self.template_dir, self.destination)]
        while stack:
            source_dir, dest_dir = stack.pop()
            children = sorted(os.scandir(source_dir), key=lambda e: e.name, reverse=True)
            for entry in children:
                if entry.name == GIT_DIR_NAME:
                    continue
                source = Path(entry.path)
                rel = source.relative_to(self.template_dir).as_posix()
                if entry.is_symlink():
                    raise SymlinkNotSupported(rel)
                if self.filter_result.is_deleted(rel):
                    continue
                is_dir = entry.is_dir(follow_symlinks=False)
                target = dest_dir / self._render_segment(rel, entry.name)
                entries.append(PlannedEntry(rel, source, target, is_dir))
                if is_dir:
                    stack.append((source, target))
        entries.sort(key=lambda e: (len(e.destination.parts), str(e.destination)))
        return entries

    def check_destination(self, entries: list[PlannedEntry]) -> None:
        """Fail if any planned file would overwrite an existing path.

        Raises:
            DestinationExistsError: On the first collision found.
        """
        seen: dict[Path, str] = {}
        for entry in entries:
            if entry.destination in seen and not entry.is_dir:
                raise DestinationExistsError(
                    str(entry.destination),
                    f"'{entry.rel_path}' and '{seen[entry.destination]}' both render to "
                    f"{entry.destination}",
                )
            seen[entry.destination] = entry.rel_path
            if entry.is_dir:
                if entry.destination.exists() and not entry.destination.is_dir():
                    raise DestinationExistsError(str(entry.destination))
            elif entry.destination.exists():
                raise DestinationExistsError(str(entry.destination))

    def _write_file(self, entry: PlannedEntry) -> None:
        data = entry.source.read_bytes()
        entry.destination.parent.mkdir(parents=True, exist_ok=True)
        if is_binary(data):
            shutil.copyfile(entry.source, entry.destination)
        else:
            try:
                rendered = self.renderer.render(data.decode("utf-8"))
            except TemplateError as exc:
                raise RenderError(entry.rel_path, str(exc)) from exc
            entry.destination.write_bytes(rendered.encode("utf-8"))
        shutil.copymode(entry.source, entry.destination)

    def write(
        self,
        entries: list[PlannedEntry],
        on_file: ProgressCallback | None = None,
    ) -> list[Path]:
        """Create the planned directories and files.

        Args:
            entries: Output of plan(), already checked for collisions.
            on_file: Called with each file's template-relative path after
                it has been written.

        Returns:
            Destination paths of the files written.
        """
        written: list[Path] = []
        for entry in entries:
            try:
                if entry.is_dir:
                    entry.destination.mkdir(parents=True, exist_ok=True)
                    continue
                self._write_file(entry)
            except OSError as exc:
                raise FilesystemError(f"Failed to write {entry.rel_path}: {exc}") from exc
            written.append(entry.destination)
            if on_file is not None:
                on_file(entry.rel_path)
        return written

    def walk(self, on_file: ProgressCallback | None = None) -> list[Path]:
        """Plan, check and write in one call."""
        entries = self.plan()
        self.check_destination(entries)
        return self.write(entries, on_file)


def count_files(entries: list[PlannedEntry]) -> int:
    return sum(1 for entry in entries if not entry.is_dir)
