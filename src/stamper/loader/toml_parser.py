"""TOML parser with line tracking for rich error reporting.

``tomllib`` does not expose source positions for keys, so a light
line scanner runs alongside it and records where every table header
and key assignment appears. The resulting line map uses the same
dotted-path keys as pydantic error locations.
"""

from __future__ import annotations

import re
import tomllib
from pathlib import Path
from typing import Any

_HEADER_RE = re.compile(r"^\s*\[(?!\[)(?P<key>.+?)\]\s*(#.*)?$")
_KEY_PART = r"(?:[A-Za-z0-9_\-]+|\"(?:[^\"\\]|\\.)*\"|'[^']*')"
_ASSIGN_RE = re.compile(rf"^\s*(?P<key>{_KEY_PART}(?:\s*\.\s*{_KEY_PART})*)\s*=")
_POSITION_RE = re.compile(r"\(at line (?P<line>\d+), column (?P<col>\d+)\)")


class TOMLParseError(Exception):
    """Raised when TOML syntax cannot be parsed.

    Attributes:
        line: 1-indexed line number where the error occurred.
        column: 1-indexed column number where the error occurred.
        message: Human-readable description of the syntax error.
        filename: Name of the file being parsed, or '<string>'.
    """

    def __init__(
        self,
        message: str,
        line: int | None = None,
        column: int | None = None,
        filename: str = "<string>",
    ) -> None:
        self.message = message
        self.line = line
        self.column = column
        self.filename = filename
        super().__init__(message)


def split_dotted_key(raw: str) -> list[str]:
    """Split a TOML dotted key into its parts, honouring quoted segments.

    >>> split_dotted_key('conditional."is_wasm == true".placeholders')
    ['conditional', 'is_wasm == true', 'placeholders']
    """
    parts: list[str] = []
    current: list[str] = []
    quote: str | None = None
    escaped = False
    for char in raw.strip():
        if quote is not None:
            if escaped:
                current.append(char)
                escaped = False
            elif char == "\\" and quote == '"':
                escaped = True
            elif char == quote:
                quote = None
            else:
                current.append(char)
        elif char in ('"', "'"):
            quote = char
        elif char == ".":
            parts.append("".join(current).strip())
            current = []
        elif not char.isspace():
            current.append(char)
    parts.append("".join(current).strip())
    return parts


def build_line_map(source: str) -> dict[str, tuple[int, int]]:
    """Map dotted key paths to (line, column) positions, both 1-indexed."""
    line_map: dict[str, tuple[int, int]] = {}
    table: list[str] = []
    for lineno, line in enumerate(source.splitlines(), start=1):
        header = _HEADER_RE.match(line)
        if header:
            table = split_dotted_key(header.group("key"))
            line_map.setdefault(".".join(table), (lineno, line.index("[") + 1))
            continue
        assign = _ASSIGN_RE.match(line)
        if assign:
            key = split_dotted_key(assign.group("key"))
            col = len(line) - len(line.lstrip()) + 1
            line_map[".".join([*table, *key])] = (lineno, col)
    return line_map


def parse_toml_with_lines(
    source: str,
    filename: str = "<string>",
) -> tuple[dict[str, Any] | None, dict[str, tuple[int, int]]]:
    """Parse a TOML string and return (data, line_map).

    Args:
        source: TOML content as a string.
        filename: Filename for error messages.

    Returns:
        A tuple of (parsed_data, line_map). Returns (None, {}) for
        empty or comment-only documents.

    Raises:
        TOMLParseError: If the TOML contains syntax errors.
    """
    try:
        data = tomllib.loads(source)
    except tomllib.TOMLDecodeError as e:
        line = getattr(e, "lineno", None)
        column = getattr(e, "colno", None)
        if line is None:
            position = _POSITION_RE.search(str(e))
            if position:
                line = int(position.group("line"))
                column = int(position.group("col"))
            elif "at end of document" in str(e):
                lines = source.splitlines() or [""]
                line = len(lines)
                column = len(lines[-1]) + 1
        raise TOMLParseError(
            message=str(e),
            line=line,
            column=column,
            filename=filename,
        ) from e

    if not data:
        return None, {}

    return data, build_line_map(source)


def parse_toml_file(filepath: Path) -> tuple[dict[str, Any] | None, dict[str, tuple[int, int]]]:
    """Parse a TOML file and return (data, line_map).

    Raises:
        TOMLParseError: If the file contains TOML syntax errors.
        FileNotFoundError: If the file does not exist.
    """
    content = filepath.read_text(encoding="utf-8")
    return parse_toml_with_lines(content, filename=str(filepath))
