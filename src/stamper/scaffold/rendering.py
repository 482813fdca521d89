"""Jinja2 rendering of template paths and file contents.

Template variables such as ``project-name`` contain hyphens, which Jinja
would read as subtraction. A preprocessing extension rewrites every
known hyphenated name found inside a tag into a mangled identifier and
the renderer exposes the value under that identifier as well.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping

from jinja2 import Environment, StrictUndefined, TemplateError
from jinja2.ext import Extension

from stamper.casing import CASE_FILTERS
from stamper.models.slots import Value

TEMPLATE_SUFFIXES: tuple[str, ...] = (".liquid", ".jinja")

_MARKERS = ("{{", "{%", "{#")
_TAG_RE = re.compile(
    r"(?P<raw>\{%-?\s*raw\s*-?%\}.*?\{%-?\s*endraw\s*-?%\})"
    r"|(?P<tag>\{\{.*?\}\}|\{%.*?%\})",
    re.DOTALL,
)
_BINARY_SNIFF_SIZE = 8192


def mangle(name: str) -> str:
    """Return the identifier a hyphenated variable is exposed under."""
    return name.replace("-", "__dash__")


def rewrite_hyphenated_names(code: str, names: Iterable[str]) -> str:
    """Replace hyphenated names in expression code with mangled identifiers.

    String literals are left untouched.
    """
    ordered = sorted(names, key=len, reverse=True)
    if not ordered:
        return code
    name_re = re.compile(
        r"\"(?:[^\"\\]|\\.)*\"|'(?:[^'\\]|\\.)*'"
        r"|(?<![\w-])(?P<name>" + "|".join(re.escape(n) for n in ordered) + r")(?![\w-])"
    )

    def _rewrite(match: re.Match[str]) -> str:
        if match.group("name") is None:
            return match.group(0)
        return mangle(match.group("name"))

    return name_re.sub(_rewrite, code)


class HyphenatedNames(Extension):
    """Make hyphenated variable names usable inside Jinja tags."""

    def __init__(self, environment: Environment) -> None:
        super().__init__(environment)
        environment.extend(hyphenated_names=())

    def preprocess(self, source: str, name: str | None, filename: str | None = None) -> str:
        names = self.environment.hyphenated_names
        if not names:
            return source

        def _rewrite_tag(match: re.Match[str]) -> str:
            if match.group("raw") is not None:
                return match.group("raw")
            return rewrite_hyphenated_names(match.group("tag"), names)

        return _TAG_RE.sub(_rewrite_tag, source)


def create_environment(hyphenated_names: Iterable[str] = ()) -> Environment:
    """Create the Jinja environment used for paths and file contents."""
    env = Environment(
        undefined=StrictUndefined,
        keep_trailing_newline=True,
        autoescape=False,
        extensions=[HyphenatedNames],
    )
    env.hyphenated_names = tuple(hyphenated_names)
    env.filters.update(CASE_FILTERS)
    return env


def is_binary(data: bytes) -> bool:
    """Guess whether file content is binary.

    Content is binary if it has a NUL byte near the start or is not
    valid UTF-8.
    """
    if b"\0" in data[:_BINARY_SNIFF_SIZE]:
        return True
    try:
        data.decode("utf-8")
    except UnicodeDecodeError:
        return True
    return False


def strip_template_suffix(name: str) -> str:
    for suffix in TEMPLATE_SUFFIXES:
        if name.endswith(suffix) and len(name) > len(suffix):
            return name[: -len(suffix)]
    return name


class TemplateRenderer:
    """Renders strings against a fixed snapshot of template variables.

    Args:
        variables: Resolved variables. The mapping is copied, so later
            changes to the source do not affect this renderer.
    """

    def __init__(self, variables: Mapping[str, Value]) -> None:
        hyphenated = [name for name in variables if "-" in name]
        self.env = create_environment(hyphenated)
        self._crlf_env = self.env.overlay(newline_sequence="\r\n")
        self.context: dict[str, Value] = dict(variables)
        for name in hyphenated:
            self.context[mangle(name)] = variables[name]

    def render(self, text: str) -> str:
        """Render text; text without template markers is returned unchanged.

        Raises:
            jinja2.TemplateError: If the template is malformed or uses an
                undefined variable.
        """
        if not any(marker in text for marker in _MARKERS):
            return text
        env = self._crlf_env if "\r\n" in text else self.env
        return env.from_string(text).render(self.context)

    def render_name(self, name: str) -> str:
        """Render a single path segment and strip any template suffix."""
        return strip_template_suffix(self.render(name))


__all__ = [
    "TEMPLATE_SUFFIXES",
    "TemplateError",
    "TemplateRenderer",
    "create_environment",
    "is_binary",
    "mangle",
    "rewrite_hyphenated_names",
    "strip_template_suffix",
]
