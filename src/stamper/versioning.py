"""Cargo-style semantic version requirements.

A requirement is a comma-separated list of comparators, all of which
must hold. Supported forms::

    1.2.3  ^1.2.3  ~1.2  =1.2.3  >1  >=1.2  <2  <=1.4.2  1.*  *

A bare version is a caret requirement. Missing minor or patch parts are
filled according to the operator, the way Cargo does it.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from stamper.errors import ConfigurationError, TemplateVersionMismatch

_VERSION_RE = re.compile(
    r"^(?P<major>\d+)\.(?P<minor>\d+)\.(?P<patch>\d+)"
    r"(?:-(?P<pre>[0-9A-Za-z.-]+))?(?:\+[0-9A-Za-z.-]+)?$"
)
_COMPARATOR_RE = re.compile(
    r"^(?P<op>\^|~|=|>=|<=|>|<)?\s*"
    r"(?P<major>\d+|[*xX])(?:\.(?P<minor>\d+|[*xX]))?(?:\.(?P<patch>\d+|[*xX]))?"
    r"(?:-(?P<pre>[0-9A-Za-z.-]+))?$"
)
_WILDCARDS = {"*", "x", "X"}


@dataclass(frozen=True, order=True)
class Version:
    major: int
    minor: int
    patch: int
    # Release versions sort after any pre-release of the same triple.
    pre: tuple = (1,)

    @classmethod
    def parse(cls, text: str) -> Version:
        match = _VERSION_RE.match(text.strip())
        if match is None:
            raise ValueError(f"invalid version: {text!r}")
        pre = match.group("pre")
        return cls(
            int(match.group("major")),
            int(match.group("minor")),
            int(match.group("patch")),
            (0, pre) if pre else (1,),
        )

    def __str__(self) -> str:
        base = f"{self.major}.{self.minor}.{self.patch}"
        return f"{base}-{self.pre[1]}" if len(self.pre) == 2 else base


def _part(value: str | None) -> int | None:
    if value is None or value in _WILDCARDS:
        return None
    return int(value)


def _bounds(op: str, major: int, minor: int | None, patch: int | None, pre: str | None):
    """Return (lower, lower_inclusive, upper) for one comparator.

    ``upper`` is exclusive; None means unbounded.
    """
    floor = Version(major, minor or 0, patch or 0, (0, pre) if pre else (1,))
    if op == "^":
        if major > 0 or minor is None:
            upper = Version(major + 1, 0, 0, (0, ""))
        elif minor > 0 or patch is None:
            upper = Version(0, minor + 1, 0, (0, ""))
        else:
            upper = Version(0, 0, patch + 1, (0, ""))
        return floor, True, upper
    if op == "~":
        if minor is None:
            return floor, True, Version(major + 1, 0, 0, (0, ""))
        return floor, True, Version(major, minor + 1, 0, (0, ""))
    if op == "=":
        if minor is None:
            return floor, True, Version(major + 1, 0, 0, (0, ""))
        if patch is None:
            return floor, True, Version(major, minor + 1, 0, (0, ""))
        return floor, True, Version(major, minor, patch, floor.pre + ("~",))
    if op == ">":
        if minor is None:
            return Version(major + 1, 0, 0, (0, "")), True, None
        if patch is None:
            return Version(major, minor + 1, 0, (0, "")), True, None
        return floor, False, None
    if op == ">=":
        return floor, True, None
    if op == "<":
        return None, True, floor if pre else Version(major, minor or 0, patch or 0, (0, ""))
    if op == "<=":
        if minor is None:
            return None, True, Version(major + 1, 0, 0, (0, ""))
        if patch is None:
            return None, True, Version(major, minor + 1, 0, (0, ""))
        return None, True, Version(major, minor, patch, floor.pre + ("~",))
    raise ValueError(f"unknown operator {op!r}")


@dataclass(frozen=True)
class Comparator:
    lower: Version | None
    lower_inclusive: bool
    upper: Version | None

    def matches(self, version: Version) -> bool:
        if self.lower is not None:
            if version < self.lower or (not self.lower_inclusive and version == self.lower):
                return False
        return self.upper is None or version < self.upper


def parse_requirement(requirement: str) -> list[Comparator]:
    """Parse a requirement string into its comparators.

    Raises:
        ValueError: If any comparator is malformed.
    """
    comparators: list[Comparator] = []
    for raw in requirement.split(","):
        raw = raw.strip()
        if not raw:
            raise ValueError(f"empty comparator in {requirement!r}")
        match = _COMPARATOR_RE.match(raw)
        if match is None:
            raise ValueError(f"invalid version requirement: {raw!r}")
        major = _part(match.group("major"))
        minor = _part(match.group("minor"))
        patch = _part(match.group("patch"))
        if major is None:
            comparators.append(Comparator(None, True, None))
            continue
        if minor is None and match.group("patch") is not None and patch is not None:
            raise ValueError(f"invalid version requirement: {raw!r}")
        op = match.group("op") or "^"
        if match.group("minor") in _WILDCARDS or match.group("patch") in _WILDCARDS:
            op = "=" if op == "^" else op
        comparators.append(Comparator(*_bounds(op, major, minor, patch, match.group("pre"))))
    return comparators


def version_matches(requirement: str, version: str) -> bool:
    """Return True if version satisfies requirement.

    >>> version_matches(">=0.9, <1", "0.15.2")
    True
    >>> version_matches("^0.14", "0.15.2")
    False
    """
    parsed = Version.parse(version)
    return all(c.matches(parsed) for c in parse_requirement(requirement))


def check_version(requirement: str | None, version: str) -> None:
    """Fail if the running version does not satisfy the template's requirement.

    Raises:
        ConfigurationError: If the requirement cannot be parsed.
        TemplateVersionMismatch: If it is not satisfied.
    """
    if not requirement:
        return
    try:
        satisfied = version_matches(requirement, version)
    except ValueError as exc:
        raise ConfigurationError(f"Invalid stamper_version requirement: {exc}") from exc
    if not satisfied:
        raise TemplateVersionMismatch(requirement, version)
