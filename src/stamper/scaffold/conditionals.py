"""Merging of conditional configuration fragments.

Each ``[conditional."<expr>"]`` fragment whose expression holds for the
current variables contributes its include/exclude/ignore globs and its
placeholders to the active configuration. The merge is a single pass:
every expression sees the same snapshot, taken before the pass began,
so a condition cannot depend on a placeholder that another fragment of
the same pass introduces.
"""

from __future__ import annotations

from collections.abc import Mapping

from stamper.models.slots import Value
from stamper.models.template_config import TemplateConfig, TemplateSection
from stamper.scaffold.expressions import evaluate


def _extend(base: list[str] | None, extra: list[str] | None) -> list[str] | None:
    if extra is None:
        return base
    return [*(base or []), *extra]


def active_conditions(config: TemplateConfig, snapshot: Mapping[str, Value]) -> list[str]:
    """Return the conditional keys that evaluate true, in declaration order."""
    return [expr for expr in (config.conditional or {}) if evaluate(expr, snapshot)]


def merge_conditionals(config: TemplateConfig, snapshot: Mapping[str, Value]) -> TemplateConfig:
    """Fold the active conditional fragments into a copy of config.

    Args:
        config: The parsed template configuration; it is not modified.
        snapshot: Read-only view of the variables resolved so far.

    Returns:
        A new configuration with the fragments' globs appended, their
        placeholders added (an existing name is overwritten) and the
        ``conditional`` table consumed.
    """
    merged = config.model_copy(deep=True)
    conditionals = merged.conditional
    merged.conditional = None
    if not conditionals:
        return merged

    section = merged.template or TemplateSection()
    for expr in active_conditions(config, snapshot):
        fragment = conditionals[expr]
        section.include = _extend(section.include, fragment.include)
        section.exclude = _extend(section.exclude, fragment.exclude)
        section.ignore = _extend(section.ignore, fragment.ignore)
        if fragment.placeholders:
            placeholders = merged.placeholders if merged.placeholders is not None else {}
            placeholders.update(fragment.placeholders)
            merged.placeholders = placeholders
    merged.template = section
    return merged
