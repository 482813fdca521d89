"""Resolution of placeholder slots into the variable context.

Every slot that has no value yet is resolved, in declaration order, from
a pre-supplied value or the interactive prompt. Silent mode never
prompts and fails on the first slot without a value. A slot that
already has a value is skipped, which makes a resolution pass safe to
repeat after a conditional merge.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

from stamper.errors import MissingPlaceholderVariable, UnsupportedValueType
from stamper.models.slots import Slot, Value
from stamper.models.template_config import TemplateConfig
from stamper.scaffold.context import VariableContext

SlotResolver = Callable[[Slot], Value]
Prompt = Callable[[Slot], Value]


def make_slot_resolver(
    provided: Mapping[str, Any],
    silent: bool,
    prompt: Prompt,
) -> SlotResolver:
    """Build the callback that obtains a value for one slot.

    Args:
        provided: Values supplied on the command line, in values files
            or in the application config.
        silent: If True, never prompt.
        prompt: Interactive collaborator asking the user for a value.

    Returns:
        A callable taking a slot and returning its validated value.
    """

    def resolve(slot: Slot) -> Value:
        if slot.var_name in provided:
            value = provided[slot.var_name]
            if not isinstance(value, (str, bool)):
                raise UnsupportedValueType(slot.var_name, value)
            return slot.validate_value(value)
        if silent:
            raise MissingPlaceholderVariable(slot.var_name)
        return prompt(slot)

    return resolve


def fill_project_variables(
    context: VariableContext,
    config: TemplateConfig,
    resolve_slot: SlotResolver,
) -> VariableContext:
    """Resolve every placeholder of config that context does not hold yet.

    Args:
        context: The live variable context; values are inserted in place.
        config: Configuration whose placeholders are resolved.
        resolve_slot: Callback producing a value for an unresolved slot.

    Returns:
        The same context, for chaining.
    """
    for name, slot in (config.placeholders or {}).items():
        if name in context:
            continue
        context.set(name, resolve_slot(slot))
    return context


def add_missing_provided_values(
    context: VariableContext,
    provided: Mapping[str, Any],
) -> VariableContext:
    """Copy pre-supplied values that match no placeholder into context.

    Raises:
        UnsupportedValueType: If a value is neither a string nor a boolean.
    """
    for name, value in provided.items():
        if name in context:
            continue
        if not isinstance(value, (str, bool)):
            raise UnsupportedValueType(name, value)
        context.set(name, value)
    return context
