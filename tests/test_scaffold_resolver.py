"""Tests for placeholder resolution and the variable context."""

from __future__ import annotations

import pytest

from stamper.errors import InvalidValue, MissingPlaceholderVariable, UnsupportedValueType
from stamper.loader.validator import validate_template_config_string
from stamper.scaffold.context import VariableContext
from stamper.scaffold.resolver import (
    add_missing_provided_values,
    fill_project_variables,
    make_slot_resolver,
)

CONFIG = """\
[placeholders.license]
type = "string"
prompt = "License?"
choices = ["MIT", "Apache-2.0"]
default = "MIT"

[placeholders.is_wasm]
type = "bool"
prompt = "Wasm?"

[placeholders.ident]
type = "string"
prompt = "Identifier?"
regex = "[a-z]+"
"""


class RecordingPrompt:
    """Prompt collaborator that records which slots were asked."""

    def __init__(self, answers):
        self.answers = answers
        self.asked = []

    def __call__(self, slot):
        self.asked.append(slot.var_name)
        return self.answers[slot.var_name]


def _config():
    config, errors = validate_template_config_string(CONFIG)
    assert errors == []
    return config


class TestFillProjectVariables:
    """Tests for fill_project_variables()."""

    def test_prompts_in_declaration_order(self) -> None:
        """Unresolved slots are prompted for in the order declared."""
        prompt = RecordingPrompt({"license": "MIT", "is_wasm": True, "ident": "abc"})
        context = VariableContext()
        fill_project_variables(context, _config(), make_slot_resolver({}, False, prompt))
        assert prompt.asked == ["license", "is_wasm", "ident"]
        assert dict(context) == {"license": "MIT", "is_wasm": True, "ident": "abc"}

    def test_provided_values_are_never_prompted(self) -> None:
        """A pre-supplied value is used without asking."""
        prompt = RecordingPrompt({"license": "MIT", "is_wasm": False, "ident": "x"})
        provided = {"license": "Apache-2.0", "is_wasm": "yes"}
        context = VariableContext()
        fill_project_variables(context, _config(), make_slot_resolver(provided, False, prompt))
        assert prompt.asked == ["ident"]
        assert context["license"] == "Apache-2.0"
        assert context["is_wasm"] is True

    def test_values_already_in_context_are_skipped(self) -> None:
        """A second pass does not ask again for resolved names."""
        prompt = RecordingPrompt({"license": "MIT", "is_wasm": True, "ident": "abc"})
        resolve = make_slot_resolver({}, False, prompt)
        context = VariableContext({"license": "MIT"})
        fill_project_variables(context, _config(), resolve)
        fill_project_variables(context, _config(), resolve)
        assert prompt.asked == ["is_wasm", "ident"]

    def test_silent_mode_fails_on_first_missing_value(self) -> None:
        """Silent mode names the first slot that has no value."""
        provided = {"license": "MIT"}
        resolve = make_slot_resolver(provided, True, RecordingPrompt({}))
        with pytest.raises(MissingPlaceholderVariable) as exc_info:
            fill_project_variables(VariableContext(), _config(), resolve)
        assert exc_info.value.var_name == "is_wasm"
        assert "is_wasm" in exc_info.value.message

    def test_silent_mode_does_not_fall_back_to_default(self) -> None:
        """A default does not stand in for a value in silent mode."""
        resolve = make_slot_resolver({}, True, RecordingPrompt({}))
        with pytest.raises(MissingPlaceholderVariable) as exc_info:
            fill_project_variables(VariableContext(), _config(), resolve)
        assert exc_info.value.var_name == "license"

    def test_silent_mode_succeeds_with_all_values(self) -> None:
        """Silent mode resolves entirely from provided values."""
        provided = {"license": "MIT", "is_wasm": False, "ident": "abc"}
        context = VariableContext()
        fill_project_variables(context, _config(), make_slot_resolver(provided, True, None))
        assert dict(context) == provided

    def test_provided_value_must_match_regex(self) -> None:
        """A provided value violating the slot regex is rejected."""
        resolve = make_slot_resolver({"ident": "ABC"}, False, RecordingPrompt({}))
        context = VariableContext({"license": "MIT", "is_wasm": False})
        with pytest.raises(InvalidValue):
            fill_project_variables(context, _config(), resolve)

    def test_provided_value_must_be_a_choice(self) -> None:
        """A provided value outside the choice set is rejected."""
        resolve = make_slot_resolver({"license": "GPL"}, False, RecordingPrompt({}))
        with pytest.raises(InvalidValue):
            fill_project_variables(VariableContext(), _config(), resolve)

    def test_provided_value_of_unsupported_type(self) -> None:
        """Numbers are not valid template values."""
        resolve = make_slot_resolver({"license": 3}, False, RecordingPrompt({}))
        with pytest.raises(UnsupportedValueType):
            fill_project_variables(VariableContext(), _config(), resolve)


class TestAddMissingProvidedValues:
    """Tests for add_missing_provided_values()."""

    def test_extra_values_added(self) -> None:
        """Values matching no slot are copied into the context."""
        context = VariableContext({"license": "MIT"})
        add_missing_provided_values(context, {"license": "GPL", "extra": "x", "flag": True})
        assert dict(context) == {"license": "MIT", "extra": "x", "flag": True}

    def test_unsupported_type_rejected(self) -> None:
        """Lists and numbers raise UnsupportedValueType."""
        with pytest.raises(UnsupportedValueType, match="Only Strings and Booleans"):
            add_missing_provided_values(VariableContext(), {"items": [1, 2]})


class TestVariableContext:
    """Tests for VariableContext."""

    def test_rejects_unsupported_values(self) -> None:
        """Only str and bool values can be stored."""
        context = VariableContext()
        with pytest.raises(UnsupportedValueType):
            context.set("count", 3)

    def test_snapshot_is_read_only_copy(self) -> None:
        """Snapshots do not change when the context does and cannot be written."""
        context = VariableContext({"a": "1"})
        snapshot = context.snapshot()
        context.set("b", True)
        assert "b" not in snapshot
        with pytest.raises(TypeError):
            snapshot["c"] = "x"

    def test_lease_and_exclusive_access(self) -> None:
        """assert_exclusive fails while a lease is held."""
        context = VariableContext()
        with context.lease() as leased:
            leased.set("from_hook", "yes")
            assert context.leased
            with pytest.raises(RuntimeError):
                context.assert_exclusive()
        context.assert_exclusive()
        assert context["from_hook"] == "yes"

    def test_lease_released_on_error(self) -> None:
        """An exception inside a lease still releases it."""
        context = VariableContext()
        with pytest.raises(ValueError):
            with context.lease():
                raise ValueError("hook failed")
        assert not context.leased
