"""Tests for placeholder slot models."""

from __future__ import annotations

import pytest
from pydantic import TypeAdapter, ValidationError

from stamper.errors import InvalidValue
from stamper.models.slots import BoolSlot, Slot, StringSlot

slot_adapter = TypeAdapter(Slot)


class TestSlotDiscrimination:
    """Tests for the tagged union on the ``type`` key."""

    def test_bool_type_builds_bool_slot(self) -> None:
        """type = "bool" yields a BoolSlot."""
        slot = slot_adapter.validate_python({"type": "bool", "prompt": "Wasm?"})
        assert isinstance(slot, BoolSlot)
        assert slot.default is None

    def test_string_type_builds_string_slot(self) -> None:
        """type = "string" yields a StringSlot."""
        slot = slot_adapter.validate_python(
            {"type": "string", "prompt": "License", "choices": ["MIT", "Apache-2.0"]}
        )
        assert isinstance(slot, StringSlot)
        assert slot.choices == ["MIT", "Apache-2.0"]

    def test_unknown_type_rejected(self) -> None:
        """An unknown slot type is a validation error."""
        with pytest.raises(ValidationError):
            slot_adapter.validate_python({"type": "integer", "prompt": "Count"})

    def test_bool_slot_rejects_regex(self) -> None:
        """A bool slot cannot carry a regex."""
        with pytest.raises(ValidationError):
            slot_adapter.validate_python({"type": "bool", "prompt": "x", "regex": ".*"})

    def test_default_type_must_match_slot_type(self) -> None:
        """A string default on a bool slot is rejected, and vice versa."""
        with pytest.raises(ValidationError):
            slot_adapter.validate_python({"type": "bool", "prompt": "x", "default": "yes"})
        with pytest.raises(ValidationError):
            slot_adapter.validate_python({"type": "string", "prompt": "x", "default": True})


class TestStringSlotDeclaration:
    """Tests for declaration-time checks on string slots."""

    def test_invalid_regex_rejected(self) -> None:
        """A regex that does not compile is rejected."""
        with pytest.raises(ValidationError, match="invalid regex"):
            StringSlot(type="string", prompt="x", regex="[a-")

    def test_default_must_match_regex(self) -> None:
        """The default must fully match the regex."""
        with pytest.raises(ValidationError, match="does not match"):
            StringSlot(type="string", prompt="x", regex="[a-z]+", default="abc1")

    def test_choices_must_not_be_empty(self) -> None:
        """An empty choice list is rejected."""
        with pytest.raises(ValidationError, match="must not be empty"):
            StringSlot(type="string", prompt="x", choices=[])

    def test_choices_must_be_unique(self) -> None:
        """Duplicated choices are rejected."""
        with pytest.raises(ValidationError, match="unique"):
            StringSlot(type="string", prompt="x", choices=["a", "a"])

    def test_default_must_be_a_choice(self) -> None:
        """The default has to be one of the choices."""
        with pytest.raises(ValidationError, match="not one of the choices"):
            StringSlot(type="string", prompt="x", choices=["a", "b"], default="c")

    def test_choices_must_match_regex(self) -> None:
        """Every choice has to fully match the regex."""
        with pytest.raises(ValidationError, match="choice 'ABC' does not match"):
            StringSlot(type="string", prompt="x", regex="[a-z]+", choices=["ABC", "abc"])

    def test_valid_constrained_slot(self) -> None:
        """A regex, choices and matching default are accepted together."""
        slot = StringSlot(
            type="string", prompt="x", regex="[a-z]", choices=["a", "b"], default="b"
        )
        assert slot.default == "b"


class TestStringSlotValues:
    """Tests for validating supplied string values."""

    def test_regex_slot_never_accepts_non_matching_value(self) -> None:
        """Every value that does not fully match the regex is rejected."""
        slot = StringSlot(type="string", prompt="x", regex="[a-z][a-z0-9_]*", var_name="ident")
        for value in ["", "1abc", "abc-def", "ABC", "abc ", " abc"]:
            with pytest.raises(InvalidValue):
                slot.validate_value(value)
        for value in ["a", "abc_1", "z9"]:
            assert slot.validate_value(value) == value

    def test_choice_slot_rejects_other_values(self) -> None:
        """A value outside the choice set is rejected and names the slot."""
        slot = StringSlot(type="string", prompt="x", choices=["MIT"], var_name="license")
        with pytest.raises(InvalidValue) as exc_info:
            slot.validate_value("GPL")
        assert exc_info.value.var_name == "license"

    def test_boolean_value_rejected(self) -> None:
        """A boolean is not a valid string value."""
        slot = StringSlot(type="string", prompt="x", var_name="s")
        with pytest.raises(InvalidValue):
            slot.validate_value(True)


class TestBoolSlotValues:
    """Tests for validating supplied bool values."""

    @pytest.mark.parametrize("word", ["true", "YES", "y", "1"])
    def test_truthy_words(self, word) -> None:
        """Common spellings of yes parse to True."""
        assert BoolSlot(type="bool", prompt="x").validate_value(word) is True

    @pytest.mark.parametrize("word", ["false", "No", "n", "0"])
    def test_falsy_words(self, word) -> None:
        """Common spellings of no parse to False."""
        assert BoolSlot(type="bool", prompt="x").validate_value(word) is False

    def test_booleans_pass_through(self) -> None:
        """Booleans are returned unchanged."""
        slot = BoolSlot(type="bool", prompt="x")
        assert slot.validate_value(False) is False

    def test_other_strings_rejected(self) -> None:
        """Anything else is an InvalidValue."""
        slot = BoolSlot(type="bool", prompt="x", var_name="flag")
        with pytest.raises(InvalidValue, match="flag"):
            slot.validate_value("maybe")
