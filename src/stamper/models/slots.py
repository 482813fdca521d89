"""Placeholder slot models.

A slot describes one variable a template asks for. Slots are a closed
tagged union on the ``type`` key: ``bool`` slots take a yes/no answer,
``string`` slots take free text optionally constrained by a regex or a
fixed choice list.
"""

from __future__ import annotations

import re
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field, model_validator

from stamper.errors import InvalidValue

Value = Union[str, bool]

_TRUE_WORDS = frozenset({"true", "yes", "y", "1"})
_FALSE_WORDS = frozenset({"false", "no", "n", "0"})


class BoolSlot(BaseModel):
    """A yes/no placeholder."""

    model_config = {"extra": "forbid"}

    type: Literal["bool"]
    prompt: str
    default: bool | None = Field(default=None, strict=True)
    var_name: str = Field(default="", exclude=True)

    def validate_value(self, value: Value) -> bool:
        """Coerce a supplied value to a boolean.

        Strings such as ``"true"``/``"false"`` are accepted so that
        ``--define flag=true`` works for bool slots.

        Raises:
            InvalidValue: If the value cannot be read as a boolean.
        """
        if isinstance(value, bool):
            return value
        word = str(value).strip().lower()
        if word in _TRUE_WORDS:
            return True
        if word in _FALSE_WORDS:
            return False
        raise InvalidValue(self.var_name, f"expected a boolean, got {value!r}")


class StringSlot(BaseModel):
    """A free-text placeholder with optional regex and choice constraints."""

    model_config = {"extra": "forbid"}

    type: Literal["string"]
    prompt: str
    default: str | None = Field(default=None, strict=True)
    regex: str | None = None
    choices: list[str] | None = None
    var_name: str = Field(default="", exclude=True)

    @model_validator(mode="after")
    def _check_constraints(self) -> StringSlot:
        if self.regex is not None:
            try:
                pattern = re.compile(self.regex)
            except re.error as exc:
                raise ValueError(f"invalid regex {self.regex!r}: {exc}") from exc
            if self.default is not None and not pattern.fullmatch(self.default):
                raise ValueError(
                    f"default {self.default!r} does not match regex {self.regex!r}"
                )
            for choice in self.choices or []:
                if not pattern.fullmatch(choice):
                    raise ValueError(
                        f"choice {choice!r} does not match regex {self.regex!r}"
                    )
        if self.choices is not None:
            if not self.choices:
                raise ValueError("choices must not be empty")
            if len(set(self.choices)) != len(self.choices):
                raise ValueError("choices must be unique")
            if self.default is not None and self.default not in self.choices:
                raise ValueError(
                    f"default {self.default!r} is not one of the choices {self.choices}"
                )
        return self

    def matches_regex(self, value: str) -> bool:
        """Return True if value satisfies the regex, or there is none."""
        if self.regex is None:
            return True
        return re.fullmatch(self.regex, value) is not None

    def validate_value(self, value: Value) -> str:
        """Check a supplied value against the choice set and regex.

        Raises:
            InvalidValue: If the value is not a string, is not one of the
                choices, or does not match the regex.
        """
        if isinstance(value, bool):
            raise InvalidValue(self.var_name, f"expected a string, got {value!r}")
        if self.choices is not None and value not in self.choices:
            raise InvalidValue(
                self.var_name,
                f"{value!r} is not one of the choices {self.choices}",
            )
        if not self.matches_regex(value):
            raise InvalidValue(
                self.var_name,
                f"{value!r} does not match regex {self.regex!r}",
            )
        return value


Slot = Annotated[Union[BoolSlot, StringSlot], Field(discriminator="type")]
