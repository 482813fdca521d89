"""Template configuration models.

These models encode the contract of a template's ``stamper.toml``:
the ``[template]`` section with include/exclude/ignore globs and the
version requirement, ``[hooks]``, ``[placeholders.<name>]`` slot
definitions and ``[conditional."<expr>"]`` fragments.
"""

from __future__ import annotations

from pydantic import AliasChoices, BaseModel, Field, model_validator

from stamper.models.slots import Slot

CONFIG_FILE_NAMES: tuple[str, ...] = ("stamper.toml", "cargo-generate.toml")


class TemplateSection(BaseModel):
    """The ``[template]`` section."""

    model_config = {"extra": "forbid", "populate_by_name": True}

    include: list[str] | None = None
    exclude: list[str] | None = None
    ignore: list[str] | None = None
    stamper_version: str | None = Field(
        default=None,
        validation_alias=AliasChoices("stamper_version", "cargo_generate_version"),
    )


class HooksConfig(BaseModel):
    """The ``[hooks]`` section: ordered pre and post hook scripts."""

    model_config = {"extra": "forbid"}

    pre: list[str] = Field(default_factory=list)
    post: list[str] = Field(default_factory=list)


def _name_slots(placeholders: dict[str, Slot]) -> None:
    for name, slot in placeholders.items():
        slot.var_name = name


class ConditionalFragment(BaseModel):
    """A configuration delta activated when its guarding expression is true."""

    model_config = {"extra": "forbid"}

    include: list[str] | None = None
    exclude: list[str] | None = None
    ignore: list[str] | None = None
    placeholders: dict[str, Slot] | None = None

    @model_validator(mode="after")
    def _assign_var_names(self) -> ConditionalFragment:
        if self.placeholders:
            _name_slots(self.placeholders)
        return self


class TemplateConfig(BaseModel):
    """A parsed template configuration file.

    Placeholder and conditional ordering follows the order of the source
    document; both are evaluated in that order.
    """

    model_config = {"extra": "forbid"}

    template: TemplateSection | None = None
    hooks: HooksConfig | None = None
    placeholders: dict[str, Slot] | None = None
    conditional: dict[str, ConditionalFragment] | None = None

    @model_validator(mode="after")
    def _assign_var_names(self) -> TemplateConfig:
        if self.placeholders:
            _name_slots(self.placeholders)
        return self

    def get_hook_files(self) -> list[str]:
        """Return every hook path, pre-hooks first, without duplicates."""
        if self.hooks is None:
            return []
        files: list[str] = []
        for path in [*self.hooks.pre, *self.hooks.post]:
            if path not in files:
                files.append(path)
        return files
