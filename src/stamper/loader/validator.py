"""Configuration validation pipeline combining parsing with pydantic validation.

Two-stage validation: first parse the document with line tracking, then
validate against a pydantic model. Errors from both stages are enriched
with source positions and collected for batch reporting.
"""

from __future__ import annotations

import difflib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from stamper.errors import ConfigurationError
from stamper.loader.toml_parser import TOMLParseError, parse_toml_with_lines
from stamper.loader.yaml_parser import YAMLParseError, parse_yaml_with_lines
from stamper.models.config import AppConfig
from stamper.models.slots import BoolSlot, StringSlot
from stamper.models.template_config import (
    ConditionalFragment,
    HooksConfig,
    TemplateConfig,
    TemplateSection,
)

ModelT = TypeVar("ModelT", bound=BaseModel)

# Every key a template config may use, used for typo suggestions
TEMPLATE_CONFIG_FIELDS: list[str] = sorted(
    {
        name
        for model in (
            TemplateConfig,
            TemplateSection,
            HooksConfig,
            ConditionalFragment,
            BoolSlot,
            StringSlot,
        )
        for name in model.model_fields
        if name != "var_name"
    }
    | {"cargo_generate_version"}
)


@dataclass
class ValidationErrorDetail:
    """A single validation error with source position and context.

    Attributes:
        field: The field name or dotted path that caused the error.
        message: Human-readable error description.
        type: Pydantic error type string (e.g. 'missing', 'extra_forbidden').
        line: 1-indexed line number in the source, or None if unknown.
        col: 1-indexed column number in the source, or None if unknown.
        suggestion: 'Did you mean X?' suggestion for typos, or None.
        input_value: The invalid input value, if available.
    """

    field: str
    message: str
    type: str
    line: int | None = None
    col: int | None = None
    suggestion: str | None = None
    input_value: Any = field(default=None)


def _loc_to_field_path(loc: tuple[str | int, ...]) -> str:
    """Convert a pydantic error loc tuple to a dotted field path."""
    return ".".join(str(part) for part in loc)


def _find_line_for_field(
    field_path: str,
    line_map: dict[str, tuple[int, int]],
) -> tuple[int | None, int | None]:
    """Look up the position of a field, falling back to its closest parent."""
    parts = field_path.split(".")
    while parts:
        prefix = ".".join(parts)
        if prefix in line_map:
            return line_map[prefix]
        parts.pop()
    return None, None


def _get_suggestion(field_name: str, known_fields: list[str]) -> str | None:
    """Get a 'did you mean?' suggestion for a mistyped field name."""
    matches = difflib.get_close_matches(field_name, known_fields, n=1, cutoff=0.6)
    if matches:
        return f"Did you mean '{matches[0]}'?"
    return None


def validate_model(
    model: type[ModelT],
    raw_data: dict[str, Any],
    line_map: dict[str, tuple[int, int]],
    known_fields: list[str] | None = None,
) -> tuple[ModelT | None, list[ValidationErrorDetail]]:
    """Validate parsed data against a pydantic model.

    Returns:
        Tuple of (model, []) on success, or (None, errors) on failure.
    """
    known = known_fields if known_fields is not None else list(model.model_fields)
    try:
        return model.model_validate(raw_data), []
    except ValidationError as e:
        errors: list[ValidationErrorDetail] = []
        for err in e.errors():
            loc = err.get("loc", ())
            field_path = _loc_to_field_path(loc)
            error_type = err.get("type", "unknown")
            line, col = _find_line_for_field(field_path, line_map)

            suggestion = None
            if error_type == "extra_forbidden" and loc:
                suggestion = _get_suggestion(str(loc[-1]), known)

            errors.append(
                ValidationErrorDetail(
                    field=field_path,
                    message=err.get("msg", "Validation error"),
                    type=error_type,
                    line=line,
                    col=col,
                    suggestion=suggestion,
                    input_value=err.get("input"),
                )
            )
        return None, errors


def _syntax_error(e: TOMLParseError | YAMLParseError) -> list[ValidationErrorDetail]:
    kind = "toml_syntax_error" if isinstance(e, TOMLParseError) else "yaml_syntax_error"
    return [
        ValidationErrorDetail(
            field="<document>",
            message=e.message,
            type=kind,
            line=e.line,
            col=e.column,
        )
    ]


def validate_template_config_string(
    source: str,
    filename: str = "<string>",
) -> tuple[TemplateConfig | None, list[ValidationErrorDetail]]:
    """Validate a template configuration from a TOML string.

    An empty document is a valid, empty configuration.
    """
    try:
        raw_data, line_map = parse_toml_with_lines(source, filename=filename)
    except TOMLParseError as e:
        return None, _syntax_error(e)

    if raw_data is None:
        return TemplateConfig(), []

    return validate_model(TemplateConfig, raw_data, line_map, TEMPLATE_CONFIG_FIELDS)


def load_template_config(filepath: Path | None) -> TemplateConfig:
    """Load and validate a template configuration file.

    Args:
        filepath: Path to the config file, or None when the template
            ships no configuration.

    Returns:
        The validated TemplateConfig; an empty one when filepath is None.

    Raises:
        ConfigurationError: If the file has syntax or schema errors.
    """
    if filepath is None:
        return TemplateConfig()
    source = filepath.read_text(encoding="utf-8")
    config, errors = validate_template_config_string(source, filename=str(filepath))
    if errors:
        raise ConfigurationError(
            f"Invalid template configuration: {filepath}",
            errors=errors,
            source=source,
            filename=str(filepath),
        )
    assert config is not None
    return config


def load_app_config(filepath: Path) -> AppConfig:
    """Load the application config (defaults and favorites).

    A missing or empty file yields the default AppConfig.

    Raises:
        ConfigurationError: If the file has syntax or schema errors.
    """
    if not filepath.exists():
        return AppConfig()
    source = filepath.read_text(encoding="utf-8")
    try:
        raw_data, line_map = parse_yaml_with_lines(source, filename=str(filepath))
    except YAMLParseError as e:
        raise ConfigurationError(
            f"Invalid application config: {filepath}",
            errors=_syntax_error(e),
            source=source,
            filename=str(filepath),
        ) from e
    if raw_data is None:
        return AppConfig()

    config, errors = validate_model(AppConfig, raw_data, line_map)
    if errors:
        raise ConfigurationError(
            f"Invalid application config: {filepath}",
            errors=errors,
            source=source,
            filename=str(filepath),
        )
    assert config is not None
    return config


def load_values_file(filepath: Path) -> dict[str, Any]:
    """Read pre-supplied template values from a TOML or YAML file.

    TOML files carry the values in a ``[values]`` table; YAML files in a
    top-level ``values:`` mapping.

    Raises:
        ConfigurationError: If the file cannot be parsed or has no
            usable ``values`` table.
    """
    if not filepath.exists():
        raise ConfigurationError(f"Template values file not found: {filepath}")
    source = filepath.read_text(encoding="utf-8")
    try:
        if filepath.suffix in (".yaml", ".yml"):
            raw_data, _ = parse_yaml_with_lines(source, filename=str(filepath))
        else:
            raw_data, _ = parse_toml_with_lines(source, filename=str(filepath))
    except (TOMLParseError, YAMLParseError) as e:
        raise ConfigurationError(
            f"Invalid template values file: {filepath}",
            errors=_syntax_error(e),
            source=source,
            filename=str(filepath),
        ) from e

    values = (raw_data or {}).get("values", {})
    if not isinstance(values, dict):
        raise ConfigurationError(
            f"Invalid template values file: {filepath} ('values' must be a table)"
        )
    return values
