"""Stamper config loader - parsing, validation, and error reporting."""

from stamper.loader.toml_parser import TOMLParseError, parse_toml_file, parse_toml_with_lines
from stamper.loader.validator import (
    ValidationErrorDetail,
    load_app_config,
    load_template_config,
    load_values_file,
    validate_template_config_string,
)
from stamper.loader.yaml_parser import YAMLParseError, parse_yaml_file, parse_yaml_with_lines

__all__ = [
    "TOMLParseError",
    "ValidationErrorDetail",
    "YAMLParseError",
    "load_app_config",
    "load_template_config",
    "load_values_file",
    "parse_toml_file",
    "parse_toml_with_lines",
    "parse_yaml_file",
    "parse_yaml_with_lines",
    "validate_template_config_string",
]
