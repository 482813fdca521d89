"""Error formatter for configuration validation failures.

Produces annotated error messages pointing at the offending line in
human mode and concise file:line:col -- message output in CI mode.
"""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from stamper.loader.validator import ValidationErrorDetail


# Map pydantic error types to error codes
ERROR_CODES: dict[str, str] = {
    "extra_forbidden": "E001",
    "missing": "E002",
    "value_error": "E003",
    "string_type": "E004",
    "bool_type": "E004",
    "list_type": "E004",
    "dict_type": "E004",
    "model_type": "E004",
    "literal_error": "E005",
    "union_tag_invalid": "E005",
    "union_tag_not_found": "E002",
    "toml_syntax_error": "E006",
    "yaml_syntax_error": "E006",
}

ERROR_DESCRIPTIONS: dict[str, str] = {
    "E001": "unknown field",
    "E002": "required field missing",
    "E003": "invalid value",
    "E004": "type mismatch",
    "E005": "invalid placeholder type",
    "E006": "syntax error",
}


class ErrorFormatter:
    """Formats validation errors for human or CI consumption.

    Args:
        ci_mode: If True, use CI-friendly concise output. If None,
            auto-detect from the CI environment variable.
    """

    def __init__(self, ci_mode: bool | None = None) -> None:
        if ci_mode is None:
            self.ci_mode = os.environ.get("CI", "").lower() in ("true", "1", "yes")
        else:
            self.ci_mode = ci_mode

    def _get_error_code(self, error_type: str) -> str:
        if error_type in ERROR_CODES:
            return ERROR_CODES[error_type]
        if error_type.endswith("_type") or error_type.endswith("_parsing"):
            return "E004"
        return "E999"

    def format_error(
        self,
        error: ValidationErrorDetail,
        source_lines: list[str],
        filename: str,
    ) -> str:
        """Format a single error for display."""
        if self.ci_mode:
            line = error.line or 0
            col = error.col or 0
            suggestion = f" ({error.suggestion})" if error.suggestion else ""
            return f"{filename}:{line}:{col} -- {error.field}: {error.message}{suggestion}"
        return self._format_rich(error, source_lines, filename)

    def _format_rich(
        self,
        error: ValidationErrorDetail,
        source_lines: list[str],
        filename: str,
    ) -> str:
        """Format an error with a source snippet.

        Produces output like::

            error[E001]: unknown field
              --> stamper.toml:2:1
               |
             2 | inclde = ["*.rs"]
               | ^^^^^^ Extra inputs are not permitted
               |
               = help: Did you mean 'include'?
        """
        code = self._get_error_code(error.type)
        lines = [f"error[{code}]: {ERROR_DESCRIPTIONS.get(code, 'validation error')}"]

        line_idx = (error.line or 0) - 1
        if error.line is not None and 0 <= line_idx < len(source_lines):
            lines.append(f"  --> {filename}:{error.line}:{error.col or 1}")
            lines.append("   |")
            src_line = source_lines[line_idx].rstrip()
            number = str(error.line)
            padding = " " * len(number)
            lines.append(f" {number} | {src_line}")

            field_name = error.field.split(".")[-1]
            start = src_line.find(field_name)
            if start >= 0:
                marker = " " * start + "^" * len(field_name)
                lines.append(f" {padding} | {marker} {error.message}")
            else:
                lines.append(f" {padding} | {error.message}")
        else:
            lines.append(f"  --> {filename}")
            lines.append("   |")
            lines.append(f"   | {error.field}: {error.message}")
        lines.append("   |")

        if error.suggestion:
            lines.append(f"   = help: {error.suggestion}")

        return "\n".join(lines)

    def format_all(
        self,
        errors: list[ValidationErrorDetail],
        source: str,
        filename: str,
    ) -> str:
        """Format all errors, separated by blank lines."""
        source_lines = source.splitlines()
        return "\n\n".join(
            self.format_error(error, source_lines, filename) for error in errors
        )
