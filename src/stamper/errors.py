"""Exception hierarchy for template expansion.

Every failure that aborts a generation run derives from StamperError.
The pipeline driver stamps the stage that was executing onto the error
so the CLI can report where the run stopped.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from stamper.loader.validator import ValidationErrorDetail


class StamperError(Exception):
    """Base class for all fatal generation errors.

    Attributes:
        message: Human-readable description of the failure.
        stage: Name of the pipeline stage that failed, set by the driver.
    """

    def __init__(self, message: str) -> None:
        self.message = message
        self.stage: str | None = None
        super().__init__(message)


# -- configuration -----------------------------------------------------------


class ConfigurationError(StamperError):
    """Raised when a configuration file is malformed or fails validation."""

    def __init__(
        self,
        message: str,
        errors: list[ValidationErrorDetail] | None = None,
        source: str = "",
        filename: str = "<string>",
    ) -> None:
        self.errors = errors or []
        self.source = source
        self.filename = filename
        super().__init__(message)


class TemplateVersionMismatch(ConfigurationError):
    """Raised when the running stamper version does not satisfy the template."""

    def __init__(self, requirement: str, version: str) -> None:
        self.requirement = requirement
        self.version = version
        super().__init__(
            f"Required stamper version not met. Required: {requirement} was: {version}"
        )


class UnsupportedValueType(ConfigurationError):
    """Raised when a pre-supplied value is neither a string nor a boolean."""

    def __init__(self, name: str, value: Any) -> None:
        self.name = name
        self.value = value
        super().__init__(
            f"Unsupported value type for '{name}' ({type(value).__name__}). "
            "Only Strings and Booleans are supported."
        )


# -- resolution --------------------------------------------------------------


class ResolutionError(StamperError):
    """Raised when a placeholder value cannot be resolved."""


class MissingPlaceholderVariable(ResolutionError):
    """Raised in silent mode when a placeholder has no value."""

    def __init__(self, var_name: str) -> None:
        self.var_name = var_name
        super().__init__(
            f"Missing placeholder variable: '{var_name}'. "
            "Provide it with --define or a template values file when using --silent."
        )


class InvalidValue(ResolutionError):
    """Raised when a supplied value violates a slot's type, regex or choices."""

    def __init__(self, var_name: str, reason: str) -> None:
        self.var_name = var_name
        self.reason = reason
        super().__init__(f"Invalid value for '{var_name}': {reason}")


# -- filesystem --------------------------------------------------------------


class FilesystemError(StamperError):
    """Raised for I/O failures and invalid template layouts."""


class DestinationExistsError(FilesystemError):
    """Raised when expansion would overwrite existing files."""

    def __init__(self, path: str, message: str | None = None) -> None:
        self.path = path
        super().__init__(message or f"File already exists: {path}")


class SymlinkNotSupported(FilesystemError):
    """Raised when the template tree contains a symbolic link."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"Symbolic links not supported: {path}")


class SubfolderError(FilesystemError):
    """Raised when the requested template subfolder is unusable."""


# -- template source ---------------------------------------------------------


class SourceError(StamperError):
    """Raised when the template cannot be located, cloned or copied."""


class VcsError(StamperError):
    """Raised when the generated project cannot be put under version control."""


# -- rendering ---------------------------------------------------------------


class RenderError(StamperError):
    """Raised when a path or file cannot be rendered by the template engine."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to render '{path}': {reason}")


# -- hooks -------------------------------------------------------------------


class HookError(StamperError):
    """Raised when a lifecycle hook cannot run or fails."""


class HookPermissionError(HookError):
    """Raised when a hook needs --allow-commands and it was not granted."""

    def __init__(self, hook: str) -> None:
        self.hook = hook
        super().__init__(
            f"Hook '{hook}' runs an external command. "
            "Re-run with --allow-commands to permit it."
        )


class HookFailed(HookError):
    """Raised when a hook exits with a non-zero status."""

    def __init__(self, hook: str, returncode: int, stderr: str = "") -> None:
        self.hook = hook
        self.returncode = returncode
        self.stderr = stderr
        detail = f": {stderr.strip()}" if stderr.strip() else ""
        super().__init__(f"Hook '{hook}' exited with status {returncode}{detail}")
