"""Application configuration model for stamper.

Captures the user-wide ``config.yaml``: default values applied to every
run and named favorites that point at frequently used templates.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import typer
from pydantic import BaseModel, Field

from stamper.errors import ConfigurationError

APP_NAME = "stamper"
APP_CONFIG_FILE_NAME = "config.yaml"


class DefaultsConfig(BaseModel):
    """Defaults applied when the command line does not override them."""

    model_config = {"extra": "forbid"}

    ssh_identity: str | None = None
    values: dict[str, Any] = Field(default_factory=dict)


class FavoriteConfig(BaseModel):
    """A named shortcut to a template location."""

    model_config = {"extra": "forbid"}

    description: str | None = None
    git: str | None = None
    path: str | None = None
    branch: str | None = None
    subfolder: str | None = None
    vcs: Literal["git", "none"] | None = None
    values: dict[str, Any] = Field(default_factory=dict)


class AppConfig(BaseModel):
    """User-wide configuration loaded from config.yaml."""

    model_config = {"extra": "forbid"}

    defaults: DefaultsConfig = Field(default_factory=DefaultsConfig)
    favorites: dict[str, FavoriteConfig] = Field(default_factory=dict)

    def get_favorite(self, name: str | None) -> FavoriteConfig | None:
        if name is None:
            return None
        return self.favorites.get(name)


def app_config_path(explicit: Path | None = None) -> Path:
    """Return the application config path.

    Args:
        explicit: Path given with ``--config``; it must exist.

    Returns:
        The explicit path, or ``config.yaml`` in the per-user app dir.

    Raises:
        ConfigurationError: If an explicit path does not exist.
    """
    if explicit is not None:
        if not explicit.exists():
            raise ConfigurationError(f"Config file not found: {explicit}")
        return explicit
    return Path(typer.get_app_dir(APP_NAME)) / APP_CONFIG_FILE_NAME
