"""Stamper data models - re-exports all public model classes."""

from stamper.models.args import CrateType, GenerateArgs, Vcs
from stamper.models.config import AppConfig, DefaultsConfig, FavoriteConfig
from stamper.models.slots import BoolSlot, Slot, StringSlot
from stamper.models.template_config import (
    CONFIG_FILE_NAMES,
    ConditionalFragment,
    HooksConfig,
    TemplateConfig,
    TemplateSection,
)

__all__ = [
    "AppConfig",
    "BoolSlot",
    "CONFIG_FILE_NAMES",
    "ConditionalFragment",
    "CrateType",
    "DefaultsConfig",
    "FavoriteConfig",
    "GenerateArgs",
    "HooksConfig",
    "Slot",
    "StringSlot",
    "TemplateConfig",
    "TemplateSection",
    "Vcs",
]
