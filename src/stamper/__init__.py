"""Stamper - scaffold new projects from templates."""

__version__ = "0.15.2"
