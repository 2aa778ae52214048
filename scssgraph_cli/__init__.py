"""SCSS variable dependency resolution and impact analysis."""

__version__ = "0.1.0"
