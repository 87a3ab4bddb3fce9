"""
Top-level package for wp_changelog.

This package exposes the main CLI entry point via the
``wp_changelog.cli`` module.
"""

__all__ = ["__version__"]

__version__ = "1.0.0"
