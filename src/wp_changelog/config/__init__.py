"""
Configuration loading for wp_changelog.

See :mod:`wp_changelog.config.loader` for implementation details.
"""

from .loader import ChangelogConfig, ConfigError, load_config, read_project_version  # noqa: F401
