"""
Configuration loader for wp_changelog.

All generator settings live in an immutable :class:`ChangelogConfig`.
Defaults can be overridden by an optional JSON file named
``.changelog.json`` in the repository root (or any path passed
explicitly). If an explicitly requested file is missing, or a file is
malformed or has values of the wrong type, a :class:`ConfigError` is
raised.

The project version shown for unreleased changes is read separately by
:func:`read_project_version`, which never raises.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field, replace
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple


logger = logging.getLogger(__name__)
# Attach a null handler to avoid "No handler" warnings in environments
# where logging has not been configured by the CLI.
if not logger.handlers:
    logger.addHandler(logging.NullHandler())


CONFIG_FILENAME = ".changelog.json"
DEFAULT_VERSION = "1.0.0"


class ConfigError(Exception):
    """Raised when the changelog configuration file is missing or invalid."""

    pass


@dataclass(frozen=True)
class CommitTypeInfo:
    """Section heading and console icon for a commit type."""

    title: str
    emoji: str


DEFAULT_COMMIT_TYPES: Mapping[str, CommitTypeInfo] = MappingProxyType(
    {
        "feat": CommitTypeInfo("🚀 Features", "🚀"),
        "fix": CommitTypeInfo("🐛 Bug Fixes", "🐛"),
        "docs": CommitTypeInfo("📚 Documentation", "📚"),
        "style": CommitTypeInfo("💄 Styling", "💄"),
        "refactor": CommitTypeInfo("♻️ Refactoring", "♻️"),
        "perf": CommitTypeInfo("⚡ Performance", "⚡"),
        "test": CommitTypeInfo("✅ Testing", "✅"),
        "chore": CommitTypeInfo("🔧 Maintenance", "🔧"),
        "ci": CommitTypeInfo("👷 CI/CD", "👷"),
        "build": CommitTypeInfo("📦 Build", "📦"),
        "revert": CommitTypeInfo("⏪ Reverts", "⏪"),
    }
)

DEFAULT_SECTIONS: Tuple[str, ...] = (
    "feat", "fix", "perf", "refactor", "docs", "style", "test", "chore", "build", "ci", "revert",
)

OTHER_TYPE_INFO = CommitTypeInfo("📝 Other Changes", "📝")


@dataclass(frozen=True)
class ChangelogConfig:
    """Read-only settings shared by the generator and the renderer.

    Attributes
    ----------
    output_file : str
        Path of the Markdown file to write, relative to the repository root.
    project_name : str
        Name used in the changelog preamble.
    repo_url : str
        Base URL of the hosted repository; commit links are
        ``{repo_url}/commit/{hash}``. Empty disables links.
    metadata_file : str
        JSON file holding the project ``version``.
    default_version : str
        Version used when the metadata file cannot be read.
    commit_types : Mapping[str, CommitTypeInfo]
        Heading and icon per commit type.
    sections : Tuple[str, ...]
        Order in which type sections are rendered. ``other`` always
        follows them.
    """

    output_file: str = "CHANGELOG.md"
    project_name: str = "Legacy Concierge WordPress"
    repo_url: str = "https://github.com/dylarcher/legacy-concierge"
    metadata_file: str = "package.json"
    default_version: str = DEFAULT_VERSION
    commit_types: Mapping[str, CommitTypeInfo] = field(default_factory=lambda: DEFAULT_COMMIT_TYPES)
    sections: Tuple[str, ...] = DEFAULT_SECTIONS

    def type_info(self, commit_type: str) -> CommitTypeInfo:
        """Return the heading/icon for ``commit_type``, falling back to ``other``."""
        return self.commit_types.get(commit_type, OTHER_TYPE_INFO)

    def commit_url(self, commit_hash: str) -> Optional[str]:
        if not self.repo_url:
            return None
        return f"{self.repo_url.rstrip('/')}/commit/{commit_hash}"


_STRING_KEYS = ("output_file", "project_name", "repo_url", "metadata_file", "default_version")


def _parse_commit_types(raw: Any) -> Dict[str, CommitTypeInfo]:
    if not isinstance(raw, dict):
        raise ConfigError("'commit_types' must be an object")
    commit_types = dict(DEFAULT_COMMIT_TYPES)
    for name, info in raw.items():
        # only headings/icons of the built-in types can be changed
        if name not in DEFAULT_COMMIT_TYPES:
            raise ConfigError(
                f"Unknown commit type '{name}' in 'commit_types'; "
                f"expected one of: {', '.join(DEFAULT_COMMIT_TYPES)}"
            )
        if not isinstance(info, dict):
            raise ConfigError(f"'commit_types.{name}' must be an object")
        title = info.get("title")
        emoji = info.get("emoji", "📝")
        if not isinstance(title, str) or not isinstance(emoji, str):
            raise ConfigError(f"'commit_types.{name}' needs string 'title' and 'emoji'")
        commit_types[name] = CommitTypeInfo(title=title, emoji=emoji)
    return commit_types


def config_from_dict(data: Dict[str, Any]) -> ChangelogConfig:
    """Build a :class:`ChangelogConfig` from decoded JSON, validating types."""
    if not isinstance(data, dict):
        raise ConfigError("Configuration must be a JSON object")

    unknown = sorted(set(data) - set(_STRING_KEYS) - {"commit_types", "sections"})
    if unknown:
        logger.warning("Ignoring unknown configuration keys: %s", ", ".join(unknown))

    overrides: Dict[str, Any] = {}
    for key in _STRING_KEYS:
        if key in data:
            if not isinstance(data[key], str):
                raise ConfigError(f"'{key}' must be a string")
            overrides[key] = data[key]

    if "commit_types" in data:
        overrides["commit_types"] = MappingProxyType(_parse_commit_types(data["commit_types"]))

    if "sections" in data:
        sections = data["sections"]
        if not isinstance(sections, list) or not all(isinstance(s, str) for s in sections):
            raise ConfigError("'sections' must be a list of strings")
        overrides["sections"] = tuple(s for s in sections if s != "other")

    return replace(ChangelogConfig(), **overrides)


def load_config(repo_root: Path, config_path: Optional[Path] = None) -> ChangelogConfig:
    """Load the changelog configuration.

    Args:
        repo_root: Repository root, searched for ``.changelog.json`` when
                   ``config_path`` is not given.
        config_path: Explicit configuration file. It must exist.

    Returns:
        The validated configuration; defaults when no file is present.

    Raises:
        ConfigError: If an explicit file is missing, or a file is
                     malformed or invalid.
    """
    explicit = config_path is not None
    path = config_path if explicit else repo_root / CONFIG_FILENAME

    if not path.exists():
        if explicit:
            logger.error("Configuration file '%s' does not exist", path)
            raise ConfigError(f"Missing configuration file: {path}")
        logger.debug("No %s found in %s, using defaults", CONFIG_FILENAME, repo_root)
        return ChangelogConfig()

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        logger.error("Failed to read or parse configuration file: %s", exc)
        raise ConfigError(f"Invalid JSON in {path.name}: {exc}") from exc

    config = config_from_dict(data)
    logger.debug("Loaded changelog configuration from: %s", path)
    return config


def read_project_version(metadata_path: Path, default: str = DEFAULT_VERSION) -> str:
    """Return the ``version`` field of a JSON metadata file such as ``package.json``.

    Any failure (missing file, invalid JSON, absent or empty version) logs a
    warning and returns ``default``.
    """
    try:
        data = json.loads(metadata_path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        logger.warning("Could not read version from %s (%s), using %s", metadata_path.name, exc, default)
        return default

    version = data.get("version") if isinstance(data, dict) else None
    if not isinstance(version, str) or not version.strip():
        logger.warning("No version in %s, using %s", metadata_path.name, default)
        return default
    return version.strip()
