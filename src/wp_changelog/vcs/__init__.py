"""
Version control integration.

Contains the Git client used to read commit history and tags.
"""

from .git_client import GitClient, GitError  # noqa: F401
