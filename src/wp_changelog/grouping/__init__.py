"""
Classification and grouping of commits for the changelog.

See :mod:`wp_changelog.grouping.commit_classifier` and
:mod:`wp_changelog.grouping.version_grouper` for details.
"""

from .commit_classifier import classify_commit, strip_conventional_prefix  # noqa: F401
from .commit_model import Commit, CommitClassification, VersionBucket  # noqa: F401
from .version_grouper import group_commits_by_version, partition_by_tags  # noqa: F401
