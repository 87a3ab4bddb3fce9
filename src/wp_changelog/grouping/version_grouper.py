"""
Partition commits into version buckets.

By default every commit lands in a single unreleased bucket labelled
with the project's current version. :func:`partition_by_tags` is the
opt-in alternative that cuts the log at tagged commits.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Dict, Iterable, List, Sequence

from wp_changelog.grouping.commit_model import Commit, VersionBucket
from wp_changelog.vcs.git_client import TagRef


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())


def group_commits_by_version(
    commits: Iterable[Commit],
    current_version: str,
    today: date,
) -> List[VersionBucket]:
    """Group all commits under the current, unreleased version.

    Returns a list holding exactly one bucket, even when ``commits`` is empty.
    """
    return [
        VersionBucket(
            version=current_version,
            commits=list(commits),
            date=today,
            unreleased=True,
        )
    ]


def _version_label(tag_name: str) -> str:
    if tag_name[:1] in {"v", "V"} and tag_name[1:2].isdigit():
        return tag_name[1:]
    return tag_name


def partition_by_tags(
    commits: Sequence[Commit],
    tags: Sequence[TagRef],
    current_version: str,
    today: date,
) -> List[VersionBucket]:
    """Split a newest-first commit list into one bucket per tag.

    A tagged commit opens a new released bucket that contains it and every
    older commit up to the next tagged one. Commits newer than the newest
    tag form a leading unreleased bucket, which is omitted when empty.
    Merge commits take part in the cut but are not kept in the buckets.
    When several tags point at one commit the first one listed wins.
    """
    tags_by_commit: Dict[str, TagRef] = {}
    for tag in tags:
        tags_by_commit.setdefault(tag.commit, tag)

    unreleased = VersionBucket(version=current_version, date=today, unreleased=True)
    buckets: List[VersionBucket] = [unreleased]
    current = unreleased
    for commit in commits:
        tag = tags_by_commit.get(commit.hash)
        if tag is not None:
            logger.debug("Commit %s starts version %s", commit.short_hash, tag.name)
            current = VersionBucket(version=_version_label(tag.name), date=tag.date)
            buckets.append(current)
        if not commit.is_merge:
            current.commits.append(commit)

    if not unreleased.commits and len(buckets) > 1:
        buckets.pop(0)
    return buckets
