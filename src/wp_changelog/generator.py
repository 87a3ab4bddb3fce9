"""
Changelog generation pipeline.

This module provides the :class:`ChangelogGenerator` class, which reads
the commit log through :class:`GitClient`, classifies each commit with
``classify_commit``, groups the commits into version buckets and
renders the Markdown document. Failures to query git degrade to an
empty history unless ``strict`` is set; failures to write the output
file always propagate.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import List, Optional

from wp_changelog.config.loader import ChangelogConfig, read_project_version
from wp_changelog.grouping.commit_classifier import classify_commit
from wp_changelog.grouping.commit_model import Commit, VersionBucket
from wp_changelog.grouping.version_grouper import group_commits_by_version, partition_by_tags
from wp_changelog.render.markdown_renderer import render_changelog
from wp_changelog.vcs.git_client import GitClient, GitError, LogEntry


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())


def commit_from_log_entry(entry: LogEntry) -> Commit:
    """Classify a raw log entry into an immutable :class:`Commit`."""
    classification = classify_commit(entry.subject, entry.body)
    return Commit(
        hash=entry.hash,
        date=entry.date,
        author=entry.author,
        subject=entry.subject,
        body=entry.body,
        type=classification.type,
        scope=classification.scope,
        breaking=classification.breaking,
        is_merge=entry.is_merge,
    )


@dataclass
class ChangelogResult:
    """Outcome of a generation run."""

    version: str
    commits: List[Commit]
    buckets: List[VersionBucket]
    markdown: str
    output_path: Optional[Path] = None
    warnings: List[str] = field(default_factory=list)


class ChangelogGenerator:
    """Build ``CHANGELOG.md`` from a repository's git history."""

    def __init__(
        self,
        client: GitClient,
        config: ChangelogConfig,
        repo_root: Path,
        split_by_tags: bool = False,
        strict: bool = False,
    ) -> None:
        self.client = client
        self.config = config
        self.repo_root = repo_root
        self.split_by_tags = split_by_tags
        self.strict = strict

    def current_version(self) -> str:
        return read_project_version(
            self.repo_root / self.config.metadata_file, default=self.config.default_version
        )

    def fetch_commits(self, warnings: List[str]) -> List[Commit]:
        """Read and classify the commit log.

        Raises
        ------
        GitError
            Only when ``strict`` is set; otherwise the error is logged and
            an empty list is returned.
        """
        try:
            entries = self.client.get_log(include_merges=self.split_by_tags)
        except GitError as exc:
            if self.strict:
                raise
            logger.error("Error getting git commits: %s", exc)
            warnings.append(f"Could not read git history ({exc}); generating an empty changelog")
            return []
        return [commit_from_log_entry(entry) for entry in entries]

    def group(self, commits: List[Commit], version: str, today: date) -> List[VersionBucket]:
        if not self.split_by_tags:
            try:
                latest_tag = self.client.get_latest_tag()
            except GitError as exc:
                logger.debug("Latest tag lookup failed: %s", exc)
                latest_tag = None
            logger.debug("Latest tag: %s (not used for grouping)", latest_tag or "none")
            return group_commits_by_version(commits, version, today)

        try:
            tags = self.client.get_tags()
        except GitError as exc:
            if self.strict:
                raise
            logger.error("Error listing git tags: %s", exc)
            tags = []
        return partition_by_tags(commits, tags, version, today)

    def build(self, today: Optional[date] = None) -> ChangelogResult:
        """Run fetch, classify, group and render without touching the output file."""
        today = today or date.today()
        warnings: List[str] = []
        version = self.current_version()
        commits = self.fetch_commits(warnings)
        buckets = self.group(commits, version, today)
        markdown = render_changelog(buckets, self.config, generated_on=today)
        # merges only take part in tag partitioning
        kept = [c for c in commits if not c.is_merge]
        return ChangelogResult(
            version=version,
            commits=kept,
            buckets=buckets,
            markdown=markdown,
            warnings=warnings,
        )

    def write(self, result: ChangelogResult) -> Path:
        """Overwrite the configured output file with ``result.markdown``.

        Raises
        ------
        OSError
            If the file cannot be written.
        """
        output_path = self.repo_root / self.config.output_file
        output_path.write_text(result.markdown, encoding="utf-8")
        result.output_path = output_path
        logger.debug("Wrote %d bytes to %s", len(result.markdown), output_path)
        return output_path

    def generate(self, today: Optional[date] = None) -> ChangelogResult:
        result = self.build(today)
        self.write(result)
        return result
