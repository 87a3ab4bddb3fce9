"""
Data models for changelog generation.

A :class:`Commit` is built once per run from the git log and never
mutated. Commits are collected into :class:`VersionBucket` instances
which the renderer turns into Markdown sections.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import List, Optional


@dataclass(frozen=True)
class CommitClassification:
    """Result of classifying a commit subject/body pair.

    Attributes
    ----------
    type : str
        The Conventional Commit type (feat, fix, docs, etc.) or ``other``.
    scope : Optional[str]
        Scope extracted from ``type(scope):`` subjects, if any.
    breaking : bool
        Whether the commit is flagged as a breaking change.
    """

    type: str
    scope: Optional[str] = None
    breaking: bool = False


@dataclass(frozen=True)
class Commit:
    """A single non-merge commit read from the git log."""

    hash: str
    date: datetime
    author: str
    subject: str
    body: str = ""
    type: str = "other"
    scope: Optional[str] = None
    breaking: bool = False
    is_merge: bool = False

    @property
    def short_hash(self) -> str:
        return self.hash[:7]


@dataclass
class VersionBucket:
    """Commits grouped under a single version heading.

    Attributes
    ----------
    version : str
        Version label shown in the heading (e.g. ``1.2.0``).
    commits : List[Commit]
        Commits in log order (newest first).
    date : Optional[date]
        Release date for tagged versions; informational for unreleased ones.
    unreleased : bool
        True for changes that have not been tagged yet.
    """

    version: str
    commits: List[Commit] = field(default_factory=list)
    date: Optional[date] = None
    unreleased: bool = False
