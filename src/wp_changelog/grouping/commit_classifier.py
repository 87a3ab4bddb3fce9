"""
Heuristics for classifying commits into Conventional Commit types.

Subjects written as ``type(scope): description`` are classified from
their prefix. Everything else falls back to keyword detection in the
lowercased subject. The keyword table is checked in a fixed order, so a
subject mentioning both "fix" and "update" always resolves to ``fix``.
"""

from __future__ import annotations

import re
from typing import Tuple

from wp_changelog.grouping.commit_model import CommitClassification


COMMIT_TYPES = (
    "feat",
    "fix",
    "docs",
    "style",
    "refactor",
    "perf",
    "test",
    "chore",
    "ci",
    "build",
    "revert",
)

BREAKING_MARKER = "BREAKING CHANGE"

# type, optional (scope) which may itself hold parentheses, optional "!", colon
_CONVENTIONAL_RE = re.compile(r"^(\w+)(?:\((.*?)\))?(!)?:")
_PREFIX_RE = re.compile(r"^\w+(?:\(.*?\))?!?:\s*")

# Order matters: first matching row wins.
_KEYWORD_RULES: Tuple[Tuple[Tuple[str, ...], str], ...] = (
    (("fix", "bug"), "fix"),
    (("add", "new"), "feat"),
    (("update", "upgrade"), "chore"),
    (("doc",), "docs"),
    (("style", "css"), "style"),
    (("test",), "test"),
    (("refactor",), "refactor"),
    (("perf",), "perf"),
)


def _classify_by_keywords(subject: str) -> str:
    lowered = subject.lower()
    for keywords, commit_type in _KEYWORD_RULES:
        if any(keyword in lowered for keyword in keywords):
            return commit_type
    return "other"


def is_breaking_change(subject: str, body: str) -> bool:
    """Return True if the commit carries a breaking change marker."""
    return BREAKING_MARKER in subject or BREAKING_MARKER in body or "!:" in subject


def classify_commit(subject: str, body: str = "") -> CommitClassification:
    """Classify a commit into a Conventional Commit type.

    Parameters
    ----------
    subject : str
        First line of the commit message.
    body : str
        Remaining commit message text, may be empty.

    Returns
    -------
    CommitClassification
        The type (one of :data:`COMMIT_TYPES` or ``other``), the scope if
        the subject used the ``word(scope):`` form (whether or not ``word``
        is a known type), and the breaking flag.
    """
    subject = subject or ""
    body = body or ""
    breaking = is_breaking_change(subject, body)

    match = _CONVENTIONAL_RE.match(subject)
    if not match:
        return CommitClassification(type=_classify_by_keywords(subject), breaking=breaking)

    # the scope is kept even when the prefix word is not a known type
    scope = match.group(2) or None
    commit_type = match.group(1).lower()
    if commit_type not in COMMIT_TYPES:
        commit_type = _classify_by_keywords(subject)
    return CommitClassification(type=commit_type, scope=scope, breaking=breaking)


def strip_conventional_prefix(subject: str) -> str:
    """Remove a leading ``type(scope):`` prefix from ``subject``."""
    return _PREFIX_RE.sub("", subject, count=1)
