"""
Render version buckets as a Keep a Changelog style Markdown document.

The output depends only on the buckets, the configuration and the
``generated_on`` date, so two runs over the same history on the same
day produce identical files.
"""

from __future__ import annotations

from collections import Counter
from datetime import date
from typing import Dict, Iterable, List, Sequence, Tuple

from wp_changelog.config.loader import ChangelogConfig
from wp_changelog.grouping.commit_classifier import strip_conventional_prefix
from wp_changelog.grouping.commit_model import Commit, VersionBucket


OTHER = "other"


def ordered_types(present: Iterable[str], config: ChangelogConfig) -> List[str]:
    """Return the types in ``present`` in section order, with ``other`` last.

    Types that are neither configured sections nor ``other`` are rendered
    just before ``other``, in the order they were first seen.
    """
    present = list(dict.fromkeys(present))
    ordered = [t for t in config.sections if t in present]
    extra = [t for t in present if t not in config.sections and t != OTHER]
    ordered.extend(extra)
    if OTHER in present:
        ordered.append(OTHER)
    return ordered


def format_commit_line(commit: Commit, config: ChangelogConfig) -> str:
    scope = f"**{commit.scope}**: " if commit.scope else ""
    subject = strip_conventional_prefix(commit.subject)
    url = config.commit_url(commit.hash)
    if url:
        ref = f"[`{commit.short_hash}`]({url})"
    else:
        ref = f"`{commit.short_hash}`"
    return f"- {scope}{subject} ({ref})"


def _render_preamble(config: ChangelogConfig) -> List[str]:
    return [
        "# Changelog",
        "",
        f"All notable changes to **{config.project_name}** will be documented in this file.",
        "",
        "The format is based on [Keep a Changelog](https://keepachangelog.com/en/1.0.0/),",
        "and this project adheres to [Semantic Versioning](https://semver.org/spec/v2.0.0.html).",
        "",
    ]


def _render_bucket(bucket: VersionBucket, config: ChangelogConfig) -> List[str]:
    if bucket.unreleased or bucket.date is None:
        marker = "Unreleased"
    else:
        marker = bucket.date.isoformat()
    lines = [f"## [{bucket.version}] - {marker}", ""]

    breaking = [c for c in bucket.commits if c.breaking]
    if breaking:
        lines.append("### ⚠️ BREAKING CHANGES")
        lines.append("")
        lines.extend(format_commit_line(c, config) for c in breaking)
        lines.append("")

    by_type: Dict[str, List[Commit]] = {}
    for commit in bucket.commits:
        by_type.setdefault(commit.type or OTHER, []).append(commit)

    for commit_type in ordered_types(by_type, config):
        lines.append(f"### {config.type_info(commit_type).title}")
        lines.append("")
        lines.extend(format_commit_line(c, config) for c in by_type[commit_type])
        lines.append("")

    contributors = list(dict.fromkeys(c.author for c in bucket.commits))
    if contributors:
        lines.append("### 👥 Contributors")
        lines.append("")
        lines.extend(f"- {name}" for name in contributors)
        lines.append("")
    return lines


def render_changelog(
    buckets: Sequence[VersionBucket],
    config: ChangelogConfig,
    generated_on: date,
) -> str:
    """Render the full changelog document.

    Parameters
    ----------
    buckets : Sequence[VersionBucket]
        Version buckets in the order they should appear.
    config : ChangelogConfig
        Project name, repository URL, section titles and order.
    generated_on : date
        Date written into the footer.

    Returns
    -------
    str
        The Markdown document, ending with a newline.
    """
    lines = _render_preamble(config)
    for bucket in buckets:
        lines.extend(_render_bucket(bucket, config))
    lines.append("---")
    lines.append("")
    lines.append(f"*This changelog was automatically generated on {generated_on.isoformat()}*")
    return "\n".join(lines) + "\n"


def summarize_types(commits: Iterable[Commit], config: ChangelogConfig) -> List[Tuple[str, str, int]]:
    """Count commits per type for the console summary.

    Returns ``(type, emoji, count)`` rows in section order.
    """
    counts = Counter(c.type or OTHER for c in commits)
    return [(t, config.type_info(t).emoji, counts[t]) for t in ordered_types(counts, config)]
