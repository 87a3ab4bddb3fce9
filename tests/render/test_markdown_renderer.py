"""Tests for the Markdown changelog renderer."""

import unittest
from dataclasses import replace
from datetime import date, datetime, timezone

from wp_changelog.config.loader import ChangelogConfig
from wp_changelog.grouping.commit_classifier import classify_commit
from wp_changelog.grouping.commit_model import Commit, VersionBucket
from wp_changelog.render.markdown_renderer import (
    format_commit_line,
    ordered_types,
    render_changelog,
    summarize_types,
)


CONFIG = ChangelogConfig(project_name="Test Site", repo_url="https://example.com/org/site")
GENERATED = date(2024, 6, 1)


def make_commit(sha: str, subject: str, author: str = "Dana", body: str = "") -> Commit:
    c = classify_commit(subject, body)
    return Commit(
        hash=sha.ljust(40, "0"),
        date=datetime(2024, 5, 1, tzinfo=timezone.utc),
        author=author,
        subject=subject,
        body=body,
        type=c.type,
        scope=c.scope,
        breaking=c.breaking,
    )


def bucket(*commits: Commit) -> VersionBucket:
    return VersionBucket(version="1.4.0", commits=list(commits), date=GENERATED, unreleased=True)


class TestMarkdownRenderer(unittest.TestCase):
    def test_fix_line_has_scope_stripped_subject_and_link(self) -> None:
        commit = make_commit("abc1234def", "fix(auth): correct token expiry")
        doc = render_changelog([bucket(commit)], CONFIG, GENERATED)
        self.assertIn("### 🐛 Bug Fixes", doc)
        self.assertIn(
            "- **auth**: correct token expiry "
            f"([`abc1234`](https://example.com/org/site/commit/{commit.hash}))",
            doc,
        )

    def test_other_changes_rendered_last_without_scope(self) -> None:
        other = make_commit("1111111", "random commit message")
        feat = make_commit("2222222", "feat: booking form")
        doc = render_changelog([bucket(other, feat)], CONFIG, GENERATED)
        self.assertIn("### 📝 Other Changes", doc)
        self.assertIn("- random commit message ([`1111111`]", doc)
        self.assertLess(doc.index("### 🚀 Features"), doc.index("### 📝 Other Changes"))

    def test_sections_follow_priority_not_first_seen_order(self) -> None:
        commits = [
            make_commit("1", "ci: add workflow"),
            make_commit("2", "docs: readme"),
            make_commit("3", "fix: crash"),
            make_commit("4", "feat: thing"),
            make_commit("5", "perf: faster"),
        ]
        doc = render_changelog([bucket(*commits)], CONFIG, GENERATED)
        titles = ["### 🚀 Features", "### 🐛 Bug Fixes", "### ⚡ Performance", "### 📚 Documentation", "### 👷 CI/CD"]
        positions = [doc.index(t) for t in titles]
        self.assertEqual(positions, sorted(positions))
        self.assertNotIn("### 🔧 Maintenance", doc)

    def test_breaking_changes_come_first(self) -> None:
        commits = [
            make_commit("1", "feat: normal"),
            make_commit("2", "feat(api)!: drop v1"),
            make_commit("3", "chore: bump", body="BREAKING CHANGE: php 8 required"),
        ]
        doc = render_changelog([bucket(*commits)], CONFIG, GENERATED)
        breaking = doc.index("### ⚠️ BREAKING CHANGES")
        self.assertLess(breaking, doc.index("### 🚀 Features"))
        section = doc[breaking:doc.index("### 🚀 Features")]
        self.assertIn("- **api**: drop v1", section)
        self.assertIn("- bump", section)
        self.assertNotIn("normal", section)

    def test_rendered_subjects_never_keep_prefix(self) -> None:
        commits = [
            make_commit("1", "feat(ui): new menu"),
            make_commit("2", "fix: typo"),
            make_commit("3", "style(css)!: restyle"),
            make_commit("4", "feat(api (v2)): expose bookings"),
        ]
        doc = render_changelog([bucket(*commits)], CONFIG, GENERATED)
        for prefix in ("feat(ui):", "fix:", "style(css)!:", "feat(api (v2)):"):
            self.assertNotIn(prefix, doc)
        features = doc[doc.index("### 🚀 Features"):doc.index("### 🐛 Bug Fixes")]
        self.assertIn("- **api (v2)**: expose bookings", features)

    def test_contributors_distinct_in_first_seen_order(self) -> None:
        commits = [
            make_commit("1", "feat: a", author="Robin"),
            make_commit("2", "fix: b", author="Sam"),
            make_commit("3", "fix: c", author="Robin"),
        ]
        doc = render_changelog([bucket(*commits)], CONFIG, GENERATED)
        section = doc[doc.index("### 👥 Contributors"):]
        self.assertIn("- Robin\n- Sam\n", section)
        self.assertEqual(section.count("- Robin"), 1)

    def test_empty_input_produces_preamble_and_footer(self) -> None:
        doc = render_changelog([bucket()], CONFIG, GENERATED)
        self.assertTrue(doc.startswith("# Changelog\n\n"))
        self.assertIn("All notable changes to **Test Site**", doc)
        self.assertIn("## [1.4.0] - Unreleased", doc)
        self.assertNotIn("### ", doc)
        self.assertTrue(doc.endswith("*This changelog was automatically generated on 2024-06-01*\n"))

    def test_released_bucket_shows_date(self) -> None:
        released = VersionBucket(version="1.3.0", commits=[], date=date(2024, 2, 3))
        doc = render_changelog([released], CONFIG, GENERATED)
        self.assertIn("## [1.3.0] - 2024-02-03", doc)

    def test_output_is_deterministic(self) -> None:
        commits = [make_commit("1", "feat: a"), make_commit("2", "Fix bug")]
        first = render_changelog([bucket(*commits)], CONFIG, GENERATED)
        second = render_changelog([bucket(*commits)], CONFIG, GENERATED)
        self.assertEqual(first, second)

    def test_no_repo_url_renders_plain_hash(self) -> None:
        commit = make_commit("abcdef1", "fix: thing")
        line = format_commit_line(commit, replace(CONFIG, repo_url=""))
        self.assertEqual(line, "- thing (`abcdef1`)")

    def test_ordered_types_puts_unknown_before_other(self) -> None:
        self.assertEqual(
            ordered_types(["other", "release", "fix", "feat"], CONFIG),
            ["feat", "fix", "release", "other"],
        )

    def test_summarize_types(self) -> None:
        commits = [
            make_commit("1", "random"),
            make_commit("2", "fix: a"),
            make_commit("3", "fix: b"),
            make_commit("4", "feat: c"),
        ]
        self.assertEqual(
            summarize_types(commits, CONFIG),
            [("feat", "🚀", 1), ("fix", "🐛", 2), ("other", "📝", 1)],
        )


if __name__ == "__main__":
    unittest.main()
