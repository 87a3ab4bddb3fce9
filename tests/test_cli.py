import json
import tempfile
import unittest
from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import patch

from click.testing import CliRunner

import wp_changelog.cli as cli
from wp_changelog.vcs.git_client import GitError, LogEntry


def entry(sha: str, subject: str, author: str = "Dana") -> LogEntry:
    return LogEntry(
        hash=sha.ljust(40, "0"),
        date=datetime(2024, 5, 1, tzinfo=timezone.utc),
        author=author,
        subject=subject,
        body="",
        parents=["f" * 40],
    )


class DummyGitClient:
    entries = []
    fail = False

    def __init__(self, root):
        self.root = root

    def get_log(self, include_merges=False):
        if self.fail:
            raise GitError("fatal: not a git repository")
        return list(self.entries)

    def get_latest_tag(self):
        return None

    def get_tags(self):
        return []


class TestCLI(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name).resolve()
        (self.root / "package.json").write_text(json.dumps({"version": "2.0.0"}), encoding="utf-8")
        DummyGitClient.entries = [
            entry("1", "feat(theme): add hero block", "Robin"),
            entry("2", "fix(auth): correct token expiry", "Sam"),
            entry("3", "random commit message", "Robin"),
        ]
        DummyGitClient.fail = False
        self.runner = CliRunner()

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def invoke(self, args):
        with patch.object(cli, "resolve_repo_root", return_value=self.root):
            with patch.object(cli, "GitClient", DummyGitClient):
                return self.runner.invoke(cli.main, args)

    def test_generates_changelog_and_summary(self) -> None:
        result = self.invoke([])
        self.assertEqual(result.exit_code, cli.EXIT_SUCCESS, result.output)
        written = (self.root / "CHANGELOG.md").read_text(encoding="utf-8")
        self.assertIn("## [2.0.0] - Unreleased", written)
        self.assertIn("- **auth**: correct token expiry", written)
        self.assertIn("Commit Summary", result.output)
        self.assertIn("🐛 fix: 1", result.output)
        self.assertIn("📝 other: 1", result.output)
        self.assertIn("for version 2.0.0", result.output)

    def test_overrides(self) -> None:
        result = self.invoke(["--output", "HISTORY.md", "--repo-url", "https://example.com/x", "--project-name", "Clinic"])
        self.assertEqual(result.exit_code, cli.EXIT_SUCCESS, result.output)
        written = (self.root / "HISTORY.md").read_text(encoding="utf-8")
        self.assertIn("**Clinic**", written)
        self.assertIn("https://example.com/x/commit/", written)
        self.assertFalse((self.root / "CHANGELOG.md").exists())

    def test_stdout_does_not_write_file(self) -> None:
        result = self.invoke(["--stdout"])
        self.assertEqual(result.exit_code, cli.EXIT_SUCCESS)
        self.assertIn("# Changelog", result.output)
        self.assertFalse((self.root / "CHANGELOG.md").exists())

    def test_git_failure_still_writes_empty_changelog(self) -> None:
        DummyGitClient.fail = True
        result = self.invoke([])
        self.assertEqual(result.exit_code, cli.EXIT_SUCCESS, result.output)
        written = (self.root / "CHANGELOG.md").read_text(encoding="utf-8")
        self.assertNotIn("### ", written)

    def test_git_failure_strict(self) -> None:
        DummyGitClient.fail = True
        result = self.invoke(["--strict"])
        self.assertEqual(result.exit_code, cli.EXIT_VCS_FAILURE)
        self.assertFalse((self.root / "CHANGELOG.md").exists())

    def test_config_error(self) -> None:
        (self.root / ".changelog.json").write_text("{oops", encoding="utf-8")
        result = self.invoke([])
        self.assertEqual(result.exit_code, cli.EXIT_CONFIG_ERROR)

    def test_write_failure(self) -> None:
        result = self.invoke(["--output", "no/such/dir/CHANGELOG.md"])
        self.assertEqual(result.exit_code, cli.EXIT_WRITE_FAILURE)

    def test_unexpected_error(self) -> None:
        with patch.object(cli, "load_config", side_effect=RuntimeError("boom")):
            result = self.invoke([])
        self.assertEqual(result.exit_code, cli.EXIT_GENERIC_ERROR)

    def test_version_option(self) -> None:
        result = self.runner.invoke(cli.main, ["--version"])
        self.assertEqual(result.exit_code, 0)
        self.assertIn("wp-changelog", result.output)


class TestHelpers(unittest.TestCase):
    def test_apply_overrides_ignores_none(self) -> None:
        config = cli.ChangelogConfig()
        self.assertIs(cli.apply_overrides(config, repo_url=None), config)
        changed = cli.apply_overrides(config, repo_url="https://x", output_file=None)
        self.assertEqual(changed.repo_url, "https://x")
        self.assertEqual(changed.output_file, config.output_file)

    def test_resolve_repo_root_falls_back_to_start_dir(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            with patch.object(cli.GitClient, "find_repo_root", return_value=None):
                self.assertEqual(cli.resolve_repo_root(Path(tmp)), Path(tmp).resolve())

    @patch("wp_changelog.cli.click.echo")
    @patch("wp_changelog.cli.time.time")
    def test_progress_indicator(self, mock_time, mock_echo) -> None:
        mock_time.side_effect = [0.0, 1.5]
        with cli.ProgressIndicator("Generating changelog"):
            pass
        self.assertEqual(mock_echo.call_count, 2)
        self.assertIn("Generating changelog", str(mock_echo.call_args_list[0]))
        self.assertIn("1.5s", str(mock_echo.call_args_list[1]))


if __name__ == "__main__":
    unittest.main()
