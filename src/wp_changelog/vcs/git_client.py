"""
Git client implementation for wp_changelog.

This module wraps the read-only Git queries needed to build a
changelog: the commit log and the repository's tags. All subprocess
calls go through :meth:`GitClient._run` so that unit tests can mock
them easily.
"""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path
from typing import List, Optional


logger = logging.getLogger(__name__)
# Attach a null handler to avoid logging errors when the root logger is not
# configured. Logs will propagate to the root when configured by the CLI.
if not logger.handlers:
    logger.addHandler(logging.NullHandler())


# ASCII unit and record separators keep multi-line bodies and "|" in
# subjects intact.
FIELD_SEP = "\x1f"
RECORD_SEP = "\x1e"
LOG_FORMAT = FIELD_SEP.join(["%H", "%aI", "%an", "%P", "%s", "%b"]) + RECORD_SEP


@dataclass
class LogEntry:
    """Raw commit data as returned by ``git log``."""

    hash: str
    date: datetime
    author: str
    subject: str
    body: str
    parents: List[str]

    @property
    def is_merge(self) -> bool:
        return len(self.parents) > 1


@dataclass
class TagRef:
    """A tag and the commit it points at."""

    name: str
    commit: str
    date: Optional[date] = None


class GitError(Exception):
    """Raised when a Git command fails."""

    pass


class GitClient:
    """Client for querying a Git repository."""

    def __init__(self, repo_root: Path) -> None:
        self.repo_root = repo_root

    # ------------------------------------------------------------------
    # Static helpers
    # ------------------------------------------------------------------
    @staticmethod
    def find_repo_root(start: Path) -> Optional[Path]:
        """Find the root of the Git repository starting from ``start``.

        Walk upwards until a ``.git`` entry is found or the filesystem
        root is reached.
        """
        current = start.resolve()
        while True:
            if (current / ".git").exists():
                return current
            if current.parent == current:
                # reached filesystem root
                return None
            current = current.parent

    @staticmethod
    def parse_log(output: str) -> List[LogEntry]:
        """Parse ``git log`` output produced with :data:`LOG_FORMAT`."""
        entries: List[LogEntry] = []
        for record in output.split(RECORD_SEP):
            record = record.strip("\n")
            if not record.strip():
                continue
            fields = record.split(FIELD_SEP)
            if len(fields) < 6:
                logger.warning("Skipping malformed log record: %r", record[:80])
                continue
            commit_hash, raw_date, author, parents, subject = (f.strip() for f in fields[:5])
            body = FIELD_SEP.join(fields[5:]).strip()
            try:
                authored = datetime.fromisoformat(raw_date)
            except ValueError:
                logger.warning("Unparseable date %r for commit %s", raw_date, commit_hash)
                continue
            entries.append(
                LogEntry(
                    hash=commit_hash,
                    date=authored,
                    author=author,
                    subject=subject,
                    body=body,
                    parents=parents.split(),
                )
            )
        return entries

    # ------------------------------------------------------------------
    # Basic Git commands
    # ------------------------------------------------------------------
    def _run(self, args: List[str], check: bool = True) -> subprocess.CompletedProcess:
        """Run a Git command in the repository root.

        Raises
        ------
        GitError
            If the command exits with a non-zero status when ``check`` is
            True, or if ``git`` cannot be executed at all.
        """
        full_cmd = ["git"] + args
        logger.debug("Executing Git command: %s", " ".join(full_cmd))
        try:
            result = subprocess.run(
                full_cmd,
                cwd=self.repo_root,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                errors="replace",
            )
        except OSError as e:
            logger.error("Unable to execute git: %s", e)
            raise GitError(f"Unable to execute git: {e}") from e

        if check and result.returncode != 0:
            logger.error(
                "Git command failed: %s\nSTDOUT: %s\nSTDERR: %s",
                " ".join(full_cmd),
                result.stdout,
                result.stderr,
            )
            raise GitError(result.stderr.strip() or result.stdout.strip())
        return result

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------
    def get_log(self, include_merges: bool = False) -> List[LogEntry]:
        """Return the commit history of HEAD, newest first.

        Parameters
        ----------
        include_merges : bool, optional
            Keep merge commits in the result. By default they are excluded
            with ``--no-merges``.

        Raises
        ------
        GitError
            If the git log command fails.
        """
        args = ["log", f"--pretty=format:{LOG_FORMAT}"]
        if not include_merges:
            args.append("--no-merges")
        result = self._run(args, check=True)
        return self.parse_log(result.stdout)

    def get_latest_tag(self) -> Optional[str]:
        """Return the most recent tag reachable from HEAD, or None."""
        result = self._run(["describe", "--tags", "--abbrev=0"], check=False)
        if result.returncode != 0:
            return None
        return result.stdout.strip() or None

    def get_tags(self) -> List[TagRef]:
        """List all tags with the commit they point at.

        Annotated tags are peeled to their target commit.
        """
        fmt = FIELD_SEP.join(
            ["%(refname:short)", "%(objectname)", "%(*objectname)", "%(creatordate:short)"]
        )
        result = self._run(
            ["for-each-ref", "--sort=-creatordate", f"--format={fmt}", "refs/tags"],
            check=True,
        )
        tags: List[TagRef] = []
        for line in result.stdout.splitlines():
            if not line.strip():
                continue
            fields = line.split(FIELD_SEP)
            if len(fields) != 4:
                continue
            name, objectname, peeled, created = fields
            tag_date: Optional[date] = None
            if created:
                try:
                    tag_date = date.fromisoformat(created)
                except ValueError:
                    logger.debug("Ignoring unparseable tag date %r for %s", created, name)
            tags.append(TagRef(name=name, commit=peeled or objectname, date=tag_date))
        return tags
