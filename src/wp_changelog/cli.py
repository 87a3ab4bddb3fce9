"""
Command line interface for the wp_changelog tool.

This module defines the ``main`` function which is used as the entry
point when executing the ``wp-changelog`` command. It orchestrates
repository detection, configuration loading, reading the commit
history, rendering the changelog and writing it to disk, and reports
progress and a per-type commit summary on the console.
"""

from __future__ import annotations

import dataclasses
import logging
import time
from pathlib import Path
from typing import Any, Dict, Optional

import click

from wp_changelog import __version__
from wp_changelog.config.loader import ChangelogConfig, ConfigError, load_config
from wp_changelog.generator import ChangelogGenerator
from wp_changelog.render.markdown_renderer import summarize_types
from wp_changelog.vcs.git_client import GitClient, GitError

logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())


# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------
EXIT_SUCCESS = 0
EXIT_GENERIC_ERROR = 1
EXIT_INVALID_USAGE = 2
EXIT_CONFIG_ERROR = 3
EXIT_VCS_FAILURE = 4
EXIT_WRITE_FAILURE = 5


# ---------------------------------------------------------------------------
# Progress and status display utilities
# ---------------------------------------------------------------------------

class ProgressIndicator:
    """Simple progress indicator for user feedback."""

    def __init__(self, message: str, show_spinner: bool = True):
        self.message = message
        self.show_spinner = show_spinner
        self.start_time = None

    def __enter__(self):
        self.start_time = time.time()
        if self.show_spinner:
            click.echo(f"🔄 {self.message}...", nl=False)
        else:
            click.echo(f"→ {self.message}...")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        elapsed = time.time() - self.start_time
        if exc_type is not None:
            click.echo("")
            return False
        if self.show_spinner:
            click.echo(f"\r✓ {self.message} (took {elapsed:.1f}s)")
        else:
            click.echo(f"  ✓ Done ({elapsed:.1f}s)")
        return False


def print_info(message: str, indent: int = 0):
    """Print an info message."""
    prefix = "  " * indent
    click.echo(f"{prefix}ℹ {message}")


def print_success(message: str, indent: int = 0):
    prefix = "  " * indent
    click.echo(f"{prefix}✅ {message}")


def print_warning(message: str, indent: int = 0, err: bool = False):
    prefix = "  " * indent
    click.echo(f"{prefix}⚠ {message}", err=err)


def print_error(message: str, indent: int = 0):
    """Print an error message to stderr."""
    prefix = "  " * indent
    click.echo(f"{prefix}❌ {message}", err=True)


def print_type_summary(rows) -> None:
    """Print the per-type commit histogram."""
    click.echo("\n📈 Commit Summary:")
    for commit_type, emoji, count in rows:
        click.echo(f"   {emoji} {commit_type}: {count}")


# ---------------------------------------------------------------------------
# Core functionality
# ---------------------------------------------------------------------------

def resolve_repo_root(start_dir: Path) -> Path:
    """Return the enclosing Git repository root, or ``start_dir`` itself.

    Outside a repository the changelog is still generated; the git query
    fails later and is reported then.
    """
    repo_root = GitClient.find_repo_root(start_dir)
    if repo_root is None:
        logger.warning("No Git repository found at or above %s", start_dir)
        return start_dir.resolve()
    logger.debug("Using repository root: %s", repo_root)
    return repo_root


def apply_overrides(config: ChangelogConfig, **overrides: Optional[str]) -> ChangelogConfig:
    """Return ``config`` with every non-None override applied."""
    changes: Dict[str, Any] = {k: v for k, v in overrides.items() if v is not None}
    if not changes:
        return config
    return dataclasses.replace(config, **changes)


@click.command()
@click.option(
    "--repo",
    "repo",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Repository directory (defaults to the current directory).",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="JSON configuration file (defaults to .changelog.json in the repository).",
)
@click.option("--output", "output_file", default=None, help="Output file, relative to the repository root.")
@click.option("--repo-url", default=None, help="Base URL used for commit links.")
@click.option("--project-name", default=None, help="Project name shown in the preamble.")
@click.option("--metadata-file", default=None, help="JSON file holding the project version.")
@click.option("--split-by-tags", is_flag=True, help="Create one section per release tag.")
@click.option("--stdout", "to_stdout", is_flag=True, help="Print the changelog instead of writing it.")
@click.option("--strict", is_flag=True, help="Fail instead of generating an empty changelog when git fails.")
@click.option("--verbose", is_flag=True, help="Enable verbose (debug) output.")
@click.version_option(version=__version__, prog_name="wp-changelog")
def main(
    repo: Optional[Path],
    config_path: Optional[Path],
    output_file: Optional[str],
    repo_url: Optional[str],
    project_name: Optional[str],
    metadata_file: Optional[str],
    split_by_tags: bool,
    to_stdout: bool,
    strict: bool,
    verbose: bool,
) -> None:
    """📝 Generate CHANGELOG.md from the Git commit history."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s: %(message)s",
        force=True,
    )

    ctx = click.get_current_context(silent=True)

    try:
        repo_root = resolve_repo_root(repo or Path.cwd())

        try:
            config = load_config(repo_root, config_path)
        except ConfigError as exc:
            print_error(f"Configuration error: {exc}")
            raise click.exceptions.Exit(EXIT_CONFIG_ERROR)

        config = apply_overrides(
            config,
            output_file=output_file,
            repo_url=repo_url,
            project_name=project_name,
            metadata_file=metadata_file,
        )

        generator = ChangelogGenerator(
            GitClient(repo_root),
            config,
            repo_root,
            split_by_tags=split_by_tags,
            strict=strict,
        )

        # stdout carries the document itself with --stdout
        show_progress = not to_stdout
        try:
            if show_progress:
                with ProgressIndicator("Generating changelog"):
                    result = generator.build()
            else:
                result = generator.build()
        except GitError as exc:
            print_error(f"Could not read git history: {exc}")
            raise click.exceptions.Exit(EXIT_VCS_FAILURE)

        for warning in result.warnings:
            print_warning(warning, err=to_stdout)

        if to_stdout:
            click.echo(result.markdown, nl=False)
            raise click.exceptions.Exit(EXIT_SUCCESS)

        print_info(f"Found {len(result.commits)} commit{'s' if len(result.commits) != 1 else ''}")

        try:
            output_path = generator.write(result)
        except OSError as exc:
            print_error(f"Error writing changelog: {exc}")
            raise click.exceptions.Exit(EXIT_WRITE_FAILURE)

        print_success(f"Changelog generated: {output_path}")
        print_info(f"Processed {len(result.commits)} commits for version {result.version}")
        if len(result.buckets) > 1:
            print_info(f"Rendered {len(result.buckets)} version sections")
        print_type_summary(summarize_types(result.commits, config))

        raise click.exceptions.Exit(EXIT_SUCCESS)

    except click.exceptions.Exit:
        # Click uses its own Exit exception; re-raise to let Click handle it
        raise
    except Exception as exc:
        logging.exception("Unhandled error: %s", exc)
        print_error(f"Error generating changelog: {exc}")
        ctx.exit(EXIT_GENERIC_ERROR)
