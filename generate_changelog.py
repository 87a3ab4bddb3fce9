#!/usr/bin/env python
"""
Thin wrapper script to invoke the wp_changelog CLI.

Running ``python generate_changelog.py`` is equivalent to running the
``wp-changelog`` console script installed via ``pyproject.toml``.
"""

from wp_changelog.cli import main


if __name__ == "__main__":
    main(prog_name="wp-changelog")
