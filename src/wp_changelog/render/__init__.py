"""
Markdown rendering of the changelog.
"""

from .markdown_renderer import render_changelog, summarize_types  # noqa: F401
