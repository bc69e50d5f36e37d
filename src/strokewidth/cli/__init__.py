"""Command-line interface for stroke-width.

This module provides the CLI using Typer with rich output for
user-friendly feedback and progress reporting.

Key features:
- Single font measurement, optionally across a variable font's weights
- Tag-targeted batch runs that skip already measured fonts
- Progress bars and per-state batch summaries
- Tag CSV export of stored results
"""

from strokewidth.cli.app import app, cli, main

__all__ = ["app", "cli", "main"]
