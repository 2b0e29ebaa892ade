"""Command-line interface for polykit.

This module provides the CLI using Typer with rich output for
user-friendly feedback and progress reporting.

Key features:
- Progress bars for job processing
- Verbose/quiet output modes
- Dry-run validation of job files
- Detailed error reporting
"""

from polykit.cli.app import cli, main

__all__ = ["cli", "main"]
