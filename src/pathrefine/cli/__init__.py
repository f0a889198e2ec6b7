"""Command-line interface for pathrefine.

This module provides the CLI using Typer with rich output for
user-friendly feedback and progress reporting.

Key features:
- Health reports with per-path suggestions
- Progress bars for document processing
- Quiet output mode and file logging
- Detailed error reporting
"""

from pathrefine.cli.app import cli, main

__all__ = ["cli", "main"]
