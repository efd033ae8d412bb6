"""CLI commands for sysdiff.

This package contains all subcommand implementations.
"""

from sysdiff.cli.commands import config, ls, status

__all__ = ["config", "ls", "status"]
