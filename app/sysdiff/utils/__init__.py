"""Utility modules for sysdiff.

This module exports commonly used utility functions.
"""

from sysdiff.utils.formatting import (
    console,
    create_file_table,
    err_console,
    print_error,
    print_info,
    print_success,
)
from sysdiff.utils.shell import CommandResult, run_command

__all__ = [
    "CommandResult",
    "console",
    "create_file_table",
    "err_console",
    "print_error",
    "print_info",
    "print_success",
    "run_command",
]
