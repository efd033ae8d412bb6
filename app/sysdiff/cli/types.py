"""Shared types and utilities for CLI commands.

This module provides common enums and helper functions used across
multiple CLI command modules to avoid code duplication.
"""

from enum import Enum
from pathlib import Path
from typing import Any

import typer

from sysdiff.core.config import Settings, load_config
from sysdiff.errors import SysdiffError
from sysdiff.utils.formatting import print_error


class OutputFormat(str, Enum):
    """Output format options for collection listings."""

    PLAIN = "plain"
    TABLE = "table"
    JSON = "json"


def get_settings(ctx: typer.Context, *, allow_missing: bool = False) -> Settings:
    """Load the config file and apply the global command-line overrides.

    Exits with code 1 when the configuration is invalid.

    Args:
        ctx: Typer context carrying the global options in ctx.obj.
        allow_missing: Use defaults when an explicit --config file does not
            exist yet instead of failing.

    Returns:
        Effective settings for this invocation.
    """
    obj: dict[str, Any] = ctx.ensure_object(dict)
    config_path: Path | None = obj.get("config")
    overrides: dict[str, Any] = obj.get("overrides", {})

    try:
        if allow_missing and config_path is not None and not config_path.exists():
            return Settings().with_overrides(**overrides)
        return load_config(config_path).with_overrides(**overrides)
    except SysdiffError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e
