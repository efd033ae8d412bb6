"""status command implementation.

Shorthand for listing what still needs attention in the mirror.
"""

from typing import Annotated

import typer

from sysdiff.cli.commands.ls import run_listing
from sysdiff.cli.types import OutputFormat
from sysdiff.core.reconcile import Collection


def show_status(
    ctx: typer.Context,
    deleted: Annotated[
        bool,
        typer.Option(
            "--deleted",
            "-d",
            help="Also list package files missing from disk.",
        ),
    ] = False,
    output_format: Annotated[
        OutputFormat,
        typer.Option(
            "--format",
            "-f",
            help="Output format: plain, table, or json.",
            case_sensitive=False,
        ),
    ] = OutputFormat.PLAIN,
) -> None:
    """Show files missing from or different in the mirror.

    Equivalent to 'sysdiff ls missing-in-repo different-in-repo'.
    """
    names = [Collection.MISSING_IN_REPO, Collection.DIFFERENT_IN_REPO]
    if deleted:
        names.append(Collection.DELETED)
    run_listing(ctx, names, output_format)
