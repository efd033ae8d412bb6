"""ls command implementation.

Prints one or more named collections.
"""

from typing import Annotated

import typer

from sysdiff.cli.display import print_collections
from sysdiff.cli.types import OutputFormat, get_settings
from sysdiff.core.reconcile import Collection, Reconciler
from sysdiff.errors import SysdiffError
from sysdiff.models.file import FileSet
from sysdiff.utils.formatting import print_error


def run_listing(
    ctx: typer.Context,
    names: list[Collection],
    output_format: OutputFormat,
) -> None:
    """Compute the named collections, then print them.

    Every collection is computed before anything is printed, so a fatal
    error leaves stdout empty.

    Args:
        ctx: Typer context carrying the global options.
        names: Collections to print, in order.
        output_format: Output format.
    """
    reconciler = Reconciler(get_settings(ctx))

    results: dict[Collection, FileSet] = {}
    try:
        for name in names:
            results[name] = reconciler.collection(name)
    except SysdiffError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    print_collections(results, output_format)


def ls_collections(
    ctx: typer.Context,
    names: Annotated[
        list[Collection],
        typer.Argument(
            help="Collections to list.",
            case_sensitive=False,
            show_default=False,
        ),
    ],
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
    """List named file collections.

    Collections:
      missing-in-repo    modified backups and unpackaged files not in the mirror
      different-in-repo  mirror files whose content differs from disk
      package-backups    backup files recorded by the package manager
      modified-backups   backup files changed since install
      all                every file under the scope root
      package            every file owned by a package
      unpackaged         files on disk owned by no package
      repo               files tracked by the mirror
      deleted            package files missing from disk

    Examples:
        sysdiff ls unpackaged
        sysdiff --scope etc ls modified-backups unpackaged
        sysdiff ls missing-in-repo --format json
    """
    # Keep the first occurrence of each name, in the order given
    unique = list(dict.fromkeys(names))
    run_listing(ctx, unique, output_format)
