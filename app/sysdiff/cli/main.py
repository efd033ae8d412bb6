"""Main CLI application entry point.

Defines the Typer application and global options.
"""

import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.logging import RichHandler

from sysdiff import __version__
from sysdiff.cli.commands import config, ls, status
from sysdiff.sources.base import PackageBackend
from sysdiff.utils.formatting import err_console

# Create main Typer app
app = typer.Typer(
    name="sysdiff",
    help="Reconcile the package database, the disk and a git mirror.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"sysdiff version {__version__}")
        raise typer.Exit()


def configure_logging(*, verbose: bool = False, quiet: bool = False) -> None:
    """Send log records to stderr through Rich.

    Warnings are shown by default, debug records with --verbose and only
    errors with --quiet.
    """
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.ERROR
    else:
        level = logging.WARNING

    handler = RichHandler(
        console=err_console,
        show_time=False,
        show_path=verbose,
        markup=False,
    )
    logging.basicConfig(level=level, format="%(message)s", handlers=[handler], force=True)


@app.callback()
def main(
    ctx: typer.Context,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = None,
    root: Annotated[
        Path | None,
        typer.Option("--root", "-r", help="Set an alternate installation root."),
    ] = None,
    dbpath: Annotated[
        Path | None,
        typer.Option("--dbpath", "-b", help="Set an alternate database location."),
    ] = None,
    repo: Annotated[
        Path | None,
        typer.Option("--repo", help="Mirror repository directory."),
    ] = None,
    backend: Annotated[
        PackageBackend | None,
        typer.Option("--backend", help="Package manager database to read.", case_sensitive=False),
    ] = None,
    scope: Annotated[
        str | None,
        typer.Option("--scope", "-s", help="Subtree of the root to reconcile, e.g. 'etc'."),
    ] = None,
    jobs: Annotated[
        int | None,
        typer.Option("--jobs", "-j", help="Number of threads used for hashing."),
    ] = None,
    config_file: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Config file (default: ~/.config/sysdiff/config.toml).",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable verbose output.",
        ),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Suppress warnings.",
        ),
    ] = False,
) -> None:
    """sysdiff - find what your package manager and your mirror don't know about.

    Compares the files installed packages own, the files on disk and the
    files tracked in a git mirror, and lists what changed locally.
    """
    configure_logging(verbose=verbose, quiet=quiet)

    # Store options in context for subcommands
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["config"] = config_file
    ctx.obj["overrides"] = {
        "root": root,
        "dbpath": dbpath,
        "repo": repo,
        "backend": backend,
        "scope": scope,
        "jobs": jobs,
    }


# Register commands
app.command(name="ls")(ls.ls_collections)
app.command(name="status")(status.show_status)
app.add_typer(config.app, name="config")


if __name__ == "__main__":
    app()
