"""Configuration commands.

Show the effective settings, print where they are read from, list the
effective ignore patterns, and write a starter config file.
"""

from pathlib import Path
from typing import Annotated, Any

import tomli_w
import typer

from sysdiff.cli.types import get_settings
from sysdiff.core.config import save_config
from sysdiff.core.paths import get_config_path
from sysdiff.errors import SysdiffError
from sysdiff.utils.formatting import print_error, print_info, print_success

app = typer.Typer(
    help="Inspect and initialize sysdiff configuration.",
    no_args_is_help=True,
)


def _config_path(ctx: typer.Context) -> Path:
    obj: dict[str, Any] = ctx.ensure_object(dict)
    return obj.get("config") or get_config_path()


@app.command()
def show(ctx: typer.Context) -> None:
    """Print the effective settings as TOML (config file plus flags)."""
    settings = get_settings(ctx)
    data = settings.model_dump(mode="json", exclude_none=True)
    data["ignore_profile"] = settings.effective_ignore_profile.value
    data["dbpath"] = str(settings.effective_dbpath)
    typer.echo(tomli_w.dumps(data), nl=False)


@app.command()
def path(ctx: typer.Context) -> None:
    """Print the config file location."""
    config_path = _config_path(ctx)
    typer.echo(str(config_path))
    if not config_path.exists():
        print_info("Config file does not exist yet; defaults apply.")


@app.command()
def ignore(ctx: typer.Context) -> None:
    """List the effective ignore patterns in match order."""
    settings = get_settings(ctx)
    try:
        ignore_filter = settings.build_ignore_filter()
    except SysdiffError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    for pattern in ignore_filter.patterns:
        typer.echo(pattern)


@app.command()
def init(
    ctx: typer.Context,
    force: Annotated[
        bool,
        typer.Option(
            "--force",
            help="Overwrite an existing config file.",
        ),
    ] = False,
) -> None:
    """Write a config file from the current flags and defaults.

    Examples:
        sysdiff --backend dpkg --repo /srv/mirror config init
        sysdiff --scope etc config init --force
    """
    config_path = _config_path(ctx)
    if config_path.exists() and not force:
        print_error(f"Config already exists: {config_path}")
        print_info("Use --force to overwrite it.")
        raise typer.Exit(code=1)

    settings = get_settings(ctx, allow_missing=True)
    try:
        saved = save_config(settings, config_path)
    except SysdiffError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    print_success(f"Config written to {saved}")
