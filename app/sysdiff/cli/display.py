"""Shared display functions for collection listings.

Used by the ls and status commands. Every format writes to stdout only.
"""

import json

import typer

from sysdiff.cli.types import OutputFormat
from sysdiff.core.reconcile import Collection
from sysdiff.models.file import FileSet
from sysdiff.utils.formatting import console, create_file_table, format_file_row

# Theme style used for each collection's paths in table output
_COLLECTION_STYLES: dict[Collection, str] = {
    Collection.MISSING_IN_REPO: "warning",
    Collection.DIFFERENT_IN_REPO: "repo_diff",
    Collection.MODIFIED_BACKUPS: "modified",
    Collection.UNPACKAGED: "unpackaged",
    Collection.DELETED: "deleted",
}


def _print_plain(results: dict[Collection, FileSet]) -> None:
    """Print each collection name followed by one indented path per line.

    Paths are written as raw bytes, so names that are not valid UTF-8 come
    out exactly as they are on disk.
    """
    for collection, records in results.items():
        typer.echo(collection.value)
        for record in records:
            typer.echo(f"  {record.path}".encode("utf-8", "surrogateescape"))


def _print_table(results: dict[Collection, FileSet]) -> None:
    """Print one Rich table per collection."""
    for collection, records in results.items():
        table = create_file_table(f"{collection.value} ({len(records)})")
        style = _COLLECTION_STYLES.get(collection, "text")
        for record in records:
            table.add_row(*format_file_row(record, style))
        console.print(table)


def _print_json(results: dict[Collection, FileSet]) -> None:
    """Print all collections as one JSON object keyed by collection name."""
    data = {
        collection.value: [
            {"name": record.name, "path": record.path, "hash": record.hash}
            for record in records
        ]
        for collection, records in results.items()
    }
    console.print_json(json.dumps(data), ensure_ascii=True)


def print_collections(results: dict[Collection, FileSet], output_format: OutputFormat) -> None:
    """Print computed collections in the requested format.

    Args:
        results: Collections in the order they were requested.
        output_format: plain, table or json.
    """
    if output_format == OutputFormat.JSON:
        _print_json(results)
    elif output_format == OutputFormat.TABLE:
        _print_table(results)
    else:
        _print_plain(results)
