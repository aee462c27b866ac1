"""
Commands for the capfs CLI.

- ls: List a directory (optionally with a recursive glob)
- cat: Print a text file
- load: Parse a data file and print it as JSON
- tree-up: Print a directory and its ancestors up to the cap
"""

import asyncio
import json
import sys
from functools import wraps
from typing import Optional

import click

from ..exceptions import CapFSError
from ..filesystem.loaders import DATA_LOADERS
from ..filesystem.virtual import VirtualDirectory


def _reports_errors(command):
    """Render CapFSError with its cause trace and exit with status 1."""

    @wraps(command)
    def wrapper(*args, **kwargs):
        try:
            return command(*args, **kwargs)
        except CapFSError as e:
            ctx = click.get_current_context()
            e.report(verbose=bool((ctx.obj or {}).get("verbose")))
            sys.exit(1)

    return wrapper


@click.command()
@click.argument("path", required=False, default="")
@click.option("--glob", "pattern", default=None, help="Recursive glob pattern (e.g. '**/*.py')")
@_reports_errors
def ls(path: str, pattern: Optional[str]):
    """List directories and files below PATH.

    \b
    Examples:
        capfs ls
        capfs ls src --glob "**/*.py"
    """
    cap = VirtualDirectory.from_cwd()
    directory = cap.get_directory(path) if path else cap

    if pattern:
        listing = asyncio.run(directory.glob(pattern))
    else:
        listing = asyncio.run(directory.read())

    for entry in sorted(listing.directories, key=lambda d: d.path):
        click.echo(f"{entry.path}/")
    for entry in sorted(listing.files, key=lambda f: f.path):
        click.echo(entry.path)


@click.command()
@click.argument("path")
@click.option("--encoding", default=None, help="Text encoding (defaults to the configured one)")
@_reports_errors
def cat(path: str, encoding: Optional[str]):
    """Print the text content of the file at PATH."""
    file = VirtualDirectory.from_cwd().get_file(path)
    click.echo(asyncio.run(file.read(encoding)), nl=False)


@click.command()
@click.argument("path")
@click.option(
    "--type",
    "data_type",
    type=click.Choice(sorted(DATA_LOADERS), case_sensitive=False),
    default=None,
    help="Data type to parse as (defaults to the configured one)",
)
@_reports_errors
def load(path: str, data_type: Optional[str]):
    """Parse the file at PATH and print the result as JSON."""
    file = VirtualDirectory.from_cwd().get_file(path)
    data = asyncio.run(file.load_data(data_type))
    click.echo(json.dumps(data, indent=2, default=str))


@click.command("tree-up")
@click.argument("path", required=False, default="")
@_reports_errors
def tree_up(path: str):
    """Print PATH and each of its parents up to the working directory."""
    cap = VirtualDirectory.from_cwd()
    directory = cap.get_directory(path) if path else cap

    segments = [segment for segment in directory.path.split("/") if segment]
    for depth in range(len(segments), -1, -1):
        entry = cap.get_directory("/".join(segments[:depth])) if depth else cap
        click.echo(entry.path)
