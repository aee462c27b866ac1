"""
capfs CLI - browse the working directory through a capped virtual view.

Every command caps the current working directory and resolves its PATH
argument inside that cap, so nothing outside the working directory can be
reached.

Usage:
    capfs --help
    capfs ls src --glob "**/*.py"
    capfs cat README.md
    capfs load config.yaml --type yaml
    capfs tree-up src/capfs
"""

from typing import Optional

import click

from ..utils import init_logging
from .commands import cat, load, ls, tree_up


@click.group()
@click.version_option(package_name="capfs")
@click.option("--verbose", "-v", is_flag=True, help="Show the full cause of errors")
@click.option("--log-level", default=None, help="Logging level (DEBUG, INFO, WARNING, ...)")
@click.pass_context
def main(ctx: click.Context, verbose: bool, log_level: Optional[str]):
    """capfs - capped filesystem access."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    init_logging(log_level)


# Register commands
main.add_command(ls)
main.add_command(cat)
main.add_command(load)
main.add_command(tree_up)


if __name__ == "__main__":
    main()
