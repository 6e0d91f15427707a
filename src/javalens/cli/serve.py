"""javalens serve command - run the MCP server over stdio."""

from __future__ import annotations

from pathlib import Path

import click

from javalens.cli.utils import find_project_root
from javalens.core.errors import ConfigError


@click.command()
@click.option(
    "--root",
    "root",
    default=None,
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help="Java project root (auto-detected from the current directory if omitted)",
)
@click.pass_context
def serve_command(ctx: click.Context, root: Path | None) -> None:
    """Serve refactoring tools to an agent over MCP (stdio)."""
    from javalens.mcp.server import run_server

    project_root = root.resolve() if root is not None else find_project_root()
    try:
        run_server(project_root, verbose=bool(ctx.obj and ctx.obj.get("verbose")))
    except ConfigError as e:
        raise click.ClickException(e.message) from e
