"""JavaLens CLI - javalens command."""

import click

from javalens.cli.refactor import (
    change_signature_command,
    extract_constant_command,
    extract_interface_command,
    extract_method_command,
    extract_variable_command,
    inline_method_command,
    inline_variable_command,
    organize_imports_command,
    references_command,
    rename_command,
    to_lambda_command,
)
from javalens.cli.serve import serve_command
from javalens.core.logging import configure_logging


@click.group()
@click.version_option(version="0.1.0", prog_name="javalens")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """JavaLens - semantic Java refactorings as edit plans."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    configure_logging(level="DEBUG" if verbose else "WARNING")


cli.add_command(serve_command, name="serve")
cli.add_command(rename_command, name="rename")
cli.add_command(change_signature_command, name="change-signature")
cli.add_command(extract_method_command, name="extract-method")
cli.add_command(extract_variable_command, name="extract-variable")
cli.add_command(extract_constant_command, name="extract-constant")
cli.add_command(inline_variable_command, name="inline-variable")
cli.add_command(inline_method_command, name="inline-method")
cli.add_command(to_lambda_command, name="to-lambda")
cli.add_command(extract_interface_command, name="extract-interface")
cli.add_command(organize_imports_command, name="organize-imports")
cli.add_command(references_command, name="references")


if __name__ == "__main__":
    cli()
