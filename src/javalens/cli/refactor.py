"""Refactoring commands - compute a plan and print it as JSON.

Positions are zero-based, matching the MCP tools. Plans go to stdout;
progress and warnings go to stderr.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any

import click

from javalens.cli.utils import echo_json, fail, find_project_root, parse_parameter
from javalens.config.loader import load_config
from javalens.core.errors import JavaLensError
from javalens.core.formatting import pluralize
from javalens.core.progress import spinner, status
from javalens.refactor.edits import EditPlan
from javalens.refactor.ops import RefactorOps
from javalens.semantic.project import JavaProject

root_option = click.option(
    "--root",
    "root",
    default=None,
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help="Java project root (auto-detected from the current directory if omitted)",
)


def _position_arguments(fn: Callable[..., Any]) -> Callable[..., Any]:
    fn = click.argument("column", type=click.IntRange(min=0))(fn)
    fn = click.argument("line", type=click.IntRange(min=0))(fn)
    return click.argument("file_path")(fn)


def _selection_arguments(fn: Callable[..., Any]) -> Callable[..., Any]:
    fn = click.argument("end_column", type=click.IntRange(min=0))(fn)
    fn = click.argument("end_line", type=click.IntRange(min=0))(fn)
    fn = click.argument("start_column", type=click.IntRange(min=0))(fn)
    fn = click.argument("start_line", type=click.IntRange(min=0))(fn)
    return click.argument("file_path")(fn)


def _load_ops(root: Path | None) -> RefactorOps:
    project_root = root.resolve() if root is not None else find_project_root()
    config = load_config(project_root)
    with spinner(f"Indexing {project_root.name}"):
        project = JavaProject.load(project_root, config.project)
    return RefactorOps(project, config.refactor)


def _run(root: Path | None, action: Callable[[RefactorOps], EditPlan]) -> None:
    try:
        plan = action(_load_ops(root))
    except JavaLensError as e:
        fail(e)
    for warning in plan.warnings:
        status(warning, style="warning")
    edits = pluralize(plan.total_edits, "edit")
    status(f"{plan.operation}: {edits} in {pluralize(plan.files_affected, 'file')}", style="success")
    echo_json(plan.to_dict())


@click.command()
@_position_arguments
@click.argument("new_name")
@root_option
def rename_command(file_path: str, line: int, column: int, new_name: str, root: Path | None) -> None:
    """Rename the symbol at FILE_PATH LINE COLUMN to NEW_NAME."""
    _run(root, lambda ops: ops.rename(file_path, line, column, new_name))


@click.command()
@_position_arguments
@click.option("--name", "new_name", default=None, help="New method name")
@click.option("--return-type", "new_return_type", default=None, help="New return type")
@click.option(
    "--param",
    "params",
    multiple=True,
    help="New parameter as 'Type name[=default]', repeated in order",
)
@click.option("--no-params", is_flag=True, help="Change the method to take no parameters")
@root_option
def change_signature_command(
    file_path: str,
    line: int,
    column: int,
    new_name: str | None,
    new_return_type: str | None,
    params: tuple[str, ...],
    no_params: bool,
    root: Path | None,
) -> None:
    """Change the signature of the method at FILE_PATH LINE COLUMN and update its callers."""
    if params and no_params:
        raise click.UsageError("--param and --no-params are mutually exclusive")
    new_parameters = [parse_parameter(p) for p in params] if params else ([] if no_params else None)
    _run(
        root,
        lambda ops: ops.change_signature(
            file_path,
            line,
            column,
            new_name=new_name,
            new_return_type=new_return_type,
            new_parameters=new_parameters,
        ),
    )


@click.command()
@_selection_arguments
@click.argument("method_name")
@root_option
def extract_method_command(
    file_path: str,
    start_line: int,
    start_column: int,
    end_line: int,
    end_column: int,
    method_name: str,
    root: Path | None,
) -> None:
    """Extract the selected statements into METHOD_NAME."""
    _run(
        root,
        lambda ops: ops.extract_method(file_path, start_line, start_column, end_line, end_column, method_name),
    )


@click.command()
@_selection_arguments
@click.option("--name", "variable_name", default=None, help="Variable name (suggested if omitted)")
@root_option
def extract_variable_command(
    file_path: str,
    start_line: int,
    start_column: int,
    end_line: int,
    end_column: int,
    variable_name: str | None,
    root: Path | None,
) -> None:
    """Introduce a local variable for the selected expression."""
    _run(
        root,
        lambda ops: ops.extract_variable(file_path, start_line, start_column, end_line, end_column, variable_name),
    )


@click.command()
@_selection_arguments
@click.argument("constant_name")
@root_option
def extract_constant_command(
    file_path: str,
    start_line: int,
    start_column: int,
    end_line: int,
    end_column: int,
    constant_name: str,
    root: Path | None,
) -> None:
    """Introduce a static final field CONSTANT_NAME for the selected expression."""
    _run(
        root,
        lambda ops: ops.extract_constant(file_path, start_line, start_column, end_line, end_column, constant_name),
    )


@click.command()
@_position_arguments
@root_option
def inline_variable_command(file_path: str, line: int, column: int, root: Path | None) -> None:
    """Inline the local variable at FILE_PATH LINE COLUMN."""
    _run(root, lambda ops: ops.inline_variable(file_path, line, column))


@click.command()
@_position_arguments
@root_option
def inline_method_command(file_path: str, line: int, column: int, root: Path | None) -> None:
    """Inline the method call at FILE_PATH LINE COLUMN."""
    _run(root, lambda ops: ops.inline_method(file_path, line, column))


@click.command()
@_position_arguments
@root_option
def to_lambda_command(file_path: str, line: int, column: int, root: Path | None) -> None:
    """Convert the anonymous class at FILE_PATH LINE COLUMN into a lambda."""
    _run(root, lambda ops: ops.convert_anonymous_to_lambda(file_path, line, column))


@click.command()
@_position_arguments
@click.option("--limit", type=click.IntRange(min=1), default=None, help="Maximum references to list")
@root_option
def references_command(file_path: str, line: int, column: int, limit: int | None, root: Path | None) -> None:
    """List references to the symbol at FILE_PATH LINE COLUMN."""
    try:
        result = _load_ops(root).find_references(file_path, line, column, limit)
    except JavaLensError as e:
        fail(e)
    suffix = " (truncated)" if result.truncated else ""
    status(f"{pluralize(len(result.references), 'reference')} to {result.symbol}{suffix}", style="success")
    echo_json(result.to_dict())


@click.command()
@_position_arguments
@click.argument("interface_name")
@click.option("--method", "method_names", multiple=True, help="Method to include, repeatable (default: all public)")
@root_option
def extract_interface_command(
    file_path: str,
    line: int,
    column: int,
    interface_name: str,
    method_names: tuple[str, ...],
    root: Path | None,
) -> None:
    """Extract INTERFACE_NAME from the class at FILE_PATH LINE COLUMN."""
    _run(
        root,
        lambda ops: ops.extract_interface(file_path, line, column, interface_name, list(method_names) or None),
    )


@click.command()
@click.argument("file_path")
@root_option
def organize_imports_command(file_path: str, root: Path | None) -> None:
    """Remove unused imports of FILE_PATH and sort the rest."""
    _run(root, lambda ops: ops.organize_imports(file_path))
