"""Refactor MCP tools - one handler per refactoring.

Every handler loads a fresh project snapshot, computes a plan, and returns
it. Nothing is written to disk; the agent applies the edits itself.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field

from javalens.core.errors import JavaLensError
from javalens.core.formatting import compress_path, pluralize, truncate_at_word
from javalens.mcp.errors import MCPError
from javalens.mcp.registry import registry
from javalens.mcp.tools.base import BaseParams, PositionParams, SelectionParams
from javalens.refactor.signature import ParameterSpec

if TYPE_CHECKING:
    from collections.abc import Callable

    from javalens.mcp.context import AppContext
    from javalens.refactor.edits import EditPlan
    from javalens.refactor.ops import RefactorOps, ReferencesResult


# =============================================================================
# Parameter Models
# =============================================================================


class RenameSymbolParams(PositionParams):
    new_name: str = Field(description="New identifier for the symbol")


class NewParameter(BaseModel):
    """One entry of the new parameter list, in order."""

    model_config = ConfigDict(extra="forbid")

    name: str = Field(description="Parameter name")
    type: str = Field(description="Parameter type, e.g. 'int' or 'List<String>'")
    default_value: str | None = Field(
        default=None,
        description="Argument text used at call sites when the parameter is new",
    )


class ChangeMethodSignatureParams(PositionParams):
    new_name: str | None = Field(default=None, description="New method name")
    new_return_type: str | None = Field(default=None, description="New return type")
    new_parameters: list[NewParameter] | None = Field(
        default=None,
        description="Complete new parameter list. Parameters keep their call-site "
        "arguments when matched by name; omit to keep the current list.",
    )


class ExtractMethodParams(SelectionParams):
    method_name: str = Field(description="Name of the new method")


class ExtractVariableParams(SelectionParams):
    variable_name: str | None = Field(
        default=None,
        description="Name of the new local variable (suggested from the expression if omitted)",
    )


class ExtractConstantParams(SelectionParams):
    constant_name: str = Field(description="Name of the new constant, e.g. MAX_RETRIES")


class InlineVariableParams(PositionParams):
    pass


class InlineMethodParams(PositionParams):
    pass


class ConvertAnonymousToLambdaParams(PositionParams):
    pass


class ExtractInterfaceParams(PositionParams):
    interface_name: str = Field(description="Name of the new interface")
    method_names: list[str] | None = Field(
        default=None,
        description="Methods to include (default: every public instance method)",
    )


class OrganizeImportsParams(BaseParams):
    file_path: str = Field(description="Path to the .java file, relative to the project root")


class FindReferencesParams(PositionParams):
    limit: int | None = Field(default=None, ge=1, description="Maximum references to return")


# =============================================================================
# Summary Helpers
# =============================================================================


def _summarize_plan(plan: EditPlan) -> str:
    edits = pluralize(plan.total_edits, "edit")
    parts = [f"{plan.operation}: {edits} in {pluralize(plan.files_affected, 'file')}"]
    if plan.warnings:
        parts.append(f"({pluralize(len(plan.warnings), 'warning')})")
    return " ".join(parts)


def _display_plan(plan: EditPlan) -> str:
    """Human-friendly message for a computed plan."""
    files = ", ".join(compress_path(path, 35) for path in sorted(plan.edits_by_file))
    message = f"Plan ready: {pluralize(plan.total_edits, 'edit')} in {files or 'no files'}."
    if plan.new_files:
        message += f" New: {', '.join(compress_path(path, 35) for path in sorted(plan.new_files))}."
    if plan.warnings:
        message += f" Review: {truncate_at_word(plan.warnings[0], 80)}"
    return message


def _serialize_plan(plan: EditPlan) -> dict[str, Any]:
    return {
        "plan": plan.to_dict(),
        "summary": _summarize_plan(plan),
        "display_to_user": _display_plan(plan),
    }


def _serialize_references(result: ReferencesResult) -> dict[str, Any]:
    output = result.to_dict()
    output["files"] = result.files
    count = pluralize(len(result.references), "reference")
    summary = f"{count} to {result.symbol} in {pluralize(len(result.files), 'file')}"
    if result.truncated:
        summary += " (truncated)"
    output["summary"] = summary
    output["display_to_user"] = summary + "."
    return output


async def _run(ctx: AppContext, action: Callable[[RefactorOps], Any]) -> Any:
    """Build a snapshot and run ``action`` off the event loop.

    Engine errors become ``MCPError`` so the envelope carries their code.
    """

    def work() -> Any:
        return action(ctx.refactor_ops())

    try:
        return await asyncio.to_thread(work)
    except JavaLensError as e:
        raise MCPError.from_domain(e) from e


# =============================================================================
# Tool Handlers
# =============================================================================


@registry.register(
    "rename_symbol",
    "Rename a class, method, field, local variable, parameter or type parameter at a position, "
    "updating every reference. Returns an edit plan; nothing is written.",
    RenameSymbolParams,
)
async def rename_symbol(ctx: AppContext, params: RenameSymbolParams) -> dict[str, Any]:
    plan = await _run(
        ctx, lambda ops: ops.rename(params.file_path, params.line, params.column, params.new_name)
    )
    return _serialize_plan(plan)


@registry.register(
    "change_method_signature",
    "Change a method's name, return type or parameter list and rewrite every call site. "
    "Returns an edit plan; nothing is written.",
    ChangeMethodSignatureParams,
)
async def change_method_signature(ctx: AppContext, params: ChangeMethodSignatureParams) -> dict[str, Any]:
    new_parameters = (
        [ParameterSpec(p.name, p.type, p.default_value) for p in params.new_parameters]
        if params.new_parameters is not None
        else None
    )
    plan = await _run(
        ctx,
        lambda ops: ops.change_signature(
            params.file_path,
            params.line,
            params.column,
            new_name=params.new_name,
            new_return_type=params.new_return_type,
            new_parameters=new_parameters,
        ),
    )
    return _serialize_plan(plan)


@registry.register(
    "extract_method",
    "Extract the selected complete statements into a new private method and replace them with a call.",
    ExtractMethodParams,
)
async def extract_method(ctx: AppContext, params: ExtractMethodParams) -> dict[str, Any]:
    plan = await _run(
        ctx,
        lambda ops: ops.extract_method(
            params.file_path,
            params.start_line,
            params.start_column,
            params.end_line,
            params.end_column,
            params.method_name,
        ),
    )
    return _serialize_plan(plan)


@registry.register(
    "extract_variable",
    "Introduce a local variable for the selected expression, declared before the enclosing statement.",
    ExtractVariableParams,
)
async def extract_variable(ctx: AppContext, params: ExtractVariableParams) -> dict[str, Any]:
    plan = await _run(
        ctx,
        lambda ops: ops.extract_variable(
            params.file_path,
            params.start_line,
            params.start_column,
            params.end_line,
            params.end_column,
            params.variable_name,
        ),
    )
    return _serialize_plan(plan)


@registry.register(
    "extract_constant",
    "Introduce a static final field for the selected expression and replace the expression with it.",
    ExtractConstantParams,
)
async def extract_constant(ctx: AppContext, params: ExtractConstantParams) -> dict[str, Any]:
    plan = await _run(
        ctx,
        lambda ops: ops.extract_constant(
            params.file_path,
            params.start_line,
            params.start_column,
            params.end_line,
            params.end_column,
            params.constant_name,
        ),
    )
    return _serialize_plan(plan)


@registry.register(
    "inline_variable",
    "Replace every use of a local variable with its initializer and remove the declaration.",
    InlineVariableParams,
)
async def inline_variable(ctx: AppContext, params: InlineVariableParams) -> dict[str, Any]:
    plan = await _run(ctx, lambda ops: ops.inline_variable(params.file_path, params.line, params.column))
    return _serialize_plan(plan)


@registry.register(
    "inline_method",
    "Replace one method call with the method's body, substituting arguments for parameters.",
    InlineMethodParams,
)
async def inline_method(ctx: AppContext, params: InlineMethodParams) -> dict[str, Any]:
    plan = await _run(ctx, lambda ops: ops.inline_method(params.file_path, params.line, params.column))
    return _serialize_plan(plan)


@registry.register(
    "convert_anonymous_to_lambda",
    "Convert an anonymous class implementing a functional interface into a lambda. "
    "Position the cursor on the 'new' keyword.",
    ConvertAnonymousToLambdaParams,
)
async def convert_anonymous_to_lambda(
    ctx: AppContext, params: ConvertAnonymousToLambdaParams
) -> dict[str, Any]:
    plan = await _run(
        ctx, lambda ops: ops.convert_anonymous_to_lambda(params.file_path, params.line, params.column)
    )
    return _serialize_plan(plan)


@registry.register(
    "extract_interface",
    "Extract an interface from the public instance methods of the class at a position. "
    "The plan carries the new interface file and adds it to the class's implements list.",
    ExtractInterfaceParams,
)
async def extract_interface(ctx: AppContext, params: ExtractInterfaceParams) -> dict[str, Any]:
    plan = await _run(
        ctx,
        lambda ops: ops.extract_interface(
            params.file_path, params.line, params.column, params.interface_name, params.method_names
        ),
    )
    return _serialize_plan(plan)


@registry.register(
    "organize_imports",
    "Remove unused and duplicate imports of a file and sort the rest into groups.",
    OrganizeImportsParams,
)
async def organize_imports(ctx: AppContext, params: OrganizeImportsParams) -> dict[str, Any]:
    plan = await _run(ctx, lambda ops: ops.organize_imports(params.file_path))
    return _serialize_plan(plan)


@registry.register(
    "find_references",
    "List every occurrence of the symbol at a position, including its declaration.",
    FindReferencesParams,
)
async def find_references(ctx: AppContext, params: FindReferencesParams) -> dict[str, Any]:
    result = await _run(
        ctx, lambda ops: ops.find_references(params.file_path, params.line, params.column, params.limit)
    )
    return _serialize_references(result)


__all__ = [
    "ChangeMethodSignatureParams",
    "ConvertAnonymousToLambdaParams",
    "ExtractConstantParams",
    "ExtractInterfaceParams",
    "ExtractMethodParams",
    "ExtractVariableParams",
    "FindReferencesParams",
    "InlineMethodParams",
    "InlineVariableParams",
    "NewParameter",
    "OrganizeImportsParams",
    "RenameSymbolParams",
]
