"""FastMCP server creation and wiring.

Two-phase tool logging: ``tool_start`` with params, ``tool_complete`` with a
summary. Expected failures log a warning; internal errors log a console
summary and a debug-level traceback.
"""

from __future__ import annotations

import time
from pathlib import Path
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, Field

from javalens.core.logging import clear_request_id, get_logger, set_request_id

if TYPE_CHECKING:
    from fastmcp import FastMCP

    from javalens.mcp.context import AppContext
    from javalens.mcp.registry import ToolSpec

log = get_logger(__name__)


class ToolResponse(BaseModel):
    """Standardized tool response envelope."""

    result: Any = None
    meta: dict[str, Any] = Field(default_factory=dict)
    success: bool
    error: str | None = None


def _extract_log_params(kwargs: dict[str, Any]) -> dict[str, Any]:
    """Key params for the tool_start log line, with long values shortened."""
    params: dict[str, Any] = {}
    for key, value in kwargs.items():
        if isinstance(value, str) and len(value) > 50:
            params[key] = value[:50] + "..."
        elif isinstance(value, list) and len(value) > 3:
            params[key] = f"[{len(value)} items]"
        elif value is not None:
            params[key] = value
    return params


def _extract_result_summary(result: dict[str, Any]) -> dict[str, Any]:
    """Counts worth logging on tool_complete."""
    summary: dict[str, Any] = {}
    plan = result.get("plan")
    if isinstance(plan, dict):
        summary["files_affected"] = plan.get("files_affected", 0)
        summary["total_edits"] = plan.get("total_edits", 0)
        summary["warnings"] = len(plan.get("warnings", []))
    if "total" in result:
        summary["total"] = result["total"]
    if result.get("truncated"):
        summary["truncated"] = True
    return summary


def create_mcp_server(context: AppContext) -> FastMCP:
    """Create FastMCP server with all tools wired to context.

    Args:
        context: AppContext for the served project

    Returns:
        Configured FastMCP server ready to run
    """
    from fastmcp import FastMCP

    from javalens.mcp.registry import registry

    # Import tools to trigger registration
    from javalens.mcp.tools import refactor  # noqa: F401

    log.info("mcp_server_creating", project_root=str(context.project_root))

    mcp = FastMCP(
        "javalens",
        instructions=(
            "JavaLens computes semantic refactorings for Java sources. Every tool returns an "
            "edit plan (old/new text per range) and never modifies files. Positions are zero-based."
        ),
    )

    tool_count = 0
    for spec in registry.get_all():
        _wire_tool(mcp, spec, context)
        tool_count += 1

    log.info("mcp_server_created", tool_count=tool_count)
    return mcp


def build_handler(spec: ToolSpec, context: AppContext) -> Any:
    """Create the kwargs-accepting coroutine FastMCP calls for ``spec``.

    The params model is rebuilt from kwargs, the registered handler runs,
    and every outcome is wrapped in a ToolResponse dict.
    """
    from pydantic import ValidationError

    from javalens.mcp.errors import MCPError

    params_model = spec.params_model
    spec_handler = spec.handler

    async def handler(**kwargs: Any) -> dict[str, Any]:
        tool_name = spec.name
        request_id = set_request_id()
        start_time = time.perf_counter()
        log.info("tool_start", tool=tool_name, **_extract_log_params(kwargs))

        try:
            try:
                params = params_model(**kwargs)
            except ValidationError as e:
                elapsed_ms = int((time.perf_counter() - start_time) * 1000)
                first = e.errors()[0]["msg"] if e.errors() else str(e)
                log.warning("tool_validation_error", tool=tool_name, error=first, elapsed_ms=elapsed_ms)
                return ToolResponse(
                    success=False,
                    error=f"Validation error: {first}",
                    meta={
                        "request_id": request_id,
                        "error_type": "validation",
                        "validation_errors": [
                            {"field": ".".join(str(x) for x in err["loc"]), "message": err["msg"]}
                            for err in e.errors()[:5]
                        ],
                    },
                ).model_dump()

            try:
                result_data: dict[str, Any] = await spec_handler(context, params)
            except MCPError as e:
                elapsed_ms = int((time.perf_counter() - start_time) * 1000)
                log.warning(
                    "tool_error",
                    tool=tool_name,
                    error_code=e.code.value,
                    error=e.message,
                    path=e.path,
                    elapsed_ms=elapsed_ms,
                )
                return ToolResponse(
                    success=False,
                    error=e.message,
                    meta={"request_id": request_id, "error": e.to_response().to_dict()},
                ).model_dump()
            except Exception as e:
                elapsed_ms = int((time.perf_counter() - start_time) * 1000)
                log.error("tool_internal_error", tool=tool_name, error=str(e), elapsed_ms=elapsed_ms)
                log.debug("tool_internal_error_traceback", tool=tool_name, exc_info=True)
                return ToolResponse(
                    success=False,
                    error=str(e),
                    meta={"request_id": request_id, "error_type": "internal"},
                ).model_dump()

            elapsed_ms = int((time.perf_counter() - start_time) * 1000)
            summary = _extract_result_summary(result_data)
            log.info("tool_complete", tool=tool_name, elapsed_ms=elapsed_ms, **summary)
            return ToolResponse(
                success=True,
                result=result_data,
                meta={"request_id": request_id, "timestamp": int(time.time() * 1000)},
            ).model_dump()
        finally:
            clear_request_id()

    return handler


def _wire_tool(mcp: FastMCP, spec: ToolSpec, context: AppContext) -> None:
    """Wire a single tool spec to FastMCP.

    The params model's JSON schema is dereferenced so every client sees a
    flat parameter list.
    """
    from fastmcp.tools.tool import FunctionTool

    flat_schema = spec.input_schema()
    tool = FunctionTool(
        name=spec.name,
        description=spec.description,
        parameters=flat_schema,
        fn=build_handler(spec, context),
    )
    mcp.add_tool(tool)


def run_server(project_root: Path, *, verbose: bool = False) -> None:
    """Create and run the MCP server over stdio."""
    from javalens.config.models import LoggingConfig, LogOutputConfig
    from javalens.core.logging import configure_logging
    from javalens.mcp.context import AppContext

    context = AppContext.create(project_root)

    # stdout carries the protocol; logs go to stderr and the project log file
    log_file = context.project_root / ".javalens" / "mcp-server.log"
    configure_logging(
        config=LoggingConfig(
            level="DEBUG",
            outputs=[
                LogOutputConfig(
                    destination="stderr",
                    format="console",
                    level="DEBUG" if verbose else context.config.logging.level,
                ),
                LogOutputConfig(destination=str(log_file), format="json", level="DEBUG"),
            ],
        )
    )

    log.info("mcp_server_starting", project_root=str(context.project_root), log_file=str(log_file))
    mcp = create_mcp_server(context)
    log.info("mcp_server_running")
    mcp.run()
