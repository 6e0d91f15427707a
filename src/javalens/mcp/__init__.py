"""MCP server module - FastMCP tool registration and wiring."""

from javalens.mcp.context import AppContext
from javalens.mcp.registry import ToolRegistry, ToolSpec
from javalens.mcp.server import create_mcp_server

__all__ = ["AppContext", "ToolRegistry", "ToolSpec", "create_mcp_server"]
