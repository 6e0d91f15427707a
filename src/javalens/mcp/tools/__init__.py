"""MCP tool handlers."""

from javalens.mcp.tools import refactor

__all__ = ["refactor"]
