"""Structured error system for MCP tools.

Engine errors (``JavaLensError``) are converted into ``MCPError`` with a
string code and a remediation hint so agents can self-correct.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from fastmcp.exceptions import ToolError

from javalens.core.errors import ErrorCode, JavaLensError


class MCPErrorCode(StrEnum):
    """Machine-readable error codes for MCP tool failures."""

    # Validation errors - agent should fix input
    INVALID_PARAMS = "INVALID_PARAMS"
    INVALID_POSITION = "INVALID_POSITION"
    SYMBOL_NOT_FOUND = "SYMBOL_NOT_FOUND"
    INVALID_OPERATION = "INVALID_OPERATION"

    # State errors - agent should re-read file
    STALE_SOURCE = "STALE_SOURCE"
    EDIT_CONFLICT = "EDIT_CONFLICT"

    # File errors
    FILE_NOT_FOUND = "FILE_NOT_FOUND"

    # System errors
    CONFIG_ERROR = "CONFIG_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


_DOMAIN_CODES: dict[ErrorCode, MCPErrorCode] = {
    ErrorCode.SYMBOL_NOT_FOUND: MCPErrorCode.SYMBOL_NOT_FOUND,
    ErrorCode.INVALID_OPERATION: MCPErrorCode.INVALID_OPERATION,
    ErrorCode.STALE_SOURCE: MCPErrorCode.STALE_SOURCE,
    ErrorCode.EDIT_CONFLICT: MCPErrorCode.EDIT_CONFLICT,
    ErrorCode.INVALID_POSITION: MCPErrorCode.INVALID_POSITION,
    ErrorCode.FILE_NOT_FOUND: MCPErrorCode.FILE_NOT_FOUND,
    ErrorCode.CONFIG_PARSE_ERROR: MCPErrorCode.CONFIG_ERROR,
    ErrorCode.CONFIG_INVALID_VALUE: MCPErrorCode.CONFIG_ERROR,
    ErrorCode.CONFIG_MISSING_REQUIRED: MCPErrorCode.CONFIG_ERROR,
    ErrorCode.CONFIG_FILE_NOT_FOUND: MCPErrorCode.CONFIG_ERROR,
}

REMEDIATION: dict[MCPErrorCode, str] = {
    MCPErrorCode.INVALID_PARAMS: "Check parameter names and types against the tool schema.",
    MCPErrorCode.INVALID_POSITION: (
        "Line and column are zero-based. Re-read the file and point at the symbol's identifier."
    ),
    MCPErrorCode.SYMBOL_NOT_FOUND: (
        "Place the position on a declared identifier. Library symbols outside the project cannot be refactored."
    ),
    MCPErrorCode.INVALID_OPERATION: (
        "The refactoring does not apply here. Read the message, adjust the selection or arguments, or edit manually."
    ),
    MCPErrorCode.STALE_SOURCE: "The file changed since the plan was computed. Request a fresh plan.",
    MCPErrorCode.EDIT_CONFLICT: "The computed edits overlap. Narrow the selection and retry.",
    MCPErrorCode.FILE_NOT_FOUND: "Use a path relative to the project root ending in .java.",
    MCPErrorCode.CONFIG_ERROR: "Fix .javalens/config.yaml or the JAVALENS__* environment variables.",
    MCPErrorCode.INTERNAL_ERROR: "Report the failure with the request id from the server log.",
}


@dataclass
class ErrorResponse:
    """Structured error response for MCP tools."""

    code: MCPErrorCode
    message: str
    remediation: str
    path: str | None = None
    context: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "code": self.code.value,
            "message": self.message,
            "remediation": self.remediation,
            "path": self.path,
            "context": self.context,
        }


class MCPError(ToolError):
    """Base exception for MCP tool errors with structured response.

    Extends FastMCP's ToolError so FastMCP passes it through unwrapped.
    """

    _RESERVED_KEYS = frozenset({"code", "message", "remediation", "path", "error_code", "retryable"})

    def __init__(
        self,
        code: MCPErrorCode,
        message: str,
        remediation: str | None = None,
        path: str | None = None,
        **context: Any,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.remediation = remediation or REMEDIATION[code]
        self.path = path
        self.context = context

    @classmethod
    def from_domain(cls, error: JavaLensError) -> MCPError:
        """Wrap an engine error, keeping its numeric code and details as context."""
        code = _DOMAIN_CODES.get(error.code, MCPErrorCode.INTERNAL_ERROR)
        path = error.details.get("path")
        details = {k: v for k, v in error.details.items() if k not in cls._RESERVED_KEYS}
        return cls(
            code=code,
            message=error.message,
            path=str(path) if path is not None else None,
            error_code=error.code.value,
            retryable=error.retryable,
            **details,
        )

    def to_response(self) -> ErrorResponse:
        """Convert to ErrorResponse."""
        return ErrorResponse(
            code=self.code,
            message=self.message,
            remediation=self.remediation,
            path=self.path,
            context=self.context,
        )
