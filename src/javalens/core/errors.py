"""JavaLens error types with typed error codes.

Error code ranges:
- 2xxx: Config
- 4xxx: Refactor
- 9xxx: Internal

Engines raise these; the tool layer turns them into failure envelopes.
A refactoring either returns a complete edit plan or raises, never both.
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Typed error codes for programmatic handling."""

    # Config (2xxx)
    CONFIG_PARSE_ERROR = 2001
    CONFIG_INVALID_VALUE = 2002
    CONFIG_MISSING_REQUIRED = 2003
    CONFIG_FILE_NOT_FOUND = 2004

    # Refactor (4xxx)
    SYMBOL_NOT_FOUND = 4001
    INVALID_OPERATION = 4002
    STALE_SOURCE = 4003
    EDIT_CONFLICT = 4004
    INVALID_POSITION = 4005
    FILE_NOT_FOUND = 4006

    # Internal (9xxx)
    INTERNAL_ERROR = 9001
    INTERNAL_TIMEOUT = 9002


@dataclass(frozen=True, slots=True)
class JavaLensError(Exception):
    """Base error with structured context for tool responses."""

    code: ErrorCode
    message: str
    retryable: bool = False
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def error_name(self) -> str:
        """String identifier for logging (e.g., 'SYMBOL_NOT_FOUND')."""
        return self.code.name

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON/MCP responses."""
        return {
            "code": self.code.value,
            "error": self.error_name,
            "message": self.message,
            "retryable": self.retryable,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.error_name}: {self.message}"


class ConfigError(JavaLensError):
    """Configuration-related errors."""

    @classmethod
    def parse_error(cls, path: str, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_PARSE_ERROR,
            message=f"Failed to parse config at {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def invalid_value(cls, field: str, value: Any, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_INVALID_VALUE,
            message=f"Invalid value for '{field}': {reason}",
            details={"field": field, "value": str(value), "reason": reason},
        )

    @classmethod
    def missing_required(cls, field: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_MISSING_REQUIRED,
            message=f"Missing required config field: {field}",
            details={"field": field},
        )


class RefactorError(JavaLensError):
    """Base for failures raised by the refactoring engines."""


class SymbolNotFoundError(RefactorError):
    """No bound identifier (or no element of the wanted kind) at a position."""

    @classmethod
    def at_position(cls, path: str, line: int, column: int, what: str = "symbol") -> "SymbolNotFoundError":
        return cls(
            code=ErrorCode.SYMBOL_NOT_FOUND,
            message=f"No {what} at {path}:{line}:{column}",
            details={"path": path, "line": line, "column": column, "expected": what},
        )

    @classmethod
    def file_not_found(cls, path: str) -> "SymbolNotFoundError":
        return cls(
            code=ErrorCode.FILE_NOT_FOUND,
            message=f"File not found in project: {path}",
            details={"path": path},
        )


class InvalidOperationError(RefactorError):
    """A refactoring precondition is violated."""

    @classmethod
    def precondition(cls, reason: str, **details: Any) -> "InvalidOperationError":
        return cls(
            code=ErrorCode.INVALID_OPERATION,
            message=reason,
            details=details,
        )

    @classmethod
    def invalid_parameter(cls, param: str, reason: str) -> "InvalidOperationError":
        return cls(
            code=ErrorCode.INVALID_OPERATION,
            message=f"Invalid parameter '{param}': {reason}",
            details={"param": param, "reason": reason},
        )

    @classmethod
    def invalid_position(cls, line: int, column: int, reason: str) -> "InvalidOperationError":
        return cls(
            code=ErrorCode.INVALID_POSITION,
            message=f"Invalid coordinates (line={line}, column={column}): {reason}",
            details={"line": line, "column": column, "reason": reason},
        )

    @classmethod
    def overlapping_edits(cls, path: str, first: tuple[int, int], second: tuple[int, int]) -> "InvalidOperationError":
        return cls(
            code=ErrorCode.EDIT_CONFLICT,
            message=(
                f"Edits overlap in {path}: [{first[0]}, {first[1]}) and [{second[0]}, {second[1]})"
            ),
            details={"path": path, "first": list(first), "second": list(second)},
        )


class StaleSourceError(RefactorError):
    """An edit's recorded old text no longer matches the live source."""

    @classmethod
    def mismatch(cls, path: str, start: int, end: int, expected: str, actual: str) -> "StaleSourceError":
        return cls(
            code=ErrorCode.STALE_SOURCE,
            message=f"Source changed since the plan was computed ({path} [{start}, {end}))",
            retryable=True,
            details={
                "path": path,
                "start_offset": start,
                "end_offset": end,
                "expected": expected,
                "actual": actual,
            },
        )


class InternalError(JavaLensError):
    """Internal/unexpected errors."""

    @classmethod
    def unexpected(cls, reason: str, **details: Any) -> "InternalError":
        return cls(
            code=ErrorCode.INTERNAL_ERROR,
            message=f"Internal error: {reason}",
            details=details,
        )
