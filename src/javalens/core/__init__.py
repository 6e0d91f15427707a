"""Core module exports."""

from javalens.core.errors import (
    ConfigError,
    ErrorCode,
    InternalError,
    InvalidOperationError,
    JavaLensError,
    RefactorError,
    StaleSourceError,
    SymbolNotFoundError,
)
from javalens.core.logging import (
    clear_request_id,
    configure_logging,
    get_logger,
    get_request_id,
    set_request_id,
)

__all__ = [
    # Errors
    "ConfigError",
    "ErrorCode",
    "InternalError",
    "InvalidOperationError",
    "JavaLensError",
    "RefactorError",
    "StaleSourceError",
    "SymbolNotFoundError",
    # Logging
    "clear_request_id",
    "configure_logging",
    "get_logger",
    "get_request_id",
    "set_request_id",
]
