"""Structured logging for engines, tools and the CLI.

Every output (stderr, stdout or a file) has its own level and renderer, so
the MCP server can keep stderr terse while the project log file records
JSON at DEBUG. Tool invocations carry a request id through a ContextVar.
"""

from __future__ import annotations

import logging
import sys
from contextvars import ContextVar
from pathlib import Path
from typing import TYPE_CHECKING, Any
from uuid import uuid4

import structlog

if TYPE_CHECKING:
    from javalens.config.models import LoggingConfig

_request_id: ContextVar[str | None] = ContextVar("request_id", default=None)

_STREAMS = ("stderr", "stdout")

# Library loggers that emit one record per protocol message
_CHATTY_LOGGERS = ("mcp.server.lowlevel.server", "fastmcp.server.context.to_client")


def get_request_id() -> str | None:
    return _request_id.get()


def set_request_id(request_id: str | None = None) -> str:
    """Bind ``request_id`` (or a fresh 12-hex id) to the current context."""
    rid = request_id or uuid4().hex[:12]
    _request_id.set(rid)
    return rid


def clear_request_id() -> None:
    _request_id.set(None)


def _add_request_id(
    _logger: structlog.types.WrappedLogger,
    _method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    if rid := get_request_id():
        event_dict["request_id"] = rid
    return event_dict


def _level_number(name: str | None, fallback: int) -> int:
    if not name:
        return fallback
    name = name.upper()
    if name == "WARN":
        name = "WARNING"
    value = logging.getLevelName(name)
    return value if isinstance(value, int) else fallback


def _shared_processors() -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S", key="timestamp"),
        _add_request_id,  # type: ignore[list-item]
    ]


def _formatter(output_format: str, destination: str) -> logging.Formatter:
    renderer: structlog.types.Processor
    if output_format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        colors = destination in _STREAMS and sys.stderr.isatty()
        renderer = structlog.dev.ConsoleRenderer(colors=colors, pad_event_to=0, pad_level=False)
    return structlog.stdlib.ProcessorFormatter(processor=renderer, foreign_pre_chain=_shared_processors())


def configure_logging(
    *,
    config: LoggingConfig | None = None,
    json_format: bool = False,
    level: str = "INFO",
) -> None:
    """Install structlog over the stdlib root logger.

    Args:
        config: Full configuration with one entry per output. When omitted a
            single stderr output is built from ``json_format`` and ``level``.
        json_format: Render the default output as JSON lines
        level: Level of the default output
    """
    from javalens.config.models import LoggingConfig, LogOutputConfig

    if config is None:
        config = LoggingConfig(
            level=level,
            outputs=[LogOutputConfig(format="json" if json_format else "console")],
        )

    root_level = _level_number(config.level, logging.INFO)

    structlog.configure(
        processors=[*_shared_processors(), structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.make_filtering_bound_logger(root_level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        # reconfigured per CLI invocation and per test
        cache_logger_on_first_use=False,
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(root_level)
    for name in _CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    for output in config.outputs:
        handler = _create_handler(output.destination)
        handler.setLevel(_level_number(output.level, root_level))
        handler.setFormatter(_formatter(output.format, output.destination))
        root_logger.addHandler(handler)


class ConsoleSuppressingFilter(logging.Filter):
    """Blocks console records while a spinner owns the terminal."""

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: ARG002
        from javalens.core.progress import is_console_suppressed

        return not is_console_suppressed()


def _create_handler(destination: str) -> logging.Handler:
    """Stream handler for ``stderr``/``stdout``, else an appending file handler."""
    if destination in _STREAMS:
        handler: logging.Handler = logging.StreamHandler(sys.stderr if destination == "stderr" else sys.stdout)
        handler.addFilter(ConsoleSuppressingFilter())
        return handler
    path = Path(destination)
    path.parent.mkdir(parents=True, exist_ok=True)
    return logging.FileHandler(path, mode="a", encoding="utf-8")


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Lazy logger that resolves the current ``configure_logging`` setup on every call."""
    if name:
        return structlog._config.BoundLoggerLazyProxy(None, initial_values={"logger": name})  # type: ignore[return-value]
    return structlog.get_logger()  # type: ignore[no-any-return]
