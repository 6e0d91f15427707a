"""Decorator-based registry of MCP tools.

Each refactoring module registers its handlers at import time; the server
wires whatever is registered when it starts.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from fastmcp.utilities.json_schema import dereference_refs
from pydantic import BaseModel

if TYPE_CHECKING:
    from javalens.mcp.context import AppContext

# (ctx, validated params) -> result dict
HandlerFn = Callable[["AppContext", Any], Awaitable[dict[str, Any]]]


@dataclass(frozen=True)
class ToolSpec:
    """A registered tool: its handler and the pydantic model of its arguments."""

    name: str
    handler: HandlerFn
    description: str
    params_model: type[BaseModel]

    def input_schema(self) -> dict[str, Any]:
        """JSON schema of the params model with every ``$ref`` inlined."""
        return dereference_refs(self.params_model.model_json_schema())


class ToolRegistry:
    """Process-wide tool table. ``ToolRegistry()`` always returns the same instance."""

    _instance: ToolRegistry | None = None
    _tools: dict[str, ToolSpec]

    def __new__(cls) -> ToolRegistry:
        if cls._instance is None:
            instance = super().__new__(cls)
            instance._tools = {}
            cls._instance = instance
        return cls._instance

    def register(
        self,
        name: str,
        description: str,
        params_model: type[BaseModel],
    ) -> Callable[[HandlerFn], HandlerFn]:
        """Register the decorated coroutine as tool ``name``.

        Usage:
            @registry.register("inline_variable", "Inline a local variable", InlineVariableParams)
            async def inline_variable(ctx: AppContext, params: InlineVariableParams) -> dict:
                ...

        Raises:
            ValueError: a different handler is already registered under ``name``
        """

        def decorator(fn: HandlerFn) -> HandlerFn:
            existing = self._tools.get(name)
            if existing is not None and existing.handler is not fn:
                raise ValueError(f"Tool '{name}' is already registered by {existing.handler.__qualname__}")
            self._tools[name] = ToolSpec(name=name, handler=fn, description=description, params_model=params_model)
            return fn

        return decorator

    def get_all(self) -> list[ToolSpec]:
        """Specs in registration order."""
        return list(self._tools.values())

    def get(self, name: str) -> ToolSpec | None:
        return self._tools.get(name)

    def names(self) -> list[str]:
        return sorted(self._tools)

    def clear(self) -> None:
        """Drop every registration (tests only)."""
        self._tools.clear()


registry = ToolRegistry()
