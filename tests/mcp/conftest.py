"""Shared fixtures for MCP tests."""

from __future__ import annotations

from collections.abc import Callable, Generator
from pathlib import Path

import pytest

from javalens.config.models import JavaLensConfig
from javalens.mcp.context import AppContext
from javalens.mcp.registry import ToolRegistry, registry
from javalens.semantic.project import JavaProject


@pytest.fixture
def clean_registry() -> Generator[ToolRegistry, None, None]:
    """Clear and yield the global registry, restore after test."""
    original_tools = dict(registry._tools)
    registry.clear()
    yield registry
    registry._tools = original_tools


@pytest.fixture
def app_context(tmp_path: Path) -> Callable[[dict[str, str]], AppContext]:
    """Build an AppContext whose snapshots come from in-memory sources."""

    def factory(sources: dict[str, str]) -> AppContext:
        return AppContext(
            project_root=tmp_path,
            config=JavaLensConfig(),
            project_loader=lambda _root, _config: JavaProject.from_sources(sources),
        )

    return factory
