"""Application context for MCP handlers.

Single object passed to all tool handlers. It holds the project root and
resolved configuration; every request gets its own project snapshot.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from javalens.config.models import JavaLensConfig
    from javalens.refactor.ops import RefactorOps
    from javalens.semantic.project import JavaProject


def _load_project(root: Path, config: JavaLensConfig) -> JavaProject:
    from javalens.semantic.project import JavaProject

    return JavaProject.load(root, config.project)


@dataclass
class AppContext:
    """Context object passed to all MCP tool handlers."""

    project_root: Path
    config: JavaLensConfig
    project_loader: Callable[[Path, JavaLensConfig], JavaProject] = field(default=_load_project)

    @classmethod
    def create(cls, project_root: Path, config: JavaLensConfig | None = None) -> AppContext:
        """Factory resolving configuration for ``project_root``.

        Args:
            project_root: Java project root
            config: Pre-resolved configuration (loaded from disk if omitted)
        """
        from javalens.config.loader import load_config

        project_root = project_root.resolve()
        return cls(project_root=project_root, config=config or load_config(project_root))

    def refactor_ops(self) -> RefactorOps:
        """Fresh snapshot of the project wrapped in a RefactorOps facade.

        Sources are re-read on every call; nothing survives the request.
        """
        from javalens.refactor.ops import RefactorOps

        project = self.project_loader(self.project_root, self.config)
        return RefactorOps(project, self.config.refactor)
