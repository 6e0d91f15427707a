"""Immutable project snapshot: parsed units plus a lazily built index.

A snapshot is created per request (``JavaProject.load`` or
``JavaProject.from_sources``) and dropped afterwards. Nothing is cached
across requests.
"""

from __future__ import annotations

from collections.abc import Mapping
from functools import cached_property
from pathlib import Path, PurePosixPath

from javalens.config.models import ProjectConfig
from javalens.core.errors import SymbolNotFoundError
from javalens.core.excludes import iter_source_files
from javalens.core.logging import get_logger
from javalens.semantic.index import SemanticIndex
from javalens.semantic.parsing import JavaParser, Node, ParsedUnit
from javalens.semantic.symbols import (
    Declaration,
    MethodInfo,
    Occurrence,
    SymbolIdentity,
    TypeInfo,
    TypeRef,
)

log = get_logger(__name__)


class JavaProject:
    """Parsed Java sources of one project at one point in time."""

    def __init__(self, units: Mapping[str, ParsedUnit], root: Path | None = None) -> None:
        self._units = dict(units)
        self.root = root

    @classmethod
    def load(cls, root: Path, config: ProjectConfig | None = None) -> JavaProject:
        """Read every ``.java`` file under ``root`` (or its configured source roots)."""
        config = config or ProjectConfig()
        root = root.resolve()
        parser = JavaParser()
        max_bytes = config.max_file_size_kb * 1024
        search_roots = [root / r for r in config.source_roots] or [root]
        units: dict[str, ParsedUnit] = {}
        for search_root in search_roots:
            for file_path in iter_source_files(search_root, extra_excluded=config.excluded_dirs):
                size = file_path.stat().st_size
                if size > max_bytes:
                    log.debug("file_skipped", path=str(file_path), size=size, reason="too_large")
                    continue
                rel = file_path.relative_to(root).as_posix()
                text = file_path.read_text(encoding=config.encoding, errors="replace")
                units[rel] = parser.parse(rel, text)
        log.info("project_loaded", root=str(root), files=len(units))
        return cls(units, root)

    @classmethod
    def from_sources(cls, sources: Mapping[str, str]) -> JavaProject:
        """Snapshot from in-memory buffers keyed by relative path."""
        parser = JavaParser()
        return cls({path: parser.parse(path, text) for path, text in sources.items()})

    @cached_property
    def index(self) -> SemanticIndex:
        return SemanticIndex(self._units)

    @property
    def paths(self) -> list[str]:
        return sorted(self._units)

    def normalize(self, path: str) -> str:
        """Map an absolute or ``./``-prefixed path onto the snapshot's relative key."""
        if path in self._units:
            return path
        candidate = Path(path)
        if self.root is not None and candidate.is_absolute():
            try:
                return candidate.resolve().relative_to(self.root).as_posix()
            except ValueError:
                return path
        return PurePosixPath(path.replace("\\", "/")).as_posix()

    def unit(self, path: str) -> ParsedUnit:
        key = self.normalize(path)
        if key not in self._units:
            raise SymbolNotFoundError.file_not_found(path)
        return self._units[key]

    # ------------------------------------------------------------------
    # SemanticModel
    # ------------------------------------------------------------------

    def resolve_identity(self, path: str, offset: int) -> SymbolIdentity:
        unit = self.unit(path)
        identity = self.index.identity_at(unit.path, offset)
        if identity is None:
            line, column = unit.position_of(min(offset, len(unit.text)))
            raise SymbolNotFoundError.at_position(unit.path, line, column)
        return identity

    def identity_of(self, path: str, node: Node | None) -> SymbolIdentity | None:
        return self.index.identity_of(path, node)

    def occurrences_in(self, path: str) -> list[Occurrence]:
        return self.index.occurrences_in(path)

    def declaration_of(self, identity: SymbolIdentity) -> Declaration | None:
        return self.index.declaration_of(identity)

    def find_all_references(self, identity: SymbolIdentity, limit: int | None = None) -> list[Occurrence]:
        return self.index.find_all_references(identity, limit)

    def type_info(self, qname: str) -> TypeInfo | None:
        return self.index.type_info(qname)

    def method_info(self, identity: SymbolIdentity) -> MethodInfo | None:
        return self.index.method_info(identity)

    def enclosing_type(self, path: str, node: Node) -> TypeInfo | None:
        return self.index.enclosing_type(path, node)

    def type_of(self, path: str, node: Node) -> TypeRef | None:
        return self.index.type_of(path, node)

    def find_methods(self, qname: str, name: str) -> list[MethodInfo]:
        return self.index.table.find_methods(qname, name)

    def supertypes(self, qname: str) -> list[TypeInfo]:
        info = self.index.type_info(qname)
        if info is None:
            return []
        return [self.index.table.types[q] for q in info.supertypes if q in self.index.table.types]
