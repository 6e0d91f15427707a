"""Semantic Source Model interface consumed by the refactoring engines.

Engines depend only on this protocol. :class:`~javalens.semantic.project.JavaProject`
is the tree-sitter backed implementation shipped with the package.
"""

from __future__ import annotations

from typing import Protocol

from javalens.semantic.parsing import Node, ParsedUnit
from javalens.semantic.symbols import (
    Declaration,
    MethodInfo,
    Occurrence,
    SymbolIdentity,
    TypeInfo,
    TypeRef,
)


class SemanticModel(Protocol):
    """Read-only, snapshot-consistent view of a project."""

    @property
    def paths(self) -> list[str]: ...

    def unit(self, path: str) -> ParsedUnit:
        """Parsed unit for ``path``; raises ``SymbolNotFoundError`` (FILE_NOT_FOUND)."""
        ...

    def resolve_identity(self, path: str, offset: int) -> SymbolIdentity:
        """Identity of the bound identifier covering ``offset``; raises ``SymbolNotFoundError``."""
        ...

    def identity_of(self, path: str, node: Node | None) -> SymbolIdentity | None: ...

    def occurrences_in(self, path: str) -> list[Occurrence]: ...

    def declaration_of(self, identity: SymbolIdentity) -> Declaration | None: ...

    def find_all_references(self, identity: SymbolIdentity, limit: int | None = None) -> list[Occurrence]: ...

    def type_info(self, qname: str) -> TypeInfo | None: ...

    def method_info(self, identity: SymbolIdentity) -> MethodInfo | None: ...

    def enclosing_type(self, path: str, node: Node) -> TypeInfo | None: ...

    def type_of(self, path: str, node: Node) -> TypeRef | None: ...

    def find_methods(self, qname: str, name: str) -> list[MethodInfo]: ...

    def supertypes(self, qname: str) -> list[TypeInfo]:
        """Direct project supertypes of ``qname``."""
        ...
