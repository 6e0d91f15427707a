"""Per-snapshot semantic index.

Built once from the parsed units of a :class:`~javalens.semantic.project.JavaProject`
and discarded with it. Holds the type table (pass 1), every bound
occurrence (pass 2), and the reverse map from identity to occurrences used
by project-wide searches.
"""

from __future__ import annotations

import time
from collections import defaultdict
from collections.abc import Mapping

from javalens.core.logging import get_logger
from javalens.semantic.binder import BindResult, ExpressionTyper, UnitBinder
from javalens.semantic.declarations import TypeTable
from javalens.semantic.parsing import Node, ParsedUnit
from javalens.semantic.symbols import (
    Declaration,
    MethodInfo,
    Occurrence,
    SymbolIdentity,
    TypeInfo,
    TypeRef,
)

log = get_logger(__name__)


class SemanticIndex:
    def __init__(self, units: Mapping[str, ParsedUnit]) -> None:
        start = time.perf_counter()
        self._units = units
        self.table = TypeTable.build(list(units.values()))
        self._bindings: dict[str, BindResult] = {}
        self._declarations: dict[SymbolIdentity, Declaration] = dict(self.table.declarations)
        self._references: dict[SymbolIdentity, list[Occurrence]] = defaultdict(list)
        for path, unit in units.items():
            result = UnitBinder(self.table, unit).bind()
            self._bindings[path] = result
            self._declarations.update(result.declarations)
            for occurrence in result.occurrences:
                self._references[occurrence.identity].append(occurrence)
        log.debug(
            "index_built",
            files=len(units),
            types=len(self.table.types),
            identities=len(self._references),
            elapsed_ms=round((time.perf_counter() - start) * 1000, 1),
        )

    # ------------------------------------------------------------------
    # Identity
    # ------------------------------------------------------------------

    def identity_of(self, path: str, node: Node | None) -> SymbolIdentity | None:
        if node is None or path not in self._bindings:
            return None
        return self._bindings[path].bound.get(node.start_byte)

    def identity_at(self, path: str, offset: int) -> SymbolIdentity | None:
        unit = self._units.get(path)
        if unit is None:
            return None
        ident = unit.identifier_at(offset)
        return self.identity_of(path, ident)

    def occurrences_in(self, path: str) -> list[Occurrence]:
        result = self._bindings.get(path)
        return list(result.occurrences) if result is not None else []

    def find_all_references(self, identity: SymbolIdentity, limit: int | None = None) -> list[Occurrence]:
        found = sorted(self._references.get(identity, []), key=lambda o: (o.path, o.offset))
        return found[:limit] if limit is not None else found

    # ------------------------------------------------------------------
    # Declarations and types
    # ------------------------------------------------------------------

    def declaration_of(self, identity: SymbolIdentity) -> Declaration | None:
        return self._declarations.get(identity)

    def type_info(self, qname: str) -> TypeInfo | None:
        return self.table.types.get(qname)

    def method_info(self, identity: SymbolIdentity) -> MethodInfo | None:
        return self.table.method_info(identity)

    def enclosing_type(self, path: str, node: Node) -> TypeInfo | None:
        return self.table.enclosing_type(path, node)

    def type_of(self, path: str, node: Node) -> TypeRef | None:
        unit = self._units[path]
        typer = ExpressionTyper(
            unit, self.table, lambda n: self.identity_of(path, n), self._declarations
        )
        return typer.type_of(node)
