"""Identity resolution: cursor position -> symbol identity.

Every engine starts here. A position resolves to the narrowest bound
identifier covering it; anything else is ``SymbolNotFoundError``.
"""

from __future__ import annotations

from dataclasses import dataclass

from javalens.core.errors import InvalidOperationError, SymbolNotFoundError
from javalens.semantic.model import SemanticModel
from javalens.semantic.parsing import Node, ParsedUnit
from javalens.semantic.symbols import Declaration, SymbolIdentity


@dataclass(frozen=True)
class ResolvedSymbol:
    identity: SymbolIdentity
    unit: ParsedUnit
    node: Node
    offset: int
    declaration: Declaration | None

    @property
    def name(self) -> str:
        return self.identity.name


def resolve_at(model: SemanticModel, path: str, line: int, column: int) -> ResolvedSymbol:
    """Resolve the symbol at a zero-based line/column."""
    unit = model.unit(path)
    return resolve_offset(model, unit, unit.offset_of(line, column))


def resolve_offset(model: SemanticModel, unit: ParsedUnit, offset: int) -> ResolvedSymbol:
    identity = model.resolve_identity(unit.path, offset)
    node = unit.identifier_at(offset)
    if node is None:
        line, column = unit.position_of(offset)
        raise SymbolNotFoundError.at_position(unit.path, line, column)
    return ResolvedSymbol(
        identity=identity,
        unit=unit,
        node=node,
        offset=offset,
        declaration=model.declaration_of(identity),
    )


def resolve_range(
    unit: ParsedUnit, start_line: int, start_column: int, end_line: int, end_column: int
) -> tuple[int, int]:
    """Selection as character offsets, with surrounding whitespace trimmed."""
    start = unit.offset_of(start_line, start_column)
    end = unit.offset_of(end_line, end_column)
    if end < start:
        raise InvalidOperationError.invalid_position(end_line, end_column, "selection end precedes its start")
    text = unit.text
    while start < end and text[start].isspace():
        start += 1
    while end > start and text[end - 1].isspace():
        end -= 1
    if start == end:
        raise InvalidOperationError.invalid_parameter("selection", "Selection is empty")
    return start, end


def identity_of_declaration(model: SemanticModel, unit: ParsedUnit, declaration: Node) -> SymbolIdentity:
    """Identity declared by a declaration node (declarator, parameter, method, type)."""
    name = declaration.child_by_field_name("name")
    identity = model.identity_of(unit.path, name)
    if identity is None:
        line, column = unit.position_of(unit.start(declaration))
        raise SymbolNotFoundError.at_position(unit.path, line, column, what="declaration")
    return identity
