"""Flow/scope analysis over one enclosing scope.

Single linear pass with a position cursor: every bound variable
occurrence inside the scope is classified by where it sits relative to a
region (before, inside, after) and by whether it is an assignment target.
The result is an immutable :class:`ScopeSnapshot` built from that
classification; nothing is accumulated across calls.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import StrEnum

from javalens.semantic.model import SemanticModel
from javalens.semantic.parsing import (
    CALLABLE_TYPES,
    Node,
    ParsedUnit,
    first_child_of_type,
    is_same_node,
    walk_named,
)
from javalens.semantic.symbols import Occurrence, SymbolIdentity, SymbolKind, TypeRef

SCOPE_TYPES = CALLABLE_TYPES | {"lambda_expression", "static_initializer"}

# Bodies that start a new control-flow context: returns inside them do not
# leave the surrounding callable.
NESTED_BODY_TYPES = frozenset({"lambda_expression", "class_body", "class_declaration"})

LOOP_TYPES = frozenset({"for_statement", "enhanced_for_statement", "while_statement", "do_statement"})

_LOCAL_KINDS = (SymbolKind.LOCAL, SymbolKind.PARAMETER)


class Position(StrEnum):
    BEFORE = "before"
    INSIDE = "inside"
    AFTER = "after"


@dataclass(frozen=True, slots=True)
class VariableReference:
    identity: SymbolIdentity
    offset: int
    position: Position
    is_declaration: bool
    is_write: bool


@dataclass(frozen=True)
class ScopeSnapshot:
    """Variables of a scope partitioned relative to a region."""

    declared_before: frozenset[SymbolIdentity]
    declared_in: frozenset[SymbolIdentity]
    used_in: frozenset[SymbolIdentity]
    modified_in: frozenset[SymbolIdentity]
    used_after: frozenset[SymbolIdentity]
    types: Mapping[SymbolIdentity, TypeRef | None]
    declared_at: Mapping[SymbolIdentity, int]

    def _ordered(self, identities: Iterable[SymbolIdentity]) -> list[SymbolIdentity]:
        return sorted(identities, key=lambda i: (self.declared_at.get(i, 0), i.key))

    @property
    def parameters(self) -> list[SymbolIdentity]:
        """Declared before and used inside, minus anything declared inside."""
        return self._ordered((self.declared_before & self.used_in) - self.declared_in)

    @property
    def return_candidates(self) -> list[SymbolIdentity]:
        """Modified (or declared) inside and still read after the region."""
        return self._ordered((self.modified_in | self.declared_in) & self.used_after)

    def type_text(self, identity: SymbolIdentity, default: str = "Object") -> str:
        ref = self.types.get(identity)
        return ref.text if ref is not None else default

    @staticmethod
    def names(identities: Iterable[SymbolIdentity]) -> list[str]:
        return [i.name for i in identities]


def is_write(node: Node) -> bool:
    """True if the identifier ``node`` is the target of ``=``, ``op=``, ``++`` or ``--``."""
    target = node
    parent = node.parent
    if parent is not None and parent.type == "field_access":
        if is_same_node(parent.child_by_field_name("field"), node):
            target, parent = parent, parent.parent
    while parent is not None and parent.type == "parenthesized_expression":
        target, parent = parent, parent.parent
    if parent is None:
        return False
    if parent.type == "assignment_expression":
        return is_same_node(parent.child_by_field_name("left"), target)
    return parent.type == "update_expression"


def bounding_scope(node: Node) -> Node | None:
    """Smallest enclosing callable, lambda, or initializer of ``node``."""
    current = node.parent
    while current is not None:
        if current.type in SCOPE_TYPES:
            return current
        if current.type == "block" and current.parent is not None and current.parent.type == "class_body":
            return current
        current = current.parent
    return None


def _scoped_occurrences(model: SemanticModel, unit: ParsedUnit, scope: Node) -> list[Occurrence]:
    start, end = unit.start(scope), unit.end(scope)
    return [
        o for o in model.occurrences_in(unit.path) if start <= o.offset < end and o.identity.kind in _LOCAL_KINDS
    ]


def classify(occurrence: Occurrence, region_start: int, region_end: int) -> VariableReference:
    if occurrence.offset < region_start:
        position = Position.BEFORE
    elif occurrence.offset < region_end:
        position = Position.INSIDE
    else:
        position = Position.AFTER
    return VariableReference(
        identity=occurrence.identity,
        offset=occurrence.offset,
        position=position,
        is_declaration=occurrence.is_declaration,
        is_write=not occurrence.is_declaration and is_write(occurrence.node),
    )


def classify_region(
    model: SemanticModel, unit: ParsedUnit, scope: Node, region_start: int, region_end: int
) -> ScopeSnapshot:
    """Partition the local variables of ``scope`` around ``[region_start, region_end)``."""
    refs = [classify(o, region_start, region_end) for o in _scoped_occurrences(model, unit, scope)]
    declarations = {r.identity: r.offset for r in refs if r.is_declaration}
    uses = [r for r in refs if not r.is_declaration]
    types: dict[SymbolIdentity, TypeRef | None] = {}
    for identity in {r.identity for r in refs}:
        decl = model.declaration_of(identity)
        types[identity] = decl.type if decl is not None else None
    return ScopeSnapshot(
        declared_before=frozenset(i for i, off in declarations.items() if off < region_start),
        declared_in=frozenset(i for i, off in declarations.items() if region_start <= off < region_end),
        used_in=frozenset(r.identity for r in uses if r.position is Position.INSIDE),
        modified_in=frozenset(r.identity for r in uses if r.position is Position.INSIDE and r.is_write),
        used_after=frozenset(r.identity for r in uses if r.position is Position.AFTER),
        types=types,
        declared_at=declarations,
    )


def is_reassigned_after(
    model: SemanticModel,
    unit: ParsedUnit,
    identity: SymbolIdentity,
    reference_point: int,
    scope: Node | None,
) -> bool:
    """Any write to ``identity`` at or after ``reference_point`` inside ``scope``.

    Conservatively true when the bounding scope is unknown.
    """
    if scope is None:
        return True
    return any(
        o.identity == identity and o.offset >= reference_point and not o.is_declaration and is_write(o.node)
        for o in _scoped_occurrences(model, unit, scope)
    )


# ----------------------------------------------------------------------
# Exit analysis
# ----------------------------------------------------------------------


def return_statements(root: Node) -> list[Node]:
    """Return statements that leave the callable owning ``root``."""
    return [n for n in walk_named(root, prune=NESTED_BODY_TYPES) if n.type == "return_statement"]


def has_single_exit(body: Node) -> bool:
    return len(return_statements(body)) <= 1


def escaping_jumps(unit: ParsedUnit, statements: list[Node], start: int, end: int) -> list[Node]:
    """``return``/``break``/``continue``/``yield`` in the region that transfer control out of it."""
    jumps: list[Node] = []
    for stmt in statements:
        for node in walk_named(stmt, prune=NESTED_BODY_TYPES):
            if node.type in ("return_statement", "yield_statement"):
                jumps.append(node)
            elif node.type in ("break_statement", "continue_statement"):
                target = _jump_target(unit, node)
                if target is None or not (start <= unit.start(target) and unit.end(target) <= end):
                    jumps.append(node)
    return jumps


def _jump_target(unit: ParsedUnit, node: Node) -> Node | None:
    """Statement a ``break``/``continue`` leaves: its labeled statement, else the nearest loop or switch."""
    label = first_child_of_type(node, "identifier")
    wanted = LOOP_TYPES if node.type == "continue_statement" else LOOP_TYPES | {"switch_block"}
    current = node.parent
    while current is not None:
        if current.type in NESTED_BODY_TYPES or current.type in SCOPE_TYPES:
            return None
        if label is not None:
            if current.type == "labeled_statement":
                own = first_child_of_type(current, "identifier")
                if own is not None and unit.node_text(own) == unit.node_text(label):
                    return current
        elif current.type in wanted:
            return current
        current = current.parent
    return None
