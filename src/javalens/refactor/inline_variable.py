"""Inline a local variable: replace every read with its initializer and drop the declaration."""

from __future__ import annotations

from javalens.config.models import RefactorConfig
from javalens.core.errors import InvalidOperationError
from javalens.core.logging import get_logger
from javalens.refactor.edits import EditAggregator, EditPlan, TextEdit
from javalens.refactor.flow import bounding_scope, is_reassigned_after, is_write
from javalens.refactor.identity import resolve_at
from javalens.semantic.model import SemanticModel
from javalens.semantic.parsing import Node, ParsedUnit, children_of_type, is_same_node, walk_named
from javalens.semantic.symbols import SymbolKind

log = get_logger(__name__)

# Initializers that bind tighter than any operator they can be substituted into
ATOMIC_EXPRESSIONS = frozenset(
    {
        "identifier",
        "this",
        "field_access",
        "array_access",
        "method_invocation",
        "parenthesized_expression",
        "object_creation_expression",
        "class_literal",
        "string_literal",
        "text_block",
        "character_literal",
        "decimal_integer_literal",
        "hex_integer_literal",
        "octal_integer_literal",
        "binary_integer_literal",
        "decimal_floating_point_literal",
        "hex_floating_point_literal",
        "true",
        "false",
        "null_literal",
    }
)

# Positions where any expression can stand without parentheses
_OPEN_CONTEXTS = frozenset(
    {
        "argument_list",
        "expression_statement",
        "return_statement",
        "parenthesized_expression",
        "array_initializer",
        "variable_declarator",
        "element_value_pair",
        "yield_statement",
        "throw_statement",
    }
)

_SIDE_EFFECT_TYPES = frozenset(
    {"method_invocation", "object_creation_expression", "assignment_expression", "update_expression"}
)


def needs_parentheses(initializer: Node, usage: Node) -> bool:
    if initializer.type in ATOMIC_EXPRESSIONS:
        return False
    parent = usage.parent
    if parent is None:
        return True
    if parent.type in _OPEN_CONTEXTS:
        return False
    if parent.type == "assignment_expression":
        return not is_same_node(parent.child_by_field_name("right"), usage)
    return True


def _deletion_range(unit: ParsedUnit, node: Node) -> tuple[int, int]:
    """Span of ``node`` widened to whole lines when nothing else shares them."""
    start, end = unit.start(node), unit.end(node)
    text = unit.text
    line_start = text.rfind("\n", 0, start) + 1
    if text[line_start:start].strip():
        return start, end
    line_end = text.find("\n", end)
    line_end = len(text) if line_end == -1 else line_end
    if text[end:line_end].strip():
        return start, end
    return line_start, min(line_end + 1, len(text))


class InlineVariableEngine:
    def __init__(self, model: SemanticModel, config: RefactorConfig | None = None) -> None:
        self.model = model
        self.config = config or RefactorConfig()

    def _reject(self, reason: str, **details: object) -> InvalidOperationError:
        log.info("inline_variable_rejected", reason=reason)
        return InvalidOperationError.precondition(reason, **details)

    def plan(self, path: str, line: int, column: int) -> EditPlan:
        symbol = resolve_at(self.model, path, line, column)
        identity = symbol.identity
        if identity.kind is SymbolKind.FIELD:
            raise self._reject("Can only inline local variables, not fields", name=identity.name)
        if identity.kind is SymbolKind.PARAMETER:
            raise self._reject("Parameters have no single initializer and cannot be inlined", name=identity.name)
        if identity.kind is not SymbolKind.LOCAL or symbol.declaration is None:
            raise self._reject(f"'{identity.name}' is not a local variable", kind=identity.kind.value)

        declarator = symbol.declaration.node
        if declarator.type != "variable_declarator" or declarator.parent.type != "local_variable_declaration":
            raise self._reject(f"'{identity.name}' is not declared by a local variable declaration")
        unit = self.model.unit(symbol.declaration.path)
        value = declarator.child_by_field_name("value")
        if value is None:
            raise self._reject(f"Variable '{identity.name}' has no initializer")

        usages = [o for o in self.model.find_all_references(identity) if not o.is_declaration]
        if not usages:
            raise self._reject(f"Variable '{identity.name}' is never used")
        if any(is_write(o.node) for o in usages) or is_reassigned_after(
            self.model, unit, identity, unit.end(value), bounding_scope(declarator)
        ):
            raise self._reject(f"Variable '{identity.name}' is reassigned after its initialization")

        statement = declarator.parent
        initializer = unit.node_text(value)
        if value.type == "array_initializer":
            type_node = statement.child_by_field_name("type")
            dims = children_of_type(declarator, "dimensions")
            array_type = unit.node_text(type_node) + (unit.node_text(dims[0]) if dims else "")
            initializer = f"new {array_type} {initializer}"

        aggregator = EditAggregator("inline_variable")
        for occurrence in usages:
            text = initializer
            if value.type != "array_initializer" and needs_parentheses(value, occurrence.node):
                text = f"({initializer})"
            aggregator.add(TextEdit.replace(unit, occurrence.offset, occurrence.end_offset, text))

        declarators = children_of_type(statement, "variable_declarator")
        if len(declarators) == 1:
            start, end = _deletion_range(unit, statement)
            aggregator.add(TextEdit.delete(unit, start, end))
        else:
            index = next(i for i, d in enumerate(declarators) if is_same_node(d, declarator))
            if index + 1 < len(declarators):
                start, end = unit.start(declarator), unit.start(declarators[index + 1])
            else:
                start, end = unit.end(declarators[index - 1]), unit.end(declarator)
            aggregator.add(
                TextEdit.delete(
                    unit,
                    start,
                    end,
                    note="Only this declarator was removed; the other variables of the declaration remain",
                )
            )

        if len(usages) > 1 and any(n.type in _SIDE_EFFECT_TYPES for n in walk_named(value)):
            aggregator.warn(
                f"The initializer of '{identity.name}' may have side effects and is now evaluated "
                f"{len(usages)} times"
            )

        plan = aggregator.build(
            variable_name=identity.name,
            initializer=initializer,
            occurrences_replaced=len(usages),
        )
        log.info("inline_variable_planned", path=unit.path, name=identity.name, usages=len(usages))
        return plan
