"""Extract a run of statements into a new private method.

The selection must cover whole statements of one block. Variables declared
before the selection and read inside it become parameters; a variable
written (or declared) inside the selection and read afterwards becomes the
return value. Selections containing ``return``, ``yield``, or a
``break``/``continue`` that leaves the selection are rejected: the
extracted method could not reproduce that control transfer.
"""

from __future__ import annotations

from javalens.config.models import RefactorConfig
from javalens.core.errors import InvalidOperationError
from javalens.core.formatting import indent_lines
from javalens.core.logging import get_logger
from javalens.refactor.edits import EditAggregator, EditPlan, TextEdit
from javalens.refactor.flow import ScopeSnapshot, classify_region, escaping_jumps
from javalens.refactor.identity import resolve_range
from javalens.refactor.naming import validate_identifier
from javalens.semantic.model import SemanticModel
from javalens.semantic.parsing import CALLABLE_TYPES, Node, ParsedUnit, enclosing, modifiers_of
from javalens.semantic.symbols import SymbolIdentity

log = get_logger(__name__)

_STATEMENT_CONTAINERS = frozenset({"block", "constructor_body", "switch_block_statement_group"})
_NOT_STATEMENTS = frozenset({"switch_label", "line_comment", "block_comment"})


def selected_statements(unit: ParsedUnit, start: int, end: int) -> list[Node]:
    """Statements of one block exactly covered by ``[start, end)``."""
    node = unit.covered_node(start, end)
    while node is not None:
        if node.type in _STATEMENT_CONTAINERS:
            stmts = [c for c in node.named_children if unit.start(c) < end and unit.end(c) > start]
            if (
                stmts
                and unit.start(stmts[0]) == start
                and unit.end(stmts[-1]) == end
                and any(s.type not in _NOT_STATEMENTS for s in stmts)
                and all(s.type != "switch_label" for s in stmts)
            ):
                return stmts
        node = node.parent
    raise InvalidOperationError.precondition("Selection must cover one or more complete statements")


class ExtractMethodEngine:
    def __init__(self, model: SemanticModel, config: RefactorConfig | None = None) -> None:
        self.model = model
        self.config = config or RefactorConfig()

    def plan(
        self,
        path: str,
        start_line: int,
        start_column: int,
        end_line: int,
        end_column: int,
        method_name: str,
    ) -> EditPlan:
        validate_identifier(method_name, param="method_name")
        unit = self.model.unit(path)
        start, end = resolve_range(unit, start_line, start_column, end_line, end_column)
        statements = selected_statements(unit, start, end)

        callable_node = enclosing(statements[0], CALLABLE_TYPES)
        if callable_node is None:
            raise InvalidOperationError.precondition("Selection must be inside a method or constructor")
        owner = self.model.enclosing_type(unit.path, callable_node)
        if owner is None:
            raise InvalidOperationError.precondition("Could not determine the enclosing type")

        jumps = escaping_jumps(unit, statements, start, end)
        if jumps:
            kinds = sorted({j.type.removesuffix("_statement") for j in jumps})
            log.info("extract_method_rejected", path=unit.path, reason="escaping_jump", jumps=kinds)
            raise InvalidOperationError.precondition(
                f"Selection contains {', '.join(kinds)} that would leave the extracted method",
                jumps=kinds,
            )

        snapshot = classify_region(self.model, unit, callable_node, start, end)
        params = snapshot.parameters
        candidates = snapshot.return_candidates
        if any(m.arity == len(params) for m in owner.methods_named(method_name)):
            raise InvalidOperationError.precondition(
                f"{owner.name} already declares {method_name} with {len(params)} parameter(s)"
            )

        aggregator = EditAggregator("extract_method")
        returned = candidates[0] if candidates else None
        if len(candidates) > 1:
            aggregator.warn(
                f"Variables {', '.join(c.name for c in candidates)} are modified in the selection and used "
                f"afterwards; only '{returned.name}' is returned, so the result is semantically incomplete"
            )
        for identity in [*params, *([returned] if returned else [])]:
            if snapshot.types.get(identity) is None:
                aggregator.warn(f"Type of '{identity.name}' could not be determined; declared as Object")

        return_type = snapshot.type_text(returned) if returned is not None else "void"
        is_static = "static" in modifiers_of(callable_node)
        method_text = self._method_text(
            unit, callable_node, start, end, method_name, snapshot, returned, return_type, is_static
        )
        aggregator.add(TextEdit.insert(unit, unit.end(callable_node), method_text))
        aggregator.add(
            TextEdit.replace(unit, start, end, self._call_text(method_name, snapshot, returned, return_type))
        )

        plan = aggregator.build(
            method_name=method_name,
            parameters=[{"name": p.name, "type": snapshot.type_text(p)} for p in params],
            return_type=return_type,
            return_variable=returned.name if returned is not None else None,
            is_static=is_static,
            statements_extracted=len(statements),
        )
        log.info(
            "extract_method_planned",
            path=unit.path,
            method=method_name,
            params=len(params),
            returns=returned.name if returned is not None else None,
        )
        return plan

    def _method_text(
        self,
        unit: ParsedUnit,
        callable_node: Node,
        start: int,
        end: int,
        name: str,
        snapshot: ScopeSnapshot,
        returned: SymbolIdentity | None,
        return_type: str,
        is_static: bool,
    ) -> str:
        indent = unit.line_indent(unit.start(callable_node))
        body_indent = indent + self.config.indent_unit
        body = indent_lines(unit.dedented(start, end), body_indent)
        if returned is not None:
            body += f"\n{body_indent}return {returned.name};"

        params = ", ".join(f"{snapshot.type_text(p)} {p.name}" for p in snapshot.parameters)
        modifiers = "private static" if is_static else "private"
        type_params = next((c for c in callable_node.named_children if c.type == "type_parameters"), None)
        if type_params is not None:
            modifiers += f" {unit.node_text(type_params)}"
        throws = next((c for c in callable_node.named_children if c.type == "throws"), None)
        throws_text = f" {unit.node_text(throws)}" if throws is not None else ""
        header = f"{indent}{modifiers} {return_type} {name}({params}){throws_text} {{"
        return f"\n\n{header}\n{body}\n{indent}}}"

    @staticmethod
    def _call_text(
        name: str, snapshot: ScopeSnapshot, returned: SymbolIdentity | None, return_type: str
    ) -> str:
        call = f"{name}({', '.join(p.name for p in snapshot.parameters)});"
        if returned is None:
            return call
        if returned in snapshot.declared_in:
            return f"{return_type} {returned.name} = {call}"
        return f"{returned.name} = {call}"
