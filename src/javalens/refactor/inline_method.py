"""Inline one call of a method with the method's body.

Parameter substitution is textual: every whole-word occurrence of a
parameter name in the body is replaced by the argument text. This is not
capture-avoiding. A parameter name that also appears as a field, a string
literal, or a local introduced by an argument is substituted too, so the
inlined code must be reviewed when names collide.

Bodies ending in a ``return`` after other statements cannot be expressed
as a single expression; the preceding statements are emitted followed by
a ``/* return: ... */`` comment that needs manual completion.
"""

from __future__ import annotations

import re

from javalens.config.models import RefactorConfig
from javalens.core.errors import InvalidOperationError
from javalens.core.formatting import indent_lines
from javalens.core.logging import get_logger
from javalens.refactor.edits import EditAggregator, EditPlan, TextEdit
from javalens.refactor.flow import return_statements
from javalens.refactor.inline_variable import needs_parentheses
from javalens.semantic.model import SemanticModel
from javalens.semantic.parsing import Node, ParsedUnit, ancestors
from javalens.semantic.symbols import SymbolKind

log = get_logger(__name__)

REVIEW_MARKER = "/* Inlined from method - review needed */"


def substitute_parameters(code: str, substitutions: dict[str, str]) -> str:
    """Whole-word replacement of parameter names in one pass."""
    if not substitutions:
        return code
    pattern = re.compile(r"\b(" + "|".join(re.escape(name) for name in substitutions) + r")\b")
    return pattern.sub(lambda m: substitutions[m.group(1)], code)


def find_invocation(unit: ParsedUnit, offset: int) -> Node | None:
    node = unit.identifier_at(offset) or unit.node_at(offset)
    if node is None:
        return None
    if node.type == "method_invocation":
        return node
    return next((a for a in ancestors(node) if a.type == "method_invocation"), None)


class InlineMethodEngine:
    def __init__(self, model: SemanticModel, config: RefactorConfig | None = None) -> None:
        self.model = model
        self.config = config or RefactorConfig()

    def plan(self, path: str, line: int, column: int) -> EditPlan:
        unit = self.model.unit(path)
        invocation = find_invocation(unit, unit.offset_of(line, column))
        if invocation is None:
            raise InvalidOperationError.invalid_position(line, column, "No method call found at position")
        identity = self.model.identity_of(unit.path, invocation.child_by_field_name("name"))
        method = self.model.method_info(identity) if identity is not None else None
        if method is None or identity.kind is not SymbolKind.METHOD:
            raise InvalidOperationError.precondition(
                "Cannot resolve the called method (it may be declared outside the project)"
            )
        body = method.node.child_by_field_name("body")
        if body is None:
            raise InvalidOperationError.precondition("Method has no body (abstract or native method)")

        args = invocation.child_by_field_name("arguments").named_children
        if len(args) != method.arity:
            raise InvalidOperationError.precondition(
                f"Parameter/argument count mismatch: {method.name} declares {method.arity}, call passes {len(args)}"
            )
        substitutions = {name: unit.node_text(arg) for name, arg in zip(method.param_names, args, strict=True)}

        parent = invocation.parent
        in_statement = parent is not None and parent.type == "expression_statement"
        target = parent if in_statement else invocation
        indent = unit.line_indent(unit.start(target))

        source = self.model.unit(method.path)
        statements = [s for s in body.named_children if s.type not in ("line_comment", "block_comment")]
        code, is_expression = self._inlined_code(source, statements, substitutions, invocation, indent)
        if in_statement and is_expression:
            code += ";"

        aggregator = EditAggregator("inline_method")
        aggregator.add(TextEdit.replace(unit, unit.start(target), unit.end(target), code))
        if len(statements) > 1:
            aggregator.warn("Method has multiple statements - review inlined code carefully")
        if len(return_statements(body)) > 1:
            aggregator.warn("Method has multiple return statements - review needed")
        receiver = invocation.child_by_field_name("object")
        if receiver is not None and unit.node_text(receiver) != "this":
            aggregator.warn(
                f"Call receiver '{unit.node_text(receiver)}' is dropped; member references in the inlined "
                "body still refer to the current instance"
            )

        plan = aggregator.build(
            method_name=method.name,
            declaring_type=method.declaring_type,
            parameter_count=method.arity,
            is_expression_context=not in_statement,
            inlined_code=code,
        )
        log.info(
            "inline_method_planned",
            path=unit.path,
            method=method.name,
            statements=len(statements),
            expression_context=not in_statement,
        )
        return plan

    def _inlined_code(
        self,
        source: ParsedUnit,
        statements: list[Node],
        substitutions: dict[str, str],
        invocation: Node,
        indent: str,
    ) -> tuple[str, bool]:
        """Replacement text and whether it is a bare expression."""
        if not statements:
            return "/* empty method body */", False

        def text(node: Node) -> str:
            dedented = source.dedented(source.start(node), source.end(node)).strip()
            return substitute_parameters(dedented, substitutions)

        if len(statements) == 1:
            stmt = statements[0]
            if stmt.type == "return_statement":
                expr = stmt.named_children[0] if stmt.named_children else None
                if expr is None:
                    return "/* void return */", False
                code = text(expr)
                if needs_parentheses(expr, invocation):
                    code = f"({code})"
                return code, True
            if stmt.type == "expression_statement":
                return text(stmt.named_children[0]), True

        last = statements[-1]
        if last.type != "return_statement":
            inner = "\n".join(text(s) for s in statements)
            return "{\n" + indent_lines(inner, indent + self.config.indent_unit) + "\n" + indent + "}", False

        lines = [REVIEW_MARKER, *(text(s) for s in statements[:-1])]
        if last.named_children:
            lines.append(f"/* return: {text(last.named_children[0])} */")
        return ("\n" + indent).join("\n".join(lines).splitlines()), False
