"""Extract an expression into a local variable or a class constant."""

from __future__ import annotations

from javalens.config.models import RefactorConfig
from javalens.core.errors import InvalidOperationError
from javalens.core.logging import get_logger
from javalens.refactor.edits import EditAggregator, EditPlan, TextEdit
from javalens.refactor.flow import LOOP_TYPES
from javalens.refactor.identity import resolve_range
from javalens.refactor.naming import suggest_variable_name, validate_constant_name, validate_identifier
from javalens.semantic.model import SemanticModel
from javalens.semantic.parsing import (
    Node,
    ParsedUnit,
    ancestors,
    children_of_type,
    is_same_node,
    modifiers_of,
    walk_named,
)
from javalens.semantic.symbols import SymbolKind, TypeInfo

log = get_logger(__name__)

EXPRESSION_TYPES = frozenset(
    {
        "binary_expression",
        "unary_expression",
        "ternary_expression",
        "method_invocation",
        "object_creation_expression",
        "array_creation_expression",
        "field_access",
        "array_access",
        "cast_expression",
        "parenthesized_expression",
        "instanceof_expression",
        "identifier",
        "this",
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
        "switch_expression",
    }
)

_BLOCK_TYPES = frozenset({"block", "constructor_body", "switch_block_statement_group"})


def selected_expression(unit: ParsedUnit, start: int, end: int) -> Node:
    """The expression spanning exactly ``[start, end)``."""
    node = unit.covered_node(start, end)
    while node is not None and node.parent is not None and (unit.start(node), unit.end(node)) == (
        unit.start(node.parent),
        unit.end(node.parent),
    ):
        if node.type in EXPRESSION_TYPES:
            break
        node = node.parent
    if node is None or (unit.start(node), unit.end(node)) != (start, end) or node.type not in EXPRESSION_TYPES:
        raise InvalidOperationError.precondition("Selection must cover a complete expression")
    parent = node.parent
    if node.type == "identifier" and parent is not None:
        # Names of declarations and invoked methods are not values
        if any(is_same_node(parent.child_by_field_name(f), node) for f in ("name", "field")):
            raise InvalidOperationError.precondition("Selection must cover a complete expression")
    if parent is not None and parent.type == "assignment_expression":
        if is_same_node(parent.child_by_field_name("left"), node):
            raise InvalidOperationError.precondition("Cannot extract the target of an assignment")
    if parent is not None and parent.type == "update_expression":
        raise InvalidOperationError.precondition("Cannot extract the operand of an increment or decrement")
    return node


def containing_statement(node: Node) -> Node | None:
    """Statement directly inside a block that contains ``node``."""
    for parent in ancestors(node):
        if parent.type in ("class_body", "lambda_expression"):
            return None
        if parent.parent is not None and parent.parent.type in _BLOCK_TYPES:
            return parent
    return None


class ExtractVariableEngine:
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
        variable_name: str | None = None,
    ) -> EditPlan:
        if variable_name is not None:
            validate_identifier(variable_name, param="variable_name")
        unit = self.model.unit(path)
        start, end = resolve_range(unit, start_line, start_column, end_line, end_column)
        expression = selected_expression(unit, start, end)
        statement = containing_statement(expression)
        if statement is None:
            raise InvalidOperationError.precondition(
                "Expression must be inside a statement of a method body (outside lambdas)"
            )
        stmt_start = unit.start(statement)
        self._check_scope(unit, start, end, stmt_start)

        type_ref = self.model.type_of(unit.path, expression)
        if expression.type == "null_literal":
            type_text = "Object"
        else:
            type_text = type_ref.text if type_ref is not None else "var"
        name = variable_name or suggest_variable_name(unit, expression, type_ref)

        indent = unit.line_indent(stmt_start)
        expression_text = unit.text[start:end]
        declaration = f"{type_text} {name} = {expression_text};\n{indent}"

        aggregator = EditAggregator("extract_variable")
        if start == stmt_start:
            aggregator.add(TextEdit.replace(unit, start, end, declaration + name))
        else:
            aggregator.add(TextEdit.insert(unit, stmt_start, declaration))
            aggregator.add(TextEdit.replace(unit, start, end, name))
        if statement.type in LOOP_TYPES:
            aggregator.warn("The expression is now evaluated once before the loop instead of on every iteration")

        plan = aggregator.build(variable_name=name, variable_type=type_text, expression=expression_text)
        log.info("extract_variable_planned", path=unit.path, name=name, type=type_text)
        return plan

    def _check_scope(self, unit: ParsedUnit, start: int, end: int, stmt_start: int) -> None:
        for occurrence in self.model.occurrences_in(unit.path):
            if not start <= occurrence.offset < end:
                continue
            if occurrence.identity.kind not in (SymbolKind.LOCAL, SymbolKind.PARAMETER):
                continue
            decl = self.model.declaration_of(occurrence.identity)
            if decl is not None and decl.path == unit.path and decl.name_offset >= stmt_start:
                raise InvalidOperationError.precondition(
                    f"Expression uses '{occurrence.identity.name}', which is declared inside the enclosing statement"
                )


class ExtractConstantEngine:
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
        constant_name: str,
    ) -> EditPlan:
        validate_constant_name(constant_name)
        unit = self.model.unit(path)
        start, end = resolve_range(unit, start_line, start_column, end_line, end_column)
        expression = selected_expression(unit, start, end)
        owner = self.model.enclosing_type(unit.path, expression)
        if owner is None or owner.is_anonymous or owner.is_local:
            raise InvalidOperationError.precondition("Constants can only be added to named member or top-level types")
        if constant_name in owner.fields:
            raise InvalidOperationError.precondition(f"{owner.name} already declares a field named {constant_name}")
        self._check_static(unit, expression, start, end)

        type_ref = self.model.type_of(unit.path, expression)
        type_text = type_ref.text if type_ref is not None else "Object"
        expression_text = unit.text[start:end]
        modifiers = "static final" if owner.is_interface else "private static final"
        declaration = f"{modifiers} {type_text} {constant_name} = {expression_text};"

        aggregator = EditAggregator("extract_constant")
        aggregator.add(self._declaration_edit(unit, owner, expression, declaration))
        aggregator.add(TextEdit.replace(unit, start, end, constant_name))
        plan = aggregator.build(
            constant_name=constant_name,
            constant_type=type_text,
            declaration=declaration,
            declaring_type=owner.qname,
        )
        log.info("extract_constant_planned", path=unit.path, name=constant_name, type=owner.qname)
        return plan

    def _check_static(self, unit: ParsedUnit, expression: Node, start: int, end: int) -> None:
        for node in walk_named(expression):
            if node.type in ("this", "super"):
                raise InvalidOperationError.precondition("Constant expressions cannot reference the current instance")
        for occurrence in self.model.occurrences_in(unit.path):
            if not start <= occurrence.offset < end or occurrence.is_declaration:
                continue
            identity = occurrence.identity
            if identity.kind in (SymbolKind.LOCAL, SymbolKind.PARAMETER):
                raise InvalidOperationError.precondition(
                    f"Constant expressions cannot use the local variable or parameter '{identity.name}'"
                )
            if identity.kind is SymbolKind.FIELD:
                decl = self.model.declaration_of(identity)
                field_decl = decl.node.parent if decl is not None else None
                if field_decl is not None and field_decl.type == "field_declaration":
                    if "static" not in modifiers_of(field_decl):
                        raise InvalidOperationError.precondition(
                            f"Constant expressions cannot use the instance field '{identity.name}'"
                        )
            if identity.kind is SymbolKind.METHOD:
                method = self.model.method_info(identity)
                if method is not None and not method.is_static:
                    raise InvalidOperationError.precondition(
                        f"Constant expressions cannot call the instance method '{identity.name}'"
                    )

    def _declaration_edit(self, unit: ParsedUnit, owner: TypeInfo, expression: Node, declaration: str) -> TextEdit:
        body = owner.node.child_by_field_name("body")
        member_indent = unit.line_indent(unit.start(owner.node)) + self.config.indent_unit
        members = body.named_children
        if owner.kind == "enum":
            extra = children_of_type(body, "enum_body_declarations")
            if not extra:
                constants = children_of_type(body, "enum_constant")
                anchor = unit.end(constants[-1]) if constants else unit.start(body) + 1
                while unit.text[anchor] == ",":
                    anchor += 1
                return TextEdit.insert(unit, anchor, f";\n{member_indent}{declaration}")
            members = extra[0].named_children

        last_constant = None
        for member in members:
            if member.type == "constant_declaration" or (
                member.type == "field_declaration" and {"static", "final"} <= modifiers_of(member)
            ):
                last_constant = member
        # A static initializer may not read a constant declared below it
        holder = next((m for m in members if unit.start(m) <= unit.start(expression) < unit.end(m)), None)
        if holder is not None and last_constant is not None and unit.start(holder) <= unit.start(last_constant):
            return TextEdit.insert(unit, unit.start(holder), f"{declaration}\n{member_indent}")

        if last_constant is not None:
            return TextEdit.insert(unit, unit.end(last_constant), f"\n{member_indent}{declaration}")
        if owner.kind == "enum":
            semicolon = children_of_type(body, "enum_body_declarations")[0].children[0]
            return TextEdit.insert(unit, unit.end(semicolon), f"\n{member_indent}{declaration}")
        return TextEdit.insert(unit, unit.start(body) + 1, f"\n{member_indent}{declaration}")
