"""Convert an anonymous class instantiation into a lambda expression.

Only anonymous classes implementing a functional interface (exactly one
abstract method once defaults, statics and ``java.lang.Object`` methods are
discounted) and declaring exactly that one method qualify. Bodies that use
an unqualified ``this`` or ``super`` are rejected, since both change
meaning inside a lambda.
"""

from __future__ import annotations

from dataclasses import dataclass

from javalens.config.constants import FUNCTIONAL_INTERFACES, OBJECT_METHODS
from javalens.config.models import RefactorConfig
from javalens.core.errors import InvalidOperationError
from javalens.core.formatting import indent_lines
from javalens.core.logging import get_logger
from javalens.refactor.edits import EditAggregator, EditPlan, TextEdit
from javalens.refactor.flow import bounding_scope
from javalens.refactor.naming import simple_type_name
from javalens.semantic.model import SemanticModel
from javalens.semantic.parsing import (
    Node,
    ParsedUnit,
    ancestors,
    first_child_of_type,
    is_same_node,
    walk_named,
)
from javalens.semantic.symbols import MethodInfo, SymbolKind, erase

log = get_logger(__name__)

_COMMENTS = ("line_comment", "block_comment")


@dataclass(frozen=True)
class AbstractMethod:
    """The single abstract method a lambda implements."""

    interface: str
    name: str
    arity: int


def _is_object_method(method: MethodInfo) -> bool:
    if (method.name, method.arity) not in OBJECT_METHODS:
        return False
    return method.name != "equals" or erase(method.param_types[0]) == "Object"


def single_abstract_method(model: SemanticModel, qname: str) -> AbstractMethod:
    """Walk declared, then inherited, interface methods of ``qname``.

    Raises ``InvalidOperationError`` unless exactly one abstract signature remains.
    """
    root = model.type_info(qname)
    if root is None or not root.is_interface:
        raise InvalidOperationError.precondition(
            f"'{qname}' is not an interface; only functional interfaces can be implemented by a lambda"
        )
    abstract: dict[str, MethodInfo] = {}
    provided: set[str] = set()
    seen: set[str] = set()
    queue = [root]
    while queue:
        info = queue.pop(0)
        if info.qname in seen:
            continue
        seen.add(info.qname)
        if len(info.supertypes) < len(info.supertype_texts):
            raise InvalidOperationError.precondition(
                f"Cannot verify that '{root.name}' is a functional interface: "
                f"{info.name} extends types declared outside the project"
            )
        for method in info.methods:
            signature = method.erased_signature
            if method.is_static or "private" in method.modifiers or _is_object_method(method):
                continue
            if method.has_body:
                provided.add(signature)
            elif signature not in provided:
                abstract.setdefault(signature, method)
        queue.extend(model.supertypes(info.qname))
    if len(abstract) != 1:
        raise InvalidOperationError.precondition(
            f"'{root.name}' is not a functional interface - must have exactly one abstract method",
            abstract_methods=sorted(abstract),
        )
    method = next(iter(abstract.values()))
    return AbstractMethod(interface=root.name, name=method.name, arity=method.arity)


def find_anonymous_creation(unit: ParsedUnit, offset: int) -> Node | None:
    node = unit.node_at(offset)
    if node is None:
        return None
    for candidate in (node, *ancestors(node)):
        if candidate.type == "object_creation_expression" and first_child_of_type(candidate, "class_body"):
            return candidate
    return None


class AnonymousToClosureEngine:
    def __init__(self, model: SemanticModel, config: RefactorConfig | None = None) -> None:
        self.model = model
        self.config = config or RefactorConfig()

    def plan(self, path: str, line: int, column: int) -> EditPlan:
        unit = self.model.unit(path)
        creation = find_anonymous_creation(unit, unit.offset_of(line, column))
        if creation is None:
            raise InvalidOperationError.invalid_position(
                line, column, "No anonymous class found at position. Position cursor on 'new' keyword."
            )
        body = first_child_of_type(creation, "class_body")
        type_text = unit.node_text(creation.child_by_field_name("type"))
        sam = self._target_method(unit, body, type_text)

        members = [c for c in body.named_children if c.type not in _COMMENTS]
        methods = [m for m in members if m.type == "method_declaration"]
        if len(methods) > 1:
            raise InvalidOperationError.precondition("Anonymous class has multiple methods, cannot convert to lambda")
        if not methods:
            raise InvalidOperationError.precondition("Anonymous class has no method implementation")
        if len(members) > 1:
            raise InvalidOperationError.precondition(
                "Anonymous class declares fields, initializers or nested types besides its method"
            )
        method = methods[0]
        method_name = unit.node_text(method.child_by_field_name("name"))
        params = [
            unit.node_text(p.child_by_field_name("name"))
            for p in method.child_by_field_name("parameters").named_children
            if p.child_by_field_name("name") is not None
        ]
        if method_name != sam.name or len(params) != sam.arity:
            raise InvalidOperationError.precondition(
                f"Anonymous class method '{method_name}' does not implement {sam.interface}.{sam.name}"
            )
        method_body = method.child_by_field_name("body")
        self._check_receiver(method_body)

        indent = unit.line_indent(unit.start(creation))
        lambda_text = f"{self._parameter_list(params)} -> {self._lambda_body(unit, method_body, indent)}"

        aggregator = EditAggregator("convert_anonymous_to_lambda")
        aggregator.add(TextEdit.replace(unit, unit.start(creation), unit.end(creation), lambda_text))
        clashes = self._clashing_names(unit, creation, method_body, params)
        if clashes:
            aggregator.warn(
                f"Lambda variables {', '.join(clashes)} may clash with variables of the enclosing scope; "
                "lambdas cannot shadow local variables"
            )

        plan = aggregator.build(interface_type=type_text, method_name=sam.name, lambda_expression=lambda_text)
        log.info("anonymous_to_lambda_planned", path=unit.path, interface=type_text, method=sam.name)
        return plan

    def _target_method(self, unit: ParsedUnit, body: Node, type_text: str) -> AbstractMethod:
        anonymous = self.model.enclosing_type(unit.path, body.children[0])
        if anonymous is not None and anonymous.supertypes:
            return single_abstract_method(self.model, anonymous.supertypes[0])
        simple = simple_type_name(type_text)
        if simple in FUNCTIONAL_INTERFACES:
            name, arity = FUNCTIONAL_INTERFACES[simple]
            return AbstractMethod(interface=simple, name=name, arity=arity)
        raise InvalidOperationError.precondition(
            f"Cannot verify that '{type_text}' is a functional interface: it is declared outside the project"
        )

    @staticmethod
    def _check_receiver(method_body: Node | None) -> None:
        if method_body is None:
            return
        for node in walk_named(method_body, prune={"class_body"}):
            if node.type not in ("this", "super"):
                continue
            parent = node.parent
            # Outer.this keeps its meaning
            if parent is not None and parent.type == "field_access":
                if is_same_node(parent.child_by_field_name("field"), node):
                    continue
            raise InvalidOperationError.precondition(
                f"Method uses '{node.type}' keyword which has different semantics in lambda. Manual review required."
            )

    @staticmethod
    def _parameter_list(params: list[str]) -> str:
        if len(params) == 1:
            return params[0]
        return f"({', '.join(params)})"

    def _lambda_body(self, unit: ParsedUnit, method_body: Node | None, indent: str) -> str:
        statements = [s for s in method_body.named_children if s.type not in _COMMENTS] if method_body else []

        def text(node: Node) -> str:
            return unit.dedented(unit.start(node), unit.end(node)).strip()

        if not statements:
            return "{}"
        if len(statements) == 1:
            stmt = statements[0]
            if stmt.type == "return_statement":
                return text(stmt.named_children[0]) if stmt.named_children else "{}"
            if stmt.type == "expression_statement":
                return text(stmt.named_children[0])
            if "\n" not in text(stmt):
                return f"{{ {text(stmt)} }}"
        inner = "\n".join(text(s) for s in statements)
        return "{\n" + indent_lines(inner, indent + self.config.indent_unit) + "\n" + indent + "}"

    def _clashing_names(
        self, unit: ParsedUnit, creation: Node, method_body: Node | None, params: list[str]
    ) -> list[str]:
        scope = bounding_scope(creation)
        if scope is None:
            return []
        scope_start, creation_start, creation_end = unit.start(scope), unit.start(creation), unit.end(creation)
        outer: set[str] = set()
        inner: set[str] = set(params)
        for occurrence in self.model.occurrences_in(unit.path):
            if not occurrence.is_declaration:
                continue
            if occurrence.identity.kind not in (SymbolKind.LOCAL, SymbolKind.PARAMETER):
                continue
            if scope_start <= occurrence.offset < creation_start:
                outer.add(occurrence.identity.name)
            elif method_body is not None and unit.start(method_body) <= occurrence.offset < creation_end:
                inner.add(occurrence.identity.name)
        return sorted(outer & inner)
