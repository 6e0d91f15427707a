"""Pass 2: bind identifier occurrences to symbol identities.

Walks one parsed unit with a stack of lexical frames. Block-like frames
hold locals, parameters, local classes, and method type parameters; type
frames stand for the members (own and inherited) of the enclosing class
body. Name lookup goes innermost-out across both kinds, which reproduces
Java's "nearest enclosing declaration wins" rule, including anonymous and
local classes capturing outer locals.

Member access (``a.b``, ``a.m()``) resolves through the static type of the
receiver. Expression types come from :class:`ExpressionTyper`, which is
also used after binding by the extraction engines.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field

from javalens.core.logging import get_logger
from javalens.semantic.declarations import TypeTable, base_type_name, qname_of
from javalens.semantic.parsing import (
    CALLABLE_TYPES,
    TYPE_DECLARATION_TYPES,
    Node,
    ParsedUnit,
    children_of_type,
    first_child_of_type,
)
from javalens.semantic.symbols import (
    Declaration,
    MethodInfo,
    Occurrence,
    SymbolIdentity,
    SymbolKind,
    TypeInfo,
    TypeRef,
    erase,
)

log = get_logger(__name__)

_PRIMITIVE_TYPE_NODES = frozenset({"integral_type", "floating_point_type", "boolean_type", "void_type"})

_NUMERIC_RANK = {"byte": 1, "short": 2, "char": 2, "int": 3, "long": 4, "float": 5, "double": 6}
_RANK_NAME = {3: "int", 4: "long", 5: "float", 6: "double"}
_UNBOXED = {
    "Byte": "byte",
    "Short": "short",
    "Character": "char",
    "Integer": "int",
    "Long": "long",
    "Float": "float",
    "Double": "double",
    "Boolean": "boolean",
}
_BOOLEAN_OPERATORS = frozenset({"==", "!=", "<", ">", "<=", ">=", "&&", "||"})
_INTEGER_LITERALS = frozenset(
    {"decimal_integer_literal", "hex_integer_literal", "octal_integer_literal", "binary_integer_literal"}
)
_FLOAT_LITERALS = frozenset({"decimal_floating_point_literal", "hex_floating_point_literal"})


def _unbox(text: str) -> str:
    return _UNBOXED.get(text.rsplit(".", 1)[-1], text)


class ExpressionTyper:
    """Static types of expressions, as far as project source determines them.

    Returns ``None`` whenever the type depends on something outside the
    project (library return types, generic parameters, lambdas).
    """

    def __init__(
        self,
        unit: ParsedUnit,
        table: TypeTable,
        identity_of: Callable[[Node], SymbolIdentity | None],
        declarations: Mapping[SymbolIdentity, Declaration],
    ) -> None:
        self.unit = unit
        self.table = table
        self.identity_of = identity_of
        self.declarations = declarations

    def type_of(self, node: Node | None) -> TypeRef | None:
        if node is None:
            return None
        kind = node.type
        if kind in ("string_literal", "text_block", "string_template"):
            return TypeRef("String")
        if kind == "character_literal":
            return TypeRef("char")
        if kind in ("true", "false"):
            return TypeRef("boolean")
        if kind in _INTEGER_LITERALS:
            return TypeRef("long" if self.unit.node_text(node)[-1] in "lL" else "int")
        if kind in _FLOAT_LITERALS:
            return TypeRef("float" if self.unit.node_text(node)[-1] in "fF" else "double")
        if kind == "class_literal":
            return TypeRef("Class")
        if kind == "identifier":
            return self._identifier_type(node)
        if kind == "this":
            info = self.table.enclosing_type(self.unit.path, node)
            if info is None or info.is_anonymous:
                return None
            return TypeRef(info.name, info.qname)
        if kind == "field_access":
            fld = node.child_by_field_name("field")
            if fld is None:
                return None
            if fld.type == "this":
                return self.type_of(node.child_by_field_name("object"))
            obj_type = self.type_of(node.child_by_field_name("object"))
            if obj_type is not None and obj_type.is_array and self.unit.node_text(fld) == "length":
                return TypeRef("int")
            return self._identifier_type(fld)
        if kind == "method_invocation":
            identity = self.identity_of(node.child_by_field_name("name"))
            method = self.table.method_info(identity) if identity is not None else None
            if method is None or method.return_type is None:
                return None
            return TypeRef(method.return_type, method.return_qname)
        if kind == "object_creation_expression":
            return self.type_ref(node.child_by_field_name("type"))
        if kind == "cast_expression":
            return self.type_ref(node.child_by_field_name("type"))
        if kind == "parenthesized_expression":
            inner = node.named_children
            return self.type_of(inner[0]) if inner else None
        if kind == "ternary_expression":
            return self.type_of(node.child_by_field_name("consequence")) or self.type_of(
                node.child_by_field_name("alternative")
            )
        if kind == "binary_expression":
            return self._binary_type(node)
        if kind == "unary_expression":
            operator = node.child_by_field_name("operator")
            if operator is not None and operator.type == "!":
                return TypeRef("boolean")
            return self._promote(self.type_of(node.child_by_field_name("operand")), TypeRef("int"))
        if kind == "update_expression":
            return self.type_of(node.named_children[0]) if node.named_children else None
        if kind == "instanceof_expression":
            return TypeRef("boolean")
        if kind == "assignment_expression":
            return self.type_of(node.child_by_field_name("left"))
        if kind == "array_access":
            array_type = self.type_of(node.child_by_field_name("array"))
            return array_type.element() if array_type is not None else None
        if kind == "array_creation_expression":
            base = self.type_ref(node.child_by_field_name("type"))
            if base is None:
                return None
            dims = sum(
                self.unit.node_text(c).count("[")
                for c in node.named_children
                if c.type in ("dimensions_expr", "dimensions")
            )
            return TypeRef(base.text + "[]" * max(dims, 1), base.qname)
        return None

    def type_ref(self, type_node: Node | None) -> TypeRef | None:
        """TypeRef for a type syntax node already visited by the binder."""
        if type_node is None:
            return None
        text = self.unit.node_text(type_node)
        if text == "var":
            return None
        main = type_node
        while main.type in ("generic_type", "array_type", "annotated_type"):
            inner = main.child_by_field_name("element") if main.type == "array_type" else None
            if inner is None:
                candidates = [c for c in main.named_children if c.type not in ("annotation", "marker_annotation")]
                if not candidates:
                    break
                inner = candidates[0]
            main = inner
        if main.type == "scoped_type_identifier":
            pieces = children_of_type(main, "type_identifier")
            main = pieces[-1] if pieces else main
        identity = self.identity_of(main)
        qname = qname_of(identity) if identity is not None else None
        return TypeRef(text, qname)

    def _identifier_type(self, node: Node) -> TypeRef | None:
        identity = self.identity_of(node)
        if identity is None:
            return None
        if identity.kind is SymbolKind.TYPE:
            info = self.table.types.get(qname_of(identity) or "")
            return TypeRef(identity.name, info.qname if info is not None else None)
        decl = self.declarations.get(identity) or self.table.declarations.get(identity)
        return decl.type if decl is not None else None

    def _binary_type(self, node: Node) -> TypeRef | None:
        operator = node.child_by_field_name("operator")
        op = operator.type if operator is not None else ""
        if op in _BOOLEAN_OPERATORS:
            return TypeRef("boolean")
        left = self.type_of(node.child_by_field_name("left"))
        right = self.type_of(node.child_by_field_name("right"))
        if op == "+" and any(t is not None and t.text in ("String", "java.lang.String") for t in (left, right)):
            return TypeRef("String")
        if op in ("&", "|", "^") and left is not None and _unbox(left.text) == "boolean":
            return TypeRef("boolean")
        if op in ("<<", ">>", ">>>"):
            return self._promote(left, TypeRef("int"))
        return self._promote(left, right)

    @staticmethod
    def _promote(left: TypeRef | None, right: TypeRef | None) -> TypeRef | None:
        if left is None or right is None:
            return None
        ranks = [_NUMERIC_RANK.get(_unbox(t.text)) for t in (left, right)]
        if None in ranks:
            return None
        return TypeRef(_RANK_NAME[max(3, *ranks)])  # type: ignore[arg-type]


@dataclass
class _Frame:
    type_info: TypeInfo | None = None
    names: dict[str, SymbolIdentity] = field(default_factory=dict)
    local_types: dict[str, str] = field(default_factory=dict)
    type_params: dict[str, SymbolIdentity] = field(default_factory=dict)


@dataclass
class BindResult:
    occurrences: list[Occurrence]
    declarations: dict[SymbolIdentity, Declaration]
    bound: dict[int, SymbolIdentity]  # identifier start byte -> identity


class UnitBinder:
    """Binds every resolvable identifier of one unit. Use :meth:`bind` once."""

    def __init__(self, table: TypeTable, unit: ParsedUnit) -> None:
        self.table = table
        self.unit = unit
        self.path = unit.path
        self._frames: list[_Frame] = [_Frame()]
        self._switch_subjects: list[str | None] = []
        self._occurrences: list[Occurrence] = []
        self._declarations: dict[SymbolIdentity, Declaration] = {}
        self._bound: dict[int, SymbolIdentity] = {}
        self.typer = ExpressionTyper(unit, table, self.identity_of, self._declarations)
        self._handlers: dict[str, Callable[[Node], None]] = {
            "package_declaration": self._skip,
            "scoped_identifier": self._skip,
            "import_declaration": self._visit_import,
            "identifier": self._visit_identifier,
            "type_identifier": self._visit_type,
            "scoped_type_identifier": self._visit_type,
            "generic_type": self._visit_type,
            "array_type": self._visit_type,
            "field_access": self._visit_field_access,
            "method_invocation": self._visit_method_invocation,
            "method_reference": self._visit_method_reference,
            "object_creation_expression": self._visit_object_creation,
            "local_variable_declaration": self._visit_local_declaration,
            "block": self._visit_scoped,
            "constructor_body": self._visit_scoped,
            "switch_block": self._visit_scoped,
            "for_statement": self._visit_scoped,
            "enhanced_for_statement": self._visit_enhanced_for,
            "catch_clause": self._visit_catch,
            "try_with_resources_statement": self._visit_try_with_resources,
            "lambda_expression": self._visit_lambda,
            "instanceof_expression": self._visit_instanceof,
            "type_pattern": self._visit_pattern,
            "record_pattern_component": self._visit_pattern,
            "switch_expression": self._visit_switch,
            "switch_statement": self._visit_switch,
            "labeled_statement": self._visit_labeled,
            "break_statement": self._skip,
            "continue_statement": self._skip,
            "annotation": self._visit_annotation,
            "marker_annotation": self._visit_annotation,
            "element_value_pair": self._visit_element_value_pair,
            "annotation_type_element_declaration": self._visit_annotation_element,
        }
        for kind in TYPE_DECLARATION_TYPES:
            self._handlers[kind] = self._visit_type_declaration

    def bind(self) -> BindResult:
        self.visit(self.unit.root)
        self._occurrences.sort(key=lambda o: o.offset)
        log.debug("unit_bound", path=self.path, occurrences=len(self._occurrences))
        return BindResult(self._occurrences, self._declarations, self._bound)

    def identity_of(self, node: Node | None) -> SymbolIdentity | None:
        if node is None:
            return None
        return self._bound.get(node.start_byte)

    # ------------------------------------------------------------------
    # Recording and scopes
    # ------------------------------------------------------------------

    def _record(self, node: Node, identity: SymbolIdentity, *, declaration: bool = False) -> None:
        self._bound[node.start_byte] = identity
        self._occurrences.append(
            Occurrence(
                path=self.path,
                offset=self.unit.start(node),
                end_offset=self.unit.end(node),
                identity=identity,
                is_declaration=declaration,
                node=node,
            )
        )

    def _push(self, frame: _Frame | None = None) -> None:
        self._frames.append(frame or _Frame())

    def _pop(self) -> None:
        self._frames.pop()

    def _declare(self, name_node: Node, kind: SymbolKind, type_ref: TypeRef | None, decl_node: Node) -> None:
        name = self.unit.node_text(name_node)
        offset = self.unit.start(name_node)
        prefix = "param" if kind is SymbolKind.PARAMETER else "local"
        identity = SymbolIdentity(f"{prefix}:{self.path}@{offset}", name, kind)
        self._frames[-1].names[name] = identity
        self._declarations[identity] = Declaration(
            identity=identity,
            path=self.path,
            name_offset=offset,
            name_end=self.unit.end(name_node),
            node=decl_node,
            type=type_ref,
        )
        self._record(name_node, identity, declaration=True)

    def _current_type(self) -> TypeInfo | None:
        for frame in reversed(self._frames):
            if frame.type_info is not None:
                return frame.type_info
        return None

    def _lookup_variable(self, name: str) -> SymbolIdentity | None:
        for frame in reversed(self._frames):
            if frame.type_info is not None:
                found = self.table.find_field(frame.type_info.qname, name)
                if found is not None:
                    return found.identity
            elif name in frame.names:
                return frame.names[name]
        return None

    def _lookup_type(self, name: str) -> SymbolIdentity | None:
        for frame in reversed(self._frames):
            if name in frame.type_params:
                return frame.type_params[name]
            if name in frame.local_types:
                return self.table.types[frame.local_types[name]].identity
            info = frame.type_info
            if info is not None:
                if info.name == name:
                    return info.identity
                member = self.table.member_type(info.qname, name)
                if member is not None:
                    return self.table.types[member].identity
        qname = self.table.resolve_in_file(name, self.path)
        return self.table.types[qname].identity if qname is not None else None

    def _lookup_methods(self, name: str) -> list[MethodInfo]:
        for frame in reversed(self._frames):
            if frame.type_info is not None:
                found = self.table.find_methods(frame.type_info.qname, name)
                if found:
                    return found
        return []

    def _receiver_type(self, node: Node) -> str | None:
        if node.type == "super":
            current = self._current_type()
            return current.superclass if current is not None else None
        ref = self.typer.type_of(node)
        if ref is None or ref.is_array:
            return None
        return ref.qname

    def _choose_overload(self, candidates: list[MethodInfo], args: list[Node]) -> MethodInfo | None:
        fitting = [m for m in candidates if m.accepts_arity(len(args))]
        if len(fitting) <= 1:
            return fitting[0] if fitting else None
        arg_types = [self.typer.type_of(a) for a in args]

        def score(method: MethodInfo) -> int:
            total = 0
            for param_type, arg_type in zip(method.param_types, arg_types, strict=False):
                if arg_type is None:
                    continue
                if erase(param_type) == erase(arg_type.text):
                    total += 2
                elif _unbox(erase(param_type)) == _unbox(erase(arg_type.text)):
                    total += 1
            return total

        # max() keeps the first declared overload on ties
        return max(fitting, key=score)

    # ------------------------------------------------------------------
    # Traversal
    # ------------------------------------------------------------------

    def visit(self, node: Node | None) -> None:
        if node is None:
            return
        handler = self._handlers.get(node.type)
        if handler is not None:
            handler(node)
            return
        for child in node.named_children:
            self.visit(child)

    def _visit_children(self, node: Node) -> None:
        for child in node.named_children:
            self.visit(child)

    def _skip(self, node: Node) -> None:
        pass

    def _visit_scoped(self, node: Node) -> None:
        self._push()
        self._visit_children(node)
        self._pop()

    def _visit_import(self, node: Node) -> None:
        name = first_child_of_type(node, "scoped_identifier") or first_child_of_type(node, "identifier")
        if name is not None:
            self._bind_qualified(name)

    def _bind_qualified(self, node: Node) -> None:
        if node.type == "scoped_identifier":
            scope = node.child_by_field_name("scope")
            if scope is not None:
                self._bind_qualified(scope)
            name_node = node.child_by_field_name("name")
        else:
            name_node = node
        text = base_type_name(self.unit.node_text(node))
        if name_node is not None and text in self.table.types:
            self._record(name_node, self.table.types[text].identity)

    # ------------------------------------------------------------------
    # Types and members
    # ------------------------------------------------------------------

    def _visit_type(self, node: Node) -> None:
        self._bind_type(node)

    def _bind_type(self, node: Node | None) -> str | None:
        """Bind the type identifiers inside a type node; return the main type's qname."""
        if node is None:
            return None
        kind = node.type
        if kind == "type_identifier":
            text = self.unit.node_text(node)
            if text == "var":
                return None
            identity = self._lookup_type(text)
            if identity is None:
                return None
            self._record(node, identity)
            return qname_of(identity)
        if kind == "scoped_type_identifier":
            parts = [c for c in node.named_children if c.type not in ("annotation", "marker_annotation")]
            if len(parts) < 2:
                return None
            left, right = parts[0], parts[-1]
            left_qname = self._bind_type(left)
            right_name = self.unit.node_text(right)
            if left_qname is not None:
                qname = self.table.member_type(left_qname, right_name)
            else:
                full = base_type_name(self.unit.node_text(node))
                qname = full if full in self.table.types else None
            if qname is not None:
                self._record(right, self.table.types[qname].identity)
            return qname
        if kind == "generic_type":
            children = node.named_children
            qname = self._bind_type(children[0]) if children else None
            for child in children[1:]:
                self._visit_children(child)
            return qname
        if kind == "array_type":
            self.visit(node.child_by_field_name("dimensions"))
            return self._bind_type(node.child_by_field_name("element"))
        if kind in _PRIMITIVE_TYPE_NODES:
            return None
        for child in node.named_children:
            self.visit(child)
        return None

    def _visit_type_declaration(self, node: Node) -> None:
        info = self.table.type_for_node(self.path, node)
        if info is None:
            self._visit_children(node)
            return
        name = node.child_by_field_name("name")
        if name is not None:
            self._record(name, info.identity, declaration=True)
        if info.is_local:
            self._frames[-1].local_types[info.name] = info.qname
        self.visit(first_child_of_type(node, "modifiers"))

        frame = _Frame(type_info=info, type_params=dict(info.type_params))
        self._push(frame)
        type_params = first_child_of_type(node, "type_parameters")
        for param in children_of_type(type_params, "type_parameter") if type_params is not None else []:
            self._visit_type_parameter(param, info.type_params)

        supertypes: list[str] = []
        for holder in ("superclass", "super_interfaces", "extends_interfaces"):
            clause = first_child_of_type(node, holder)
            if clause is None:
                continue
            type_list = first_child_of_type(clause, "type_list")
            for type_node in (type_list or clause).named_children:
                qname = self._bind_type(type_node)
                if qname is not None:
                    supertypes.append(qname)
        if info.is_local:
            self.table.set_supertypes(info, supertypes)

        if info.kind == "record":
            params = node.child_by_field_name("parameters")
            for param in params.named_children if params is not None else []:
                pname = param.child_by_field_name("name")
                self._bind_type(param.child_by_field_name("type"))
                if pname is not None and self.unit.node_text(pname) in info.fields:
                    self._record(pname, info.fields[self.unit.node_text(pname)].identity, declaration=True)

        body = node.child_by_field_name("body")
        if body is not None:
            self._visit_class_body(body, info)
        self._pop()

    def _visit_type_parameter(self, param: Node, known: Mapping[str, SymbolIdentity]) -> None:
        ident = first_child_of_type(param, "type_identifier") or first_child_of_type(param, "identifier")
        if ident is None:
            return
        name = self.unit.node_text(ident)
        identity = known.get(name)
        if identity is None:
            identity = SymbolIdentity(
                f"tparam:{self.path}@{self.unit.start(ident)}", name, SymbolKind.TYPE_PARAMETER
            )
            self._declarations[identity] = Declaration(
                identity=identity,
                path=self.path,
                name_offset=self.unit.start(ident),
                name_end=self.unit.end(ident),
                node=param,
            )
        self._frames[-1].type_params[name] = identity
        self._record(ident, identity, declaration=True)
        for child in param.named_children:
            if child.type == "type_bound":
                for bound in child.named_children:
                    self._bind_type(bound)

    def _visit_class_body(self, body: Node, info: TypeInfo) -> None:
        for member in body.named_children:
            kind = member.type
            if kind in ("field_declaration", "constant_declaration"):
                self.visit(first_child_of_type(member, "modifiers"))
                self._bind_type(member.child_by_field_name("type"))
                for declarator in children_of_type(member, "variable_declarator"):
                    name = declarator.child_by_field_name("name")
                    field_info = info.fields.get(self.unit.node_text(name)) if name is not None else None
                    if field_info is not None:
                        self._record(name, field_info.identity, declaration=True)
                    self.visit(declarator.child_by_field_name("value"))
            elif kind in CALLABLE_TYPES:
                self._visit_callable(member, info)
            elif kind == "enum_constant":
                self._visit_enum_constant(member, info)
            elif kind == "enum_body_declarations":
                self._visit_class_body(member, info)
            else:
                self.visit(member)

    def _visit_enum_constant(self, node: Node, info: TypeInfo) -> None:
        self.visit(first_child_of_type(node, "modifiers"))
        name = node.child_by_field_name("name")
        if name is not None and self.unit.node_text(name) in info.fields:
            self._record(name, info.fields[self.unit.node_text(name)].identity, declaration=True)
        self.visit(node.child_by_field_name("arguments"))
        body = node.child_by_field_name("body") or first_child_of_type(node, "class_body")
        anon = self.table.type_for_node(self.path, body) if body is not None else None
        if body is not None and anon is not None:
            self._push(_Frame(type_info=anon))
            self._visit_class_body(body, anon)
            self._pop()

    def _visit_callable(self, node: Node, info: TypeInfo) -> None:
        self._push()
        self.visit(first_child_of_type(node, "modifiers"))
        type_params = node.child_by_field_name("type_parameters") or first_child_of_type(node, "type_parameters")
        for param in children_of_type(type_params, "type_parameter") if type_params is not None else []:
            self._visit_type_parameter(param, {})
        self._bind_type(node.child_by_field_name("type"))

        name = node.child_by_field_name("name")
        if name is not None:
            if node.type == "method_declaration":
                method = next((m for m in info.methods if m.node.start_byte == node.start_byte), None)
                if method is not None:
                    self._record(name, method.identity, declaration=True)
            elif info.name == self.unit.node_text(name):
                self._record(name, info.identity)

        params = node.child_by_field_name("parameters")
        for param in params.named_children if params is not None else []:
            self._declare_parameter(param)
        for child in node.named_children:
            if child.type == "throws":
                self._visit_children(child)
        self.visit(node.child_by_field_name("body"))
        self._pop()

    def _declare_parameter(self, param: Node) -> None:
        if param.type == "formal_parameter":
            self.visit(first_child_of_type(param, "modifiers"))
            type_node = param.child_by_field_name("type")
            self._bind_type(type_node)
            name = param.child_by_field_name("name")
            if name is not None:
                self._declare(name, SymbolKind.PARAMETER, self.typer.type_ref(type_node), param)
        elif param.type == "spread_parameter":
            type_node = next(
                (c for c in param.named_children if c.type not in ("modifiers", "variable_declarator")), None
            )
            self._bind_type(type_node)
            declarator = first_child_of_type(param, "variable_declarator")
            name = declarator.child_by_field_name("name") if declarator is not None else None
            if name is not None:
                ref = self.typer.type_ref(type_node)
                array_ref = TypeRef(ref.text + "[]", ref.qname) if ref is not None else None
                self._declare(name, SymbolKind.PARAMETER, array_ref, param)

    # ------------------------------------------------------------------
    # Statements with scopes
    # ------------------------------------------------------------------

    def _visit_local_declaration(self, node: Node) -> None:
        self.visit(first_child_of_type(node, "modifiers"))
        type_node = node.child_by_field_name("type")
        self._bind_type(type_node)
        declared = self.typer.type_ref(type_node)
        for declarator in children_of_type(node, "variable_declarator"):
            value = declarator.child_by_field_name("value")
            self.visit(value)
            ref = declared
            if type_node is not None and self.unit.node_text(type_node) == "var":
                ref = self.typer.type_of(value)
            dims = first_child_of_type(declarator, "dimensions")
            if ref is not None and dims is not None:
                ref = TypeRef(ref.text + self.unit.node_text(dims), ref.qname)
            name = declarator.child_by_field_name("name")
            if name is not None:
                self._declare(name, SymbolKind.LOCAL, ref, declarator)

    def _visit_enhanced_for(self, node: Node) -> None:
        self._push()
        value = node.child_by_field_name("value")
        self.visit(value)
        self.visit(first_child_of_type(node, "modifiers"))
        type_node = node.child_by_field_name("type")
        self._bind_type(type_node)
        ref = self.typer.type_ref(type_node)
        if ref is None:
            iterable = self.typer.type_of(value)
            ref = iterable.element() if iterable is not None else None
        name = node.child_by_field_name("name")
        if name is not None:
            self._declare(name, SymbolKind.LOCAL, ref, node)
        self.visit(node.child_by_field_name("body"))
        self._pop()

    def _visit_catch(self, node: Node) -> None:
        self._push()
        param = first_child_of_type(node, "catch_formal_parameter")
        if param is not None:
            self.visit(first_child_of_type(param, "modifiers"))
            catch_type = first_child_of_type(param, "catch_type")
            ref = None
            for type_node in catch_type.named_children if catch_type is not None else []:
                self._bind_type(type_node)
                ref = ref or self.typer.type_ref(type_node)
            if catch_type is not None and len(catch_type.named_children) > 1:
                ref = None
            name = param.child_by_field_name("name")
            if name is not None:
                self._declare(name, SymbolKind.PARAMETER, ref, param)
        self.visit(node.child_by_field_name("body"))
        self._pop()

    def _visit_try_with_resources(self, node: Node) -> None:
        self._push()
        resources = node.child_by_field_name("resources")
        for resource in resources.named_children if resources is not None else []:
            name = resource.child_by_field_name("name")
            if name is None:
                self.visit(resource)
                continue
            type_node = resource.child_by_field_name("type")
            self._bind_type(type_node)
            value = resource.child_by_field_name("value")
            self.visit(value)
            ref = self.typer.type_ref(type_node) or self.typer.type_of(value)
            self._declare(name, SymbolKind.LOCAL, ref, resource)
        self.visit(node.child_by_field_name("body"))
        self._pop()
        for child in node.named_children:
            if child.type in ("catch_clause", "finally_clause"):
                self.visit(child)

    def _visit_lambda(self, node: Node) -> None:
        self._push()
        params = node.child_by_field_name("parameters")
        if params is not None:
            if params.type == "identifier":
                self._declare(params, SymbolKind.PARAMETER, None, params)
            elif params.type == "inferred_parameters":
                for ident in children_of_type(params, "identifier"):
                    self._declare(ident, SymbolKind.PARAMETER, None, ident)
            else:
                for param in params.named_children:
                    self._declare_parameter(param)
        self.visit(node.child_by_field_name("body"))
        self._pop()

    def _visit_instanceof(self, node: Node) -> None:
        self.visit(node.child_by_field_name("left"))
        type_node = node.child_by_field_name("right")
        self._bind_type(type_node)
        name = node.child_by_field_name("name")
        if name is not None:
            self._declare(name, SymbolKind.LOCAL, self.typer.type_ref(type_node), node)
        self.visit(node.child_by_field_name("pattern"))

    def _visit_pattern(self, node: Node) -> None:
        type_node = None
        for child in node.named_children:
            if child.type == "identifier":
                self._declare(child, SymbolKind.LOCAL, self.typer.type_ref(type_node), node)
            elif child.type in ("record_pattern", "record_pattern_body"):
                self.visit(child)
            else:
                self._bind_type(child)
                type_node = child

    def _visit_switch(self, node: Node) -> None:
        condition = node.child_by_field_name("condition")
        self.visit(condition)
        subject = self.typer.type_of(condition)
        self._switch_subjects.append(subject.qname if subject is not None else None)
        self.visit(node.child_by_field_name("body"))
        self._switch_subjects.pop()

    def _visit_labeled(self, node: Node) -> None:
        for child in node.named_children:
            if child.type != "identifier":
                self.visit(child)

    def _visit_annotation(self, node: Node) -> None:
        name = node.child_by_field_name("name")
        if name is not None and name.type == "identifier":
            identity = self._lookup_type(self.unit.node_text(name))
            if identity is not None:
                self._record(name, identity)
        elif name is not None:
            self._bind_qualified(name)
        self.visit(node.child_by_field_name("arguments"))

    def _visit_element_value_pair(self, node: Node) -> None:
        self.visit(node.child_by_field_name("value"))

    def _visit_annotation_element(self, node: Node) -> None:
        self._bind_type(node.child_by_field_name("type"))
        self.visit(node.child_by_field_name("value"))

    # ------------------------------------------------------------------
    # Expressions
    # ------------------------------------------------------------------

    def _visit_identifier(self, node: Node) -> None:
        name = self.unit.node_text(node)
        identity = self._lookup_variable(name)
        if identity is None and node.parent is not None and node.parent.type == "switch_label":
            subject = self._switch_subjects[-1] if self._switch_subjects else None
            found = self.table.find_field(subject, name) if subject is not None else None
            identity = found.identity if found is not None else None
        if identity is None:
            identity = self._lookup_type(name)
        if identity is not None:
            self._record(node, identity)

    def _visit_field_access(self, node: Node) -> None:
        obj = node.child_by_field_name("object")
        self.visit(obj)
        fld = node.child_by_field_name("field")
        if obj is None or fld is None or fld.type != "identifier":
            return
        owner = self._receiver_type(obj)
        if owner is None:
            return
        name = self.unit.node_text(fld)
        found = self.table.find_field(owner, name)
        if found is not None:
            self._record(fld, found.identity)
            return
        member = self.table.member_type(owner, name)
        if member is not None:
            self._record(fld, self.table.types[member].identity)

    def _visit_method_invocation(self, node: Node) -> None:
        obj = node.child_by_field_name("object")
        self.visit(obj)
        args_node = node.child_by_field_name("arguments")
        self.visit(args_node)
        name = node.child_by_field_name("name")
        if name is None:
            return
        method_name = self.unit.node_text(name)
        if obj is None:
            candidates = self._lookup_methods(method_name)
        else:
            owner = self._receiver_type(obj)
            candidates = self.table.find_methods(owner, method_name) if owner is not None else []
        args = args_node.named_children if args_node is not None else []
        method = self._choose_overload(candidates, args)
        if method is not None:
            self._record(name, method.identity)

    def _visit_method_reference(self, node: Node) -> None:
        children = node.named_children
        if not children:
            return
        left = children[0]
        if left.type in ("type_identifier", "scoped_type_identifier", "generic_type", "array_type"):
            owner = self._bind_type(left)
        else:
            self.visit(left)
            owner = self._receiver_type(left)
        ident = children[-1] if len(children) > 1 and children[-1].type == "identifier" else None
        if ident is None or owner is None:
            return
        candidates = self.table.find_methods(owner, self.unit.node_text(ident))
        if len(candidates) == 1:
            self._record(ident, candidates[0].identity)

    def _visit_object_creation(self, node: Node) -> None:
        type_node = node.child_by_field_name("type")
        body = first_child_of_type(node, "class_body")
        for child in node.named_children:
            if child.type in ("class_body", "argument_list"):
                continue
            if type_node is not None and child.start_byte == type_node.start_byte:
                continue
            self.visit(child)
        qname = self._bind_type(type_node)
        self.visit(node.child_by_field_name("arguments"))
        if body is None:
            return
        anon = self.table.type_for_node(self.path, body)
        if anon is None:
            self._visit_children(body)
            return
        self.table.set_supertypes(anon, [qname] if qname is not None else [])
        self._push(_Frame(type_info=anon))
        self._visit_class_body(body, anon)
        self._pop()
