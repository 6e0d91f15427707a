"""Pass 1: project-wide type table.

Collects every type declaration in the snapshot (top-level, nested, local,
anonymous, enum constant bodies) with its members, then resolves
supertype names and member types against each file's package and imports.
Names that do not resolve to project source (JDK, libraries) stay
unresolved; nothing downstream ever edits them.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field

from javalens.semantic.parsing import (
    CALLABLE_TYPES,
    TYPE_DECLARATION_TYPES,
    Node,
    ParsedUnit,
    children_of_type,
    first_child_of_type,
    modifiers_of,
)
from javalens.semantic.symbols import (
    Declaration,
    FieldInfo,
    MethodInfo,
    SymbolIdentity,
    SymbolKind,
    TypeInfo,
    TypeRef,
    erase,
)

_KIND_BY_NODE = {
    "class_declaration": "class",
    "interface_declaration": "interface",
    "enum_declaration": "enum",
    "record_declaration": "record",
    "annotation_type_declaration": "annotation",
}

NodeKey = tuple[str, int, int, str]


def node_key(path: str, node: Node) -> NodeKey:
    return (path, node.start_byte, node.end_byte, node.type)


def base_type_name(type_text: str) -> str:
    """Qualified base name of a type spelling: ``java.util.List<Foo>[]`` -> ``java.util.List``."""
    out: list[str] = []
    depth = 0
    for ch in type_text:
        if ch == "<":
            depth += 1
        elif ch == ">":
            depth -= 1
        elif depth == 0 and not ch.isspace():
            out.append(ch)
    name = "".join(out)
    for suffix in ("...", "[]"):
        while name.endswith(suffix):
            name = name[: -len(suffix)]
    return name


def type_identity(qname: str, name: str) -> SymbolIdentity:
    return SymbolIdentity(f"type:{qname}", name, SymbolKind.TYPE)


def qname_of(identity: SymbolIdentity) -> str | None:
    if identity.kind is not SymbolKind.TYPE:
        return None
    return identity.key.split(":", 1)[1]


@dataclass
class FileContext:
    package: str = ""
    single_imports: dict[str, str] = field(default_factory=dict)  # simple -> qualified
    on_demand: list[str] = field(default_factory=list)  # "com.example" of "com.example.*"
    top_level: dict[str, str] = field(default_factory=dict)  # simple -> qname


class TypeTable:
    """All project types of one snapshot, plus static name resolution."""

    def __init__(self) -> None:
        self.types: dict[str, TypeInfo] = {}
        self.files: dict[str, FileContext] = {}
        self.declarations: dict[SymbolIdentity, Declaration] = {}
        self._by_node: dict[NodeKey, TypeInfo] = {}
        self._methods: dict[SymbolIdentity, MethodInfo] = {}

    # ------------------------------------------------------------------
    # Building
    # ------------------------------------------------------------------

    @classmethod
    def build(cls, units: Iterator[ParsedUnit] | list[ParsedUnit]) -> TypeTable:
        table = cls()
        units = list(units)
        for unit in units:
            _Collector(table, unit).collect()
        for info in table.types.values():
            if not info.is_local and not info.is_anonymous:
                table._resolve_supertypes(info)
        table._resolve_member_types()
        return table

    def add_type(self, info: TypeInfo, unit: ParsedUnit, name_node: Node | None) -> None:
        self.types[info.qname] = info
        self._by_node[node_key(info.path, info.node)] = info
        if name_node is not None:
            self.declarations[info.identity] = Declaration(
                identity=info.identity,
                path=unit.path,
                name_offset=unit.start(name_node),
                name_end=unit.end(name_node),
                node=info.node,
            )

    def add_method(self, method: MethodInfo) -> None:
        if not method.is_constructor:
            self._methods[method.identity] = method

    def _resolve_supertypes(self, info: TypeInfo) -> None:
        resolved: list[str] = []
        for i, text in enumerate(info.supertype_texts):
            qname = self.resolve(text, info.path, info.outer)
            if qname is not None and qname != info.qname:
                resolved.append(qname)
                if i == 0 and info.kind == "class" and not self.types[qname].is_interface:
                    info.superclass = qname
        info.supertypes = resolved

    def set_supertypes(self, info: TypeInfo, qnames: list[str]) -> None:
        """Supertypes resolved by the binder (local and anonymous classes)."""
        info.supertypes = [q for q in qnames if q != info.qname]
        if info.supertypes and not self.types[info.supertypes[0]].is_interface:
            info.superclass = info.supertypes[0]

    def _resolve_member_types(self) -> None:
        for info in self.types.values():
            for f in info.fields.values():
                f.type_qname = self.resolve(f.type_text, info.path, info.qname)
                decl = self.declarations.get(f.identity)
                if decl is not None:
                    self.declarations[f.identity] = Declaration(
                        identity=decl.identity,
                        path=decl.path,
                        name_offset=decl.name_offset,
                        name_end=decl.name_end,
                        node=decl.node,
                        type=TypeRef(f.type_text, f.type_qname),
                    )
            for m in info.methods:
                if m.return_type is not None and m.return_type != "void":
                    m.return_qname = self.resolve(m.return_type, info.path, info.qname)

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def type_for_node(self, path: str, node: Node) -> TypeInfo | None:
        return self._by_node.get(node_key(path, node))

    def enclosing_type(self, path: str, node: Node) -> TypeInfo | None:
        """Innermost type (named or anonymous) whose body contains ``node``."""
        current = node.parent
        while current is not None:
            if current.type in TYPE_DECLARATION_TYPES:
                return self.type_for_node(path, current)
            if current.type == "class_body" and current.parent is not None:
                if current.parent.type in ("object_creation_expression", "enum_constant"):
                    return self.type_for_node(path, current)
            current = current.parent
        return None

    def method_info(self, identity: SymbolIdentity) -> MethodInfo | None:
        return self._methods.get(identity)

    def supertype_chain(self, qname: str) -> Iterator[TypeInfo]:
        """The type itself, then every project supertype breadth-first."""
        seen: set[str] = set()
        queue = [qname]
        while queue:
            current = queue.pop(0)
            if current in seen or current not in self.types:
                continue
            seen.add(current)
            info = self.types[current]
            yield info
            queue.extend(info.supertypes)

    def superclass_of(self, qname: str) -> str | None:
        info = self.types.get(qname)
        return info.superclass if info is not None else None

    def find_field(self, qname: str, name: str) -> FieldInfo | None:
        for info in self.supertype_chain(qname):
            if name in info.fields:
                return info.fields[name]
        return None

    def find_methods(self, qname: str, name: str) -> list[MethodInfo]:
        """Methods named ``name`` visible in ``qname``, overridden ones removed."""
        found: list[MethodInfo] = []
        signatures: set[str] = set()
        for info in self.supertype_chain(qname):
            for method in info.methods_named(name):
                if method.erased_signature not in signatures:
                    signatures.add(method.erased_signature)
                    found.append(method)
        return found

    def member_type(self, qname: str, name: str) -> str | None:
        for info in self.supertype_chain(qname):
            if name in info.nested:
                return info.nested[name]
        return None

    def resolve(self, type_text: str, path: str, context: str | None) -> str | None:
        """Resolve a type spelling seen in ``path`` inside type ``context``."""
        base = base_type_name(type_text)
        if not base:
            return None
        parts = base.split(".")
        head = self.resolve_simple(parts[0], path, context)
        rest = parts[1:]
        if head is None:
            for i in range(len(parts), 0, -1):
                candidate = ".".join(parts[:i])
                if candidate in self.types:
                    head, rest = candidate, parts[i:]
                    break
            else:
                return None
        for part in rest:
            head = self.member_type(head, part)
            if head is None:
                return None
        return head

    def resolve_simple(self, name: str, path: str, context: str | None) -> str | None:
        current = self.types.get(context) if context else None
        while current is not None:
            if current.name == name and not current.is_anonymous:
                return current.qname
            member = self.member_type(current.qname, name)
            if member is not None:
                return member
            current = self.types.get(current.outer) if current.outer else None
        return self.resolve_in_file(name, path)

    def resolve_in_file(self, name: str, path: str) -> str | None:
        ctx = self.files.get(path)
        if ctx is None:
            return None
        if name in ctx.top_level:
            return ctx.top_level[name]
        if name in ctx.single_imports:
            qualified = ctx.single_imports[name]
            return qualified if qualified in self.types else None
        candidate = f"{ctx.package}.{name}" if ctx.package else name
        if candidate in self.types:
            return candidate
        for prefix in ctx.on_demand:
            candidate = f"{prefix}.{name}"
            if candidate in self.types:
                return candidate
        return None


class _Collector:
    """Walks one unit, registering types and their members in the table."""

    def __init__(self, table: TypeTable, unit: ParsedUnit) -> None:
        self.table = table
        self.unit = unit
        self.ctx = FileContext()

    def collect(self) -> None:
        root = self.unit.root
        for child in root.named_children:
            if child.type == "package_declaration":
                name = child.named_children[-1] if child.named_children else None
                if name is not None:
                    self.ctx.package = self.unit.node_text(name)
            elif child.type == "import_declaration":
                self._collect_import(child)
        self.table.files[self.unit.path] = self.ctx

        # (node, enclosing type qname, inside a callable/initializer body)
        stack: list[tuple[Node, str | None, bool]] = [(root, None, False)]
        while stack:
            node, outer, local = stack.pop()
            if node.type in TYPE_DECLARATION_TYPES:
                info = self._add_type(node, outer, local)
                if info is not None:
                    stack.extend(self._members(info))
                continue
            if node.type == "object_creation_expression":
                body = first_child_of_type(node, "class_body")
                if body is not None and outer is not None:
                    for child in node.named_children:
                        if child.type != "class_body":
                            stack.append((child, outer, local))
                    info = self._add_anonymous(body, outer, node.child_by_field_name("type"))
                    stack.extend(self._members(info))
                    continue
            stack.extend((c, outer, local) for c in reversed(node.named_children))

    def _collect_import(self, node: Node) -> None:
        text = self.unit.node_text(node)
        if " static " in f" {text} ":
            return
        name = first_child_of_type(node, "scoped_identifier") or first_child_of_type(node, "identifier")
        if name is None:
            return
        qualified = self.unit.node_text(name)
        if first_child_of_type(node, "asterisk") is not None or text.rstrip("; \n").endswith("*"):
            self.ctx.on_demand.append(qualified)
        else:
            self.ctx.single_imports[qualified.rsplit(".", 1)[-1]] = qualified

    def _add_type(self, node: Node, outer: str | None, local: bool) -> TypeInfo | None:
        name_node = node.child_by_field_name("name")
        if name_node is None:
            return None
        name = self.unit.node_text(name_node)
        if outer is None:
            qname = f"{self.ctx.package}.{name}" if self.ctx.package else name
            self.ctx.top_level[name] = qname
        elif local:
            qname = f"{outer}${name}@{self.unit.start(node)}"
        else:
            qname = f"{outer}.{name}"
        info = TypeInfo(
            identity=type_identity(qname, name),
            qname=qname,
            name=name,
            kind=_KIND_BY_NODE[node.type],
            package=self.ctx.package,
            path=self.unit.path,
            node=node,
            outer=outer,
            is_local=local,
            supertype_texts=self._supertype_texts(node),
        )
        if outer is not None and not local:
            self.table.types[outer].nested[name] = qname
        self._type_params(info, node)
        self.table.add_type(info, self.unit, name_node)
        return info

    def _add_anonymous(self, body: Node, outer: str, type_node: Node | None) -> TypeInfo:
        offset = self.unit.start(body)
        qname = f"{outer}$anon@{offset}"
        info = TypeInfo(
            identity=type_identity(qname, ""),
            qname=qname,
            name="",
            kind="anonymous",
            package=self.ctx.package,
            path=self.unit.path,
            node=body,
            outer=outer,
            is_local=True,
            supertype_texts=[self.unit.node_text(type_node)] if type_node is not None else [],
        )
        self.table.add_type(info, self.unit, None)
        return info

    def _supertype_texts(self, node: Node) -> list[str]:
        texts: list[str] = []
        superclass = node.child_by_field_name("superclass") or first_child_of_type(node, "superclass")
        if superclass is not None and superclass.named_children:
            texts.append(self.unit.node_text(superclass.named_children[0]))
        for holder in ("super_interfaces", "extends_interfaces"):
            clause = first_child_of_type(node, holder)
            if clause is None:
                continue
            type_list = first_child_of_type(clause, "type_list")
            for t in type_list.named_children if type_list is not None else []:
                texts.append(self.unit.node_text(t))
        return texts

    def _type_params(self, info: TypeInfo, node: Node) -> None:
        params = node.child_by_field_name("type_parameters") or first_child_of_type(node, "type_parameters")
        if params is None:
            return
        for param in children_of_type(params, "type_parameter"):
            ident = first_child_of_type(param, "type_identifier") or first_child_of_type(param, "identifier")
            if ident is None:
                continue
            name = self.unit.node_text(ident)
            identity = SymbolIdentity(
                f"tparam:{self.unit.path}@{self.unit.start(ident)}", name, SymbolKind.TYPE_PARAMETER
            )
            info.type_params[name] = identity
            self.table.declarations[identity] = Declaration(
                identity=identity,
                path=self.unit.path,
                name_offset=self.unit.start(ident),
                name_end=self.unit.end(ident),
                node=param,
            )

    # ------------------------------------------------------------------
    # Members
    # ------------------------------------------------------------------

    def _members(self, info: TypeInfo) -> list[tuple[Node, str | None, bool]]:
        """Register members of ``info``; return subtrees still to scan for types."""
        pending: list[tuple[Node, str | None, bool]] = []
        node = info.node
        if info.kind == "record":
            params = node.child_by_field_name("parameters")
            for param in params.named_children if params is not None else []:
                if param.type == "formal_parameter":
                    self._add_field(info, param, param, is_static=False, is_final=True)
        body = node if info.is_anonymous else node.child_by_field_name("body")
        if body is None:
            return pending
        members = list(body.named_children)
        if body.type == "enum_body":
            members = []
            for child in body.named_children:
                if child.type == "enum_constant":
                    self._add_enum_constant(info, child, pending)
                elif child.type == "enum_body_declarations":
                    members = list(child.named_children)
        for member in members:
            kind = member.type
            if kind in ("field_declaration", "constant_declaration"):
                mods = modifiers_of(member)
                implicit = info.is_interface or kind == "constant_declaration"
                type_node = member.child_by_field_name("type")
                for declarator in children_of_type(member, "variable_declarator"):
                    self._add_field(
                        info,
                        declarator,
                        type_node,
                        is_static=implicit or "static" in mods,
                        is_final=implicit or "final" in mods,
                    )
                    value = declarator.child_by_field_name("value")
                    if value is not None:
                        pending.append((value, info.qname, True))
            elif kind in CALLABLE_TYPES:
                self._add_method(info, member)
                method_body = member.child_by_field_name("body")
                if method_body is not None:
                    pending.append((method_body, info.qname, True))
            elif kind in TYPE_DECLARATION_TYPES:
                pending.append((member, info.qname, False))
            elif kind in ("block", "static_initializer"):
                pending.append((member, info.qname, True))
        return pending

    def _add_field(
        self, info: TypeInfo, declarator: Node, type_node: Node | None, *, is_static: bool, is_final: bool
    ) -> None:
        name_node = declarator.child_by_field_name("name")
        if name_node is None:
            return
        name = self.unit.node_text(name_node)
        if type_node is not None and type_node is not declarator:
            type_text = self.unit.node_text(type_node)
        else:
            param_type = declarator.child_by_field_name("type")
            type_text = self.unit.node_text(param_type) if param_type is not None else ""
        identity = SymbolIdentity(f"field:{info.qname}#{name}", name, SymbolKind.FIELD)
        info.fields[name] = FieldInfo(
            identity=identity,
            name=name,
            type_text=type_text,
            is_static=is_static,
            is_final=is_final,
            declarator=declarator,
        )
        self.table.declarations[identity] = Declaration(
            identity=identity,
            path=self.unit.path,
            name_offset=self.unit.start(name_node),
            name_end=self.unit.end(name_node),
            node=declarator,
        )

    def _add_enum_constant(
        self, info: TypeInfo, constant: Node, pending: list[tuple[Node, str | None, bool]]
    ) -> None:
        name_node = constant.child_by_field_name("name")
        if name_node is None:
            return
        name = self.unit.node_text(name_node)
        identity = SymbolIdentity(f"field:{info.qname}#{name}", name, SymbolKind.FIELD)
        info.fields[name] = FieldInfo(
            identity=identity,
            name=name,
            type_text=info.name,
            is_static=True,
            is_final=True,
            declarator=constant,
        )
        self.table.declarations[identity] = Declaration(
            identity=identity,
            path=self.unit.path,
            name_offset=self.unit.start(name_node),
            name_end=self.unit.end(name_node),
            node=constant,
        )
        args = constant.child_by_field_name("arguments")
        if args is not None:
            pending.append((args, info.qname, True))
        body = constant.child_by_field_name("body") or first_child_of_type(constant, "class_body")
        if body is not None:
            anon = self._add_anonymous(body, info.qname, None)
            anon.supertypes = [info.qname]
            anon.superclass = info.qname
            pending.extend(self._members(anon))

    def _add_method(self, info: TypeInfo, node: Node) -> None:
        name_node = node.child_by_field_name("name")
        if name_node is None:
            return
        name = self.unit.node_text(name_node)
        is_constructor = node.type != "method_declaration"
        param_names: list[str] = []
        param_types: list[str] = []
        is_varargs = False
        params = node.child_by_field_name("parameters")
        if node.type == "compact_constructor_declaration":
            for f in info.fields.values():
                param_names.append(f.name)
                param_types.append(f.type_text)
        for param in params.named_children if params is not None else []:
            if param.type == "formal_parameter":
                pname = param.child_by_field_name("name")
                ptype = param.child_by_field_name("type")
                param_names.append(self.unit.node_text(pname) if pname is not None else "")
                param_types.append(self.unit.node_text(ptype) if ptype is not None else "")
            elif param.type == "spread_parameter":
                declarator = first_child_of_type(param, "variable_declarator")
                ptype = next(
                    (c for c in param.named_children if c.type not in ("modifiers", "variable_declarator")),
                    None,
                )
                pname = declarator.child_by_field_name("name") if declarator is not None else None
                param_names.append(self.unit.node_text(pname) if pname is not None else "")
                param_types.append((self.unit.node_text(ptype) if ptype is not None else "") + "...")
                is_varargs = True
        mods = modifiers_of(node)
        if info.is_interface and node.type == "method_declaration":
            if "default" not in mods and "static" not in mods and "private" not in mods:
                if node.child_by_field_name("body") is None:
                    mods = mods | {"abstract"}
        if is_constructor:
            identity = info.identity
            return_type = None
        else:
            erased = ",".join(erase(t) for t in param_types)
            identity = SymbolIdentity(f"method:{info.qname}#{name}({erased})", name, SymbolKind.METHOD)
            type_node = node.child_by_field_name("type")
            return_type = self.unit.node_text(type_node) if type_node is not None else "void"
        method = MethodInfo(
            identity=identity,
            name=name,
            declaring_type=info.qname,
            param_names=param_names,
            param_types=param_types,
            return_type=return_type,
            modifiers=mods,
            is_constructor=is_constructor,
            is_varargs=is_varargs,
            path=self.unit.path,
            node=node,
        )
        if is_constructor:
            info.constructors.append(method)
        else:
            info.methods.append(method)
            self.table.declarations[identity] = Declaration(
                identity=identity,
                path=self.unit.path,
                name_offset=self.unit.start(name_node),
                name_end=self.unit.end(name_node),
                node=node,
            )
        self.table.add_method(method)
