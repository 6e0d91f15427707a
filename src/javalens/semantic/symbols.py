"""Symbol identity and declaration records.

A ``SymbolIdentity`` is the only thing engines compare when deciding
whether two occurrences name the same declaration. Its ``key`` encodes the
declaring context, so shadowed locals, overloads, and same-named members of
unrelated types never collide:

    type:com.example.Foo
    field:com.example.Foo#count
    method:com.example.Foo#add(int,String)
    local:src/Foo.java@412
    param:src/Foo.java@388
    tparam:src/Foo.java@97
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any


class SymbolKind(StrEnum):
    TYPE = "type"
    METHOD = "method"
    FIELD = "field"
    LOCAL = "local"
    PARAMETER = "parameter"
    TYPE_PARAMETER = "type_parameter"


@dataclass(frozen=True, slots=True)
class SymbolIdentity:
    """Opaque, comparable token for one declaration.

    Only ``key`` takes part in equality and hashing; ``name`` and ``kind``
    are carried for display.
    """

    key: str
    name: str = field(compare=False)
    kind: SymbolKind = field(compare=False)

    @property
    def is_variable(self) -> bool:
        return self.kind in (SymbolKind.LOCAL, SymbolKind.PARAMETER, SymbolKind.FIELD)

    def __str__(self) -> str:
        return self.key


def erase(type_text: str) -> str:
    """Erase generics and whitespace from a type spelling: ``Map<K, V>[]`` -> ``Map[]``."""
    out: list[str] = []
    depth = 0
    for ch in type_text:
        if ch == "<":
            depth += 1
        elif ch == ">":
            depth -= 1
        elif depth == 0 and not ch.isspace():
            out.append(ch)
    erased = "".join(out)
    # Varargs are arrays for signature purposes
    if erased.endswith("..."):
        erased = erased[:-3] + "[]"
    # Qualified spellings compare by simple name
    base, dims = erased, ""
    if "[" in erased:
        base, dims = erased[: erased.index("[")], erased[erased.index("[") :]
    return base.rsplit(".", 1)[-1] + dims


@dataclass(frozen=True, slots=True)
class TypeRef:
    """Static type of a declaration or expression.

    ``text`` is a source spelling suitable for generated code; ``qname`` is
    set when the type is declared inside the project.
    """

    text: str
    qname: str | None = None

    @property
    def is_array(self) -> bool:
        return self.text.endswith("]")

    def element(self) -> TypeRef | None:
        if not self.is_array:
            return None
        return TypeRef(self.text[: self.text.rindex("[")].rstrip(), self.qname)


@dataclass(frozen=True, slots=True)
class Declaration:
    """Where and how a symbol is declared.

    ``node`` is the declaring syntax node: a variable declarator, formal
    parameter, method/constructor/type declaration, or type parameter.
    """

    identity: SymbolIdentity
    path: str
    name_offset: int
    name_end: int
    node: Any = field(compare=False, repr=False)
    type: TypeRef | None = None


@dataclass(slots=True)
class FieldInfo:
    identity: SymbolIdentity
    name: str
    type_text: str
    is_static: bool
    is_final: bool
    declarator: Any = field(repr=False)
    type_qname: str | None = None


@dataclass(slots=True)
class MethodInfo:
    """A method or constructor declared in project source."""

    identity: SymbolIdentity
    name: str
    declaring_type: str
    param_names: list[str]
    param_types: list[str]
    return_type: str | None  # None for constructors
    modifiers: frozenset[str]
    is_constructor: bool
    is_varargs: bool
    path: str
    node: Any = field(repr=False)
    return_qname: str | None = None

    @property
    def arity(self) -> int:
        return len(self.param_names)

    @property
    def is_static(self) -> bool:
        return "static" in self.modifiers

    @property
    def is_default(self) -> bool:
        return "default" in self.modifiers

    @property
    def has_body(self) -> bool:
        return self.node.child_by_field_name("body") is not None

    @property
    def erased_signature(self) -> str:
        return f"{self.name}({','.join(erase(t) for t in self.param_types)})"

    def accepts_arity(self, count: int) -> bool:
        if self.is_varargs:
            return count >= self.arity - 1
        return count == self.arity


@dataclass(slots=True)
class TypeInfo:
    """A class, interface, enum, record, annotation, or anonymous class body."""

    identity: SymbolIdentity
    qname: str
    name: str
    kind: str  # class | interface | enum | record | annotation | anonymous
    package: str
    path: str
    node: Any = field(repr=False)
    outer: str | None = None
    is_local: bool = False
    supertype_texts: list[str] = field(default_factory=list)
    supertypes: list[str] = field(default_factory=list)  # resolved project qnames
    superclass: str | None = None
    fields: dict[str, FieldInfo] = field(default_factory=dict)
    methods: list[MethodInfo] = field(default_factory=list)
    constructors: list[MethodInfo] = field(default_factory=list)
    nested: dict[str, str] = field(default_factory=dict)  # simple name -> qname
    type_params: dict[str, SymbolIdentity] = field(default_factory=dict)

    @property
    def is_interface(self) -> bool:
        return self.kind in ("interface", "annotation")

    @property
    def is_anonymous(self) -> bool:
        return self.kind == "anonymous"

    def methods_named(self, name: str) -> list[MethodInfo]:
        return [m for m in self.methods if m.name == name]


@dataclass(frozen=True, slots=True)
class Occurrence:
    """One bound identifier token.

    Offsets are character offsets of the identifier itself. ``node`` is the
    identifier syntax node, from which callers reach the enclosing scope.
    """

    path: str
    offset: int
    end_offset: int
    identity: SymbolIdentity
    is_declaration: bool = False
    node: Any = field(default=None, compare=False, repr=False)
