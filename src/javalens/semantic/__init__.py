"""Tree-sitter backed Semantic Source Model for Java."""

from javalens.semantic.model import SemanticModel
from javalens.semantic.parsing import JavaParser, ParsedUnit
from javalens.semantic.project import JavaProject
from javalens.semantic.symbols import (
    Declaration,
    MethodInfo,
    Occurrence,
    SymbolIdentity,
    SymbolKind,
    TypeInfo,
    TypeRef,
)

__all__ = [
    "Declaration",
    "JavaParser",
    "JavaProject",
    "MethodInfo",
    "Occurrence",
    "ParsedUnit",
    "SemanticModel",
    "SymbolIdentity",
    "SymbolKind",
    "TypeInfo",
    "TypeRef",
]
