"""Tree-sitter parsing for Java source units.

This module provides:
- Parsing of Java source text into a concrete syntax tree
- Character/byte offset translation (tree-sitter reports UTF-8 byte offsets,
  engines work in character offsets of the decoded text)
- Zero-based line/column conversion
- Small navigation helpers over tree-sitter nodes

Note: a parse is purely syntactic. Binding identifiers to declarations is
done by :mod:`javalens.semantic.binder`.
"""

from __future__ import annotations

import textwrap
from bisect import bisect_right
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from functools import cache
from typing import Any

import tree_sitter
import tree_sitter_java

from javalens.core.errors import InvalidOperationError

Node = tree_sitter.Node

TYPE_DECLARATION_TYPES = frozenset(
    {
        "class_declaration",
        "interface_declaration",
        "enum_declaration",
        "record_declaration",
        "annotation_type_declaration",
    }
)

CALLABLE_TYPES = frozenset(
    {
        "method_declaration",
        "constructor_declaration",
        "compact_constructor_declaration",
    }
)


@cache
def java_language() -> tree_sitter.Language:
    """Load the Java grammar once per process."""
    return tree_sitter.Language(tree_sitter_java.language())


@dataclass
class ParsedUnit:
    """A parsed Java source file (one snapshot of its text)."""

    path: str
    text: str
    tree: Any  # tree-sitter Tree
    error_count: int
    _line_starts: list[int] = field(default_factory=list, repr=False)
    _byte_starts: list[int] | None = field(default=None, repr=False)

    def __post_init__(self) -> None:
        starts = [0]
        for i, ch in enumerate(self.text):
            if ch == "\n":
                starts.append(i + 1)
        self._line_starts = starts
        if not self.text.isascii():
            # Byte offset of every character, plus the end sentinel
            byte_starts = [0] * (len(self.text) + 1)
            pos = 0
            for i, ch in enumerate(self.text):
                byte_starts[i] = pos
                pos += len(ch.encode("utf-8"))
            byte_starts[len(self.text)] = pos
            self._byte_starts = byte_starts

    @property
    def root(self) -> Node:
        return self.tree.root_node

    @property
    def has_errors(self) -> bool:
        return self.error_count > 0

    # ------------------------------------------------------------------
    # Offsets
    # ------------------------------------------------------------------

    def char_offset(self, byte_offset: int) -> int:
        if self._byte_starts is None:
            return byte_offset
        return bisect_right(self._byte_starts, byte_offset) - 1

    def byte_offset(self, char_offset: int) -> int:
        if self._byte_starts is None:
            return char_offset
        return self._byte_starts[char_offset]

    def start(self, node: Node) -> int:
        """Character offset where ``node`` starts."""
        return self.char_offset(node.start_byte)

    def end(self, node: Node) -> int:
        """Character offset just past the end of ``node``."""
        return self.char_offset(node.end_byte)

    def node_text(self, node: Node) -> str:
        return self.text[self.start(node) : self.end(node)]

    def dedented(self, start: int, end: int) -> str:
        """Text of ``[start, end)`` with the indentation of its first line removed from every line."""
        return textwrap.dedent(self.line_indent(start) + self.text[start:end])

    def offset_of(self, line: int, column: int) -> int:
        """Translate a zero-based line/column to a character offset."""
        if line < 0 or column < 0:
            raise InvalidOperationError.invalid_position(line, column, "must be >= 0")
        if line >= len(self._line_starts):
            raise InvalidOperationError.invalid_position(
                line, column, f"file has {len(self._line_starts)} lines"
            )
        line_start = self._line_starts[line]
        line_end = (
            self._line_starts[line + 1] - 1 if line + 1 < len(self._line_starts) else len(self.text)
        )
        if line_start + column > line_end:
            raise InvalidOperationError.invalid_position(
                line, column, f"line has {line_end - line_start} characters"
            )
        return line_start + column

    def position_of(self, offset: int) -> tuple[int, int]:
        """Translate a character offset to a zero-based (line, column)."""
        line = bisect_right(self._line_starts, offset) - 1
        return line, offset - self._line_starts[line]

    def line_indent(self, offset: int) -> str:
        """Leading whitespace of the line containing ``offset``."""
        line, _ = self.position_of(offset)
        start = self._line_starts[line]
        end = start
        while end < len(self.text) and self.text[end] in " \t":
            end += 1
        return self.text[start:end]

    # ------------------------------------------------------------------
    # Node lookup
    # ------------------------------------------------------------------

    def node_at(self, offset: int) -> Node | None:
        """Narrowest named node covering the character at ``offset``."""
        if offset < 0 or offset > len(self.text):
            return None
        b = self.byte_offset(offset)
        node = self.root.named_descendant_for_byte_range(b, b)
        return node

    def identifier_at(self, offset: int) -> Node | None:
        """Identifier token covering ``offset``.

        A cursor placed just after the last character of an identifier
        (``foo|``) still selects it, matching editor conventions.
        """
        for candidate in (offset, offset - 1):
            node = self.node_at(candidate) if candidate >= 0 else None
            if node is not None and node.type in ("identifier", "type_identifier"):
                if self.start(node) <= offset <= self.end(node):
                    return node
        return None

    def covered_node(self, start: int, end: int) -> Node | None:
        """Smallest named node whose range covers ``[start, end)``."""
        if start < 0 or end > len(self.text) or start > end:
            return None
        return self.root.named_descendant_for_byte_range(
            self.byte_offset(start), self.byte_offset(max(start, end - 1)) + (1 if end > start else 0)
        )


class JavaParser:
    """Tree-sitter parser for Java.

    Usage::

        parser = JavaParser()
        unit = parser.parse("src/main/java/com/example/Foo.java", text)
        node = unit.node_at(unit.offset_of(12, 8))
    """

    def __init__(self) -> None:
        self._parser = tree_sitter.Parser()
        self._parser.language = java_language()

    def parse(self, path: str, text: str) -> ParsedUnit:
        tree = self._parser.parse(text.encode("utf-8"))
        error_count = sum(1 for n in walk(tree.root_node) if n.type == "ERROR" or n.is_missing)
        return ParsedUnit(path=path, text=text, tree=tree, error_count=error_count)


# ----------------------------------------------------------------------
# Node helpers
# ----------------------------------------------------------------------


def walk(node: Node) -> Iterator[Node]:
    """Pre-order traversal over every node (named and anonymous)."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.children))


def walk_named(node: Node, *, prune: Iterable[str] = ()) -> Iterator[Node]:
    """Pre-order traversal over named nodes, not descending into ``prune`` types.

    The root itself is always yielded and always descended into.
    """
    pruned = frozenset(prune)
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        if current is not node and current.type in pruned:
            continue
        stack.extend(reversed(current.named_children))


def ancestors(node: Node) -> Iterator[Node]:
    current = node.parent
    while current is not None:
        yield current
        current = current.parent


def enclosing(node: Node, types: Iterable[str]) -> Node | None:
    """Nearest ancestor (excluding ``node``) whose type is in ``types``."""
    wanted = frozenset(types)
    for parent in ancestors(node):
        if parent.type in wanted:
            return parent
    return None


def children_of_type(node: Node, node_type: str) -> list[Node]:
    return [c for c in node.named_children if c.type == node_type]


def first_child_of_type(node: Node, node_type: str) -> Node | None:
    for child in node.named_children:
        if child.type == node_type:
            return child
    return None


def modifiers_of(node: Node) -> frozenset[str]:
    """Keyword modifiers (public, static, final, default, ...) of a declaration."""
    mods = first_child_of_type(node, "modifiers")
    if mods is None:
        return frozenset()
    return frozenset(
        c.type for c in mods.children if not c.is_named or c.type in ("static", "final", "default")
    )


def is_same_node(a: Node | None, b: Node | None) -> bool:
    if a is None or b is None:
        return False
    return a.start_byte == b.start_byte and a.end_byte == b.end_byte and a.type == b.type
