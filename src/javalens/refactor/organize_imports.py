"""Organize the import block of one file.

Single-type imports (static or not) whose simple name never appears in the
file are removed, duplicates collapse, and the rest are sorted: ``java.*``,
then ``javax.*``, then everything else alphabetically, with a blank line
between top-level package groups and static imports in a final group.
On-demand imports are always kept. The whole block is replaced by one edit.
"""

from __future__ import annotations

from dataclasses import dataclass

from javalens.config.models import RefactorConfig
from javalens.core.logging import get_logger
from javalens.refactor.edits import EditAggregator, EditPlan, TextEdit
from javalens.semantic.model import SemanticModel
from javalens.semantic.parsing import Node, ParsedUnit, children_of_type, walk_named

log = get_logger(__name__)

_NAME_TYPES = frozenset({"identifier", "type_identifier"})
_SKIPPED = frozenset({"import_declaration", "package_declaration"})


@dataclass(frozen=True)
class ImportEntry:
    name: str  # dotted name, ``.*`` included for on-demand imports
    is_static: bool

    @property
    def is_on_demand(self) -> bool:
        return self.name.endswith(".*")

    @property
    def simple_name(self) -> str:
        return self.name.rsplit(".", 1)[-1]

    @property
    def group(self) -> str:
        head = self.name.split(".", 1)[0]
        return "static" if self.is_static else head

    def sort_key(self) -> tuple[int, str]:
        if self.is_static:
            return 3, self.name
        if self.name.startswith("java."):
            return 0, self.name
        if self.name.startswith("javax."):
            return 1, self.name
        return 2, self.name

    def render(self) -> str:
        return f"import static {self.name};" if self.is_static else f"import {self.name};"


def parse_import(unit: ParsedUnit, node: Node) -> ImportEntry:
    is_static = any(c.type == "static" for c in node.children)
    name_node = next(c for c in node.named_children if c.type in ("scoped_identifier", "identifier"))
    name = unit.node_text(name_node)
    if any(c.type == "asterisk" for c in node.named_children):
        name += ".*"
    return ImportEntry(name="".join(name.split()), is_static=is_static)


def referenced_names(unit: ParsedUnit) -> set[str]:
    """Every identifier outside the package and import declarations."""
    names: set[str] = set()
    for child in unit.root.named_children:
        if child.type in _SKIPPED:
            continue
        names.update(unit.node_text(n) for n in walk_named(child) if n.type in _NAME_TYPES)
    return names


def render_block(entries: list[ImportEntry]) -> str:
    lines: list[str] = []
    previous: str | None = None
    for entry in sorted(entries, key=ImportEntry.sort_key):
        if previous is not None and entry.group != previous:
            lines.append("")
        lines.append(entry.render())
        previous = entry.group
    return "\n".join(lines)


class OrganizeImportsEngine:
    def __init__(self, model: SemanticModel, config: RefactorConfig | None = None) -> None:
        self.model = model
        self.config = config or RefactorConfig()

    def plan(self, path: str) -> EditPlan:
        unit = self.model.unit(path)
        declarations = children_of_type(unit.root, "import_declaration")
        aggregator = EditAggregator("organize_imports")
        if not declarations:
            return aggregator.build(total_imports=0, kept_imports=0, removed_imports=[], has_changes=False)

        used = referenced_names(unit)
        kept: list[ImportEntry] = []
        removed: list[str] = []
        for node in declarations:
            entry = parse_import(unit, node)
            if entry in kept:
                removed.append(entry.name)
            elif entry.is_on_demand or entry.simple_name in used:
                kept.append(entry)
            else:
                removed.append(entry.name)

        start, end = unit.start(declarations[0]), unit.end(declarations[-1])
        block = render_block(kept)
        has_changes = block != unit.text[start:end]
        if has_changes:
            if any(c.type in ("line_comment", "block_comment") for c in _between(unit, start, end)):
                aggregator.warn("Comments inside the import block are not preserved")
            if block:
                aggregator.add(TextEdit.replace(unit, start, end, block))
            else:
                aggregator.add(TextEdit.delete(unit, start, _next_content(unit, end)))

        plan = aggregator.build(
            total_imports=len(declarations),
            kept_imports=len(kept),
            removed_imports=removed,
            has_changes=has_changes,
        )
        log.info("organize_imports_planned", path=unit.path, removed=len(removed), changed=has_changes)
        return plan


def _between(unit: ParsedUnit, start: int, end: int) -> list[Node]:
    return [c for c in unit.root.children if start <= unit.start(c) and unit.end(c) <= end]


def _next_content(unit: ParsedUnit, offset: int) -> int:
    """Offset of the first non-whitespace character at or after ``offset``."""
    text = unit.text
    while offset < len(text) and text[offset].isspace():
        offset += 1
    return offset
