"""Rename a symbol everywhere its identity occurs.

Known gap: the new name is not checked for collisions with declarations
already visible in the affected scopes. A rename can therefore introduce
shadowing or a duplicate declaration; callers should re-check diagnostics.
"""

from __future__ import annotations

from javalens.config.models import RefactorConfig
from javalens.core.errors import InvalidOperationError
from javalens.core.logging import get_logger
from javalens.refactor.edits import EditAggregator, EditPlan, TextEdit
from javalens.refactor.identity import resolve_at
from javalens.refactor.naming import validate_identifier
from javalens.semantic.model import SemanticModel
from javalens.semantic.symbols import SymbolKind

log = get_logger(__name__)

TYPE_RENAME_NOTE = "Renaming a type may require renaming the file as well"


class RenameEngine:
    def __init__(self, model: SemanticModel, config: RefactorConfig | None = None) -> None:
        self.model = model
        self.config = config or RefactorConfig()

    def plan(self, path: str, line: int, column: int, new_name: str) -> EditPlan:
        validate_identifier(new_name)
        symbol = resolve_at(self.model, path, line, column)
        old_name = symbol.name
        if not old_name:
            raise InvalidOperationError.precondition("Anonymous classes cannot be renamed")
        if old_name == new_name:
            raise InvalidOperationError.invalid_parameter("new_name", "Same as current name")

        aggregator = EditAggregator("rename")
        for occurrence in self.model.find_all_references(symbol.identity):
            unit = self.model.unit(occurrence.path)
            # Constructor names and import segments share the identity but must also spell it
            if unit.text[occurrence.offset : occurrence.end_offset] != old_name:
                continue
            aggregator.add(
                TextEdit.replace(
                    unit,
                    occurrence.offset,
                    occurrence.end_offset,
                    new_name,
                    is_declaration=occurrence.is_declaration,
                )
            )

        summary: dict[str, object] = {
            "old_name": old_name,
            "new_name": new_name,
            "symbol_kind": symbol.identity.kind.value,
        }
        if symbol.identity.kind is SymbolKind.TYPE:
            summary["note"] = TYPE_RENAME_NOTE
        plan = aggregator.build(**summary)
        log.info(
            "rename_planned",
            old_name=old_name,
            new_name=new_name,
            kind=symbol.identity.kind.value,
            edits=plan.total_edits,
            files=plan.files_affected,
        )
        return plan
