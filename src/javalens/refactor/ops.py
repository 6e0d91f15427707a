"""Refactor operations - one entry point per refactoring.

``RefactorOps`` binds the engines to one project snapshot. Every method is
a pure computation: it returns an :class:`EditPlan` (or reference list)
and never writes to storage.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from javalens.config.constants import REFERENCE_LIMIT_MAX
from javalens.config.models import RefactorConfig
from javalens.refactor.closure import AnonymousToClosureEngine
from javalens.refactor.edits import EditPlan
from javalens.refactor.extract_interface import ExtractInterfaceEngine
from javalens.refactor.extract_method import ExtractMethodEngine
from javalens.refactor.extract_variable import ExtractConstantEngine, ExtractVariableEngine
from javalens.refactor.identity import resolve_at
from javalens.refactor.inline_method import InlineMethodEngine
from javalens.refactor.inline_variable import InlineVariableEngine
from javalens.refactor.organize_imports import OrganizeImportsEngine
from javalens.refactor.rename import RenameEngine
from javalens.refactor.signature import ChangeSignatureEngine, ParameterSpec
from javalens.semantic.model import SemanticModel


@dataclass
class ReferenceLocation:
    """One occurrence of a symbol, zero-based."""

    path: str
    line: int
    column: int
    offset: int
    is_declaration: bool
    line_text: str


@dataclass
class ReferencesResult:
    """Result of a find-references query."""

    symbol: str
    kind: str
    key: str
    references: list[ReferenceLocation] = field(default_factory=list)
    truncated: bool = False

    @property
    def files(self) -> list[str]:
        return sorted({r.path for r in self.references})

    def to_dict(self) -> dict[str, Any]:
        return {
            "symbol": self.symbol,
            "kind": self.kind,
            "key": self.key,
            "total": len(self.references),
            "truncated": self.truncated,
            "references": [
                {
                    "path": r.path,
                    "line": r.line,
                    "column": r.column,
                    "offset": r.offset,
                    "is_declaration": r.is_declaration,
                    "line_text": r.line_text,
                }
                for r in self.references
            ],
        }


class RefactorOps:
    """Refactoring operations over one semantic model snapshot."""

    def __init__(self, model: SemanticModel, config: RefactorConfig | None = None) -> None:
        self._model = model
        self._config = config or RefactorConfig()

    @property
    def model(self) -> SemanticModel:
        return self._model

    def rename(self, path: str, line: int, column: int, new_name: str) -> EditPlan:
        return RenameEngine(self._model, self._config).plan(path, line, column, new_name)

    def change_signature(
        self,
        path: str,
        line: int,
        column: int,
        *,
        new_name: str | None = None,
        new_return_type: str | None = None,
        new_parameters: list[ParameterSpec] | None = None,
    ) -> EditPlan:
        return ChangeSignatureEngine(self._model, self._config).plan(
            path,
            line,
            column,
            new_name=new_name,
            new_return_type=new_return_type,
            new_parameters=new_parameters,
        )

    def extract_method(
        self,
        path: str,
        start_line: int,
        start_column: int,
        end_line: int,
        end_column: int,
        method_name: str,
    ) -> EditPlan:
        return ExtractMethodEngine(self._model, self._config).plan(
            path, start_line, start_column, end_line, end_column, method_name
        )

    def extract_variable(
        self,
        path: str,
        start_line: int,
        start_column: int,
        end_line: int,
        end_column: int,
        variable_name: str | None = None,
    ) -> EditPlan:
        return ExtractVariableEngine(self._model, self._config).plan(
            path, start_line, start_column, end_line, end_column, variable_name
        )

    def extract_constant(
        self,
        path: str,
        start_line: int,
        start_column: int,
        end_line: int,
        end_column: int,
        constant_name: str,
    ) -> EditPlan:
        return ExtractConstantEngine(self._model, self._config).plan(
            path, start_line, start_column, end_line, end_column, constant_name
        )

    def inline_variable(self, path: str, line: int, column: int) -> EditPlan:
        return InlineVariableEngine(self._model, self._config).plan(path, line, column)

    def inline_method(self, path: str, line: int, column: int) -> EditPlan:
        return InlineMethodEngine(self._model, self._config).plan(path, line, column)

    def convert_anonymous_to_lambda(self, path: str, line: int, column: int) -> EditPlan:
        return AnonymousToClosureEngine(self._model, self._config).plan(path, line, column)

    def extract_interface(
        self, path: str, line: int, column: int, interface_name: str, method_names: list[str] | None = None
    ) -> EditPlan:
        return ExtractInterfaceEngine(self._model, self._config).plan(path, line, column, interface_name, method_names)

    def organize_imports(self, path: str) -> EditPlan:
        return OrganizeImportsEngine(self._model, self._config).plan(path)

    def find_references(self, path: str, line: int, column: int, limit: int | None = None) -> ReferencesResult:
        symbol = resolve_at(self._model, path, line, column)
        limit = min(limit or self._config.reference_limit, REFERENCE_LIMIT_MAX)
        occurrences = self._model.find_all_references(symbol.identity, limit=limit + 1)
        result = ReferencesResult(
            symbol=symbol.name,
            kind=symbol.identity.kind.value,
            key=symbol.identity.key,
            truncated=len(occurrences) > limit,
        )
        for occurrence in occurrences[:limit]:
            unit = self._model.unit(occurrence.path)
            ref_line, ref_column = unit.position_of(occurrence.offset)
            line_start = occurrence.offset - ref_column
            line_end = unit.text.find("\n", occurrence.offset)
            result.references.append(
                ReferenceLocation(
                    path=occurrence.path,
                    line=ref_line,
                    column=ref_column,
                    offset=occurrence.offset,
                    is_declaration=occurrence.is_declaration,
                    line_text=unit.text[line_start : line_end if line_end != -1 else len(unit.text)].strip(),
                )
            )
        return result
