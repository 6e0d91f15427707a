"""Edit model and aggregation.

A refactoring never touches storage. It returns an :class:`EditPlan`: per
file, a tuple of non-overlapping :class:`TextEdit` objects sorted by
descending start offset, so that applying them one after another never
shifts the offsets of the edits still to come. Files the refactoring
would create are carried whole in ``new_files``.

Offsets are character offsets into the snapshot text the plan was computed
from. ``old_text`` is recorded for every edit and re-checked by
:meth:`EditPlan.apply` before anything is changed.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from types import MappingProxyType
from typing import Any

from javalens.core.errors import InvalidOperationError, StaleSourceError
from javalens.core.logging import get_logger
from javalens.semantic.parsing import ParsedUnit

log = get_logger(__name__)


class EditKind(StrEnum):
    INSERT = "insert"
    REPLACE = "replace"
    DELETE = "delete"


@dataclass(frozen=True, slots=True)
class TextEdit:
    """A single typed span edit in one file."""

    path: str
    kind: EditKind
    start_offset: int
    end_offset: int
    old_text: str
    new_text: str
    start_line: int = 0
    start_column: int = 0
    end_line: int = 0
    end_column: int = 0
    is_declaration: bool = False
    note: str | None = None

    def __post_init__(self) -> None:
        if self.start_offset < 0 or self.start_offset > self.end_offset:
            raise ValueError(f"invalid edit range [{self.start_offset}, {self.end_offset})")
        if len(self.old_text) != self.end_offset - self.start_offset:
            raise ValueError("old_text length does not match the edit range")
        if self.kind is EditKind.INSERT and self.start_offset != self.end_offset:
            raise ValueError("insert edits are zero-width")
        if self.kind is EditKind.DELETE and self.new_text:
            raise ValueError("delete edits carry no new text")

    @classmethod
    def _make(cls, unit: ParsedUnit, kind: EditKind, start: int, end: int, new_text: str, **extra: Any) -> TextEdit:
        start_line, start_column = unit.position_of(start)
        end_line, end_column = unit.position_of(end)
        return cls(
            path=unit.path,
            kind=kind,
            start_offset=start,
            end_offset=end,
            old_text=unit.text[start:end],
            new_text=new_text,
            start_line=start_line,
            start_column=start_column,
            end_line=end_line,
            end_column=end_column,
            **extra,
        )

    @classmethod
    def insert(cls, unit: ParsedUnit, offset: int, text: str, **extra: Any) -> TextEdit:
        return cls._make(unit, EditKind.INSERT, offset, offset, text, **extra)

    @classmethod
    def replace(cls, unit: ParsedUnit, start: int, end: int, text: str, **extra: Any) -> TextEdit:
        return cls._make(unit, EditKind.REPLACE, start, end, text, **extra)

    @classmethod
    def delete(cls, unit: ParsedUnit, start: int, end: int, **extra: Any) -> TextEdit:
        return cls._make(unit, EditKind.DELETE, start, end, "", **extra)

    def verify(self, source: str) -> None:
        """Raise ``StaleSourceError`` unless ``source`` still holds ``old_text`` at this span."""
        actual = source[self.start_offset : self.end_offset]
        if self.end_offset > len(source) or actual != self.old_text:
            raise StaleSourceError.mismatch(self.path, self.start_offset, self.end_offset, self.old_text, actual)

    def overlaps(self, other: TextEdit) -> bool:
        if self.path != other.path:
            return False
        if self.start_offset == other.start_offset:
            # Two edits anchored at the same point have no defined order
            return True
        return self.start_offset < other.end_offset and other.start_offset < self.end_offset

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "kind": self.kind.value,
            "start_offset": self.start_offset,
            "end_offset": self.end_offset,
            "start_line": self.start_line,
            "start_column": self.start_column,
            "end_line": self.end_line,
            "end_column": self.end_column,
            "old_text": self.old_text,
            "new_text": self.new_text,
        }
        if self.is_declaration:
            data["is_declaration"] = True
        if self.note:
            data["note"] = self.note
        return data


@dataclass(frozen=True)
class EditPlan:
    """Result of one refactoring: ordered edits per file plus summary metadata."""

    operation: str
    edits_by_file: Mapping[str, tuple[TextEdit, ...]]
    summary: Mapping[str, Any] = field(default_factory=dict)
    warnings: tuple[str, ...] = ()
    new_files: Mapping[str, str] = field(default_factory=dict)

    @property
    def files_affected(self) -> int:
        return len(self.edits_by_file.keys() | self.new_files.keys())

    @property
    def total_edits(self) -> int:
        return sum(len(edits) for edits in self.edits_by_file.values())

    @property
    def edits(self) -> list[TextEdit]:
        return [e for path in sorted(self.edits_by_file) for e in self.edits_by_file[path]]

    def edits_for(self, path: str) -> tuple[TextEdit, ...]:
        return self.edits_by_file.get(path, ())

    def apply(self, path: str, source: str) -> str:
        """Return ``source`` with this plan's edits for ``path`` applied.

        Every edit is verified against ``source`` first; nothing is applied if
        any check fails.
        """
        edits = self.edits_for(path)
        for edit in edits:
            edit.verify(source)
        result = source
        for edit in edits:  # already in descending offset order
            result = result[: edit.start_offset] + edit.new_text + result[edit.end_offset :]
        return result

    def to_dict(self) -> dict[str, Any]:
        return {
            "operation": self.operation,
            "files_affected": self.files_affected,
            "total_edits": self.total_edits,
            "edits_by_file": {
                path: [e.to_dict() for e in self.edits_by_file[path]] for path in sorted(self.edits_by_file)
            },
            "new_files": {path: self.new_files[path] for path in sorted(self.new_files)},
            "summary": dict(self.summary),
            "warnings": list(self.warnings),
        }


class EditAggregator:
    """Collects edits for one engine invocation and freezes them into a plan.

    Owned by a single engine call; :meth:`build` validates and orders the
    edits, failing with ``EDIT_CONFLICT`` instead of emitting a plan whose
    edits intersect.
    """

    def __init__(self, operation: str) -> None:
        self.operation = operation
        self._edits: dict[str, list[TextEdit]] = {}
        self._new_files: dict[str, str] = {}
        self._warnings: list[str] = []

    def add(self, edit: TextEdit) -> None:
        self._edits.setdefault(edit.path, []).append(edit)

    def extend(self, edits: Iterable[TextEdit]) -> None:
        for edit in edits:
            self.add(edit)

    def create_file(self, path: str, text: str) -> None:
        if path in self._new_files or path in self._edits:
            raise InvalidOperationError.precondition(f"{path} is already part of this plan", path=path)
        self._new_files[path] = text

    def warn(self, message: str) -> None:
        if message not in self._warnings:
            self._warnings.append(message)

    def __len__(self) -> int:
        return sum(len(v) for v in self._edits.values())

    def build(self, **summary: Any) -> EditPlan:
        ordered: dict[str, tuple[TextEdit, ...]] = {}
        for path in sorted(self._edits):
            unique = list(dict.fromkeys(self._edits[path]))
            unique.sort(key=lambda e: (e.start_offset, e.end_offset), reverse=True)
            for later, earlier in zip(unique, unique[1:], strict=False):
                if earlier.overlaps(later):
                    log.warning(
                        "edit_conflict",
                        operation=self.operation,
                        path=path,
                        first=(earlier.start_offset, earlier.end_offset),
                        second=(later.start_offset, later.end_offset),
                    )
                    raise InvalidOperationError.overlapping_edits(
                        path,
                        (earlier.start_offset, earlier.end_offset),
                        (later.start_offset, later.end_offset),
                    )
            ordered[path] = tuple(unique)
        return EditPlan(
            operation=self.operation,
            edits_by_file=MappingProxyType(ordered),
            summary=MappingProxyType(dict(summary)),
            warnings=tuple(self._warnings),
            new_files=MappingProxyType(dict(self._new_files)),
        )
