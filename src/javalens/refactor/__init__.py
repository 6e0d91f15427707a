"""Refactoring edit engine - plans, never writes."""

from javalens.refactor.edits import EditAggregator, EditKind, EditPlan, TextEdit
from javalens.refactor.ops import ReferencesResult, RefactorOps
from javalens.refactor.signature import ParameterSpec

__all__ = [
    "EditAggregator",
    "EditKind",
    "EditPlan",
    "ParameterSpec",
    "RefactorOps",
    "ReferencesResult",
    "TextEdit",
]
