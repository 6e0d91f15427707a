"""Identifier validation and name suggestion."""

from __future__ import annotations

import re
import unicodedata

from javalens.config.constants import PRIMITIVE_TYPES, RESERVED_WORDS
from javalens.core.errors import InvalidOperationError
from javalens.semantic.parsing import Node, ParsedUnit
from javalens.semantic.symbols import TypeRef

# Unicode letter/digit categories Java accepts in identifiers
_START_CATEGORIES = frozenset({"Lu", "Ll", "Lt", "Lm", "Lo", "Nl", "Sc", "Pc"})
_PART_CATEGORIES = _START_CATEGORIES | {"Nd", "Mn", "Mc"}


def is_java_identifier(name: str) -> bool:
    if not name:
        return False
    if unicodedata.category(name[0]) not in _START_CATEGORIES:
        return False
    return all(unicodedata.category(ch) in _PART_CATEGORIES for ch in name[1:])


def validate_identifier(name: str | None, param: str = "new_name") -> str:
    """Return ``name`` if it can be used as a new Java name, else raise."""
    if name is None or not name.strip():
        raise InvalidOperationError.invalid_parameter(param, "Required")
    if not is_java_identifier(name):
        raise InvalidOperationError.invalid_parameter(param, f"'{name}' is not a valid Java identifier")
    if name in RESERVED_WORDS:
        raise InvalidOperationError.invalid_parameter(param, f"'{name}' is a reserved word")
    return name


def validate_constant_name(name: str | None, param: str = "constant_name") -> str:
    """Constants are usually upper case, so reserved words are checked case-insensitively."""
    if name is None or not name.strip():
        raise InvalidOperationError.invalid_parameter(param, "Required")
    if not is_java_identifier(name) or name.lower() in RESERVED_WORDS:
        raise InvalidOperationError.invalid_parameter(param, "Not a valid Java identifier")
    return name


def _decapitalize(text: str) -> str:
    return text[:1].lower() + text[1:]


def simple_type_name(type_text: str) -> str:
    """``java.util.List<String>[]`` -> ``List``."""
    base = re.sub(r"<.*>", "", type_text).replace("[]", "").replace("...", "").strip()
    return base.rsplit(".", 1)[-1]


def suggest_variable_name(unit: ParsedUnit, expression: Node, type_ref: TypeRef | None) -> str:
    suggested: str | None = None
    if type_ref is not None and type_ref.text:
        suggested = _decapitalize(simple_type_name(type_ref.text)) or None
    if suggested is None and expression.type == "method_invocation":
        name_node = expression.child_by_field_name("name")
        method_name = unit.node_text(name_node) if name_node is not None else ""
        if method_name.startswith("get") and len(method_name) > 3:
            suggested = _decapitalize(method_name[3:])
        elif method_name:
            suggested = f"{method_name}Result"
    if suggested is None and expression.type == "object_creation_expression":
        type_node = expression.child_by_field_name("type")
        if type_node is not None:
            suggested = _decapitalize(simple_type_name(unit.node_text(type_node))) or None
    if suggested is None:
        suggested = "extracted"
    if suggested in RESERVED_WORDS:
        if type_ref is not None and type_ref.text in PRIMITIVE_TYPES:
            return f"{suggested}Value"
        return "value"
    return suggested
