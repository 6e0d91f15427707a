"""Extract an interface from the public instance methods of a class.

The plan creates ``<Interface>.java`` next to the class, in the same
package, declaring the selected method signatures, and adds the interface
to the class's ``implements`` list. Imports of the class file that the
signatures mention are copied into the new file.
"""

from __future__ import annotations

import posixpath
import re

from javalens.config.models import RefactorConfig
from javalens.core.errors import InvalidOperationError, SymbolNotFoundError
from javalens.core.logging import get_logger
from javalens.refactor.edits import EditAggregator, EditPlan, TextEdit
from javalens.refactor.identity import resolve_at
from javalens.refactor.naming import validate_identifier
from javalens.semantic.declarations import qname_of
from javalens.semantic.model import SemanticModel
from javalens.semantic.parsing import Node, ParsedUnit, children_of_type, first_child_of_type
from javalens.semantic.symbols import MethodInfo, TypeInfo

log = get_logger(__name__)

_IDENTIFIER = re.compile(r"[A-Za-z_$][\w$]*")

# Children of a class/record header after which an implements clause may follow
_HEADER_PARTS = ("identifier", "type_parameters", "superclass", "formal_parameters")


def method_signature(unit: ParsedUnit, method: MethodInfo) -> str:
    """``<T> R name(A a, B b) throws E`` as declared, without modifiers or body."""
    node = method.node
    parts: list[str] = []
    type_params = first_child_of_type(node, "type_parameters")
    if type_params is not None:
        parts.append(unit.node_text(type_params))
    parts.append(method.return_type or "void")
    params = ", ".join(f"{t} {n}" for t, n in zip(method.param_types, method.param_names, strict=True))
    parts.append(f"{method.name}({params})")
    throws = first_child_of_type(node, "throws")
    if throws is not None:
        parts.append(unit.node_text(throws))
    return " ".join(parts)


class ExtractInterfaceEngine:
    def __init__(self, model: SemanticModel, config: RefactorConfig | None = None) -> None:
        self.model = model
        self.config = config or RefactorConfig()

    def plan(
        self,
        path: str,
        line: int,
        column: int,
        interface_name: str,
        method_names: list[str] | None = None,
    ) -> EditPlan:
        validate_identifier(interface_name, param="interface_name")
        symbol = resolve_at(self.model, path, line, column)
        qname = qname_of(symbol.identity)
        info = self.model.type_info(qname) if qname is not None else None
        if info is None:
            raise SymbolNotFoundError.at_position(symbol.unit.path, line, column, what="class")
        if info.kind not in ("class", "record"):
            raise InvalidOperationError.precondition(
                f"Cannot extract an interface from {info.kind} '{info.name}'", kind=info.kind
            )

        unit = self.model.unit(info.path)
        target_qname = f"{info.package}.{interface_name}" if info.package else interface_name
        if self.model.type_info(target_qname) is not None:
            raise InvalidOperationError.precondition(f"Type '{target_qname}' already exists")
        interface_path = posixpath.join(posixpath.dirname(unit.path), f"{interface_name}.java")
        if interface_path in self.model.paths:
            raise InvalidOperationError.precondition(f"{interface_path} already exists", path=interface_path)

        aggregator = EditAggregator("extract_interface")
        methods = self._select_methods(info, method_names, aggregator)
        signatures = [(m.name, method_signature(self.model.unit(m.path), m)) for m in methods]

        type_params = first_child_of_type(info.node, "type_parameters")
        header_params = unit.node_text(type_params) if type_params is not None else ""
        implemented = interface_name + (f"<{', '.join(info.type_params)}>" if info.type_params else "")

        aggregator.create_file(
            interface_path,
            self._interface_text(unit, info, interface_name + header_params, [s for _, s in signatures]),
        )
        aggregator.add(self._implements_edit(unit, info.node, implemented))

        plan = aggregator.build(
            class_name=info.name,
            interface_name=interface_name,
            package=info.package,
            interface_path=interface_path,
            extracted_methods=[{"name": name, "signature": sig} for name, sig in signatures],
        )
        log.info(
            "extract_interface_planned",
            path=unit.path,
            type=info.qname,
            interface=interface_name,
            methods=len(signatures),
        )
        return plan

    @staticmethod
    def _select_methods(
        info: TypeInfo, method_names: list[str] | None, aggregator: EditAggregator
    ) -> list[MethodInfo]:
        eligible = [m for m in info.methods if "public" in m.modifiers and not m.is_static]
        if method_names:
            wanted = set(method_names)
            missing = sorted(wanted - {m.name for m in eligible})
            if missing:
                aggregator.warn(f"No public instance method named {', '.join(missing)} in {info.name}; skipped")
            eligible = [m for m in eligible if m.name in wanted]
        if not eligible:
            raise InvalidOperationError.precondition(
                f"{info.name} has no eligible public instance methods to extract"
            )
        return eligible

    def _interface_text(self, unit: ParsedUnit, info: TypeInfo, header: str, signatures: list[str]) -> str:
        indent = self.config.indent_unit
        sections: list[str] = []
        if info.package:
            sections.append(f"package {info.package};")
        imports = _imports_used_by(unit, signatures)
        if imports:
            sections.append("\n".join(imports))
        members = "\n\n".join(f"{indent}{signature};" for signature in signatures)
        sections.append(f"public interface {header} {{\n\n{members}\n}}")
        return "\n\n".join(sections) + "\n"

    @staticmethod
    def _implements_edit(unit: ParsedUnit, node: Node, implemented: str) -> TextEdit:
        interfaces = first_child_of_type(node, "super_interfaces")
        if interfaces is not None:
            type_list = first_child_of_type(interfaces, "type_list")
            anchor = type_list if type_list is not None else interfaces
            return TextEdit.insert(unit, unit.end(anchor), f", {implemented}")
        header = [c for c in node.named_children if c.type in _HEADER_PARTS]
        return TextEdit.insert(unit, unit.end(header[-1]), f" implements {implemented}")


def _imports_used_by(unit: ParsedUnit, signatures: list[str]) -> list[str]:
    """Import declarations of ``unit`` a signature mentions, plus every on-demand import."""
    mentioned = {m.group(0) for s in signatures for m in _IDENTIFIER.finditer(s)}
    kept: list[str] = []
    for declaration in children_of_type(unit.root, "import_declaration"):
        text = unit.node_text(declaration)
        if any(c.type == "asterisk" for c in declaration.named_children):
            kept.append(text)
            continue
        simple = text.removesuffix(";").rsplit(".", 1)[-1].strip()
        if simple in mentioned:
            kept.append(text)
    return kept
