"""Change a method's name, return type, and parameter list, updating call sites.

Old and new parameters are matched by name. At every call site each new
parameter takes the argument that was passed for the old parameter of the
same name, else its default value, else a placeholder comment, so no
argument position is ever silently dropped.

Call sites nested inside the arguments of other call sites are rendered
into the outer call's replacement text, keeping every file's edits
disjoint.
"""

from __future__ import annotations

from dataclasses import dataclass

from javalens.config.models import RefactorConfig
from javalens.core.errors import InvalidOperationError, SymbolNotFoundError
from javalens.core.logging import get_logger
from javalens.refactor.edits import EditAggregator, EditPlan, TextEdit
from javalens.refactor.identity import resolve_at
from javalens.refactor.naming import validate_identifier
from javalens.semantic.model import SemanticModel
from javalens.semantic.parsing import Node, ParsedUnit, first_child_of_type
from javalens.semantic.symbols import MethodInfo, SymbolKind

log = get_logger(__name__)


@dataclass(frozen=True)
class ParameterSpec:
    name: str
    type: str
    default_value: str | None = None


@dataclass(frozen=True)
class _CallSite:
    node: Node  # method_invocation
    start: int  # method name start
    end: int  # end of the argument list
    arguments: list[Node]


def parameter_mapping(old_names: list[str], new_params: list[ParameterSpec]) -> dict[int, int]:
    """new index -> old index for every new parameter matched by name."""
    mapping: dict[int, int] = {}
    for new_index, param in enumerate(new_params):
        if param.name in old_names:
            mapping[new_index] = old_names.index(param.name)
    return mapping


class ChangeSignatureEngine:
    def __init__(self, model: SemanticModel, config: RefactorConfig | None = None) -> None:
        self.model = model
        self.config = config or RefactorConfig()

    def plan(
        self,
        path: str,
        line: int,
        column: int,
        *,
        new_name: str | None = None,
        new_return_type: str | None = None,
        new_parameters: list[ParameterSpec] | None = None,
    ) -> EditPlan:
        if new_name is None and new_return_type is None and new_parameters is None:
            raise InvalidOperationError.invalid_parameter(
                "changes", "At least one of new_name, new_return_type, or new_parameters must be specified"
            )
        if new_name is not None:
            validate_identifier(new_name)
        if new_return_type is not None and not new_return_type.strip():
            raise InvalidOperationError.invalid_parameter("new_return_type", "Cannot be blank")
        if new_parameters is not None:
            self._validate_parameters(new_parameters)

        symbol = resolve_at(self.model, path, line, column)
        if symbol.identity.kind is SymbolKind.TYPE and symbol.node.parent is not None:
            if symbol.node.parent.type in ("constructor_declaration", "compact_constructor_declaration"):
                raise InvalidOperationError.precondition(
                    "Changing constructor signatures is not supported", name=symbol.name
                )
        method = self.model.method_info(symbol.identity) if symbol.identity.kind is SymbolKind.METHOD else None
        if method is None:
            unit = symbol.unit
            line_col = unit.position_of(symbol.offset)
            raise SymbolNotFoundError.at_position(unit.path, line_col[0], line_col[1], what="method")

        name = new_name or method.name
        return_type = new_return_type or (method.return_type or "void")
        params = new_parameters
        if params is None:
            params = [ParameterSpec(n, t) for n, t in zip(method.param_names, method.param_types, strict=True)]
        mapping = parameter_mapping(method.param_names, params)

        aggregator = EditAggregator("change_signature")
        aggregator.add(self._declaration_edit(method, name, return_type, params))

        references = self.model.find_all_references(method.identity, limit=self.config.reference_limit)
        if len(references) >= self.config.reference_limit:
            aggregator.warn(
                f"Reference limit ({self.config.reference_limit}) reached; some call sites may not be updated"
            )
        sites_by_file: dict[str, list[_CallSite]] = {}
        unhandled = 0
        for occurrence in references:
            if occurrence.is_declaration:
                continue
            unit = self.model.unit(occurrence.path)
            site = self._call_site(unit, occurrence.node)
            if site is None:
                unhandled += 1
                continue
            sites_by_file.setdefault(unit.path, []).append(site)
        if unhandled:
            aggregator.warn(f"{unhandled} method reference(s) (e.g. Foo::{method.name}) were not updated")

        placeholders = 0
        for file_path, sites in sites_by_file.items():
            unit = self.model.unit(file_path)
            renderer = _CallRenderer(unit, sites, name, method, params, mapping, self.config)
            for site in renderer.outermost():
                aggregator.add(TextEdit.replace(unit, site.start, site.end, renderer.render(site)))
            placeholders += renderer.placeholders
        if placeholders:
            aggregator.warn(
                f"{placeholders} argument(s) have no value; placeholder comments were inserted and must be filled in"
            )

        plan = aggregator.build(
            old_name=method.name,
            new_name=name,
            old_return_type=method.return_type,
            new_return_type=return_type,
            old_parameter_count=method.arity,
            new_parameter_count=len(params),
            new_parameters=[{"name": p.name, "type": p.type} for p in params],
            call_sites_updated=sum(len(s) for s in sites_by_file.values()),
        )
        log.info(
            "signature_change_planned",
            method=method.name,
            new_name=name,
            call_sites=sum(len(s) for s in sites_by_file.values()),
            edits=plan.total_edits,
        )
        return plan

    @staticmethod
    def _validate_parameters(params: list[ParameterSpec]) -> None:
        seen: set[str] = set()
        for param in params:
            validate_identifier(param.name, param="new_parameters")
            if not param.type or not param.type.strip():
                raise InvalidOperationError.invalid_parameter(
                    "new_parameters", f"Parameter '{param.name}' must have a type"
                )
            if param.name in seen:
                raise InvalidOperationError.invalid_parameter(
                    "new_parameters", f"Duplicate parameter name '{param.name}'"
                )
            seen.add(param.name)

    def _declaration_edit(
        self, method: MethodInfo, name: str, return_type: str, params: list[ParameterSpec]
    ) -> TextEdit:
        unit = self.model.unit(method.path)
        node = method.node
        type_node = node.child_by_field_name("type")
        name_node = node.child_by_field_name("name")
        params_node = node.child_by_field_name("parameters")
        start = unit.start(type_node if type_node is not None else name_node)
        end = unit.end(params_node)
        old_nodes = [c for c in params_node.named_children if c.type in ("formal_parameter", "spread_parameter")]
        texts: list[str] = []
        for param in params:
            if param.name not in method.param_names:
                texts.append(f"{param.type} {param.name}")
                continue
            old_index = method.param_names.index(param.name)
            old_node = old_nodes[old_index]
            if param.type == method.param_types[old_index]:
                texts.append(unit.node_text(old_node))
                continue
            # retyped: keep annotations and final
            modifiers = first_child_of_type(old_node, "modifiers")
            prefix = f"{unit.node_text(modifiers)} " if modifiers is not None else ""
            texts.append(f"{prefix}{param.type} {param.name}")
        header = f"{return_type} {name}({', '.join(texts)})"
        return TextEdit.replace(unit, start, end, header, is_declaration=True)

    @staticmethod
    def _call_site(unit: ParsedUnit, name_node: Node | None) -> _CallSite | None:
        if name_node is None or name_node.parent is None:
            return None
        invocation = name_node.parent
        if invocation.type != "method_invocation":
            return None
        if invocation.child_by_field_name("name").start_byte != name_node.start_byte:
            return None
        args = invocation.child_by_field_name("arguments")
        return _CallSite(
            node=invocation,
            start=unit.start(name_node),
            end=unit.end(args),
            arguments=list(args.named_children),
        )


class _CallRenderer:
    """Builds replacement text for the call sites of one file."""

    def __init__(
        self,
        unit: ParsedUnit,
        sites: list[_CallSite],
        name: str,
        method: MethodInfo,
        params: list[ParameterSpec],
        mapping: dict[int, int],
        config: RefactorConfig,
    ) -> None:
        self.unit = unit
        self.sites = sorted(sites, key=lambda s: (s.start, -s.end))
        self.name = name
        self.method = method
        self.params = params
        self.mapping = mapping
        self.config = config
        self.placeholders = 0

    def outermost(self) -> list[_CallSite]:
        return self._top_level(0, len(self.unit.text))

    def _top_level(self, start: int, end: int) -> list[_CallSite]:
        found: list[_CallSite] = []
        cursor = start
        for site in self.sites:
            if site.start >= cursor and site.end <= end and site.start >= start:
                found.append(site)
                cursor = site.end
        return found

    def _render_span(self, start: int, end: int) -> str:
        pieces: list[str] = []
        cursor = start
        for site in self._top_level(start, end):
            pieces.append(self.unit.text[cursor : site.start])
            pieces.append(self.render(site))
            cursor = site.end
        pieces.append(self.unit.text[cursor:end])
        return "".join(pieces)

    def _old_argument_spans(self, site: _CallSite) -> list[tuple[int, int] | None]:
        spans: list[tuple[int, int] | None] = [(self.unit.start(a), self.unit.end(a)) for a in site.arguments]
        arity = self.method.arity
        if self.method.is_varargs and len(spans) != arity:
            # Trailing arguments all belong to the varargs parameter
            tail = site.arguments[arity - 1 :]
            merged = (self.unit.start(tail[0]), self.unit.end(tail[-1])) if tail else None
            return [*spans[: arity - 1], merged]
        return spans

    def render(self, site: _CallSite) -> str:
        """Replacement text for ``site``; only the arguments that are kept get rendered."""
        old_spans = self._old_argument_spans(site)
        new_args: list[str] = []
        for new_index, param in enumerate(self.params):
            old_index = self.mapping.get(new_index)
            if old_index is not None and old_index < len(old_spans):
                span = old_spans[old_index]
                new_args.append(self._render_span(*span) if span is not None else "")
            elif param.default_value is not None:
                new_args.append(param.default_value)
            else:
                self.placeholders += 1
                new_args.append(self.config.placeholder_template.format(name=param.name))
        # An empty varargs tail maps to no argument at all
        new_args = [a for a in new_args if a]
        return f"{self.name}({', '.join(new_args)})"
