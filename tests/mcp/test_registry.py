"""Tests for MCP tool registry."""

import json

import pytest
from pydantic import Field

from javalens.mcp.registry import ToolRegistry, ToolSpec, registry
from javalens.mcp.tools.base import BaseParams, PositionParams


class TestToolSpec:
    """Tests for ToolSpec dataclass."""

    def test_schema_extraction(self):
        """ToolSpec exposes the JSON schema of its params class."""

        class MyParams(BaseParams):
            name: str = Field(description="The name")
            count: int = Field(default=10, ge=0)

        spec = ToolSpec(
            name="my_tool",
            description="My tool",
            params_model=MyParams,
            handler=lambda _ctx, _params: None,
        )
        schema = spec.params_model.model_json_schema()
        assert schema["properties"]["name"]["description"] == "The name"
        assert schema.get("required") == ["name"]

    def test_input_schema_inlines_nested_models(self):
        """Nested params models are inlined so clients see a flat schema."""
        from javalens.mcp.tools.refactor import ChangeMethodSignatureParams

        spec = ToolSpec(
            name="change_method_signature",
            description="Change a signature",
            params_model=ChangeMethodSignatureParams,
            handler=lambda _ctx, _params: None,
        )

        schema = spec.input_schema()

        assert "$ref" not in json.dumps(schema)
        assert "new_parameters" in schema["properties"]

    def test_position_params_forbid_extra(self):
        schema = PositionParams.model_json_schema()

        assert schema["additionalProperties"] is False
        assert set(schema["required"]) == {"file_path", "line", "column"}


class TestToolRegistry:
    """Tests for ToolRegistry singleton."""

    def test_singleton_behavior(self):
        """Registry instances are the same object."""
        assert ToolRegistry() is ToolRegistry()
        assert ToolRegistry() is registry

    def test_register_decorator(self, clean_registry: ToolRegistry):
        """Register decorator adds the tool and returns the handler unchanged."""

        class EchoParams(BaseParams):
            value: str

        async def echo(_ctx, params):
            return {"value": params.value}

        decorated = clean_registry.register("echo", "Echo a value", EchoParams)(echo)

        assert decorated is echo
        spec = clean_registry.get("echo")
        assert spec is not None
        assert spec.params_model is EchoParams
        assert [s.name for s in clean_registry.get_all()] == ["echo"]

    def test_get_unknown_returns_none(self, clean_registry: ToolRegistry):
        assert clean_registry.get("missing") is None

    def test_duplicate_name_rejected(self, clean_registry: ToolRegistry):
        async def first(_ctx, _params):
            return {}

        async def second(_ctx, _params):
            return {}

        clean_registry.register("dup", "First", BaseParams)(first)

        with pytest.raises(ValueError, match="already registered"):
            clean_registry.register("dup", "Second", BaseParams)(second)

    def test_reregistering_same_handler_is_idempotent(self, clean_registry: ToolRegistry):
        async def handler(_ctx, _params):
            return {}

        clean_registry.register("same", "Same", BaseParams)(handler)
        clean_registry.register("same", "Same", BaseParams)(handler)

        assert clean_registry.names() == ["same"]

    def test_clear(self, clean_registry: ToolRegistry):
        clean_registry.register("t", "T", BaseParams)(lambda _ctx, _params: None)

        clean_registry.clear()

        assert clean_registry.get_all() == []


class TestRefactorToolsRegistered:
    def test_all_refactor_tools_present(self):
        """Importing the tools module registers one tool per refactoring."""
        from javalens.mcp.tools import refactor  # noqa: F401

        names = {spec.name for spec in registry.get_all()}

        assert {
            "rename_symbol",
            "change_method_signature",
            "extract_method",
            "extract_variable",
            "extract_constant",
            "inline_variable",
            "inline_method",
            "convert_anonymous_to_lambda",
            "extract_interface",
            "organize_imports",
            "find_references",
        } <= names
