"""Tests for MCP errors module."""

from __future__ import annotations

from fastmcp.exceptions import ToolError

from javalens.core.errors import ConfigError, InvalidOperationError, StaleSourceError, SymbolNotFoundError
from javalens.mcp.errors import REMEDIATION, ErrorResponse, MCPError, MCPErrorCode


class TestMCPErrorCode:
    def test_all_codes_have_unique_values(self):
        values = [code.value for code in MCPErrorCode]
        assert len(values) == len(set(values))

    def test_every_code_has_remediation(self):
        assert set(REMEDIATION) == set(MCPErrorCode)


class TestErrorResponse:
    def test_to_dict(self):
        resp = ErrorResponse(
            code=MCPErrorCode.INVALID_POSITION,
            message="bad position",
            remediation="fix it",
            path="src/A.java",
            context={"line": 3},
        )

        assert resp.to_dict() == {
            "code": "INVALID_POSITION",
            "message": "bad position",
            "remediation": "fix it",
            "path": "src/A.java",
            "context": {"line": 3},
        }


class TestMCPError:
    def test_is_tool_error(self):
        error = MCPError(MCPErrorCode.INTERNAL_ERROR, "boom")

        assert isinstance(error, ToolError)
        assert error.remediation == REMEDIATION[MCPErrorCode.INTERNAL_ERROR]

    def test_explicit_remediation_wins(self):
        error = MCPError(MCPErrorCode.INVALID_PARAMS, "bad", remediation="custom")

        assert error.to_response().remediation == "custom"

    def test_from_symbol_not_found(self):
        # Given
        domain = SymbolNotFoundError.at_position("src/A.java", 2, 4)

        # When
        error = MCPError.from_domain(domain)

        # Then
        assert error.code == MCPErrorCode.SYMBOL_NOT_FOUND
        assert error.path == "src/A.java"
        assert error.context["error_code"] == 4001
        assert error.context["retryable"] is False
        assert error.context["line"] == 2
        assert "path" not in error.context

    def test_from_precondition_keeps_details(self):
        domain = InvalidOperationError.precondition("nope", name="x", code="ignored")

        error = MCPError.from_domain(domain)

        assert error.code == MCPErrorCode.INVALID_OPERATION
        assert error.message == "nope"
        assert error.context["name"] == "x"
        assert error.context["error_code"] == 4002

    def test_from_stale_source_is_retryable(self):
        domain = StaleSourceError.mismatch("src/A.java", 0, 1, "a", "b")

        error = MCPError.from_domain(domain)

        assert error.code == MCPErrorCode.STALE_SOURCE
        assert error.context["retryable"] is True

    def test_config_errors_collapse(self):
        error = MCPError.from_domain(ConfigError.missing_required("project.root"))

        assert error.code == MCPErrorCode.CONFIG_ERROR
