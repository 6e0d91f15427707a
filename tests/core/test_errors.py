"""Tests for core/errors.py module."""

from __future__ import annotations

import pytest

from javalens.core.errors import (
    ConfigError,
    ErrorCode,
    InternalError,
    InvalidOperationError,
    JavaLensError,
    RefactorError,
    StaleSourceError,
    SymbolNotFoundError,
)


class TestErrorCodes:
    """Error code ranges."""

    @pytest.mark.parametrize(
        "code",
        [
            ErrorCode.SYMBOL_NOT_FOUND,
            ErrorCode.INVALID_OPERATION,
            ErrorCode.STALE_SOURCE,
            ErrorCode.EDIT_CONFLICT,
            ErrorCode.INVALID_POSITION,
            ErrorCode.FILE_NOT_FOUND,
        ],
    )
    def test_refactor_codes_in_4xxx(self, code: ErrorCode) -> None:
        assert 4000 <= code.value < 5000

    def test_config_codes_in_2xxx(self) -> None:
        assert all(2000 <= c.value < 3000 for c in ErrorCode if c.name.startswith("CONFIG_"))


class TestJavaLensError:
    """Base error behaviour."""

    def test_given_error_when_to_dict_then_structured(self) -> None:
        """Serialized error carries code, name, message and details."""
        # Given
        error = SymbolNotFoundError.at_position("src/A.java", 3, 7)

        # When
        data = error.to_dict()

        # Then
        assert data == {
            "code": 4001,
            "error": "SYMBOL_NOT_FOUND",
            "message": "No symbol at src/A.java:3:7",
            "retryable": False,
            "details": {"path": "src/A.java", "line": 3, "column": 7, "expected": "symbol"},
        }

    def test_given_error_when_str_then_includes_code_and_name(self) -> None:
        error = InvalidOperationError.precondition("Nope")
        assert str(error) == "[4002] INVALID_OPERATION: Nope"

    def test_errors_are_exceptions(self) -> None:
        with pytest.raises(JavaLensError):
            raise InvalidOperationError.precondition("boom")

    def test_refactor_errors_share_base(self) -> None:
        assert issubclass(SymbolNotFoundError, RefactorError)
        assert issubclass(InvalidOperationError, RefactorError)
        assert issubclass(StaleSourceError, RefactorError)
        assert not issubclass(ConfigError, RefactorError)


class TestFactories:
    """Named constructors."""

    def test_at_position_names_expected_kind(self) -> None:
        error = SymbolNotFoundError.at_position("A.java", 1, 2, what="method")
        assert error.message == "No method at A.java:1:2"
        assert error.details["expected"] == "method"

    def test_file_not_found(self) -> None:
        error = SymbolNotFoundError.file_not_found("missing/B.java")
        assert error.code == ErrorCode.FILE_NOT_FOUND
        assert error.details == {"path": "missing/B.java"}

    def test_precondition_keeps_details(self) -> None:
        error = InvalidOperationError.precondition("Bad", symbol="x")
        assert error.message == "Bad"
        assert error.details == {"symbol": "x"}

    def test_invalid_parameter(self) -> None:
        error = InvalidOperationError.invalid_parameter("new_name", "Same as current name")
        assert error.message == "Invalid parameter 'new_name': Same as current name"
        assert error.code == ErrorCode.INVALID_OPERATION

    def test_invalid_position(self) -> None:
        error = InvalidOperationError.invalid_position(9, 4, "past end of file")
        assert error.code == ErrorCode.INVALID_POSITION
        assert error.details == {"line": 9, "column": 4, "reason": "past end of file"}

    def test_overlapping_edits(self) -> None:
        error = InvalidOperationError.overlapping_edits("A.java", (0, 5), (3, 8))
        assert error.code == ErrorCode.EDIT_CONFLICT
        assert "[0, 5)" in error.message
        assert error.details["second"] == [3, 8]

    def test_stale_source_is_retryable(self) -> None:
        error = StaleSourceError.mismatch("A.java", 4, 7, "foo", "bar")
        assert error.retryable is True
        assert error.details["expected"] == "foo"
        assert error.details["actual"] == "bar"

    def test_config_invalid_value(self) -> None:
        error = ConfigError.invalid_value("refactor.reference_limit", 0, "must be positive")
        assert error.code == ErrorCode.CONFIG_INVALID_VALUE
        assert error.details["value"] == "0"

    def test_config_parse_error(self) -> None:
        error = ConfigError.parse_error("/x/config.yaml", "bad indent")
        assert error.code == ErrorCode.CONFIG_PARSE_ERROR
        assert "/x/config.yaml" in error.message

    def test_internal_unexpected(self) -> None:
        error = InternalError.unexpected("parser crashed", path="A.java")
        assert error.message == "Internal error: parser crashed"
        assert error.details == {"path": "A.java"}
