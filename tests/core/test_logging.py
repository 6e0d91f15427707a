"""Tests for structured logging."""

import json
import logging
from pathlib import Path

import pytest
import structlog

from javalens.config.models import LoggingConfig, LogOutputConfig
from javalens.core.logging import (
    ConsoleSuppressingFilter,
    clear_request_id,
    configure_logging,
    get_logger,
    get_request_id,
    set_request_id,
)
from javalens.core.progress import suppress_console_logs
from javalens.refactor.ops import RefactorOps


class TestRequestIdCorrelation:
    """Request ID context variable tests."""

    def setup_method(self) -> None:
        clear_request_id()

    def test_given_request_id_when_set_then_can_retrieve(self) -> None:
        # Given
        request_id = "req-42"

        # When
        result = set_request_id(request_id)

        # Then
        assert result == request_id
        assert get_request_id() == request_id

    def test_given_no_id_when_set_then_generates_hex_id(self) -> None:
        rid = set_request_id()
        assert len(rid) == 12

    def test_given_set_id_when_clear_then_removes_id(self) -> None:
        # Given
        set_request_id("to-clear")

        # When
        clear_request_id()

        # Then
        assert get_request_id() is None


class TestLoggingConfiguration:
    """Logging configuration tests."""

    def setup_method(self) -> None:
        structlog.reset_defaults()
        logging.getLogger().handlers.clear()

    def teardown_method(self) -> None:
        clear_request_id()
        logging.getLogger().handlers.clear()

    def test_given_file_output_when_log_then_json_lines(self, tmp_path: Path) -> None:
        """JSON output carries event, level, timestamp and bound keys."""
        # Given
        log_file = tmp_path / "logs" / "javalens.log"
        config = LoggingConfig(level="INFO", outputs=[LogOutputConfig(format="json", destination=str(log_file))])
        configure_logging(config=config)

        # When
        get_logger("test").info("rename_planned", edits=3)

        # Then
        data = json.loads(log_file.read_text().strip().splitlines()[-1])
        assert data["event"] == "rename_planned"
        assert data["edits"] == 3
        assert data["level"] == "info"
        assert data["logger"] == "test"
        assert "timestamp" in data

    def test_given_request_id_when_log_then_included(self, tmp_path: Path) -> None:
        # Given
        log_file = tmp_path / "req.log"
        configure_logging(config=LoggingConfig(outputs=[LogOutputConfig(format="json", destination=str(log_file))]))
        set_request_id("abc123")

        # When
        get_logger().info("tool_start")

        # Then
        data = json.loads(log_file.read_text().strip().splitlines()[-1])
        assert data["request_id"] == "abc123"

    def test_given_config_object_when_configure_then_takes_precedence(self, tmp_path: Path) -> None:
        # Given
        log_file = tmp_path / "test.log"
        config = LoggingConfig(
            level="DEBUG",
            outputs=[LogOutputConfig(format="json", destination=str(log_file))],
        )

        # When - config's DEBUG overrides the level="ERROR" param
        configure_logging(config=config, level="ERROR")
        get_logger().debug("debug msg")

        # Then
        assert "debug msg" in log_file.read_text()

    def test_given_multi_output_config_when_configure_then_levels_apply_per_output(self, tmp_path: Path) -> None:
        # Given
        debug_file = tmp_path / "debug.log"
        info_file = tmp_path / "info.log"
        config = LoggingConfig(
            level="DEBUG",
            outputs=[
                LogOutputConfig(format="json", destination=str(info_file), level="INFO"),
                LogOutputConfig(format="json", destination=str(debug_file)),
            ],
        )

        # When
        configure_logging(config=config)
        logger = get_logger()
        logger.debug("debug only")
        logger.info("info msg")

        # Then
        info_content = info_file.read_text()
        assert "info msg" in info_content
        assert "debug only" not in info_content
        debug_content = debug_file.read_text()
        assert "debug only" in debug_content
        assert "info msg" in debug_content

    def test_given_console_output_when_configure_then_filter_attached(self) -> None:
        # When
        configure_logging(level="INFO")

        # Then
        handlers = logging.getLogger().handlers
        assert len(handlers) == 1
        assert any(isinstance(f, ConsoleSuppressingFilter) for f in handlers[0].filters)

    def test_given_logger_created_before_configure_when_log_then_follows_config(self, tmp_path: Path) -> None:
        # Given
        early = get_logger("javalens.early")
        log_file = tmp_path / "late.log"

        # When
        configure_logging(config=LoggingConfig(outputs=[LogOutputConfig(format="json", destination=str(log_file))]))
        early.info("configured_later")

        # Then
        data = json.loads(log_file.read_text().strip().splitlines()[-1])
        assert data["event"] == "configured_later"
        assert data["logger"] == "javalens.early"

    def test_given_warning_level_when_engine_runs_then_stdout_stays_empty(
        self, java_project, at, capsys: pytest.CaptureFixture[str]
    ) -> None:
        # Given
        configure_logging(level="WARNING")
        source = "class A {\n    int f(int x) { return x; }\n}\n"
        project = java_project(source)
        line, column = at(source, "x")

        # When
        RefactorOps(project).rename("src/Main.java", line, column, "y")

        # Then
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "rename_planned" not in captured.err
        assert "unit_bound" not in captured.err


class TestConsoleSuppression:
    """ConsoleSuppressingFilter follows the progress display state."""

    def _record(self) -> logging.LogRecord:
        return logging.LogRecord("x", logging.INFO, __file__, 1, "msg", None, None)

    def test_given_no_display_when_filter_then_passes(self) -> None:
        assert ConsoleSuppressingFilter().filter(self._record()) is True

    def test_given_active_display_when_filter_then_blocks(self) -> None:
        # Given
        log_filter = ConsoleSuppressingFilter()

        # When
        with suppress_console_logs():
            blocked = log_filter.filter(self._record())

        # Then
        assert blocked is False
        assert log_filter.filter(self._record()) is True

    def test_given_suppression_when_exception_then_restored(self) -> None:
        with pytest.raises(RuntimeError), suppress_console_logs():
            raise RuntimeError("boom")
        assert ConsoleSuppressingFilter().filter(self._record()) is True
