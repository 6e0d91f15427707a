"""Tests for core/progress.py module."""

from __future__ import annotations

import io

import pytest
from rich.console import Console

from javalens.core import progress
from javalens.core.progress import get_console, is_console_suppressed, spinner, status


@pytest.fixture
def captured_console(monkeypatch: pytest.MonkeyPatch) -> io.StringIO:
    """Route the shared console into a buffer."""
    buffer = io.StringIO()
    monkeypatch.setattr(progress, "_console", Console(file=buffer, force_terminal=False, width=120))
    return buffer


class TestStatus:
    def test_success_prefix(self, captured_console: io.StringIO) -> None:
        status("Plan ready", style="success")
        assert captured_console.getvalue() == "✓ Plan ready\n"

    def test_error_prefix(self, captured_console: io.StringIO) -> None:
        status("No symbol", style="error")
        assert captured_console.getvalue() == "✗ No symbol\n"

    def test_indent_and_default_style(self, captured_console: io.StringIO) -> None:
        status("detail", indent=2)
        assert captured_console.getvalue() == "    detail\n"

    def test_unknown_style_has_no_prefix(self, captured_console: io.StringIO) -> None:
        status("plain", style="bogus")
        assert captured_console.getvalue() == "plain\n"


class TestSpinner:
    def test_given_non_tty_when_spinner_then_plain_line(
        self, captured_console: io.StringIO, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        # Given
        monkeypatch.setattr(progress, "_is_tty", lambda: False)

        # When
        with spinner("Indexing demo"):
            inside = is_console_suppressed()

        # Then
        assert captured_console.getvalue() == "Indexing demo...\n"
        assert inside is False

    def test_shared_console_writes_to_stderr(self) -> None:
        assert get_console().stderr is True
