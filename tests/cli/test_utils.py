"""Tests for CLI utilities.

Covers:
- find_project_root() marker detection
- parse_parameter() parsing of --param values
"""

from __future__ import annotations

from pathlib import Path

import click
import pytest

from javalens.cli.utils import find_project_root, parse_parameter


class TestFindProjectRoot:
    def test_finds_maven_root_from_subdirectory(self, tmp_path: Path) -> None:
        (tmp_path / "pom.xml").write_text("<project/>")
        nested = tmp_path / "src" / "main" / "java"
        nested.mkdir(parents=True)

        assert find_project_root(nested) == tmp_path.resolve()

    def test_javalens_dir_is_a_marker(self, tmp_path: Path) -> None:
        (tmp_path / ".javalens").mkdir()
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)

        assert find_project_root(nested) == tmp_path.resolve()

    def test_nearest_marker_wins(self, tmp_path: Path) -> None:
        (tmp_path / "settings.gradle").write_text("")
        module = tmp_path / "core"
        module.mkdir()
        (module / "build.gradle").write_text("")

        assert find_project_root(module) == module.resolve()


class TestParseParameter:
    def test_type_and_name(self) -> None:
        spec = parse_parameter("int count")

        assert (spec.name, spec.type, spec.default_value) == ("count", "int", None)

    def test_generic_type_with_default(self) -> None:
        spec = parse_parameter("Map<String, Integer> index = new HashMap<>()")

        assert spec.name == "index"
        assert spec.type == "Map<String, Integer>"
        assert spec.default_value == "new HashMap<>()"

    @pytest.mark.parametrize("text", ["count", "", "=1"])
    def test_missing_type_rejected(self, text: str) -> None:
        with pytest.raises(click.BadParameter):
            parse_parameter(text)
