"""Tests for config/loader.py module.

Covers:
- _load_yaml() function
- _deep_merge() function
- load_config() precedence
"""

from __future__ import annotations

import os
from pathlib import Path
from unittest.mock import patch

import pytest

from javalens.config.loader import GLOBAL_CONFIG_PATH, _deep_merge, _load_yaml, load_config
from javalens.core.errors import ConfigError, ErrorCode


def _write_project_config(root: Path, text: str) -> None:
    config_dir = root / ".javalens"
    config_dir.mkdir(parents=True, exist_ok=True)
    (config_dir / "config.yaml").write_text(text)


class TestLoadYaml:
    """Tests for _load_yaml function."""

    def test_returns_empty_dict_for_missing_file(self, tmp_path: Path) -> None:
        assert _load_yaml(tmp_path / "nonexistent.yaml") == {}

    def test_loads_valid_yaml(self, tmp_path: Path) -> None:
        yaml_file = tmp_path / "config.yaml"
        yaml_file.write_text("refactor:\n  reference_limit: 50\n")

        assert _load_yaml(yaml_file) == {"refactor": {"reference_limit": 50}}

    def test_returns_empty_for_empty_file(self, tmp_path: Path) -> None:
        yaml_file = tmp_path / "empty.yaml"
        yaml_file.write_text("")

        assert _load_yaml(yaml_file) == {}

    def test_raises_config_error_for_invalid_yaml(self, tmp_path: Path) -> None:
        yaml_file = tmp_path / "bad.yaml"
        yaml_file.write_text("refactor: [unclosed\n")

        with pytest.raises(ConfigError) as exc_info:
            _load_yaml(yaml_file)
        assert exc_info.value.code == ErrorCode.CONFIG_PARSE_ERROR

    def test_raises_config_error_for_non_mapping(self, tmp_path: Path) -> None:
        yaml_file = tmp_path / "list.yaml"
        yaml_file.write_text("- a\n- b\n")

        with pytest.raises(ConfigError, match="mapping"):
            _load_yaml(yaml_file)


class TestDeepMerge:
    """Tests for _deep_merge function."""

    def test_nested_keys_merge(self) -> None:
        base = {"refactor": {"reference_limit": 10, "indent_unit": "  "}}
        override = {"refactor": {"reference_limit": 20}}

        assert _deep_merge(base, override) == {"refactor": {"reference_limit": 20, "indent_unit": "  "}}

    def test_does_not_mutate_base(self) -> None:
        base = {"logging": {"level": "INFO"}}
        _deep_merge(base, {"logging": {"level": "DEBUG"}})
        assert base == {"logging": {"level": "INFO"}}

    def test_scalar_replaces_mapping(self) -> None:
        assert _deep_merge({"a": {"b": 1}}, {"a": 2}) == {"a": 2}


class TestLoadConfig:
    """Tests for load_config precedence."""

    def test_given_no_files_when_load_then_defaults(self, tmp_path: Path) -> None:
        with patch("javalens.config.loader.GLOBAL_CONFIG_PATH", tmp_path / "none.yaml"):
            config = load_config(tmp_path)

        assert config.logging.level == "INFO"
        assert config.refactor.reference_limit == 1000
        assert config.refactor.placeholder_template == "/* TODO: {name} */"
        assert config.project.source_roots == []

    def test_given_project_yaml_when_load_then_applied(self, tmp_path: Path) -> None:
        # Given
        _write_project_config(tmp_path, "refactor:\n  reference_limit: 25\nproject:\n  source_roots: [src/main/java]\n")

        # When
        with patch("javalens.config.loader.GLOBAL_CONFIG_PATH", tmp_path / "none.yaml"):
            config = load_config(tmp_path)

        # Then
        assert config.refactor.reference_limit == 25
        assert config.project.source_roots == ["src/main/java"]

    def test_given_global_and_project_yaml_when_load_then_project_wins(self, tmp_path: Path) -> None:
        # Given
        global_file = tmp_path / "global.yaml"
        global_file.write_text("refactor:\n  reference_limit: 5\n  indent_unit: \"\\t\"\n")
        project = tmp_path / "proj"
        _write_project_config(project, "refactor:\n  reference_limit: 7\n")

        # When
        with patch("javalens.config.loader.GLOBAL_CONFIG_PATH", global_file):
            config = load_config(project)

        # Then
        assert config.refactor.reference_limit == 7
        assert config.refactor.indent_unit == "\t"

    def test_given_env_var_when_load_then_overrides_yaml(self, tmp_path: Path) -> None:
        # Given
        _write_project_config(tmp_path, "logging:\n  level: INFO\n")

        # When
        with (
            patch("javalens.config.loader.GLOBAL_CONFIG_PATH", tmp_path / "none.yaml"),
            patch.dict(os.environ, {"JAVALENS__LOGGING__LEVEL": "WARNING"}),
        ):
            config = load_config(tmp_path)

        # Then
        assert config.logging.level == "WARNING"

    def test_given_kwargs_when_load_then_highest_precedence(self, tmp_path: Path) -> None:
        with (
            patch("javalens.config.loader.GLOBAL_CONFIG_PATH", tmp_path / "none.yaml"),
            patch.dict(os.environ, {"JAVALENS__REFACTOR__REFERENCE_LIMIT": "300"}),
        ):
            config = load_config(tmp_path, refactor={"reference_limit": 42})

        assert config.refactor.reference_limit == 42

    def test_given_invalid_value_when_load_then_config_error(self, tmp_path: Path) -> None:
        # Given
        _write_project_config(tmp_path, "refactor:\n  reference_limit: 0\n")

        # When / Then
        with (
            patch("javalens.config.loader.GLOBAL_CONFIG_PATH", tmp_path / "none.yaml"),
            pytest.raises(ConfigError) as exc_info,
        ):
            load_config(tmp_path)
        assert exc_info.value.code == ErrorCode.CONFIG_INVALID_VALUE
        assert "reference_limit" in exc_info.value.details["field"]

    def test_given_broken_yaml_when_load_then_parse_error(self, tmp_path: Path) -> None:
        _write_project_config(tmp_path, "refactor: {unclosed\n")

        with (
            patch("javalens.config.loader.GLOBAL_CONFIG_PATH", tmp_path / "none.yaml"),
            pytest.raises(ConfigError) as exc_info,
        ):
            load_config(tmp_path)
        assert exc_info.value.code == ErrorCode.CONFIG_PARSE_ERROR


class TestGlobalConfigPath:
    def test_is_expanded_path(self) -> None:
        assert isinstance(GLOBAL_CONFIG_PATH, Path)
        assert "~" not in str(GLOBAL_CONFIG_PATH)
        assert "javalens" in str(GLOBAL_CONFIG_PATH)
