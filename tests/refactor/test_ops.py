"""Tests for refactor/ops.py module (find_references and the result shapes)."""

from __future__ import annotations

from javalens.config.models import RefactorConfig
from javalens.refactor.ops import RefactorOps

SOURCES = {
    "src/lib/Box.java": (
        "package lib;\n\n"
        "public class Box {\n"
        "    public int weight;\n"
        "    public int heavier(int by) { return weight + by; }\n"
        "}\n"
    ),
    "src/app/Depot.java": (
        "package app;\n\n"
        "import lib.Box;\n\n"
        "class Depot {\n"
        "    int load(Box a, Box b) {\n"
        "        return a.weight + b.weight;\n"
        "    }\n"
        "}\n"
    ),
}


class TestFindReferences:
    def test_given_field_when_find_then_all_files_listed(self, java_project, at) -> None:
        # Given
        project = java_project(SOURCES)
        line, column = at(SOURCES["src/lib/Box.java"], "weight")

        # When
        result = RefactorOps(project).find_references("src/lib/Box.java", line, column)

        # Then
        assert result.symbol == "weight"
        assert result.kind == "field"
        assert result.key == "field:lib.Box#weight"
        assert len(result.references) == 4
        assert result.files == ["src/app/Depot.java", "src/lib/Box.java"]
        assert not result.truncated

    def test_declaration_and_line_text(self, java_project, at) -> None:
        project = java_project(SOURCES)
        line, column = at(SOURCES["src/app/Depot.java"], "weight")

        result = RefactorOps(project).find_references("src/app/Depot.java", line, column)

        declaration = next(r for r in result.references if r.is_declaration)
        assert declaration.path == "src/lib/Box.java"
        assert (declaration.line, declaration.column) == (3, 15)
        assert declaration.line_text == "public int weight;"

    def test_limit_truncates(self, java_project, at) -> None:
        project = java_project(SOURCES)
        line, column = at(SOURCES["src/lib/Box.java"], "weight")

        result = RefactorOps(project).find_references("src/lib/Box.java", line, column, limit=2)

        assert len(result.references) == 2
        assert result.truncated

    def test_config_limit_is_default(self, java_project, at) -> None:
        project = java_project(SOURCES)
        line, column = at(SOURCES["src/lib/Box.java"], "weight")

        result = RefactorOps(project, RefactorConfig(reference_limit=3)).find_references(
            "src/lib/Box.java", line, column
        )

        assert len(result.references) == 3
        assert result.truncated

    def test_to_dict(self, java_project, at) -> None:
        project = java_project(SOURCES)
        line, column = at(SOURCES["src/lib/Box.java"], "by")

        data = RefactorOps(project).find_references("src/lib/Box.java", line, column).to_dict()

        assert data["symbol"] == "by"
        assert data["kind"] == "parameter"
        assert data["total"] == 2
        assert data["truncated"] is False
        assert [r["is_declaration"] for r in data["references"]] == [True, False]
        assert set(data["references"][0]) == {"path", "line", "column", "offset", "is_declaration", "line_text"}
