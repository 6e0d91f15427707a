"""Tests for refactor/extract_method.py module."""

from __future__ import annotations

import pytest

from javalens.core.errors import InvalidOperationError
from javalens.refactor.ops import RefactorOps

REPORT = """class Report {
    int build(int base, int factor) {
        int scaled = base * factor;
        int bonus = scaled / 10;
        scaled += bonus;
        return scaled;
    }
}
"""

GRID = """class Grid {
    int firstRows(int[][] g) {
        int row = 0;
        outer:
        for (int[] r : g) {
            for (int v : r) {
                if (v < 0) {
                    break outer;
                }
            }
            row++;
        }
        return row;
    }
}
"""


def span(at, text: str, first: str, last: str) -> tuple[int, int, int, int]:
    """Selection from the start of ``first`` to the end of ``last``."""
    return (*at(text, first), *at(text, last, shift=len(last)))


class TestExtractMethod:
    def test_given_modified_variable_when_extract_then_parameter_and_return(
        self, java_project, at, applied, assert_parses
    ) -> None:
        # Given
        project = java_project(REPORT)

        # When
        plan = RefactorOps(project).extract_method(
            "src/Main.java", *span(at, REPORT, "int bonus", "scaled += bonus;"), "addBonus"
        )

        # Then
        text = applied(project, plan)["src/Main.java"]
        assert text == (
            "class Report {\n"
            "    int build(int base, int factor) {\n"
            "        int scaled = base * factor;\n"
            "        scaled = addBonus(scaled);\n"
            "        return scaled;\n"
            "    }\n"
            "\n"
            "    private int addBonus(int scaled) {\n"
            "        int bonus = scaled / 10;\n"
            "        scaled += bonus;\n"
            "        return scaled;\n"
            "    }\n"
            "}\n"
        )
        assert plan.summary["parameters"] == [{"name": "scaled", "type": "int"}]
        assert plan.summary["return_variable"] == "scaled"
        assert plan.summary["statements_extracted"] == 2
        assert_parses(text)

    def test_given_declared_variable_used_after_when_extract_then_declared_at_call(
        self, java_project, at, applied
    ) -> None:
        # Given
        source = """class Calc {
    void run() {
        int a = 1;
        int b = a + 1;
        System.out.println(b);
    }
}
"""
        project = java_project(source)

        # When
        plan = RefactorOps(project).extract_method(
            "src/Main.java", *span(at, source, "int b", "a + 1;"), "nextOf"
        )

        # Then
        text = applied(project, plan)["src/Main.java"]
        assert "        int b = nextOf(a);\n" in text
        assert "    private int nextOf(int a) {\n        int b = a + 1;\n        return b;\n    }" in text
        assert plan.summary["return_type"] == "int"

    def test_given_no_outputs_when_extract_then_void(self, java_project, at, applied) -> None:
        source = """class Printer {
    void show(String msg) {
        String framed = "[" + msg + "]";
        System.out.println(framed);
    }
}
"""
        project = java_project(source)

        plan = RefactorOps(project).extract_method(
            "src/Main.java", *span(at, source, "String framed", "println(framed);"), "frame"
        )

        text = applied(project, plan)["src/Main.java"]
        assert "        frame(msg);\n" in text
        assert "private void frame(String msg) {" in text
        assert plan.summary["return_variable"] is None

    def test_given_static_method_when_extract_then_static_helper(self, java_project, at, applied) -> None:
        source = """class Util {
    static int twice(int x) {
        int y = x * 2;
        return y;
    }
}
"""
        project = java_project(source)

        plan = RefactorOps(project).extract_method("src/Main.java", *span(at, source, "int y", "x * 2;"), "doubled")

        assert "private static int doubled(int x) {" in applied(project, plan)["src/Main.java"]
        assert plan.summary["is_static"] is True

    def test_given_throws_clause_when_extract_then_copied(self, java_project, at, applied) -> None:
        source = """import java.io.IOException;

class Loader {
    void load(String path) throws IOException {
        String trimmed = path.trim();
        check(trimmed);
    }

    void check(String p) throws IOException {}
}
"""
        project = java_project(source)

        plan = RefactorOps(project).extract_method(
            "src/Main.java", *span(at, source, "String trimmed", "check(trimmed);"), "prepare"
        )

        assert "private void prepare(String path) throws IOException {" in applied(project, plan)["src/Main.java"]

    def test_given_loop_with_inner_break_when_extract_then_allowed(self, java_project, at) -> None:
        source = """class Search {
    int find(int[] xs) {
        int found = -1;
        for (int i = 0; i < xs.length; i++) {
            if (xs[i] == 0) {
                found = i;
                break;
            }
        }
        return found;
    }
}
"""
        project = java_project(source)

        plan = RefactorOps(project).extract_method(
            "src/Main.java", *span(at, source, "for (int i", "        }\n        }"), "scan"
        )

        assert plan.summary["return_variable"] == "found"
        assert [p["name"] for p in plan.summary["parameters"]] == ["xs", "found"]

    def test_given_two_outputs_when_extract_then_warns_incomplete(self, java_project, at) -> None:
        # Given
        source = """class Stats {
    int mean(int[] xs) {
        int total = 0;
        int count = 0;
        for (int x : xs) {
            total += x;
            count++;
        }
        return total / count;
    }
}
"""
        project = java_project(source)

        # When
        plan = RefactorOps(project).extract_method(
            "src/Main.java", *span(at, source, "for (int x", "count++;\n        }"), "accumulate"
        )

        # Then
        assert plan.summary["return_variable"] == "total"
        assert any("semantically incomplete" in w for w in plan.warnings)

    def test_given_generic_method_when_extract_then_type_parameters_copied(
        self, java_project, at, applied, assert_parses
    ) -> None:
        # Given
        source = """import java.util.List;

class Bag {
    static <T> int tally(List<T> xs, int n) {
        int size = xs.size() + n;
        return size;
    }
}
"""
        project = java_project(source)

        # When
        plan = RefactorOps(project).extract_method(
            "src/Main.java", *span(at, source, "int size", "xs.size() + n;"), "sized"
        )

        # Then
        text = applied(project, plan)["src/Main.java"]
        assert "    private static <T> int sized(List<T> xs, int n) {\n" in text
        assert "        int size = sized(xs, n);\n" in text
        assert_parses(text)

    def test_given_whole_labeled_loop_when_extract_then_labeled_break_allowed(self, java_project, at) -> None:
        source = GRID

        plan = RefactorOps(java_project(source)).extract_method(
            "src/Main.java", *span(at, source, "outer:", "row++;\n        }"), "countRows"
        )

        assert plan.summary["return_variable"] == "row"


class TestExtractMethodErrors:
    def test_return_in_selection_rejected(self, java_project, at) -> None:
        project = java_project(REPORT)

        with pytest.raises(InvalidOperationError, match="contains return"):
            RefactorOps(project).extract_method(
                "src/Main.java", *span(at, REPORT, "scaled += bonus;", "return scaled;"), "finish"
            )

    def test_escaping_break_rejected(self, java_project, at) -> None:
        source = """class Loop {
    void run(int n) {
        while (n > 0) {
            n--;
            break;
        }
    }
}
"""
        project = java_project(source)

        with pytest.raises(InvalidOperationError, match="break"):
            RefactorOps(project).extract_method("src/Main.java", *span(at, source, "n--;", "break;"), "step")

    def test_partial_statement_rejected(self, java_project, at) -> None:
        project = java_project(REPORT)

        with pytest.raises(InvalidOperationError, match="complete statements"):
            RefactorOps(project).extract_method(
                "src/Main.java", *span(at, REPORT, "scaled / 10", "scaled += bonus;"), "part"
            )

    def test_existing_method_with_same_arity_rejected(self, java_project, at) -> None:
        source = REPORT.replace("    }\n}\n", "    }\n\n    int addBonus(int v) { return v; }\n}\n")
        project = java_project(source)

        with pytest.raises(InvalidOperationError, match="already declares addBonus with 1 parameter"):
            RefactorOps(project).extract_method(
                "src/Main.java", *span(at, source, "int bonus", "scaled += bonus;"), "addBonus"
            )

    def test_invalid_method_name_rejected(self, java_project, at) -> None:
        project = java_project(REPORT)

        with pytest.raises(InvalidOperationError) as exc_info:
            RefactorOps(project).extract_method(
                "src/Main.java", *span(at, REPORT, "int bonus", "scaled += bonus;"), "new"
            )
        assert exc_info.value.details["param"] == "method_name"

    def test_labeled_break_leaving_selection_rejected(self, java_project, at) -> None:
        project = java_project(GRID)

        with pytest.raises(InvalidOperationError, match="break"):
            RefactorOps(project).extract_method(
                "src/Main.java",
                *span(at, GRID, "for (int v", "break outer;\n                }\n            }"),
                "scanRow",
            )
