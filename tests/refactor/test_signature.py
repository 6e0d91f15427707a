"""Tests for refactor/signature.py module.

Covers:
- parameter_mapping() name matching
- ChangeSignatureEngine declaration and call-site rewriting
- Placeholders, defaults, nested calls, varargs and method references
"""

from __future__ import annotations

import pytest

from javalens.config.models import RefactorConfig
from javalens.core.errors import InvalidOperationError, SymbolNotFoundError
from javalens.refactor.ops import RefactorOps
from javalens.refactor.signature import ParameterSpec, parameter_mapping

SOURCE = """class Greeter {
    public int f(int a, String b) {
        return a + b.length();
    }

    void use() {
        int r = f(1, "x");
        int s = this.f(2, "yy");
    }
}
"""


class TestParameterMapping:
    def test_reorder_and_add(self) -> None:
        # Given
        new = [ParameterSpec("b", "String"), ParameterSpec("a", "int"), ParameterSpec("flag", "boolean", "true")]

        # When
        mapping = parameter_mapping(["a", "b"], new)

        # Then
        assert mapping == {0: 1, 1: 0}

    def test_removed_parameter_not_mapped(self) -> None:
        assert parameter_mapping(["a", "b"], [ParameterSpec("b", "String")]) == {0: 1}


class TestChangeSignature:
    def test_given_reorder_and_default_when_plan_then_calls_rewritten(
        self, java_project, at, applied, assert_parses
    ) -> None:
        # Given
        project = java_project(SOURCE)
        line, column = at(SOURCE, "f(int")
        params = [
            ParameterSpec("b", "String"),
            ParameterSpec("a", "int"),
            ParameterSpec("flag", "boolean", default_value="true"),
        ]

        # When
        plan = RefactorOps(project).change_signature("src/Main.java", line, column, new_parameters=params)

        # Then
        text = applied(project, plan)["src/Main.java"]
        assert "public int f(String b, int a, boolean flag) {" in text
        assert 'int r = f("x", 1, true);' in text
        assert 'int s = this.f("yy", 2, true);' in text
        assert plan.summary["call_sites_updated"] == 2
        assert plan.summary["new_parameter_count"] == 3
        assert plan.warnings == ()
        assert_parses(text)

    def test_given_rename_and_return_type_when_plan_then_header_replaced(self, java_project, at, applied) -> None:
        project = java_project(SOURCE)
        line, column = at(SOURCE, "f(1")

        plan = RefactorOps(project).change_signature(
            "src/Main.java", line, column, new_name="greet", new_return_type="long"
        )

        text = applied(project, plan)["src/Main.java"]
        assert "public long greet(int a, String b) {" in text
        assert 'int r = greet(1, "x");' in text
        assert plan.summary["old_return_type"] == "int"
        assert plan.summary["new_return_type"] == "long"

    def test_given_new_param_without_default_when_plan_then_placeholder_and_warning(
        self, java_project, at, applied
    ) -> None:
        # Given
        project = java_project(SOURCE)
        line, column = at(SOURCE, "f(int")
        params = [ParameterSpec("a", "int"), ParameterSpec("b", "String"), ParameterSpec("count", "int")]

        # When
        plan = RefactorOps(project).change_signature("src/Main.java", line, column, new_parameters=params)

        # Then
        text = applied(project, plan)["src/Main.java"]
        assert 'f(1, "x", /* TODO: count */)' in text
        assert any("placeholder" in w for w in plan.warnings)

    def test_custom_placeholder_template(self, java_project, at, applied) -> None:
        project = java_project(SOURCE)
        line, column = at(SOURCE, "f(int")
        config = RefactorConfig(placeholder_template="0 /* {name} */")

        plan = RefactorOps(project, config).change_signature(
            "src/Main.java", line, column, new_parameters=[ParameterSpec("a", "int"), ParameterSpec("n", "int")]
        )

        assert "f(1, 0 /* n */)" in applied(project, plan)["src/Main.java"]

    def test_given_removed_parameter_when_plan_then_argument_dropped(self, java_project, at, applied) -> None:
        project = java_project(SOURCE)
        line, column = at(SOURCE, "f(int")

        plan = RefactorOps(project).change_signature(
            "src/Main.java", line, column, new_parameters=[ParameterSpec("b", "String")]
        )

        text = applied(project, plan)["src/Main.java"]
        assert "public int f(String b) {" in text
        assert 'int r = f("x");' in text

    def test_no_parameters(self, java_project, at, applied) -> None:
        project = java_project(SOURCE)
        line, column = at(SOURCE, "f(int")

        plan = RefactorOps(project).change_signature("src/Main.java", line, column, new_parameters=[])

        text = applied(project, plan)["src/Main.java"]
        assert "public int f() {" in text
        assert "int r = f();" in text

    def test_given_annotated_parameters_when_renamed_then_modifiers_kept(self, java_project, at, applied) -> None:
        # Given
        source = """class Flags {
    int f(final int a, @Deprecated String b) {
        return a;
    }
}
"""
        project = java_project(source)
        line, column = at(source, "f(final")

        # When
        plan = RefactorOps(project).change_signature("src/Main.java", line, column, new_name="h")

        # Then
        assert "    int h(final int a, @Deprecated String b) {\n" in applied(project, plan)["src/Main.java"]

    def test_given_retyped_parameter_when_plan_then_modifiers_kept(self, java_project, at, applied) -> None:
        source = """class Flags {
    int f(final int a, @Deprecated String b) {
        return a;
    }
}
"""
        project = java_project(source)
        line, column = at(source, "f(final")

        plan = RefactorOps(project).change_signature(
            "src/Main.java",
            line,
            column,
            new_parameters=[ParameterSpec("b", "CharSequence"), ParameterSpec("a", "int"), ParameterSpec("c", "int")],
        )

        text = applied(project, plan)["src/Main.java"]
        assert "    int f(@Deprecated CharSequence b, final int a, int c) {\n" in text


class TestCallSiteShapes:
    def test_given_nested_calls_when_plan_then_inner_rendered_in_outer(
        self, java_project, at, applied, assert_parses
    ) -> None:
        # Given
        source = """class Nest {
    int f(int a, int b) { return a - b; }

    int use() {
        return f(f(1, 2), 3);
    }
}
"""
        project = java_project(source)
        line, column = at(source, "f(int")

        # When
        plan = RefactorOps(project).change_signature(
            "src/Main.java", line, column, new_parameters=[ParameterSpec("b", "int"), ParameterSpec("a", "int")]
        )

        # Then
        text = applied(project, plan)["src/Main.java"]
        assert "return f(3, f(2, 1));" in text
        assert plan.summary["call_sites_updated"] == 2
        assert_parses(text)

    def test_given_varargs_when_reordered_then_tail_kept_together(self, java_project, at, applied) -> None:
        # Given
        source = """class Log {
    static void log(String fmt, Object... args) {}

    void use() {
        log("%s %s", 1, 2);
    }
}
"""
        project = java_project(source)
        line, column = at(source, "log(String")

        # When
        plan = RefactorOps(project).change_signature(
            "src/Main.java",
            line,
            column,
            new_parameters=[
                ParameterSpec("level", "int", default_value="0"),
                ParameterSpec("fmt", "String"),
                ParameterSpec("args", "Object..."),
            ],
        )

        # Then
        text = applied(project, plan)["src/Main.java"]
        assert "static void log(int level, String fmt, Object... args) {}" in text
        assert 'log(0, "%s %s", 1, 2);' in text

    def test_given_method_reference_when_plan_then_warned(self, java_project, at) -> None:
        source = """import java.util.function.Function;

class Refs {
    static int twice(int x) { return x * 2; }

    void use() {
        Function<Integer, Integer> fn = Refs::twice;
        int y = twice(4);
    }
}
"""
        project = java_project(source)
        line, column = at(source, "twice(int")

        plan = RefactorOps(project).change_signature("src/Main.java", line, column, new_name="doubled")

        assert any("method reference" in w for w in plan.warnings)
        assert plan.summary["call_sites_updated"] == 1

    def test_cross_file_call_sites(self, java_project, at, applied) -> None:
        sources = {
            "src/a/Util.java": (
                "package a;\n\npublic class Util {\n    public static int max(int x, int y) { return x; }\n}\n"
            ),
            "src/b/Client.java": (
                "package b;\n\nimport a.Util;\n\nclass Client {\n    int m() { return Util.max(1, 2); }\n}\n"
            ),
        }
        project = java_project(sources)
        line, column = at(sources["src/a/Util.java"], "max")

        plan = RefactorOps(project).change_signature(
            "src/a/Util.java", line, column, new_parameters=[ParameterSpec("y", "int"), ParameterSpec("x", "int")]
        )

        result = applied(project, plan)
        assert "return Util.max(2, 1);" in result["src/b/Client.java"]
        assert plan.files_affected == 2

    def test_given_dropped_argument_with_nested_call_when_plan_then_only_emitted_placeholders_counted(
        self, java_project, at, applied
    ) -> None:
        # Given
        source = """class Nest {
    int f(int a, int b) { return a - b; }

    int use() {
        return f(1, f(2, 3));
    }
}
"""
        project = java_project(source)
        line, column = at(source, "f(int")

        # When
        plan = RefactorOps(project).change_signature(
            "src/Main.java", line, column, new_parameters=[ParameterSpec("a", "int"), ParameterSpec("c", "int")]
        )

        # Then
        assert "return f(1, /* TODO: c */);" in applied(project, plan)["src/Main.java"]
        assert any(w.startswith("1 argument(s) have no value") for w in plan.warnings)


class TestChangeSignatureErrors:
    def test_no_changes_rejected(self, java_project, at) -> None:
        project = java_project(SOURCE)
        line, column = at(SOURCE, "f(int")

        with pytest.raises(InvalidOperationError) as exc_info:
            RefactorOps(project).change_signature("src/Main.java", line, column)
        assert exc_info.value.details["param"] == "changes"

    def test_duplicate_parameter_names_rejected(self, java_project, at) -> None:
        project = java_project(SOURCE)
        line, column = at(SOURCE, "f(int")

        with pytest.raises(InvalidOperationError, match="Duplicate parameter name 'a'"):
            RefactorOps(project).change_signature(
                "src/Main.java", line, column, new_parameters=[ParameterSpec("a", "int"), ParameterSpec("a", "long")]
            )

    def test_blank_parameter_type_rejected(self, java_project, at) -> None:
        project = java_project(SOURCE)
        line, column = at(SOURCE, "f(int")

        with pytest.raises(InvalidOperationError, match="must have a type"):
            RefactorOps(project).change_signature(
                "src/Main.java", line, column, new_parameters=[ParameterSpec("a", " ")]
            )

    def test_non_method_position_rejected(self, java_project, at) -> None:
        project = java_project(SOURCE)
        line, column = at(SOURCE, "Greeter")

        with pytest.raises(SymbolNotFoundError, match="No method"):
            RefactorOps(project).change_signature("src/Main.java", line, column, new_name="other")

    def test_constructor_rejected(self, java_project, at) -> None:
        source = "class Point {\n    Point(int x) {}\n}\n"
        project = java_project(source)
        line, column = at(source, "Point(int")

        with pytest.raises(InvalidOperationError, match="constructor"):
            RefactorOps(project).change_signature("src/Main.java", line, column, new_parameters=[])
