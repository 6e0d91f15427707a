"""Tests for refactor/rename.py module."""

from __future__ import annotations

from collections.abc import Callable

import pytest

from javalens.core.errors import ErrorCode, InvalidOperationError, SymbolNotFoundError
from javalens.refactor.ops import RefactorOps
from javalens.refactor.rename import TYPE_RENAME_NOTE

SHADOWED = """class Account {
    int balance;

    void deposit(int amount) {
        int balance = amount;
        this.balance += balance;
    }

    int total() {
        return balance;
    }
}
"""


class TestRenameLocal:
    """Renaming one identity leaves same-named declarations alone."""

    def test_given_shadowing_local_when_rename_then_field_untouched(
        self, java_project, at, applied, assert_parses
    ) -> None:
        # Given
        project = java_project(SHADOWED)
        line, column = at(SHADOWED, "balance", occurrence=1)

        # When
        plan = RefactorOps(project).rename("src/Main.java", line, column, "incoming")

        # Then
        text = applied(project, plan)["src/Main.java"]
        assert "int incoming = amount;" in text
        assert "this.balance += incoming;" in text
        assert "int balance;" in text
        assert "return balance;" in text
        assert plan.summary["symbol_kind"] == "local"
        assert_parses(text)

    def test_given_field_when_rename_then_local_untouched(self, java_project, at, applied) -> None:
        # Given
        project = java_project(SHADOWED)
        line, column = at(SHADOWED, "balance")

        # When
        plan = RefactorOps(project).rename("src/Main.java", line, column, "funds")

        # Then
        text = applied(project, plan)["src/Main.java"]
        assert "int funds;" in text
        assert "this.funds += balance;" in text
        assert "int balance = amount;" in text
        assert "return funds;" in text
        assert plan.total_edits == 3

    def test_declaration_edit_flagged(self, java_project, at) -> None:
        project = java_project(SHADOWED)
        line, column = at(SHADOWED, "balance")

        plan = RefactorOps(project).rename("src/Main.java", line, column, "funds")

        flags = [e.is_declaration for e in plan.edits]
        assert flags.count(True) == 1


class TestRenameMethod:
    SOURCES = {
        "src/shop/Cart.java": (
            "package shop;\n\n"
            "public class Cart {\n"
            "    public int size() { return 0; }\n"
            "    public int size(int extra) { return extra; }\n"
            "}\n"
        ),
        "src/shop/Checkout.java": (
            "package shop;\n\n"
            "class Checkout {\n"
            "    int count(Cart cart) {\n"
            "        return cart.size() + cart.size(2);\n"
            "    }\n"
            "}\n"
        ),
    }

    def test_given_overload_when_rename_then_only_that_overload_changes(self, java_project, at, applied) -> None:
        # Given
        project = java_project(self.SOURCES)
        line, column = at(self.SOURCES["src/shop/Cart.java"], "size")

        # When
        plan = RefactorOps(project).rename("src/shop/Cart.java", line, column, "itemCount")

        # Then
        result = applied(project, plan)
        assert "public int itemCount() { return 0; }" in result["src/shop/Cart.java"]
        assert "public int size(int extra)" in result["src/shop/Cart.java"]
        assert "cart.itemCount() + cart.size(2)" in result["src/shop/Checkout.java"]
        assert plan.files_affected == 2
        assert plan.summary == {"old_name": "size", "new_name": "itemCount", "symbol_kind": "method"}

    def test_rename_from_call_site(self, java_project, at, applied) -> None:
        project = java_project(self.SOURCES)
        line, column = at(self.SOURCES["src/shop/Checkout.java"], "size(2)")

        plan = RefactorOps(project).rename("src/shop/Checkout.java", line, column, "sizeWith")

        result = applied(project, plan)
        assert "public int sizeWith(int extra)" in result["src/shop/Cart.java"]
        assert "cart.size() + cart.sizeWith(2)" in result["src/shop/Checkout.java"]


class TestRenameType:
    SOURCES = {
        "src/app/Engine.java": (
            "package app;\n\n"
            "public class Engine {\n"
            "    public Engine() {}\n"
            "    static Engine create() { return new Engine(); }\n"
            "}\n"
        ),
        "src/app/Car.java": "package app;\n\nclass Car {\n    Engine engine = Engine.create();\n}\n",
    }

    def test_given_class_when_rename_then_constructors_and_uses_follow(
        self, java_project, at, applied, assert_parses
    ) -> None:
        # Given
        project = java_project(self.SOURCES)
        line, column = at(self.SOURCES["src/app/Engine.java"], "Engine")

        # When
        plan = RefactorOps(project).rename("src/app/Engine.java", line, column, "Motor")

        # Then
        result = applied(project, plan)
        engine = result["src/app/Engine.java"]
        assert "public class Motor {" in engine
        assert "public Motor() {}" in engine
        assert "static Motor create() { return new Motor(); }" in engine
        assert "Motor engine = Motor.create();" in result["src/app/Car.java"]
        assert plan.summary["note"] == TYPE_RENAME_NOTE
        for text in result.values():
            assert_parses(text)


class TestRenameErrors:
    def test_same_name_rejected(self, java_project, at) -> None:
        project = java_project(SHADOWED)
        line, column = at(SHADOWED, "balance")

        with pytest.raises(InvalidOperationError, match="Same as current name"):
            RefactorOps(project).rename("src/Main.java", line, column, "balance")

    @pytest.mark.parametrize("name", ["class", "1abc", "has space", ""])
    def test_invalid_identifier_rejected(self, java_project, at, name: str) -> None:
        project = java_project(SHADOWED)
        line, column = at(SHADOWED, "balance")

        with pytest.raises(InvalidOperationError) as exc_info:
            RefactorOps(project).rename("src/Main.java", line, column, name)
        assert exc_info.value.details["param"] == "new_name"

    def test_position_on_keyword_is_symbol_not_found(self, java_project, at) -> None:
        project = java_project(SHADOWED)
        line, column = at(SHADOWED, "return")

        with pytest.raises(SymbolNotFoundError) as exc_info:
            RefactorOps(project).rename("src/Main.java", line, column, "other")
        assert exc_info.value.code == ErrorCode.SYMBOL_NOT_FOUND

    def test_position_outside_file_is_invalid_position(self, java_project) -> None:
        project = java_project(SHADOWED)

        with pytest.raises(InvalidOperationError) as exc_info:
            RefactorOps(project).rename("src/Main.java", 400, 0, "other")
        assert exc_info.value.code == ErrorCode.INVALID_POSITION

    def test_unknown_file(self, java_project) -> None:
        project = java_project(SHADOWED)

        with pytest.raises(SymbolNotFoundError) as exc_info:
            RefactorOps(project).rename("src/Nope.java", 0, 0, "other")
        assert exc_info.value.code == ErrorCode.FILE_NOT_FOUND


class TestRenameProperties:
    """Renaming preserves identity: every old reference now spells the new name."""

    def test_references_after_rename_match_before(self, java_project, at, applied) -> None:
        # Given
        project = java_project(SHADOWED)
        line, column = at(SHADOWED, "balance")
        ops = RefactorOps(project)
        before = ops.find_references("src/Main.java", line, column)

        # When
        plan = ops.rename("src/Main.java", line, column, "funds")
        renamed = java_project(applied(project, plan)["src/Main.java"])
        after = RefactorOps(renamed).find_references("src/Main.java", line, column)

        # Then
        assert after.symbol == "funds"
        assert [(r.line, r.is_declaration) for r in after.references] == [
            (r.line, r.is_declaration) for r in before.references
        ]
