"""Root conftest.py for test configuration.

Ensures local src/ directory takes priority over any installed packages and
provides in-memory Java project fixtures.
"""

import sys
from collections.abc import Callable
from pathlib import Path

import pytest

_src_dir = Path(__file__).parent.parent / "src"
if str(_src_dir) not in sys.path:
    sys.path.insert(0, str(_src_dir))

from javalens.refactor.edits import EditPlan  # noqa: E402
from javalens.semantic.parsing import JavaParser  # noqa: E402
from javalens.semantic.project import JavaProject  # noqa: E402

Position = tuple[int, int]


def position_of(text: str, needle: str, occurrence: int = 0, shift: int = 0) -> Position:
    """Zero-based (line, column) of the ``occurrence``-th ``needle`` in ``text``, plus ``shift`` chars."""
    index = -1
    for _ in range(occurrence + 1):
        index = text.index(needle, index + 1)
    index += shift
    line = text.count("\n", 0, index)
    column = index - (text.rfind("\n", 0, index) + 1)
    return line, column


def apply_plan(project: JavaProject, plan: EditPlan) -> dict[str, str]:
    """New text of every file the plan touches."""
    return {path: plan.apply(path, project.unit(path).text) for path in plan.edits_by_file}


@pytest.fixture
def java_project() -> Callable[..., JavaProject]:
    """Build a project snapshot from a single source or a {path: text} mapping."""

    def build(sources: str | dict[str, str], path: str = "src/Main.java") -> JavaProject:
        if isinstance(sources, str):
            sources = {path: sources}
        return JavaProject.from_sources(sources)

    return build


@pytest.fixture
def at() -> Callable[..., Position]:
    return position_of


@pytest.fixture
def applied() -> Callable[[JavaProject, EditPlan], dict[str, str]]:
    return apply_plan


@pytest.fixture
def assert_parses() -> Callable[[str], None]:
    """Assert that Java text parses without syntax errors."""
    parser = JavaParser()

    def check(text: str) -> None:
        unit = parser.parse("Check.java", text)
        assert unit.error_count == 0, text

    return check
