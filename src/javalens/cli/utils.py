"""CLI utilities."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, NoReturn

import click

from javalens.core.errors import JavaLensError
from javalens.core.progress import status
from javalens.refactor.signature import ParameterSpec

PROJECT_MARKERS = (
    ".javalens",
    "pom.xml",
    "build.gradle",
    "build.gradle.kts",
    "settings.gradle",
    "settings.gradle.kts",
    ".git",
)


def find_project_root(start_path: Path | None = None) -> Path:
    """Find the Java project root from the given path.

    Walks up the directory tree looking for a build file, a ``.javalens``
    directory or a ``.git`` directory. Falls back to the start directory.
    """
    start = (start_path or Path.cwd()).resolve()
    current = start
    while True:
        if any((current / marker).exists() for marker in PROJECT_MARKERS):
            return current
        if current == current.parent:
            return start
        current = current.parent


def parse_parameter(text: str) -> ParameterSpec:
    """Parse ``"Type name"`` or ``"Type name=default"`` into a ParameterSpec."""
    declaration, sep, default = text.partition("=")
    type_text, _, name = declaration.strip().rpartition(" ")
    if not type_text.strip() or not name:
        raise click.BadParameter(f"expected 'Type name[=default]', got {text!r}", param_hint="--param")
    return ParameterSpec(name=name, type=type_text.strip(), default_value=default.strip() if sep else None)


def echo_json(data: dict[str, Any]) -> None:
    click.echo(json.dumps(data, indent=2))


def fail(error: JavaLensError) -> NoReturn:
    """Print a structured engine error and exit non-zero."""
    status(error.message, style="error")
    echo_json({"success": False, "error": error.to_dict()})
    raise SystemExit(1)
