"""Directory exclusion for Java source discovery.

Tier 0 (HARDCODED_DIRS): Never traversed, not user-configurable.
    - VCS internals, JavaLens data directory

Tier 1 (DEFAULT_PRUNABLE_DIRS): Excluded by default. Projects can add more
    through ``ProjectConfig.excluded_dirs``.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from pathlib import Path

HARDCODED_DIRS: frozenset[str] = frozenset(
    (
        # VCS internals
        ".git",
        ".svn",
        ".hg",
        # JavaLens data
        ".javalens",
    )
)

DEFAULT_PRUNABLE_DIRS: frozenset[str] = frozenset(
    (
        # -------------------------------------------------------------------------
        # Build outputs (Maven, Gradle, Ant, IDE compilers)
        # -------------------------------------------------------------------------
        "target",
        "build",
        "out",
        "bin",
        ".gradle",
        ".mvn",
        # -------------------------------------------------------------------------
        # IDE metadata
        # -------------------------------------------------------------------------
        ".idea",
        ".settings",
        ".vscode",
        # -------------------------------------------------------------------------
        # Dependencies pulled into the tree
        # -------------------------------------------------------------------------
        "node_modules",
        ".m2",
    )
)

PRUNABLE_DIRS: frozenset[str] = HARDCODED_DIRS | DEFAULT_PRUNABLE_DIRS


def is_hardcoded_dir(dirname: str) -> bool:
    """Check if directory is hardcoded (never traversable, not overridable)."""
    return dirname in HARDCODED_DIRS


def is_default_prunable(dirname: str) -> bool:
    """Check if directory is prunable by default."""
    return dirname in DEFAULT_PRUNABLE_DIRS


def iter_source_files(
    root: Path,
    *,
    suffix: str = ".java",
    extra_excluded: Iterable[str] = (),
) -> Iterator[Path]:
    """Yield source files under ``root`` in sorted order, pruning excluded dirs."""
    excluded = PRUNABLE_DIRS | frozenset(extra_excluded)
    stack = [root]
    found: list[Path] = []
    while stack:
        current = stack.pop()
        try:
            entries = list(current.iterdir())
        except OSError:
            continue
        for entry in entries:
            if entry.is_dir():
                if entry.name not in excluded and not entry.is_symlink():
                    stack.append(entry)
            elif entry.suffix == suffix:
                found.append(entry)
    yield from sorted(found)
