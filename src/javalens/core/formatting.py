"""Text helpers shared by edit-plan summaries and generated Java code.

Summaries returned to MCP clients and printed by the CLI stay on one line,
so paths and warnings are shortened here. ``indent_lines`` re-indents code
moved between blocks by the refactoring engines.
"""

from __future__ import annotations


def compress_path(path: str, max_len: int = 30) -> str:
    """Shorten a source path for a one-line summary.

    ``src/main/java/com/acme/Calculator.java`` becomes ``src/.../Calculator.java``;
    the bare file name is the last resort. Paths with one directory are kept.
    """
    head, _, rest = path.partition("/")
    if len(path) <= max_len or "/" not in rest:
        return path
    file_name = rest.rsplit("/", 1)[1]
    elided = f"{head}/.../{file_name}"
    return elided if len(elided) <= max_len else file_name


def pluralize(count: int, singular: str, plural: str | None = None) -> str:
    """``"1 edit"``, ``"3 edits"``; ``plural`` overrides the trailing ``s``."""
    word = singular if count == 1 else (plural or f"{singular}s")
    return f"{count} {word}"


def truncate_at_word(text: str, max_len: int = 40, suffix: str = "...") -> str:
    """Cut ``text`` to ``max_len`` characters, breaking at the last space that fits."""
    if len(text) <= max_len:
        return text
    room = max_len - len(suffix)
    if room <= 0:
        return suffix
    head = text[:room]
    boundary = head.rfind(" ")
    return (head[:boundary] if boundary > 0 else head) + suffix


def indent_lines(text: str, indent: str) -> str:
    """Prefix every non-blank line of ``text`` with ``indent``; blank lines become empty."""
    return "\n".join(indent + line if line.strip() else "" for line in text.splitlines())
