"""Configuration constants.

This module contains truly constant values that should NOT be user-configurable.
Language rules and API stability limits live here.

For configurable values, see models.py (RefactorConfig, ProjectConfig).
"""

# =============================================================================
# Search Maximums
# =============================================================================

REFERENCE_LIMIT_MAX = 10_000
"""Hard cap on references returned by a single project-wide search."""

# =============================================================================
# Java Language Rules
# =============================================================================

RESERVED_WORDS: frozenset[str] = frozenset(
    {
        "abstract", "assert", "boolean", "break", "byte", "case", "catch", "char",
        "class", "const", "continue", "default", "do", "double", "else", "enum",
        "extends", "final", "finally", "float", "for", "goto", "if", "implements",
        "import", "instanceof", "int", "interface", "long", "native", "new", "package",
        "private", "protected", "public", "return", "short", "static", "strictfp",
        "super", "switch", "synchronized", "this", "throw", "throws", "transient",
        "try", "void", "volatile", "while", "true", "false", "null", "var", "yield",
        "record", "sealed", "permits", "non-sealed",
    }
)  # fmt: skip
"""Keywords, literals and contextual keywords that cannot be used as new names."""

PRIMITIVE_TYPES: frozenset[str] = frozenset(
    {"boolean", "byte", "char", "short", "int", "long", "float", "double"}
)
"""Java primitive type names."""

OBJECT_METHODS: frozenset[tuple[str, int]] = frozenset(
    {
        ("toString", 0),
        ("hashCode", 0),
        ("equals", 1),
        ("clone", 0),
        ("finalize", 0),
    }
)
"""(name, arity) of java.lang.Object methods that never count as abstract."""


FUNCTIONAL_INTERFACES: dict[str, tuple[str, int]] = {
    "Runnable": ("run", 0),
    "Callable": ("call", 0),
    "Comparator": ("compare", 2),
    "Supplier": ("get", 0),
    "Consumer": ("accept", 1),
    "BiConsumer": ("accept", 2),
    "Function": ("apply", 1),
    "BiFunction": ("apply", 2),
    "UnaryOperator": ("apply", 1),
    "BinaryOperator": ("apply", 2),
    "Predicate": ("test", 1),
    "BiPredicate": ("test", 2),
    "BooleanSupplier": ("getAsBoolean", 0),
    "IntSupplier": ("getAsInt", 0),
    "LongSupplier": ("getAsLong", 0),
    "DoubleSupplier": ("getAsDouble", 0),
    "IntFunction": ("apply", 1),
    "IntPredicate": ("test", 1),
    "IntConsumer": ("accept", 1),
    "IntUnaryOperator": ("applyAsInt", 1),
    "IntBinaryOperator": ("applyAsInt", 2),
    "ToIntFunction": ("applyAsInt", 1),
    "ToLongFunction": ("applyAsLong", 1),
    "ToDoubleFunction": ("applyAsDouble", 1),
    "ThreadFactory": ("newThread", 1),
    "UncaughtExceptionHandler": ("uncaughtException", 2),
    "FileFilter": ("accept", 1),
    "FilenameFilter": ("accept", 2),
    "PathMatcher": ("matches", 1),
    "ActionListener": ("actionPerformed", 1),
    "ChangeListener": ("stateChanged", 1),
}
"""JDK interfaces outside the project known to have exactly one abstract method: name -> (method, arity)."""
