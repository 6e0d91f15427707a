"""Pydantic configuration models with env var support.

Configuration Hierarchy (highest to lowest precedence):
1. Direct kwargs to load_config()
2. Environment variables (JAVALENS__SECTION__KEY)
3. Project YAML (<root>/.javalens/config.yaml)
4. Global YAML (~/.config/javalens/config.yaml)
5. Built-in defaults (this file)

Environment Variable Format:
    JAVALENS__<SECTION>__<KEY>=<VALUE>

Examples:
    JAVALENS__LOGGING__LEVEL=DEBUG
    JAVALENS__PROJECT__MAX_FILE_SIZE_KB=512
    JAVALENS__REFACTOR__REFERENCE_LIMIT=500
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from javalens.config.constants import REFERENCE_LIMIT_MAX

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class LogOutputConfig(BaseModel):
    """Single logging output configuration.

    Env vars: Not directly configurable via env (use YAML for multi-output).
    """

    format: Literal["json", "console"] = "console"
    destination: str = "stderr"  # stderr, stdout, or absolute file path
    level: LogLevel | None = None  # Inherits from parent if None

    @field_validator("destination")
    @classmethod
    def validate_destination(cls, v: str) -> str:
        if v in ("stderr", "stdout"):
            return v
        path = Path(v).expanduser()
        if not path.is_absolute():
            raise ValueError(f"File destination must be absolute path: {v}")
        return str(path)


class LoggingConfig(BaseModel):
    """Logging configuration.

    Env vars:
        JAVALENS__LOGGING__LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    level: LogLevel = Field(
        default="INFO",
        description="Root log level. DEBUG logs every resolved occurrence.",
    )
    outputs: list[LogOutputConfig] = Field(default_factory=lambda: [LogOutputConfig()])


class ProjectConfig(BaseModel):
    """Java project discovery configuration.

    Env vars:
        JAVALENS__PROJECT__MAX_FILE_SIZE_KB: Skip source files larger than this
        JAVALENS__PROJECT__ENCODING: Source file encoding
    """

    source_roots: list[str] = Field(
        default_factory=list,
        description="Directories (relative to the project root) to scan for .java files. "
        "Empty means the whole project root.",
    )
    excluded_dirs: list[str] = Field(
        default_factory=list,
        description="Directory names pruned in addition to the built-in build/VCS list.",
    )
    max_file_size_kb: int = Field(
        default=1024,
        description="Skip source files larger than this (KB). Generated sources are often huge.",
    )
    encoding: str = Field(
        default="utf-8",
        description="Encoding used to decode source files.",
    )

    @field_validator("max_file_size_kb")
    @classmethod
    def validate_max_file_size(cls, v: int) -> int:
        if v <= 0:
            raise ValueError(f"max_file_size_kb must be positive, got {v}")
        return v


class RefactorConfig(BaseModel):
    """Refactoring engine configuration.

    Env vars:
        JAVALENS__REFACTOR__REFERENCE_LIMIT: Max references scanned per search
        JAVALENS__REFACTOR__INDENT_UNIT: Indentation added for generated bodies
    """

    reference_limit: int = Field(
        default=1000,
        description="Maximum references returned by a project-wide search "
        "(change signature, find references).",
    )
    indent_unit: str = Field(
        default="    ",
        description="One indentation level used for generated method and lambda bodies.",
    )
    placeholder_template: str = Field(
        default="/* TODO: {name} */",
        description="Argument text emitted at call sites for a new parameter with no default.",
    )

    @field_validator("reference_limit")
    @classmethod
    def validate_reference_limit(cls, v: int) -> int:
        if not (1 <= v <= REFERENCE_LIMIT_MAX):
            raise ValueError(f"reference_limit must be 1-{REFERENCE_LIMIT_MAX}, got {v}")
        return v

    @field_validator("indent_unit")
    @classmethod
    def validate_indent_unit(cls, v: str) -> str:
        if not v or v.strip(" \t"):
            raise ValueError("indent_unit must be non-empty whitespace")
        return v

    @field_validator("placeholder_template")
    @classmethod
    def validate_placeholder(cls, v: str) -> str:
        if "{name}" not in v:
            raise ValueError("placeholder_template must contain '{name}'")
        return v


class JavaLensConfig(BaseModel):
    """Root configuration for JavaLens.

    All settings can be configured via:
    1. Environment variables: JAVALENS__SECTION__KEY
    2. YAML config files (project or global)
    3. Direct kwargs to load_config()
    """

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    project: ProjectConfig = Field(default_factory=ProjectConfig)
    refactor: RefactorConfig = Field(default_factory=RefactorConfig)
