"""Base classes for tool parameters."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class BaseParams(BaseModel):
    """Base class for all tool parameters.

    Uses extra="forbid" to reject unknown fields with clear errors.
    """

    model_config = ConfigDict(extra="forbid")


class PositionParams(BaseParams):
    """A file and a zero-based position inside it."""

    file_path: str = Field(description="Path to the .java file, relative to the project root")
    line: int = Field(ge=0, description="Zero-based line number")
    column: int = Field(ge=0, description="Zero-based column number")


class SelectionParams(BaseParams):
    """A file and a zero-based, end-exclusive selection."""

    file_path: str = Field(description="Path to the .java file, relative to the project root")
    start_line: int = Field(ge=0, description="Zero-based start line")
    start_column: int = Field(ge=0, description="Zero-based start column")
    end_line: int = Field(ge=0, description="Zero-based end line")
    end_column: int = Field(ge=0, description="Zero-based end column (exclusive)")
