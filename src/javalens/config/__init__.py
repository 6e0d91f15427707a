"""Config module exports."""

from javalens.config.loader import load_config
from javalens.config.models import (
    JavaLensConfig,
    LoggingConfig,
    LogOutputConfig,
    ProjectConfig,
    RefactorConfig,
)

__all__ = [
    "load_config",
    "JavaLensConfig",
    "LoggingConfig",
    "LogOutputConfig",
    "ProjectConfig",
    "RefactorConfig",
]
