"""Config module exports."""

from cltags.config.loader import load_config, resolve_index_path
from cltags.config.models import (
    CltagsConfig,
    DatabaseConfig,
    IndexConfig,
    LoggingConfig,
    LogOutputConfig,
)

__all__ = [
    "load_config",
    "resolve_index_path",
    "CltagsConfig",
    "DatabaseConfig",
    "IndexConfig",
    "LoggingConfig",
    "LogOutputConfig",
]
