"""Core module exports."""

from cltags.core.errors import (
    CltagsError,
    ConfigError,
    ErrorCode,
    InvalidRecordError,
    SchemaError,
    StorageIOError,
)
from cltags.core.logging import (
    clear_run_id,
    configure_logging,
    get_logger,
    get_run_id,
    set_run_id,
)
from cltags.core.progress import pluralize, spinner, status

__all__ = [
    # Errors
    "CltagsError",
    "ConfigError",
    "ErrorCode",
    "InvalidRecordError",
    "SchemaError",
    "StorageIOError",
    # Logging
    "clear_run_id",
    "configure_logging",
    "get_logger",
    "get_run_id",
    "set_run_id",
    # Progress
    "pluralize",
    "spinner",
    "status",
]
