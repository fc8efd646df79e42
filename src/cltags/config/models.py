"""Pydantic configuration models with env var support.

Configuration Hierarchy (highest to lowest precedence):
1. Direct kwargs to load_config()
2. Environment variables (CLTAGS__SECTION__KEY)
3. Repo YAML (.cltags.yaml)
4. Global YAML (~/.config/cltags/config.yaml)
5. Built-in defaults (this file)

Examples:
    CLTAGS__LOGGING__LEVEL=DEBUG
    CLTAGS__INDEX__PATH=/tmp/CLTAGS
    CLTAGS__INDEX__BATCH_SIZE=50000
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class LogOutputConfig(BaseModel):
    """Single logging output configuration."""

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
        CLTAGS__LOGGING__LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    level: LogLevel = Field(
        default="WARNING",
        description="Root log level. DEBUG logs every created dimension row.",
    )
    outputs: list[LogOutputConfig] = Field(default_factory=lambda: [LogOutputConfig()])


class IndexConfig(BaseModel):
    """Index configuration.

    Env vars:
        CLTAGS__INDEX__PATH: Index file location
        CLTAGS__INDEX__BATCH_SIZE: Pending fact rows before an early flush
        CLTAGS__INDEX__PROGRESS_INTERVAL: Occurrences between progress reports
    """

    path: str = Field(
        default="CLTAGS",
        description="Index file. Relative paths resolve against the working directory.",
    )
    batch_size: int = Field(
        default=100_000,
        description="Pending fact rows held in memory before they are flushed. "
        "Higher values mean fewer transactions but more memory.",
    )
    progress_interval: int = Field(
        default=10_000,
        description="Recorded occurrences between progress reports.",
    )

    @field_validator("batch_size", "progress_interval")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"Must be >= 1, got {v}")
        return v


class DatabaseConfig(BaseModel):
    """SQLite connection configuration.

    Env vars:
        CLTAGS__DATABASE__BUSY_TIMEOUT_MS: SQLite busy timeout
        CLTAGS__DATABASE__CACHE_SIZE_KB: SQLite page cache size
    """

    busy_timeout_ms: int = Field(
        default=30000,
        description="How long to wait for a lock held by another process.",
    )
    cache_size_kb: int = Field(
        default=64000,
        description="SQLite page cache size in KiB.",
    )


class CltagsConfig(BaseModel):
    """Root configuration for cltags."""

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    index: IndexConfig = Field(default_factory=IndexConfig)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
