"""cltags error types with typed error codes.

Error code ranges:
- 2xxx: Config
- 3xxx: Index (schema 30xx, storage 31xx, records 32xx)
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Typed error codes for programmatic handling."""

    # Config (2xxx)
    CONFIG_PARSE_ERROR = 2001
    CONFIG_INVALID_VALUE = 2002

    # Schema (30xx)
    SCHEMA_INCOMPATIBLE = 3001
    SCHEMA_UNVERSIONED = 3002
    SCHEMA_CORRUPT = 3003
    SCHEMA_MISSING = 3004

    # Storage (31xx)
    STORAGE_IO_ERROR = 3101

    # Records (32xx)
    RECORD_INVALID_VALUE = 3201
    RECORD_MISSING_FIELD = 3202
    RECORD_MALFORMED = 3203


@dataclass(frozen=True)
class CltagsError(Exception):
    """Base error with structured context."""

    code: ErrorCode
    message: str
    retryable: bool = False
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def error_name(self) -> str:
        """String identifier for logging (e.g., 'SCHEMA_CORRUPT')."""
        return self.code.name

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON output."""
        return {
            "code": self.code.value,
            "error": self.error_name,
            "message": self.message,
            "retryable": self.retryable,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.error_name}: {self.message}"


class ConfigError(CltagsError):
    """Configuration-related errors."""

    @classmethod
    def parse_error(cls, path: str, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_PARSE_ERROR,
            message=f"Failed to parse config at {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def invalid_value(cls, field: str, value: Any, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_INVALID_VALUE,
            message=f"Invalid value for '{field}': {reason}",
            details={"field": field, "value": str(value), "reason": reason},
        )


class SchemaError(CltagsError):
    """Persisted index schema is missing, incompatible or corrupt."""

    @classmethod
    def incompatible_version(cls, path: str, found: int, expected: int) -> "SchemaError":
        return cls(
            code=ErrorCode.SCHEMA_INCOMPATIBLE,
            message=f"Index at {path} has schema version {found}, expected {expected}",
            details={"path": path, "found": found, "expected": expected},
        )

    @classmethod
    def unversioned(cls, path: str) -> "SchemaError":
        return cls(
            code=ErrorCode.SCHEMA_UNVERSIONED,
            message=f"Index at {path} has tables but no schema version",
            details={"path": path},
        )

    @classmethod
    def corrupt(cls, path: str, reason: str) -> "SchemaError":
        return cls(
            code=ErrorCode.SCHEMA_CORRUPT,
            message=f"Index at {path} is not a readable index: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def missing(cls, path: str) -> "SchemaError":
        return cls(
            code=ErrorCode.SCHEMA_MISSING,
            message=f"No index found at {path}",
            details={"path": path},
        )


class StorageIOError(CltagsError):
    """A storage engine call failed."""

    @classmethod
    def from_exception(cls, exc: BaseException, context: str) -> "StorageIOError":
        """Wrap a SQLAlchemy/DBAPI error, keeping the failing statement."""
        statement = getattr(exc, "statement", None)
        orig = getattr(exc, "orig", None)
        reason = str(orig) if orig is not None else str(exc)
        details: dict[str, Any] = {"context": context, "reason": reason}
        if statement:
            details["statement"] = statement
        return cls(
            code=ErrorCode.STORAGE_IO_ERROR,
            message=f"Storage failure during {context}: {reason}",
            details=details,
        )


class InvalidRecordError(CltagsError):
    """Malformed occurrence record (empty short names are filtered, not errors)."""

    @classmethod
    def non_positive(cls, field: str, value: int) -> "InvalidRecordError":
        return cls(
            code=ErrorCode.RECORD_INVALID_VALUE,
            message=f"Record field '{field}' must be >= 1, got {value}",
            details={"field": field, "value": value},
        )

    @classmethod
    def too_large(cls, field: str, value: int, limit: int) -> "InvalidRecordError":
        return cls(
            code=ErrorCode.RECORD_INVALID_VALUE,
            message=f"Record field '{field}' must be <= {limit}, got {value}",
            details={"field": field, "value": value},
        )

    @classmethod
    def missing_field(cls, field: str) -> "InvalidRecordError":
        return cls(
            code=ErrorCode.RECORD_MISSING_FIELD,
            message=f"Record field '{field}' is empty",
            details={"field": field},
        )

    @classmethod
    def malformed(cls, line_no: int, reason: str) -> "InvalidRecordError":
        return cls(
            code=ErrorCode.RECORD_MALFORMED,
            message=f"Malformed record on line {line_no}: {reason}",
            details={"line": line_no, "reason": reason},
        )
