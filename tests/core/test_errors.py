"""Tests for error types and codes."""

from collections.abc import Iterator
from contextlib import contextmanager

import pytest
from sqlalchemy.exc import IntegrityError

from cltags.core.errors import (
    CltagsError,
    ConfigError,
    ErrorCode,
    InvalidRecordError,
    SchemaError,
    StorageIOError,
)


class TestErrorCode:
    """Error code value tests."""

    @pytest.mark.parametrize(
        ("code", "expected_range"),
        [
            (ErrorCode.CONFIG_PARSE_ERROR, 2000),
            (ErrorCode.CONFIG_INVALID_VALUE, 2000),
            (ErrorCode.SCHEMA_INCOMPATIBLE, 3000),
            (ErrorCode.STORAGE_IO_ERROR, 3000),
            (ErrorCode.RECORD_MALFORMED, 3000),
        ],
    )
    def test_given_error_code_when_checked_then_in_correct_range(
        self, code: ErrorCode, expected_range: int
    ) -> None:
        """Error codes fall within their designated numeric range."""
        assert expected_range <= code.value < expected_range + 1000


class TestCltagsError:
    """Base error behavior tests."""

    def test_given_error_when_to_dict_then_serializes_all_fields(self) -> None:
        # Given
        error = SchemaError.missing("/tmp/CLTAGS")

        # When
        result = error.to_dict()

        # Then
        assert result == {
            "code": 3004,
            "error": "SCHEMA_MISSING",
            "message": "No index found at /tmp/CLTAGS",
            "retryable": False,
            "details": {"path": "/tmp/CLTAGS"},
        }

    def test_given_error_when_str_then_includes_code_and_name(self) -> None:
        error = InvalidRecordError.non_positive("line_number", 0)

        assert str(error) == (
            "[3201] RECORD_INVALID_VALUE: Record field 'line_number' must be >= 1, got 0"
        )

    def test_given_subclass_when_raised_then_catchable_as_base(self) -> None:
        with pytest.raises(CltagsError):
            raise ConfigError.parse_error("/x.yaml", "bad indent")

    def test_given_subclass_when_raised_through_context_manager_then_type_kept(
        self,
    ) -> None:
        """contextlib sets __traceback__ on the way out; the error must survive it."""
        # Given
        @contextmanager
        def managed() -> Iterator[None]:
            yield

        # When
        with pytest.raises(CltagsError) as exc_info, managed():
            raise InvalidRecordError.malformed(2, "bad")

        # Then
        assert isinstance(exc_info.value, InvalidRecordError)
        assert exc_info.value.details["line"] == 2
        assert exc_info.value.__traceback__ is not None


class TestSchemaError:
    def test_incompatible_version_details(self) -> None:
        error = SchemaError.incompatible_version("CLTAGS", 2, 1)

        assert error.code == ErrorCode.SCHEMA_INCOMPATIBLE
        assert "schema version 2, expected 1" in error.message
        assert error.details == {"path": "CLTAGS", "found": 2, "expected": 1}


class TestStorageIOError:
    def test_given_dbapi_error_when_wrapped_then_keeps_statement(self) -> None:
        # Given
        orig = Exception("FOREIGN KEY constraint failed")
        exc = IntegrityError("INSERT INTO decl_refs ...", {}, orig)

        # When
        error = StorageIOError.from_exception(exc, "flush of 2 fact rows")

        # Then
        assert error.message == (
            "Storage failure during flush of 2 fact rows: FOREIGN KEY constraint failed"
        )
        assert error.details["statement"] == "INSERT INTO decl_refs ..."
        assert error.details["context"] == "flush of 2 fact rows"

    def test_given_plain_exception_when_wrapped_then_no_statement(self) -> None:
        error = StorageIOError.from_exception(OSError("disk full"), "row count")

        assert error.details == {"context": "row count", "reason": "disk full"}


class TestInvalidRecordError:
    def test_malformed_details(self) -> None:
        error = InvalidRecordError.malformed(7, "kind: Input should be 'function'")

        assert error.code == ErrorCode.RECORD_MALFORMED
        assert error.message.startswith("Malformed record on line 7: ")
        assert error.details["line"] == 7
