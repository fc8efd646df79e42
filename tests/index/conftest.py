"""Shared fixtures for index tests."""

from __future__ import annotations

import tempfile
from collections.abc import Callable, Generator
from pathlib import Path
from typing import TYPE_CHECKING, Any

import pytest

if TYPE_CHECKING:
    from cltags.index import OccurrenceRecord
    from cltags.index._internal.db import Database


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory(ignore_cleanup_errors=True) as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def temp_db(temp_dir: Path) -> Generator[Database, None, None]:
    """Create a temporary index with schema."""
    from cltags.index._internal.db import open_index

    db = open_index(temp_dir / "CLTAGS")
    yield db
    db.dispose()


@pytest.fixture
def make_record() -> Callable[..., OccurrenceRecord]:
    """Factory for occurrence records; keyword overrides replace defaults.

    Defaults describe the definition of ns::foo at /src/x.cpp:10:3.
    """
    from cltags.index import DeclKind, OccurrenceRecord, RefKind

    def _make(**overrides: Any) -> OccurrenceRecord:
        data: dict[str, Any] = {
            "short_name": "foo",
            "full_name": "ns::foo",
            "kind": DeclKind.FUNCTION,
            "is_definition": True,
            "is_implicit": False,
            "ref_kind": RefKind.DEFINITION,
            "file_path": "/src/x.cpp",
            "dir_path": "/src",
            "line_number": 10,
            "column_number": 3,
            "line_text": "void foo() {}",
        }
        data.update(overrides)
        return OccurrenceRecord(**data)

    return _make


@pytest.fixture
def row_counts() -> Callable[[Database], dict[str, int]]:
    """Row count of every index table, keyed by table name."""
    from sqlalchemy import func
    from sqlmodel import select

    from cltags.index.models import INDEX_TABLES

    def _counts(db: Database) -> dict[str, int]:
        with db.session() as session:
            return {
                model.__tablename__: int(  # type: ignore[misc]
                    session.exec(select(func.count()).select_from(model)).one()
                )
                for model in INDEX_TABLES
            }

    return _counts
