"""Unit tests for database layer (database.py, indexes.py).

Tests cover:
- Engine creation with correct pragmas (WAL, busy_timeout, foreign_keys)
- Table creation via create_all()
- Transactional DDL
- BulkWriter INSERT OR IGNORE and rollback
"""

from __future__ import annotations

from pathlib import Path

import pytest
from sqlalchemy import text

from cltags.index._internal.db import Database, create_additional_indexes
from cltags.index.models import DeclRef, SourcePath


def _scalar(db: Database, sql: str) -> object:
    with db.session() as session:
        row = session.execute(text(sql)).fetchone()
    assert row is not None
    return row[0]


class TestDatabaseEngine:
    """Tests for Database engine configuration."""

    def test_engine_created_with_wal_mode(self, temp_dir: Path) -> None:
        """Engine should use WAL journal mode."""
        db = Database(temp_dir / "test.db")
        db.create_all()

        assert _scalar(db, "PRAGMA journal_mode") == "wal"
        db.dispose()

    def test_engine_created_with_busy_timeout(self, temp_dir: Path) -> None:
        """Engine should have 30 second busy timeout by default."""
        db = Database(temp_dir / "test.db")

        assert _scalar(db, "PRAGMA busy_timeout") == 30000
        db.dispose()

    def test_busy_timeout_is_configurable(self, temp_dir: Path) -> None:
        db = Database(temp_dir / "test.db", busy_timeout_ms=1234)

        assert _scalar(db, "PRAGMA busy_timeout") == 1234
        db.dispose()

    def test_engine_created_with_foreign_keys_enabled(self, temp_dir: Path) -> None:
        """Engine should have foreign keys enabled."""
        db = Database(temp_dir / "test.db")

        assert _scalar(db, "PRAGMA foreign_keys") == 1
        db.dispose()


class TestDatabaseTables:
    """Tests for table creation."""

    def test_create_all_creates_tables(self, temp_dir: Path) -> None:
        """create_all() should create all six index tables."""
        db = Database(temp_dir / "test.db")
        db.create_all()

        with db.session() as session:
            result = session.execute(text("SELECT name FROM sqlite_master WHERE type='table'"))
            tables = {row[0] for row in result}

        assert tables == {
            "source_paths",
            "source_lines",
            "symbol_names",
            "declarations",
            "decl_refs",
            "schema_info",
        }
        db.dispose()

    def test_ddl_rolls_back_with_transaction(self, temp_dir: Path) -> None:
        """Tables created inside a failed transaction should not persist."""
        db = Database(temp_dir / "test.db")

        with pytest.raises(RuntimeError), db.transaction() as conn:
            db.create_all(conn)
            create_additional_indexes(conn)
            raise RuntimeError("abort")

        with db.session() as session:
            result = session.execute(text("SELECT name FROM sqlite_master"))
            assert result.fetchall() == []
        db.dispose()


class TestBulkWriter:
    """Tests for BulkWriter."""

    def test_insert_or_ignore_drops_duplicates(self, temp_dir: Path) -> None:
        db = Database(temp_dir / "test.db")
        with db.transaction() as conn:
            db.create_all(conn)
            create_additional_indexes(conn)

        rows = [
            {"dirname_id": None, "pathname": "/src"},
            {"dirname_id": None, "pathname": "/lib"},
        ]
        with db.bulk_writer() as writer:
            assert writer.insert_or_ignore_many(SourcePath, rows) == 2
        with db.bulk_writer() as writer:
            writer.insert_or_ignore_many(SourcePath, rows)

        # NULL dirname_id does not collide in a unique index
        count = _scalar(db, "SELECT COUNT(*) FROM source_paths WHERE pathname = '/src'")
        assert count == 2
        db.dispose()

    def test_insert_or_ignore_dedups_fact_rows(self, temp_db: Database) -> None:
        with temp_db.transaction() as conn:
            dir_id = conn.execute(
                text("INSERT INTO source_paths (dirname_id, pathname) VALUES (NULL, '/src')")
            ).lastrowid
            file_id = conn.execute(
                text("INSERT INTO source_paths (dirname_id, pathname) VALUES (:d, 'x.cpp')"),
                {"d": dir_id},
            ).lastrowid
            line_id = conn.execute(
                text("INSERT INTO source_lines (source_path_id, lineno, text) VALUES (:f, 1, 'x')"),
                {"f": file_id},
            ).lastrowid
            sym_id = conn.execute(
                text("INSERT INTO symbol_names (short_name, full_name) VALUES ('x', 'x')")
            ).lastrowid
            decl_id = conn.execute(
                text(
                    "INSERT INTO declarations (symbol_name_id, kind, is_definition, is_implicit) "
                    "VALUES (:s, 'variable', 1, 0)"
                ),
                {"s": sym_id},
            ).lastrowid

        row = {
            "declaration_id": decl_id,
            "ref_kind": "definition",
            "source_line_id": line_id,
            "colno": 1,
            "is_implicit": False,
        }
        with temp_db.bulk_writer() as writer:
            writer.insert_or_ignore_many(DeclRef, [row, dict(row)])

        assert _scalar(temp_db, "SELECT COUNT(*) FROM decl_refs") == 1

    def test_empty_insert_returns_zero(self, temp_db: Database) -> None:
        with temp_db.bulk_writer() as writer:
            assert writer.insert_or_ignore_many(DeclRef, []) == 0

    def test_rollback_on_exception(self, temp_db: Database) -> None:
        """Rows written before an exception should not be committed."""
        with pytest.raises(RuntimeError), temp_db.bulk_writer() as writer:
            writer.insert_or_ignore_many(SourcePath, [{"dirname_id": None, "pathname": "/tmp"}])
            raise RuntimeError("abort")

        assert _scalar(temp_db, "SELECT COUNT(*) FROM source_paths") == 0
