"""Database engine and bulk writer.

This module provides:
- Database: SQLite connection manager (WAL, busy timeout, foreign keys)
- BulkWriter: Core SQL bulk inserts for the high-volume fact table

The hybrid pattern:
- Use ORM sessions for reads and low-volume work (schema info, stats)
- Use short Core transactions for dimension rows (committed immediately)
- Use BulkWriter for fact rows (one transaction per flush)

pysqlite's implicit transaction handling is disabled on every connection and
SQLAlchemy emits an explicit BEGIN instead, so DDL participates in
transactions and schema creation is atomic.
"""

from __future__ import annotations

from collections.abc import Generator
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING, Any

from sqlalchemy import event, insert
from sqlmodel import Session, SQLModel, create_engine

if TYPE_CHECKING:
    from sqlalchemy import Connection, Engine

DEFAULT_BUSY_TIMEOUT_MS = 30000
DEFAULT_CACHE_SIZE_KB = 64000


class Database:
    """SQLite connection manager for one index file.

    Usage::

        db = Database(Path("CLTAGS"))

        # ORM access (reads, low volume)
        with db.session() as session:
            info = session.get(SchemaInfo, 1)

        # Short write transaction
        with db.transaction() as conn:
            conn.execute(...)

        # Bulk access (fact rows)
        with db.bulk_writer() as writer:
            writer.insert_or_ignore_many(DeclRef, rows)
    """

    def __init__(
        self,
        db_path: Path,
        busy_timeout_ms: int = DEFAULT_BUSY_TIMEOUT_MS,
        cache_size_kb: int = DEFAULT_CACHE_SIZE_KB,
    ) -> None:
        self.db_path = db_path
        self._busy_timeout_ms = busy_timeout_ms
        self._cache_size_kb = cache_size_kb
        self.engine = self._create_engine()

    def _create_engine(self) -> Engine:
        engine = create_engine(
            f"sqlite:///{self.db_path}",
            connect_args={"check_same_thread": False},
            pool_pre_ping=True,
        )
        busy_timeout_ms = self._busy_timeout_ms
        cache_size_kb = self._cache_size_kb

        def on_connect(dbapi_conn: Any, connection_record: Any) -> None:
            _configure_pragmas(
                dbapi_conn,
                connection_record,
                busy_timeout_ms=busy_timeout_ms,
                cache_size_kb=cache_size_kb,
            )

        event.listen(engine, "connect", on_connect)
        event.listen(engine, "begin", _emit_begin)
        return engine

    def create_all(self, conn: Connection | None = None) -> None:
        """Create all index tables from SQLModel metadata."""
        from cltags.index.models import INDEX_TABLES

        tables = [model.__table__ for model in INDEX_TABLES]  # type: ignore[attr-defined]
        SQLModel.metadata.create_all(conn if conn is not None else self.engine, tables=tables)

    @contextmanager
    def session(self) -> Generator[Session, None, None]:
        """ORM session for reads and low-volume operations."""
        with Session(self.engine) as session:
            yield session

    @contextmanager
    def transaction(self) -> Generator[Connection, None, None]:
        """Core connection inside one transaction.

        Commits on successful exit, rolls back on exception.
        """
        with self.engine.begin() as conn:
            yield conn

    @contextmanager
    def bulk_writer(self) -> Generator[BulkWriter, None, None]:
        """
        Bulk writer for high-volume inserts.

        Auto-commits on successful exit, rolls back on exception.
        """
        writer = BulkWriter(self.engine)
        try:
            yield writer
            writer.commit()
        except Exception:
            writer.rollback()
            raise
        finally:
            writer.close()

    def dispose(self) -> None:
        """Release pooled connections and their file handles."""
        self.engine.dispose()


def _configure_pragmas(
    dbapi_conn: Any,
    _connection_record: Any,
    *,
    busy_timeout_ms: int,
    cache_size_kb: int,
) -> None:
    """Configure SQLite for a single writer with concurrent readers."""
    # SQLAlchemy emits BEGIN itself (see _emit_begin)
    dbapi_conn.isolation_level = None
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute(f"PRAGMA busy_timeout={int(busy_timeout_ms)}")
    cursor.execute("PRAGMA synchronous=NORMAL")  # Safe with WAL
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.execute(f"PRAGMA cache_size=-{int(cache_size_kb)}")
    cursor.close()


def _emit_begin(conn: Connection) -> None:
    conn.exec_driver_sql("BEGIN")


class BulkWriter:
    """High-performance bulk insert using Core SQL, bypassing ORM overhead."""

    def __init__(self, engine: Engine) -> None:
        self.engine = engine
        self.conn = engine.connect()
        self.transaction = self.conn.begin()

    def insert_or_ignore_many(
        self, model_class: type[SQLModel], records: list[dict[str, Any]]
    ) -> int:
        """
        Bulk INSERT OR IGNORE. Rows colliding with a unique index are dropped.

        Returns:
            Number of records submitted (not the number that landed)
        """
        if not records:
            return 0

        table = model_class.__table__  # type: ignore[attr-defined]
        stmt = insert(table).prefix_with("OR IGNORE")
        self.conn.execute(stmt, records)
        return len(records)

    def commit(self) -> None:
        """Commit the current transaction."""
        self.transaction.commit()

    def rollback(self) -> None:
        """Rollback the current transaction."""
        if self.transaction.is_active:
            self.transaction.rollback()

    def close(self) -> None:
        """Close the connection."""
        self.conn.close()
