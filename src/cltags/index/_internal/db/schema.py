"""Schema lifecycle for index files.

open_index() is the only way the rest of the package gets a Database:

- A file holding no tables (missing or empty) gets the full schema, its
  indexes and the schema_info row in a single transaction.
- Any other file is checked, never modified: it must carry a schema_info row
  whose version equals SCHEMA_VERSION. Older, newer and unversioned indexes
  all fail closed with SchemaError.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import structlog
from sqlalchemy import inspect, text
from sqlalchemy.exc import DatabaseError, SQLAlchemyError

from cltags.core.errors import SchemaError, StorageIOError
from cltags.index._internal.db.database import Database
from cltags.index._internal.db.indexes import create_additional_indexes
from cltags.index.models import SchemaInfo

if TYPE_CHECKING:
    from cltags.config.models import DatabaseConfig

logger = structlog.get_logger()

SCHEMA_VERSION = 1


def open_index(
    path: Path,
    *,
    create: bool = True,
    database_config: DatabaseConfig | None = None,
) -> Database:
    """Open the index at path, creating the schema if none exists.

    Args:
        path: Index file.
        create: Create the schema when the file holds no index. With False,
            a missing index raises SchemaError instead.
        database_config: SQLite tuning; defaults apply when None.

    Raises:
        SchemaError: Missing (create=False), unversioned, wrong-version or
            unreadable index.
        StorageIOError: Schema creation failed.
    """
    if not create and not path.exists():
        raise SchemaError.missing(str(path))

    kwargs = {}
    if database_config is not None:
        kwargs = {
            "busy_timeout_ms": database_config.busy_timeout_ms,
            "cache_size_kb": database_config.cache_size_kb,
        }
    db = Database(path, **kwargs)

    try:
        table_names = _existing_tables(db)
        if not table_names:
            if not create:
                raise SchemaError.missing(str(path))
            create_schema(db)
        else:
            check_schema(db, table_names)
    except BaseException:
        db.dispose()
        raise
    return db


def _existing_tables(db: Database) -> set[str]:
    try:
        with db.engine.connect() as conn:
            return set(inspect(conn).get_table_names())
    except DatabaseError as e:
        # "file is not a database" and friends
        raise SchemaError.corrupt(str(db.db_path), str(e.orig)) from e


def create_schema(db: Database) -> None:
    """Create tables, indexes and the version row in one transaction."""
    try:
        with db.transaction() as conn:
            db.create_all(conn)
            create_additional_indexes(conn)
            conn.execute(
                SchemaInfo.__table__.insert(),  # type: ignore[attr-defined]
                {"id": 1, "version": SCHEMA_VERSION},
            )
    except SQLAlchemyError as e:
        raise StorageIOError.from_exception(e, "schema creation") from e
    logger.info("index_created", path=str(db.db_path), schema_version=SCHEMA_VERSION)


def check_schema(db: Database, table_names: set[str] | None = None) -> int:
    """Verify an existing index carries the expected schema version.

    Returns:
        The stored schema version.
    """
    if table_names is None:
        table_names = _existing_tables(db)
    if SchemaInfo.__tablename__ not in table_names:
        raise SchemaError.unversioned(str(db.db_path))

    version = read_schema_version(db)
    if version is None:
        raise SchemaError.unversioned(str(db.db_path))
    if version != SCHEMA_VERSION:
        raise SchemaError.incompatible_version(str(db.db_path), version, SCHEMA_VERSION)

    logger.debug("index_opened", path=str(db.db_path), schema_version=version)
    return version


def read_schema_version(db: Database) -> int | None:
    """Stored schema version, or None when the row is absent or unreadable."""
    try:
        with db.engine.connect() as conn:
            row = conn.execute(text("SELECT version FROM schema_info WHERE id = 1")).fetchone()
    except DatabaseError as e:
        raise SchemaError.corrupt(str(db.db_path), str(e.orig)) from e
    if row is None or row[0] is None:
        return None
    try:
        return int(row[0])
    except (TypeError, ValueError):
        return None
