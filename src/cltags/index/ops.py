"""High-level index operations.

TagsIndex is the public entry point: it opens (or creates) an index file,
hands out ingestion sessions and answers lookups.

Usage::

    index = TagsIndex.open(Path("CLTAGS"))
    with index.ingest() as session:
        for record in records:
            session.record_occurrence(record)

    for info in index.find_declaration("ns::foo"):
        print(info.format())

    index.close()
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from types import TracebackType
from typing import TYPE_CHECKING

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import select

from cltags.core.errors import StorageIOError
from cltags.index._internal.db import open_index, read_schema_version
from cltags.index._internal.ingest import IngestionSession
from cltags.index._internal.ingest.pipeline import DEFAULT_BATCH_SIZE, DEFAULT_PROGRESS_INTERVAL
from cltags.index._internal.query import find_declaration
from cltags.index.models import INDEX_TABLES

if TYPE_CHECKING:
    from cltags.config.models import CltagsConfig
    from cltags.index._internal.db import Database
    from cltags.index._internal.ingest.pipeline import ProgressCallback
    from cltags.index.models import DeclInfo


@dataclass
class IndexStats:
    """Row counts per table plus the stored schema version."""

    path: str
    schema_version: int | None
    rows: dict[str, int]


class TagsIndex:
    """
    One open index file.

    Ingestion is single-writer: open at most one session at a time per index
    file. Lookups are read-only and may run at any time.
    """

    def __init__(
        self,
        db: Database,
        *,
        batch_size: int = DEFAULT_BATCH_SIZE,
        progress_interval: int = DEFAULT_PROGRESS_INTERVAL,
    ) -> None:
        self.db = db
        self.batch_size = batch_size
        self.progress_interval = progress_interval

    @classmethod
    def open(
        cls,
        path: Path,
        *,
        create: bool = True,
        config: CltagsConfig | None = None,
    ) -> TagsIndex:
        """Open the index at path; see open_index() for schema handling."""
        if config is None:
            return cls(open_index(path, create=create))
        db = open_index(path, create=create, database_config=config.database)
        return cls(
            db,
            batch_size=config.index.batch_size,
            progress_interval=config.index.progress_interval,
        )

    @property
    def path(self) -> Path:
        return self.db.db_path

    def ingest(self, progress_callback: ProgressCallback | None = None) -> IngestionSession:
        """Start an ingestion session. Use as a context manager."""
        return IngestionSession(
            self.db,
            batch_size=self.batch_size,
            progress_interval=self.progress_interval,
            progress_callback=progress_callback,
        )

    def find_declaration(self, qualified_name: str) -> list[DeclInfo]:
        """All recorded occurrences of qualified_name (empty if unknown)."""
        return find_declaration(self.db, qualified_name)

    def stats(self) -> IndexStats:
        """Row counts of every index table."""
        rows: dict[str, int] = {}
        try:
            with self.db.session() as session:
                for model in INDEX_TABLES:
                    count = session.exec(select(func.count()).select_from(model)).one()
                    rows[model.__tablename__] = int(count)  # type: ignore[arg-type]
        except SQLAlchemyError as e:
            raise StorageIOError.from_exception(e, "row count") from e
        return IndexStats(
            path=str(self.db.db_path),
            schema_version=read_schema_version(self.db),
            rows=rows,
        )

    def close(self) -> None:
        """Dispose the engine to release file handles."""
        self.db.dispose()

    def __enter__(self) -> TagsIndex:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

