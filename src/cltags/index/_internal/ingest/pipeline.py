"""Occurrence ingestion.

An IngestionSession turns occurrence records into rows:

1. directory source_paths row (dirname_id NULL)
2. file source_paths row (dirname_id = the row from step 1)
3. source_lines row for (file, line), text kept from the first sighting
4. symbol_names row for (short, full)
5. declarations row for (symbol, kind, is_definition, is_implicit)
6. decl_refs fact, queued in the FactBatch

Steps 1-5 select-then-insert and commit immediately so every id handed out
refers to a durable row; steps 3-5 go through the session's dimension caches.
Step 6 is written when the batch flushes.

A session is single-writer and synchronous. Its caches and counters are its
own; nothing is shared between sessions.
"""

from __future__ import annotations

import posixpath
from collections.abc import Callable
from dataclasses import dataclass, field
from types import TracebackType
from typing import TYPE_CHECKING, Any

import structlog
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from cltags.core.errors import InvalidRecordError, StorageIOError
from cltags.core.logging import clear_run_id, set_run_id
from cltags.index._internal.ingest.batch import FactBatch
from cltags.index._internal.ingest.caches import DimensionCaches
from cltags.index.models import (
    Declaration,
    OccurrenceRecord,
    SourceLine,
    SourcePath,
    SymbolName,
)

if TYPE_CHECKING:
    from sqlalchemy import Connection
    from sqlmodel import SQLModel

    from cltags.index._internal.db import Database

logger = structlog.get_logger()

DEFAULT_BATCH_SIZE = 100_000
DEFAULT_PROGRESS_INTERVAL = 10_000

ProgressCallback = Callable[[int], None]

# Largest value an SQLite INTEGER column holds
MAX_POSITION = 2**63 - 1


@dataclass
class IngestSummary:
    """Counters for one ingestion session."""

    run_id: str
    recorded: int
    skipped: int
    facts_flushed: int
    flushes: int
    pending: int
    caches: dict[str, dict[str, int]] = field(default_factory=dict)


def split_source_path(file_path: str, dir_path: str) -> str:
    """Pathname stored for a file under its directory row.

    Files inside the directory are stored relative to it; anything else is
    stored verbatim.
    """
    if not dir_path:
        return file_path
    prefix = dir_path.rstrip("/") + "/"
    if file_path.startswith(prefix) and len(file_path) > len(prefix):
        return file_path[len(prefix) :]
    return file_path


def validate_record(record: OccurrenceRecord) -> None:
    """Raise InvalidRecordError for records that cannot be stored."""
    if not record.file_path:
        raise InvalidRecordError.missing_field("file_path")
    if not record.full_name:
        raise InvalidRecordError.missing_field("full_name")
    for field in ("line_number", "column_number"):
        value = getattr(record, field)
        if value < 1:
            raise InvalidRecordError.non_positive(field, value)
        if value > MAX_POSITION:
            raise InvalidRecordError.too_large(field, value, MAX_POSITION)


class IngestionSession:
    """Single-writer ingestion into one open index.

    Usage::

        with IngestionSession(db) as session:
            for record in records:
                session.record_occurrence(record)
        # pending facts flushed on clean exit, discarded on exception

    Args:
        db: Open index database.
        batch_size: Pending fact rows before an early flush.
        progress_interval: Recorded occurrences between progress callbacks.
        progress_callback: Called with the running recorded count.
    """

    def __init__(
        self,
        db: Database,
        *,
        batch_size: int = DEFAULT_BATCH_SIZE,
        progress_interval: int = DEFAULT_PROGRESS_INTERVAL,
        progress_callback: ProgressCallback | None = None,
    ) -> None:
        if progress_interval < 1:
            raise ValueError(f"progress_interval must be >= 1, got {progress_interval}")
        self._db = db
        self.caches = DimensionCaches()
        self.batch = FactBatch(db, batch_size)
        self.progress_interval = progress_interval
        self._progress_callback = progress_callback

        self.recorded = 0
        self.skipped = 0
        self._closed = False

        self.run_id = set_run_id()
        self._conn: Connection = db.engine.connect()
        logger.info(
            "ingest_session_started",
            path=str(db.db_path),
            batch_size=batch_size,
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def __enter__(self) -> IngestionSession:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if exc_type is None:
            self.close()
        else:
            self.abort()

    @property
    def closed(self) -> bool:
        return self._closed

    def flush(self) -> int:
        """Commit pending fact rows now. See FactBatch.flush()."""
        self._check_open()
        return self.batch.flush()

    def close(self) -> IngestSummary:
        """Flush pending facts and release the session's connection."""
        if self._closed:
            return self.summary()
        try:
            self.batch.flush()
        except BaseException:
            self._release()
            raise
        summary = self.summary()
        logger.info(
            "ingest_session_closed",
            recorded=summary.recorded,
            skipped=summary.skipped,
            facts_flushed=summary.facts_flushed,
            flushes=summary.flushes,
        )
        self._release()
        return summary

    def abort(self) -> int:
        """Drop pending facts without committing and release the connection.

        Returns:
            Number of discarded fact rows.
        """
        if self._closed:
            return 0
        dropped = self.batch.discard()
        logger.warning("ingest_session_aborted", rows_discarded=dropped, recorded=self.recorded)
        self._release()
        return dropped

    def _release(self) -> None:
        self._conn.close()
        self.caches.clear()
        self._closed = True
        clear_run_id()

    def _check_open(self) -> None:
        if self._closed:
            raise RuntimeError("Ingestion session is closed")

    def summary(self) -> IngestSummary:
        return IngestSummary(
            run_id=self.run_id,
            recorded=self.recorded,
            skipped=self.skipped,
            facts_flushed=self.batch.rows_flushed,
            flushes=self.batch.flushes,
            pending=self.batch.pending,
            caches=self.caches.stats(),
        )

    # ------------------------------------------------------------------
    # Ingestion
    # ------------------------------------------------------------------

    def record_occurrence(self, record: OccurrenceRecord) -> None:
        """Store one occurrence record.

        Records with an empty short name are skipped: unnamed entities can't
        be looked up by name.

        Raises:
            InvalidRecordError: Line/column out of range, or empty path/name.
            StorageIOError: A dimension row could not be resolved, or an
                early flush failed. The session is aborted and
                unusable afterwards.
        """
        self._check_open()

        if not record.short_name:
            self.skipped += 1
            logger.debug("occurrence_skipped", reason="empty_short_name", file=record.file_path)
            return

        validate_record(record)

        dir_path = record.dir_path or posixpath.dirname(record.file_path)
        # "/src/" and "/src" name one directory row; "/" stays as is
        dir_path = dir_path.rstrip("/") or dir_path
        try:
            dir_id = self._resolve_path(None, dir_path)
            file_id = self._resolve_path(dir_id, split_source_path(record.file_path, dir_path))
            line_id = self.caches.lines.resolve_or_create(
                (file_id, record.line_number),
                lambda: self._select_or_insert(
                    SourceLine,
                    {"source_path_id": file_id, "lineno": record.line_number},
                    {"text": record.line_text},
                ),
            )
            symbol_id = self.caches.symbols.resolve_or_create(
                (record.short_name, record.full_name),
                lambda: self._select_or_insert(
                    SymbolName,
                    {"short_name": record.short_name, "full_name": record.full_name},
                ),
            )
            kind = record.kind.value
            declaration_id = self.caches.declarations.resolve_or_create(
                (symbol_id, kind, record.is_definition, record.is_implicit),
                lambda: self._select_or_insert(
                    Declaration,
                    {
                        "symbol_name_id": symbol_id,
                        "kind": kind,
                        "is_definition": record.is_definition,
                        "is_implicit": record.is_implicit,
                    },
                ),
            )
        except SQLAlchemyError as e:
            self.abort()
            raise StorageIOError.from_exception(
                e,
                f"resolving {record.full_name} at {record.file_path}:{record.line_number}",
            ) from e

        try:
            self.batch.add(
                {
                    "declaration_id": declaration_id,
                    "ref_kind": record.ref_kind.value,
                    "source_line_id": line_id,
                    "colno": record.column_number,
                    "is_implicit": record.is_implicit,
                }
            )
        except StorageIOError:
            self.abort()
            raise

        self.recorded += 1
        if self._progress_callback is not None and self.recorded % self.progress_interval == 0:
            self._progress_callback(self.recorded)

    def _resolve_path(self, dirname_id: int | None, pathname: str) -> int:
        # Not cached: the (dirname_id, pathname) index serves these
        return self._select_or_insert(SourcePath, {"dirname_id": dirname_id, "pathname": pathname})

    def _select_or_insert(
        self,
        model_class: type[SQLModel],
        key: dict[str, Any],
        values: dict[str, Any] | None = None,
    ) -> int:
        """Id of the row matching key, inserting key + values if there is none.

        Runs in its own transaction so the row is durable before its id is
        cached or referenced by a fact.
        """
        table = model_class.__table__  # type: ignore[attr-defined]
        conditions = [
            table.c[column].is_(None) if value is None else table.c[column] == value
            for column, value in key.items()
        ]
        with self._conn.begin():
            row_id = self._conn.execute(select(table.c.id).where(*conditions)).scalar()
            if row_id is None:
                result = self._conn.execute(table.insert().values(**key, **(values or {})))
                row_id = result.inserted_primary_key[0]
                logger.debug("dimension_created", table=table.name, id=row_id, **key)
        return int(row_id)
