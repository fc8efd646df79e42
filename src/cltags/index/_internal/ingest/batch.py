"""Pending fact rows and their single-transaction flush.

Dimension rows are written as they are first seen. Fact rows (decl_refs)
outnumber them by orders of magnitude, so they are queued here and written
with one INSERT OR IGNORE executemany per flush.

A flush is all-or-nothing: on failure the transaction rolls back, the pending
rows are dropped and StorageIOError propagates. Facts are never partially
committed.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import structlog
from sqlalchemy.exc import SQLAlchemyError

from cltags.core.errors import StorageIOError
from cltags.index.models import DeclRef

if TYPE_CHECKING:
    from cltags.index._internal.db import Database

logger = structlog.get_logger()


class FactBatch:
    """Accumulates decl_refs rows until flushed.

    Args:
        db: Index database.
        batch_size: Pending row count that triggers an early flush from
            add(). Bounds memory on very large runs.
    """

    def __init__(self, db: Database, batch_size: int) -> None:
        if batch_size < 1:
            raise ValueError(f"batch_size must be >= 1, got {batch_size}")
        self._db = db
        self.batch_size = batch_size
        self._pending: list[dict[str, Any]] = []
        self.flushes = 0
        self.rows_flushed = 0

    @property
    def pending(self) -> int:
        return len(self._pending)

    def add(self, row: dict[str, Any]) -> None:
        """Queue one fact row; flush once batch_size rows are pending."""
        self._pending.append(row)
        if len(self._pending) >= self.batch_size:
            self.flush()

    def flush(self) -> int:
        """Write every pending row in one transaction and clear the batch.

        Returns:
            Number of rows submitted. Rows matching an existing occurrence
            are ignored by the store.

        Raises:
            StorageIOError: The transaction failed; pending rows are discarded.
        """
        if not self._pending:
            return 0

        rows = self._pending
        self._pending = []
        try:
            with self._db.bulk_writer() as writer:
                count = writer.insert_or_ignore_many(DeclRef, rows)
        except SQLAlchemyError as e:
            logger.error("flush_failed", rows_discarded=len(rows), error=str(e))
            raise StorageIOError.from_exception(e, f"flush of {len(rows)} fact rows") from e

        self.flushes += 1
        self.rows_flushed += count
        logger.info("facts_flushed", rows=count, flushes=self.flushes)
        return count

    def discard(self) -> int:
        """Drop pending rows without writing them. Returns how many were dropped."""
        dropped = len(self._pending)
        self._pending = []
        return dropped
