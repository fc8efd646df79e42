"""Database layer for the index."""

from cltags.index._internal.db.database import BulkWriter, Database
from cltags.index._internal.db.indexes import create_additional_indexes
from cltags.index._internal.db.schema import (
    SCHEMA_VERSION,
    check_schema,
    create_schema,
    open_index,
    read_schema_version,
)

__all__ = [
    "Database",
    "BulkWriter",
    "create_additional_indexes",
    "SCHEMA_VERSION",
    "check_schema",
    "create_schema",
    "open_index",
    "read_schema_version",
]
