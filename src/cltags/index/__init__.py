"""Index module - normalized declaration index over SQLite.

This module provides:
- Schema: six tables (paths, lines, symbol names, declarations, decl refs,
  schema info), created on first open and version-checked afterwards
- Ingestion: IngestionSession.record_occurrence with per-session dimension
  caches and batched fact commits
- Lookup: find_declaration by fully qualified name

Public API is in `cltags.index.ops`:
- TagsIndex: open, ingest, find_declaration, stats
- IndexStats: Result type

Internal implementations are in `cltags.index._internal/`.
"""

from cltags.index._internal.db import SCHEMA_VERSION, Database, open_index
from cltags.index._internal.ingest import IngestionSession, IngestSummary
from cltags.index.models import (
    Declaration,
    DeclInfo,
    DeclKind,
    DeclRef,
    OccurrenceRecord,
    RefKind,
    SchemaInfo,
    SourceLine,
    SourcePath,
    SymbolName,
)
from cltags.index.ops import IndexStats, TagsIndex

__all__ = [
    # Public API (ops.py)
    "TagsIndex",
    "IndexStats",
    # Database
    "Database",
    "open_index",
    "SCHEMA_VERSION",
    # Ingestion
    "IngestionSession",
    "IngestSummary",
    # Enums
    "DeclKind",
    "RefKind",
    # Table models
    "SourcePath",
    "SourceLine",
    "SymbolName",
    "Declaration",
    "DeclRef",
    "SchemaInfo",
    # Data transfer models
    "OccurrenceRecord",
    "DeclInfo",
]
