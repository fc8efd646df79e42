"""Uniqueness and lookup indexes beyond the SQLModel Field() declarations.

The unique indexes carry the dedup invariants of the index: one row per
natural key in every dimension table, and one fact row per
(declaration, ref kind, line, column, implicit) occurrence. Inserts of fact
rows rely on them for INSERT OR IGNORE.

Call create_additional_indexes() after Database.create_all().
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import text

if TYPE_CHECKING:
    from sqlalchemy import Connection


ADDITIONAL_INDEXES = [
    # Dimension natural keys
    "CREATE UNIQUE INDEX IF NOT EXISTS idx_source_paths_unique "
    "ON source_paths(dirname_id, pathname)",
    "CREATE UNIQUE INDEX IF NOT EXISTS idx_source_lines_unique "
    "ON source_lines(source_path_id, lineno)",
    "CREATE UNIQUE INDEX IF NOT EXISTS idx_symbol_names_unique "
    "ON symbol_names(short_name, full_name)",
    "CREATE UNIQUE INDEX IF NOT EXISTS idx_declarations_unique "
    "ON declarations(symbol_name_id, kind, is_definition, is_implicit)",
    # Fact dedup (INSERT OR IGNORE target)
    "CREATE UNIQUE INDEX IF NOT EXISTS idx_decl_refs_unique "
    "ON decl_refs(declaration_id, ref_kind, source_line_id, colno, is_implicit)",
    # Position lookups
    "CREATE INDEX IF NOT EXISTS idx_decl_refs_line_col ON decl_refs(source_line_id, colno)",
]

ADDITIONAL_INDEX_NAMES = [
    "idx_source_paths_unique",
    "idx_source_lines_unique",
    "idx_symbol_names_unique",
    "idx_declarations_unique",
    "idx_decl_refs_unique",
    "idx_decl_refs_line_col",
]


def create_additional_indexes(conn: Connection) -> None:
    """
    Create the additional indexes on an open connection.

    Runs inside the caller's transaction so schema creation stays atomic.
    """
    for sql in ADDITIONAL_INDEXES:
        conn.execute(text(sql))
