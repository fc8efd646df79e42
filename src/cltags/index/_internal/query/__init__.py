"""Read-only queries over a committed index."""

from cltags.index._internal.query.lookup import find_declaration, join_source_path

__all__ = ["find_declaration", "join_source_path"]
