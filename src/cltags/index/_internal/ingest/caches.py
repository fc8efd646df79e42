"""In-memory key -> id maps in front of the dimension tables.

A cache never owns rows. It remembers the id the store assigned to a natural
key so repeated sightings of the same line, symbol or declaration identity
cost no round-trip. Caches belong to one ingestion session and die with it;
an index reopened by another session starts cold.
"""

from __future__ import annotations

from collections.abc import Callable, Hashable
from typing import Any, Generic, TypeVar

K = TypeVar("K", bound=Hashable)

LineKey = tuple[int, int]  # (source_path_id, lineno)
SymbolKey = tuple[str, str]  # (short_name, full_name)
DeclarationKey = tuple[int, str, bool, bool]  # (symbol_name_id, kind, is_definition, is_implicit)


class DimensionCache(Generic[K]):
    """Cache-aside map from a dimension's natural key to its row id."""

    def __init__(self, name: str) -> None:
        self.name = name
        self._ids: dict[K, int] = {}
        self.hits = 0
        self.misses = 0

    def resolve_or_create(self, key: K, factory: Callable[[], int]) -> int:
        """Return the cached id for key, or call factory() and cache its result.

        The factory performs the select-then-insert against the store. If it
        raises, nothing is cached.
        """
        row_id = self._ids.get(key)
        if row_id is not None:
            self.hits += 1
            return row_id

        self.misses += 1
        row_id = factory()
        self._ids[key] = row_id
        return row_id

    def get(self, key: K) -> int | None:
        return self._ids.get(key)

    def clear(self) -> None:
        self._ids.clear()
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._ids)

    def __contains__(self, key: object) -> bool:
        return key in self._ids

    def __repr__(self) -> str:
        return (
            f"DimensionCache({self.name!r}, size={len(self)}, "
            f"hits={self.hits}, misses={self.misses})"
        )


class DimensionCaches:
    """The three caches one ingestion session consults."""

    def __init__(self) -> None:
        self.lines: DimensionCache[LineKey] = DimensionCache("source_lines")
        self.symbols: DimensionCache[SymbolKey] = DimensionCache("symbol_names")
        self.declarations: DimensionCache[DeclarationKey] = DimensionCache("declarations")

    def clear(self) -> None:
        for cache in self.all():
            cache.clear()

    def all(self) -> tuple[DimensionCache[Any], ...]:
        return (self.lines, self.symbols, self.declarations)

    def stats(self) -> dict[str, dict[str, int]]:
        return {
            cache.name: {"size": len(cache), "hits": cache.hits, "misses": cache.misses}
            for cache in self.all()
        }
