"""Ingestion pipeline: dimension caches, fact batching and the session."""

from cltags.index._internal.ingest.batch import FactBatch
from cltags.index._internal.ingest.caches import DimensionCache, DimensionCaches
from cltags.index._internal.ingest.pipeline import (
    IngestionSession,
    IngestSummary,
    split_source_path,
    validate_record,
)

__all__ = [
    "DimensionCache",
    "DimensionCaches",
    "FactBatch",
    "IngestionSession",
    "IngestSummary",
    "split_source_path",
    "validate_record",
]
