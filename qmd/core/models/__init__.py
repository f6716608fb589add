"""Domain models."""
from .document import (
    Chunk,
    Document,
    DocumentListing,
    IngestResult,
    MatchType,
    SearchMode,
    SearchResult,
    StoreStats,
)

__all__ = [
    "Chunk",
    "Document",
    "DocumentListing",
    "IngestResult",
    "MatchType",
    "SearchMode",
    "SearchResult",
    "StoreStats",
]
