"""Document domain models."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class MatchType(str, Enum):
    """Which retrieval method produced a result."""

    LEXICAL = "lexical"
    VECTOR = "vector"
    HYBRID = "hybrid"


class SearchMode(str, Enum):
    LEXICAL = "lexical"
    VECTOR = "vector"
    HYBRID = "hybrid"


@dataclass
class Document:
    """Indexed source file, identified by its path relative to the KB root."""
    id: int
    path: str
    hash: str
    updated_at: int


@dataclass
class Chunk:
    """Stored text segment of a document."""
    id: int
    doc_id: int
    chunk_index: int
    content: str
    embedding: Optional[list[float]] = None


@dataclass
class SearchResult:
    """Ranked chunk returned by a search."""
    chunk_id: int
    doc_path: str
    content: str
    score: float
    match_type: MatchType

    def snippet(self, max_chars: int = 300) -> str:
        """Single-line preview of the chunk content."""
        text = self.content
        if len(text) > max_chars:
            text = text[:max_chars] + "..."
        return text.replace("\n", " ")


@dataclass
class IngestResult:
    """Outcome of one ingestion pass."""
    added: int = 0
    updated: int = 0
    deleted: int = 0
    total_chunks: int = 0
    errors: list[str] = field(default_factory=list)


@dataclass
class StoreStats:
    document_count: int
    chunk_count: int
    db_path: str


@dataclass
class DocumentListing:
    """Document paths plus aggregate counts.

    ``indexed`` is False when the index is empty and ``paths`` lists the
    files found on disk instead.
    """
    paths: list[str]
    document_count: int
    chunk_count: int
    indexed: bool = True
