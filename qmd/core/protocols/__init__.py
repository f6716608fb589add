"""Protocol interfaces for dependency injection."""
from .embedder import EmbedderProtocol
from .document_store import DocumentStoreProtocol
from .document_source import DocumentSourceProtocol

__all__ = [
    "EmbedderProtocol",
    "DocumentStoreProtocol",
    "DocumentSourceProtocol",
]
