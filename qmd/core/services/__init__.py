"""Core business services."""
from .ingest_service import IngestService
from .search_service import SearchService
from .knowledge_base import KnowledgeBase, format_results

__all__ = [
    "IngestService",
    "SearchService",
    "KnowledgeBase",
    "format_results",
]
