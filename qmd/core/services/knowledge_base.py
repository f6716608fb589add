"""Knowledge base facade - the surface exposed to tool dispatch layers."""

import logging
from typing import Optional

from ..models.document import DocumentListing, IngestResult, SearchMode, SearchResult
from ..protocols.document_source import DocumentSourceProtocol
from ..protocols.document_store import DocumentStoreProtocol
from .ingest_service import IngestService
from .search_service import SearchService

logger = logging.getLogger(__name__)


class KnowledgeBase:
    """Entry point for ingest, search, listing and document retrieval."""

    def __init__(
        self,
        store: DocumentStoreProtocol,
        ingest_service: IngestService,
        search_service: SearchService,
        source: DocumentSourceProtocol,
        default_limit: int = 5,
    ):
        self._store = store
        self._ingest_service = ingest_service
        self._search_service = search_service
        self._source = source
        self._default_limit = default_limit

    def ingest(self, force: bool = False) -> IngestResult:
        return self._ingest_service.run(force=force)

    def search(
        self,
        query: str,
        limit: Optional[int] = None,
        mode: SearchMode | str = SearchMode.HYBRID,
    ) -> list[SearchResult]:
        """Search the knowledge base.

        Args:
            query: Search query.
            limit: Maximum results; defaults to the configured limit.
            mode: lexical, vector or hybrid.

        Returns:
            Results, best first.
        """
        limit = limit or self._default_limit
        return self._search_service.search(query, limit, mode)

    def list_documents(self) -> DocumentListing:
        """Indexed documents, or the files on disk when nothing is indexed yet."""
        stats = self._store.stats()
        if stats.document_count == 0:
            paths = self._source.list_paths()
            if paths:
                logger.info(f"Index is empty; listing {len(paths)} files not yet indexed")
            return DocumentListing(paths=paths, document_count=0, chunk_count=0, indexed=False)

        return DocumentListing(
            paths=[doc.path for doc in self._store.get_all_documents()],
            document_count=stats.document_count,
            chunk_count=stats.chunk_count,
        )

    def get_document_text(self, path: str) -> Optional[str]:
        """Full text of a file in the knowledge base, or None if not found."""
        try:
            return self._source.read_optional(path)
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"Could not read {path}: {e}")
            return None

    def status(self) -> dict:
        stats = self._store.stats()
        return {
            "db_path": stats.db_path,
            "document_count": stats.document_count,
            "chunk_count": stats.chunk_count,
            **self._ingest_service.status(),
        }


def format_results(results: list[SearchResult]) -> str:
    """Render results as a numbered markdown list."""
    if not results:
        return "No results found."

    return "\n\n".join(
        f"{i}. **{r.doc_path}** ({r.match_type.value}, score: {r.score:.4f})\n   {r.snippet()}"
        for i, r in enumerate(results, 1)
    )
