"""Search service - lexical, vector and hybrid retrieval."""

import logging
from typing import Optional

from ..capability import EmbeddingCapability
from ..exceptions import ProviderError, ProviderUnavailable, VectorDimensionMismatch
from ..models.document import MatchType, SearchMode, SearchResult
from ..protocols.document_store import DocumentStoreProtocol
from ..similarity import cosine_similarity
from ..strategies.fusion import FusionStrategy, ReciprocalRankFusion

logger = logging.getLogger(__name__)

UNKNOWN_PATH = "unknown"


class SearchService:
    """Search over stored chunks with rank fusion."""

    def __init__(
        self,
        store: DocumentStoreProtocol,
        embeddings: EmbeddingCapability,
        fusion: Optional[FusionStrategy] = None,
        fetch_multiplier: int = 3,
    ):
        """Initialize search service.

        Args:
            store: Document store.
            embeddings: Embedding capability used for query vectors.
            fusion: Strategy merging lexical and vector lists.
            fetch_multiplier: Candidates fetched per list = limit * multiplier.
        """
        if fetch_multiplier < 1:
            raise ValueError(f"fetch_multiplier must be >= 1, got {fetch_multiplier}")

        self._store = store
        self._embeddings = embeddings
        self._fusion = fusion or ReciprocalRankFusion()
        self._fetch_multiplier = fetch_multiplier

    def search(
        self, query: str, limit: int, mode: SearchMode | str = SearchMode.HYBRID
    ) -> list[SearchResult]:
        """Dispatch to the search method for ``mode``.

        Raises:
            ValueError: On an unknown mode.
        """
        mode = SearchMode(mode)
        if mode == SearchMode.LEXICAL:
            return self.lexical_search(query, limit)
        if mode == SearchMode.VECTOR:
            return self.vector_search(query, limit)
        return self.hybrid_search(query, limit)

    def lexical_search(self, query: str, limit: int) -> list[SearchResult]:
        """Keyword search over the full-text index (BM25)."""
        if limit <= 0:
            return []

        hits = self._store.search_lexical(query, limit)
        if not hits:
            return []

        paths = self._path_map()
        results = []
        for chunk_id, rank in hits:
            chunk = self._store.get_chunk_by_id(chunk_id)
            if chunk is None:
                continue
            results.append(
                SearchResult(
                    chunk_id=chunk_id,
                    doc_path=paths.get(chunk.doc_id, UNKNOWN_PATH),
                    content=chunk.content,
                    # Raw rank is lower-is-better
                    score=-rank,
                    match_type=MatchType.LEXICAL,
                )
            )
        return results

    def vector_search(self, query: str, limit: int) -> list[SearchResult]:
        """Cosine similarity scan over every stored embedding.

        Raises:
            ProviderUnavailable: If embeddings are not configured.
            ProviderError: If embedding the query fails.
            VectorDimensionMismatch: If stored vectors don't match the query's length.
        """
        embedder = self._embeddings.require()
        if limit <= 0:
            return []

        query_embedding = embedder.embed_single(query)

        chunks = self._store.get_all_chunks_with_embeddings()
        if not chunks:
            return []

        scored = [
            (cosine_similarity(query_embedding, chunk.embedding), chunk)
            for chunk in chunks
        ]
        scored.sort(key=lambda item: item[0], reverse=True)

        paths = self._path_map()
        return [
            SearchResult(
                chunk_id=chunk.id,
                doc_path=paths.get(chunk.doc_id, UNKNOWN_PATH),
                content=chunk.content,
                score=score,
                match_type=MatchType.VECTOR,
            )
            for score, chunk in scored[:limit]
        ]

    def hybrid_search(self, query: str, limit: int) -> list[SearchResult]:
        """Lexical + vector search merged by the fusion strategy.

        Falls back to lexical results if vector search is unavailable or fails.
        """
        if limit <= 0:
            return []

        fetch_limit = limit * self._fetch_multiplier
        lexical_results = self.lexical_search(query, fetch_limit)

        vector_results: list[SearchResult] = []
        if self._embeddings.is_available():
            try:
                vector_results = self.vector_search(query, fetch_limit)
            except (ProviderUnavailable, ProviderError, VectorDimensionMismatch) as e:
                logger.warning(f"Vector search failed for '{query}', using lexical only: {e}")

        if not vector_results:
            return lexical_results[:limit]

        if not lexical_results:
            return vector_results[:limit]

        fused = self._fusion.fuse(lexical_results, vector_results)
        logger.info(f"Hybrid search: returned {min(limit, len(fused))} results for '{query[:50]}'")
        return fused[:limit]

    def _path_map(self) -> dict[int, str]:
        return {doc.id: doc.path for doc in self._store.get_all_documents()}
