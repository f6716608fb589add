"""Document store protocol for dependency injection."""
from contextlib import AbstractContextManager
from typing import Optional, Protocol, Sequence, runtime_checkable

from ..models.document import Chunk, Document, StoreStats


@runtime_checkable
class DocumentStoreProtocol(Protocol):
    """Protocol for durable document, chunk and lexical index storage."""

    def transaction(self) -> AbstractContextManager[None]:
        """Group mutations into one atomic unit."""
        ...

    def get_document_by_path(self, path: str) -> Optional[Document]:
        ...

    def insert_document(self, path: str, content_hash: str) -> int:
        """Insert a document and return its id."""
        ...

    def update_document_hash(self, doc_id: int, content_hash: str) -> None:
        ...

    def delete_document(self, doc_id: int) -> None:
        """Delete a document and, by cascade, its chunks."""
        ...

    def get_all_documents(self) -> list[Document]:
        ...

    def insert_chunk(
        self,
        doc_id: int,
        chunk_index: int,
        content: str,
        embedding: Optional[Sequence[float]] = None,
    ) -> int:
        ...

    def delete_chunks_for_document(self, doc_id: int) -> None:
        ...

    def replace_chunks(
        self,
        doc_id: int,
        content_hash: str,
        chunks: Sequence[str],
        embeddings: Optional[Sequence[Sequence[float]]] = None,
    ) -> None:
        """Atomically swap a document's chunk set and hash."""
        ...

    def get_all_chunks_with_embeddings(self) -> list[Chunk]:
        ...

    def get_chunk_by_id(self, chunk_id: int) -> Optional[Chunk]:
        ...

    def get_chunks_for_document(self, doc_id: int) -> list[Chunk]:
        ...

    def search_lexical(self, query: str, limit: int) -> list[tuple[int, float]]:
        """Ranked (chunk_id, rank) pairs; lower rank is better.

        Args:
            query: Free-text query. Operator characters are neutralized.
            limit: Maximum number of hits.

        Returns:
            Hits, best first. Empty when the query is blank or unparseable.
        """
        ...

    def stats(self) -> StoreStats:
        ...
