"""Ingest service - change-aware document indexing."""

import hashlib
import logging
from typing import Optional

from ..capability import EmbeddingCapability
from ..chunking import TextChunker
from ..exceptions import QmdError
from ..models.document import IngestResult
from ..protocols.document_source import DocumentSourceProtocol
from ..protocols.document_store import DocumentStoreProtocol

logger = logging.getLogger(__name__)


def compute_hash(content: str) -> str:
    """MD5 hex digest of the UTF-8 text, used only for change detection."""
    return hashlib.md5(content.encode("utf-8")).hexdigest()


class IngestService:
    """Service for syncing the document source into the store."""

    def __init__(
        self,
        store: DocumentStoreProtocol,
        embeddings: EmbeddingCapability,
        source: DocumentSourceProtocol,
        chunker: TextChunker,
    ):
        """Initialize ingest service.

        Args:
            store: Document store.
            embeddings: Embedding capability; unconfigured means no vectors.
            source: Files to index.
            chunker: Text chunker.
        """
        self._store = store
        self._embeddings = embeddings
        self._source = source
        self._chunker = chunker

    def run(self, force: bool = False) -> IngestResult:
        """Index new and changed documents, drop removed ones.

        Args:
            force: Re-index every document even if unchanged.

        Returns:
            Counts of added, updated and deleted documents, chunks written,
            and per-document error messages.
        """
        result = IngestResult()

        if not self._source.exists():
            message = f"Knowledge base path not found: {self._source.root}"
            logger.error(message)
            result.errors.append(message)
            return result

        logger.info(f"Scanning {self._source.root} for documents...")
        paths = self._source.list_paths()
        logger.info(f"Found {len(paths)} documents")

        existing_docs = self._store.get_all_documents()
        seen: set[str] = set()

        for path in paths:
            seen.add(path)
            try:
                self._sync_document(path, force, result)
            except (OSError, UnicodeDecodeError, ValueError, QmdError) as e:
                message = f"Error processing {path}: {e}"
                logger.error(message)
                result.errors.append(message)

        for doc in existing_docs:
            if doc.path in seen:
                continue
            try:
                self._store.delete_document(doc.id)
            except QmdError as e:
                message = f"Error deleting {doc.path}: {e}"
                logger.error(message)
                result.errors.append(message)
                continue
            result.deleted += 1
            logger.info(f"Deleted: {doc.path}")

        logger.info(
            f"Ingestion complete: {result.added} added, {result.updated} updated, "
            f"{result.deleted} deleted, {len(result.errors)} errors"
        )
        return result

    def _sync_document(self, path: str, force: bool, result: IngestResult) -> None:
        content = self._source.read(path)
        content_hash = compute_hash(content)
        existing = self._store.get_document_by_path(path)

        if existing is not None and not force and existing.hash == content_hash:
            logger.debug(f"Skip unchanged: {path}")
            return

        # Embed before touching the store so a provider failure keeps old chunks
        chunks = self._chunker.chunk(content)
        embeddings = self._embed(chunks)

        if existing is None:
            with self._store.transaction():
                doc_id = self._store.insert_document(path, content_hash)
                for i, chunk in enumerate(chunks):
                    vector = embeddings[i] if embeddings is not None else None
                    self._store.insert_chunk(doc_id, i, chunk, vector)
            result.added += 1
            logger.info(f"Added: {path} ({len(chunks)} chunks)")
        else:
            self._store.replace_chunks(existing.id, content_hash, chunks, embeddings)
            result.updated += 1
            logger.info(f"Updated: {path} ({len(chunks)} chunks)")

        result.total_chunks += len(chunks)

    def _embed(self, chunks: list[str]) -> Optional[list[list[float]]]:
        if not chunks or not self._embeddings.is_available():
            return None
        return self._embeddings.require().embed(chunks)

    def status(self) -> dict:
        """Ingestion configuration summary."""
        return {
            "kb_path": str(self._source.root),
            "chunk_size": self._chunker.chunk_size,
            "chunk_overlap": self._chunker.overlap,
            "embeddings_enabled": self._embeddings.is_available(),
            "embedding_model": self._embeddings.model_name,
        }
