import logging
import re
import sqlite3
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional, Sequence

from qmd.core.exceptions import StoreError
from qmd.core.models.document import Chunk, Document, StoreStats
from qmd.core.similarity import blob_to_vector, vector_to_blob

logger = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS documents (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    path TEXT UNIQUE NOT NULL,
    hash TEXT NOT NULL,
    updated_at INTEGER NOT NULL
);

CREATE TABLE IF NOT EXISTS chunks (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    doc_id INTEGER NOT NULL REFERENCES documents(id) ON DELETE CASCADE,
    chunk_index INTEGER NOT NULL,
    content TEXT NOT NULL,
    embedding BLOB,
    UNIQUE(doc_id, chunk_index)
);

CREATE VIRTUAL TABLE IF NOT EXISTS chunks_fts USING fts5(
    content,
    content='chunks',
    content_rowid='id'
);

CREATE TRIGGER IF NOT EXISTS chunks_ai AFTER INSERT ON chunks BEGIN
    INSERT INTO chunks_fts(rowid, content) VALUES (new.id, new.content);
END;

CREATE TRIGGER IF NOT EXISTS chunks_ad AFTER DELETE ON chunks BEGIN
    INSERT INTO chunks_fts(chunks_fts, rowid, content) VALUES ('delete', old.id, old.content);
END;

CREATE TRIGGER IF NOT EXISTS chunks_au AFTER UPDATE ON chunks BEGIN
    INSERT INTO chunks_fts(chunks_fts, rowid, content) VALUES ('delete', old.id, old.content);
    INSERT INTO chunks_fts(rowid, content) VALUES (new.id, new.content);
END;

CREATE INDEX IF NOT EXISTS idx_chunks_doc_id ON chunks(doc_id);
CREATE INDEX IF NOT EXISTS idx_documents_path ON documents(path);
"""

_WORD_RE = re.compile(r"\w+", re.UNICODE)


def build_match_query(query: str) -> str:
    """Turn free text into an FTS5 MATCH expression.

    Every word is quoted, so operators (AND, NEAR, ``*``, ``:``, ``-``) lose
    their meaning and punctuation is dropped. Words are implicitly ANDed.
    """
    return " ".join(f'"{word}"' for word in _WORD_RE.findall(query))


def _now_ms() -> int:
    return int(time.time() * 1000)


class SqliteStore:
    """Documents, chunks, embeddings and an FTS5 index in one SQLite file."""

    def __init__(self, db_path: str | Path):
        """Open (and create if needed) the database.

        Args:
            db_path: Database file path, or ":memory:".
        """
        self._db_path = str(db_path)
        if self._db_path != ":memory:":
            Path(self._db_path).parent.mkdir(parents=True, exist_ok=True)

        self._tx_depth = 0
        try:
            # Autocommit mode; transactions are managed explicitly
            self._conn = sqlite3.connect(self._db_path, isolation_level=None)
            self._conn.row_factory = sqlite3.Row
            self._conn.execute("PRAGMA journal_mode = WAL")
            self._conn.execute("PRAGMA foreign_keys = ON")
            self._conn.executescript(SCHEMA)
        except sqlite3.Error as e:
            raise StoreError("open", f"{self._db_path}: {e}") from e

        logger.info(f"Opened store: {self._db_path}")

    @property
    def db_path(self) -> str:
        return self._db_path

    def close(self) -> None:
        self._conn.close()

    def __enter__(self) -> "SqliteStore":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    @contextmanager
    def transaction(self) -> Iterator[None]:
        """Run the enclosed mutations atomically. Nested calls join the outer one."""
        if self._tx_depth > 0:
            self._tx_depth += 1
            try:
                yield
            finally:
                self._tx_depth -= 1
            return

        try:
            self._conn.execute("BEGIN IMMEDIATE")
        except sqlite3.Error as e:
            raise StoreError("begin transaction", str(e)) from e

        self._tx_depth = 1
        try:
            yield
        except BaseException:
            self._tx_depth = 0
            self._rollback()
            raise

        self._tx_depth = 0
        try:
            self._conn.execute("COMMIT")
        except sqlite3.Error as e:
            self._rollback()
            raise StoreError("commit", str(e)) from e

    def _rollback(self) -> None:
        # SQLite may already have rolled back, e.g. after SQLITE_FULL
        if self._conn.in_transaction:
            self._conn.execute("ROLLBACK")

    def _execute(self, operation: str, sql: str, params: Sequence = ()) -> sqlite3.Cursor:
        try:
            return self._conn.execute(sql, params)
        except sqlite3.Error as e:
            raise StoreError(operation, str(e)) from e

    # Documents

    def get_document_by_path(self, path: str) -> Optional[Document]:
        row = self._execute(
            "get document", "SELECT * FROM documents WHERE path = ?", (path,)
        ).fetchone()
        return _to_document(row) if row else None

    def insert_document(self, path: str, content_hash: str) -> int:
        cur = self._execute(
            f"insert document {path}",
            "INSERT INTO documents (path, hash, updated_at) VALUES (?, ?, ?)",
            (path, content_hash, _now_ms()),
        )
        return cur.lastrowid

    def update_document_hash(self, doc_id: int, content_hash: str) -> None:
        self._execute(
            f"update document {doc_id}",
            "UPDATE documents SET hash = ?, updated_at = ? WHERE id = ?",
            (content_hash, _now_ms(), doc_id),
        )

    def delete_document(self, doc_id: int) -> None:
        # Chunks go via ON DELETE CASCADE
        self._execute(
            f"delete document {doc_id}", "DELETE FROM documents WHERE id = ?", (doc_id,)
        )

    def get_all_documents(self) -> list[Document]:
        rows = self._execute(
            "list documents", "SELECT * FROM documents ORDER BY path"
        ).fetchall()
        return [_to_document(row) for row in rows]

    # Chunks

    def insert_chunk(
        self,
        doc_id: int,
        chunk_index: int,
        content: str,
        embedding: Optional[Sequence[float]] = None,
    ) -> int:
        blob = vector_to_blob(embedding) if embedding is not None else None
        cur = self._execute(
            f"insert chunk {chunk_index} of document {doc_id}",
            "INSERT INTO chunks (doc_id, chunk_index, content, embedding) VALUES (?, ?, ?, ?)",
            (doc_id, chunk_index, content, blob),
        )
        return cur.lastrowid

    def delete_chunks_for_document(self, doc_id: int) -> None:
        self._execute(
            f"delete chunks of document {doc_id}",
            "DELETE FROM chunks WHERE doc_id = ?",
            (doc_id,),
        )

    def replace_chunks(
        self,
        doc_id: int,
        content_hash: str,
        chunks: Sequence[str],
        embeddings: Optional[Sequence[Sequence[float]]] = None,
    ) -> None:
        """Swap a document's chunks and hash in one transaction.

        Args:
            doc_id: Document id.
            content_hash: New content hash.
            chunks: New chunk texts, in order.
            embeddings: One vector per chunk, or None to store without vectors.
        """
        if embeddings is not None and len(embeddings) != len(chunks):
            raise ValueError(
                f"got {len(embeddings)} embeddings for {len(chunks)} chunks"
            )

        with self.transaction():
            self.delete_chunks_for_document(doc_id)
            self.update_document_hash(doc_id, content_hash)
            for i, content in enumerate(chunks):
                embedding = embeddings[i] if embeddings is not None else None
                self.insert_chunk(doc_id, i, content, embedding)

    def get_all_chunks_with_embeddings(self) -> list[Chunk]:
        rows = self._execute(
            "load embeddings",
            "SELECT * FROM chunks WHERE embedding IS NOT NULL ORDER BY id",
        ).fetchall()
        return [_to_chunk(row) for row in rows]

    def get_chunk_by_id(self, chunk_id: int) -> Optional[Chunk]:
        row = self._execute(
            f"get chunk {chunk_id}", "SELECT * FROM chunks WHERE id = ?", (chunk_id,)
        ).fetchone()
        return _to_chunk(row) if row else None

    def get_chunks_for_document(self, doc_id: int) -> list[Chunk]:
        rows = self._execute(
            f"get chunks of document {doc_id}",
            "SELECT * FROM chunks WHERE doc_id = ? ORDER BY chunk_index",
            (doc_id,),
        ).fetchall()
        return [_to_chunk(row) for row in rows]

    # Search

    def search_lexical(self, query: str, limit: int) -> list[tuple[int, float]]:
        match = build_match_query(query)
        if not match or limit <= 0:
            return []

        try:
            rows = self._conn.execute(
                "SELECT rowid, rank FROM chunks_fts WHERE chunks_fts MATCH ? "
                "ORDER BY rank LIMIT ?",
                (match, limit),
            ).fetchall()
        except sqlite3.OperationalError as e:
            logger.debug(f"FTS query failed for '{query}': {e}")
            return []
        except sqlite3.Error as e:
            raise StoreError("lexical search", str(e)) from e

        return [(row["rowid"], row["rank"]) for row in rows]

    def stats(self) -> StoreStats:
        docs = self._execute("count documents", "SELECT COUNT(*) FROM documents").fetchone()
        chunks = self._execute("count chunks", "SELECT COUNT(*) FROM chunks").fetchone()
        return StoreStats(
            document_count=docs[0], chunk_count=chunks[0], db_path=self._db_path
        )


def _to_document(row: sqlite3.Row) -> Document:
    return Document(
        id=row["id"], path=row["path"], hash=row["hash"], updated_at=row["updated_at"]
    )


def _to_chunk(row: sqlite3.Row) -> Chunk:
    blob = row["embedding"]
    return Chunk(
        id=row["id"],
        doc_id=row["doc_id"],
        chunk_index=row["chunk_index"],
        content=row["content"],
        embedding=blob_to_vector(blob) if blob is not None else None,
    )
