"""Shared fixtures: temporary store, knowledge base directory, fake embedder."""

import re
from pathlib import Path

import httpx
import pytest

from qmd.core.capability import Configured, Unconfigured
from qmd.core.chunking import TextChunker
from qmd.core.exceptions import ProviderError
from qmd.core.services.ingest_service import IngestService
from qmd.core.services.search_service import SearchService
from qmd.infrastructure.document_loaders import FileSystemSource
from qmd.infrastructure.embeddings.openrouter import OpenRouterEmbedder
from qmd.infrastructure.stores.sqlite_store import SqliteStore


# ── Fakes ────────────────────────────────────────────────────────────


# Words mapped onto a few "concept" axes; everything else lands on the last one.
CONCEPTS = {
    "database": 0, "replication": 0, "consistency": 0, "lag": 0, "sql": 0,
    "cache": 1, "eviction": 1, "policy": 1, "memory": 1,
    "dogs": 2, "cats": 2, "loyal": 2, "independent": 2,
}
DIMENSIONS = 4


class FakeEmbedder:
    """Deterministic concept-count embedder; records every call."""

    def __init__(self, dimensions: int = DIMENSIONS, fail: bool = False):
        self._dimensions = dimensions
        self.fail = fail
        self.calls: list[list[str]] = []

    @property
    def model_name(self) -> str:
        return "fake/concepts"

    @property
    def dimensions(self) -> int:
        return self._dimensions

    def embed(self, texts: list[str]) -> list[list[float]]:
        self.calls.append(list(texts))
        if self.fail:
            raise ProviderError("quota exceeded", model=self.model_name)
        return [self._vector(t) for t in texts]

    def embed_single(self, text: str) -> list[float]:
        return self.embed([text])[0]

    def _vector(self, text: str) -> list[float]:
        vector = [0.0] * self._dimensions
        for word in re.findall(r"\w+", text.lower()):
            vector[min(CONCEPTS.get(word, DIMENSIONS - 1), self._dimensions - 1)] += 1.0
        return vector


# ── Fixtures ─────────────────────────────────────────────────────────


@pytest.fixture
def store(tmp_path: Path):
    with SqliteStore(tmp_path / "cache" / "qmd.db") as s:
        yield s


@pytest.fixture
def kb_dir(tmp_path: Path) -> Path:
    path = tmp_path / "kb"
    path.mkdir()
    return path


@pytest.fixture
def source(kb_dir: Path) -> FileSystemSource:
    return FileSystemSource(kb_dir)


@pytest.fixture
def embedder() -> FakeEmbedder:
    return FakeEmbedder()


@pytest.fixture
def make_embedder():
    return FakeEmbedder


@pytest.fixture
def chunker() -> TextChunker:
    return TextChunker(chunk_size=500, overlap=50)


@pytest.fixture
def ingest(store, embedder, source, chunker) -> IngestService:
    return IngestService(store, Configured(embedder), source, chunker)


@pytest.fixture
def lexical_ingest(store, source, chunker) -> IngestService:
    return IngestService(store, Unconfigured(), source, chunker)


@pytest.fixture
def search(store, embedder) -> SearchService:
    return SearchService(store, Configured(embedder))


@pytest.fixture
def write_doc(kb_dir: Path):
    """Write a file under the knowledge base root."""

    def _write(relative_path: str, content: str) -> Path:
        path = kb_dir / relative_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def upstream_error_embedder() -> OpenRouterEmbedder:
    """OpenRouter embedder whose provider answers 200 with an error body."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"error": {"code": 502, "message": "No provider available"}})

    return OpenRouterEmbedder(
        api_key="test-key",
        http_client=httpx.Client(transport=httpx.MockTransport(handler)),
    )
