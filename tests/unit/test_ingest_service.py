"""Unit tests for IngestService."""

from qmd.core.capability import Configured
from qmd.core.chunking import TextChunker
from qmd.core.services.ingest_service import IngestService, compute_hash
from qmd.infrastructure.document_loaders import FileSystemSource


LONG_TEXT = "\n\n".join(
    f"Section {i}. " + " ".join(f"Sentence {i}-{j} about database replication." for j in range(30))
    for i in range(4)
)


def test_force_ingest_of_empty_store(ingest, store, chunker, write_doc):
    write_doc("a.md", "Dogs are loyal. Cats are independent.")
    write_doc("b.md", LONG_TEXT)

    result = ingest.run(force=True)

    assert (result.added, result.updated, result.deleted) == (2, 0, 0)
    expected_chunks = len(chunker.chunk("Dogs are loyal. Cats are independent.")) + len(
        chunker.chunk(LONG_TEXT)
    )
    assert result.total_chunks == expected_chunks
    assert store.stats().chunk_count == expected_chunks
    assert result.errors == []


def test_second_run_is_a_no_op(ingest, store, embedder, write_doc):
    write_doc("a.md", "first document")
    write_doc("b.md", "second document")
    ingest.run()
    before = {d.path: d.updated_at for d in store.get_all_documents()}
    calls_before = len(embedder.calls)

    result = ingest.run()

    assert (result.added, result.updated, result.deleted) == (0, 0, 0)
    assert result.total_chunks == 0
    assert len(embedder.calls) == calls_before
    assert {d.path: d.updated_at for d in store.get_all_documents()} == before


def test_single_byte_change_updates_only_that_document(ingest, store, embedder, write_doc):
    write_doc("a.md", "alpha content")
    write_doc("b.md", "beta content")
    write_doc("c.md", "gamma content")
    ingest.run()
    embedder.calls.clear()

    write_doc("b.md", "beta contenT")
    result = ingest.run()

    assert (result.added, result.updated, result.deleted) == (0, 1, 0)
    assert embedder.calls == [["beta contenT"]]
    assert store.get_document_by_path("b.md").hash == compute_hash("beta contenT")


def test_removed_file_is_deleted_with_chunks(ingest, store, kb_dir, write_doc):
    write_doc("a.md", "keep me")
    write_doc("gone.md", "remove me")
    ingest.run()
    doc_id = store.get_document_by_path("gone.md").id

    (kb_dir / "gone.md").unlink()
    result = ingest.run()

    assert result.deleted == 1
    assert store.get_document_by_path("gone.md") is None
    assert store.get_chunks_for_document(doc_id) == []
    assert [d.path for d in store.get_all_documents()] == ["a.md"]


def test_force_reindexes_unchanged_documents(ingest, write_doc):
    write_doc("a.md", "alpha")
    write_doc("b.md", "beta")
    ingest.run()

    result = ingest.run(force=True)

    assert (result.added, result.updated, result.deleted) == (0, 2, 0)
    assert result.total_chunks == 2


def test_walks_subdirectories_and_skips_other_files(ingest, store, write_doc):
    write_doc("top.md", "top level")
    write_doc("guides/deep/nested.md", "nested doc")
    write_doc("notes.txt", "not markdown")
    write_doc("image.png", "binary-ish")

    ingest.run()

    assert [d.path for d in store.get_all_documents()] == ["guides/deep/nested.md", "top.md"]


def test_empty_file_is_tracked_without_chunks(ingest, store, write_doc):
    write_doc("empty.md", "   \n\n  ")

    result = ingest.run()

    assert result.added == 1
    assert result.total_chunks == 0
    assert store.stats().chunk_count == 0


def test_without_embeddings_chunks_have_no_vectors(lexical_ingest, store, write_doc):
    write_doc("a.md", "Dogs are loyal.")

    result = lexical_ingest.run()

    assert result.added == 1
    assert store.stats().chunk_count == 1
    assert store.get_all_chunks_with_embeddings() == []
    assert len(store.search_lexical("dogs", 5)) == 1


def test_vectors_stored_when_embeddings_enabled(ingest, store, write_doc):
    write_doc("a.md", "database replication")

    ingest.run()

    chunks = store.get_all_chunks_with_embeddings()
    assert len(chunks) == 1
    assert chunks[0].embedding == [2.0, 0.0, 0.0, 0.0]


def test_unreadable_file_does_not_block_others(ingest, store, kb_dir, write_doc):
    write_doc("good.md", "readable")
    (kb_dir / "bad.md").write_bytes(b"\xff\xfe\x00 not utf-8 \xc3")

    result = ingest.run()

    assert result.added == 1
    assert len(result.errors) == 1
    assert result.errors[0].startswith("Error processing bad.md:")
    assert store.get_document_by_path("bad.md") is None


def test_provider_error_on_new_document_leaves_nothing(ingest, store, embedder, write_doc):
    write_doc("a.md", "alpha")
    embedder.fail = True

    result = ingest.run()

    assert result.added == 0
    assert "quota exceeded" in result.errors[0]
    assert store.get_document_by_path("a.md") is None


def test_upstream_error_body_is_recorded_per_document(
    store, source, chunker, upstream_error_embedder, write_doc
):
    write_doc("a.md", "alpha")
    write_doc("b.md", "beta")
    ingest = IngestService(store, Configured(upstream_error_embedder), source, chunker)

    result = ingest.run()

    assert result.added == 0
    assert len(result.errors) == 2
    assert all("No provider available" in e for e in result.errors)
    assert store.stats().document_count == 0


def test_provider_error_on_update_keeps_old_chunks(ingest, store, embedder, write_doc):
    write_doc("a.md", "original words")
    write_doc("b.md", "other words")
    ingest.run()
    old_hash = store.get_document_by_path("a.md").hash

    write_doc("a.md", "changed words")
    write_doc("b.md", "other words changed")
    embedder.fail = True
    result = ingest.run()

    assert result.updated == 0
    assert len(result.errors) == 2
    doc = store.get_document_by_path("a.md")
    assert doc.hash == old_hash
    assert [c.content for c in store.get_chunks_for_document(doc.id)] == ["original words"]

    embedder.fail = False
    retry = ingest.run()
    assert retry.updated == 2
    assert retry.errors == []


def test_missing_root_reports_error_and_keeps_store(store, embedder, chunker, tmp_path, write_doc):
    write_doc("a.md", "alpha")
    IngestService(store, Configured(embedder), FileSystemSource(tmp_path / "kb"), chunker).run()

    missing = FileSystemSource(tmp_path / "does-not-exist")
    result = IngestService(store, Configured(embedder), missing, chunker).run()

    assert result.deleted == 0
    assert "not found" in result.errors[0]
    assert store.stats().document_count == 1


def test_status(store, embedder, source):
    service = IngestService(store, Configured(embedder), source, TextChunker(300, 30))

    status = service.status()

    assert status["chunk_size"] == 300
    assert status["chunk_overlap"] == 30
    assert status["embeddings_enabled"] is True
    assert status["embedding_model"] == "fake/concepts"
    assert status["kb_path"] == str(source.root)


def test_status_without_embeddings(lexical_ingest):
    status = lexical_ingest.status()

    assert status["embeddings_enabled"] is False
    assert status["embedding_model"] == ""
