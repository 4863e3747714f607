"""Tests for the ChromaDB vector store, using an in-memory client."""

import uuid

import pytest

from src.processing.chunker import DocumentChunk
from src.retrieval.vector_store import VectorStore, VectorStoreConfig


def chunk(document_id, index, embedding, tags=None):
    return DocumentChunk(
        document_id=document_id,
        chunk_index=index,
        content=f"{document_id} chunk {index}",
        start_position=0,
        end_position=10,
        tags=tags or [],
        metadata={"file_name": f"{document_id}.txt", "content_type": "text/plain"},
        embedding=embedding,
    )


@pytest.fixture
def store():
    # In-memory clients share state within a process, so isolate by collection
    config = VectorStoreConfig(collection_name=f"test-{uuid.uuid4().hex[:12]}", persist_directory=None)
    store = VectorStore(config)
    store.upsert_chunks([
        chunk("policy", 0, [1.0, 0.0, 0.0], ["finance"]),
        chunk("policy", 1, [0.8, 0.2, 0.0], ["legal"]),
        chunk("handbook", 0, [0.0, 1.0, 0.0], ["hr", "finance"]),
        chunk("faq", 0, [0.0, 0.0, 1.0]),
    ])
    return store


class TestVectorStore:
    def test_search_orders_by_similarity(self, store):
        results = store.search([1.0, 0.0, 0.0], top_k=2)

        assert [(r.document_id, r.chunk_index) for r in results] == [("policy", 0), ("policy", 1)]
        assert results[0].score == pytest.approx(1.0, abs=1e-4)
        assert results[0].file_name == "policy.txt"
        assert results[0].embedding is None

    def test_search_with_embeddings(self, store):
        results = store.search_with_embeddings([1.0, 0.0, 0.0], top_k=1)
        assert results[0].embedding == pytest.approx([1.0, 0.0, 0.0])

    def test_document_filter(self, store):
        results = store.search([1.0, 0.0, 0.0], top_k=10, document_id="handbook")
        assert [r.document_id for r in results] == ["handbook"]

    def test_tag_filter_matches_any(self, store):
        finance = store.search([1.0, 0.0, 0.0], top_k=10, tags=["finance"])
        either = store.search([1.0, 0.0, 0.0], top_k=10, tags=["hr", "legal"])

        assert {(r.document_id, r.chunk_index) for r in finance} == {("policy", 0), ("handbook", 0)}
        assert {(r.document_id, r.chunk_index) for r in either} == {("policy", 1), ("handbook", 0)}

    def test_document_and_tag_filters_combine(self, store):
        results = store.search([1.0, 0.0, 0.0], top_k=10, document_id="policy", tags=["legal"])
        assert [(r.document_id, r.chunk_index) for r in results] == [("policy", 1)]

    def test_delete_document(self, store):
        store.delete_document_chunks("policy")

        assert store.count == 2
        assert all(r.document_id != "policy" for r in store.search([1.0, 0.0, 0.0], top_k=10))

    def test_upsert_requires_embeddings(self, store):
        with pytest.raises(ValueError):
            store.upsert_chunks([chunk("new", 0, None)])

    def test_upsert_same_chunk_replaces(self, store):
        store.upsert_chunks([chunk("faq", 0, [0.0, 0.5, 0.5])])
        assert store.count == 4

    def test_where_clause(self):
        build = VectorStore._build_where_clause
        assert build(None, None, None) is None
        assert build(None, "d", None) == {"document_id": {"$eq": "d"}}
        assert build(None, None, ["a", "b"]) == {"$or": [{"tag:a": {"$eq": True}}, {"tag:b": {"$eq": True}}]}
        assert build(None, "d", ["a"]) == {"$and": [{"document_id": {"$eq": "d"}}, {"tag:a": {"$eq": True}}]}
