"""
Shared fixtures and in-memory collaborator fakes.

The fakes record every call so tests can assert on fetch sizes and filters.
"""

import hashlib

import pytest

from src.retrieval.vector_store import SearchResult


def make_result(name: str, score: float = 0.8, embedding=None, document_id: str = None) -> SearchResult:
    """Build a candidate whose chunk ID, file name and content derive from name."""
    return SearchResult(
        chunk_id=f"chunk-{name}",
        document_id=document_id or f"doc-{name}",
        file_name=f"{name}.txt",
        content=f"content of {name}",
        score=score,
        chunk_index=0,
        embedding=embedding,
    )


class FakeEmbedder:
    """Deterministic embedder: fixed vectors for known texts, hashed vectors otherwise."""

    def __init__(self, vectors: dict = None, dimension: int = 4, fail: bool = False):
        self.vectors = vectors or {}
        self.dimension = dimension
        self.fail = fail
        self.calls = []
        self.batch_calls = []

    def _vector(self, text: str) -> list[float]:
        if text in self.vectors:
            return list(self.vectors[text])
        digest = hashlib.sha256(text.encode("utf-8")).digest()
        return [b / 255.0 + 0.01 for b in digest[:self.dimension]]

    def embed(self, text: str) -> list[float]:
        self.calls.append(text)
        if self.fail:
            raise ConnectionError("embedding backend unreachable")
        return self._vector(text)

    def embed_batch(self, texts: list[str]) -> list[list[float]]:
        self.batch_calls.append(list(texts))
        if self.fail:
            raise ConnectionError("embedding backend unreachable")
        return [self._vector(t) for t in texts]


class FakeVectorStore:
    """Returns preset results and records search/upsert/delete calls."""

    def __init__(self, results=None, fail: bool = False):
        self.results = list(results or [])
        self.fail = fail
        self.search_calls = []
        self.search_with_embeddings_calls = []
        self.upserted = []
        self.deleted = []

    def search(self, query_embedding, top_k=5, document_id=None, tags=None):
        self.search_calls.append((list(query_embedding), top_k, document_id, tags))
        if self.fail:
            raise ConnectionError("vector store unreachable")
        return [
            SearchResult(**{**r.__dict__, "embedding": None}) for r in self.results[:top_k]
        ]

    def search_with_embeddings(self, query_embedding, top_k=5, document_id=None, tags=None):
        self.search_with_embeddings_calls.append((list(query_embedding), top_k, document_id, tags))
        if self.fail:
            raise ConnectionError("vector store unreachable")
        return list(self.results[:top_k])

    def upsert_chunks(self, chunks):
        self.upserted.extend(chunks)

    def delete_document_chunks(self, document_id):
        self.deleted.append(document_id)
        self.upserted = [c for c in self.upserted if c.document_id != document_id]


class FakeKeywordIndex:
    """Returns preset results and records keyword_search/add/delete calls."""

    def __init__(self, results=None, fail: bool = False):
        self.results = list(results or [])
        self.fail = fail
        self.calls = []
        self.added = []
        self.deleted = []

    def keyword_search(self, query, top_k=10, document_id=None, tags=None):
        self.calls.append((query, top_k, document_id, tags))
        if self.fail:
            raise ConnectionError("keyword index unreachable")
        return list(self.results[:top_k])

    def add_chunks(self, chunks):
        self.added.extend(chunks)

    def delete_document_chunks(self, document_id):
        self.deleted.append(document_id)
        self.added = [c for c in self.added if c.document_id != document_id]


@pytest.fixture
def embedder():
    return FakeEmbedder()


@pytest.fixture
def vector_store():
    return FakeVectorStore()


@pytest.fixture
def keyword_index():
    return FakeKeywordIndex()
