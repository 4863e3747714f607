"""
Collaborator contracts used by the retriever and the indexer.

EmbeddingService, VectorStore and BM25Index implement these; tests use
in-memory fakes.
"""

from typing import Optional, Protocol

from ..processing.chunker import DocumentChunk
from .vector_store import SearchResult


class EmbeddingProvider(Protocol):
    def embed(self, text: str) -> list[float]: ...

    def embed_batch(self, texts: list[str]) -> list[list[float]]: ...


class SemanticSearcher(Protocol):
    def search(
        self,
        query_embedding: list[float],
        top_k: int = 5,
        document_id: Optional[str] = None,
        tags: Optional[list[str]] = None,
    ) -> list[SearchResult]: ...

    def search_with_embeddings(
        self,
        query_embedding: list[float],
        top_k: int = 5,
        document_id: Optional[str] = None,
        tags: Optional[list[str]] = None,
    ) -> list[SearchResult]: ...

    def upsert_chunks(self, chunks: list[DocumentChunk]) -> None: ...

    def delete_document_chunks(self, document_id: str) -> None: ...


class KeywordSearcher(Protocol):
    def keyword_search(
        self,
        query: str,
        top_k: int = 10,
        document_id: Optional[str] = None,
        tags: Optional[list[str]] = None,
    ) -> list[SearchResult]: ...

    def add_chunks(self, chunks: list[DocumentChunk]) -> None: ...

    def delete_document_chunks(self, document_id: str) -> None: ...
