"""
Vector Store - Store and search chunk embeddings with metadata filtering.

Uses ChromaDB (persistent on disk, or in-memory for tests and previews).

Features:
- Semantic search with cosine similarity
- Optional return of stored embeddings (needed for MMR re-ranking)
- Filtering by document ID and tags (a chunk matches if it has any requested tag)
- Delete-by-document for re-indexing
"""

import logging
from pathlib import Path
from typing import Optional
from dataclasses import dataclass, field

from ..config import get_section
from ..processing.chunker import DocumentChunk

logger = logging.getLogger(__name__)

TAG_PREFIX = "tag:"


@dataclass
class SearchResult:
    """A single retrieval candidate."""
    chunk_id: str
    document_id: str
    file_name: str
    content: str
    score: float
    chunk_index: int = 0
    metadata: dict = field(default_factory=dict)
    embedding: Optional[list[float]] = None


@dataclass
class VectorStoreConfig:
    """Configuration for vector store."""
    collection_name: str = "documents"
    persist_directory: Optional[str] = "data/vectordb"  # None = in-memory

    @classmethod
    def from_config(cls, config: Optional[dict] = None) -> "VectorStoreConfig":
        section = get_section(config, "vector_store")
        return cls(
            collection_name=section.get("collection_name", cls.collection_name),
            persist_directory=section.get("persist_directory", cls.persist_directory),
        )


class VectorStore:
    """
    Vector database for semantic search over document chunks.

    Usage:
        store = VectorStore()
        store.upsert_chunks(chunks)
        results = store.search(query_embedding, top_k=5, tags=["finance"])
    """

    def __init__(self, config: Optional[VectorStoreConfig] = None, client=None):
        self.config = config or VectorStoreConfig()
        self._client = client
        self._collection = None
        self._init_store()

    def _init_store(self):
        """Initialize ChromaDB."""
        try:
            import chromadb
            from chromadb.config import Settings

            if self._client is None:
                settings = Settings(anonymized_telemetry=False)
                if self.config.persist_directory:
                    persist_dir = Path(self.config.persist_directory)
                    persist_dir.mkdir(parents=True, exist_ok=True)
                    self._client = chromadb.PersistentClient(path=str(persist_dir), settings=settings)
                else:
                    self._client = chromadb.EphemeralClient(settings=settings)

            self._collection = self._client.get_or_create_collection(
                name=self.config.collection_name,
                metadata={"hnsw:space": "cosine"},
            )

            logger.info(
                f"VectorStore initialized: collection={self.config.collection_name}, "
                f"chunks={self._collection.count()}"
            )
        except ImportError:
            logger.error("chromadb not installed. Run: pip install chromadb")
            raise
        except Exception as e:
            logger.error(f"Failed to initialize VectorStore: {e}")
            raise

    @property
    def count(self) -> int:
        """Number of chunks in the collection."""
        return self._collection.count() if self._collection else 0

    @staticmethod
    def _chunk_metadata(chunk: DocumentChunk) -> dict:
        """Flatten chunk fields into ChromaDB metadata (scalars only)."""
        meta = {
            "document_id": chunk.document_id,
            "chunk_index": chunk.chunk_index,
            "start_position": chunk.start_position,
            "end_position": chunk.end_position,
            "file_name": chunk.metadata.get("file_name", ""),
            "content_type": chunk.metadata.get("content_type", ""),
            "tags": ",".join(chunk.tags),
        }
        for tag in chunk.tags:
            meta[f"{TAG_PREFIX}{tag}"] = True
        return meta

    def upsert_chunks(self, chunks: list[DocumentChunk]):
        """
        Store chunks with their embeddings.

        Raises:
            ValueError: If any chunk has no embedding
        """
        if not chunks:
            return

        missing = [c.id for c in chunks if c.embedding is None]
        if missing:
            raise ValueError(f"{len(missing)} chunks have no embedding - embed before upserting")

        self._collection.upsert(
            ids=[c.id for c in chunks],
            documents=[c.content for c in chunks],
            embeddings=[list(c.embedding) for c in chunks],
            metadatas=[self._chunk_metadata(c) for c in chunks],
        )
        logger.debug(f"Upserted {len(chunks)} chunks to vector store")

    def _build_where_clause(
        self,
        document_id: Optional[str] = None,
        tags: Optional[list[str]] = None,
    ) -> Optional[dict]:
        """Document filter AND (any of the tags)."""
        conditions = []

        if document_id:
            conditions.append({"document_id": {"$eq": document_id}})

        if tags:
            tag_conditions = [{f"{TAG_PREFIX}{t}": {"$eq": True}} for t in tags]
            if len(tag_conditions) == 1:
                conditions.append(tag_conditions[0])
            else:
                conditions.append({"$or": tag_conditions})

        if len(conditions) == 1:
            return conditions[0]
        elif len(conditions) > 1:
            return {"$and": conditions}
        return None

    def _query(
        self,
        query_embedding: list[float],
        top_k: int,
        document_id: Optional[str],
        tags: Optional[list[str]],
        include_embeddings: bool,
    ) -> list[SearchResult]:
        if top_k <= 0 or self.count == 0:
            return []

        include = ["documents", "metadatas", "distances"]
        if include_embeddings:
            include.append("embeddings")

        results = self._collection.query(
            query_embeddings=[list(query_embedding)],
            n_results=min(top_k, self.count),
            where=self._build_where_clause(document_id, tags),
            include=include,
        )

        search_results = []
        if not results["ids"] or not results["ids"][0]:
            return search_results

        embeddings = results.get("embeddings") if include_embeddings else None
        for i, chunk_id in enumerate(results["ids"][0]):
            distance = results["distances"][0][i]
            meta = results["metadatas"][0][i] or {}
            embedding = None
            if embeddings is not None and len(embeddings) > 0:
                embedding = [float(x) for x in embeddings[0][i]]

            search_results.append(SearchResult(
                chunk_id=chunk_id,
                document_id=meta.get("document_id", ""),
                file_name=meta.get("file_name", ""),
                content=results["documents"][0][i] or "",
                score=1 - distance,  # cosine distance to similarity
                chunk_index=int(meta.get("chunk_index", 0)),
                metadata={k: v for k, v in meta.items() if not k.startswith(TAG_PREFIX)},
                embedding=embedding,
            ))

        return search_results

    def search(
        self,
        query_embedding: list[float],
        top_k: int = 5,
        document_id: Optional[str] = None,
        tags: Optional[list[str]] = None,
    ) -> list[SearchResult]:
        """Nearest chunks by cosine similarity, best first, without embeddings."""
        return self._query(query_embedding, top_k, document_id, tags, include_embeddings=False)

    def search_with_embeddings(
        self,
        query_embedding: list[float],
        top_k: int = 5,
        document_id: Optional[str] = None,
        tags: Optional[list[str]] = None,
    ) -> list[SearchResult]:
        """Same as search(), with each result carrying its stored embedding."""
        return self._query(query_embedding, top_k, document_id, tags, include_embeddings=True)

    def delete_document_chunks(self, document_id: str):
        """Delete all chunks belonging to a document."""
        existing = self._collection.get(where={"document_id": {"$eq": document_id}})
        ids = existing["ids"] if existing else []
        if not ids:
            logger.debug(f"No chunks found for document {document_id} - nothing to delete")
            return

        self._collection.delete(ids=ids)
        logger.info(f"Deleted {len(ids)} chunks for document {document_id}")

    def get_stats(self) -> dict:
        """Get vector store statistics."""
        return {
            "collection_name": self.config.collection_name,
            "chunk_count": self.count,
            "persist_directory": self.config.persist_directory,
        }
