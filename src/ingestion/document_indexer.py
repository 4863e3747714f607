"""
Document Indexer - Turns document text into searchable chunks.

Pipeline:
1. Text extraction (files only)
2. Chunking with the configured or per-call strategy
3. Batch embedding of chunk contents
4. Upsert into the vector store and the keyword index

Updating a document replaces its chunks wholesale (delete, then index again);
deleting a document removes its chunks from both stores.
"""

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union

from ..processing.chunker import ChunkingStrategy, DocumentChunk, DocumentChunker
from ..retrieval.interfaces import EmbeddingProvider, KeywordSearcher, SemanticSearcher
from .text_extractor import CONTENT_TYPES_BY_SUFFIX, extract_text

logger = logging.getLogger(__name__)


@dataclass
class IndexingResult:
    """Result of indexing a document."""
    document_id: str
    file_name: str
    chunks: list[DocumentChunk] = field(default_factory=list)
    processing_time_ms: float = 0

    @property
    def chunk_count(self) -> int:
        return len(self.chunks)


class DocumentIndexer:
    """
    Index, re-index and remove documents.

    Usage:
        indexer = DocumentIndexer(embedding_service, vector_store, bm25_index)
        result = indexer.index_document(doc_id, text, "handbook.txt", tags=["hr"])
        indexer.delete_document(doc_id)
    """

    def __init__(
        self,
        embedding_service: EmbeddingProvider,
        vector_store: SemanticSearcher,
        keyword_index: Optional[KeywordSearcher] = None,
        chunker: Optional[DocumentChunker] = None,
    ):
        self.embedding_service = embedding_service
        self.vector_store = vector_store
        self.keyword_index = keyword_index
        self.chunker = chunker or DocumentChunker()

    def index_document(
        self,
        document_id: str,
        text: str,
        file_name: str,
        content_type: str = "text/plain",
        tags: Optional[list[str]] = None,
        strategy: Optional[Union[str, ChunkingStrategy]] = None,
    ) -> IndexingResult:
        """
        Chunk, embed and store a document's text.

        Raises:
            InvalidChunkingStrategyError: If strategy is not recognised (nothing is stored)
            ValueError: If the text has no content
        """
        start_time = time.time()

        # Resolve the strategy first so a bad name fails before any work
        options = self.chunker.resolve_options(strategy)

        if not text or not text.strip():
            raise ValueError("No text content could be extracted from the document.")

        chunks = self.chunker.chunk_document(document_id, text, options.strategy, tags=tags)

        if chunks:
            embeddings = self.embedding_service.embed_batch([c.content for c in chunks])
            if len(embeddings) != len(chunks):
                raise RuntimeError(
                    f"Embedding count mismatch: {len(embeddings)} embeddings for {len(chunks)} chunks"
                )

            for chunk, embedding in zip(chunks, embeddings):
                chunk.embedding = list(embedding)
                chunk.metadata["file_name"] = file_name
                chunk.metadata["content_type"] = content_type

            self.vector_store.upsert_chunks(chunks)
            if self.keyword_index is not None:
                self.keyword_index.add_chunks(chunks)

        elapsed_ms = (time.time() - start_time) * 1000
        logger.info(
            f"Indexed document {document_id} ({file_name}): {len(chunks)} chunks, "
            f"strategy={options.strategy.value}, {elapsed_ms:.0f}ms"
        )

        return IndexingResult(
            document_id=document_id,
            file_name=file_name,
            chunks=chunks,
            processing_time_ms=elapsed_ms,
        )

    def update_document(
        self,
        document_id: str,
        text: str,
        file_name: str,
        content_type: str = "text/plain",
        tags: Optional[list[str]] = None,
        strategy: Optional[Union[str, ChunkingStrategy]] = None,
    ) -> IndexingResult:
        """Replace a document's chunks with freshly indexed ones."""
        self.chunker.resolve_options(strategy)

        logger.info(f"Re-indexing document {document_id}")
        self.delete_document(document_id)
        return self.index_document(document_id, text, file_name, content_type, tags, strategy)

    def delete_document(self, document_id: str):
        """Remove all chunks of a document from both stores."""
        self.vector_store.delete_document_chunks(document_id)
        if self.keyword_index is not None:
            self.keyword_index.delete_document_chunks(document_id)

    def index_file(
        self,
        path: Union[str, Path],
        document_id: str,
        tags: Optional[list[str]] = None,
        strategy: Optional[Union[str, ChunkingStrategy]] = None,
    ) -> IndexingResult:
        """
        Extract text from a file and index it.

        Raises:
            UnsupportedContentTypeError: If the file type is not supported
        """
        path = Path(path)
        content_type = CONTENT_TYPES_BY_SUFFIX.get(path.suffix.lower(), "application/octet-stream")
        text = extract_text(path.read_bytes(), content_type)
        logger.debug(f"Extracted {len(text)} characters from {path.name}")

        return self.index_document(document_id, text, path.name, content_type, tags, strategy)
