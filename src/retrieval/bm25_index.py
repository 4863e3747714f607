"""
BM25 Index - Sparse keyword search over document chunks.

Uses rank_bm25 for keyword matching, complementing semantic search.
Results carry a placeholder score of 1.0: only their rank position is
meaningful to the fusion step.
"""

import logging
import pickle
import re
from pathlib import Path
from typing import Optional
from dataclasses import dataclass

from ..config import get_section
from ..processing.chunker import DocumentChunk
from .vector_store import SearchResult

logger = logging.getLogger(__name__)

KEYWORD_PLACEHOLDER_SCORE = 1.0


@dataclass
class BM25Config:
    """Configuration for BM25 index."""
    index_path: str = "data/processed/bm25_index.pkl"
    k1: float = 1.5  # Term frequency saturation
    b: float = 0.75  # Length normalization

    @classmethod
    def from_config(cls, config: Optional[dict] = None) -> "BM25Config":
        section = get_section(config, "bm25")
        return cls(
            index_path=section.get("index_path", cls.index_path),
            k1=section.get("k1", cls.k1),
            b=section.get("b", cls.b),
        )


@dataclass
class _IndexedEntry:
    chunk_id: str
    document_id: str
    file_name: str
    content: str
    chunk_index: int
    tags: list[str]


class BM25Index:
    """
    BM25 keyword index over chunks.

    Usage:
        index = BM25Index()
        index.add_chunks(chunks)
        results = index.keyword_search("refund policy", top_k=10)
    """

    def __init__(self, config: Optional[BM25Config] = None):
        self.config = config or BM25Config()
        self._index = None
        self._entries: list[_IndexedEntry] = []
        self._tokenized_corpus: list[list[str]] = []

    @staticmethod
    def _tokenize(text: str) -> list[str]:
        """Lowercase word tokenization, dropping punctuation and 1-char tokens."""
        text = re.sub(r"[^\w\s]", " ", text)
        return [t for t in text.lower().split() if len(t) > 1]

    def _rebuild(self):
        """Rebuild the BM25 model from the tokenized corpus."""
        from rank_bm25 import BM25Okapi

        if not self._tokenized_corpus:
            self._index = None
            return

        self._index = BM25Okapi(self._tokenized_corpus, k1=self.config.k1, b=self.config.b)

    def add_chunks(self, chunks: list[DocumentChunk]):
        """Add chunks to the index (replacing any with the same ID)."""
        if not chunks:
            return

        incoming = {c.id for c in chunks}
        kept = [(e, toks) for e, toks in zip(self._entries, self._tokenized_corpus) if e.chunk_id not in incoming]
        self._entries = [e for e, _ in kept]
        self._tokenized_corpus = [toks for _, toks in kept]

        for chunk in chunks:
            self._entries.append(_IndexedEntry(
                chunk_id=chunk.id,
                document_id=chunk.document_id,
                file_name=chunk.metadata.get("file_name", ""),
                content=chunk.content,
                chunk_index=chunk.chunk_index,
                tags=list(chunk.tags),
            ))
            self._tokenized_corpus.append(self._tokenize(chunk.content))

        self._rebuild()
        logger.info(f"BM25 index now holds {len(self._entries)} chunks")

    def delete_document_chunks(self, document_id: str):
        """Remove all chunks of a document from the index."""
        kept = [
            (e, toks) for e, toks in zip(self._entries, self._tokenized_corpus)
            if e.document_id != document_id
        ]
        removed = len(self._entries) - len(kept)
        if not removed:
            return

        self._entries = [e for e, _ in kept]
        self._tokenized_corpus = [toks for _, toks in kept]
        self._rebuild()
        logger.info(f"Removed {removed} chunks for document {document_id} from BM25 index")

    def keyword_search(
        self,
        query: str,
        top_k: int = 10,
        document_id: Optional[str] = None,
        tags: Optional[list[str]] = None,
    ) -> list[SearchResult]:
        """
        Search using BM25.

        Args:
            query: Search query text
            top_k: Number of results
            document_id: Optional document to restrict to
            tags: Optional tags; a chunk matches if it has any of them

        Returns:
            List of SearchResult, best first, each with the placeholder score
        """
        if self._index is None or top_k <= 0:
            return []

        query_tokens = self._tokenize(query)
        if not query_tokens:
            return []

        scores = self._index.get_scores(query_tokens)
        query_terms = set(query_tokens)
        wanted_tags = set(tags or [])

        results = []
        # Stable descending order so equal scores keep insertion order
        for idx in sorted(range(len(scores)), key=lambda i: scores[i], reverse=True):
            if len(results) >= top_k:
                break
            # A hit shares a token with the query; Okapi scores go negative for common terms
            if not query_terms.intersection(self._tokenized_corpus[idx]):
                continue

            entry = self._entries[idx]
            if document_id and entry.document_id != document_id:
                continue
            if wanted_tags and not wanted_tags.intersection(entry.tags):
                continue

            results.append(SearchResult(
                chunk_id=entry.chunk_id,
                document_id=entry.document_id,
                file_name=entry.file_name,
                content=entry.content,
                score=KEYWORD_PLACEHOLDER_SCORE,
                chunk_index=entry.chunk_index,
                metadata={"tags": ",".join(entry.tags)},
            ))

        return results

    @property
    def is_built(self) -> bool:
        """Check if index is built."""
        return self._index is not None

    @property
    def count(self) -> int:
        return len(self._entries)

    def save(self):
        """Save index to disk."""
        path = Path(self.config.index_path)
        path.parent.mkdir(parents=True, exist_ok=True)

        data = {
            "entries": [e.__dict__ for e in self._entries],
            "tokenized_corpus": self._tokenized_corpus,
            "config": {"k1": self.config.k1, "b": self.config.b},
        }

        with open(path, "wb") as f:
            pickle.dump(data, f)

        logger.info(f"BM25 index saved to {path}")

    def load(self) -> bool:
        """
        Load index from disk.

        Returns:
            True if loaded successfully, False if no saved index exists
        """
        path = Path(self.config.index_path)
        if not path.exists():
            logger.warning(f"BM25 index not found at {path}")
            return False

        with open(path, "rb") as f:
            data = pickle.load(f)

        self._entries = [_IndexedEntry(**e) for e in data["entries"]]
        self._tokenized_corpus = data["tokenized_corpus"]
        self.config.k1 = data["config"]["k1"]
        self.config.b = data["config"]["b"]
        self._rebuild()

        logger.info(f"BM25 index loaded: {len(self._entries)} chunks")
        return True

    def get_stats(self) -> dict:
        """Get index statistics."""
        return {
            "chunk_count": len(self._entries),
            "index_path": self.config.index_path,
            "is_built": self.is_built,
        }
