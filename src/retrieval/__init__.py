"""
Retrieval module for the grounding pipeline.

Components:
- EmbeddingService: Generate embeddings through an OpenAI-compatible API
- VectorStore: Store and search chunk embeddings (ChromaDB)
- BM25Index: Sparse keyword search
- reciprocal_rank_fusion: Merge semantic + keyword rankings
- mmr_rerank: Diversity-aware re-ranking
- Retriever: Orchestrates the above per query
"""

from .embedding_service import EmbeddingService, EmbeddingConfig
from .vector_store import VectorStore, VectorStoreConfig, SearchResult
from .bm25_index import BM25Index, BM25Config
from .similarity import cosine_similarity
from .fusion import reciprocal_rank_fusion, DEFAULT_RRF_K
from .mmr import mmr_rerank
from .retriever import Retriever, SearchConfig

__all__ = [
    "EmbeddingService",
    "EmbeddingConfig",
    "VectorStore",
    "VectorStoreConfig",
    "SearchResult",
    "BM25Index",
    "BM25Config",
    "cosine_similarity",
    "reciprocal_rank_fusion",
    "DEFAULT_RRF_K",
    "mmr_rerank",
    "Retriever",
    "SearchConfig",
]
