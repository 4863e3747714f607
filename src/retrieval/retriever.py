"""
Retriever - Coordinates embedding, semantic/keyword search, fusion and re-ranking.

Pipeline per query:
1. Embed the query
2. Semantic search (with stored embeddings when re-ranking is on)
3. Keyword search, concurrently, when hybrid search is on
4. Reciprocal Rank Fusion of the two lists (hybrid only)
5. MMR re-ranking (re-ranking only)
6. Cap to top_k

When hybrid search or re-ranking is on, each source is asked for
top_k * candidate_multiplier results so fusion and MMR have enough material.
"""

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Optional

from ..config import get_section
from .fusion import DEFAULT_RRF_K, reciprocal_rank_fusion
from .interfaces import EmbeddingProvider, KeywordSearcher, SemanticSearcher
from .mmr import mmr_rerank
from .vector_store import SearchResult

logger = logging.getLogger(__name__)


@dataclass
class SearchConfig:
    """Defaults for search behaviour; per-call overrides win when given."""
    use_hybrid_search: bool = False
    use_reranking: bool = False
    mmr_lambda: float = 0.5  # 1.0 = pure relevance, 0.0 = pure diversity
    candidate_multiplier: int = 3  # topK=5, multiplier=3 -> 15 candidates per source
    rrf_k: int = DEFAULT_RRF_K

    def __post_init__(self):
        if not 0.0 <= self.mmr_lambda <= 1.0:
            raise ValueError(f"mmr_lambda must be in [0, 1], got {self.mmr_lambda}")
        if self.candidate_multiplier < 1:
            raise ValueError(f"candidate_multiplier must be >= 1, got {self.candidate_multiplier}")
        if self.rrf_k <= 0:
            raise ValueError(f"rrf_k must be positive, got {self.rrf_k}")

    @classmethod
    def from_config(cls, config: Optional[dict] = None) -> "SearchConfig":
        section = get_section(config, "search")
        return cls(
            use_hybrid_search=bool(section.get("use_hybrid_search", False)),
            use_reranking=bool(section.get("use_reranking", False)),
            mmr_lambda=float(section.get("mmr_lambda", 0.5)),
            candidate_multiplier=int(section.get("candidate_multiplier", 3)),
            rrf_k=int(section.get("rrf_k", DEFAULT_RRF_K)),
        )


class Retriever:
    """
    Retrieval orchestrator.

    Usage:
        retriever = Retriever(embedding_service, vector_store, bm25_index)
        results = retriever.retrieve("What is the refund policy?", top_k=5)
        results = retriever.retrieve("refund", top_k=5, use_hybrid_search=True, use_reranking=True)
    """

    def __init__(
        self,
        embedding_service: EmbeddingProvider,
        vector_store: SemanticSearcher,
        keyword_index: Optional[KeywordSearcher] = None,
        config: Optional[SearchConfig] = None,
    ):
        self.embedding_service = embedding_service
        self.vector_store = vector_store
        self.keyword_index = keyword_index
        self.config = config or SearchConfig()

    def retrieve(
        self,
        query: str,
        top_k: int = 5,
        document_id: Optional[str] = None,
        tags: Optional[list[str]] = None,
        use_hybrid_search: Optional[bool] = None,
        use_reranking: Optional[bool] = None,
    ) -> list[SearchResult]:
        """
        Retrieve the most relevant chunks for a query.

        Args:
            query: Query text
            top_k: Maximum number of results
            document_id: Restrict to one document
            tags: Restrict to chunks carrying any of these tags
            use_hybrid_search: Override config.use_hybrid_search
            use_reranking: Override config.use_reranking

        Returns:
            Up to top_k results, best first, with no duplicate chunk IDs.
            An empty list means nothing relevant was found.
        """
        if not query or not query.strip():
            raise ValueError("query must not be empty")
        if top_k < 1:
            raise ValueError(f"top_k must be >= 1, got {top_k}")

        hybrid = use_hybrid_search if use_hybrid_search is not None else self.config.use_hybrid_search
        rerank = use_reranking if use_reranking is not None else self.config.use_reranking

        if hybrid and self.keyword_index is None:
            raise RuntimeError("Hybrid search requested but no keyword index is configured")

        fetch_k = top_k * self.config.candidate_multiplier if (hybrid or rerank) else top_k

        start_time = time.time()
        try:
            query_embedding = self.embedding_service.embed(query)
        except Exception as e:
            logger.error(f"Query embedding failed: {e}")
            raise

        semantic_results, keyword_results = self._gather_candidates(
            query, query_embedding, fetch_k, document_id, tags, hybrid, rerank,
        )

        if hybrid:
            # Keep the whole pool when MMR still has to choose from it
            fuse_limit = fetch_k if rerank else top_k
            candidates = reciprocal_rank_fusion(
                semantic_results, keyword_results, top_k=fuse_limit, k=self.config.rrf_k,
            )
        else:
            candidates = semantic_results

        if rerank:
            candidates = mmr_rerank(candidates, query_embedding, top_k, self.config.mmr_lambda)

        results = candidates[:top_k]

        elapsed_ms = (time.time() - start_time) * 1000
        logger.info(
            f"Retrieved {len(results)} chunks (hybrid={hybrid}, rerank={rerank}, "
            f"semantic={len(semantic_results)}, keyword={len(keyword_results)}) in {elapsed_ms:.0f}ms"
        )
        return results

    def _gather_candidates(
        self,
        query: str,
        query_embedding: list[float],
        fetch_k: int,
        document_id: Optional[str],
        tags: Optional[list[str]],
        hybrid: bool,
        rerank: bool,
    ) -> tuple[list[SearchResult], list[SearchResult]]:
        """Run semantic and (optionally) keyword search; both must succeed."""
        semantic_search = self.vector_store.search_with_embeddings if rerank else self.vector_store.search

        if not hybrid:
            try:
                return semantic_search(query_embedding, fetch_k, document_id, tags), []
            except Exception as e:
                logger.error(f"Semantic search failed: {e}")
                raise

        with ThreadPoolExecutor(max_workers=2) as pool:
            semantic_future = pool.submit(semantic_search, query_embedding, fetch_k, document_id, tags)
            keyword_future = pool.submit(self.keyword_index.keyword_search, query, fetch_k, document_id, tags)

            try:
                semantic_results = semantic_future.result()
                keyword_results = keyword_future.result()
            except Exception as e:
                logger.error(f"Candidate retrieval failed: {e}")
                raise

        return semantic_results, keyword_results
