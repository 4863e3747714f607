"""
Maximal Marginal Relevance (MMR) for diversity-aware re-ranking.

Greedily selects results that are relevant to the query but dissimilar to
the results already selected:

    MMR = λ * sim(query, d) - (1 - λ) * max(sim(d, s) for s in selected)
"""

import logging
import math
from typing import Optional, Sequence

from .similarity import cosine_similarity
from .vector_store import SearchResult

logger = logging.getLogger(__name__)

TIE_TOLERANCE = 1e-12


def _query_similarity(candidate: SearchResult, query_embedding: Optional[Sequence[float]]) -> float:
    # Without an embedding the retrieval score stands in for query similarity
    if candidate.embedding is None or query_embedding is None:
        return candidate.score
    return cosine_similarity(candidate.embedding, query_embedding)


def _max_selected_similarity(candidate: SearchResult, selected: list[SearchResult]) -> float:
    if not selected or candidate.embedding is None:
        return 0.0
    return max(
        cosine_similarity(candidate.embedding, s.embedding) if s.embedding is not None else 0.0
        for s in selected
    )


def mmr_rerank(
    candidates: list[SearchResult],
    query_embedding: Optional[Sequence[float]],
    top_k: int,
    lambda_: float = 0.5,
) -> list[SearchResult]:
    """
    Select up to top_k candidates balancing relevance and diversity.

    Args:
        candidates: Candidate pool, ideally with embeddings populated
        query_embedding: Embedding of the query
        top_k: Number of results to select (clamped to the pool size)
        lambda_: Trade-off: 1.0 = pure relevance, 0.0 = pure diversity

    Returns:
        Selected candidates in selection order. Equal MMR scores keep input
        order (earlier candidate wins), with a secondary tie-break layered on
        top: a tied candidate less similar to the current selection goes first.
    """
    if not 0.0 <= lambda_ <= 1.0:
        raise ValueError(f"MMR lambda must be in [0, 1], got {lambda_}")

    if not candidates or top_k <= 0:
        return []

    top_k = min(top_k, len(candidates))
    remaining = list(candidates)
    selected: list[SearchResult] = []

    # Query similarity does not change between rounds
    query_sims = {id(c): _query_similarity(c, query_embedding) for c in remaining}

    while len(selected) < top_k and remaining:
        best_idx = None
        best_score = float("-inf")
        best_redundancy = float("inf")

        for idx, candidate in enumerate(remaining):
            redundancy = _max_selected_similarity(candidate, selected)
            mmr_score = lambda_ * query_sims[id(candidate)] - (1.0 - lambda_) * redundancy

            # Equal scores: the less redundant candidate wins, then the earlier one
            if math.isclose(mmr_score, best_score, abs_tol=TIE_TOLERANCE):
                if redundancy < best_redundancy - TIE_TOLERANCE:
                    best_score, best_redundancy, best_idx = mmr_score, redundancy, idx
            elif mmr_score > best_score:
                best_score, best_redundancy, best_idx = mmr_score, redundancy, idx

        if best_idx is None:
            break
        selected.append(remaining.pop(best_idx))

    logger.debug(f"MMR selected {len(selected)} of {len(candidates)} candidates (λ={lambda_})")
    return selected
