"""
Reciprocal Rank Fusion of semantic and keyword result lists.

RRF_score(d) = sum over lists of 1 / (k + rank + 1), rank 0-based.
Only rank positions matter; the incoming scores are ignored.
"""

import dataclasses
import logging

from .vector_store import SearchResult

logger = logging.getLogger(__name__)

DEFAULT_RRF_K = 60


def reciprocal_rank_fusion(
    semantic_results: list[SearchResult],
    keyword_results: list[SearchResult],
    top_k: int,
    k: int = DEFAULT_RRF_K,
) -> list[SearchResult]:
    """
    Merge two ranked lists into one deduplicated list ordered by RRF score.

    Args:
        semantic_results: Vector search results, best first
        keyword_results: Keyword search results, best first
        top_k: Maximum number of fused results
        k: RRF constant (higher = flatter contribution curve)

    Returns:
        Copies of the candidates with score set to the fused score, best first.
        Equal scores keep first-encountered order (semantic list first).
    """
    if k <= 0:
        raise ValueError(f"RRF constant k must be positive, got {k}")
    if top_k < 0:
        raise ValueError(f"top_k must be non-negative, got {top_k}")

    fused_scores: dict[str, float] = {}
    candidates: dict[str, SearchResult] = {}

    for results in (semantic_results, keyword_results):
        seen_in_list = set()
        for rank, result in enumerate(results):
            # A repeated id within one list counts only at its best rank
            if result.chunk_id in seen_in_list:
                continue
            seen_in_list.add(result.chunk_id)

            if result.chunk_id not in candidates:
                candidates[result.chunk_id] = result
                fused_scores[result.chunk_id] = 0.0
            fused_scores[result.chunk_id] += 1.0 / (k + rank + 1)

    ordered = sorted(candidates, key=lambda chunk_id: fused_scores[chunk_id], reverse=True)

    fused = [
        dataclasses.replace(candidates[chunk_id], score=fused_scores[chunk_id])
        for chunk_id in ordered[:top_k]
    ]

    logger.debug(
        f"RRF fused {len(semantic_results)} semantic + {len(keyword_results)} keyword "
        f"results into {len(candidates)} unique, returning {len(fused)}"
    )
    return fused
