"""Cosine similarity over embedding vectors."""

from typing import Optional, Sequence

import numpy as np

EPSILON = 1e-10


def cosine_similarity(a: Optional[Sequence[float]], b: Optional[Sequence[float]]) -> float:
    """
    Cosine similarity between two vectors.

    Returns 0.0 instead of raising when either vector is missing or empty,
    when the dimensions differ, or when either magnitude is negligible.
    """
    if a is None or b is None:
        return 0.0

    va = np.asarray(a, dtype=np.float64).ravel()
    vb = np.asarray(b, dtype=np.float64).ravel()
    if va.size == 0 or va.shape != vb.shape:
        return 0.0

    denom = np.linalg.norm(va) * np.linalg.norm(vb)
    if denom < EPSILON:
        return 0.0

    return float(np.dot(va, vb) / denom)
