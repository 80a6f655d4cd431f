"""Cosine similarity and top-K ranking over a category's embeddings.

Candidates that cannot be scored (different dimensionality, zero vector) are
left out of the ranking rather than given a score of zero.
"""

from typing import List, Mapping, Optional, Tuple

import numpy as np
from loguru import logger

from ..errors import DimensionMismatch, ZeroNormVector


def cosine_similarity(a: np.ndarray, b: np.ndarray) -> float:
    """Compute cosine similarity between two vectors.

    Args:
        a: First vector
        b: Second vector

    Returns:
        dot(a, b) / (|a| * |b|), clipped to [-1, 1]

    Raises:
        DimensionMismatch: vectors have different lengths
        ZeroNormVector: either vector has zero magnitude
    """
    a = np.asarray(a, dtype=np.float64).ravel()
    b = np.asarray(b, dtype=np.float64).ravel()
    if a.shape != b.shape:
        raise DimensionMismatch(expected=a.shape[0], actual=b.shape[0])

    norm_a = np.linalg.norm(a)
    norm_b = np.linalg.norm(b)
    if norm_a == 0.0 or norm_b == 0.0:
        raise ZeroNormVector("Cosine similarity undefined for a zero vector")

    return float(np.clip(np.dot(a, b) / (norm_a * norm_b), -1.0, 1.0))


def rank(
    query_vector: np.ndarray,
    candidates: Mapping[str, np.ndarray],
    exclude_name: Optional[str],
    k: int,
    skipped: Optional[List[Tuple[str, str]]] = None,
) -> List[Tuple[str, float]]:
    """Rank candidates by cosine similarity to the query.

    Args:
        query_vector: Vector of the reference item
        candidates: Mapping of item name to vector
        exclude_name: Name to leave out (case-insensitive), usually the
            reference item itself
        k: Maximum number of results; k <= 0 returns nothing
        skipped: If given, ``(name, reason)`` is appended for every candidate
            that could not be scored

    Returns:
        Up to k ``(name, score)`` pairs, by descending score and then by
        ascending case-folded name
    """
    if k <= 0:
        return []

    excluded = exclude_name.strip().casefold() if exclude_name else None
    scored = []
    for name, vector in candidates.items():
        if excluded is not None and name.strip().casefold() == excluded:
            continue
        try:
            score = cosine_similarity(query_vector, vector)
        except (DimensionMismatch, ZeroNormVector) as e:
            logger.debug(f"Not ranking '{name}': {e}")
            if skipped is not None:
                skipped.append((name, str(e)))
            continue
        scored.append((name, score))

    scored.sort(key=lambda item: (-item[1], item[0].casefold(), item[0]))
    return scored[:k]
