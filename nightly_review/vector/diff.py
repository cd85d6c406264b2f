"""
Semantic change test between two embeddings of the same chunk.
"""

from typing import Optional, Sequence

import numpy as np

DEFAULT_SIMILARITY_THRESHOLD = 0.98


def cosine_similarity(vec_a: Sequence[float], vec_b: Sequence[float]) -> Optional[float]:
    """Cosine similarity, or None when either vector has zero norm or the shapes differ."""
    a = np.asarray(vec_a, dtype=float)
    b = np.asarray(vec_b, dtype=float)
    if a.shape != b.shape:
        return None

    norm_a = np.linalg.norm(a)
    norm_b = np.linalg.norm(b)
    if norm_a == 0 or norm_b == 0:
        return None

    return float(np.dot(a, b) / (norm_a * norm_b))


def are_meaningfully_different(new_embedding: Optional[Sequence[float]],
                               old_embedding: Optional[Sequence[float]],
                               threshold: float = DEFAULT_SIMILARITY_THRESHOLD) -> bool:
    """
    Decide whether a changed chunk changed in meaning.

    A missing vector, a zero vector or a dimension mismatch counts as different.

    Args:
        new_embedding: Embedding of the current content
        old_embedding: Embedding stored under the prior content hash
        threshold: Similarity at or above which the change is ignored

    Returns:
        True when similarity < threshold
    """
    if new_embedding is None or old_embedding is None:
        return True
    if len(new_embedding) == 0 or len(old_embedding) == 0:
        return True

    similarity = cosine_similarity(new_embedding, old_embedding)
    if similarity is None:
        return True
    return similarity < threshold
