"""Cosine similarity scoring for retrieval.

Defined edge cases (not errors):
    - Mismatched vector lengths -> 0.0
    - Empty vectors -> 0.0
    - Either vector with zero magnitude -> 0.0

Non-finite inputs that produce a NaN or infinite score also yield 0.0.

The result is symmetric and clamped to `[-1, 1]` to absorb floating-point drift.
"""

import math

import numpy as np


def cosine_similarity(a, b) -> float:
    """Return the cosine similarity of two equal-length vectors."""
    va = np.asarray(a, dtype=np.float64).ravel()
    vb = np.asarray(b, dtype=np.float64).ravel()

    if va.shape != vb.shape or va.size == 0:
        return 0.0

    norm_a = float(np.linalg.norm(va))
    norm_b = float(np.linalg.norm(vb))
    if norm_a == 0.0 or norm_b == 0.0:
        return 0.0

    score = float(np.dot(va, vb)) / (norm_a * norm_b)
    if not math.isfinite(score):
        return 0.0
    return max(-1.0, min(1.0, score))
