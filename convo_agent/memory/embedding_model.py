"""Deterministic hashed embedding provider.

Architectural role:
    Supplies the fixed-dimension vectors used by `KnowledgeIndex` for both
    chunk indexing and query scoring. This is a placeholder semantic embedding:
    its contract is determinism and fixed dimensionality, not semantic accuracy.

Algorithm:
    1. Lowercase and split on whitespace (empty tokens are skipped).
    2. Hash each token with a signed 32-bit rolling hash (`h * 31 + ord(c)`).
    3. Accumulate `TOKEN_WEIGHT` at `abs(h) % dimension`.
    4. L2-normalize; all-zero vectors (empty input) stay zero.

Determinism:
    Pure function of the input text. No process-randomized `hash()` is used, so
    vectors are stable across interpreter runs.
"""

from typing import Protocol

import numpy as np


DEFAULT_DIMENSION = 1536
TOKEN_WEIGHT = 0.1


class EmbeddingProvider(Protocol):
    """Anything that maps text to a fixed-dimension vector, deterministically."""

    def embed(self, text: str) -> np.ndarray:
        ...


def stable_hash(token: str) -> int:
    """Return a signed 32-bit rolling hash of `token`."""
    h = 0
    for ch in token:
        h = (h * 31 + ord(ch)) & 0xFFFFFFFF
    if h >= 0x80000000:
        h -= 0x100000000
    return h


class HashEmbeddingProvider:
    """Maps text to an L2-normalized bag-of-hashed-tokens vector."""

    def __init__(self, dimension: int = DEFAULT_DIMENSION):
        if dimension <= 0:
            raise ValueError("Embedding dimension must be positive")
        self.dimension = dimension

    def embed(self, text: str) -> np.ndarray:
        """Embed one text.

        Args:
            text: Arbitrary input; `None` is treated as empty.

        Returns:
            float64 vector of length `dimension`.

        Edge cases:
            - Empty or whitespace-only input returns the zero vector.
        """
        vec = np.zeros(self.dimension, dtype=np.float64)

        for token in str(text or "").lower().split():
            vec[abs(stable_hash(token)) % self.dimension] += TOKEN_WEIGHT

        norm = np.linalg.norm(vec)
        if norm > 0:
            vec /= norm
        return vec

    def embed_batch(self, texts) -> list[np.ndarray]:
        return [self.embed(t) for t in texts]
