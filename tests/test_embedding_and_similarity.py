"""
Embedding provider and cosine similarity tests.
"""

import numpy as np
import pytest

from convo_agent.memory.embedding_model import HashEmbeddingProvider, stable_hash
from convo_agent.retrieval.similarity import cosine_similarity


class TestStableHash:

    def test_known_values(self):
        assert stable_hash("") == 0
        assert stable_hash("a") == 97
        assert stable_hash("ab") == 97 * 31 + 98

    def test_wraps_to_signed_32_bit(self):
        h = stable_hash("a fairly long token that overflows thirty two bits")
        assert -(2 ** 31) <= h < 2 ** 31


class TestHashEmbeddingProvider:

    def test_fixed_dimension(self):
        provider = HashEmbeddingProvider(dimension=64)
        assert provider.embed("hello world").shape == (64,)

    def test_default_dimension(self):
        assert HashEmbeddingProvider().embed("x").shape == (1536,)

    def test_deterministic(self):
        provider = HashEmbeddingProvider()
        first = provider.embed("weather in Paris")
        second = provider.embed("weather in Paris")
        assert np.array_equal(first, second)

    def test_deterministic_across_instances(self):
        a = HashEmbeddingProvider(dimension=128).embed("same text here")
        b = HashEmbeddingProvider(dimension=128).embed("same text here")
        assert np.array_equal(a, b)

    def test_empty_text_is_zero_vector(self):
        provider = HashEmbeddingProvider()
        for text in ("", "   ", None):
            vec = provider.embed(text)
            assert not vec.any()

    def test_nonempty_text_is_unit_length(self):
        vec = HashEmbeddingProvider().embed("retrieval augmented generation")
        assert np.linalg.norm(vec) == pytest.approx(1.0)

    def test_case_insensitive(self):
        provider = HashEmbeddingProvider()
        assert np.array_equal(provider.embed("Hello World"), provider.embed("hello world"))

    def test_embed_batch(self):
        provider = HashEmbeddingProvider(dimension=32)
        vecs = provider.embed_batch(["a", "b c"])
        assert len(vecs) == 2
        assert np.array_equal(vecs[0], provider.embed("a"))

    def test_rejects_non_positive_dimension(self):
        with pytest.raises(ValueError):
            HashEmbeddingProvider(dimension=0)


class TestCosineSimilarity:

    def test_self_similarity_is_one(self):
        v = HashEmbeddingProvider().embed("session memory keeps messages")
        assert cosine_similarity(v, v) == pytest.approx(1.0)

    def test_unnormalized_self_similarity_is_one(self):
        assert cosine_similarity([3.0, 4.0], [3.0, 4.0]) == pytest.approx(1.0)

    def test_zero_vector_gives_zero(self):
        assert cosine_similarity([1.0, 2.0], [0.0, 0.0]) == 0.0
        assert cosine_similarity([0.0, 0.0], [1.0, 2.0]) == 0.0

    def test_mismatched_lengths_give_zero(self):
        assert cosine_similarity([1.0, 2.0, 3.0], [1.0, 2.0]) == 0.0

    def test_empty_vectors_give_zero(self):
        assert cosine_similarity([], []) == 0.0

    def test_symmetric(self):
        provider = HashEmbeddingProvider(dimension=64)
        pairs = [
            ("weather in tokyo", "tokyo weather today"),
            ("calculate 2 + 2", "hello there"),
            ("", "non empty"),
        ]
        for left, right in pairs:
            a, b = provider.embed(left), provider.embed(right)
            assert cosine_similarity(a, b) == cosine_similarity(b, a)

    def test_opposite_vectors(self):
        assert cosine_similarity([1.0, 0.0], [-1.0, 0.0]) == pytest.approx(-1.0)

    def test_non_finite_input_gives_zero(self):
        inf = float("inf")
        assert cosine_similarity([inf, 1.0], [1.0, 1.0]) == 0.0
        assert cosine_similarity([float("nan"), 1.0], [1.0, 1.0]) == 0.0

    def test_orthogonal_vectors(self):
        assert cosine_similarity([1.0, 0.0], [0.0, 1.0]) == 0.0
