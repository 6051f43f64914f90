"""
Knowledge index and corpus loader tests.
"""

import threading

import numpy as np
import pytest

from convo_agent.core.errors import CollaboratorUnavailable
from convo_agent.memory.embedding_model import HashEmbeddingProvider
from convo_agent.retrieval.ingestion.corpus_loader import (
    load_markdown_corpus,
    split_paragraphs,
)
from convo_agent.retrieval.knowledge_index import (
    PLACEHOLDER_CONTENT,
    PLACEHOLDER_SOURCE,
    KnowledgeIndex,
)


CORPUS = [
    ("The weather tool reports current conditions for a city anywhere in the world.", "tools.md"),
    ("Session memory keeps the most recent conversation messages per session.", "memory.md"),
    ("Arithmetic expressions are evaluated by a restricted recursive descent parser.", "tools.md"),
    ("Embeddings are deterministic hashed vectors with a fixed dimension.", "retrieval.md"),
]


def make_index(pairs=None, source=None, dimension=256):
    if source is None:
        source = lambda: list(pairs or [])
    return KnowledgeIndex(HashEmbeddingProvider(dimension), source)


class TestKnowledgeIndexQuery:

    def test_returns_at_most_top_k(self):
        index = make_index(CORPUS)
        assert len(index.query("session memory", 2)) == 2
        assert len(index.query("session memory", 10)) == len(CORPUS)

    def test_sorted_by_descending_score(self):
        results = make_index(CORPUS).query("session memory messages", 4)
        scores = [r.score for r in results]
        assert scores == sorted(scores, reverse=True)
        assert results[0].chunk.source_id == "memory.md"

    def test_ties_keep_corpus_order(self):
        pairs = [
            ("identical chunk text for tie breaking purposes here", "first.md"),
            ("identical chunk text for tie breaking purposes here", "second.md"),
            ("identical chunk text for tie breaking purposes here", "third.md"),
        ]
        results = make_index(pairs).query("completely unrelated words", 3)
        assert [r.chunk.source_id for r in results] == ["first.md", "second.md", "third.md"]

    def test_empty_corpus_returns_empty(self):
        index = make_index([])
        assert index.query("anything", 3) == []
        assert index.size == 0

    def test_non_positive_top_k_returns_empty(self):
        assert make_index(CORPUS).query("weather", 0) == []

    def test_empty_query_does_not_raise(self):
        results = make_index(CORPUS).query("", 3)
        assert len(results) == 3
        assert all(r.score == 0.0 for r in results)

    def test_embeddings_precomputed_once(self):
        calls = []

        class CountingEmbedder(HashEmbeddingProvider):
            def embed(self, text):
                calls.append(text)
                return super().embed(text)

        index = KnowledgeIndex(CountingEmbedder(64), lambda: CORPUS)
        index.query("first", 1)
        index.query("second", 1)
        # corpus embedded once, plus one embedding per query
        assert len(calls) == len(CORPUS) + 2


    def test_accepts_any_embedding_provider(self):
        class KeywordEmbedder:
            vocabulary = ["weather", "session", "arithmetic", "embeddings"]

            def embed(self, text):
                words = (text or "").lower().split()
                return np.array([float(w in words) for w in self.vocabulary])

        index = KnowledgeIndex(KeywordEmbedder(), lambda: CORPUS)
        results = index.query("arithmetic", 1)

        assert results[0].chunk.source_id == "tools.md"
        assert results[0].chunk.content.startswith("Arithmetic")
        assert results[0].score == pytest.approx(1.0)


class TestKnowledgeIndexBuild:

    def test_placeholder_when_source_unavailable(self):
        def failing_source():
            raise CollaboratorUnavailable("no docs")

        index = make_index(source=failing_source)
        results = index.query("agents", 3)

        assert len(results) == 1
        assert results[0].chunk.content == PLACEHOLDER_CONTENT
        assert results[0].chunk.source_id == PLACEHOLDER_SOURCE

    def test_build_is_idempotent(self):
        calls = []

        def source():
            calls.append(1)
            return CORPUS

        index = make_index(source=source)
        index.build()
        index.build()
        index.query("weather", 1)
        assert len(calls) == 1
        assert index.is_built

    def test_concurrent_first_queries_build_once(self):
        calls = []
        gate = threading.Event()

        def slow_source():
            calls.append(1)
            gate.wait(1)
            return CORPUS

        index = make_index(source=slow_source)
        threads = [threading.Thread(target=index.query, args=("weather", 2)) for _ in range(8)]
        for t in threads:
            t.start()
        gate.set()
        for t in threads:
            t.join()

        assert len(calls) == 1
        assert index.size == len(CORPUS)


class TestCorpusLoader:

    def test_split_paragraphs_filters_short_fragments(self):
        text = "tiny\n\n" + "x" * 50 + "\n\n" + "y" * 51
        assert split_paragraphs(text) == ["y" * 51]

    def test_split_paragraphs_strips_and_handles_crlf(self):
        para = "a paragraph that is definitely longer than fifty characters in total"
        assert split_paragraphs(f"  {para}  \r\n\r\nshort") == [para]

    def test_loads_markdown_only_in_sorted_order(self, tmp_path):
        long_a = "Alpha paragraph long enough to be kept by the fifty character filter."
        long_b = "Bravo paragraph long enough to be kept by the fifty character filter."
        (tmp_path / "b.md").write_text(long_b, encoding="utf-8")
        (tmp_path / "a.md").write_text(long_a + "\n\nshort", encoding="utf-8")
        (tmp_path / "notes.txt").write_text(long_a, encoding="utf-8")

        assert load_markdown_corpus(str(tmp_path)) == [(long_a, "a.md"), (long_b, "b.md")]

    def test_missing_directory_raises_unavailable(self, tmp_path):
        with pytest.raises(CollaboratorUnavailable):
            load_markdown_corpus(str(tmp_path / "missing"))

    def test_missing_directory_falls_back_to_placeholder(self, tmp_path):
        index = KnowledgeIndex(
            HashEmbeddingProvider(64),
            lambda: load_markdown_corpus(str(tmp_path / "missing")),
        )
        index.build()
        assert index.size == 1
