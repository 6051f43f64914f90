"""Immutable-after-build knowledge index with top-K similarity search.

Architectural role:
    Holds `(content, source_id)` chunks together with their precomputed
    embeddings and answers nearest-neighbor queries for the orchestrator.

Build lifecycle:
    - Built once, either eagerly (`build()` at startup) or lazily on the first
      `query()`. A lock with a double-checked flag guarantees concurrent first
      queries trigger a single build.
    - After build, `_chunks` is replaced by a tuple and never mutated, so reads
      are safe without synchronization.

Corpus fallback:
    If the chunk source raises, the index holds one synthetic placeholder chunk
    instead of failing. Queries against empty or placeholder-only corpora never
    raise.

Ranking model:
    Brute-force scoring of every chunk with the injected scorer, stable-sorted by
    descending score, so ties keep original corpus order.
"""

import logging
import threading
from collections.abc import Callable, Iterable

from convo_agent.core.types import KnowledgeChunk, ScoredChunk
from convo_agent.memory.embedding_model import EmbeddingProvider
from convo_agent.retrieval.similarity import cosine_similarity


logger = logging.getLogger(__name__)


PLACEHOLDER_CONTENT = "This is sample knowledge about AI agents and their capabilities."
PLACEHOLDER_SOURCE = "sample.md"


ChunkSource = Callable[[], Iterable[tuple[str, str]]]


class KnowledgeIndex:
    """Top-K retrieval over a corpus embedded once at build time."""

    def __init__(
        self,
        embedder: EmbeddingProvider,
        chunk_source: ChunkSource,
        scorer: Callable[..., float] = cosine_similarity,
    ):
        self._embedder = embedder
        self._chunk_source = chunk_source
        self._scorer = scorer
        self._chunks: tuple[KnowledgeChunk, ...] = ()
        self._built = False
        self._build_lock = threading.Lock()

    @property
    def is_built(self) -> bool:
        return self._built

    @property
    def size(self) -> int:
        return len(self._chunks)

    def build(self) -> None:
        """Load and embed the corpus once.

        Important behavior:
            - Idempotent; later calls return immediately.
            - Source failures are logged and replaced by the placeholder chunk.

        Edge cases:
            - A source that returns no pairs yields an empty index (not the
              placeholder): the corpus was available, just empty.
        """
        if self._built:
            return

        with self._build_lock:
            if self._built:
                return

            try:
                pairs = list(self._chunk_source())
            except Exception:
                logger.exception("Knowledge corpus unavailable, using placeholder chunk")
                pairs = [(PLACEHOLDER_CONTENT, PLACEHOLDER_SOURCE)]

            chunks = tuple(
                KnowledgeChunk(
                    content=content,
                    source_id=source_id,
                    embedding=self._embedder.embed(content),
                )
                for content, source_id in pairs
            )

            self._chunks = chunks
            self._built = True
            logger.info("Knowledge index built with %d chunk(s)", len(chunks))

    def query(self, text: str, top_k: int = 3) -> list[ScoredChunk]:
        """Return up to `top_k` chunks ranked by similarity to `text`.

        Args:
            text: Live query text.
            top_k: Maximum number of results.

        Returns:
            `ScoredChunk` list sorted by descending score, ties in corpus order.

        Edge cases:
            - Empty index or `top_k <= 0` returns `[]`.
            - Empty query text embeds to the zero vector, scoring every chunk 0.
        """
        self.build()

        chunks = self._chunks
        if not chunks or top_k <= 0:
            return []

        query_vec = self._embedder.embed(text)
        scored = [
            ScoredChunk(chunk=chunk, score=self._scorer(query_vec, chunk.embedding))
            for chunk in chunks
        ]
        scored.sort(key=lambda item: item.score, reverse=True)
        return scored[:top_k]
