"""Memory subsystem package.

Architectural role:
    Groups the stateful and vectorization components used by orchestration:
    - `session_store`: per-session short-term message history with FIFO cap and
      retention-based eviction.
    - `embedding_model`: deterministic hashed text embeddings for retrieval.
"""

from convo_agent.memory.embedding_model import EmbeddingProvider, HashEmbeddingProvider
from convo_agent.memory.session_store import SessionStore

__all__ = ["EmbeddingProvider", "HashEmbeddingProvider", "SessionStore"]
