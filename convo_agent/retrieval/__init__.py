"""Retrieval package.

Architectural role:
    Provides similarity scoring, the in-memory knowledge index, and corpus
    ingestion used by the orchestrator to enrich requests with knowledge
    snippets.

Scope:
    - `similarity`: cosine similarity with defined zero/mismatch edge cases.
    - `knowledge_index`: build-once, read-many top-K retrieval.
    - `ingestion`: markdown corpus loading and paragraph chunking.
"""
