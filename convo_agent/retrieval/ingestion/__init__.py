"""Corpus ingestion package.

Architectural role:
    Turns external documents into `(content, source_id)` chunk pairs for the
    knowledge index. Embedding and ranking happen in `retrieval.knowledge_index`.
"""
