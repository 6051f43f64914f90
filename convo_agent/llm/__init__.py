"""LLM access package.

Architectural role:
    Provides request-payload construction and HTTP transport used by the
    LLM-backed response generator.

Module split:
    - `service`: canonical prompt-to-payload adapter.
    - `client`: OpenAI-compatible HTTP transport and response parsing.
"""
