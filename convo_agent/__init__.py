"""Conversational request orchestrator.

Architectural role:
    Accepts a user utterance plus a session identifier, enriches it with
    short-term history and retrieved knowledge snippets, optionally delegates to
    deterministic tool plugins, and otherwise produces a generated reply.

Package layout:
    - `config`: environment-driven settings (`AgentSettings`).
    - `core`: orchestration engine, shared data contracts, error taxonomy.
    - `memory`: session store and embedding provider.
    - `retrieval`: similarity scoring, knowledge index, corpus ingestion.
    - `plugins`: ordered tool registry plus weather/arithmetic handlers.
    - `generation`: fallback response generators.
    - `prompting`: prompt assembly from request context.
    - `llm`: OpenAI-compatible transport used by the LLM generator.
    - `api`: HTTP and CLI adapters.
"""

__version__ = "0.1.0"
