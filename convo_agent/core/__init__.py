"""Core orchestration package.

Architectural role:
    Exposes the request-orchestration layer that sits between the HTTP/CLI
    adapters and lower-level subsystems (session memory, retrieval, plugins,
    and response generation).

Composition:
    - `engine`: `Orchestrator`, the per-request control flow.
    - `factory`: one-shot construction of all services from settings.
    - `types`: shared data contracts.
    - `errors`: error taxonomy crossing component boundaries.
"""
