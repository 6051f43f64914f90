"""Shared data contracts for orchestration, memory, retrieval, and plugins.

Architectural role:
    Defines the structural types passed between the session store, knowledge
    index, plugin registry, response generators, and the orchestration engine.

Ownership model:
    - `Message` and `Session` are owned by `SessionStore`; other components only
      ever see snapshot copies.
    - `KnowledgeChunk` is owned by `KnowledgeIndex` and never mutated after build.
    - `ScoredChunk`, `PluginResult`, and `PromptContext` are request-scoped and
      discarded when the request completes.

Determinism:
    These types are purely structural. `Message` and `KnowledgeChunk` are frozen
    so they can be shared across threads without copying.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Literal

import numpy as np


Role = Literal["user", "assistant", "system"]

ROLES: tuple[str, ...] = ("user", "assistant", "system")


def utc_now() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Message:
    """One immutable conversation turn."""

    role: Role
    content: str
    timestamp: datetime = field(default_factory=utc_now)

    def __post_init__(self) -> None:
        if self.role not in ROLES:
            raise ValueError(f"Unknown message role: {self.role!r}")


@dataclass
class Session:
    """Ordered message history for one conversation identifier.

    Attributes:
        id: Opaque session identifier supplied by the caller.
        messages: Chronological message list (insertion order).
        created_at: Time of the first append.
        last_activity: Time of the most recent append.
    """

    id: str
    messages: list[Message] = field(default_factory=list)
    created_at: datetime = field(default_factory=utc_now)
    last_activity: datetime = field(default_factory=utc_now)


@dataclass(frozen=True, eq=False)
class KnowledgeChunk:
    """Retrievable knowledge text with its source tag and precomputed embedding."""

    content: str
    source_id: str
    embedding: np.ndarray


@dataclass(frozen=True)
class ScoredChunk:
    chunk: KnowledgeChunk
    score: float


@dataclass(frozen=True)
class PluginResult:
    """Outcome of one plugin execution.

    Attributes:
        kind: Tag of the plugin that handled the request (`weather`, `math`).
        input: Raw argument handed to the plugin.
        output: Reply text on success, human-readable diagnostic on failure.
        success: Whether `output` may be returned to the user as-is.
    """

    kind: str
    input: str
    output: str
    success: bool


@dataclass
class PromptContext:
    """Request-scoped context assembled by the orchestrator for generation."""

    user_message: str
    recent_messages: list[Message] = field(default_factory=list)
    rag_chunks: list[ScoredChunk] = field(default_factory=list)
    plugin_result: PluginResult | None = None


@dataclass(frozen=True)
class AgentResponse:
    """Structured result returned for a handled request."""

    response: str
    session_id: str
    timestamp: datetime = field(default_factory=utc_now)

    def to_dict(self) -> dict[str, str]:
        return {
            "response": self.response,
            "session_id": self.session_id,
            "timestamp": self.timestamp.isoformat(),
        }
