"""Error taxonomy for the orchestration pipeline.

Propagation policy:
    - `ValidationError`: missing/blank request field. Crosses the orchestrator
      boundary; adapters map it to HTTP 400. Never retried.
    - `InternalError`: any unanticipated fault. Crosses the boundary as an opaque
      failure (HTTP 500); the message never carries internal detail.
    - `CollaboratorUnavailable`: an external lookup (weather API, corpus source,
      LLM endpoint) failed. Absorbed by the component that owns the collaborator
      and turned into degraded output.
    - `PluginExecutionFailure`: a matched plugin could not produce a result.
      Absorbed by the plugin registry and turned into a failed `PluginResult`.
"""


class AgentError(Exception):
    """Base class for every error raised by this package."""


class ValidationError(AgentError):
    """Raised when a required request field is missing or empty."""


class InternalError(AgentError):
    """Opaque failure surfaced to callers when request handling breaks."""

    def __init__(self, message: str = "Internal server error"):
        super().__init__(message)


class CollaboratorUnavailable(AgentError):
    """Raised by collaborator adapters when an external dependency fails."""


class PluginExecutionFailure(AgentError):
    """Raised inside plugin handlers when a matched request cannot be served."""
