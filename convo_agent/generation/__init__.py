"""Fallback response generation package.

Architectural role:
    Produces the reply when no plugin handled a request successfully. The
    orchestrator treats generators as opaque `ResponseGenerator` capabilities.

Backends:
    - `template` (default): `TemplateResponseGenerator`, rule-based canned replies.
    - `llm`: `LLMResponseGenerator`, prompt assembly plus an OpenAI-compatible
      endpoint, degrading to templates on failure.
"""

import logging
from typing import Protocol

from convo_agent.config import AgentSettings
from convo_agent.core.types import PromptContext
from convo_agent.generation.llm_generator import LLMResponseGenerator
from convo_agent.generation.template import TemplateResponseGenerator


logger = logging.getLogger(__name__)


class ResponseGenerator(Protocol):
    def generate(self, context: PromptContext) -> str:
        """Return reply text for the request context."""
        ...


def build_response_generator(settings: AgentSettings) -> ResponseGenerator:
    """Select the generator backend named by `settings.generator_backend`."""
    backend = settings.generator_backend

    if backend == "llm":
        return LLMResponseGenerator(settings)

    if backend != "template":
        logger.warning("Unknown generator backend %r, using templates", backend)

    return TemplateResponseGenerator()


__all__ = [
    "LLMResponseGenerator",
    "ResponseGenerator",
    "TemplateResponseGenerator",
    "build_response_generator",
]
