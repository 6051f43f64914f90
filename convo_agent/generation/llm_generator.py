"""LLM-backed response generator with template degradation.

Control flow:
    PromptContext -> `build_agent_prompt` -> `llm.service.generate_answer`.

Failure handling:
    `CollaboratorUnavailable` from the transport, or an empty model answer,
    degrades to the wrapped template generator so a reply is always produced.
"""

import logging

from convo_agent.config import AgentSettings
from convo_agent.core.errors import CollaboratorUnavailable
from convo_agent.core.types import PromptContext
from convo_agent.generation.template import TemplateResponseGenerator
from convo_agent.llm.service import generate_answer
from convo_agent.prompting.prompt_builder import build_agent_prompt


logger = logging.getLogger(__name__)


class LLMResponseGenerator:
    def __init__(
        self,
        settings: AgentSettings,
        fallback: TemplateResponseGenerator | None = None,
        session=None,
    ):
        self._settings = settings
        self._fallback = fallback or TemplateResponseGenerator()
        self._session = session

    def generate(self, context: PromptContext) -> str:
        prompt = build_agent_prompt(context)

        try:
            answer = generate_answer(prompt, self._settings, session=self._session)
        except CollaboratorUnavailable:
            logger.warning("LLM backend unavailable, using template reply")
            return self._fallback.generate(context)

        if not answer:
            logger.warning("LLM backend returned empty answer, using template reply")
            return self._fallback.generate(context)

        return answer
