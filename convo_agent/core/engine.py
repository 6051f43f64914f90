"""Core request orchestration for memory, retrieval, plugins, and generation.

Architectural role:
    Provides the per-request pipeline used by the HTTP and CLI adapters to turn
    one user message into a reply while recording both sides of the exchange in
    the session store.

Control-flow model:
    1. Validate `session_id` and `message` (blank -> `ValidationError`).
    2. Append the user message to the session store.
    3. Concurrently gather recent history, top-K knowledge chunks, and the
       plugin dispatch result.
    4. Successful plugin result -> reply is the plugin output. Otherwise assemble
       a `PromptContext` and ask the response generator.
    5. Append the assistant message and return an `AgentResponse`.

Concurrency:
    Blocking work (retrieval, plugin execution, generation) runs through
    `asyncio.to_thread`. Session locks are taken only inside individual
    `SessionStore` calls and are never held across an `await`. Plugin dispatch
    and generation are each bounded by a timeout; expiry is treated as that
    collaborator's failure.

Error handling strategy:
    - `ValidationError` propagates unchanged.
    - Plugin and generator failures degrade locally (no plugin result / template
      reply).
    - Anything else is logged and re-raised as an opaque `InternalError`. The
      user message may already be recorded (at-least-once semantics).
"""

import asyncio
import logging

from convo_agent.config import AgentSettings
from convo_agent.core.errors import InternalError, ValidationError
from convo_agent.core.types import AgentResponse, Message, PluginResult, PromptContext
from convo_agent.generation import ResponseGenerator, TemplateResponseGenerator
from convo_agent.memory.session_store import SessionStore
from convo_agent.plugins.registry import PluginRegistry
from convo_agent.retrieval.knowledge_index import KnowledgeIndex


logger = logging.getLogger(__name__)

VALIDATION_MESSAGE = "Message and session_id are required"


class Orchestrator:
    """Composes session memory, retrieval, plugins, and generation per request.

    All collaborators are constructed once at process start (see
    `convo_agent.core.factory.build_orchestrator`) and shared by every request.
    """

    def __init__(
        self,
        session_store: SessionStore,
        knowledge_index: KnowledgeIndex,
        plugin_registry: PluginRegistry,
        response_generator: ResponseGenerator,
        settings: AgentSettings | None = None,
    ):
        self.session_store = session_store
        self.knowledge_index = knowledge_index
        self.plugin_registry = plugin_registry
        self.response_generator = response_generator
        self.settings = settings or AgentSettings()
        self._template_fallback = TemplateResponseGenerator()

    # =========================================================
    # COLLABORATOR CALLS
    # =========================================================

    async def _dispatch_plugin(self, message: str) -> PluginResult | None:
        """Run plugin dispatch off-loop, bounded by `plugin_timeout`.

        Edge cases:
            - Timeout returns `None`, i.e. the request falls back to generation.
        """
        try:
            return await asyncio.wait_for(
                asyncio.to_thread(self.plugin_registry.try_dispatch, message),
                timeout=self.settings.plugin_timeout,
            )
        except asyncio.TimeoutError:
            logger.warning("Plugin dispatch timed out after %.1fs", self.settings.plugin_timeout)
            return None

    async def _generate(self, context: PromptContext) -> str:
        """Obtain fallback reply text, degrading to templates on failure."""
        try:
            reply = await asyncio.wait_for(
                asyncio.to_thread(self.response_generator.generate, context),
                timeout=self.settings.generation_timeout,
            )
        except asyncio.TimeoutError:
            logger.warning("Response generation timed out after %.1fs", self.settings.generation_timeout)
            return self._template_fallback.generate(context)
        except Exception:
            logger.exception("Response generator failed, using template reply")
            return self._template_fallback.generate(context)

        return reply or self._template_fallback.generate(context)

    # =========================================================
    # PIPELINE
    # =========================================================

    async def handle(self, session_id: str, message: str) -> AgentResponse:
        """Process one user message for one session.

        Args:
            session_id: Conversation identifier.
            message: Raw user utterance.

        Returns:
            `AgentResponse` with reply text, echoing `session_id`.

        Raises:
            ValidationError: Either argument is missing or blank.
            InternalError: Any unanticipated failure; details are only logged.
        """
        if not session_id or not str(session_id).strip() or not message or not str(message).strip():
            raise ValidationError(VALIDATION_MESSAGE)

        try:
            self.session_store.append(session_id, Message(role="user", content=message))

            recent, rag_chunks, plugin_result = await asyncio.gather(
                asyncio.to_thread(
                    self.session_store.recent,
                    session_id,
                    self.settings.recent_history_window,
                ),
                asyncio.to_thread(
                    self.knowledge_index.query,
                    message,
                    self.settings.retrieval_top_k,
                ),
                self._dispatch_plugin(message),
            )

            if plugin_result is not None and plugin_result.success:
                reply = plugin_result.output
                logger.info("session=%s handled by plugin %s", session_id, plugin_result.kind)
            else:
                if plugin_result is not None:
                    logger.info(
                        "session=%s plugin %s failed: %s",
                        session_id,
                        plugin_result.kind,
                        plugin_result.output,
                    )
                context = PromptContext(
                    user_message=message,
                    recent_messages=recent,
                    rag_chunks=rag_chunks,
                    plugin_result=plugin_result,
                )
                reply = await self._generate(context)
                logger.info(
                    "session=%s handled by generator (recent=%d, chunks=%d)",
                    session_id,
                    len(recent),
                    len(rag_chunks),
                )

            self.session_store.append(session_id, Message(role="assistant", content=reply))

        except Exception as err:
            logger.exception("Error processing agent message for session=%s", session_id)
            raise InternalError() from err

        return AgentResponse(response=reply, session_id=session_id)

    async def submit(self, message: str, session_id: str) -> AgentResponse:
        """Transport-agnostic inbound operation (`message`, `session_id` order)."""
        return await self.handle(session_id, message)

    def evict_stale_sessions(self) -> int:
        """Cooperative maintenance hook removing sessions past retention."""
        return self.session_store.evict_stale(retention=self.settings.session_retention)
