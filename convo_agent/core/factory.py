"""One-shot construction of the orchestrator and its services.

Every collaborator is created exactly once here and passed by reference into
`Orchestrator`; nothing is cached at module level.
"""

import logging
from collections.abc import Callable
from functools import partial

from convo_agent.config import AgentSettings
from convo_agent.core.engine import Orchestrator
from convo_agent.generation import build_response_generator
from convo_agent.memory.embedding_model import HashEmbeddingProvider
from convo_agent.memory.session_store import SessionStore
from convo_agent.plugins import default_registry
from convo_agent.retrieval.ingestion.corpus_loader import load_markdown_corpus
from convo_agent.retrieval.knowledge_index import KnowledgeIndex


logger = logging.getLogger(__name__)


def build_orchestrator(
    settings: AgentSettings,
    weather_fetcher: Callable[[str], str] | None = None,
) -> Orchestrator:
    """Wire session store, knowledge index, plugins, and generator from settings.

    Args:
        settings: Process configuration.
        weather_fetcher: Optional override of the weather lookup collaborator.

    Returns:
        A ready `Orchestrator`. The knowledge index is not built yet; it builds
        on first query unless the caller calls `knowledge_index.build()`.
    """
    session_store = SessionStore(
        message_cap=settings.session_message_cap,
        retention=settings.session_retention,
    )

    knowledge_index = KnowledgeIndex(
        embedder=HashEmbeddingProvider(settings.embedding_dimension),
        chunk_source=partial(load_markdown_corpus, settings.docs_path),
    )

    orchestrator = Orchestrator(
        session_store=session_store,
        knowledge_index=knowledge_index,
        plugin_registry=default_registry(settings, weather_fetcher=weather_fetcher),
        response_generator=build_response_generator(settings),
        settings=settings,
    )

    logger.info(
        "Orchestrator ready: generator=%s, weather_configured=%s, docs_path=%s",
        settings.generator_backend,
        settings.weather_configured,
        settings.docs_path,
    )
    return orchestrator
