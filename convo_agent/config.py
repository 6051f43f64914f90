"""Runtime configuration for the orchestrator and its collaborators.

Architectural role:
    Centralizes every tunable value consumed by the core (session cap, retention,
    retrieval window sizes, embedding dimension) and by the adapters around it
    (weather credentials, LLM endpoint, HTTP bind address).

Resolution model:
    - `.env` is loaded through `python-dotenv` before environment lookup.
    - Each value is read with `os.getenv` and coerced to its field type.
    - Invalid numeric values fall back to the default and are logged.

Lifetime:
    `load_settings()` returns a new frozen `AgentSettings` on every call. Callers
    construct it once at process start and pass it explicitly; there is no
    module-level settings instance.
"""

import logging
import os
from dataclasses import dataclass, field
from datetime import timedelta

from dotenv import load_dotenv


logger = logging.getLogger(__name__)


DEFAULT_LLM_URL = "http://127.0.0.1:8080/v1/chat/completions"
DEFAULT_MODEL_NAME = "qwen2.5:3b"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


@dataclass(frozen=True)
class AgentSettings:
    """Immutable configuration snapshot shared by all services.

    Attributes:
        session_message_cap: Maximum messages retained per session (FIFO).
        session_retention: Inactivity window after which a session is evicted.
        session_sweep_interval: Seconds between background eviction sweeps.
        retrieval_top_k: Number of knowledge chunks retrieved per request.
        recent_history_window: Number of recent messages placed in context.
        embedding_dimension: Dimension of the hashed embedding vectors.
        docs_path: Directory holding the markdown knowledge corpus.
        weather_api_key: OpenWeatherMap key, `None` selects demo output.
        weather_timeout: Per-call timeout for the weather lookup.
        plugin_timeout: Upper bound on plugin dispatch inside a request.
        generation_timeout: Upper bound on fallback generation inside a request.
        generator_backend: `template` or `llm`.
        llm_url: OpenAI-compatible chat completions endpoint.
        llm_api_key: Bearer token for `llm_url`, optional for local servers.
        model_name: Model identifier forwarded to the LLM endpoint.
        host: HTTP bind host.
        port: HTTP bind port.
        log_level: Root logging level name.
    """

    session_message_cap: int = 50
    session_retention: timedelta = field(default_factory=lambda: timedelta(hours=24))
    session_sweep_interval: float = 3600.0
    retrieval_top_k: int = 3
    recent_history_window: int = 2
    embedding_dimension: int = 1536
    docs_path: str = "docs"
    weather_api_key: str | None = None
    weather_timeout: float = 10.0
    plugin_timeout: float = 15.0
    generation_timeout: float = 60.0
    generator_backend: str = "template"
    llm_url: str = DEFAULT_LLM_URL
    llm_api_key: str | None = None
    model_name: str = DEFAULT_MODEL_NAME
    host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "INFO"

    @property
    def weather_configured(self) -> bool:
        return bool(self.weather_api_key)


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("Invalid integer for %s=%r, using default %d", name, raw, default)
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning("Invalid number for %s=%r, using default %s", name, raw, default)
        return default


def _env_str(name: str, default: str | None) -> str | None:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip()


def load_settings() -> AgentSettings:
    """Build settings from `.env` and the process environment.

    Returns:
        A fully populated `AgentSettings`.

    Side effects:
        Loads `.env` into `os.environ` (existing variables are not overridden).

    Edge cases:
        - Blank variables are treated as unset.
        - `GENERATOR_BACKEND` is lowercased; unknown values are resolved later by
          `build_response_generator`, which falls back to templates.
    """
    load_dotenv()

    return AgentSettings(
        session_message_cap=_env_int("SESSION_MESSAGE_CAP", 50),
        session_retention=timedelta(hours=_env_float("SESSION_RETENTION_HOURS", 24.0)),
        session_sweep_interval=_env_float("SESSION_SWEEP_INTERVAL_SECONDS", 3600.0),
        retrieval_top_k=_env_int("RAG_TOP_K", 3),
        recent_history_window=_env_int("RECENT_HISTORY_WINDOW", 2),
        embedding_dimension=_env_int("EMBEDDING_DIMENSION", 1536),
        docs_path=_env_str("DOCS_PATH", "docs"),
        weather_api_key=_env_str("WEATHER_API_KEY", None),
        weather_timeout=_env_float("WEATHER_TIMEOUT_SECONDS", 10.0),
        plugin_timeout=_env_float("PLUGIN_TIMEOUT_SECONDS", 15.0),
        generation_timeout=_env_float("GENERATION_TIMEOUT_SECONDS", 60.0),
        generator_backend=(_env_str("GENERATOR_BACKEND", "template") or "template").lower(),
        llm_url=_env_str("LLM_URL", DEFAULT_LLM_URL),
        llm_api_key=_env_str("LLM_API_KEY", None),
        model_name=_env_str("MODEL_NAME", DEFAULT_MODEL_NAME),
        host=_env_str("HOST", "0.0.0.0"),
        port=_env_int("PORT", 3000),
        log_level=(_env_str("LOG_LEVEL", "INFO") or "INFO").upper(),
    )


def configure_logging(level: str = "INFO") -> None:
    """Install the process-wide logging format used by the entrypoints."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
    )
