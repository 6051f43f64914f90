"""
HTTP API adapter for the conversational orchestrator.

Architectural role:
- Expose the transport-agnostic `submit` operation over HTTP.
- Map the error taxonomy to status codes.
- Own service lifetime: build the orchestrator once, warm the knowledge index,
  and run periodic session eviction for the lifetime of the app.

Endpoint responsibilities:
- `GET /`: liveness probe with static capability flags.
- `POST /agent/message`: validate, delegate to `Orchestrator.handle`, return
  `{response, session_id, timestamp}`.

Error handling strategy:
- `ValidationError` and malformed bodies -> HTTP 400 `{"error": ...}`.
- `InternalError` -> HTTP 500 `{"error": "Internal server error"}`.
- Unknown routes -> HTTP 404 `{"error": "Route not found"}`.

Side effects:
- Startup builds the knowledge index in a worker thread.
- A background task calls `evict_stale_sessions` every
  `session_sweep_interval` seconds; it is cancelled on shutdown.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException

from convo_agent.config import AgentSettings, configure_logging, load_settings
from convo_agent.core.engine import VALIDATION_MESSAGE, Orchestrator
from convo_agent.core.errors import InternalError, ValidationError
from convo_agent.core.factory import build_orchestrator


logger = logging.getLogger(__name__)


FEATURES = [
    "Weather information lookup",
    "Mathematical calculations",
    "Conversational AI with memory",
    "RAG-based knowledge retrieval",
]


# ============================================================
# Request / Response Schemas
# ============================================================

class AgentRequest(BaseModel):
    """Inbound message payload; emptiness is validated by the orchestrator."""

    message: str | None = None
    session_id: str | None = None


class AgentReply(BaseModel):
    response: str
    session_id: str
    timestamp: datetime


# ============================================================
# Background Maintenance
# ============================================================

async def _sweep_sessions(orchestrator: Orchestrator, interval: float) -> None:
    """Periodically evict stale sessions until cancelled."""
    while True:
        await asyncio.sleep(interval)
        try:
            orchestrator.evict_stale_sessions()
        except Exception:
            logger.exception("Session eviction sweep failed")


# ============================================================
# App Factory
# ============================================================

def create_app(
    settings: AgentSettings | None = None,
    orchestrator: Orchestrator | None = None,
) -> FastAPI:
    """Create the FastAPI application.

    Args:
        settings: Configuration; loaded from the environment when omitted.
        orchestrator: Prebuilt orchestrator (tests); built from `settings` when
            omitted.

    Returns:
        Configured `FastAPI` instance with routes, error handlers, and lifespan.
    """
    settings = settings or (orchestrator.settings if orchestrator else load_settings())
    orchestrator = orchestrator or build_orchestrator(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Application starting...")
        await asyncio.to_thread(orchestrator.knowledge_index.build)

        sweeper = None
        if settings.session_sweep_interval > 0:
            sweeper = asyncio.create_task(
                _sweep_sessions(orchestrator, settings.session_sweep_interval)
            )

        try:
            yield
        finally:
            if sweeper is not None:
                sweeper.cancel()
                try:
                    await sweeper
                except asyncio.CancelledError:
                    pass
            logger.info("Application stopped")

    app = FastAPI(title="Conversational Agent API", version="0.1.0", lifespan=lifespan)
    app.state.orchestrator = orchestrator
    app.state.settings = settings

    # ============================================================
    # Error Handlers
    # ============================================================

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"error": VALIDATION_MESSAGE})

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            return JSONResponse(status_code=404, content={"error": "Route not found"})
        return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})

    # ============================================================
    # Routes
    # ============================================================

    @app.get("/")
    async def root():
        """Liveness probe reporting static capability flags."""
        return {
            "status": "healthy",
            "message": "AI Agent Backend is running!",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "features": FEATURES,
            "weather_api_configured": settings.weather_configured,
            "knowledge_chunks": orchestrator.knowledge_index.size,
            "active_sessions": orchestrator.session_store.session_count,
        }

    @app.post("/agent/message", response_model=AgentReply)
    async def agent_message(payload: AgentRequest):
        try:
            result = await orchestrator.handle(payload.session_id or "", payload.message or "")
        except ValidationError as err:
            return JSONResponse(status_code=400, content={"error": str(err)})
        except InternalError as err:
            return JSONResponse(status_code=500, content={"error": str(err)})

        return AgentReply(**result.to_dict())

    return app


def main() -> None:
    """Run the HTTP server with uvicorn."""
    import uvicorn

    settings = load_settings()
    configure_logging(settings.log_level)
    logger.info("Weather API configured: %s", "Yes" if settings.weather_configured else "No")

    uvicorn.run(
        create_app(settings),
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
