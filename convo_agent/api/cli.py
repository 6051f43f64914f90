"""
Interactive CLI entrypoint for the conversational orchestrator.

Architectural role:
- Provides a terminal-only interface over one `Orchestrator` instance.
- Displays knowledge/plugin status at startup for operator visibility.
- Delegates message processing to `Orchestrator.handle`.

Request lifecycle (per user turn):
1. Read a single line from stdin.
2. Handle local control commands (`exit`/`quit`, `clear chat`/`empty chat`,
   `/session <id>`).
3. Forward regular prompts to the orchestrator under the active session id.
4. Print the reply.

Error handling strategy:
- EOF and keyboard interrupts end the loop without traceback output.
- `InternalError` is printed as a single line; the loop continues.
"""

import asyncio
import logging
import sys
import uuid

from convo_agent.config import configure_logging, load_settings
from convo_agent.core.engine import Orchestrator
from convo_agent.core.errors import InternalError, ValidationError
from convo_agent.core.factory import build_orchestrator


logger = logging.getLogger(__name__)


SESSION_COMMAND = "/session"


# =========================================================
# UTF-8 SAFE STDOUT
# =========================================================

def _configure_stdout() -> None:
    if hasattr(sys.stdout, "reconfigure"):
        try:
            sys.stdout.reconfigure(encoding="utf-8", errors="ignore")
        except (OSError, ValueError):
            pass


def print_status(orchestrator: Orchestrator, session_id: str) -> None:
    settings = orchestrator.settings
    print("STATUS:")
    print(f"Knowledge chunks loaded: {orchestrator.knowledge_index.size}")
    print(f"Weather API configured:  {'Yes' if settings.weather_configured else 'No'}")
    print(f"Generator backend:       {settings.generator_backend}")
    print(f"Session:                 {session_id}")
    print("-" * 60)


def handle_command(orchestrator: Orchestrator, line: str, session_id: str) -> tuple[str | None, str]:
    """Apply a local control command.

    Returns:
        `(output, session_id)`; `output` is `None` when `line` is not a command.
    """
    lowered = line.lower()

    if lowered in ("clear chat", "empty chat"):
        orchestrator.session_store.clear(session_id)
        return "Chat cleared.", session_id

    if lowered == SESSION_COMMAND or lowered.startswith(SESSION_COMMAND + " "):
        new_id = line[len(SESSION_COMMAND):].strip()
        if not new_id:
            return f"Active session: {session_id}", session_id
        return f"Switched to session: {new_id}", new_id

    return None, session_id


# =========================================================
# MAIN APPLICATION LOOP
# =========================================================

def main() -> None:
    _configure_stdout()

    settings = load_settings()
    configure_logging(settings.log_level)

    orchestrator = build_orchestrator(settings)
    orchestrator.knowledge_index.build()

    session_id = f"cli-{uuid.uuid4().hex[:8]}"

    print("AI Agent started. (Type 'exit' to quit)\n")
    print("-" * 60)
    print_status(orchestrator, session_id)

    while True:
        try:
            line = input("You: ").strip()
        except EOFError:
            print()
            break
        except KeyboardInterrupt:
            print("\nInterrupted.")
            break

        if not line:
            continue

        if line.lower() in ("exit", "quit"):
            print("Shutting down.")
            break

        output, session_id = handle_command(orchestrator, line, session_id)
        if output is not None:
            print(output)
            continue

        try:
            result = asyncio.run(orchestrator.handle(session_id, line))
        except (ValidationError, InternalError) as err:
            print(f"Error: {err}")
            continue

        print(f"\nAgent: {result.response}")
        print("\n" + "-" * 60 + "\n")


if __name__ == "__main__":
    main()
