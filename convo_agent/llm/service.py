"""Prompt-to-payload adapter for LLM invocation.

Model call flow:
    prompt -> payload construction -> `client.send_request(...)`.

Token behavior:
    The prompt is passed through `enforce_prompt_token_budget` before payload
    construction; provider-side limits still apply.

Determinism:
    Payload construction is deterministic for fixed inputs and settings.
    Generated output is not.
"""

from convo_agent.config import AgentSettings
from convo_agent.llm.client import send_request
from convo_agent.prompting.prompt_builder import enforce_prompt_token_budget


SYSTEM_MESSAGE = (
    "You are a helpful conversational assistant.\n"
    "Answer precisely, clearly, and without repetition.\n"
)


def build_payload(prompt: str, model_name: str) -> dict:
    """Wrap a prompt into a chat-completion payload with shared sampling defaults."""
    return {
        "model": model_name,
        "messages": [
            {"role": "system", "content": SYSTEM_MESSAGE},
            {"role": "user", "content": enforce_prompt_token_budget(prompt)},
        ],
        "temperature": 0.45,
        "top_p": 0.9,
        "presence_penalty": 0.4,
        "frequency_penalty": 0.5,
        "stream": False,
    }


def generate_answer(prompt: str, settings: AgentSettings, session=None) -> str:
    """Invoke the configured model and return its text.

    Raises:
        CollaboratorUnavailable: Propagated from `client.send_request`.
    """
    payload = build_payload(prompt, settings.model_name)
    return send_request(
        payload,
        url=settings.llm_url,
        api_key=settings.llm_api_key,
        timeout=settings.generation_timeout,
        session=session,
    )
