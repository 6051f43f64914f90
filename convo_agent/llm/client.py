"""OpenAI-compatible transport client for LLM requests.

Architectural role:
    Executes one HTTP request against the configured chat-completions endpoint
    and extracts the assistant text.

Model invocation flow:
    `service.generate_answer` -> `send_request(payload, ...)` -> parsed text.

Retry behavior:
    No retry loop is implemented. Each call is attempted once with a timeout.

Failure handling model:
    Transport errors, non-2xx statuses, and unexpected payload shapes are raised
    as `CollaboratorUnavailable` carrying a sanitized, provider-neutral message.
    Callers decide how to degrade.
"""

import logging

import requests

from convo_agent.core.errors import CollaboratorUnavailable


logger = logging.getLogger(__name__)


def _sanitized_http_error(err: requests.exceptions.RequestException) -> str:
    status_code = None
    if getattr(err, "response", None) is not None:
        status_code = getattr(err.response, "status_code", None)

    if status_code:
        return f"LLM HTTP ERROR ({status_code})"
    return "LLM HTTP ERROR"


def extract_content(data: dict) -> str:
    """Extract assistant text from common chat-completion response shapes.

    Supported shapes:
        - `choices[0].message.content`
        - `choices[0].text`
        - `message.content`

    Raises:
        KeyError: When none of the shapes is present.
    """
    if "choices" in data and data["choices"]:
        choice = data["choices"][0]
        if "message" in choice and "content" in choice["message"]:
            return str(choice["message"]["content"] or "")
        if "text" in choice:
            return str(choice["text"] or "")

    if "message" in data and "content" in data["message"]:
        return str(data["message"]["content"] or "")

    raise KeyError("No assistant content in response")


def send_request(
    payload: dict,
    url: str,
    api_key: str | None = None,
    timeout: float = 60.0,
    session: requests.Session | None = None,
) -> str:
    """Send one non-streaming completion request.

    Args:
        payload: Chat-completion payload produced by `service`.
        url: Endpoint URL.
        api_key: Optional bearer token.
        timeout: Request timeout in seconds.
        session: Optional `requests.Session` override.

    Returns:
        Stripped assistant text.

    Raises:
        CollaboratorUnavailable: On any transport or parsing failure.
    """
    headers = {"Content-Type": "application/json"}
    if api_key:
        headers["Authorization"] = f"Bearer {api_key}"

    http = session or requests

    try:
        response = http.post(url, headers=headers, json=payload, timeout=timeout)
        response.raise_for_status()
        data = response.json()
        return extract_content(data).strip()
    except requests.exceptions.RequestException as err:
        message = _sanitized_http_error(err)
        logger.warning("LLM request failed: %s", message)
        raise CollaboratorUnavailable(message) from err
    except (KeyError, IndexError, TypeError, ValueError) as err:
        logger.warning("LLM response could not be parsed")
        raise CollaboratorUnavailable("LLM REQUEST FAILED") from err
