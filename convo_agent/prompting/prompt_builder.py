"""Prompt assembly from request-scoped `PromptContext`.

This module is intentionally narrow: it only builds prompt strings from context
already gathered by the orchestrator. Retrieval, plugin dispatch, and model
invocation happen elsewhere.

Design constraints:
    - Deterministic construction for identical inputs.
    - Fixed ordering of prompt components.
    - No hidden side effects (no I/O, no global state mutation).

Prompt component order:
    1) `SYSTEM_INSTRUCTIONS`
    2) Recent conversation (if any)
    3) Retrieved knowledge, numbered `[n] From <source>:` (if any)
    4) Successful tool result (if any)
    5) User message and assistant cue
"""

import logging

from convo_agent.core.types import PromptContext


logger = logging.getLogger(__name__)


PROMPT_TOKEN_BUDGET = 3500
CHARS_PER_TOKEN_ESTIMATE = 4


# =========================================================
# SYSTEM INSTRUCTIONS
# =========================================================

SYSTEM_INSTRUCTIONS = (
    "You are an intelligent AI assistant with access to relevant knowledge and tools.\n\n"
    "SYSTEM INSTRUCTIONS:\n"
    "- Provide helpful, accurate, and contextual responses\n"
    "- Use the provided context and plugin results to enhance your answers\n"
    "- Be concise but comprehensive\n"
    "- If plugin results are available, incorporate them naturally into your response\n\n"
)


def build_agent_prompt(context: PromptContext) -> str:
    """Build the generation prompt for one request.

    Args:
        context: Recent messages, scored chunks, optional plugin result, and the
            current user message.

    Returns:
        Fully assembled prompt string.

    Edge cases:
        - Empty sections are omitted entirely, headers included.
        - Failed plugin results are not injected.
    """
    parts = [SYSTEM_INSTRUCTIONS]

    if context.recent_messages:
        parts.append("RECENT CONVERSATION:\n")
        for msg in context.recent_messages:
            parts.append(f"{msg.role.upper()}: {msg.content}\n")
        parts.append("\n")

    if context.rag_chunks:
        parts.append("RELEVANT KNOWLEDGE:\n")
        for i, scored in enumerate(context.rag_chunks):
            parts.append(f"[{i + 1}] From {scored.chunk.source_id}:\n{scored.chunk.content}\n\n")

    result = context.plugin_result
    if result is not None and result.success:
        parts.append("TOOL RESULT:\n")
        parts.append(f'Used {result.kind} tool for "{result.input}"\n')
        parts.append(f"Result: {result.output}\n\n")

    parts.append(f"USER MESSAGE: {context.user_message}\n\nASSISTANT:")

    return "".join(parts)


def estimate_tokens(text: str) -> int:
    if not text:
        return 0
    return max(1, len(text) // CHARS_PER_TOKEN_ESTIMATE)


def enforce_prompt_token_budget(prompt: str, budget: int = PROMPT_TOKEN_BUDGET) -> str:
    """Trim an over-budget prompt, keeping its head (instructions) and tail.

    Returns:
        The original prompt when within budget, otherwise a trimmed prompt with a
        truncation marker in place of the removed middle.
    """
    if not prompt:
        return ""

    token_estimate = estimate_tokens(prompt)
    if token_estimate <= budget:
        return prompt

    max_chars = budget * CHARS_PER_TOKEN_ESTIMATE
    marker = "\n\n[TRUNCATED: PROMPT TOKEN BUDGET]\n\n"

    head_budget = int(max_chars * 0.55)
    tail_budget = max_chars - head_budget - len(marker)

    if tail_budget <= 0:
        trimmed = prompt[:max_chars]
    else:
        head = prompt[:head_budget].rstrip()
        tail = prompt[-tail_budget:].lstrip()
        trimmed = f"{head}{marker}{tail}"

    logger.warning(
        "Prompt exceeded budget and was truncated: est_tokens=%d -> est_tokens=%d (budget=%d)",
        token_estimate,
        estimate_tokens(trimmed),
        budget,
    )
    return trimmed
