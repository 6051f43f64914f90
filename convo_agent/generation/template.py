"""Rule-based fallback response generator.

Rule model:
    Ordered keyword rules over the lowercased user message; the first rule that
    matches supplies a canned reply. Short tokens (`hi`, `hey`, `bye`) are
    matched on word boundaries so they do not fire inside longer words.

Rule order:
    weather hint -> calculation hint -> greeting -> help -> thanks -> goodbye ->
    how are you -> identity -> time/date -> default.

Determinism:
    Deterministic for identical input, except the time/date rule, which embeds
    the current local time.
"""

import re
from collections.abc import Callable
from datetime import datetime

from convo_agent.core.types import PromptContext


CALCULATION_PATTERN = re.compile(r"\d+\s*[+\-*/]\s*\d+")
GREETING_PATTERN = re.compile(r"\b(hello|hi|hey)\b")
GOODBYE_PATTERN = re.compile(r"\b(bye|goodbye)\b|see you")


WEATHER_REPLY = (
    "I can help you with weather information! Try asking 'weather in [city name]' "
    "to get current conditions for any city."
)

CALCULATION_REPLY = (
    "I can help with calculations! Try asking 'calculate 25 + 17' or any math "
    "expression and I'll solve it for you."
)

GREETING_REPLY = (
    "Hello! I'm your AI assistant. I can help you with:\n"
    "• Weather information (try 'weather in London')\n"
    "• Mathematical calculations (try 'calculate 15 * 8')\n"
    "• General questions and conversations\n\n"
    "What would you like to know?"
)

HELP_REPLY = (
    "I can assist you with:\n\n"
    "🌤️ **Weather**: Ask 'weather in [city]' for current conditions\n"
    "🧮 **Math**: Ask 'calculate [expression]' for mathematical operations\n"
    "💬 **Chat**: Ask me general questions and I'll do my best to help\n\n"
    "Try asking me something!"
)

THANKS_REPLY = (
    "You're welcome! I'm here to help with weather, calculations, or any questions "
    "you might have. Feel free to ask me anything else!"
)

GOODBYE_REPLY = (
    "Goodbye! It was nice helping you today. Come back anytime if you need weather "
    "information, calculations, or just want to chat!"
)

WELLBEING_REPLY = (
    "I'm doing great, thank you for asking! I'm here and ready to help you with "
    "weather information, calculations, or answer any questions you might have. "
    "How can I assist you today?"
)

IDENTITY_REPLY = (
    "I'm your AI assistant! I'm designed to help you with various tasks including:\n"
    "• Getting weather information for any city\n"
    "• Solving mathematical calculations\n"
    "• Answering questions and having conversations\n\n"
    "I'm running on a free, efficient system that doesn't require expensive API calls. "
    "How can I help you today?"
)


class TemplateResponseGenerator:
    """Produces canned replies keyed on the user message."""

    def __init__(self, clock: Callable[[], datetime] = datetime.now):
        self._clock = clock

    def generate(self, context: PromptContext) -> str:
        message = context.user_message or ""
        lower = message.lower()

        if "weather" in lower:
            return WEATHER_REPLY

        if "calculate" in lower or CALCULATION_PATTERN.search(message):
            return CALCULATION_REPLY

        if GREETING_PATTERN.search(lower):
            return GREETING_REPLY

        if "help" in lower or "what can you do" in lower:
            return HELP_REPLY

        if "thank" in lower:
            return THANKS_REPLY

        if GOODBYE_PATTERN.search(lower):
            return GOODBYE_REPLY

        if "how are you" in lower or "how do you feel" in lower:
            return WELLBEING_REPLY

        if "what are you" in lower or "who are you" in lower:
            return IDENTITY_REPLY

        if "time" in lower or "date" in lower or "today" in lower:
            now = self._clock().strftime("%Y-%m-%d %H:%M:%S")
            return (
                f"Current date and time: {now}\n\n"
                "Is there anything else I can help you with? I can provide weather "
                "information or help with calculations!"
            )

        return (
            f'I understand you\'re asking about: "{message}"\n\n'
            "While I'm running in free mode, I can still help you with:\n"
            '• Weather information - try "weather in [city]"\n'
            '• Mathematical calculations - try "calculate [expression]"\n'
            "• General questions and conversations\n\n"
            "For more advanced AI capabilities, configure an LLM backend, but I'm here "
            "to help with the basics! What would you like to know?"
        )
