"""
Response generator tests: template rules, backend selection, LLM degradation.
"""

from datetime import datetime

import pytest

from convo_agent.config import AgentSettings
from convo_agent.core.errors import CollaboratorUnavailable
from convo_agent.core.types import PromptContext
from convo_agent.generation import (
    LLMResponseGenerator,
    TemplateResponseGenerator,
    build_response_generator,
)
from convo_agent.generation import llm_generator
from convo_agent.generation.template import (
    CALCULATION_REPLY,
    GOODBYE_REPLY,
    GREETING_REPLY,
    HELP_REPLY,
    IDENTITY_REPLY,
    THANKS_REPLY,
    WEATHER_REPLY,
    WELLBEING_REPLY,
)


def reply_for(text, clock=None):
    generator = TemplateResponseGenerator(clock=clock) if clock else TemplateResponseGenerator()
    return generator.generate(PromptContext(user_message=text))


class TestTemplateResponseGenerator:

    @pytest.mark.parametrize(
        "text, expected",
        [
            ("hello", GREETING_REPLY),
            ("Hey there", GREETING_REPLY),
            ("is it the weather tomorrow", WEATHER_REPLY),
            ("can you calculate stuff", CALCULATION_REPLY),
            ("what about 3 * 9", CALCULATION_REPLY),
            ("help me out", HELP_REPLY),
            ("thanks a lot", THANKS_REPLY),
            ("ok bye", GOODBYE_REPLY),
            ("how are you", WELLBEING_REPLY),
            ("who are you", IDENTITY_REPLY),
        ],
    )
    def test_rules(self, text, expected):
        assert reply_for(text) == expected

    def test_greeting_reply_contains_greeting(self):
        assert reply_for("hello").startswith("Hello!")

    def test_short_greetings_need_word_boundaries(self):
        reply = reply_for("this thing is odd")
        assert reply != GREETING_REPLY
        assert '"this thing is odd"' in reply

    def test_time_rule_uses_clock(self):
        fixed = datetime(2024, 3, 5, 14, 30, 0)
        reply = reply_for("what time is it", clock=lambda: fixed)
        assert "2024-03-05 14:30:00" in reply

    def test_default_echoes_message(self):
        reply = reply_for("tell me about quantum foam")
        assert 'asking about: "tell me about quantum foam"' in reply


class TestBuildResponseGenerator:

    def test_template_default(self):
        assert isinstance(build_response_generator(AgentSettings()), TemplateResponseGenerator)

    def test_llm_backend(self):
        generator = build_response_generator(AgentSettings(generator_backend="llm"))
        assert isinstance(generator, LLMResponseGenerator)

    def test_unknown_backend_falls_back_to_template(self):
        generator = build_response_generator(AgentSettings(generator_backend="gpt-9000"))
        assert isinstance(generator, TemplateResponseGenerator)


class TestLLMResponseGenerator:

    def test_returns_model_answer(self, monkeypatch):
        captured = {}

        def fake_generate_answer(prompt, settings, session=None):
            captured["prompt"] = prompt
            return "model says hi"

        monkeypatch.setattr(llm_generator, "generate_answer", fake_generate_answer)
        generator = LLMResponseGenerator(AgentSettings(generator_backend="llm"))

        assert generator.generate(PromptContext(user_message="hello")) == "model says hi"
        assert captured["prompt"].endswith("USER MESSAGE: hello\n\nASSISTANT:")

    def test_unavailable_backend_uses_template(self, monkeypatch):
        def unavailable(prompt, settings, session=None):
            raise CollaboratorUnavailable("LLM HTTP ERROR (503)")

        monkeypatch.setattr(llm_generator, "generate_answer", unavailable)
        generator = LLMResponseGenerator(AgentSettings(generator_backend="llm"))

        assert generator.generate(PromptContext(user_message="hello")) == GREETING_REPLY

    def test_empty_answer_uses_template(self, monkeypatch):
        monkeypatch.setattr(llm_generator, "generate_answer", lambda prompt, settings, session=None: "")
        generator = LLMResponseGenerator(AgentSettings(generator_backend="llm"))

        assert generator.generate(PromptContext(user_message="thanks")) == THANKS_REPLY
