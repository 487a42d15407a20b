"""
Unit tests for banner quotes and generated descriptions.

The text model is replaced by small stubs; the Anthropic client itself
is only tested for configuration and response handling.
"""

import asyncio
import random
from types import SimpleNamespace

import pytest

from fitbook.core.booking.models import Quote
from fitbook.core.booking.motivation import (
    DEFAULT_DESCRIPTION,
    DEFAULT_QUOTE,
    MotivationService,
)
from fitbook.infrastructure.anthropic.client import (
    AnthropicConfig,
    AnthropicTextClient,
)


class StubTextClient:
    """Returns a fixed answer and remembers the prompts it was given."""

    def __init__(self, answer: str = "", error: Exception | None = None):
        self.answer = answer
        self.error = error
        self.prompts: list[str] = []

    async def complete(self, system_prompt: str, user_prompt: str) -> str:
        self.prompts.append(user_prompt)
        if self.error:
            raise self.error
        return self.answer


def run(coro):
    return asyncio.run(coro)


class TestBannerQuote:
    """Tests for MotivationService.banner_quote."""

    def test_stored_quotes_win_over_generation(self):
        client = StubTextClient(answer="generated")
        service = MotivationService(text_client=client, rng=random.Random(1))
        quotes = [Quote(text="first"), Quote(text="second")]

        text = run(service.banner_quote(quotes))

        assert text in {"first", "second"}
        assert client.prompts == []

    def test_generates_when_no_quotes(self):
        service = MotivationService(text_client=StubTextClient(answer='  "Keep going"  '))
        assert run(service.banner_quote([])) == "Keep going"

    def test_model_failure_falls_back(self):
        service = MotivationService(text_client=StubTextClient(error=RuntimeError("down")))
        assert run(service.banner_quote([])) == DEFAULT_QUOTE

    def test_empty_answer_falls_back(self):
        service = MotivationService(text_client=StubTextClient(answer="   "))
        assert run(service.banner_quote([])) == DEFAULT_QUOTE

    def test_no_client_configured_falls_back(self):
        assert run(MotivationService().banner_quote([])) == DEFAULT_QUOTE


class TestWorkoutDescription:
    def test_prompt_mentions_type_and_location(self):
        client = StubTextClient(answer="Come sweat with us")
        service = MotivationService(text_client=client)

        text = run(service.workout_description("HIIT", "Studio"))

        assert text == "Come sweat with us"
        assert "HIIT" in client.prompts[0]
        assert "Studio" in client.prompts[0]

    def test_failure_falls_back(self):
        service = MotivationService(text_client=StubTextClient(error=TimeoutError()))
        assert run(service.workout_description("HIIT", "Studio")) == DEFAULT_DESCRIPTION


class TestAnthropicClient:
    """Configuration and response handling of the Claude wrapper."""

    def test_config_requires_key(self):
        with pytest.raises(ValueError, match="API key"):
            AnthropicConfig(api_key="")

    def test_config_rejects_bad_temperature(self):
        with pytest.raises(ValueError, match="temperature"):
            AnthropicConfig(api_key="k", temperature=1.5)

    def test_text_blocks_are_joined(self):
        client = AnthropicTextClient(AnthropicConfig(api_key="test-key"))
        response = SimpleNamespace(content=[
            SimpleNamespace(text="one"),
            SimpleNamespace(type="tool_use"),
            SimpleNamespace(text="two"),
        ])
        assert client._extract_text_response(response) == "one\ntwo"

    def test_empty_prompt_is_rejected(self):
        client = AnthropicTextClient(AnthropicConfig(api_key="test-key"))
        with pytest.raises(ValueError, match="empty"):
            run(client.complete("system", "   "))
