"""
Claude as the text model behind the motivational banner and the
generated workout descriptions.

AnthropicTextClient satisfies core.booking.motivation.TextModelClient.
It raises on failure; MotivationService decides what trainees see
instead.
"""

import logging
from dataclasses import dataclass
from typing import Any

import anthropic
from anthropic import APIError, RateLimitError

from fitbook.core.booking.motivation import TextModelClient

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "claude-sonnet-4-20250514"


class AnthropicClientError(Exception):
    """Claude could not produce text for a request."""
    pass


class RateLimitExceeded(AnthropicClientError):
    pass


@dataclass
class AnthropicConfig:
    """
    Model settings for short copy.

    Bad values are rejected here, when the dependency is built, rather
    than on the first schedule load.
    """
    api_key: str
    model: str = DEFAULT_MODEL
    max_tokens: int = 200
    temperature: float = 0.9

    def __post_init__(self) -> None:
        if not self.api_key:
            raise ValueError("API key is required")
        if self.max_tokens < 1:
            raise ValueError("max_tokens must be positive")
        if not 0 <= self.temperature <= 1:
            raise ValueError("temperature must be between 0 and 1")


class AnthropicTextClient(TextModelClient):
    """One system prompt plus one user prompt in, plain text out."""

    def __init__(self, config: AnthropicConfig) -> None:
        self._config = config
        self._client = anthropic.AsyncAnthropic(api_key=config.api_key)

    async def complete(self, system_prompt: str, user_prompt: str) -> str:
        if not user_prompt.strip():
            raise ValueError("Prompt cannot be empty")

        try:
            response = await self._client.messages.create(
                model=self._config.model,
                system=system_prompt,
                messages=[{"role": "user", "content": user_prompt}],
                max_tokens=self._config.max_tokens,
                temperature=self._config.temperature,
            )
        except RateLimitError as e:
            logger.warning("Claude rate limited", extra={"model": self._config.model, "error": str(e)})
            raise RateLimitExceeded("Claude rate limit reached") from e
        except APIError as e:
            logger.error("Claude request failed", extra={"model": self._config.model, "error": str(e)})
            raise AnthropicClientError(f"Claude request failed: {e.message}") from e

        usage = getattr(response, "usage", None)
        logger.debug(
            "Claude text generated",
            extra={
                "model": self._config.model,
                "output_tokens": getattr(usage, "output_tokens", None),
            }
        )
        return self._extract_text_response(response)

    def _extract_text_response(self, response: Any) -> str:
        # Non-text blocks (tool use) have no .text
        parts = [getattr(block, "text", None) for block in response.content or []]
        return "\n".join(part for part in parts if part is not None)
