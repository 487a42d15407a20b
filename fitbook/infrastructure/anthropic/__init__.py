"""
Anthropic Claude API client wrapper.

Implements the TextModelClient protocol from core.booking.motivation.
"""

from .client import AnthropicConfig, AnthropicTextClient

__all__ = ["AnthropicTextClient", "AnthropicConfig"]
