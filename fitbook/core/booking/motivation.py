"""
Motivational banner and generated workout descriptions.

The prompts are here, not in config, because they decide what trainees
read. The model client is behind a protocol so the service doesn't care
whether it's Claude, another model, or a stub in tests.
"""

import logging
import random
from typing import Optional, Protocol, Sequence

from .models import Quote

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Protocols (interfaces)
# ---------------------------------------------------------------------------

class TextModelClient(Protocol):
    """Anything that can turn a prompt into a short piece of text."""

    async def complete(self, system_prompt: str, user_prompt: str) -> str:
        ...


# ---------------------------------------------------------------------------
# Prompts
# ---------------------------------------------------------------------------

SYSTEM_PROMPT = """You write short copy for a personal fitness coach's class booking app.
The audience is Hebrew-speaking trainees. Always answer in Hebrew.
Answer with the requested text only: no quotation marks, no preamble, no emojis."""

QUOTE_PROMPT = "כתוב משפט מוטיבציה אחד, קצר וחזק, לספורטאים. עד 10 מילים."

DESCRIPTION_PROMPT_TEMPLATE = """כתוב תיאור קצר, אנרגטי ומזמין לאימון כושר מסוג "{workout_type}" שיתקיים ב"{location}".
עד 20 מילים, כך שמתאמנים ירצו להירשם."""

DEFAULT_QUOTE = "הכאב הוא זמני, הגאווה היא נצחית."
DEFAULT_DESCRIPTION = "אימון חזק ואיכותי שייקח אתכם לקצה!"


class MotivationService:
    """
    Produces banner quotes and session descriptions.

    Generation never fails from the caller's point of view: any model
    error falls back to fixed text.
    """

    def __init__(
        self,
        text_client: Optional[TextModelClient] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self._text_client = text_client
        self._rng = rng or random.Random()

    async def banner_quote(self, quotes: Sequence[Quote]) -> str:
        """The coach's own quotes win; the model only fills in when there are none."""
        if quotes:
            return self._rng.choice(list(quotes)).text
        return await self._generate(QUOTE_PROMPT, DEFAULT_QUOTE)

    async def workout_description(self, workout_type: str, location: str) -> str:
        prompt = DESCRIPTION_PROMPT_TEMPLATE.format(
            workout_type=workout_type,
            location=location,
        )
        return await self._generate(prompt, DEFAULT_DESCRIPTION)

    async def _generate(self, prompt: str, fallback: str) -> str:
        if self._text_client is None:
            return fallback
        try:
            text = await self._text_client.complete(SYSTEM_PROMPT, prompt)
        except Exception as e:
            logger.warning("Text generation failed, using fallback", extra={"error": str(e)})
            return fallback
        text = text.strip().strip('"').strip()
        return text or fallback
