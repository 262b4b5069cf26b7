import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional

from .ai_client_gemini import extract_text
from .config import RETRY_DELAY_SECONDS
from .keys import KeyRotator
from .prompts import build_mind_map_prompt

logger = logging.getLogger(__name__)


class MindMapGenerator:
    """One-shot mind-map generation. Shares the key pool, never the chat session."""

    def __init__(
        self,
        key_rotator: KeyRotator,
        retry_delay: float = RETRY_DELAY_SECONDS,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self.key_rotator = key_rotator
        self.retry_delay = retry_delay
        self._sleep = sleep

    async def generate_once(self, topic: str) -> Optional[str]:
        """
        Returns an indented plain-text mind map for `topic`, or None if every
        key failed. Any failure, safety blocks included, rotates the key.
        """
        prompt = build_mind_map_prompt(topic)
        max_attempts = self.key_rotator.pool_size

        for attempt in range(1, max_attempts + 1):
            try:
                model = self.key_rotator.current_client().one_shot_model()
                response = await model.generate_content_async(prompt)
                return extract_text(response)
            except Exception as e:
                logger.error(f"Mind map generation error (attempt {attempt}/{max_attempts}): {e}")
                self.key_rotator.advance()
                if attempt < max_attempts:
                    await self._sleep(self.retry_delay)

        logger.critical(f"Mind map generation failed on all {max_attempts} API key(s).")
        return None
