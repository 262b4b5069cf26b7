"""
Entry point used by callers: one key pool, one chat session, one mind-map
generator, all owned by a single MentorService instance.
"""
import asyncio
import logging
from typing import Any, Awaitable, Callable, Mapping, Optional, Sequence, Union

from .ai_client_gemini import GeminiClient, ImagePart
from .config import AI_API_KEYS, RETRY_DELAY_SECONDS
from .keys import KeyRotator
from .mind_map import MindMapGenerator
from .prompts import INVALID_ATTACHMENT_MESSAGE
from .session import ChatSessionController

logger = logging.getLogger(__name__)


class MentorService:

    def __init__(
        self,
        api_keys: Optional[Sequence[str]] = None,
        *,
        client_factory: Callable[[str], GeminiClient] = GeminiClient,
        system_instruction: Optional[str] = None,
        retry_delay: float = RETRY_DELAY_SECONDS,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        keys = AI_API_KEYS if api_keys is None else api_keys
        self.key_rotator = KeyRotator(keys, client_factory=client_factory)
        self.chat = ChatSessionController(
            self.key_rotator,
            system_instruction=system_instruction,
            retry_delay=retry_delay,
            sleep=sleep,
        )
        self.mind_map = MindMapGenerator(self.key_rotator, retry_delay=retry_delay, sleep=sleep)
        logger.info(f"Mentor service initialized with {self.key_rotator.pool_size} API key(s).")

    async def send_message_to_gemini(
        self,
        message: str,
        image_part: Optional[Union[ImagePart, Mapping[str, str]]] = None,
    ) -> str:
        if image_part is not None and not isinstance(image_part, ImagePart):
            try:
                image_part = ImagePart.from_mapping(image_part)
            except ValueError as e:
                logger.error(f"Rejected image attachment: {e}")
                return INVALID_ATTACHMENT_MESSAGE
        return await self.chat.send_turn(message, image_part)

    async def generate_mind_map_text(self, topic: str) -> Optional[str]:
        return await self.mind_map.generate_once(topic)
