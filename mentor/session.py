#!/usr/bin/env python3
"""
Keeps the single Mentor chat session alive across API key rotations.
"""
import asyncio
import logging
from typing import Any, Awaitable, Callable, List, Optional

from .ai_client_gemini import ImagePart, build_content, extract_text
from .config import RETRY_DELAY_SECONDS
from .exceptions import SessionInitError
from .failures import FailureKind, classify_failure
from .keys import KeyRotator
from .prompts import CRITICAL_ERROR_MESSAGE, SAFETY_BLOCKED_MESSAGE, load_system_instruction

logger = logging.getLogger(__name__)


class ChatSessionController:
    """
    Owns at most one chat session. On a failed turn the session is thrown
    away, the key is rotated and a new session is started from the history
    the old one had accumulated.
    """

    def __init__(
        self,
        key_rotator: KeyRotator,
        system_instruction: Optional[str] = None,
        retry_delay: float = RETRY_DELAY_SECONDS,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self.key_rotator = key_rotator
        self.system_instruction = system_instruction or load_system_instruction()
        self.retry_delay = retry_delay
        self._sleep = sleep
        self.session = None

    @property
    def is_active(self) -> bool:
        return self.session is not None

    def initialize(self, history: Optional[List[Any]] = None):
        """Starts a new chat session on the current key, seeded with `history`."""
        client = self.key_rotator.current_client()
        model = client.chat_model(self.system_instruction)
        self.session = model.start_chat(history=history if history is not None else [])
        if self.session is None:
            raise SessionInitError()
        return self.session

    def reset(self):
        self.session = None

    def capture_history(self) -> Optional[List[Any]]:
        """
        Best-effort copy of the active session's turns. Returns None when there
        is no session or its history cannot be read.
        """
        if self.session is None:
            return None
        try:
            return list(self.session.history)
        except Exception as e:
            logger.debug(f"Could not read chat history, continuing without it: {e}")
            return None

    async def send_turn(self, message: str, attachment: Optional[ImagePart] = None) -> str:
        """
        Sends one user turn and returns the model's reply. Never raises for
        request failures: a safety block or exhausting every key is reported
        as a fixed message.
        """
        max_attempts = self.key_rotator.pool_size
        content = build_content(message, attachment)
        history: List[Any] = []

        for attempt in range(1, max_attempts + 1):
            try:
                if self.session is None:
                    self.initialize(history)

                logger.info(f"Sending chat turn. Key index: {self.key_rotator.current_key_index}, Attempt: {attempt}/{max_attempts}")
                response = await self.session.send_message_async(content)
                return extract_text(response)

            except Exception as e:
                if classify_failure(e) is FailureKind.SAFETY_BLOCKED:
                    logger.warning(f"Chat turn blocked by safety filters: {e}")
                    return SAFETY_BLOCKED_MESSAGE

                logger.warning(f"Error with key index {self.key_rotator.current_key_index}: {e}")

                # A session that never started has nothing newer than `history`
                if self.session is not None:
                    captured = self.capture_history()
                    history = captured if captured is not None else []

                self.key_rotator.advance()
                self.reset()

                if attempt < max_attempts:
                    await self._sleep(self.retry_delay)

        logger.critical(f"Chat turn failed on all {max_attempts} API key(s).")
        return CRITICAL_ERROR_MESSAGE
