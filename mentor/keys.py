import logging
from typing import Callable, Optional, Sequence

from .ai_client_gemini import GeminiClient
from .exceptions import NoApiKeysError

logger = logging.getLogger(__name__)


class KeyRotator:
    """
    Holds an ordered pool of API keys, the index of the key in use and a
    lazily built client bound to that key.
    """

    def __init__(self, api_keys: Sequence[str], client_factory: Callable[[str], GeminiClient] = GeminiClient):
        """
        Initializes the KeyRotator.

        Args:
            api_keys: The API keys to rotate through, in order. Never mutated.
            client_factory: Builds a client bound to one key.
        """
        if not api_keys:
            raise NoApiKeysError("No GEMINI_API_KEY* keys found in the environment. Please set at least one.")

        self._api_keys = tuple(api_keys)
        self._client_factory = client_factory
        self._client: Optional[GeminiClient] = None
        self.current_key_index = 0
        logger.info(f"KeyRotator ready with {len(self._api_keys)} key(s).")

    @property
    def pool_size(self) -> int:
        return len(self._api_keys)

    @property
    def current_key_hint(self) -> str:
        return f"...{self._api_keys[self.current_key_index][-4:]}"

    def current_client(self) -> GeminiClient:
        """Returns the client for the current key, building it if needed."""
        if self._client is None:
            self._client = self._client_factory(self._api_keys[self.current_key_index])
        return self._client

    def advance(self) -> bool:
        """
        Switches to the next key and drops the current client.

        Returns:
            True if untried keys remain, False if the pool wrapped back to the
            first key.
        """
        self._client = None
        self.current_key_index += 1
        if self.current_key_index >= len(self._api_keys):
            self.current_key_index = 0
            logger.critical("All API keys have been exhausted. Resetting to first key.")
            return False
        logger.warning(f"Rotating to API key index {self.current_key_index} ({self.current_key_hint}).")
        return True
