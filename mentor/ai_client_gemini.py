# mentor/ai_client_gemini.py
import base64
import logging
import mimetypes
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

import google.generativeai as genai

from .config import AI_GENERATION_CONFIG, AI_MODEL, SAFETY_SETTINGS
from .exceptions import SafetyBlockedError
from .failures import POLICY_FINISH_REASONS, finish_reason_name

logger = logging.getLogger(__name__)


def configure_api(api_key: str):
    genai.configure(api_key=api_key)


@dataclass(frozen=True)
class ImagePart:
    """An inline attachment: media type plus base64-encoded payload."""

    mime_type: str
    data: str

    def __post_init__(self):
        if not self.mime_type:
            raise ValueError("Image part is missing its mime type.")
        if not self.data:
            raise ValueError("Image part has no data.")
        try:
            base64.b64decode(self.data, validate=True)
        except (TypeError, ValueError) as e:
            raise ValueError(f"Image data is not valid base64: {e}") from e

    @classmethod
    def from_mapping(cls, value: Mapping[str, str]) -> "ImagePart":
        mime_type = value.get("mime_type") or value.get("mimeType") or ""
        return cls(mime_type=mime_type, data=value.get("data") or "")

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "ImagePart":
        path = Path(path)
        mime_type, _ = mimetypes.guess_type(path.name)
        if not mime_type:
            raise ValueError(f"Could not guess the media type of '{path}'.")
        data = base64.b64encode(path.read_bytes()).decode("ascii")
        return cls(mime_type=mime_type, data=data)

    def to_blob(self) -> Dict[str, Dict[str, Any]]:
        return {"inline_data": {"mime_type": self.mime_type, "data": base64.b64decode(self.data)}}


def build_content(message: str, attachment: Optional[ImagePart] = None) -> Union[str, List[Any]]:
    """Content for a single user turn."""
    if attachment is None:
        return message
    return [message, attachment.to_blob()]


def extract_text(response: Any) -> str:
    """
    Returns the text of a response, raising SafetyBlockedError when the prompt
    or the first candidate was blocked on content-policy grounds.
    """
    feedback = getattr(response, "prompt_feedback", None)
    if feedback is not None and getattr(feedback, "block_reason", None):
        raise SafetyBlockedError(f"Prompt blocked: {feedback.block_reason}")

    candidates = getattr(response, "candidates", None) or []
    if candidates:
        reason = finish_reason_name(candidates[0])
        if reason in POLICY_FINISH_REASONS:
            raise SafetyBlockedError(f"Response stopped with finish reason {reason}")

    return (response.text or "").strip()


class GeminiClient:
    """
    Handle bound to a single API key. Building one configures the SDK with
    that key; models are created from it on demand.
    """

    def __init__(self, api_key: str, model_name: str = AI_MODEL):
        self.api_key = api_key
        self.model_name = model_name
        configure_api(api_key)
        logger.debug(f"Gemini client configured with key ...{api_key[-4:]} for model {model_name}.")

    def chat_model(self, system_instruction: str) -> genai.GenerativeModel:
        return genai.GenerativeModel(
            self.model_name,
            system_instruction=system_instruction,
            safety_settings=SAFETY_SETTINGS,
            generation_config=AI_GENERATION_CONFIG,
        )

    def one_shot_model(self) -> genai.GenerativeModel:
        return genai.GenerativeModel(self.model_name, safety_settings=SAFETY_SETTINGS)
