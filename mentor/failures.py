"""
Structured classification of request failures.

Callers decide between "give up now" and "rotate the key and retry" from the
exception type, never from its message text.
"""
from enum import Enum
from typing import Any

from google.api_core import exceptions as google_exceptions
from google.generativeai.types import BlockedPromptException, StopCandidateException

from .exceptions import SafetyBlockedError


# Finish reasons that mean the model refused on content-policy grounds
POLICY_FINISH_REASONS = frozenset({"SAFETY", "BLOCKLIST", "PROHIBITED_CONTENT", "SPII"})

TRANSIENT_ERRORS = (
    google_exceptions.ResourceExhausted,
    google_exceptions.TooManyRequests,
    google_exceptions.ServiceUnavailable,
    google_exceptions.InternalServerError,
    google_exceptions.DeadlineExceeded,
)


class FailureKind(str, Enum):
    """Why a request to the model failed."""

    SAFETY_BLOCKED = "safety_blocked"
    TRANSIENT = "transient"
    OTHER = "other"


def finish_reason_name(candidate: Any) -> str:
    """Name of a candidate's finish reason, or an empty string."""
    reason = getattr(candidate, "finish_reason", None)
    if reason is None:
        return ""
    return getattr(reason, "name", str(reason))


def classify_failure(error: BaseException) -> FailureKind:
    if isinstance(error, (SafetyBlockedError, BlockedPromptException)):
        return FailureKind.SAFETY_BLOCKED

    if isinstance(error, StopCandidateException):
        candidate = error.args[0] if error.args else None
        if finish_reason_name(candidate) in POLICY_FINISH_REASONS:
            return FailureKind.SAFETY_BLOCKED
        return FailureKind.OTHER

    if isinstance(error, TRANSIENT_ERRORS):
        return FailureKind.TRANSIENT

    return FailureKind.OTHER
