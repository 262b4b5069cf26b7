#!/usr/bin/env python3
"""
Custom exception classes for the Mentor Gemini client.
"""

class MentorError(Exception):
    """Base class for errors raised by the Mentor client."""
    pass


class NoApiKeysError(MentorError):
    """
    Raised when the client is built without any API key. This is a
    configuration problem and is the only error that reaches the caller.
    """
    pass


class SessionInitError(MentorError):
    """Raised when a chat session could not be created from the current client."""

    def __init__(self, message: str = "Session failed to initialize"):
        super().__init__(message)


class SafetyBlockedError(MentorError):
    """
    Raised when the model refused to answer because of content-policy
    classification. Rotating API keys cannot fix this.
    """
    pass
