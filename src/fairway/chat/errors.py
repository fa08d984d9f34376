"""
Chat error taxonomy.

Every error carries a status code and a generic public message. The
underlying cause is chained and logged, never shown to the caller.
"""

from __future__ import annotations

UNAVAILABLE_MESSAGE = "Chat service temporarily unavailable. Please try again."


class ChatError(Exception):
    """Base exception for chat failures."""

    status_code: int = 500
    public_message: str = UNAVAILABLE_MESSAGE


class ValidationError(ChatError):
    """Empty or missing message; rejected before any I/O."""

    status_code = 400
    public_message = "Message is required"


class InitializationError(ChatError):
    """A new conversation could not be created (context fetch or preamble failed)."""


class ProviderError(ChatError):
    """The message send failed after exhausting retries."""
