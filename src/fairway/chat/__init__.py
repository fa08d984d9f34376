"""
Chat Module

Conversational booking assistant: session lifecycle, context refresh and
retried provider calls.
"""

from fairway.chat.errors import ChatError, InitializationError, ProviderError, ValidationError
from fairway.chat.manager import SessionManager
from fairway.chat.store import SessionEntry, SessionStore

__all__ = [
    "ChatError",
    "InitializationError",
    "ProviderError",
    "ValidationError",
    "SessionManager",
    "SessionEntry",
    "SessionStore",
]
