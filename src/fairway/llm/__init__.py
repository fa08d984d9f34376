"""
LLM Gateway Module

Provider-agnostic interface for language model interactions.
"""

from fairway.llm.chat import ChatHandle, GenerationConfig
from fairway.llm.gateway import LLMError, LLMGateway, LLMResponse, Message, Role
from fairway.llm.providers import ClaudeProvider, OpenAIProvider, build_gateway, get_provider
from fairway.llm.retry import RetryPolicy, linear_backoff

__all__ = [
    "ChatHandle",
    "GenerationConfig",
    "LLMError",
    "LLMGateway",
    "LLMResponse",
    "Message",
    "Role",
    "RetryPolicy",
    "linear_backoff",
    "get_provider",
    "build_gateway",
    "ClaudeProvider",
    "OpenAIProvider",
]
