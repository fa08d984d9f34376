"""
Base LLM Provider

Abstract base class for LLM provider implementations.
"""

from __future__ import annotations

import time
from abc import ABC, abstractmethod

from fairway.llm.gateway import LLMResponse, Message


class BaseLLMProvider(ABC):
    """
    Base class for LLM providers.

    Subclasses implement _complete() against their SDK; generate() times the
    call and turns SDK exceptions into an LLMResponse carrying the error.
    """

    name: str = "base"

    def __init__(self, api_key: str, model: str):
        """
        Initialize provider.

        Args:
            api_key: API key for the provider
            model: Model identifier
        """
        self.api_key = api_key
        self.model = model

    @abstractmethod
    async def _complete(
        self,
        messages: list[Message],
        system_prompt: str | None,
        max_tokens: int,
        temperature: float,
    ) -> LLMResponse:
        """Make the SDK request. May raise."""

    async def generate(
        self,
        messages: list[Message],
        system_prompt: str | None = None,
        max_tokens: int = 1024,
        temperature: float = 0.7,
    ) -> LLMResponse:
        """Generate a response from the LLM."""
        start_time = time.perf_counter()

        try:
            response = await self._complete(messages, system_prompt, max_tokens, temperature)
        except Exception as e:
            response = LLMResponse(
                content="",
                model=self.model,
                provider=self.name,
                error=str(e) or type(e).__name__,
            )

        response.latency_ms = (time.perf_counter() - start_time) * 1000
        return response
