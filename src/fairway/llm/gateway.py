"""
LLM Gateway

Provider-agnostic interface for large language model interactions.
Supports Claude (Anthropic) and GPT (OpenAI) with automatic fallback.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol

import structlog

logger = structlog.get_logger(__name__)


class Role(str, Enum):
    """Message roles in a conversation."""
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


@dataclass
class Message:
    """A single message in a conversation."""
    role: Role
    content: str
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> dict:
        """Convert to provider-compatible dict."""
        return {"role": self.role.value, "content": self.content}


@dataclass
class LLMResponse:
    """Response from an LLM provider."""
    content: str
    model: str
    provider: str
    input_tokens: int = 0
    output_tokens: int = 0
    latency_ms: float = 0
    finish_reason: str = "stop"
    error: str | None = None

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens


class LLMError(Exception):
    """Raised when no provider produced a usable response."""

    def __init__(self, message: str, provider: str | None = None):
        super().__init__(message)
        self.provider = provider


class LLMProvider(Protocol):
    """Protocol for LLM providers."""

    name: str

    async def generate(
        self,
        messages: list[Message],
        system_prompt: str | None = None,
        max_tokens: int = 1024,
        temperature: float = 0.7,
    ) -> LLMResponse:
        """Generate a response from the LLM."""
        ...


class LLMGateway:
    """
    Gateway for LLM interactions.

    Provides:
    - Provider abstraction
    - Automatic fallback on errors
    - Per-call timeout
    - Request/response logging

    Retries are not done here; callers wrap calls in a RetryPolicy where
    the operation is worth repeating.
    """

    def __init__(
        self,
        primary_provider: LLMProvider,
        fallback_provider: LLMProvider | None = None,
        timeout: float = 30.0,
    ):
        """
        Initialize the gateway.

        Args:
            primary_provider: Main LLM provider
            fallback_provider: Backup provider if primary fails
            timeout: Request timeout in seconds
        """
        self.primary = primary_provider
        self.fallback = fallback_provider
        self.timeout = timeout

        self._running = False

    async def start(self) -> None:
        """Start the gateway."""
        self._running = True
        providers = [self.primary.name]
        if self.fallback:
            providers.append(self.fallback.name)
        logger.info("llm_gateway_started", providers=providers)

    async def stop(self) -> None:
        """Stop the gateway."""
        self._running = False
        logger.info("llm_gateway_stopped")

    async def generate(
        self,
        messages: list[Message],
        system_prompt: str | None = None,
        max_tokens: int = 1024,
        temperature: float = 0.7,
    ) -> LLMResponse:
        """
        Generate a response from the LLM.

        Tries primary provider first, falls back on failure.

        Raises:
            LLMError: if the gateway is stopped or every provider failed
        """
        if not self._running:
            raise LLMError("LLM gateway not running")

        logger.debug(
            "llm_request",
            message_count=len(messages),
            has_system=system_prompt is not None,
            max_tokens=max_tokens,
        )

        response = await self._try_provider(
            self.primary, messages, system_prompt, max_tokens, temperature
        )

        if response.error and self.fallback:
            logger.warning(
                "llm_primary_failed",
                provider=self.primary.name,
                error=response.error,
            )
            response = await self._try_provider(
                self.fallback, messages, system_prompt, max_tokens, temperature
            )

        if response.error:
            logger.error("llm_all_providers_failed", error=response.error)
            raise LLMError(response.error, provider=response.provider)

        logger.info(
            "llm_response",
            provider=response.provider,
            model=response.model,
            tokens=response.total_tokens,
            latency_ms=round(response.latency_ms, 1),
        )
        return response

    async def _try_provider(
        self,
        provider: LLMProvider,
        messages: list[Message],
        system_prompt: str | None,
        max_tokens: int,
        temperature: float,
    ) -> LLMResponse:
        """Call a provider once, folding timeouts and exceptions into the response."""
        try:
            return await asyncio.wait_for(
                provider.generate(
                    messages=messages,
                    system_prompt=system_prompt,
                    max_tokens=max_tokens,
                    temperature=temperature,
                ),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError:
            error = f"Request timed out after {self.timeout}s"
            logger.warning("llm_timeout", provider=provider.name)
        except Exception as e:
            error = str(e) or type(e).__name__
            logger.warning("llm_error", provider=provider.name, error=error)

        return LLMResponse(content="", model="", provider=provider.name, error=error)

    @property
    def is_running(self) -> bool:
        """Check if gateway is running."""
        return self._running
