"""
LLM Providers

Implementations for various LLM providers.
"""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

import structlog

from fairway.llm.gateway import LLMGateway, LLMResponse, Message
from fairway.llm.providers.base import BaseLLMProvider
from fairway.llm.providers.claude import ClaudeProvider
from fairway.llm.providers.openai import OpenAIProvider

if TYPE_CHECKING:
    from fairway.config import LLMConfig

logger = structlog.get_logger(__name__)

PROVIDERS: dict[str, type[BaseLLMProvider]] = {
    "claude": ClaudeProvider,
    "anthropic": ClaudeProvider,
    "openai": OpenAIProvider,
    "gpt": OpenAIProvider,
}

API_KEY_ENV = {
    "claude": "ANTHROPIC_API_KEY",
    "openai": "OPENAI_API_KEY",
}


def get_provider(
    provider_name: str,
    api_key: str,
    model: str | None = None,
) -> BaseLLMProvider:
    """
    Get an LLM provider by name.

    Args:
        provider_name: 'claude' or 'openai'
        api_key: API key for the provider
        model: Optional model override

    Returns:
        Configured provider instance
    """
    provider_class = PROVIDERS.get(provider_name.lower())
    if not provider_class:
        raise ValueError(
            f"Unknown provider: {provider_name}. "
            f"Available: {list(PROVIDERS.keys())}"
        )

    kwargs = {"api_key": api_key}
    if model:
        kwargs["model"] = model

    return provider_class(**kwargs)


class UnconfiguredProvider:
    """Stands in when no API key is set; every call reports an error."""

    name = "unconfigured"

    async def generate(
        self,
        messages: list[Message],
        system_prompt: str | None = None,
        max_tokens: int = 1024,
        temperature: float = 0.7,
    ) -> LLMResponse:
        return LLMResponse(
            content="",
            model="",
            provider=self.name,
            error="No LLM API key configured",
        )


def _provider_from_config(name: str, config: "LLMConfig") -> BaseLLMProvider | None:
    provider_class = PROVIDERS.get(name.lower())
    if not provider_class:
        raise ValueError(f"Unknown provider: {name}")
    canonical = provider_class.name
    api_key = os.environ.get(API_KEY_ENV[canonical])
    if not api_key:
        return None
    model = config.claude_model if canonical == "claude" else config.openai_model
    return get_provider(canonical, api_key, model)


def build_gateway(config: "LLMConfig") -> LLMGateway:
    """Create an LLM gateway from configuration and API keys in the environment."""
    primary = _provider_from_config(config.provider, config)
    fallback = None
    if config.fallback_provider:
        fallback = _provider_from_config(config.fallback_provider, config)

    if primary is None and fallback is not None:
        primary, fallback = fallback, None

    if primary is None:
        logger.warning("no_llm_api_keys", message="Set ANTHROPIC_API_KEY or OPENAI_API_KEY")
        primary = UnconfiguredProvider()
    else:
        logger.info("llm_provider_configured", provider=primary.name, role="primary")
    if fallback is not None:
        logger.info("llm_provider_configured", provider=fallback.name, role="fallback")

    return LLMGateway(
        primary_provider=primary,
        fallback_provider=fallback,
        timeout=config.timeout,
    )


__all__ = [
    "BaseLLMProvider",
    "ClaudeProvider",
    "OpenAIProvider",
    "UnconfiguredProvider",
    "build_gateway",
    "get_provider",
]
