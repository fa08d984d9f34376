"""
Claude (Anthropic) LLM Provider

Implementation for Anthropic's Claude models.
"""

from __future__ import annotations

import structlog

from fairway.llm.gateway import LLMResponse, Message, Role
from fairway.llm.providers.base import BaseLLMProvider

logger = structlog.get_logger(__name__)


class ClaudeProvider(BaseLLMProvider):
    """Anthropic Claude provider."""

    name = "claude"

    def __init__(
        self,
        api_key: str,
        model: str = "claude-sonnet-4-20250514",
    ):
        """
        Initialize Claude provider.

        Args:
            api_key: Anthropic API key
            model: Claude model identifier
        """
        super().__init__(api_key=api_key, model=model)
        self._client = None

    def _get_client(self):
        """Lazy-load Anthropic client."""
        if self._client is None:
            import anthropic
            self._client = anthropic.AsyncAnthropic(api_key=self.api_key)
        return self._client

    async def _complete(
        self,
        messages: list[Message],
        system_prompt: str | None,
        max_tokens: int,
        temperature: float,
    ) -> LLMResponse:
        client = self._get_client()

        # Claude takes the system prompt as a separate parameter
        anthropic_messages = []
        for msg in messages:
            if msg.role == Role.SYSTEM:
                if system_prompt is None:
                    system_prompt = msg.content
                continue
            anthropic_messages.append(msg.to_dict())

        kwargs = {
            "model": self.model,
            "max_tokens": max_tokens,
            "temperature": temperature,
            "messages": anthropic_messages,
        }
        if system_prompt:
            kwargs["system"] = system_prompt

        try:
            response = await client.messages.create(**kwargs)
        except Exception as e:
            logger.error("claude_error", error=str(e), exc_info=True)
            raise

        content = "".join(
            block.text for block in response.content if getattr(block, "type", "") == "text"
        )

        return LLMResponse(
            content=content,
            model=response.model,
            provider=self.name,
            input_tokens=response.usage.input_tokens,
            output_tokens=response.usage.output_tokens,
            finish_reason=response.stop_reason or "stop",
        )
