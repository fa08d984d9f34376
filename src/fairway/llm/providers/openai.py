"""
OpenAI LLM Provider

Implementation for OpenAI's GPT models.
"""

from __future__ import annotations

import structlog

from fairway.llm.gateway import LLMResponse, Message
from fairway.llm.providers.base import BaseLLMProvider

logger = structlog.get_logger(__name__)


class OpenAIProvider(BaseLLMProvider):
    """OpenAI GPT provider."""

    name = "openai"

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o-mini",
    ):
        """
        Initialize OpenAI provider.

        Args:
            api_key: OpenAI API key
            model: GPT model (gpt-4o, gpt-4o-mini, etc.)
        """
        super().__init__(api_key=api_key, model=model)
        self._client = None

    def _get_client(self):
        """Lazy-load OpenAI client."""
        if self._client is None:
            import openai
            self._client = openai.AsyncOpenAI(api_key=self.api_key)
        return self._client

    async def _complete(
        self,
        messages: list[Message],
        system_prompt: str | None,
        max_tokens: int,
        temperature: float,
    ) -> LLMResponse:
        client = self._get_client()

        openai_messages = []
        if system_prompt:
            openai_messages.append({"role": "system", "content": system_prompt})
        openai_messages.extend(msg.to_dict() for msg in messages)

        try:
            response = await client.chat.completions.create(
                model=self.model,
                max_tokens=max_tokens,
                temperature=temperature,
                messages=openai_messages,
            )
        except Exception as e:
            logger.error("openai_error", error=str(e), exc_info=True)
            raise

        choice = response.choices[0]

        return LLMResponse(
            content=choice.message.content or "",
            model=response.model,
            provider=self.name,
            input_tokens=response.usage.prompt_tokens if response.usage else 0,
            output_tokens=response.usage.completion_tokens if response.usage else 0,
            finish_reason=choice.finish_reason or "stop",
        )
