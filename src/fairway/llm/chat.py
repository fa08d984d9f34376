"""
Chat Handle

A persistent multi-turn conversation against the LLM gateway. Every send
appends a user turn, replays the full history to the provider and appends
the reply.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from uuid import uuid4

import structlog

from fairway.llm.gateway import LLMGateway, Message, Role

logger = structlog.get_logger(__name__)


@dataclass
class GenerationConfig:
    """Fixed sampling settings for a conversation."""

    max_tokens: int = 500
    temperature: float = 0.7


class ChatHandle:
    """
    Ongoing dialogue state for one conversation.

    A failed send leaves the history exactly as it was, so the next send
    replays the same context.

    With max_turns set, the oldest exchanges are dropped once the history
    grows past it. The opening exchange (the preamble and its reply) is
    always kept.
    """

    PINNED_TURNS = 2

    def __init__(
        self,
        gateway: LLMGateway,
        generation: GenerationConfig | None = None,
        max_turns: int | None = None,
    ):
        self.gateway = gateway
        self.generation = generation or GenerationConfig()
        self.max_turns = max_turns
        self.id = str(uuid4())
        self.created_at = time.time()
        self._history: list[Message] = []

    async def send(self, text: str) -> str:
        """Send a user turn and return the generated reply text."""
        pending = [*self._history, Message(role=Role.USER, content=text)]

        response = await self.gateway.generate(
            messages=pending,
            max_tokens=self.generation.max_tokens,
            temperature=self.generation.temperature,
        )

        self._history = pending
        self._history.append(Message(role=Role.ASSISTANT, content=response.content))
        self._trim()
        return response.content

    def _trim(self) -> None:
        """Drop the oldest user/assistant pairs after the pinned opening exchange."""
        if self.max_turns is None:
            return
        limit = max(self.max_turns, self.PINNED_TURNS)
        dropped = 0
        while len(self._history) > limit:
            del self._history[self.PINNED_TURNS:self.PINNED_TURNS + 2]
            dropped += 2
        if dropped:
            logger.debug("chat_history_trimmed", handle=self.id[:8], dropped=dropped)

    @property
    def history(self) -> list[Message]:
        """Copy of the turns exchanged so far."""
        return list(self._history)

    @property
    def turn_count(self) -> int:
        return len(self._history)

    def __repr__(self) -> str:
        return f"<ChatHandle {self.id[:8]} turns={self.turn_count}>"
