"""
Chat Session Manager

Routes each user message to a live conversation with the booking assistant.

Per message:
1. Resolve the user's session, creating a new conversation (fresh database
   context plus the assistant preamble) when none exists or it has been
   idle longer than the timeout.
2. On a reused session, send the latest database context first.
3. Stamp the session as active.
4. Send the user's message, retrying transient provider failures.

A failure anywhere in that sequence discards the user's session so the next
message starts over with fresh context. Other users are unaffected.
"""

from __future__ import annotations

import asyncio
from typing import Callable, Hashable, Optional, Protocol

from fairway.chat.errors import InitializationError, ProviderError, ValidationError
from fairway.chat.prompts import build_context_refresh, build_preamble, build_user_turn
from fairway.chat.store import SessionStore
from fairway.context.provider import CourseContext
from fairway.llm.retry import RetryPolicy
from fairway.utils.logging import get_logger

logger = get_logger(__name__)


class ConversationHandle(Protocol):
    """What the manager needs from a conversation: append a turn, get a reply."""

    async def send(self, text: str) -> str:
        ...


class ContextSource(Protocol):
    """Anything that can produce the current database context."""

    async def get_context(self) -> CourseContext:
        ...


HandleFactory = Callable[[], ConversationHandle]


class SessionManager:
    """
    Owns the user -> conversation table and its lifecycle.

    The periodic sweep runs as a background task between start() and stop();
    sweep() can also be called directly.
    """

    def __init__(
        self,
        context_provider: ContextSource,
        handle_factory: HandleFactory,
        store: SessionStore[ConversationHandle] | None = None,
        retry_policy: RetryPolicy | None = None,
        sweep_interval: float = 300.0,
    ):
        """
        Initialize the session manager.

        Args:
            context_provider: Source of live course/availability context
            handle_factory: Creates an empty conversation handle
            store: Session table (defaults to a 30 minute idle timeout)
            retry_policy: Retry policy for the user-message send
            sweep_interval: Seconds between expiry sweeps
        """
        self.context_provider = context_provider
        self.handle_factory = handle_factory
        self.store = store if store is not None else SessionStore()
        self.retry_policy = retry_policy or RetryPolicy()
        self.sweep_interval = sweep_interval

        self._running = False
        self._sweep_task: Optional[asyncio.Task] = None

    async def handle(self, user_id: Hashable, message: str | None) -> str:
        """
        Process one user message and return the assistant's reply.

        Raises:
            ValidationError: message is missing or blank
            InitializationError: a new conversation could not be set up, or
                the context refresh on an existing one failed
            ProviderError: the message send failed on every attempt
        """
        if not isinstance(message, str) or not message.strip():
            raise ValidationError()

        try:
            handle = await self._resolve(user_id)
            if not self.store.touch(user_id):
                # Swept while the refresh was in flight; keep the live conversation
                logger.info("session_restored", user_id=str(user_id))
                self.store.put(user_id, handle)

            turn = build_user_turn(message.strip())
            try:
                reply = await self.retry_policy.run(lambda: handle.send(turn))
            except Exception as e:
                logger.error(
                    "chat_send_failed",
                    user_id=str(user_id),
                    attempts=self.retry_policy.max_attempts,
                    error=str(e),
                )
                raise ProviderError() from e

        except (InitializationError, ProviderError):
            if self.store.delete(user_id):
                logger.info("session_discarded", user_id=str(user_id))
            raise

        logger.debug("chat_reply", user_id=str(user_id), reply_chars=len(reply))
        return reply

    async def _resolve(self, user_id: Hashable) -> ConversationHandle:
        """Get a live handle for the user, creating or refreshing as needed."""
        entry = self.store.get(user_id)

        if entry is None or self.store.is_expired(entry):
            if entry is not None:
                logger.info("session_expired", user_id=str(user_id))
            handle = await self._initialize(user_id)
            self.store.put(user_id, handle)
            logger.info("session_created", user_id=str(user_id), active=len(self.store))
            return handle

        try:
            context = await self.context_provider.get_context()
            await entry.handle.send(build_context_refresh(context.text))
        except Exception as e:
            logger.error("context_refresh_failed", user_id=str(user_id), error=str(e))
            raise InitializationError() from e

        return entry.handle

    async def _initialize(self, user_id: Hashable) -> ConversationHandle:
        """Create a conversation primed with the preamble and fresh context."""
        try:
            context = await self.context_provider.get_context()
            handle = self.handle_factory()
            await handle.send(build_preamble(context.text))
        except Exception as e:
            logger.error("session_init_failed", user_id=str(user_id), error=str(e))
            raise InitializationError() from e
        return handle

    def sweep(self) -> int:
        """Evict expired sessions. Never raises."""
        try:
            evicted = self.store.sweep_expired()
        except Exception as e:
            logger.error("session_sweep_failed", error=str(e))
            return 0

        if evicted:
            logger.info("sessions_swept", evicted=evicted, active=len(self.store))
        return evicted

    async def start(self) -> None:
        """Start the background sweep task."""
        if self._running:
            logger.warning("session_manager_already_running")
            return

        self._running = True
        self._sweep_task = asyncio.create_task(self._sweep_loop())
        logger.info("session_manager_started", sweep_interval=self.sweep_interval)

    async def stop(self) -> None:
        """Stop the background sweep task."""
        self._running = False
        if self._sweep_task:
            self._sweep_task.cancel()
            try:
                await self._sweep_task
            except asyncio.CancelledError:
                pass
            self._sweep_task = None
        logger.info("session_manager_stopped")

    async def _sweep_loop(self) -> None:
        while self._running:
            await asyncio.sleep(self.sweep_interval)
            self.sweep()

    @property
    def active_sessions(self) -> int:
        return len(self.store)

    @property
    def is_running(self) -> bool:
        return self._running
