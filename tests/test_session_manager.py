"""
Tests for the chat session manager.
"""

import asyncio
from datetime import date, time, timedelta

import pytest

from fairway.chat import (
    InitializationError,
    ProviderError,
    SessionManager,
    SessionStore,
    ValidationError,
)
from fairway.chat.prompts import ASSISTANT_PROMPT
from fairway.context import CourseContext, DatabaseContextProvider
from fairway.llm import ChatHandle, LLMGateway, LLMResponse, RetryPolicy, linear_backoff
from fairway.models import Course, TeeTime, close_database, get_session, get_session_factory, init_database


class FakeClock:
    def __init__(self, start: float = 0.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeContextProvider:
    """Returns numbered context snapshots; can be told to fail."""

    def __init__(self):
        self.calls = 0
        self.fail = False

    async def get_context(self) -> CourseContext:
        self.calls += 1
        if self.fail:
            raise ConnectionError("database unreachable")
        return CourseContext(courses=[], text=f"snapshot {self.calls}")


class FakeHandle:
    """Records every turn; user turns fail while user_failures > 0."""

    def __init__(self, fail_preamble: bool = False):
        self.sent: list[str] = []
        self.fail_preamble = fail_preamble
        self.fail_refresh = False
        self.user_failures = 0

    async def send(self, text: str) -> str:
        if text.startswith(ASSISTANT_PROMPT[:20]) and self.fail_preamble:
            raise ConnectionError("handshake failed")
        if text.startswith("Latest database context") and self.fail_refresh:
            raise ConnectionError("refresh failed")
        if "User message:" in text and self.user_failures > 0:
            self.user_failures -= 1
            raise ConnectionError("provider hiccup")
        self.sent.append(text)
        return f"reply {len(self.sent)}"


class HandleFactory:
    def __init__(self):
        self.created: list[FakeHandle] = []
        self.fail_preamble = False

    def __call__(self) -> FakeHandle:
        handle = FakeHandle(fail_preamble=self.fail_preamble)
        self.created.append(handle)
        return handle


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def context():
    return FakeContextProvider()


@pytest.fixture
def factory():
    return HandleFactory()


@pytest.fixture
def manager(clock, sleeps, context, factory):
    async def fake_sleep(delay: float) -> None:
        sleeps.append(delay)

    return SessionManager(
        context_provider=context,
        handle_factory=factory,
        store=SessionStore(idle_timeout=1800, clock=clock),
        retry_policy=RetryPolicy(max_attempts=3, backoff=linear_backoff(1.0), sleep=fake_sleep),
        sweep_interval=300,
    )


class TestValidation:
    """Messages are checked before any I/O."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("message", [None, "", "   ", "\n\t"])
    async def test_blank_message_rejected(self, manager, context, factory, message):
        with pytest.raises(ValidationError) as exc_info:
            await manager.handle("alice", message)

        assert exc_info.value.status_code == 400
        assert context.calls == 0
        assert factory.created == []
        assert manager.active_sessions == 0


class TestSessionResolution:
    """New, reused and expired sessions."""

    @pytest.mark.asyncio
    async def test_first_message_initializes(self, manager, context, factory):
        reply = await manager.handle("alice", "book me a tee time tomorrow morning")

        assert reply
        assert context.calls == 1
        assert len(factory.created) == 1
        handle = factory.created[0]
        assert len(handle.sent) == 2
        assert handle.sent[0].startswith(ASSISTANT_PROMPT)
        assert "DATABASE CONTEXT:\nsnapshot 1" in handle.sent[0]
        assert 'User message: "book me a tee time tomorrow morning"' in handle.sent[1]
        assert manager.active_sessions == 1
        assert manager.store.get("alice").handle is handle

    @pytest.mark.asyncio
    async def test_user_turn_carries_formatting_instructions(self, manager, factory):
        await manager.handle("alice", "  any carts?  ")

        user_turn = factory.created[0].sent[-1]
        assert 'User message: "any carts?"' in user_turn
        assert "End with one engaging question" in user_turn
        assert "Don't repeat the user's question" in user_turn
        assert "Don't use stars, emojis, or special formatting" in user_turn

    @pytest.mark.asyncio
    async def test_reuse_refreshes_context(self, manager, context, factory, clock):
        await manager.handle("alice", "hello")
        clock.advance(10 * 60)

        await manager.handle("alice", "what about tomorrow?")

        assert len(factory.created) == 1
        assert context.calls == 2
        handle = factory.created[0]
        # preamble, user, refresh, user
        assert len(handle.sent) == 4
        assert handle.sent[2] == "Latest database context:\nsnapshot 2"
        assert "what about tomorrow?" in handle.sent[3]

    @pytest.mark.asyncio
    async def test_activity_stamp_updates(self, manager, clock):
        await manager.handle("alice", "hello")
        clock.advance(20 * 60)
        await manager.handle("alice", "still there?")
        clock.advance(20 * 60)

        # 40 minutes since creation, but only 20 since last activity
        await manager.handle("alice", "and now?")
        assert manager.store.get("alice").last_activity == clock.now

    @pytest.mark.asyncio
    async def test_expired_session_reinitializes(self, manager, context, factory, clock):
        await manager.handle("bob", "hello")
        old_handle = factory.created[0]
        clock.advance(31 * 60)

        await manager.handle("bob", "are you there?")

        assert len(factory.created) == 2
        new_handle = factory.created[1]
        assert manager.store.get("bob").handle is new_handle
        assert manager.active_sessions == 1
        assert context.calls == 2
        assert new_handle.sent[0].startswith(ASSISTANT_PROMPT)
        # Old conversation got nothing new
        assert len(old_handle.sent) == 2

    @pytest.mark.asyncio
    async def test_users_are_independent(self, manager, factory):
        await manager.handle("alice", "hi")
        await manager.handle("bob", "hi")

        assert len(factory.created) == 2
        assert manager.active_sessions == 2


class TestRetry:
    """Retry and eviction on the user-message send."""

    @pytest.mark.asyncio
    async def test_two_failures_then_success(self, manager, factory, sleeps):
        await manager.handle("alice", "hello")
        factory.created[0].user_failures = 2

        reply = await manager.handle("alice", "book 9am")

        assert reply
        assert sleeps == [1.0, 2.0]
        assert manager.active_sessions == 1

    @pytest.mark.asyncio
    async def test_all_attempts_fail(self, manager, factory, sleeps):
        await manager.handle("alice", "hello")
        factory.created[0].user_failures = 3

        with pytest.raises(ProviderError) as exc_info:
            await manager.handle("alice", "book 9am")

        assert exc_info.value.status_code == 500
        assert "unavailable" in exc_info.value.public_message
        assert sleeps == [1.0, 2.0]
        assert "alice" not in manager.store

    @pytest.mark.asyncio
    async def test_first_message_send_failure_evicts(self, manager, factory, context):
        original = factory.__call__

        def failing_factory():
            handle = original()
            handle.user_failures = 3
            return handle

        manager.handle_factory = failing_factory

        with pytest.raises(ProviderError):
            await manager.handle("alice", "hello")
        assert manager.active_sessions == 0

        # Next message starts over with fresh context
        manager.handle_factory = factory
        await manager.handle("alice", "hello again")
        assert context.calls == 2
        assert manager.active_sessions == 1

    @pytest.mark.asyncio
    async def test_failure_does_not_touch_other_users(self, manager, factory):
        await manager.handle("alice", "hi")
        await manager.handle("bob", "hi")
        factory.created[0].user_failures = 3

        with pytest.raises(ProviderError):
            await manager.handle("alice", "again")

        assert "alice" not in manager.store
        assert "bob" in manager.store


class TestInitializationFailures:
    """Failures while creating or refreshing a conversation."""

    @pytest.mark.asyncio
    async def test_context_fetch_failure(self, manager, context, factory):
        context.fail = True

        with pytest.raises(InitializationError):
            await manager.handle("alice", "hello")

        assert factory.created == []
        assert manager.active_sessions == 0

    @pytest.mark.asyncio
    async def test_preamble_failure_stores_nothing(self, manager, factory):
        factory.fail_preamble = True

        with pytest.raises(InitializationError) as exc_info:
            await manager.handle("alice", "hello")

        assert isinstance(exc_info.value.__cause__, ConnectionError)
        assert "alice" not in manager.store

    @pytest.mark.asyncio
    async def test_expired_entry_removed_when_reinit_fails(self, manager, context, clock):
        await manager.handle("alice", "hello")
        clock.advance(31 * 60)
        context.fail = True

        with pytest.raises(InitializationError):
            await manager.handle("alice", "hello?")

        assert "alice" not in manager.store

    @pytest.mark.asyncio
    async def test_refresh_failure_discards_session(self, manager, factory):
        await manager.handle("alice", "hello")
        factory.created[0].fail_refresh = True

        with pytest.raises(InitializationError):
            await manager.handle("alice", "again")

        assert "alice" not in manager.store


class TestSweep:
    """Periodic eviction."""

    @pytest.mark.asyncio
    async def test_sweep_during_refresh_keeps_session(self, manager, context, factory, clock):
        await manager.handle("alice", "hi")
        clock.advance(1799)

        original = context.get_context

        async def slow_get_context():
            # The sweep fires while the refresh is in flight and the entry ages out
            clock.advance(2)
            manager.sweep()
            return await original()

        context.get_context = slow_get_context

        reply = await manager.handle("alice", "still there?")

        assert reply
        assert "alice" in manager.store
        entry = manager.store.get("alice")
        assert entry.handle is factory.created[0]
        assert entry.last_activity == clock.now
        assert len(factory.created) == 1

    @pytest.mark.asyncio
    async def test_sweep_evicts_stale_sessions(self, manager, clock):
        await manager.handle("alice", "hi")
        clock.advance(20 * 60)
        await manager.handle("bob", "hi")
        clock.advance(11 * 60)

        assert manager.sweep() == 1
        assert "alice" not in manager.store
        assert "bob" in manager.store

    @pytest.mark.asyncio
    async def test_sweep_twice_is_same_as_once(self, manager, clock):
        await manager.handle("alice", "hi")
        await manager.handle("bob", "hi")
        clock.advance(31 * 60)

        assert manager.sweep() == 2
        assert manager.sweep() == 0
        assert manager.active_sessions == 0

    def test_sweep_never_raises(self, manager):
        def broken():
            raise RuntimeError("store exploded")

        manager.store.sweep_expired = broken
        assert manager.sweep() == 0

    @pytest.mark.asyncio
    async def test_background_sweep(self, context, factory, clock):
        manager = SessionManager(
            context_provider=context,
            handle_factory=factory,
            store=SessionStore(idle_timeout=1800, clock=clock),
            sweep_interval=0.01,
        )
        await manager.handle("alice", "hi")
        clock.advance(31 * 60)

        await manager.start()
        assert manager.is_running
        try:
            for _ in range(100):
                if manager.active_sessions == 0:
                    break
                await asyncio.sleep(0.01)
        finally:
            await manager.stop()

        assert manager.active_sessions == 0
        assert not manager.is_running

    @pytest.mark.asyncio
    async def test_start_twice_is_harmless(self, manager):
        await manager.start()
        task = manager._sweep_task
        await manager.start()
        assert manager._sweep_task is task
        await manager.stop()


class ScriptedProvider:
    name = "scripted"

    def __init__(self):
        self.calls = []

    async def generate(self, messages, system_prompt=None, max_tokens=1024, temperature=0.7):
        self.calls.append(list(messages))
        return LLMResponse(
            content="Riverside has a 7:00 AM slot tomorrow. Shall I hold it for you?",
            model="test",
            provider=self.name,
        )


class TestEndToEnd:
    """Session manager wired to a real database and chat handle."""

    @pytest.fixture
    async def db(self):
        await init_database("sqlite+aiosqlite:///:memory:")
        yield get_session_factory()
        await close_database()

    @pytest.mark.asyncio
    async def test_tee_time_request(self, db):
        today = date(2026, 10, 19)
        async with get_session() as session:
            course = Course(name="Riverside Links", location="Bangkok")
            session.add(course)
            await session.flush()
            session.add(TeeTime(course_id=course.id, date=today + timedelta(days=1), time=time(7, 0)))
            await session.commit()

        provider = ScriptedProvider()
        gateway = LLMGateway(provider)
        await gateway.start()

        manager = SessionManager(
            context_provider=DatabaseContextProvider(session_factory=db, today=lambda: today),
            handle_factory=lambda: ChatHandle(gateway),
        )

        reply = await manager.handle("alice", "book me a tee time tomorrow morning")

        assert len(reply) > 0
        assert manager.active_sessions == 1
        preamble = provider.calls[0][0].content
        assert "Riverside Links" in preamble
        assert "07:00 AM" in preamble
        # second call replays preamble, its reply, and the user turn
        assert len(provider.calls[1]) == 3
