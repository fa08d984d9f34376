"""
Tests for the in-process session store.
"""

import pytest

from fairway.chat.store import SessionStore


class FakeClock:
    """Manually advanced clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(clock):
    return SessionStore(idle_timeout=1800, clock=clock)


class TestSessionStore:
    """Tests for get/put/delete/touch."""

    def test_put_and_get(self, store, clock):
        entry = store.put("alice", "handle-1")
        assert store.get("alice") is entry
        assert entry.handle == "handle-1"
        assert entry.last_activity == clock.now
        assert "alice" in store
        assert len(store) == 1

    def test_put_replaces_existing(self, store):
        store.put("alice", "old")
        store.put("alice", "new")
        assert len(store) == 1
        assert store.get("alice").handle == "new"

    def test_delete(self, store):
        store.put("alice", "h")
        assert store.delete("alice") is True
        assert store.delete("alice") is False
        assert store.get("alice") is None

    def test_touch_bumps_activity(self, store, clock):
        store.put("alice", "h")
        clock.advance(60)
        assert store.touch("alice") is True
        assert store.get("alice").last_activity == clock.now

    def test_touch_missing_user_is_noop(self, store):
        assert store.touch("nobody") is False
        assert len(store) == 0

    def test_expiry_boundary(self, store, clock):
        entry = store.put("alice", "h")
        clock.advance(1800)
        assert store.is_expired(entry) is False
        clock.advance(1)
        assert store.is_expired(entry) is True


class TestSweep:
    """Tests for sweep_expired."""

    def test_evicts_only_expired(self, store, clock):
        store.put("old", "h1")
        clock.advance(1200)
        store.put("recent", "h2")
        clock.advance(601)

        assert store.sweep_expired() == 1
        assert "old" not in store
        assert "recent" in store

    def test_sweep_is_idempotent(self, store, clock):
        store.put("a", "h1")
        store.put("b", "h2")
        clock.advance(31 * 60)

        assert store.sweep_expired() == 2
        assert store.sweep_expired() == 0
        assert len(store) == 0

    def test_eviction_failure_is_isolated(self, store, clock):
        store.put("a", "h1")
        store.put("b", "h2")
        store.put("c", "h3")
        clock.advance(31 * 60)

        original = store.is_expired

        def flaky_is_expired(entry):
            if entry.user_id == "b":
                raise RuntimeError("corrupt entry")
            return original(entry)

        store.is_expired = flaky_is_expired

        assert store.sweep_expired() == 2
        assert list(e.user_id for e in store) == ["b"]

    def test_iteration_snapshot(self, store):
        store.put("a", "h1")
        for entry in store:
            store.delete(entry.user_id)
        assert len(store) == 0
