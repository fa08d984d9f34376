"""
Session Store

In-process table of user id -> conversation entry with idle expiry.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Generic, Hashable, Iterator, TypeVar

from fairway.utils.logging import get_logger

logger = get_logger(__name__)

H = TypeVar("H")


@dataclass
class SessionEntry(Generic[H]):
    """Binds a user to their conversation handle and last-activity time."""

    user_id: Hashable
    handle: H
    last_activity: float


class SessionStore(Generic[H]):
    """
    One entry per user, evicted after idle_timeout seconds without activity.

    All mutations are synchronous, so under a single event loop there is no
    interleaving between them and no lock is needed.
    """

    def __init__(
        self,
        idle_timeout: float = 1800.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Args:
            idle_timeout: Seconds of inactivity before an entry expires
            clock: Returns the current time in seconds; injectable for tests
        """
        self.idle_timeout = idle_timeout
        self._clock = clock
        self._entries: dict[Hashable, SessionEntry[H]] = {}

    def now(self) -> float:
        return self._clock()

    def get(self, user_id: Hashable) -> SessionEntry[H] | None:
        """Get the entry for a user, expired or not."""
        return self._entries.get(user_id)

    def put(self, user_id: Hashable, handle: H) -> SessionEntry[H]:
        """Store a handle for a user, replacing any previous entry."""
        entry = SessionEntry(user_id=user_id, handle=handle, last_activity=self.now())
        self._entries[user_id] = entry
        return entry

    def delete(self, user_id: Hashable) -> bool:
        """Remove a user's entry. Returns True if one existed."""
        return self._entries.pop(user_id, None) is not None

    def touch(self, user_id: Hashable) -> bool:
        """Stamp the user's entry as active now. Returns False if there is no entry."""
        entry = self._entries.get(user_id)
        if entry is None:
            return False
        entry.last_activity = self.now()
        return True

    def is_expired(self, entry: SessionEntry[H]) -> bool:
        return self.now() - entry.last_activity > self.idle_timeout

    def sweep_expired(self) -> int:
        """
        Evict every expired entry.

        Each eviction is isolated: a failure on one entry is logged and the
        sweep moves on.

        Returns:
            Number of entries evicted
        """
        evicted = 0
        for user_id, entry in list(self._entries.items()):
            try:
                if self.is_expired(entry):
                    del self._entries[user_id]
                    evicted += 1
            except Exception as e:
                logger.error("session_evict_failed", user_id=str(user_id), error=str(e))
        return evicted

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, user_id: object) -> bool:
        return user_id in self._entries

    def __iter__(self) -> Iterator[SessionEntry[H]]:
        return iter(list(self._entries.values()))
