"""
Per-player reward cooldowns.
"""

from __future__ import annotations

import threading
import time
from contextlib import contextmanager
from typing import Callable, Iterator, Optional


class CooldownTracker:
    """
    Remembers when each player last received each reward.

    Entries live for the lifetime of the process. Callers that need a
    check-then-record sequence to be atomic wrap it in hold(player_id).
    """

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock
        self._entries: dict[str, dict[str, int]] = {}
        self._player_locks: dict[str, threading.RLock] = {}
        self._guard = threading.Lock()

    def now_millis(self) -> int:
        return int(self._clock() * 1000)

    def _lock_for(self, player_id: str) -> threading.RLock:
        with self._guard:
            lock = self._player_locks.get(player_id)
            if lock is None:
                lock = threading.RLock()
                self._player_locks[player_id] = lock
                self._entries[player_id] = {}
            return lock

    @contextmanager
    def hold(self, player_id: str) -> Iterator[None]:
        """Serialize cooldown access for one player."""
        with self._lock_for(player_id):
            yield

    def last_granted(self, player_id: str, reward_id: str) -> Optional[int]:
        """Epoch millis of the last grant, None if never granted."""
        with self.hold(player_id):
            return self._entries[player_id].get(reward_id)

    def remaining_millis(
        self,
        player_id: str,
        reward_id: str,
        cooldown_seconds: int,
        now_millis: Optional[int] = None,
    ) -> int:
        """
        Time left before the reward may be granted again.

        Returns:
            0 when the reward is available
        """
        if cooldown_seconds <= 0:
            return 0
        last = self.last_granted(player_id, reward_id)
        if last is None:
            return 0
        now = self.now_millis() if now_millis is None else now_millis
        remaining = cooldown_seconds * 1000 - (now - last)
        return max(0, remaining)

    def record(self, player_id: str, reward_id: str, now_millis: Optional[int] = None) -> None:
        """Store a grant time."""
        now = self.now_millis() if now_millis is None else now_millis
        with self.hold(player_id):
            self._entries[player_id][reward_id] = now

    def clear(self, player_id: Optional[str] = None) -> None:
        """Forget cooldowns for one player, or everyone."""
        with self._guard:
            if player_id is None:
                for entries in self._entries.values():
                    entries.clear()
            elif player_id in self._entries:
                self._entries[player_id].clear()

    def __len__(self) -> int:
        with self._guard:
            return sum(len(e) for e in self._entries.values())
