"""In-memory decision cache.

Per-process TTL cache guarded by a ``threading.Lock`` so it can be shared
by every task on the event loop and by worker threads alike. Operations
never await while holding the lock.

Expiry uses a monotonic clock (injectable for tests), so wall-clock jumps
can neither resurrect nor prematurely expire entries.

When ``max_entries`` is reached, expired entries are purged first and then
the oldest insertions are evicted.

Generations come from one monotonic counter: ``invalidate_subject`` gives
the subject a fresh value and ``clear`` moves the base every subject falls
back to. ``put`` refuses keys stamped with a superseded generation, under
the same lock that advances it.
"""

import itertools
import threading
import time
from collections.abc import Callable

from scopeguard.core.errors import DomainError
from scopeguard.core.result import Result, Success
from scopeguard.domain.entities import Decision
from scopeguard.domain.protocols import DecisionKey


class InMemoryDecisionCache:
    """Lock-guarded dict of DecisionKey → (expires_at, Decision).

    Attributes:
        max_entries: Upper bound on stored entries.
    """

    def __init__(
        self,
        *,
        max_entries: int = 100_000,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_entries <= 0:
            raise ValueError("max_entries must be positive")
        self.max_entries = max_entries
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: dict[DecisionKey, tuple[float, Decision]] = {}
        self._counter = itertools.count(1)
        self._base_generation = 0
        self._generations: dict[str, int] = {}

    async def generation(self, subject_id: str) -> Result[int, DomainError]:
        with self._lock:
            return Success(value=self._current_generation(subject_id))

    async def get(self, key: DecisionKey) -> Result[Decision | None, DomainError]:
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return Success(value=None)
            expires_at, decision = entry
            if expires_at <= now:
                del self._entries[key]
                return Success(value=None)
            return Success(value=decision)

    async def put(
        self, key: DecisionKey, decision: Decision, ttl_seconds: int
    ) -> Result[None, DomainError]:
        if ttl_seconds <= 0:
            return Success(value=None)
        now = self._clock()
        with self._lock:
            if key.generation != self._current_generation(key.subject_id):
                return Success(value=None)
            if key not in self._entries and len(self._entries) >= self.max_entries:
                self._evict(now)
            # Re-insert so dict order tracks insertion age.
            self._entries.pop(key, None)
            self._entries[key] = (now + ttl_seconds, decision)
        return Success(value=None)

    async def invalidate_subject(self, subject_id: str) -> Result[int, DomainError]:
        with self._lock:
            self._generations[subject_id] = next(self._counter)
            stale = [key for key in self._entries if key.subject_id == subject_id]
            for key in stale:
                del self._entries[key]
        return Success(value=len(stale))

    async def clear(self) -> Result[int, DomainError]:
        with self._lock:
            self._base_generation = next(self._counter)
            self._generations.clear()
            count = len(self._entries)
            self._entries.clear()
        return Success(value=count)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def _current_generation(self, subject_id: str) -> int:
        # Caller holds the lock.
        return self._generations.get(subject_id, self._base_generation)

    def _evict(self, now: float) -> None:
        # Caller holds the lock.
        expired = [key for key, (expires_at, _) in self._entries.items() if expires_at <= now]
        for key in expired:
            del self._entries[key]
        overflow = len(self._entries) - self.max_entries + 1
        if overflow > 0:
            for key in list(self._entries)[:overflow]:
                del self._entries[key]
