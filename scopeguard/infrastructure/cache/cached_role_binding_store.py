"""Caching decorator for RoleBindingStoreProtocol.

Wraps any store and memoizes successful answers for a short TTL, so a burst
of checks for the same subject costs one round-trip. Failures are never
cached: the next call retries the backing store.

Eviction:
    - invalidate_subject(subject_id): after a binding of the subject changed
    - invalidate_role(role_id): after a role's permission set changed
    - clear(): everything

The cache dicts are guarded by a ``threading.Lock`` and the lock is never
held across an ``await``.
"""

import threading
import time
from collections.abc import Callable

from scopeguard.core.result import Result, Success
from scopeguard.domain.entities import RoleBinding
from scopeguard.domain.errors import RoleBindingStoreError
from scopeguard.domain.protocols import RoleBindingStoreProtocol


class CachedRoleBindingStore:
    """TTL cache in front of a role binding store.

    Args:
        inner: Authoritative store.
        ttl_seconds: Lifetime of cached answers.
        clock: Monotonic clock (injectable for tests).
    """

    def __init__(
        self,
        inner: RoleBindingStoreProtocol,
        *,
        ttl_seconds: float = 5.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._inner = inner
        self._ttl = ttl_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._bindings: dict[str, tuple[float, list[RoleBinding]]] = {}
        self._permissions: dict[str, tuple[float, frozenset[str]]] = {}
        # Bumped by every eviction; answers fetched across an eviction are not cached.
        self._generation = 0

    async def roles_for_subject(
        self, subject_id: str
    ) -> Result[list[RoleBinding], RoleBindingStoreError]:
        now = self._clock()
        with self._lock:
            entry = self._bindings.get(subject_id)
            if entry is not None and entry[0] > now:
                return Success(value=list(entry[1]))
            generation = self._generation

        result = await self._inner.roles_for_subject(subject_id)
        if isinstance(result, Success):
            with self._lock:
                if generation == self._generation:
                    self._bindings[subject_id] = (self._clock() + self._ttl, list(result.value))
        return result

    async def permissions_for_role(
        self, role_id: str
    ) -> Result[frozenset[str], RoleBindingStoreError]:
        now = self._clock()
        with self._lock:
            entry = self._permissions.get(role_id)
            if entry is not None and entry[0] > now:
                return Success(value=entry[1])
            generation = self._generation

        result = await self._inner.permissions_for_role(role_id)
        if isinstance(result, Success):
            with self._lock:
                if generation == self._generation:
                    self._permissions[role_id] = (self._clock() + self._ttl, result.value)
        return result

    def invalidate_subject(self, subject_id: str) -> None:
        with self._lock:
            self._bindings.pop(subject_id, None)
            self._generation += 1

    def invalidate_role(self, role_id: str) -> None:
        with self._lock:
            self._permissions.pop(role_id, None)
            self._generation += 1

    def clear(self) -> None:
        with self._lock:
            self._bindings.clear()
            self._permissions.clear()
            self._generation += 1
