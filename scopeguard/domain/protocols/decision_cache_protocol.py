"""DecisionCacheProtocol - short-lived memoization of decisions.

Keys are (subject_id, permission, resource_id) triples stamped with the
subject's cache generation. Entries live for a bounded TTL; on a miss the
engine recomputes from the store. Cache failures are returned as
Failure(CacheError) and the engine treats them as a miss.

Generations:
    ``invalidate_subject`` and ``clear`` move the affected subjects to a new
    generation. The engine reads the generation before it consults the
    store and stamps it on the key, so a decision computed from bindings
    that were invalidated mid-evaluation is stored under a generation no
    later lookup uses (or is refused outright).

Implementations:
    - InMemoryDecisionCache: per-process, lock-guarded dict
    - RedisDecisionCache: shared across processes
"""

from dataclasses import dataclass
from typing import Protocol

from scopeguard.core.errors import DomainError
from scopeguard.core.result import Result
from scopeguard.domain.entities import Decision


@dataclass(frozen=True, slots=True)
class DecisionKey:
    """Cache key of one decision.

    Attributes:
        subject_id: Checked subject.
        permission: Plain permission key.
        resource_id: Encoded resource, None for global permissions.
        generation: Subject's cache generation when evaluation started.
    """

    subject_id: str
    permission: str
    resource_id: str | None = None
    generation: int = 0


class DecisionCacheProtocol(Protocol):
    """Decision cache port."""

    async def generation(self, subject_id: str) -> Result[int, DomainError]:
        """Current cache generation of ``subject_id``."""
        ...

    async def get(self, key: DecisionKey) -> Result[Decision | None, DomainError]:
        """Cached decision, or Success(None) on miss/expiry."""
        ...

    async def put(
        self, key: DecisionKey, decision: Decision, ttl_seconds: int
    ) -> Result[None, DomainError]:
        """Store ``decision`` for ``ttl_seconds``.

        A key stamped with a superseded generation must never become
        visible to lookups at the current generation.
        """
        ...

    async def invalidate_subject(self, subject_id: str) -> Result[int, DomainError]:
        """Evict every entry of ``subject_id`` and advance its generation.

        Returns the number evicted.
        """
        ...

    async def clear(self) -> Result[int, DomainError]:
        """Evict every entry and advance every generation.

        Returns the number evicted.
        """
        ...
