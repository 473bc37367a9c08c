"""Redis-backed decision cache.

Shares decisions across every process that points at the same Redis
database. Decisions are stored as JSON with ``SET ... EX ttl`` so Redis
enforces expiry; subject invalidation walks the subject's key pattern with
``SCAN`` (never ``KEYS``) and deletes in batches.

Generations live beside the decisions: ``INCR`` on a shared sequence hands
out a new value, which ``invalidate_subject`` stores on the subject's
counter and ``clear`` stores on the base counter. The generation is part of
every decision key, so a put stamped with a superseded generation lands on
a key no later lookup reads and simply expires. Subject counters expire
after a day, far beyond any decision TTL.

All Redis exceptions are mapped to Failure(CacheError). The engine logs
those and falls through to the store, so a Redis outage costs latency, not
correctness.

Usage:
    from redis.asyncio import Redis

    cache = RedisDecisionCache(
        redis_client=Redis.from_url(settings.redis_url),
        keys=CacheKeys(prefix=settings.cache_key_prefix),
    )
"""

import json
from typing import Any

from redis.asyncio import Redis
from redis.exceptions import RedisError

from scopeguard.core.enums import ErrorCode
from scopeguard.core.result import Failure, Result, Success
from scopeguard.domain.entities import Decision
from scopeguard.domain.protocols import DecisionKey
from scopeguard.infrastructure.cache.cache_keys import CacheKeys
from scopeguard.infrastructure.enums import InfrastructureErrorCode
from scopeguard.infrastructure.errors import CacheError

_DELETE_BATCH_SIZE = 500
_GENERATION_TTL_SECONDS = 86_400


class RedisDecisionCache:
    """Decision cache on Redis.

    Attributes:
        _redis: Async Redis client (connection pool is owned by the client).
        _keys: Key builder.
    """

    def __init__(self, redis_client: Redis, keys: CacheKeys) -> None:
        self._redis = redis_client
        self._keys = keys

    async def generation(self, subject_id: str) -> Result[int, CacheError]:
        """Newer of the subject's counter and the base counter (0 when unset)."""
        subject_key = self._keys.subject_generation(subject_id)
        try:
            values = await self._redis.mget(subject_key, self._keys.base_generation())
        except RedisError as e:
            return Failure(
                error=self._error(
                    InfrastructureErrorCode.CACHE_GET_ERROR,
                    f"Failed to read generation of '{subject_id}'",
                    subject_key,
                    e,
                )
            )
        try:
            return Success(value=max(int(value) if value is not None else 0 for value in values))
        except (ValueError, TypeError) as e:
            return Failure(
                error=self._error(
                    InfrastructureErrorCode.CACHE_DECODE_ERROR,
                    f"Generation counter of '{subject_id}' is corrupt",
                    subject_key,
                    e,
                )
            )

    async def get(self, key: DecisionKey) -> Result[Decision | None, CacheError]:
        """Fetch and decode a cached decision.

        Returns:
            Success(Decision), Success(None) on miss, or Failure(CacheError)
            when Redis fails or the payload cannot be decoded.
        """
        redis_key = self._keys.decision(key)
        try:
            raw = await self._redis.get(redis_key)
        except RedisError as e:
            return Failure(
                error=self._error(
                    InfrastructureErrorCode.CACHE_GET_ERROR,
                    f"Failed to get key '{redis_key}' from cache",
                    redis_key,
                    e,
                )
            )

        if raw is None:
            return Success(value=None)

        try:
            payload = raw.decode("utf-8") if isinstance(raw, bytes) else raw
            return Success(value=Decision.from_dict(json.loads(payload)))
        except (ValueError, KeyError, TypeError) as e:
            return Failure(
                error=self._error(
                    InfrastructureErrorCode.CACHE_DECODE_ERROR,
                    f"Cached decision under '{redis_key}' is corrupt",
                    redis_key,
                    e,
                )
            )

    async def put(
        self, key: DecisionKey, decision: Decision, ttl_seconds: int
    ) -> Result[None, CacheError]:
        redis_key = self._keys.decision(key)
        try:
            await self._redis.set(
                redis_key, json.dumps(decision.to_dict()), ex=ttl_seconds
            )
            return Success(value=None)
        except RedisError as e:
            return Failure(
                error=self._error(
                    InfrastructureErrorCode.CACHE_SET_ERROR,
                    f"Failed to set key '{redis_key}' in cache",
                    redis_key,
                    e,
                )
            )

    async def invalidate_subject(self, subject_id: str) -> Result[int, CacheError]:
        bumped = await self._advance_generation(
            self._keys.subject_generation(subject_id), _GENERATION_TTL_SECONDS
        )
        if isinstance(bumped, Failure):
            return bumped
        return await self._delete_pattern(self._keys.subject_decisions_pattern(subject_id))

    async def clear(self) -> Result[int, CacheError]:
        bumped = await self._advance_generation(self._keys.base_generation(), None)
        if isinstance(bumped, Failure):
            return bumped
        return await self._delete_pattern(self._keys.all_decisions_pattern())

    async def _advance_generation(
        self, counter_key: str, ttl_seconds: int | None
    ) -> Result[None, CacheError]:
        try:
            generation = await self._redis.incr(self._keys.generation_sequence())
            await self._redis.set(counter_key, generation, ex=ttl_seconds)
            return Success(value=None)
        except RedisError as e:
            return Failure(
                error=self._error(
                    InfrastructureErrorCode.CACHE_SET_ERROR,
                    f"Failed to advance generation '{counter_key}'",
                    counter_key,
                    e,
                )
            )

    async def _delete_pattern(self, pattern: str) -> Result[int, CacheError]:
        deleted = 0
        batch: list[Any] = []
        try:
            async for redis_key in self._redis.scan_iter(match=pattern, count=_DELETE_BATCH_SIZE):
                batch.append(redis_key)
                if len(batch) >= _DELETE_BATCH_SIZE:
                    deleted += await self._redis.delete(*batch)
                    batch.clear()
            if batch:
                deleted += await self._redis.delete(*batch)
            return Success(value=deleted)
        except RedisError as e:
            return Failure(
                error=self._error(
                    InfrastructureErrorCode.CACHE_DELETE_ERROR,
                    f"Failed to delete keys matching '{pattern}'",
                    pattern,
                    e,
                )
            )

    @staticmethod
    def _error(
        infrastructure_code: InfrastructureErrorCode,
        message: str,
        key: str,
        error: Exception,
    ) -> CacheError:
        return CacheError(
            code=ErrorCode.DECISION_CACHE_FAILED,
            infrastructure_code=infrastructure_code,
            message=message,
            details={"key": key, "error": str(error), "type": type(error).__name__},
        )
