"""Unit tests for RedisDecisionCache and CacheKeys.

The Redis client is an AsyncMock; ``scan_iter`` is replaced by an async
generator because the real client returns one.
"""

import json
from unittest.mock import AsyncMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from scopeguard.core.enums import ErrorCode
from scopeguard.core.result import Failure, Success
from scopeguard.domain.entities import Decision
from scopeguard.domain.enums import DecisionReason, ResourceKind
from scopeguard.domain.protocols import DecisionKey
from scopeguard.infrastructure.cache import CacheKeys, RedisDecisionCache
from scopeguard.infrastructure.cache.cache_keys import escape_glob
from scopeguard.infrastructure.enums import InfrastructureErrorCode
from tests.conftest import GUEST_100, NODE_PVE01, create_binding

KEY = DecisionKey(subject_id="alice", permission="vm.view", resource_id=GUEST_100)


def scan_results(*keys: bytes):
    async def scan_iter(match: str, count: int):
        for redis_key in keys:
            yield redis_key

    return scan_iter


@pytest.fixture
def redis_client():
    return AsyncMock()


@pytest.fixture
def cache(redis_client):
    return RedisDecisionCache(redis_client=redis_client, keys=CacheKeys(prefix="sg"))


# =============================================================================
# CacheKeys
# =============================================================================


@pytest.mark.unit
class TestCacheKeys:
    """Tests for key layout and glob patterns."""

    def test_decision_key(self):
        keys = CacheKeys(prefix="sg")

        assert keys.decision(KEY) == f"sg:authz:alice:g0:vm.view:{GUEST_100}"

    def test_global_decision_key(self):
        keys = CacheKeys(prefix="sg")

        assert keys.decision(DecisionKey("alice", "admin.rbac")) == (
            "sg:authz:alice:g0:admin.rbac:-"
        )

    def test_subject_pattern_escapes_metacharacters(self):
        keys = CacheKeys(prefix="sg")

        assert keys.subject_decisions_pattern("a*b") == "sg:authz:a\\*b:*"
        assert keys.all_decisions_pattern() == "sg:authz:*"

    def test_decision_key_carries_generation(self):
        keys = CacheKeys(prefix="sg")

        assert keys.decision(DecisionKey("alice", "admin.rbac", generation=4)) == (
            "sg:authz:alice:g4:admin.rbac:-"
        )

    def test_generation_keys_outside_decision_namespace(self):
        keys = CacheKeys(prefix="sg")

        assert keys.subject_generation("alice") == "sg:authz-gen:alice"
        assert keys.base_generation() == "sg:authz-gen-base"
        assert keys.generation_sequence() == "sg:authz-gen-seq"
        assert not keys.subject_generation("alice").startswith("sg:authz:")

    def test_escape_glob(self):
        assert escape_glob("x[1]?") == "x\\[1\\]\\?"


# =============================================================================
# get / put
# =============================================================================


@pytest.mark.unit
class TestRedisGetPut:
    """Tests for decision reads and writes."""

    async def test_get_miss(self, cache, redis_client):
        redis_client.get.return_value = None

        result = await cache.get(KEY)

        assert result == Success(value=None)
        redis_client.get.assert_awaited_once_with(f"sg:authz:alice:g0:vm.view:{GUEST_100}")

    async def test_get_decodes_bytes(self, cache, redis_client):
        decision = Decision.allow(
            create_binding(scope_kind=ResourceKind.NODE, scope_resource_id=NODE_PVE01)
        )
        redis_client.get.return_value = json.dumps(decision.to_dict()).encode("utf-8")

        result = await cache.get(KEY)

        assert result.value == decision

    async def test_get_corrupt_payload(self, cache, redis_client):
        redis_client.get.return_value = b"{not json"

        result = await cache.get(KEY)

        assert isinstance(result, Failure)
        assert result.error.infrastructure_code is InfrastructureErrorCode.CACHE_DECODE_ERROR

    async def test_get_redis_error(self, cache, redis_client):
        redis_client.get.side_effect = RedisConnectionError("refused")

        result = await cache.get(KEY)

        assert isinstance(result, Failure)
        assert result.error.code is ErrorCode.DECISION_CACHE_FAILED
        assert result.error.infrastructure_code is InfrastructureErrorCode.CACHE_GET_ERROR
        assert result.error.details["type"] == "ConnectionError"

    async def test_put_sets_with_expiry(self, cache, redis_client):
        decision = Decision.deny(DecisionReason.NO_ROLES_ASSIGNED)

        result = await cache.put(KEY, decision, 7)

        assert isinstance(result, Success)
        redis_key, payload = redis_client.set.await_args.args
        assert redis_key == f"sg:authz:alice:g0:vm.view:{GUEST_100}"
        assert json.loads(payload) == decision.to_dict()
        assert redis_client.set.await_args.kwargs == {"ex": 7}

    async def test_put_redis_error(self, cache, redis_client):
        redis_client.set.side_effect = RedisConnectionError("refused")

        result = await cache.put(KEY, Decision.deny(DecisionReason.NO_ROLES_ASSIGNED), 7)

        assert result.error.infrastructure_code is InfrastructureErrorCode.CACHE_SET_ERROR


# =============================================================================
# Invalidation
# =============================================================================


@pytest.mark.unit
class TestRedisInvalidation:
    """Tests for SCAN-based pattern deletes."""

    async def test_invalidate_subject(self, cache, redis_client):
        redis_client.scan_iter = scan_results(
            b"sg:authz:alice:g0:vm.view:-", b"sg:authz:alice:g0:x:-"
        )
        redis_client.delete.return_value = 2

        result = await cache.invalidate_subject("alice")

        assert result.value == 2
        redis_client.delete.assert_awaited_once_with(
            b"sg:authz:alice:g0:vm.view:-", b"sg:authz:alice:g0:x:-"
        )

    async def test_invalidate_nothing_to_delete(self, cache, redis_client):
        redis_client.scan_iter = scan_results()

        result = await cache.invalidate_subject("alice")

        assert result.value == 0
        redis_client.delete.assert_not_awaited()

    async def test_clear_deletes_in_batches(self, cache, redis_client):
        keys = [f"sg:authz:u{i}:g0:p:-".encode() for i in range(1200)]
        redis_client.scan_iter = scan_results(*keys)
        redis_client.delete.side_effect = lambda *batch: len(batch)

        result = await cache.clear()

        assert result.value == 1200
        assert [len(call.args) for call in redis_client.delete.await_args_list] == [500, 500, 200]

    async def test_scan_uses_subject_pattern(self, cache, redis_client):
        seen = {}

        async def scan_iter(match: str, count: int):
            seen["match"] = match
            seen["count"] = count
            return
            yield

        redis_client.scan_iter = scan_iter

        await cache.invalidate_subject("alice")

        assert seen == {"match": "sg:authz:alice:*", "count": 500}

    async def test_delete_error(self, cache, redis_client):
        redis_client.scan_iter = scan_results(b"sg:authz:alice:g0:vm.view:-")
        redis_client.delete.side_effect = RedisConnectionError("refused")

        result = await cache.invalidate_subject("alice")

        assert isinstance(result, Failure)
        assert result.error.infrastructure_code is InfrastructureErrorCode.CACHE_DELETE_ERROR


# =============================================================================
# Generations
# =============================================================================


@pytest.mark.unit
class TestRedisGenerations:
    """Tests for generation counters."""

    async def test_generation_defaults_to_zero(self, cache, redis_client):
        redis_client.mget.return_value = [None, None]

        result = await cache.generation("alice")

        assert result == Success(value=0)
        redis_client.mget.assert_awaited_once_with("sg:authz-gen:alice", "sg:authz-gen-base")

    async def test_generation_is_newer_counter(self, cache, redis_client):
        redis_client.mget.return_value = [b"3", b"9"]

        result = await cache.generation("alice")

        assert result.value == 9

    async def test_generation_redis_error(self, cache, redis_client):
        redis_client.mget.side_effect = RedisConnectionError("refused")

        result = await cache.generation("alice")

        assert isinstance(result, Failure)
        assert result.error.infrastructure_code is InfrastructureErrorCode.CACHE_GET_ERROR

    async def test_generation_corrupt_counter(self, cache, redis_client):
        redis_client.mget.return_value = [b"many", None]

        result = await cache.generation("alice")

        assert result.error.infrastructure_code is InfrastructureErrorCode.CACHE_DECODE_ERROR

    async def test_invalidate_subject_advances_subject_counter(self, cache, redis_client):
        redis_client.scan_iter = scan_results()
        redis_client.incr.return_value = 12

        await cache.invalidate_subject("alice")

        redis_client.incr.assert_awaited_once_with("sg:authz-gen-seq")
        redis_client.set.assert_awaited_once_with("sg:authz-gen:alice", 12, ex=86_400)

    async def test_clear_advances_base_counter(self, cache, redis_client):
        redis_client.scan_iter = scan_results()
        redis_client.incr.return_value = 13

        await cache.clear()

        redis_client.set.assert_awaited_once_with("sg:authz-gen-base", 13, ex=None)

    async def test_failed_advance_skips_delete(self, cache, redis_client):
        redis_client.incr.side_effect = RedisConnectionError("refused")
        redis_client.scan_iter = scan_results(b"sg:authz:alice:g0:vm.view:-")

        result = await cache.invalidate_subject("alice")

        assert result.error.infrastructure_code is InfrastructureErrorCode.CACHE_SET_ERROR
        redis_client.delete.assert_not_awaited()
