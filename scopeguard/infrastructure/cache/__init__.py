"""Cache adapters (decision caches and the binding store cache)."""

from scopeguard.infrastructure.cache.cache_keys import CacheKeys
from scopeguard.infrastructure.cache.cached_role_binding_store import (
    CachedRoleBindingStore,
)
from scopeguard.infrastructure.cache.in_memory_decision_cache import (
    InMemoryDecisionCache,
)
from scopeguard.infrastructure.cache.redis_decision_cache import RedisDecisionCache

__all__ = [
    "CacheKeys",
    "CachedRoleBindingStore",
    "InMemoryDecisionCache",
    "RedisDecisionCache",
]
