# mypy: disable-error-code="arg-type"
"""Authorization dependency factories.

Builds the authorization engine and its collaborators from settings:

    catalog          built-in permission registry, frozen
    store            SQLAlchemy store when DATABASE_URL is set, otherwise an
                     in-memory store seeded with the system roles; always
                     wrapped in CachedRoleBindingStore
    decision cache   InMemoryDecisionCache or RedisDecisionCache
                     (DECISION_CACHE_BACKEND)
    audit sink       LoggingAuditSink or PostgresAuditSink (AUDIT_BACKEND)

All factories are app-scoped singletons.
"""

from functools import lru_cache
from typing import TYPE_CHECKING

from scopeguard.core.config import settings
from scopeguard.core.container.infrastructure import (
    get_database,
    get_logger,
    get_redis,
)

if TYPE_CHECKING:
    from scopeguard.application.services import AccessQueryService, AuthorizationEngine
    from scopeguard.domain.permissions import PermissionCatalog
    from scopeguard.domain.protocols import (
        AuditSinkProtocol,
        DecisionCacheProtocol,
        RoleBindingStoreProtocol,
    )
    from scopeguard.infrastructure.cache import CachedRoleBindingStore


@lru_cache()
def get_permission_catalog() -> "PermissionCatalog":
    """Get the frozen built-in permission catalog."""
    from scopeguard.domain.permissions import build_default_catalog

    return build_default_catalog()


@lru_cache()
def get_base_role_binding_store() -> "RoleBindingStoreProtocol":
    """Get the authoritative role binding store (uncached)."""
    if settings.database_url:
        from scopeguard.infrastructure.persistence.repositories import (
            SQLAlchemyRoleBindingStore,
        )

        return SQLAlchemyRoleBindingStore(database=get_database(), logger=get_logger())

    from scopeguard.domain.permissions import SYSTEM_ROLES
    from scopeguard.infrastructure.persistence.repositories import (
        InMemoryRoleBindingStore,
    )

    get_logger().warning(
        "role_binding_store_in_memory",
        reason="DATABASE_URL is not configured",
    )
    return InMemoryRoleBindingStore(roles=SYSTEM_ROLES)


@lru_cache()
def get_binding_cache() -> "CachedRoleBindingStore":
    """Get the caching decorator around the authoritative store."""
    from scopeguard.infrastructure.cache import CachedRoleBindingStore

    return CachedRoleBindingStore(
        get_base_role_binding_store(),
        ttl_seconds=settings.binding_cache_ttl_seconds,
    )


def get_role_binding_store() -> "RoleBindingStoreProtocol":
    """Get the store the engine reads from."""
    return get_binding_cache()


@lru_cache()
def get_decision_cache() -> "DecisionCacheProtocol":
    """Get the decision cache singleton.

    Returns:
        RedisDecisionCache when DECISION_CACHE_BACKEND=redis, otherwise
        InMemoryDecisionCache bounded by DECISION_CACHE_MAX_ENTRIES.
    """
    if settings.decision_cache_backend == "redis":
        from scopeguard.infrastructure.cache import CacheKeys, RedisDecisionCache

        return RedisDecisionCache(
            redis_client=get_redis(),
            keys=CacheKeys(prefix=settings.cache_key_prefix),
        )

    from scopeguard.infrastructure.cache import InMemoryDecisionCache

    return InMemoryDecisionCache(max_entries=settings.decision_cache_max_entries)


@lru_cache()
def get_audit_sink() -> "AuditSinkProtocol":
    """Get the audit sink singleton (AUDIT_BACKEND)."""
    if settings.audit_backend == "database":
        from scopeguard.infrastructure.audit import PostgresAuditSink

        return PostgresAuditSink(database=get_database())

    from scopeguard.infrastructure.audit import LoggingAuditSink

    return LoggingAuditSink(logger=get_logger())


@lru_cache()
def get_authorization_engine() -> "AuthorizationEngine":
    """Get the authorization engine singleton.

    Usage:
        # Application Layer (direct use)
        engine = get_authorization_engine()
        decision = await engine.evaluate(subject_id, Permission.VM_VIEW, resource_id)

        # Presentation Layer
        from scopeguard.presentation.dependencies import require_permission
    """
    from scopeguard.application.services import AuthorizationEngine
    from scopeguard.core.container.events import get_event_bus

    # Cache invalidation must be subscribed before the first decision is cached.
    get_event_bus()

    return AuthorizationEngine(
        catalog=get_permission_catalog(),
        store=get_role_binding_store(),
        cache=get_decision_cache(),
        audit_sink=get_audit_sink(),
        logger=get_logger(),
        decision_ttl_seconds=settings.decision_cache_ttl_seconds,
        store_timeout_seconds=settings.store_timeout_seconds,
        audit_allowed_decisions=settings.audit_allowed_decisions,
    )


@lru_cache()
def get_access_query_service() -> "AccessQueryService":
    """Get the access query service singleton."""
    from scopeguard.application.services import AccessQueryService

    return AccessQueryService(engine=get_authorization_engine(), logger=get_logger())
