"""Container module - Centralized dependency injection.

Re-exports every factory so callers import from one place:

    from scopeguard.core.container import get_authorization_engine, get_logger

The container is organized into modules by concern:
- infrastructure: Logging, database, Redis
- events: Event bus and cache invalidation subscriptions
- authorization: Catalog, store, caches, audit sink, engine, queries
"""

# Infrastructure services
from scopeguard.core.container.infrastructure import (
    get_database,
    get_logger,
    get_redis,
)

# Authorization
from scopeguard.core.container.authorization import (
    get_access_query_service,
    get_audit_sink,
    get_authorization_engine,
    get_base_role_binding_store,
    get_binding_cache,
    get_decision_cache,
    get_permission_catalog,
    get_role_binding_store,
)

# Event bus
from scopeguard.core.container.events import get_event_bus

__all__ = [
    # Infrastructure
    "get_database",
    "get_logger",
    "get_redis",
    # Authorization
    "get_access_query_service",
    "get_audit_sink",
    "get_authorization_engine",
    "get_base_role_binding_store",
    "get_binding_cache",
    "get_decision_cache",
    "get_permission_catalog",
    "get_role_binding_store",
    # Events
    "get_event_bus",
]
