# mypy: disable-error-code="arg-type"
"""Event bus dependency factory.

Application-scoped singleton for domain event publishing. Cache
invalidation is subscribed here, at construction, so every publisher of
role administration events reaches the caches without wiring of its own.
"""

from functools import lru_cache
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from scopeguard.domain.protocols.event_bus_protocol import EventBusProtocol


@lru_cache()
def get_event_bus() -> "EventBusProtocol":
    """Get event bus singleton (app-scoped).

    Subscriptions:
        RoleBindingGranted      → CacheInvalidationHandler.handle_binding_granted
        RoleBindingRevoked      → CacheInvalidationHandler.handle_binding_revoked
        RolePermissionsChanged  → CacheInvalidationHandler.handle_role_permissions_changed

    The in-memory role binding store (no DATABASE_URL) publishes its
    mutations on this bus.

    Returns:
        Event bus implementing EventBusProtocol.

    Usage:
        event_bus = get_event_bus()
        await event_bus.publish(RoleBindingRevoked(subject_id="alice", role_id="role_operator"))
    """
    from scopeguard.application.event_handlers import CacheInvalidationHandler
    from scopeguard.core.container.authorization import (
        get_base_role_binding_store,
        get_binding_cache,
        get_decision_cache,
    )
    from scopeguard.core.container.infrastructure import get_logger
    from scopeguard.infrastructure.events import InMemoryEventBus
    from scopeguard.infrastructure.persistence.repositories import (
        InMemoryRoleBindingStore,
    )

    event_bus = InMemoryEventBus(logger=get_logger())

    handler = CacheInvalidationHandler(
        decision_cache=get_decision_cache(),
        binding_cache=get_binding_cache(),
        logger=get_logger(),
    )
    handler.register(event_bus)

    # Attached after construction: the store factory cannot call back here.
    store = get_base_role_binding_store()
    if isinstance(store, InMemoryRoleBindingStore):
        store.attach_event_bus(event_bus)

    return event_bus
