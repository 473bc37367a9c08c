"""Event bus protocol (port) for domain events.

Implementations:
    - InMemoryEventBus: scopeguard/infrastructure/events/in_memory_event_bus.py

Usage:
    >>> event_bus.subscribe(RoleBindingRevoked, handler.handle_binding_revoked)
    >>> await event_bus.publish(RoleBindingRevoked(subject_id="u1", role_id="r1"))
"""

from collections.abc import Awaitable, Callable
from typing import Protocol

from scopeguard.domain.events.base_event import DomainEvent

EventHandler = Callable[[DomainEvent], Awaitable[None]]
"""Async handler invoked with the published event; returns None."""


class EventBusProtocol(Protocol):
    """Publish/subscribe port for domain events."""

    def subscribe(self, event_type: type[DomainEvent], handler: EventHandler) -> None:
        """Register ``handler`` for events of exactly ``event_type``."""
        ...

    async def publish(self, event: DomainEvent) -> None:
        """Deliver ``event`` to every registered handler.

        Must never raise: handler failures are logged by the implementation.
        """
        ...
