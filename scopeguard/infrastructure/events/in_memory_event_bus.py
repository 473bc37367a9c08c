"""In-memory event bus implementation.

Implements EventBusProtocol with a dictionary-based handler registry.
Suitable for a single process: cache invalidation events published in one
process only reach handlers in that process. Deployments sharing a Redis
decision cache still converge because Redis entries expire on their TTL.

Architecture:
    - Dictionary-based handler registry (event_type → list of handlers)
    - Fail-open (one handler failure doesn't break others)
    - Concurrent handler execution (asyncio.gather)

Usage:
    >>> bus = InMemoryEventBus(logger=logger)
    >>> bus.subscribe(RoleBindingRevoked, handler.handle_binding_revoked)
    >>> await bus.publish(RoleBindingRevoked(subject_id="u1", role_id="r1"))
"""

import asyncio
from collections import defaultdict

from scopeguard.domain.events.base_event import DomainEvent
from scopeguard.domain.protocols.event_bus_protocol import EventHandler
from scopeguard.domain.protocols.logger_protocol import LoggerProtocol


class InMemoryEventBus:
    """In-memory event bus with fail-open behavior.

    Thread Safety:
        NOT thread-safe. Subscribe at startup, publish from the event loop.

    Attributes:
        _handlers: Event class → list of async handlers.
        _logger: Logger for handler failures.
    """

    def __init__(self, logger: LoggerProtocol) -> None:
        self._handlers: dict[type[DomainEvent], list[EventHandler]] = defaultdict(list)
        self._logger = logger

    def subscribe(
        self,
        event_type: type[DomainEvent],
        handler: EventHandler,
    ) -> None:
        """Register handler for exactly ``event_type`` (no inheritance matching).

        Args:
            event_type: Event class to handle.
            handler: Async callable taking the event.
        """
        self._handlers[event_type].append(handler)

    def handler_count(self, event_type: type[DomainEvent]) -> int:
        return len(self._handlers.get(event_type, []))

    async def publish(self, event: DomainEvent) -> None:
        """Publish event to all registered handlers.

        Handlers run concurrently. Exceptions are logged at warning level
        and never propagated to the publisher. No handlers is a no-op.

        Args:
            event: Domain event to deliver.
        """
        event_type = type(event)
        handlers = list(self._handlers.get(event_type, []))

        if not handlers:
            return

        self._logger.debug(
            "event_publishing",
            event_type=event_type.__name__,
            event_id=str(event.event_id),
            handler_count=len(handlers),
        )

        results = await asyncio.gather(
            *(handler(event) for handler in handlers),
            return_exceptions=True,
        )

        for idx, result in enumerate(results):
            if isinstance(result, Exception):
                handler_name = getattr(handlers[idx], "__name__", repr(handlers[idx]))
                self._logger.warning(
                    "event_handler_failed",
                    event_type=event_type.__name__,
                    event_id=str(event.event_id),
                    handler_name=handler_name,
                    error_type=type(result).__name__,
                    error_message=str(result),
                )
