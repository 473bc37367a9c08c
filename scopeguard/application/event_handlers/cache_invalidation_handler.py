"""Cache invalidation event handler.

Keeps the decision cache and the binding-store cache consistent with role
administration:

    RoleBindingGranted / RoleBindingRevoked → evict the subject
    RolePermissionsChanged                  → evict the role, clear decisions

Invalidation is best-effort. Failures are logged and swallowed; entries
then age out on their TTL.

Usage:
    handler = CacheInvalidationHandler(decision_cache=cache, binding_cache=store, logger=logger)
    handler.register(event_bus)
"""

from scopeguard.core.result import Failure
from scopeguard.domain.events import (
    RoleBindingGranted,
    RoleBindingRevoked,
    RolePermissionsChanged,
)
from scopeguard.domain.protocols import (
    DecisionCacheProtocol,
    EventBusProtocol,
    LoggerProtocol,
)
from scopeguard.infrastructure.cache import CachedRoleBindingStore


class CacheInvalidationHandler:
    """Evicts cached authorization state on role administration events.

    Args:
        decision_cache: Decision cache in front of the engine.
        binding_cache: Caching store decorator, if one is installed.
        logger: Structured logger.
    """

    def __init__(
        self,
        *,
        decision_cache: DecisionCacheProtocol,
        logger: LoggerProtocol,
        binding_cache: CachedRoleBindingStore | None = None,
    ) -> None:
        self._decision_cache = decision_cache
        self._binding_cache = binding_cache
        self._logger = logger

    def register(self, event_bus: EventBusProtocol) -> None:
        """Subscribe every handler method on ``event_bus``."""
        event_bus.subscribe(RoleBindingGranted, self.handle_binding_granted)  # type: ignore[arg-type]
        event_bus.subscribe(RoleBindingRevoked, self.handle_binding_revoked)  # type: ignore[arg-type]
        event_bus.subscribe(RolePermissionsChanged, self.handle_role_permissions_changed)  # type: ignore[arg-type]

    async def handle_binding_granted(self, event: RoleBindingGranted) -> None:
        await self._evict_subject(event.subject_id, event_type="RoleBindingGranted")

    async def handle_binding_revoked(self, event: RoleBindingRevoked) -> None:
        await self._evict_subject(event.subject_id, event_type="RoleBindingRevoked")

    async def handle_role_permissions_changed(self, event: RolePermissionsChanged) -> None:
        if self._binding_cache is not None:
            self._binding_cache.invalidate_role(event.role_id)

        result = await self._decision_cache.clear()
        if isinstance(result, Failure):
            self._logger.warning(
                "decision_cache_clear_failed",
                role_id=event.role_id,
                error_code=result.error.code.value,
                error_message=result.error.message,
            )
            return
        self._logger.info(
            "authorization_cache_invalidated",
            event_type="RolePermissionsChanged",
            role_id=event.role_id,
            evicted=result.value,
        )

    async def _evict_subject(self, subject_id: str, *, event_type: str) -> None:
        if self._binding_cache is not None:
            self._binding_cache.invalidate_subject(subject_id)

        result = await self._decision_cache.invalidate_subject(subject_id)
        if isinstance(result, Failure):
            self._logger.warning(
                "decision_cache_invalidation_failed",
                subject_id=subject_id,
                event_type=event_type,
                error_code=result.error.code.value,
                error_message=result.error.message,
            )
            return
        self._logger.info(
            "authorization_cache_invalidated",
            event_type=event_type,
            subject_id=subject_id,
            evicted=result.value,
        )
