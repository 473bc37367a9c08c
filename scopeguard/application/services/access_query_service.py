"""Access query service.

Read-side helpers built on the engine for UIs and list endpoints:

    has_all / has_any          several permissions at one resource
    effective_permissions      everything a subject may do at a resource
    accessible_scopes          where a subject holds a permission
    filter_resources           keep only the items a subject may act on
    is_super_admin             global super-admin binding present

Single checks go through ``AuthorizationEngine.evaluate`` (cached, audited).
The bulk queries resolve the subject's grants once and match in memory, so
filtering a thousand guests costs one store round-trip. They are not
audited and not cached, and they fail closed: a store failure yields an
empty answer.

Usage:
    service = AccessQueryService(engine=engine, logger=logger)

    visible = await service.filter_resources(
        subject_id,
        Permission.VM_VIEW,
        guests,
        lambda g: build_guest_resource_id(g.connection_id, g.node, g.type, g.vmid),
    )
"""

import asyncio
from collections.abc import Callable, Iterable
from typing import TypeVar

from scopeguard.application.services.authorization_engine import AuthorizationEngine
from scopeguard.core.result import Failure
from scopeguard.domain.entities import Grant, RoleBinding
from scopeguard.domain.enums import Permission, ResourceKind, permission_key
from scopeguard.domain.errors import (
    InvalidResourceIdentifierError,
    UnknownPermissionError,
)
from scopeguard.domain.permissions import SUPER_ADMIN_ROLE_ID
from scopeguard.domain.protocols import LoggerProtocol
from scopeguard.domain.value_objects import ResourceIdentifier

ItemT = TypeVar("ItemT")


class AccessQueryService:
    """Bulk and composite authorization queries.

    Args:
        engine: Authorization engine (catalog, store and matching rules).
        logger: Structured logger.
    """

    def __init__(self, engine: AuthorizationEngine, logger: LoggerProtocol) -> None:
        self._engine = engine
        self._logger = logger

    async def has_all(
        self,
        subject_id: str,
        permissions: Iterable[Permission | str],
        resource_id: str | None = None,
    ) -> bool:
        """True when every permission is allowed (vacuously True for none).

        Stops at the first denial.
        """
        for permission in permissions:
            if not await self._engine.check(subject_id, permission, resource_id):
                return False
        return True

    async def has_any(
        self,
        subject_id: str,
        permissions: Iterable[Permission | str],
        resource_id: str | None = None,
    ) -> bool:
        """True when at least one permission is allowed (False for none).

        Stops at the first allow.
        """
        for permission in permissions:
            if await self._engine.check(subject_id, permission, resource_id):
                return True
        return False

    async def effective_permissions(
        self, subject_id: str, resource_id: str | None = None
    ) -> frozenset[str]:
        """Permission keys the subject may exercise at a resource.

        With a resource, scoped permissions must cover that resource and
        global permissions must be held globally. Without a resource,
        only permissions held everywhere are returned (global bindings, or
        wildcard bindings at or above the permission's kind).

        Keys granted by roles but missing from the catalog are ignored.
        """
        resource: ResourceIdentifier | None = None
        if resource_id:
            try:
                resource = ResourceIdentifier.parse(resource_id)
            except InvalidResourceIdentifierError as e:
                self._logger.error(
                    "effective_permissions_invalid_resource",
                    error=e,
                    subject_id=subject_id,
                    resource_id=resource_id,
                )
                return frozenset()
            if resource.is_global:
                resource = None

        grants = await self._grants(subject_id)
        catalog = self._engine.catalog
        effective: set[str] = set()
        for grant in grants:
            for permission in grant.permissions:
                if permission in effective or not catalog.is_registered(permission):
                    continue
                kind = catalog.kind_of(permission)
                if self._holds(grant, kind, resource):
                    effective.add(permission)
        return frozenset(effective)

    async def accessible_scopes(
        self, subject_id: str, permission: Permission | str
    ) -> list[RoleBinding]:
        """Active bindings through which the subject holds ``permission``.

        Only bindings at or above the permission's kind are returned,
        ordered most specific first.
        """
        key = permission_key(permission)
        try:
            kind = self._engine.catalog.kind_of(key)
        except UnknownPermissionError as e:
            self._logger.error("accessible_scopes_unknown_permission", error=e, permission=key)
            return []

        grants = await self._grants(subject_id)
        bindings = [
            grant.binding
            for grant in grants
            if key in grant.permissions and grant.binding.scope_kind.is_coarser_or_equal(kind)
        ]
        return sorted(bindings, key=lambda binding: binding.specificity, reverse=True)

    async def filter_resources(
        self,
        subject_id: str,
        permission: Permission | str,
        items: Iterable[ItemT],
        resource_of: Callable[[ItemT], str],
    ) -> list[ItemT]:
        """Keep the items whose resource the subject may act on.

        Args:
            subject_id: Subject to check.
            permission: Scoped permission (``vm.view``, ``node.view``...).
            items: Candidate items, order is preserved.
            resource_of: Builds an item's encoded resource identifier.

        Returns:
            list: Allowed items. Items with an invalid identifier are dropped.
        """
        key = permission_key(permission)
        try:
            kind = self._engine.catalog.kind_of(key)
        except UnknownPermissionError as e:
            self._logger.error("filter_resources_unknown_permission", error=e, permission=key)
            return []

        candidates = [grant for grant in await self._grants(subject_id) if key in grant.permissions]
        if not candidates:
            return []

        if kind is ResourceKind.GLOBAL:
            allowed = any(grant.allows(key, kind, None) for grant in candidates)
            return list(items) if allowed else []

        kept: list[ItemT] = []
        for item in items:
            try:
                resource = ResourceIdentifier.parse(resource_of(item))
            except InvalidResourceIdentifierError as e:
                self._logger.warning(
                    "filter_resources_invalid_item",
                    permission=key,
                    error_type=type(e).__name__,
                    error_message=str(e),
                )
                continue
            if resource.is_global:
                continue
            if any(grant.allows(key, kind, resource) for grant in candidates):
                kept.append(item)
        return kept

    async def is_super_admin(self, subject_id: str) -> bool:
        """True when an active global binding of the super-admin role exists."""
        grants = await self._grants(subject_id)
        return any(
            grant.binding.role_id == SUPER_ADMIN_ROLE_ID
            and grant.binding.scope_kind is ResourceKind.GLOBAL
            for grant in grants
        )

    @staticmethod
    def _holds(grant: Grant, kind: ResourceKind, resource: ResourceIdentifier | None) -> bool:
        binding = grant.binding
        if kind is ResourceKind.GLOBAL or resource is not None:
            target = None if kind is ResourceKind.GLOBAL else resource
            return binding.covers(kind, target)
        # No resource given: the permission must hold on every resource of its kind.
        return binding.scope_kind.is_coarser_or_equal(kind) and (
            binding.scope_kind is ResourceKind.GLOBAL or binding.is_wildcard
        )

    async def _grants(self, subject_id: str) -> list[Grant]:
        if not subject_id:
            return []
        try:
            result = await self._engine.resolve_grants(subject_id)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            self._logger.warning(
                "access_query_store_unavailable",
                subject_id=subject_id,
                error_type=type(e).__name__,
                error_message=str(e),
            )
            return []
        if isinstance(result, Failure):
            self._logger.warning(
                "access_query_store_unavailable",
                subject_id=subject_id,
                error_code=result.error.code.value,
                error_message=result.error.message,
            )
            return []
        return result.value
