"""In-memory implementation of RoleBindingStoreProtocol.

Dict-backed store for tests, local development and embedding the engine in
processes without a database. Besides the two protocol reads it offers the
mutation helpers an administration component would have, and publishes the
matching domain events when an event bus is supplied, so the cache
invalidation path can be exercised end to end.

Usage:
    store = InMemoryRoleBindingStore(event_bus=bus)
    store.add_roles(SYSTEM_ROLES)
    await store.grant(RoleBinding(
        subject_id="alice",
        role_id="role_operator",
        scope_kind=ResourceKind.NODE,
        scope_resource_id=build_node_resource_id("abc", "pve01"),
    ))
"""

from collections.abc import Iterable

from scopeguard.core.result import Result, Success
from scopeguard.domain.entities import Role, RoleBinding
from scopeguard.domain.errors import RoleBindingStoreError
from scopeguard.domain.events import (
    RoleBindingGranted,
    RoleBindingRevoked,
    RolePermissionsChanged,
)
from scopeguard.domain.protocols import EventBusProtocol


class InMemoryRoleBindingStore:
    """Role binding store held in process memory.

    Args:
        roles: Initial role definitions.
        bindings: Initial bindings.
        event_bus: Receives mutation events (optional).
    """

    def __init__(
        self,
        *,
        roles: Iterable[Role] = (),
        bindings: Iterable[RoleBinding] = (),
        event_bus: EventBusProtocol | None = None,
    ) -> None:
        self._roles: dict[str, Role] = {}
        self._bindings: dict[str, list[RoleBinding]] = {}
        self._event_bus = event_bus
        self.add_roles(roles)
        for binding in bindings:
            self._bindings.setdefault(binding.subject_id, []).append(binding)

    async def roles_for_subject(
        self, subject_id: str
    ) -> Result[list[RoleBinding], RoleBindingStoreError]:
        return Success(value=list(self._bindings.get(subject_id, [])))

    async def permissions_for_role(
        self, role_id: str
    ) -> Result[frozenset[str], RoleBindingStoreError]:
        role = self._roles.get(role_id)
        return Success(value=role.permissions if role else frozenset())

    def attach_event_bus(self, event_bus: EventBusProtocol) -> None:
        """Publish mutation events on ``event_bus`` from now on."""
        self._event_bus = event_bus

    def add_role(self, role: Role) -> None:
        self._roles[role.role_id] = role

    def add_roles(self, roles: Iterable[Role]) -> None:
        for role in roles:
            self.add_role(role)

    def get_role(self, role_id: str) -> Role | None:
        return self._roles.get(role_id)

    async def grant(self, binding: RoleBinding) -> None:
        """Add a binding and publish RoleBindingGranted."""
        self._bindings.setdefault(binding.subject_id, []).append(binding)
        if self._event_bus is not None:
            await self._event_bus.publish(
                RoleBindingGranted(
                    subject_id=binding.subject_id,
                    role_id=binding.role_id,
                    scope_kind=binding.scope_kind,
                    scope_resource_id=binding.scope_resource_id,
                    granted_by=binding.granted_by,
                )
            )

    async def revoke(
        self,
        subject_id: str,
        role_id: str,
        scope_resource_id: str | None = None,
        *,
        revoked_by: str | None = None,
    ) -> int:
        """Remove matching bindings and publish RoleBindingRevoked.

        Args:
            subject_id: Subject losing the role.
            role_id: Role to remove.
            scope_resource_id: Only remove the binding with this scope
                (all scopes when None).
            revoked_by: Subject performing the revocation.

        Returns:
            int: Number of bindings removed.
        """
        current = self._bindings.get(subject_id, [])
        kept = [
            b
            for b in current
            if not (
                b.role_id == role_id
                and (scope_resource_id is None or b.scope_resource_id == scope_resource_id)
            )
        ]
        removed = len(current) - len(kept)
        self._bindings[subject_id] = kept
        if removed and self._event_bus is not None:
            await self._event_bus.publish(
                RoleBindingRevoked(
                    subject_id=subject_id,
                    role_id=role_id,
                    scope_resource_id=scope_resource_id or "*",
                    revoked_by=revoked_by,
                )
            )
        return removed

    async def set_role_permissions(
        self,
        role_id: str,
        permissions: Iterable[str],
        *,
        changed_by: str | None = None,
    ) -> None:
        """Replace a role's permission set and publish RolePermissionsChanged.

        Raises:
            KeyError: Role does not exist.
        """
        role = self._roles[role_id]
        self._roles[role_id] = Role(
            role_id=role.role_id,
            name=role.name,
            permissions=frozenset(permissions),
            description=role.description,
            is_system=role.is_system,
        )
        if self._event_bus is not None:
            await self._event_bus.publish(
                RolePermissionsChanged(role_id=role_id, changed_by=changed_by)
            )
