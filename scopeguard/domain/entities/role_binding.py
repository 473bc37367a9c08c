"""Role binding entity.

A role binding attaches a role to a subject within one scope:

    (subject_id, role_id, scope_kind, scope_resource_id)

``scope_resource_id`` is either an encoded ResourceIdentifier whose kind
equals ``scope_kind`` or the wildcard ``*`` meaning "any resource of that
kind". Global bindings always carry ``*``.

Matching rules (see ``RoleBinding.covers``):
    - The binding's kind must be at or above the permission's kind.
    - A global binding covers everything.
    - A wildcard binding at kind K covers any resource at depth >= K.
    - Otherwise the binding's scope must contain the requested resource.

Bindings come from an external store and are never mutated by the engine.
Expired and disabled bindings are ignored at evaluation time.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from scopeguard.domain.enums import ResourceKind
from scopeguard.domain.errors import InvalidResourceKindError
from scopeguard.domain.value_objects import WILDCARD, ResourceIdentifier


@dataclass(frozen=True, slots=True, kw_only=True)
class RoleBinding:
    """Grant of one role to one subject within one scope.

    Attributes:
        subject_id: Subject (user) the role is granted to.
        role_id: Granted role.
        scope_kind: Hierarchy level of the scope.
        scope_resource_id: Encoded scope identifier, or ``*``.
        binding_id: Store identifier of the binding (optional).
        granted_by: Subject that created the binding (optional).
        granted_at: Creation time (optional).
        expires_at: Binding is ignored at and after this instant.
        disabled: Binding is ignored while set.
        scope: Parsed scope identifier (None for wildcard bindings).

    Raises:
        ValueError: Empty subject or role.
        InvalidResourceKindError: Scope identifier kind differs from
            ``scope_kind`` or a global binding names a resource.
        InvalidResourceIdentifierError: Scope identifier is malformed.
    """

    subject_id: str
    role_id: str
    scope_kind: ResourceKind
    scope_resource_id: str = WILDCARD
    binding_id: str | None = None
    granted_by: str | None = None
    granted_at: datetime | None = None
    expires_at: datetime | None = None
    disabled: bool = False
    scope: ResourceIdentifier | None = field(
        init=False, default=None, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        if not self.subject_id:
            raise ValueError("subject_id cannot be empty")
        if not self.role_id:
            raise ValueError("role_id cannot be empty")

        kind = ResourceKind(self.scope_kind)
        resource_id = self.scope_resource_id or WILDCARD
        scope: ResourceIdentifier | None = None

        if kind is ResourceKind.GLOBAL:
            if resource_id != WILDCARD:
                raise InvalidResourceKindError(
                    f"Global binding cannot be scoped to '{resource_id}'"
                )
        elif resource_id != WILDCARD:
            scope = ResourceIdentifier.parse(resource_id)
            if scope.kind is not kind:
                raise InvalidResourceKindError(
                    f"Binding scope '{resource_id}' is a {scope.kind.value}, "
                    f"expected {kind.value}"
                )
            resource_id = scope.encode()

        object.__setattr__(self, "scope_kind", kind)
        object.__setattr__(self, "scope_resource_id", resource_id)
        object.__setattr__(self, "scope", scope)
        if self.expires_at is not None and self.expires_at.tzinfo is None:
            object.__setattr__(self, "expires_at", self.expires_at.replace(tzinfo=UTC))

    @property
    def is_wildcard(self) -> bool:
        return self.scope_resource_id == WILDCARD

    @property
    def specificity(self) -> tuple[int, int]:
        """Sort key for picking the most specific of several matches.

        Longer concrete scope paths are more specific; among equal paths a
        deeper kind wins (a wildcard node binding beats a global one).
        """
        concrete = len(self.scope.segments) if self.scope is not None else 0
        return (concrete, self.scope_kind.depth)

    def is_active(self, now: datetime) -> bool:
        """True unless disabled or expired at ``now``."""
        if self.disabled:
            return False
        return self.expires_at is None or self.expires_at > now

    def covers(
        self, required_kind: ResourceKind, resource: ResourceIdentifier | None
    ) -> bool:
        """Whether this binding's scope satisfies a check.

        Args:
            required_kind: Kind the permission is checked at.
            resource: Requested resource (None for global permissions).

        Returns:
            bool: True when the scope contains the resource.
        """
        if not self.scope_kind.is_coarser_or_equal(required_kind):
            return False
        if self.scope_kind is ResourceKind.GLOBAL:
            return True
        if resource is None:
            return False
        if self.scope is None:
            return resource.kind.depth >= self.scope_kind.depth
        return self.scope.contains(resource)

    def to_dict(self) -> dict[str, Any]:
        """JSON-safe representation (used by shared decision caches)."""
        return {
            "subject_id": self.subject_id,
            "role_id": self.role_id,
            "scope_kind": self.scope_kind.value,
            "scope_resource_id": self.scope_resource_id,
            "binding_id": self.binding_id,
            "granted_by": self.granted_by,
            "granted_at": self.granted_at.isoformat() if self.granted_at else None,
            "expires_at": self.expires_at.isoformat() if self.expires_at else None,
            "disabled": self.disabled,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RoleBinding":
        """Inverse of ``to_dict``."""
        granted_at = data.get("granted_at")
        expires_at = data.get("expires_at")
        return cls(
            subject_id=data["subject_id"],
            role_id=data["role_id"],
            scope_kind=ResourceKind(data["scope_kind"]),
            scope_resource_id=data.get("scope_resource_id") or WILDCARD,
            binding_id=data.get("binding_id"),
            granted_by=data.get("granted_by"),
            granted_at=datetime.fromisoformat(granted_at) if granted_at else None,
            expires_at=datetime.fromisoformat(expires_at) if expires_at else None,
            disabled=bool(data.get("disabled", False)),
        )


@dataclass(frozen=True, slots=True)
class Grant:
    """A binding paired with the expanded permissions of its role."""

    binding: RoleBinding
    permissions: frozenset[str]

    def allows(
        self,
        permission: str,
        required_kind: ResourceKind,
        resource: ResourceIdentifier | None,
    ) -> bool:
        return permission in self.permissions and self.binding.covers(
            required_kind, resource
        )
