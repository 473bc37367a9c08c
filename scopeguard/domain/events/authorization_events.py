"""Role administration events.

Published by the owner of role bindings after a change is committed. The
engine itself never publishes them; it only consumes them to keep its
caches honest.

Handlers:
- CacheInvalidationHandler: evicts decision and binding caches

Consistency:
    If an event is lost, stale grants survive at most until cache entries
    expire (decision cache TTL plus binding cache TTL).
"""

from dataclasses import dataclass

from scopeguard.domain.enums import ResourceKind
from scopeguard.domain.events.base_event import DomainEvent


@dataclass(frozen=True, kw_only=True)
class RoleBindingGranted(DomainEvent):
    """A role was bound to a subject.

    Triggers:
    - CacheInvalidationHandler: evict every cached entry for subject_id

    Attributes:
        subject_id: Subject that received the role.
        role_id: Granted role.
        scope_kind: Scope kind of the new binding.
        scope_resource_id: Scope of the new binding (``*`` for wildcard).
        granted_by: Subject that performed the grant.
    """

    subject_id: str
    role_id: str
    scope_kind: ResourceKind
    scope_resource_id: str = "*"
    granted_by: str | None = None


@dataclass(frozen=True, kw_only=True)
class RoleBindingRevoked(DomainEvent):
    """A binding was removed, disabled or expired early.

    Triggers:
    - CacheInvalidationHandler: evict every cached entry for subject_id

    Attributes:
        subject_id: Subject that lost the binding.
        role_id: Revoked role.
        scope_resource_id: Scope of the revoked binding.
        revoked_by: Subject that performed the revocation.
    """

    subject_id: str
    role_id: str
    scope_resource_id: str = "*"
    revoked_by: str | None = None


@dataclass(frozen=True, kw_only=True)
class RolePermissionsChanged(DomainEvent):
    """The permission set of a role was edited.

    Affects every subject bound to the role, so the whole decision cache is
    cleared and the role's permission set is evicted from the binding cache.

    Attributes:
        role_id: Edited role.
        changed_by: Subject that edited the role.
    """

    role_id: str
    changed_by: str | None = None
