"""RoleBindingStoreProtocol - read surface over role and binding data.

The engine needs exactly two questions answered:

    roles_for_subject(subject_id)   → every binding of the subject
    permissions_for_role(role_id)   → the role's permission keys

Both return Result types. Implementations catch their backend's exceptions
and return Failure(RoleBindingStoreError); the engine additionally treats
any exception or timeout that escapes as a store failure, and fails closed.

Implementations:
    - SQLAlchemyRoleBindingStore: persistence/repositories/role_binding_store.py
    - InMemoryRoleBindingStore: persistence/repositories/in_memory_role_binding_store.py
    - CachedRoleBindingStore: cache/cached_role_binding_store.py (decorator)

Reentrancy:
    The engine issues permissions_for_role calls concurrently, so
    implementations must not share one non-reentrant connection between
    concurrent calls.
"""

from typing import Protocol

from scopeguard.core.result import Result
from scopeguard.domain.entities import RoleBinding
from scopeguard.domain.errors import RoleBindingStoreError


class RoleBindingStoreProtocol(Protocol):
    """Read-only query surface over subject bindings and role definitions."""

    async def roles_for_subject(
        self, subject_id: str
    ) -> Result[list[RoleBinding], RoleBindingStoreError]:
        """All bindings of ``subject_id``, including expired or disabled ones.

        Returns:
            Success(list) (possibly empty) or Failure(RoleBindingStoreError).
        """
        ...

    async def permissions_for_role(
        self, role_id: str
    ) -> Result[frozenset[str], RoleBindingStoreError]:
        """Permission keys granted by ``role_id``.

        Unknown roles yield an empty set, not a failure: a binding that
        points at a deleted role grants nothing.
        """
        ...
