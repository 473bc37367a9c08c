"""Role binding store implementations."""

from scopeguard.infrastructure.persistence.repositories.in_memory_role_binding_store import (
    InMemoryRoleBindingStore,
)
from scopeguard.infrastructure.persistence.repositories.role_binding_store import (
    SQLAlchemyRoleBindingStore,
)

__all__ = ["InMemoryRoleBindingStore", "SQLAlchemyRoleBindingStore"]
