"""Domain errors.

Raised (programming errors):
    - PermissionCatalogError, DuplicatePermissionError, UnknownPermissionError,
      CatalogFrozenError
    - InvalidResourceIdentifierError, InvalidResourceKindError

Returned in Failure results (runtime failures):
    - RoleBindingStoreError
    - AuditError
"""

from scopeguard.domain.errors.audit_error import AuditError
from scopeguard.domain.errors.catalog_errors import (
    CatalogFrozenError,
    DuplicatePermissionError,
    InvalidResourceIdentifierError,
    InvalidResourceKindError,
    PermissionCatalogError,
    UnknownPermissionError,
)
from scopeguard.domain.errors.role_binding_store_error import RoleBindingStoreError

__all__ = [
    "AuditError",
    "CatalogFrozenError",
    "DuplicatePermissionError",
    "InvalidResourceIdentifierError",
    "InvalidResourceKindError",
    "PermissionCatalogError",
    "RoleBindingStoreError",
    "UnknownPermissionError",
]
