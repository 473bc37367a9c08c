"""Permission catalog, registry and built-in roles."""

from scopeguard.domain.permissions.catalog import (
    PermissionCatalog,
    build_catalog,
    build_default_catalog,
)
from scopeguard.domain.permissions.registry import (
    PERMISSION_REGISTRY,
    PermissionMetadata,
    get_permission_metadata,
)
from scopeguard.domain.permissions.system_roles import (
    SUPER_ADMIN_ROLE_ID,
    SYSTEM_ROLES,
    get_system_role,
)

__all__ = [
    "PERMISSION_REGISTRY",
    "PermissionCatalog",
    "PermissionMetadata",
    "SUPER_ADMIN_ROLE_ID",
    "SYSTEM_ROLES",
    "build_catalog",
    "build_default_catalog",
    "get_permission_metadata",
    "get_system_role",
]
