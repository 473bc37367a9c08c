"""Database models.

Importing this package registers every table on BaseModel.metadata
(needed by Alembic autogenerate and Database.create_all).
"""

from scopeguard.infrastructure.persistence.models.audit_log import (
    AuthorizationAuditLogModel,
)
from scopeguard.infrastructure.persistence.models.permission import PermissionModel
from scopeguard.infrastructure.persistence.models.role import (
    RoleModel,
    role_permissions,
)
from scopeguard.infrastructure.persistence.models.role_binding import RoleBindingModel

__all__ = [
    "AuthorizationAuditLogModel",
    "PermissionModel",
    "RoleBindingModel",
    "RoleModel",
    "role_permissions",
]
