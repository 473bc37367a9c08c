"""Built-in system roles.

Seeded into every installation and never deletable by admins. Custom roles
are created by the system that owns role administration.

Roles:
    role_super_admin  Every catalogued permission.
    role_operator     Day-to-day guest power management plus read access.
    role_vm_admin     Full guest lifecycle, storage and restores.
    role_viewer       Read-only.
    role_vm_user      Console and power control of assigned guests.
"""

from scopeguard.domain.entities import Role
from scopeguard.domain.enums import Permission
from scopeguard.domain.permissions.registry import PERMISSION_REGISTRY

SUPER_ADMIN_ROLE_ID = "role_super_admin"

_P = Permission

SYSTEM_ROLES: list[Role] = [
    Role(
        role_id=SUPER_ADMIN_ROLE_ID,
        name="Super Admin",
        description="Full access to every resource and administrative function",
        permissions=frozenset(m.permission for m in PERMISSION_REGISTRY),
        is_system=True,
    ),
    Role(
        role_id="role_operator",
        name="Operator",
        description="Operate guests and view infrastructure",
        permissions=frozenset({
            _P.VM_VIEW, _P.VM_CONSOLE, _P.VM_START, _P.VM_STOP, _P.VM_RESTART,
            _P.VM_SUSPEND, _P.VM_SNAPSHOT, _P.VM_BACKUP,
            _P.NODE_VIEW, _P.CONNECTION_VIEW, _P.BACKUP_VIEW,
            _P.EVENTS_VIEW, _P.TASKS_VIEW,
        }),
        is_system=True,
    ),
    Role(
        role_id="role_vm_admin",
        name="VM Admin",
        description="Full guest lifecycle including creation and restores",
        permissions=frozenset({
            _P.VM_VIEW, _P.VM_CONSOLE, _P.VM_START, _P.VM_STOP, _P.VM_RESTART,
            _P.VM_SUSPEND, _P.VM_MIGRATE, _P.VM_CLONE, _P.VM_SNAPSHOT,
            _P.VM_BACKUP, _P.VM_CONFIG, _P.VM_DELETE, _P.VM_CREATE,
            _P.STORAGE_VIEW, _P.STORAGE_CONTENT, _P.STORAGE_UPLOAD, _P.STORAGE_ADMIN,
            _P.NODE_VIEW, _P.CONNECTION_VIEW, _P.BACKUP_VIEW, _P.BACKUP_RESTORE,
            _P.EVENTS_VIEW, _P.TASKS_VIEW,
        }),
        is_system=True,
    ),
    Role(
        role_id="role_viewer",
        name="Viewer",
        description="Read-only access",
        permissions=frozenset({
            _P.VM_VIEW, _P.NODE_VIEW, _P.CONNECTION_VIEW, _P.BACKUP_VIEW,
            _P.EVENTS_VIEW,
        }),
        is_system=True,
    ),
    Role(
        role_id="role_vm_user",
        name="VM User",
        description="Console and power control of assigned guests",
        permissions=frozenset({
            _P.VM_VIEW, _P.VM_CONSOLE, _P.VM_START, _P.VM_STOP, _P.VM_RESTART,
        }),
        is_system=True,
    ),
]


def get_system_role(role_id: str) -> Role | None:
    """Look up a system role by id."""
    for role in SYSTEM_ROLES:
        if role.role_id == role_id:
            return role
    return None
