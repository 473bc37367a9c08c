"""Permission keys guarded by the authorization engine.

Permission keys are opaque dotted strings (``vm.view``, ``admin.compliance``).
This enum gives callers typo-safe constants; the authoritative mapping of
each key to its resource kind lives in the permission registry
(``scopeguard.domain.permissions.registry``).

The set is closed and append-only: new keys may be added (and
PERMISSION_CATALOG_VERSION bumped), existing keys are never removed or
re-kinded.

Usage:
    from scopeguard.domain.enums import Permission

    decision = await engine.evaluate(
        subject_id,
        Permission.VM_START,
        build_guest_resource_id(connection_id, "pve01", "qemu", 100),
    )
"""

from enum import Enum

PERMISSION_CATALOG_VERSION = 1
"""Bumped whenever a permission key is appended."""


class Permission(str, Enum):
    """Catalogued permission keys.

    String Enum:
        Members compare and hash equal to their dotted key, so they can be
        passed anywhere a plain key string is accepted.
    """

    # Guests (VMs and containers)
    VM_VIEW = "vm.view"
    VM_CONSOLE = "vm.console"
    VM_START = "vm.start"
    VM_STOP = "vm.stop"
    VM_RESTART = "vm.restart"
    VM_SUSPEND = "vm.suspend"
    VM_MIGRATE = "vm.migrate"
    VM_CLONE = "vm.clone"
    VM_SNAPSHOT = "vm.snapshot"
    VM_BACKUP = "vm.backup"
    VM_CONFIG = "vm.config"
    VM_DELETE = "vm.delete"
    VM_CREATE = "vm.create"
    """Creating a guest is checked against the target node."""

    # Storage
    STORAGE_VIEW = "storage.view"
    STORAGE_CONTENT = "storage.content"
    STORAGE_UPLOAD = "storage.upload"
    STORAGE_DELETE = "storage.delete"
    STORAGE_ADMIN = "storage.admin"

    # Nodes
    NODE_VIEW = "node.view"
    NODE_CONSOLE = "node.console"
    NODE_SERVICES = "node.services"
    NODE_NETWORK = "node.network"
    NODE_MANAGE = "node.manage"

    # Connections
    CONNECTION_VIEW = "connection.view"
    CONNECTION_MANAGE = "connection.manage"

    # Backups
    BACKUP_VIEW = "backup.view"
    BACKUP_RESTORE = "backup.restore"
    BACKUP_DELETE = "backup.delete"
    BACKUP_JOB_VIEW = "backup.job.view"
    BACKUP_JOB_CREATE = "backup.job.create"
    BACKUP_JOB_EDIT = "backup.job.edit"
    BACKUP_JOB_DELETE = "backup.job.delete"
    BACKUP_JOB_RUN = "backup.job.run"

    # Automation
    AUTOMATION_VIEW = "automation.view"
    AUTOMATION_MANAGE = "automation.manage"
    AUTOMATION_EXECUTE = "automation.execute"

    # Operations
    EVENTS_VIEW = "events.view"
    ALERTS_VIEW = "alerts.view"
    ALERTS_MANAGE = "alerts.manage"
    TASKS_VIEW = "tasks.view"
    REPORTS_VIEW = "reports.view"

    # Administration
    ADMIN_USERS = "admin.users"
    ADMIN_RBAC = "admin.rbac"
    ADMIN_SETTINGS = "admin.settings"
    ADMIN_AUDIT = "admin.audit"
    ADMIN_COMPLIANCE = "admin.compliance"

    @property
    def category(self) -> str:
        """Leading component of the key (``vm``, ``backup``, ``admin``...)."""
        return self.value.split(".", 1)[0]

    @classmethod
    def values(cls) -> list[str]:
        """Get all permission keys as plain strings.

        Returns:
            list[str]: Permission keys in declaration order.
        """
        return [permission.value for permission in cls]


def permission_key(permission: "Permission | str") -> str:
    """Normalize a Permission member or key string to the plain key.

    ``str()`` of a str-mixin enum member renders ``Permission.VM_VIEW`` on
    current Python versions, so keys used in cache keys, logs and audit
    records always go through this function.
    """
    if isinstance(permission, Permission):
        return permission.value
    return permission
