"""Permission Registry - single source of truth for permission metadata.

Every permission key the engine knows about is declared here exactly once,
together with the resource kind it is checked at. The PermissionCatalog,
the database seeder and the system role definitions are all derived from
this list.

Registry Structure:
    - PermissionMetadata: Dataclass with key, kind, category, flags
    - PERMISSION_REGISTRY: List of all permission metadata entries
    - Helper Functions: Query and statistics utilities

Kind assignment:
    guest       vm.* (except vm.create)
    node        vm.create, node.*, storage.view/content/upload/delete,
                backup.restore
    connection  connection.*, backup.view, backup.delete, backup.job.*
    global      automation.*, events/alerts/tasks/reports, storage.admin,
                admin.*

Usage:
    from scopeguard.domain.permissions.registry import get_permission_metadata

    metadata = get_permission_metadata("vm.start")
    metadata.kind       # ResourceKind.GUEST
    metadata.dangerous  # False

Adding a permission:
    Append a Permission enum member, append a PermissionMetadata entry
    here and bump PERMISSION_CATALOG_VERSION. Never remove or re-kind an
    existing entry.
"""

from dataclasses import dataclass

from scopeguard.domain.enums import Permission, ResourceKind


@dataclass(frozen=True, kw_only=True)
class PermissionMetadata:
    """Metadata for one catalogued permission.

    Attributes:
        permission: The permission key.
        kind: Resource kind the permission is checked at.
        category: Grouping used by admin UIs (``vm``, ``backup``...).
        description: Human-readable description.
        dangerous: Destructive or security-sensitive operation.
    """

    permission: Permission | str
    kind: ResourceKind
    category: str
    description: str
    dangerous: bool = False


def _entry(
    permission: Permission,
    kind: ResourceKind,
    description: str,
    *,
    dangerous: bool = False,
    category: str | None = None,
) -> PermissionMetadata:
    return PermissionMetadata(
        permission=permission,
        kind=kind,
        category=category or permission.category,
        description=description,
        dangerous=dangerous,
    )


_GUEST = ResourceKind.GUEST
_NODE = ResourceKind.NODE
_CONNECTION = ResourceKind.CONNECTION
_GLOBAL = ResourceKind.GLOBAL


PERMISSION_REGISTRY: list[PermissionMetadata] = [
    # Guests
    _entry(Permission.VM_VIEW, _GUEST, "View virtual machines and containers"),
    _entry(Permission.VM_CONSOLE, _GUEST, "Open a guest console"),
    _entry(Permission.VM_START, _GUEST, "Start guests"),
    _entry(Permission.VM_STOP, _GUEST, "Stop or shut down guests"),
    _entry(Permission.VM_RESTART, _GUEST, "Restart guests"),
    _entry(Permission.VM_SUSPEND, _GUEST, "Suspend and resume guests"),
    _entry(Permission.VM_MIGRATE, _GUEST, "Migrate guests between nodes", dangerous=True),
    _entry(Permission.VM_CLONE, _GUEST, "Clone guests"),
    _entry(Permission.VM_SNAPSHOT, _GUEST, "Create and roll back snapshots"),
    _entry(Permission.VM_BACKUP, _GUEST, "Back up guests"),
    _entry(Permission.VM_CONFIG, _GUEST, "Modify guest configuration", dangerous=True),
    _entry(Permission.VM_DELETE, _GUEST, "Delete guests", dangerous=True),
    _entry(Permission.VM_CREATE, _NODE, "Create guests on a node", dangerous=True),
    # Storage
    _entry(Permission.STORAGE_VIEW, _NODE, "View storage"),
    _entry(Permission.STORAGE_CONTENT, _NODE, "Browse storage content"),
    _entry(Permission.STORAGE_UPLOAD, _NODE, "Upload ISO images and templates"),
    _entry(Permission.STORAGE_DELETE, _NODE, "Delete storage content", dangerous=True),
    _entry(Permission.STORAGE_ADMIN, _GLOBAL, "Administer storage definitions", dangerous=True),
    # Nodes
    _entry(Permission.NODE_VIEW, _NODE, "View nodes"),
    _entry(Permission.NODE_CONSOLE, _NODE, "Open a node shell", dangerous=True),
    _entry(Permission.NODE_SERVICES, _NODE, "Manage node services", dangerous=True),
    _entry(Permission.NODE_NETWORK, _NODE, "Configure node networking", dangerous=True),
    _entry(Permission.NODE_MANAGE, _NODE, "Reboot and shut down nodes", dangerous=True),
    # Connections
    _entry(Permission.CONNECTION_VIEW, _CONNECTION, "View connections"),
    _entry(Permission.CONNECTION_MANAGE, _CONNECTION, "Edit and remove connections", dangerous=True),
    # Backups
    _entry(Permission.BACKUP_VIEW, _CONNECTION, "View backups"),
    _entry(Permission.BACKUP_RESTORE, _NODE, "Restore backups", dangerous=True),
    _entry(Permission.BACKUP_DELETE, _CONNECTION, "Delete backups", dangerous=True),
    _entry(Permission.BACKUP_JOB_VIEW, _CONNECTION, "View backup jobs"),
    _entry(Permission.BACKUP_JOB_CREATE, _CONNECTION, "Create backup jobs", dangerous=True),
    _entry(Permission.BACKUP_JOB_EDIT, _CONNECTION, "Edit backup jobs", dangerous=True),
    _entry(Permission.BACKUP_JOB_DELETE, _CONNECTION, "Delete backup jobs", dangerous=True),
    _entry(Permission.BACKUP_JOB_RUN, _CONNECTION, "Run backup jobs on demand"),
    # Automation
    _entry(Permission.AUTOMATION_VIEW, _GLOBAL, "View automation rules and runs"),
    _entry(Permission.AUTOMATION_MANAGE, _GLOBAL, "Create and edit automation rules", dangerous=True),
    _entry(Permission.AUTOMATION_EXECUTE, _GLOBAL, "Execute automation actions", dangerous=True),
    # Operations
    _entry(Permission.EVENTS_VIEW, _GLOBAL, "View cluster events", category="operations"),
    _entry(Permission.ALERTS_VIEW, _GLOBAL, "View alerts", category="operations"),
    _entry(Permission.ALERTS_MANAGE, _GLOBAL, "Acknowledge and configure alerts", dangerous=True, category="operations"),
    _entry(Permission.TASKS_VIEW, _GLOBAL, "View running and past tasks", category="operations"),
    _entry(Permission.REPORTS_VIEW, _GLOBAL, "View reports", category="operations"),
    # Administration
    _entry(Permission.ADMIN_USERS, _GLOBAL, "Manage users", dangerous=True),
    _entry(Permission.ADMIN_RBAC, _GLOBAL, "Manage roles and bindings", dangerous=True),
    _entry(Permission.ADMIN_SETTINGS, _GLOBAL, "Change application settings", dangerous=True),
    _entry(Permission.ADMIN_AUDIT, _GLOBAL, "Read the audit log"),
    _entry(Permission.ADMIN_COMPLIANCE, _GLOBAL, "Run and manage compliance checks", dangerous=True),
]


def get_permission_metadata(permission: Permission | str) -> PermissionMetadata | None:
    """Look up metadata by permission key.

    Args:
        permission: Permission member or dotted key.

    Returns:
        PermissionMetadata if registered, None otherwise.
    """
    for metadata in PERMISSION_REGISTRY:
        if metadata.permission == permission:
            return metadata
    return None


def get_permissions_by_kind(kind: ResourceKind) -> list[Permission]:
    """All permissions checked at ``kind``."""
    return [m.permission for m in PERMISSION_REGISTRY if m.kind is kind]


def get_permissions_by_category(category: str) -> list[Permission]:
    """All permissions in ``category``."""
    return [m.permission for m in PERMISSION_REGISTRY if m.category == category]


def get_dangerous_permissions() -> list[Permission]:
    """Permissions flagged as destructive or security-sensitive."""
    return [m.permission for m in PERMISSION_REGISTRY if m.dangerous]


def get_statistics() -> dict[str, int]:
    """Registry statistics.

    Returns:
        dict[str, int]: Total count, dangerous count and one count per kind
        (``kind_global``, ``kind_connection``...).
    """
    stats = {
        "total_permissions": len(PERMISSION_REGISTRY),
        "dangerous_permissions": len(get_dangerous_permissions()),
    }
    for kind in ResourceKind:
        stats[f"kind_{kind.value}"] = len(get_permissions_by_kind(kind))
    return stats
