"""RBAC seeder for the permission catalog and system roles.

Mirrors PERMISSION_REGISTRY into rbac_permissions and SYSTEM_ROLES into
rbac_roles / rbac_role_permissions. Idempotent via ON CONFLICT DO NOTHING:
existing rows (including permissions an admin removed from a system role)
are never overwritten.

After initial seeding, custom roles and bindings are managed by the
administration component, which publishes the events that invalidate
authorization caches.
"""

import structlog
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from scopeguard.domain.enums import permission_key
from scopeguard.domain.permissions import PERMISSION_REGISTRY, SYSTEM_ROLES

logger = structlog.get_logger(__name__)


async def seed_permissions(session: AsyncSession) -> None:
    """Insert every catalogued permission missing from rbac_permissions.

    Args:
        session: Async database session.
    """
    seeded_count = 0

    for metadata in PERMISSION_REGISTRY:
        result = await session.execute(
            text("""
                INSERT INTO rbac_permissions
                    (id, resource_kind, category, description, is_dangerous)
                VALUES (:id, :resource_kind, :category, :description, :is_dangerous)
                ON CONFLICT (id) DO NOTHING
            """),
            {
                "id": permission_key(metadata.permission),
                "resource_kind": metadata.kind.value,
                "category": metadata.category,
                "description": metadata.description,
                "is_dangerous": metadata.dangerous,
            },
        )
        seeded_count += result.rowcount or 0

    logger.info(
        "permission_seeding_complete",
        seeded=seeded_count,
        skipped=len(PERMISSION_REGISTRY) - seeded_count,
        total=len(PERMISSION_REGISTRY),
    )


async def seed_system_roles(session: AsyncSession) -> None:
    """Insert the system roles and, for newly created roles, their permissions.

    Args:
        session: Async database session.
    """
    roles_seeded = 0
    grants_seeded = 0

    for role in SYSTEM_ROLES:
        result = await session.execute(
            text("""
                INSERT INTO rbac_roles (id, name, description, is_system)
                VALUES (:id, :name, :description, TRUE)
                ON CONFLICT (id) DO NOTHING
            """),
            {"id": role.role_id, "name": role.name, "description": role.description},
        )
        if not result.rowcount:
            continue
        roles_seeded += 1

        for permission in sorted(role.permissions):
            await session.execute(
                text("""
                    INSERT INTO rbac_role_permissions (role_id, permission_id)
                    VALUES (:role_id, :permission_id)
                    ON CONFLICT DO NOTHING
                """),
                {"role_id": role.role_id, "permission_id": permission},
            )
            grants_seeded += 1

    logger.info(
        "system_role_seeding_complete",
        roles_seeded=roles_seeded,
        roles_skipped=len(SYSTEM_ROLES) - roles_seeded,
        permissions_seeded=grants_seeded,
    )
