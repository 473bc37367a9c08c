"""Database seeding package.

Idempotent seeders that run automatically after Alembic migrations. Rows
that already exist are left untouched, so re-running is safe.
"""

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from seeds.rbac_seeder import seed_permissions, seed_system_roles

logger = structlog.get_logger(__name__)


async def run_all_seeders(session: AsyncSession) -> None:
    """Run all database seeders. Called after Alembic migrations.

    Permissions are seeded first: role permission rows reference them.

    Args:
        session: Async database session.
    """
    logger.info("seeding_started")

    await seed_permissions(session)
    await seed_system_roles(session)

    logger.info("seeding_completed")


__all__ = ["run_all_seeders", "seed_permissions", "seed_system_roles"]
