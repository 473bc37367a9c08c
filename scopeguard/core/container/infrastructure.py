# mypy: disable-error-code="arg-type"
"""Infrastructure dependency factories.

Application-scoped singletons for core infrastructure services:
- Logging (structlog console / JSON)
- Database (PostgreSQL, optional)
- Redis client (optional, decision cache backend)

Backends that are not configured are never constructed: ``get_database``
and ``get_redis`` raise when called without a URL, and the authorization
factories fall back to in-process implementations instead of calling them.
"""

from functools import lru_cache
from typing import TYPE_CHECKING

from scopeguard.core.config import settings
from scopeguard.infrastructure.persistence.database import Database

if TYPE_CHECKING:
    from redis.asyncio import Redis

    from scopeguard.domain.protocols.logger_protocol import LoggerProtocol


# ============================================================================
# Application-Scoped Dependencies (Singletons)
# ============================================================================


@lru_cache()
def get_logger() -> "LoggerProtocol":
    """Get logger singleton (app-scoped).

    Human-readable console output in development, JSON lines everywhere
    else (testing, CI, production) so log shippers can parse them.

    Returns:
        Logger implementing LoggerProtocol.

    Usage:
        logger = get_logger()
        logger.info("authorization_decision", subject_id="alice")
    """
    from scopeguard.infrastructure.logging.console_adapter import ConsoleAdapter

    return ConsoleAdapter(
        use_json=not settings.is_development,
        level=settings.log_level,
    )


@lru_cache()
def get_database() -> Database:
    """Get database manager singleton (app-scoped).

    Returns:
        Database manager with connection pool.

    Raises:
        RuntimeError: DATABASE_URL is not configured.
    """
    if not settings.database_url:
        raise RuntimeError("DATABASE_URL is not configured")
    return Database(
        database_url=settings.database_url,
        echo=settings.db_echo,
    )


@lru_cache()
def get_redis() -> "Redis":
    """Get Redis client singleton (app-scoped).

    The client owns a shared connection pool.

    Raises:
        RuntimeError: REDIS_URL is not configured.
    """
    if not settings.redis_url:
        raise RuntimeError("REDIS_URL is not configured")

    from redis.asyncio import ConnectionPool, Redis

    pool = ConnectionPool.from_url(
        settings.redis_url,
        max_connections=50,
        decode_responses=False,
        socket_connect_timeout=5,
        socket_timeout=5,
        retry_on_timeout=True,
    )
    return Redis(connection_pool=pool)
