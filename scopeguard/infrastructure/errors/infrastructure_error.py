"""Infrastructure layer error types.

Adapters catch backend exceptions (SQLAlchemy, Redis) and return these
inside Failure results.

Architecture:
- Infrastructure errors inherit from DomainError (not Exception)
- ``code`` is the domain ErrorCode the engine reasons about
- ``infrastructure_code`` records the precise backend operation that failed
"""

from dataclasses import dataclass
from typing import Any

from scopeguard.core.errors import DomainError
from scopeguard.infrastructure.enums import InfrastructureErrorCode


@dataclass(frozen=True, slots=True, kw_only=True)
class InfrastructureError(DomainError):
    """Base infrastructure error.

    Attributes:
        code: Domain ErrorCode.
        message: Human-readable message.
        infrastructure_code: Backend-specific error code.
        details: Additional context.
    """

    infrastructure_code: InfrastructureErrorCode | None = None
    details: dict[str, Any] | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class DatabaseError(InfrastructureError):
    """Wraps SQLAlchemy failures."""

    pass


@dataclass(frozen=True, slots=True, kw_only=True)
class CacheError(InfrastructureError):
    """Wraps Redis/cache failures.

    Attributes:
        code: ErrorCode.DECISION_CACHE_FAILED.
        message: Human-readable message.
        infrastructure_code: Cache operation that failed.
        details: Additional context (key, operation, original error).
    """

    pass
