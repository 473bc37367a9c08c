"""Infrastructure errors."""

from scopeguard.infrastructure.errors.infrastructure_error import (
    CacheError,
    DatabaseError,
    InfrastructureError,
)

__all__ = ["CacheError", "DatabaseError", "InfrastructureError"]
