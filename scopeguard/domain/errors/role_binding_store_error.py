"""Role binding store errors.

Returned inside Failure results by RoleBindingStoreProtocol implementations.
The engine never inspects them beyond logging: any store failure becomes
Deny(STORE_UNAVAILABLE).

Usage:
    return Failure(error=RoleBindingStoreError(
        code=ErrorCode.ROLE_BINDING_STORE_UNAVAILABLE,
        message="Database connection lost",
    ))
"""

from dataclasses import dataclass

from scopeguard.core.errors import DomainError


@dataclass(frozen=True, slots=True, kw_only=True)
class RoleBindingStoreError(DomainError):
    """Role binding store could not answer a query.

    Attributes:
        code: ErrorCode (ROLE_BINDING_STORE_UNAVAILABLE, ROLE_BINDING_STORE_TIMEOUT).
        message: Human-readable message.
        details: Additional context (subject_id or role_id, error type).
    """

    pass
