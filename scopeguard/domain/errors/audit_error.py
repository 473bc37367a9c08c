"""Audit trail errors.

Usage:
    return Failure(error=AuditError(
        code=ErrorCode.AUDIT_RECORD_FAILED,
        message="Failed to record audit entry: database connection lost",
    ))
"""

from dataclasses import dataclass

from scopeguard.core.errors import DomainError


@dataclass(frozen=True, slots=True, kw_only=True)
class AuditError(DomainError):
    """Audit sink failed to persist a record.

    Attributes:
        code: ErrorCode.AUDIT_RECORD_FAILED.
        message: Human-readable message.
        details: Additional context.
    """

    pass
