"""PostgreSQL implementation of AuditSinkProtocol.

Inserts one row per audited decision into ``authorization_audit_logs``.

Session lifecycle:
    Audit writes run as background tasks that outlive the request which
    triggered them, so the sink opens its own session per record from the
    Database instead of borrowing a request session. Each insert commits
    immediately.

Usage:
    sink = PostgresAuditSink(database=get_database())
    result = await sink.record(entry)
"""

from sqlalchemy.exc import SQLAlchemyError

from scopeguard.core.enums import ErrorCode
from scopeguard.core.result import Failure, Result, Success
from scopeguard.domain.entities import AuditRecord
from scopeguard.domain.errors import AuditError
from scopeguard.infrastructure.persistence.database import Database
from scopeguard.infrastructure.persistence.models import AuthorizationAuditLogModel


class PostgresAuditSink:
    """Database audit sink.

    Attributes:
        database: Session factory owner.
    """

    def __init__(self, database: Database) -> None:
        self.database = database

    async def record(self, entry: AuditRecord) -> Result[None, AuditError]:
        """Insert an audit row.

        Args:
            entry: Record to persist.

        Returns:
            Result[None, AuditError]:
                - Success(None) if the row was committed
                - Failure(AuditError) if the database operation failed
        """
        try:
            async with self.database.get_session() as session:
                session.add(self._to_model(entry))
            return Success(value=None)
        except SQLAlchemyError as e:
            return Failure(
                error=AuditError(
                    code=ErrorCode.AUDIT_RECORD_FAILED,
                    message=f"Failed to record audit log: {e}",
                    details={
                        "action": entry.action.value,
                        "subject_id": entry.subject_id,
                        "error_type": type(e).__name__,
                    },
                )
            )
        except Exception as e:
            return Failure(
                error=AuditError(
                    code=ErrorCode.AUDIT_RECORD_FAILED,
                    message=f"Unexpected error recording audit log: {e}",
                    details={
                        "action": entry.action.value,
                        "subject_id": entry.subject_id,
                        "error_type": type(e).__name__,
                    },
                )
            )

    @staticmethod
    def _to_model(entry: AuditRecord) -> AuthorizationAuditLogModel:
        return AuthorizationAuditLogModel(
            decided_at=entry.timestamp,
            action=entry.action.value,
            subject_id=entry.subject_id,
            permission=entry.permission,
            resource_id=entry.resource_id,
            reason=entry.reason.value,
            matched_role_id=entry.matched_role_id,
            matched_scope=entry.matched_scope,
            cached=entry.cached,
        )
