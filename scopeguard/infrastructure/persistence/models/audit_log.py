"""Authorization audit log database model.

Append-only: the database audit sink only ever inserts.
"""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from scopeguard.infrastructure.persistence.base import BaseModel


class AuthorizationAuditLogModel(BaseModel):
    """One audited authorization decision - IMMUTABLE.

    Fields:
        id: UUID primary key (from BaseModel)
        created_at: Insert time (from BaseModel)
        decided_at: When the engine made the decision
        action: access_granted or access_denied
        subject_id, permission, resource_id: The check
        reason: Decision reason
        matched_role_id, matched_scope: Matching binding (allows only)
        cached: Served from the decision cache

    Indexes:
        - idx_authz_audit_subject: (subject_id, decided_at) activity queries
        - idx_authz_audit_action: (action, decided_at) denial reports
    """

    __tablename__ = "authorization_audit_logs"

    decided_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    action: Mapped[str] = mapped_column(String(32), nullable=False)
    subject_id: Mapped[str] = mapped_column(String(128), nullable=False)
    permission: Mapped[str] = mapped_column(String(64), nullable=False)
    resource_id: Mapped[str | None] = mapped_column(String(512), nullable=True)
    reason: Mapped[str] = mapped_column(String(32), nullable=False)
    matched_role_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    matched_scope: Mapped[str | None] = mapped_column(String(512), nullable=True)
    cached: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default="false"
    )

    __table_args__ = (
        Index("idx_authz_audit_subject", "subject_id", "decided_at"),
        Index("idx_authz_audit_action", "action", "decided_at"),
    )
