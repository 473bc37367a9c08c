"""Role binding database model."""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from scopeguard.infrastructure.persistence.base import BaseMutableModel


class RoleBindingModel(BaseMutableModel):
    """Grant of a role to a subject within a scope.

    Fields:
        id: UUID primary key (from BaseModel)
        subject_id: Subject (user) id from the upstream identity system
        role_id: FK to rbac_roles
        scope_kind: global, connection, node or guest
        scope_resource_id: Encoded resource identifier or ``*``
        granted_by: Subject that created the binding
        expires_at: Binding ignored at and after this instant
        disabled: Binding ignored while set

    Indexes:
        - idx_rbac_bindings_subject: subject lookups on the hot path
        - uq_rbac_bindings_scope: one binding per (subject, role, scope)
    """

    __tablename__ = "rbac_role_bindings"

    subject_id: Mapped[str] = mapped_column(String(128), nullable=False)
    role_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("rbac_roles.id", ondelete="CASCADE"),
        nullable=False,
    )
    scope_kind: Mapped[str] = mapped_column(
        String(20), nullable=False, default="global", server_default="global"
    )
    scope_resource_id: Mapped[str] = mapped_column(
        String(512), nullable=False, default="*", server_default="*"
    )
    granted_by: Mapped[str | None] = mapped_column(String(128), nullable=True)
    expires_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    disabled: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default="false"
    )

    __table_args__ = (
        Index("idx_rbac_bindings_subject", "subject_id"),
        Index(
            "uq_rbac_bindings_scope",
            "subject_id",
            "role_id",
            "scope_kind",
            "scope_resource_id",
            unique=True,
        ),
    )
