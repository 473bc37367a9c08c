"""Role and role-permission database models.

Tables:
    rbac_roles              one row per role (natural string id)
    rbac_role_permissions   association of roles and permission keys
"""

from sqlalchemy import Boolean, Column, ForeignKey, String, Table, Text
from sqlalchemy.orm import Mapped, mapped_column

from scopeguard.infrastructure.persistence.base import BaseModel, BaseMutableModel

role_permissions = Table(
    "rbac_role_permissions",
    BaseModel.metadata,
    Column(
        "role_id",
        String(64),
        ForeignKey("rbac_roles.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "permission_id",
        String(64),
        ForeignKey("rbac_permissions.id", ondelete="CASCADE"),
        primary_key=True,
    ),
)
"""Role → permission association (composite primary key)."""


class RoleModel(BaseMutableModel):
    """Role definition.

    Fields:
        id: Natural role id (``role_operator``), overrides the UUID id
        name: Display name
        description: Human-readable description
        is_system: Seeded role, not deletable by admins
    """

    __tablename__ = "rbac_roles"

    id: Mapped[str] = mapped_column(  # type: ignore[assignment]
        String(64),
        primary_key=True,
        comment="Natural role identifier (e.g., role_operator)",
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_system: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default="false"
    )
