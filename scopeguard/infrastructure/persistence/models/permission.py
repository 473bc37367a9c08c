"""Permission database model (mirror of the permission registry)."""

from sqlalchemy import Boolean, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from scopeguard.infrastructure.persistence.base import BaseModel


class PermissionModel(BaseModel):
    """Catalogued permission, seeded from PERMISSION_REGISTRY.

    The engine reads kinds from the in-process catalog, not from this
    table; the table exists so role_permissions has a foreign key target
    and admin UIs can list permissions.

    Fields:
        id: Permission key (``vm.view``), overrides the UUID id
        resource_kind: global, connection, node or guest
        category: Grouping (vm, backup, admin...)
        description: Human-readable description
        is_dangerous: Destructive or security-sensitive
    """

    __tablename__ = "rbac_permissions"

    id: Mapped[str] = mapped_column(  # type: ignore[assignment]
        String(64),
        primary_key=True,
        comment="Permission key (e.g., vm.view)",
    )
    resource_kind: Mapped[str] = mapped_column(String(20), nullable=False)
    category: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_dangerous: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default="false"
    )
