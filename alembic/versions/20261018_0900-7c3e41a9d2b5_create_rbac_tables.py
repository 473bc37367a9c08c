"""create_rbac_tables

Revision ID: 7c3e41a9d2b5
Revises:
Create Date: 2026-10-18 09:00:00.000000+00:00

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "7c3e41a9d2b5"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _created_at() -> sa.Column:
    return sa.Column(
        "created_at",
        sa.DateTime(timezone=True),
        server_default=sa.text("now()"),
        nullable=False,
    )


def _updated_at() -> sa.Column:
    return sa.Column(
        "updated_at",
        sa.DateTime(timezone=True),
        server_default=sa.text("now()"),
        nullable=False,
    )


def upgrade() -> None:
    """Create RBAC and authorization audit tables."""
    op.create_table(
        "rbac_permissions",
        sa.Column(
            "id",
            sa.String(length=64),
            nullable=False,
            comment="Permission key (e.g., vm.view)",
        ),
        _created_at(),
        sa.Column("resource_kind", sa.String(length=20), nullable=False),
        sa.Column("category", sa.String(length=50), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column(
            "is_dangerous",
            sa.Boolean(),
            server_default="false",
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        op.f("ix_rbac_permissions_category"),
        "rbac_permissions",
        ["category"],
        unique=False,
    )

    op.create_table(
        "rbac_roles",
        sa.Column(
            "id",
            sa.String(length=64),
            nullable=False,
            comment="Natural role identifier (e.g., role_operator)",
        ),
        _created_at(),
        _updated_at(),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column(
            "is_system",
            sa.Boolean(),
            server_default="false",
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
    )

    op.create_table(
        "rbac_role_permissions",
        sa.Column("role_id", sa.String(length=64), nullable=False),
        sa.Column("permission_id", sa.String(length=64), nullable=False),
        sa.ForeignKeyConstraint(["role_id"], ["rbac_roles.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(
            ["permission_id"], ["rbac_permissions.id"], ondelete="CASCADE"
        ),
        sa.PrimaryKeyConstraint("role_id", "permission_id"),
    )

    op.create_table(
        "rbac_role_bindings",
        sa.Column("id", sa.Uuid(), nullable=False),
        _created_at(),
        _updated_at(),
        sa.Column("subject_id", sa.String(length=128), nullable=False),
        sa.Column("role_id", sa.String(length=64), nullable=False),
        sa.Column(
            "scope_kind",
            sa.String(length=20),
            server_default="global",
            nullable=False,
        ),
        sa.Column(
            "scope_resource_id",
            sa.String(length=512),
            server_default="*",
            nullable=False,
        ),
        sa.Column("granted_by", sa.String(length=128), nullable=True),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "disabled",
            sa.Boolean(),
            server_default="false",
            nullable=False,
        ),
        sa.ForeignKeyConstraint(["role_id"], ["rbac_roles.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "idx_rbac_bindings_subject",
        "rbac_role_bindings",
        ["subject_id"],
        unique=False,
    )
    op.create_index(
        "uq_rbac_bindings_scope",
        "rbac_role_bindings",
        ["subject_id", "role_id", "scope_kind", "scope_resource_id"],
        unique=True,
    )

    op.create_table(
        "authorization_audit_logs",
        sa.Column("id", sa.Uuid(), nullable=False),
        _created_at(),
        sa.Column("decided_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("action", sa.String(length=32), nullable=False),
        sa.Column("subject_id", sa.String(length=128), nullable=False),
        sa.Column("permission", sa.String(length=64), nullable=False),
        sa.Column("resource_id", sa.String(length=512), nullable=True),
        sa.Column("reason", sa.String(length=32), nullable=False),
        sa.Column("matched_role_id", sa.String(length=64), nullable=True),
        sa.Column("matched_scope", sa.String(length=512), nullable=True),
        sa.Column(
            "cached",
            sa.Boolean(),
            server_default="false",
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "idx_authz_audit_subject",
        "authorization_audit_logs",
        ["subject_id", "decided_at"],
        unique=False,
    )
    op.create_index(
        "idx_authz_audit_action",
        "authorization_audit_logs",
        ["action", "decided_at"],
        unique=False,
    )


def downgrade() -> None:
    """Drop RBAC and authorization audit tables."""
    op.drop_index("idx_authz_audit_action", table_name="authorization_audit_logs")
    op.drop_index("idx_authz_audit_subject", table_name="authorization_audit_logs")
    op.drop_table("authorization_audit_logs")
    op.drop_index("uq_rbac_bindings_scope", table_name="rbac_role_bindings")
    op.drop_index("idx_rbac_bindings_subject", table_name="rbac_role_bindings")
    op.drop_table("rbac_role_bindings")
    op.drop_table("rbac_role_permissions")
    op.drop_table("rbac_roles")
    op.drop_index(op.f("ix_rbac_permissions_category"), table_name="rbac_permissions")
    op.drop_table("rbac_permissions")
