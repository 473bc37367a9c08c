"""SQLAlchemy implementation of RoleBindingStoreProtocol.

Reads role bindings and role permission sets from the RBAC tables. Every
call opens its own short-lived session from the Database, because the
engine expands several roles concurrently and an AsyncSession must not be
shared between concurrent operations.

Error mapping:
    SQLAlchemyError  → Failure(RoleBindingStoreError, ROLE_BINDING_STORE_UNAVAILABLE)
    OSError          → Failure(RoleBindingStoreError, ROLE_BINDING_STORE_UNAVAILABLE)

Malformed rows (unknown scope kind, scope identifier of the wrong kind) are
logged at warning level and skipped: a binding that cannot be interpreted
grants nothing.
"""

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from scopeguard.core.enums import ErrorCode
from scopeguard.core.result import Failure, Result, Success
from scopeguard.domain.entities import RoleBinding
from scopeguard.domain.enums import ResourceKind
from scopeguard.domain.errors import RoleBindingStoreError
from scopeguard.domain.protocols import LoggerProtocol
from scopeguard.infrastructure.persistence.database import Database
from scopeguard.infrastructure.persistence.models import (
    RoleBindingModel,
    role_permissions,
)


class SQLAlchemyRoleBindingStore:
    """Role binding store backed by the RBAC tables.

    Attributes:
        _database: Session factory owner.
        _logger: Logger for skipped rows.
    """

    def __init__(self, database: Database, logger: LoggerProtocol) -> None:
        self._database = database
        self._logger = logger

    async def roles_for_subject(
        self, subject_id: str
    ) -> Result[list[RoleBinding], RoleBindingStoreError]:
        """All bindings of a subject (expiry is evaluated by the engine).

        Args:
            subject_id: Subject to look up.

        Returns:
            Success(list[RoleBinding]) or Failure(RoleBindingStoreError).
        """
        try:
            async with self._database.get_session() as session:
                result = await session.execute(
                    select(RoleBindingModel)
                    .where(RoleBindingModel.subject_id == subject_id)
                    .order_by(RoleBindingModel.created_at)
                )
                models = result.scalars().all()
        except (SQLAlchemyError, OSError) as e:
            return Failure(
                error=RoleBindingStoreError(
                    code=ErrorCode.ROLE_BINDING_STORE_UNAVAILABLE,
                    message=f"Failed to load role bindings: {e}",
                    details={"subject_id": subject_id, "error_type": type(e).__name__},
                )
            )

        bindings: list[RoleBinding] = []
        for model in models:
            binding = self._to_domain(model)
            if binding is not None:
                bindings.append(binding)
        return Success(value=bindings)

    async def permissions_for_role(
        self, role_id: str
    ) -> Result[frozenset[str], RoleBindingStoreError]:
        """Permission keys of a role (empty for unknown roles).

        Args:
            role_id: Role to expand.

        Returns:
            Success(frozenset[str]) or Failure(RoleBindingStoreError).
        """
        try:
            async with self._database.get_session() as session:
                result = await session.execute(
                    select(role_permissions.c.permission_id).where(
                        role_permissions.c.role_id == role_id
                    )
                )
                return Success(value=frozenset(result.scalars().all()))
        except (SQLAlchemyError, OSError) as e:
            return Failure(
                error=RoleBindingStoreError(
                    code=ErrorCode.ROLE_BINDING_STORE_UNAVAILABLE,
                    message=f"Failed to load role permissions: {e}",
                    details={"role_id": role_id, "error_type": type(e).__name__},
                )
            )

    def _to_domain(self, model: RoleBindingModel) -> RoleBinding | None:
        """Map a row to a RoleBinding, or None if the row is malformed."""
        try:
            return RoleBinding(
                subject_id=model.subject_id,
                role_id=model.role_id,
                scope_kind=ResourceKind(model.scope_kind),
                scope_resource_id=model.scope_resource_id,
                binding_id=str(model.id),
                granted_by=model.granted_by,
                granted_at=model.created_at,
                expires_at=model.expires_at,
                disabled=model.disabled,
            )
        except ValueError as e:
            self._logger.warning(
                "role_binding_malformed",
                binding_id=str(model.id),
                subject_id=model.subject_id,
                role_id=model.role_id,
                scope_kind=model.scope_kind,
                scope_resource_id=model.scope_resource_id,
                error_type=type(e).__name__,
                error_message=str(e),
            )
            return None
