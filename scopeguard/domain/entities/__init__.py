"""Domain entities."""

from scopeguard.domain.entities.audit_record import AuditRecord
from scopeguard.domain.entities.decision import Decision
from scopeguard.domain.entities.role import Role
from scopeguard.domain.entities.role_binding import Grant, RoleBinding

__all__ = ["AuditRecord", "Decision", "Grant", "Role", "RoleBinding"]
