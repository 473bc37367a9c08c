"""Audit record entity."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from scopeguard.domain.entities.decision import Decision
from scopeguard.domain.enums import AuditAction, DecisionOutcome, DecisionReason


@dataclass(frozen=True, slots=True, kw_only=True)
class AuditRecord:
    """One audited authorization decision.

    Attributes:
        timestamp: When the decision was made (UTC).
        subject_id: Subject that was checked.
        permission: Permission key that was checked.
        resource_id: Encoded resource, None for global permissions.
        outcome: ALLOW or DENY.
        reason: Decision reason.
        matched_role_id: Role of the matching binding (allows only).
        matched_scope: Scope of the matching binding (allows only).
        cached: Decision was served from the decision cache.
    """

    timestamp: datetime
    subject_id: str
    permission: str
    resource_id: str | None
    outcome: DecisionOutcome
    reason: DecisionReason
    matched_role_id: str | None = None
    matched_scope: str | None = None
    cached: bool = False

    @classmethod
    def from_decision(
        cls,
        *,
        timestamp: datetime,
        subject_id: str,
        permission: str,
        resource_id: str | None,
        decision: Decision,
        cached: bool = False,
    ) -> "AuditRecord":
        binding = decision.matched_binding
        return cls(
            timestamp=timestamp,
            subject_id=subject_id,
            permission=permission,
            resource_id=resource_id,
            outcome=decision.outcome,
            reason=decision.reason,
            matched_role_id=binding.role_id if binding else None,
            matched_scope=binding.scope_resource_id if binding else None,
            cached=cached,
        )

    @property
    def action(self) -> AuditAction:
        if self.outcome is DecisionOutcome.ALLOW:
            return AuditAction.ACCESS_GRANTED
        return AuditAction.ACCESS_DENIED

    def to_context(self) -> dict[str, Any]:
        """Flat key-value form for structured logs."""
        return {
            "timestamp": self.timestamp.isoformat(),
            "subject_id": self.subject_id,
            "permission": self.permission,
            "resource_id": self.resource_id,
            "outcome": self.outcome.value,
            "reason": self.reason.value,
            "matched_role_id": self.matched_role_id,
            "matched_scope": self.matched_scope,
            "cached": self.cached,
        }
