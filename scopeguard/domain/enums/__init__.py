"""Domain enums for the authorization model.

Available Enums:
    - ResourceKind: Scope hierarchy (global, connection, node, guest)
    - Permission: Catalogued permission keys
    - DecisionOutcome / DecisionReason: Result of an authorization check
    - AuditAction: Audit trail action types
"""

from scopeguard.domain.enums.audit_action import AuditAction
from scopeguard.domain.enums.decision_reason import DecisionOutcome, DecisionReason
from scopeguard.domain.enums.permission import (
    PERMISSION_CATALOG_VERSION,
    Permission,
    permission_key,
)
from scopeguard.domain.enums.resource_kind import ResourceKind

__all__ = [
    "AuditAction",
    "DecisionOutcome",
    "DecisionReason",
    "PERMISSION_CATALOG_VERSION",
    "Permission",
    "ResourceKind",
    "permission_key",
]
