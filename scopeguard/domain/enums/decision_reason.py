"""Decision outcomes and reasons.

Every authorization check ends in exactly one outcome with exactly one
reason. ``GRANTED`` is the only reason that accompanies ``ALLOW``; the other
five explain a denial.
"""

from enum import Enum


class DecisionOutcome(str, Enum):
    """Final verdict of an authorization check."""

    ALLOW = "allow"
    DENY = "deny"


class DecisionReason(str, Enum):
    """Why a decision came out the way it did.

    Deny reasons:
        - UNKNOWN_PERMISSION: Permission key is not in the catalog.
        - SCOPE_MISMATCH: Resource missing, superfluous, malformed, or of
          the wrong kind for the permission.
        - STORE_UNAVAILABLE: Role binding store failed or timed out.
        - NO_ROLES_ASSIGNED: Subject has no active bindings.
        - NO_MATCHING_BINDING: Bindings exist but none grants the permission
          at a scope containing the resource.
    """

    GRANTED = "granted"
    UNKNOWN_PERMISSION = "unknown_permission"
    SCOPE_MISMATCH = "scope_mismatch"
    STORE_UNAVAILABLE = "store_unavailable"
    NO_ROLES_ASSIGNED = "no_roles_assigned"
    NO_MATCHING_BINDING = "no_matching_binding"

    @property
    def is_caller_error(self) -> bool:
        """True for reasons caused by a malformed check rather than policy."""
        return self in (
            DecisionReason.UNKNOWN_PERMISSION,
            DecisionReason.SCOPE_MISMATCH,
        )
