"""Domain-level error codes (machine-readable).

Error codes follow ENTITY_ACTION_REASON naming convention.
Used with Result types for railway-oriented programming.
"""

from enum import Enum


class ErrorCode(Enum):
    """Domain-level error codes (machine-readable).

    Error codes follow ENTITY_ACTION_REASON naming convention.
    """

    # Validation errors
    VALIDATION_FAILED = "validation_failed"

    # Authorization errors
    PERMISSION_DENIED = "permission_denied"
    AUTHORIZATION_FAILED = "authorization_failed"

    # Role binding store errors
    ROLE_BINDING_STORE_UNAVAILABLE = "role_binding_store_unavailable"
    ROLE_BINDING_STORE_TIMEOUT = "role_binding_store_timeout"
    ROLE_NOT_FOUND = "role_not_found"

    # Decision cache errors
    DECISION_CACHE_FAILED = "decision_cache_failed"

    # Audit trail errors
    AUDIT_RECORD_FAILED = "audit_record_failed"
