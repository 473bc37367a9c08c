"""Infrastructure-specific error codes.

Internal codes for tracking which backend operation failed. They ride along
on InfrastructureError.infrastructure_code; the domain only looks at the
ErrorCode.
"""

from enum import Enum


class InfrastructureErrorCode(Enum):
    """Infrastructure-specific error codes."""

    # Database errors
    DATABASE_CONNECTION_FAILED = "database_connection_failed"
    DATABASE_TIMEOUT = "database_timeout"
    DATABASE_ERROR = "database_error"
    DATABASE_UNKNOWN_ERROR = "database_unknown_error"

    # Cache errors
    CACHE_CONNECTION_ERROR = "cache_connection_error"
    CACHE_GET_ERROR = "cache_get_error"
    CACHE_SET_ERROR = "cache_set_error"
    CACHE_DELETE_ERROR = "cache_delete_error"
    CACHE_DECODE_ERROR = "cache_decode_error"
