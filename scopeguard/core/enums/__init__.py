"""Core enums package."""

from scopeguard.core.enums.environment import Environment
from scopeguard.core.enums.error_code import ErrorCode

__all__ = ["Environment", "ErrorCode"]
