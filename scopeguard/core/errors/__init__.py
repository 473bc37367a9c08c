"""Core errors package.

Usage:
    from scopeguard.core.errors import DomainError
"""

from scopeguard.core.errors.domain_error import DomainError

__all__ = ["DomainError"]
