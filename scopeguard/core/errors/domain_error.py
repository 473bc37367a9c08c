"""Base error type carried inside Failure results.

DomainError is the root of every error that flows through the system as
data. It does NOT inherit from Exception: adapters catch library exceptions
and return Failure(SomeDomainError(...)) instead of raising.

Exceptions are reserved for programming and boot-time mistakes (an
unregistered permission key, a malformed resource identifier handed to a
builder). Those live in scopeguard.domain.errors.

Usage:
    from scopeguard.core.enums import ErrorCode
    from scopeguard.core.errors import DomainError

    @dataclass(frozen=True, slots=True, kw_only=True)
    class RoleBindingStoreError(DomainError):
        pass
"""

from dataclasses import dataclass
from typing import Any

from scopeguard.core.enums import ErrorCode


@dataclass(frozen=True, slots=True, kw_only=True)
class DomainError:
    """Base error value (not an Exception).

    Attributes:
        code: Machine-readable error code.
        message: Human-readable error message.
        details: Optional context for debugging.
    """

    code: ErrorCode
    message: str
    details: dict[str, Any] | None = None

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"
