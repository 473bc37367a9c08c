"""Result types for railway-oriented programming.

Infrastructure reads (role bindings, decision cache, audit writes) can fail
for reasons that are not programming errors. Those failures travel back to
the engine as values instead of exceptions, so the engine can turn every one
of them into a fail-closed decision.

Usage:
    result = await store.roles_for_subject("user-1")
    match result:
        case Success(value=bindings):
            ...
        case Failure(error=error):
            logger.warning("store_failed", error_code=error.code.value)
"""

from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")  # Success type
E = TypeVar("E")  # Error type


@dataclass(frozen=True, slots=True, kw_only=True)
class Success(Generic[T]):
    """Successful operation result.

    Attributes:
        value: The produced value.
    """

    value: T


@dataclass(frozen=True, slots=True, kw_only=True)
class Failure(Generic[E]):
    """Failed operation result.

    Attributes:
        error: The error describing the failure.
    """

    error: E


Result = Success[T] | Failure[E]
