"""AuthorizationProtocol - what callers depend on to gate operations.

Implemented by AuthorizationEngine. Presentation code and application
services depend on this protocol rather than the concrete engine so tests
can substitute a stub.
"""

from typing import Protocol

from scopeguard.domain.entities import Decision
from scopeguard.domain.enums import Permission


class AuthorizationProtocol(Protocol):
    """Authorization decision port."""

    async def evaluate(
        self,
        subject_id: str,
        permission: Permission | str,
        resource_id: str | None = None,
    ) -> Decision:
        """Decide whether ``subject_id`` may exercise ``permission`` on ``resource_id``.

        Never raises for policy or infrastructure reasons: every failure
        becomes a Deny decision.
        """
        ...

    async def check(
        self,
        subject_id: str,
        permission: Permission | str,
        resource_id: str | None = None,
    ) -> bool:
        """Boolean shorthand for ``evaluate(...).allowed``."""
        ...
