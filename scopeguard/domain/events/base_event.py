"""Base domain event class.

Domain events record facts that already happened ("RoleBindingGranted"),
always named in past tense. In this system they announce changes to role
bindings and role definitions made by whatever component owns role
administration, so that caches in front of the engine can be evicted.

Architecture:
    - Frozen dataclass (immutable after creation)
    - Auto-generated event_id (UUID) for event tracking
    - occurred_at timestamp (UTC) for event ordering

Usage:
    >>> @dataclass(frozen=True, kw_only=True)
    >>> class RoleBindingGranted(DomainEvent):
    ...     subject_id: str
    ...     role_id: str
    >>>
    >>> event = RoleBindingGranted(subject_id="user-1", role_id="role_viewer")
    >>> event.event_id      # auto-generated UUID
    >>> event.occurred_at   # auto-generated UTC timestamp
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import UUID, uuid4


@dataclass(frozen=True, kw_only=True, slots=True)
class DomainEvent:
    """Base class for all domain events.

    Attributes:
        event_id: Unique identifier for this event instance.
        occurred_at: When the event occurred (UTC).
    """

    event_id: UUID = field(default_factory=uuid4)
    occurred_at: datetime = field(default_factory=lambda: datetime.now(UTC))
