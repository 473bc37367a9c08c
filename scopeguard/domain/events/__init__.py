"""Domain events."""

from scopeguard.domain.events.authorization_events import (
    RoleBindingGranted,
    RoleBindingRevoked,
    RolePermissionsChanged,
)
from scopeguard.domain.events.base_event import DomainEvent

__all__ = [
    "DomainEvent",
    "RoleBindingGranted",
    "RoleBindingRevoked",
    "RolePermissionsChanged",
]
