"""Role entity.

A role is a named set of permission keys. Roles carry no scope: scope comes
from the RoleBinding that attaches a role to a subject.
"""

from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True, kw_only=True)
class Role:
    """Named permission set.

    Attributes:
        role_id: Stable identifier (``role_operator``).
        name: Display name.
        permissions: Granted permission keys.
        description: Human-readable description.
        is_system: Seeded role that admins cannot delete.
    """

    role_id: str
    name: str
    permissions: frozenset[str] = field(default_factory=frozenset)
    description: str = ""
    is_system: bool = False

    def __post_init__(self) -> None:
        if not self.role_id:
            raise ValueError("role_id cannot be empty")
        # Accept any iterable of keys (including Permission members).
        object.__setattr__(
            self,
            "permissions",
            frozenset(getattr(p, "value", p) for p in self.permissions),
        )

    def grants(self, permission: str) -> bool:
        return permission in self.permissions
