"""Exceptions raised for programming and boot-time mistakes.

These are the only errors in the authorization model that are raised rather
than returned. They signal code that is wrong (a permission key that was
never registered, a resource identifier built from invalid parts), not
conditions the running system should recover from. The engine catches them
at its boundary and converts them into Deny decisions.

Usage:
    from scopeguard.domain.errors import UnknownPermissionError

    try:
        kind = catalog.kind_of("vm.teleport")
    except UnknownPermissionError:
        ...
"""


class PermissionCatalogError(Exception):
    """Base class for permission catalog violations."""


class DuplicatePermissionError(PermissionCatalogError):
    """Permission registered twice with conflicting resource kinds."""

    def __init__(self, permission: str, existing: str, requested: str) -> None:
        self.permission = permission
        self.existing = existing
        self.requested = requested
        super().__init__(
            f"Permission '{permission}' is already registered with kind "
            f"'{existing}', cannot re-register as '{requested}'"
        )


class UnknownPermissionError(PermissionCatalogError, KeyError):
    """Permission key is not in the catalog."""

    def __init__(self, permission: str) -> None:
        self.permission = permission
        super().__init__(permission)

    def __str__(self) -> str:
        return f"Unknown permission '{self.permission}'"


class CatalogFrozenError(PermissionCatalogError, RuntimeError):
    """Registration attempted after the catalog was frozen."""


class InvalidResourceIdentifierError(ValueError):
    """Resource identifier string or segment value is malformed."""


class InvalidResourceKindError(InvalidResourceIdentifierError):
    """Identifier segments are out of hierarchy order or of the wrong kind."""
