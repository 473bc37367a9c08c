"""Permission catalog.

Static registry mapping each permission key to the resource kind it is
checked at. Built once at process start from PERMISSION_REGISTRY, frozen,
and then read concurrently without locking: after ``freeze()`` the
underlying mapping is never mutated again.

Usage:
    from scopeguard.domain.permissions import build_default_catalog

    catalog = build_default_catalog()
    catalog.kind_of("node.view")   # ResourceKind.NODE
    catalog.kind_of("vm.teleport") # raises UnknownPermissionError
"""

from collections.abc import Iterable

from scopeguard.domain.enums import (
    PERMISSION_CATALOG_VERSION,
    Permission,
    ResourceKind,
    permission_key,
)
from scopeguard.domain.errors import (
    CatalogFrozenError,
    DuplicatePermissionError,
    UnknownPermissionError,
)
from scopeguard.domain.permissions.registry import (
    PERMISSION_REGISTRY,
    PermissionMetadata,
)


class PermissionCatalog:
    """Registry of permission key → resource kind.

    Each permission maps to exactly one kind. Re-registering a key with the
    same kind is a no-op; with a different kind it raises. Once frozen the
    catalog is read-only and safe to share across tasks and threads.

    Attributes:
        version: Catalog version the entries were built from.
    """

    def __init__(self, *, version: int = PERMISSION_CATALOG_VERSION) -> None:
        self.version = version
        self._kinds: dict[str, ResourceKind] = {}
        self._metadata: dict[str, PermissionMetadata] = {}
        self._frozen = False

    def register(
        self,
        permission: Permission | str,
        kind: ResourceKind,
        *,
        category: str | None = None,
        description: str = "",
        dangerous: bool = False,
    ) -> None:
        """Register a permission at a resource kind.

        Args:
            permission: Permission key.
            kind: Resource kind the permission is checked at.
            category: Optional grouping (defaults to the key prefix).
            description: Human-readable description.
            dangerous: Destructive or security-sensitive operation.

        Raises:
            CatalogFrozenError: The catalog has been frozen.
            DuplicatePermissionError: Key already registered with another kind.
            ValueError: Key is empty.
        """
        if self._frozen:
            raise CatalogFrozenError(
                f"Cannot register '{permission_key(permission)}': catalog is frozen"
            )
        key = permission_key(permission)
        if not key:
            raise ValueError("Permission key cannot be empty")

        existing = self._kinds.get(key)
        if existing is not None:
            if existing is not kind:
                raise DuplicatePermissionError(key, existing.value, kind.value)
            return

        self._kinds[key] = kind
        self._metadata[key] = PermissionMetadata(
            permission=permission,
            kind=kind,
            category=category or key.split(".", 1)[0],
            description=description,
            dangerous=dangerous,
        )

    def register_metadata(self, metadata: PermissionMetadata) -> None:
        """Register a registry entry (see ``register``)."""
        self.register(
            metadata.permission,
            metadata.kind,
            category=metadata.category,
            description=metadata.description,
            dangerous=metadata.dangerous,
        )

    def freeze(self) -> "PermissionCatalog":
        """Make the catalog read-only. Returns self for chaining."""
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    def kind_of(self, permission: Permission | str) -> ResourceKind:
        """Resource kind a permission is checked at.

        Raises:
            UnknownPermissionError: Key is not registered.
        """
        key = permission_key(permission)
        try:
            return self._kinds[key]
        except KeyError:
            raise UnknownPermissionError(key) from None

    def is_registered(self, permission: Permission | str) -> bool:
        return permission_key(permission) in self._kinds

    def metadata(self, permission: Permission | str) -> PermissionMetadata:
        """Full metadata of a registered permission.

        Raises:
            UnknownPermissionError: Key is not registered.
        """
        key = permission_key(permission)
        try:
            return self._metadata[key]
        except KeyError:
            raise UnknownPermissionError(key) from None

    def permissions(self, kind: ResourceKind | None = None) -> list[str]:
        """Registered keys in registration order, optionally filtered by kind."""
        return [
            key for key, key_kind in self._kinds.items() if kind is None or key_kind is kind
        ]

    def __contains__(self, permission: object) -> bool:
        return isinstance(permission, str) and self.is_registered(permission)

    def __len__(self) -> int:
        return len(self._kinds)


def build_catalog(
    entries: Iterable[PermissionMetadata],
    *,
    version: int = PERMISSION_CATALOG_VERSION,
    freeze: bool = True,
) -> PermissionCatalog:
    """Build a catalog from registry entries.

    Args:
        entries: Metadata entries to register.
        version: Version to stamp on the catalog.
        freeze: Freeze after registration (default True).

    Raises:
        DuplicatePermissionError: Two entries disagree on a key's kind.
    """
    catalog = PermissionCatalog(version=version)
    for metadata in entries:
        catalog.register_metadata(metadata)
    return catalog.freeze() if freeze else catalog


def build_default_catalog() -> PermissionCatalog:
    """Frozen catalog of every permission in PERMISSION_REGISTRY."""
    return build_catalog(PERMISSION_REGISTRY)
