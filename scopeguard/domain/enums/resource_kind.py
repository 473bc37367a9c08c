"""Resource kinds of the scope hierarchy.

The hierarchy is strictly nested:

    global (0) ⊃ connection (1) ⊃ node (2) ⊃ guest (3)

A permission is checked at one kind; a binding scoped at a coarser kind that
contains the requested resource satisfies it. Ordering is exposed through
``depth`` rather than comparison operators because the str mixin already
defines (lexical) ``<``.

Usage:
    from scopeguard.domain.enums import ResourceKind

    ResourceKind.NODE.depth                              # 2
    ResourceKind.CONNECTION.is_coarser_or_equal(ResourceKind.GUEST)  # True
"""

from enum import Enum


class ResourceKind(str, Enum):
    """Kinds of resource a permission can be scoped to.

    String Enum:
        Values double as the segment keys of resource identifiers
        (``connection=abc;node=pve01``) and as the persisted ``scope_kind``
        column of role bindings.
    """

    GLOBAL = "global"
    """Whole installation. Global resources carry no identifier segments."""

    CONNECTION = "connection"
    """One upstream cluster connection."""

    NODE = "node"
    """A hypervisor node inside a connection."""

    GUEST = "guest"
    """A virtual machine or container on a node (``qemu/100``, ``lxc/201``)."""

    @property
    def depth(self) -> int:
        """Position in the hierarchy (global=0 ... guest=3)."""
        return _DEPTHS[self]

    def is_coarser_or_equal(self, other: "ResourceKind") -> bool:
        """Return True when a scope of this kind may contain resources of ``other``."""
        return self.depth <= other.depth

    @classmethod
    def scoped_kinds(cls) -> tuple["ResourceKind", ...]:
        """Kinds that appear as identifier segments, outermost first."""
        return (cls.CONNECTION, cls.NODE, cls.GUEST)

    @classmethod
    def from_depth(cls, depth: int) -> "ResourceKind":
        """Look up a kind by hierarchy depth.

        Raises:
            ValueError: If no kind exists at ``depth``.
        """
        for kind, kind_depth in _DEPTHS.items():
            if kind_depth == depth:
                return kind
        raise ValueError(f"No resource kind at depth {depth}")


_DEPTHS: dict[ResourceKind, int] = {
    ResourceKind.GLOBAL: 0,
    ResourceKind.CONNECTION: 1,
    ResourceKind.NODE: 2,
    ResourceKind.GUEST: 3,
}
