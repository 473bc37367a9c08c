"""Resource identifier value object.

A resource identifier is an ordered path through the scope hierarchy. Its
canonical string form joins ``kind=value`` segments with ``;``:

    connection=abc123
    connection=abc123;node=pve01
    connection=abc123;node=pve01;guest=qemu/100

The global resource has no segments and encodes as ``*``.

Segments always start at ``connection`` and follow connection → node →
guest without gaps. Values are non-empty, may not contain ``;`` or ``=`` and
may not be ``*``. Guest values carry the guest type, ``qemu/100``, so ``/``
is allowed.

Containment:
    A contains B iff A's segments are a prefix of B's segments. Comparison is
    exact and case-sensitive, so ``node=pve1`` never contains
    ``node=pve10``. The global identifier contains everything.

Usage:
    from scopeguard.domain.value_objects import (
        ResourceIdentifier,
        build_guest_resource_id,
        contains,
    )

    guest = build_guest_resource_id("abc123", "pve01", "qemu", 100)
    node = ResourceIdentifier.parse("connection=abc123;node=pve01")
    assert node.contains(ResourceIdentifier.parse(guest))
    assert contains("connection=abc123", guest)
"""

from dataclasses import dataclass

from scopeguard.domain.enums import ResourceKind
from scopeguard.domain.errors import (
    InvalidResourceIdentifierError,
    InvalidResourceKindError,
)

SEGMENT_DELIMITER = ";"
KEY_VALUE_SEPARATOR = "="
WILDCARD = "*"

_FORBIDDEN_CHARACTERS = (SEGMENT_DELIMITER, KEY_VALUE_SEPARATOR)


def _validate_value(kind: ResourceKind, value: str) -> str:
    if not isinstance(value, str):
        raise InvalidResourceIdentifierError(
            f"{kind.value} value must be a string, got {type(value).__name__}"
        )
    if not value or value != value.strip():
        raise InvalidResourceIdentifierError(
            f"{kind.value} value must be non-empty without surrounding whitespace"
        )
    if value == WILDCARD:
        raise InvalidResourceIdentifierError(
            f"{kind.value} value cannot be the wildcard '{WILDCARD}'"
        )
    for character in _FORBIDDEN_CHARACTERS:
        if character in value:
            raise InvalidResourceIdentifierError(
                f"{kind.value} value '{value}' cannot contain '{character}'"
            )
    return value


@dataclass(frozen=True, slots=True)
class ResourceIdentifier:
    """Immutable path of (kind, value) segments through the hierarchy.

    Construct through ``parse``, ``build`` or ``global_scope``; the
    constructor validates segment order and values either way.

    Attributes:
        segments: Ordered ``(kind, value)`` pairs, outermost first.

    Raises:
        InvalidResourceKindError: Segments skip or reorder hierarchy levels.
        InvalidResourceIdentifierError: A segment value is malformed.
    """

    segments: tuple[tuple[ResourceKind, str], ...] = ()

    def __post_init__(self) -> None:
        expected = ResourceKind.scoped_kinds()
        if len(self.segments) > len(expected):
            raise InvalidResourceKindError(
                f"Identifier has {len(self.segments)} segments, "
                f"hierarchy has only {len(expected)} levels"
            )
        for position, (kind, value) in enumerate(self.segments):
            if kind is not expected[position]:
                raise InvalidResourceKindError(
                    f"Segment {position} must be '{expected[position].value}', "
                    f"got '{getattr(kind, 'value', kind)}'"
                )
            _validate_value(kind, value)

    @classmethod
    def global_scope(cls) -> "ResourceIdentifier":
        """The global resource (no segments, encodes as ``*``)."""
        return cls(())

    @classmethod
    def build(cls, kind: ResourceKind, *values: str) -> "ResourceIdentifier":
        """Build an identifier of ``kind`` from its segment values.

        Args:
            kind: Kind of the resulting identifier.
            *values: One value per level down to ``kind``
                (connection, node, guest).

        Returns:
            ResourceIdentifier: The identifier.

        Raises:
            InvalidResourceKindError: Number of values does not match
                ``kind``'s depth.
            InvalidResourceIdentifierError: A value is malformed.

        Example:
            ResourceIdentifier.build(ResourceKind.NODE, "abc123", "pve01")
        """
        if len(values) != kind.depth:
            raise InvalidResourceKindError(
                f"A {kind.value} identifier needs {kind.depth} value(s), "
                f"got {len(values)}"
            )
        kinds = ResourceKind.scoped_kinds()[: kind.depth]
        return cls(tuple(zip(kinds, values, strict=True)))

    @classmethod
    def parse(cls, raw: str) -> "ResourceIdentifier":
        """Parse the canonical string form.

        Args:
            raw: Encoded identifier (``connection=a;node=b``) or ``*``.

        Returns:
            ResourceIdentifier: Parsed identifier.

        Raises:
            InvalidResourceIdentifierError: Empty input, a segment without
                ``=``, or a malformed value.
            InvalidResourceKindError: Unknown segment key or out-of-order
                segments.
        """
        if not isinstance(raw, str) or not raw:
            raise InvalidResourceIdentifierError("Resource identifier is empty")
        if raw == WILDCARD:
            return cls.global_scope()

        segments: list[tuple[ResourceKind, str]] = []
        for part in raw.split(SEGMENT_DELIMITER):
            key, separator, value = part.partition(KEY_VALUE_SEPARATOR)
            if not separator:
                raise InvalidResourceIdentifierError(
                    f"Segment '{part}' is not of the form kind=value"
                )
            try:
                kind = ResourceKind(key)
            except ValueError:
                raise InvalidResourceKindError(
                    f"Unknown resource kind '{key}' in '{raw}'"
                ) from None
            if kind is ResourceKind.GLOBAL:
                raise InvalidResourceKindError(
                    f"'{ResourceKind.GLOBAL.value}' cannot appear as a segment"
                )
            segments.append((kind, value))
        return cls(tuple(segments))

    @property
    def kind(self) -> ResourceKind:
        """Kind of the innermost segment (GLOBAL when there are none)."""
        if not self.segments:
            return ResourceKind.GLOBAL
        return self.segments[-1][0]

    @property
    def is_global(self) -> bool:
        return not self.segments

    def value_of(self, kind: ResourceKind) -> str | None:
        """Value of the segment of ``kind``, or None if the path stops above it."""
        for segment_kind, value in self.segments:
            if segment_kind is kind:
                return value
        return None

    def parent(self) -> "ResourceIdentifier | None":
        """Identifier one level up, or None for the global resource."""
        if not self.segments:
            return None
        return ResourceIdentifier(self.segments[:-1])

    def ancestors(self) -> list["ResourceIdentifier"]:
        """All containing identifiers from global down to this one (inclusive)."""
        return [
            ResourceIdentifier(self.segments[:length])
            for length in range(len(self.segments) + 1)
        ]

    def contains(self, other: "ResourceIdentifier") -> bool:
        """Return True when ``other`` equals or lies underneath this identifier."""
        length = len(self.segments)
        return other.segments[:length] == self.segments

    def encode(self) -> str:
        """Canonical string form."""
        if not self.segments:
            return WILDCARD
        return SEGMENT_DELIMITER.join(
            f"{kind.value}{KEY_VALUE_SEPARATOR}{value}" for kind, value in self.segments
        )

    def __str__(self) -> str:
        return self.encode()


def contains(
    outer: "ResourceIdentifier | str", inner: "ResourceIdentifier | str"
) -> bool:
    """Segment-prefix containment on identifiers or their encoded strings.

    Raises:
        InvalidResourceIdentifierError: Either string fails to parse.
    """
    if isinstance(outer, str):
        outer = ResourceIdentifier.parse(outer)
    if isinstance(inner, str):
        inner = ResourceIdentifier.parse(inner)
    return outer.contains(inner)


def build_connection_resource_id(connection_id: str) -> str:
    """Encoded identifier of a connection."""
    return ResourceIdentifier.build(ResourceKind.CONNECTION, connection_id).encode()


def build_node_resource_id(connection_id: str, node: str) -> str:
    """Encoded identifier of a node inside a connection."""
    return ResourceIdentifier.build(ResourceKind.NODE, connection_id, node).encode()


def build_guest_resource_id(
    connection_id: str, node: str, guest_type: str, guest_id: str | int
) -> str:
    """Encoded identifier of a guest.

    Args:
        connection_id: Owning connection.
        node: Node hosting the guest.
        guest_type: ``qemu`` or ``lxc``.
        guest_id: Numeric guest id (vmid).

    Returns:
        str: e.g. ``connection=abc123;node=pve01;guest=qemu/100``.

    Raises:
        InvalidResourceIdentifierError: Any part is empty or contains a
            reserved character.
    """
    if not guest_type or "/" in guest_type:
        raise InvalidResourceIdentifierError(
            f"Guest type '{guest_type}' must be non-empty and contain no '/'"
        )
    guest = f"{guest_type}/{guest_id}"
    return ResourceIdentifier.build(
        ResourceKind.GUEST, connection_id, node, guest
    ).encode()
