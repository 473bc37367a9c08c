"""Domain value objects."""

from scopeguard.domain.value_objects.resource_identifier import (
    KEY_VALUE_SEPARATOR,
    SEGMENT_DELIMITER,
    WILDCARD,
    ResourceIdentifier,
    build_connection_resource_id,
    build_guest_resource_id,
    build_node_resource_id,
    contains,
)

__all__ = [
    "KEY_VALUE_SEPARATOR",
    "SEGMENT_DELIMITER",
    "WILDCARD",
    "ResourceIdentifier",
    "build_connection_resource_id",
    "build_guest_resource_id",
    "build_node_resource_id",
    "contains",
]
