"""Cache key construction utilities.

All keys written to shared caches follow ``{prefix}:{domain}:...`` so one
Redis database can be shared with other services and bulk invalidation can
use glob patterns.

Usage:
    keys = CacheKeys(prefix=settings.cache_key_prefix)
    keys.decision(DecisionKey("user-1", "vm.view", guest_id))
    keys.subject_decisions_pattern("user-1")
    keys.subject_generation("user-1")
"""

from dataclasses import dataclass

from scopeguard.domain.protocols import DecisionKey

_GLOB_SPECIALS = ("\\", "*", "?", "[", "]")
_GLOBAL_RESOURCE = "-"


def escape_glob(value: str) -> str:
    """Escape Redis glob metacharacters in a key fragment."""
    for special in _GLOB_SPECIALS:
        value = value.replace(special, "\\" + special)
    return value


@dataclass
class CacheKeys:
    """Centralized cache key construction.

    Attributes:
        prefix: Cache key prefix (typically "scopeguard").
    """

    prefix: str

    def decision(self, key: DecisionKey) -> str:
        """Decision cache key.

        Pattern: {prefix}:authz:{subject_id}:g{generation}:{permission}:{resource_id or -}

        Subject ids are the third colon-separated field so a whole subject
        can be evicted with one pattern scan.
        """
        resource = key.resource_id if key.resource_id is not None else _GLOBAL_RESOURCE
        return (
            f"{self.prefix}:authz:{key.subject_id}:g{key.generation}:"
            f"{key.permission}:{resource}"
        )

    def subject_generation(self, subject_id: str) -> str:
        """Generation counter of one subject (outside the decision namespace)."""
        return f"{self.prefix}:authz-gen:{subject_id}"

    def base_generation(self) -> str:
        """Generation every subject without its own counter falls back to."""
        return f"{self.prefix}:authz-gen-base"

    def generation_sequence(self) -> str:
        """Shared sequence that hands out new generations."""
        return f"{self.prefix}:authz-gen-seq"

    def subject_decisions_pattern(self, subject_id: str) -> str:
        """Glob matching every decision key of one subject."""
        return f"{escape_glob(self.prefix)}:authz:{escape_glob(subject_id)}:*"

    def all_decisions_pattern(self) -> str:
        """Glob matching every decision key."""
        return f"{escape_glob(self.prefix)}:authz:*"
