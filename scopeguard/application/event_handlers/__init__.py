"""Domain event handlers."""

from scopeguard.application.event_handlers.cache_invalidation_handler import (
    CacheInvalidationHandler,
)

__all__ = ["CacheInvalidationHandler"]
