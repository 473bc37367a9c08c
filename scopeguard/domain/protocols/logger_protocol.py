"""LoggerProtocol definition for structured logging.

Backend-agnostic structured logging port. Messages are snake_case event
names; everything else goes into key-value context.

Log Levels:
    - DEBUG: Cache hits, per-binding diagnostics
    - INFO: Authorization decisions, audit lines
    - WARNING: Store unavailable, cache backend failures, skipped bindings
    - ERROR: Caller bugs (unknown permission, malformed scope), audit failures
    - CRITICAL: Not used by the engine

Security:
    - NEVER log credentials or tokens
    - Subject ids and resource ids are safe to log

Usage:
    from scopeguard.core.container import get_logger

    logger = get_logger()
    logger.info("authorization_decision", subject_id=subject_id, allowed=True)

    engine_logger = logger.bind(component="authorization_engine")
"""

from __future__ import annotations

from typing import Any, Protocol


class LoggerProtocol(Protocol):
    """Protocol for structured logging adapters."""

    def debug(self, message: str, /, **context: Any) -> None:
        """Log a debug-level message."""
        ...

    def info(self, message: str, /, **context: Any) -> None:
        """Log an info-level message."""
        ...

    def warning(self, message: str, /, **context: Any) -> None:
        """Log a warning-level message."""
        ...

    def error(
        self, message: str, /, *, error: Exception | None = None, **context: Any
    ) -> None:
        """Log an error-level message with optional exception details.

        Args:
            message: Event name.
            error: Optional exception; adapters add error_type and
                error_message fields.
            **context: Structured key-value context fields.
        """
        ...

    def critical(
        self, message: str, /, *, error: Exception | None = None, **context: Any
    ) -> None:
        """Log a critical-level message."""
        ...

    def bind(self, **context: Any) -> "LoggerProtocol":
        """Return new logger with permanently bound context.

        The original logger is unchanged.
        """
        ...

    def with_context(self, **context: Any) -> "LoggerProtocol":
        """Alias for bind()."""
        ...
