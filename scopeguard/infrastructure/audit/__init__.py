"""Audit sinks."""

from scopeguard.infrastructure.audit.logging_audit_sink import LoggingAuditSink
from scopeguard.infrastructure.audit.postgres_audit_sink import PostgresAuditSink

__all__ = ["LoggingAuditSink", "PostgresAuditSink"]
