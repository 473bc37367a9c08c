"""AuditSinkProtocol - destination for authorization audit records.

The engine calls ``record`` off the request path. Sinks return
Failure(AuditError) instead of raising; the engine logs failures and never
lets them affect a decision.

Implementations:
    - LoggingAuditSink: structured log line per record (default)
    - PostgresAuditSink: row in authorization_audit_logs
"""

from typing import Protocol

from scopeguard.core.result import Result
from scopeguard.domain.entities import AuditRecord
from scopeguard.domain.errors import AuditError


class AuditSinkProtocol(Protocol):
    """Audit sink port."""

    async def record(self, entry: AuditRecord) -> Result[None, AuditError]:
        """Persist one audit record."""
        ...
