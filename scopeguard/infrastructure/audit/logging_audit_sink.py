"""Structured-log audit sink.

Default sink: every audited decision becomes one ``authorization_audit``
log line carrying the full record as context. Log shippers pick it up from
the JSON output in non-development environments.
"""

from scopeguard.core.result import Result, Success
from scopeguard.domain.entities import AuditRecord
from scopeguard.domain.errors import AuditError
from scopeguard.domain.protocols import LoggerProtocol


class LoggingAuditSink:
    """Audit sink that writes records to the structured logger."""

    def __init__(self, logger: LoggerProtocol) -> None:
        self._logger = logger.bind(audit=True)

    async def record(self, entry: AuditRecord) -> Result[None, AuditError]:
        self._logger.info(
            "authorization_audit",
            action=entry.action.value,
            **entry.to_context(),
        )
        return Success(value=None)
