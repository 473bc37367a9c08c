"""Domain protocols (ports).

Infrastructure adapters satisfy these structurally; nothing inherits from
them.
"""

from scopeguard.domain.protocols.audit_sink_protocol import AuditSinkProtocol
from scopeguard.domain.protocols.authorization_protocol import AuthorizationProtocol
from scopeguard.domain.protocols.decision_cache_protocol import (
    DecisionCacheProtocol,
    DecisionKey,
)
from scopeguard.domain.protocols.event_bus_protocol import (
    EventBusProtocol,
    EventHandler,
)
from scopeguard.domain.protocols.logger_protocol import LoggerProtocol
from scopeguard.domain.protocols.role_binding_store_protocol import (
    RoleBindingStoreProtocol,
)

__all__ = [
    "AuditSinkProtocol",
    "AuthorizationProtocol",
    "DecisionCacheProtocol",
    "DecisionKey",
    "EventBusProtocol",
    "EventHandler",
    "LoggerProtocol",
    "RoleBindingStoreProtocol",
]
