"""Application services."""

from scopeguard.application.services.access_query_service import AccessQueryService
from scopeguard.application.services.authorization_engine import AuthorizationEngine

__all__ = ["AccessQueryService", "AuthorizationEngine"]
