"""Audit actions recorded by the authorization audit trail."""

from enum import Enum


class AuditAction(str, Enum):
    """What an audit record describes.

    Only authorization decisions are audited here; binding administration is
    audited by the system that owns role bindings.
    """

    ACCESS_GRANTED = "access_granted"
    ACCESS_DENIED = "access_denied"
