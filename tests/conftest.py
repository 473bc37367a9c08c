"""Pytest configuration and shared fixtures.

Fixtures build the engine from in-memory collaborators so unit tests need
no database or Redis:

    catalog        frozen default permission catalog
    store          InMemoryRoleBindingStore seeded with the system roles
    decision_cache InMemoryDecisionCache
    audit_sink     AsyncMock returning Success(None)
    mock_logger    MagicMock satisfying LoggerProtocol (bind returns itself)
    engine         AuthorizationEngine wired from the above
"""

import inspect
from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock

import pytest

from scopeguard.application.services import AuthorizationEngine
from scopeguard.core.result import Success
from scopeguard.domain.entities import RoleBinding
from scopeguard.domain.enums import ResourceKind
from scopeguard.domain.permissions import SYSTEM_ROLES, build_default_catalog
from scopeguard.domain.value_objects import (
    WILDCARD,
    build_connection_resource_id,
    build_guest_resource_id,
    build_node_resource_id,
)
from scopeguard.infrastructure.cache import InMemoryDecisionCache
from scopeguard.infrastructure.persistence.repositories import (
    InMemoryRoleBindingStore,
)

# Shared resource identifiers for a single-connection, two-node cluster
CONNECTION_ID = "abc123"
OTHER_CONNECTION_ID = "xyz789"
CONNECTION = build_connection_resource_id(CONNECTION_ID)
OTHER_CONNECTION = build_connection_resource_id(OTHER_CONNECTION_ID)
NODE_PVE01 = build_node_resource_id(CONNECTION_ID, "pve01")
NODE_PVE02 = build_node_resource_id(CONNECTION_ID, "pve02")
GUEST_100 = build_guest_resource_id(CONNECTION_ID, "pve01", "qemu", 100)
GUEST_200 = build_guest_resource_id(CONNECTION_ID, "pve02", "qemu", 200)
OTHER_GUEST = build_guest_resource_id(OTHER_CONNECTION_ID, "pve01", "lxc", 300)

FIXED_NOW = datetime(2026, 1, 15, 12, 0, tzinfo=UTC)


def create_binding(
    subject_id: str = "alice",
    role_id: str = "role_operator",
    scope_kind: ResourceKind = ResourceKind.GLOBAL,
    scope_resource_id: str = WILDCARD,
    **kwargs,
) -> RoleBinding:
    """Helper to create a RoleBinding for testing.

    Usage:
        create_binding()                                   # global operator
        create_binding(scope_kind=ResourceKind.NODE, scope_resource_id=NODE_PVE01)
        create_binding(expires_at=FIXED_NOW)
    """
    return RoleBinding(
        subject_id=subject_id,
        role_id=role_id,
        scope_kind=scope_kind,
        scope_resource_id=scope_resource_id,
        **kwargs,
    )


@pytest.fixture
def mock_logger() -> MagicMock:
    """Logger mock; bind()/with_context() return the same mock."""
    logger = MagicMock()
    logger.bind.return_value = logger
    logger.with_context.return_value = logger
    return logger


@pytest.fixture
def catalog():
    return build_default_catalog()


@pytest.fixture
def store() -> InMemoryRoleBindingStore:
    return InMemoryRoleBindingStore(roles=SYSTEM_ROLES)


@pytest.fixture
def decision_cache() -> InMemoryDecisionCache:
    return InMemoryDecisionCache()


@pytest.fixture
def audit_sink() -> AsyncMock:
    sink = AsyncMock()
    sink.record.return_value = Success(value=None)
    return sink


@pytest.fixture
def engine(catalog, store, decision_cache, audit_sink, mock_logger) -> AuthorizationEngine:
    return AuthorizationEngine(
        catalog=catalog,
        store=store,
        cache=decision_cache,
        audit_sink=audit_sink,
        logger=mock_logger,
        clock=lambda: FIXED_NOW,
    )


# Pytest markers for different test types
def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests with mocked dependencies")
    config.addinivalue_line(
        "markers", "integration: Integration tests with real database"
    )
    config.addinivalue_line("markers", "asyncio: Async test that requires event loop")


# Test execution configuration
def pytest_collection_modifyitems(config, items):
    """Automatically add asyncio marker to async test functions."""
    for item in items:
        if inspect.iscoroutinefunction(item.function):
            item.add_marker(pytest.mark.asyncio)
