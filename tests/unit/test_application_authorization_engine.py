"""Unit tests for AuthorizationEngine.

Uses the in-memory store and decision cache from conftest; store failures,
timeouts and cache faults are simulated with AsyncMock.

Scenarios:
- Hierarchy matching (global, connection, node, wildcard bindings)
- Validation denials (unknown permission, scope mismatch, empty subject)
- Fail-closed behavior on store errors, exceptions and timeouts
- Expired, disabled and foreign-subject bindings
- Decision caching and audit emission
"""

import asyncio
from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest

from scopeguard.application.services import AuthorizationEngine
from scopeguard.core.enums import ErrorCode
from scopeguard.core.result import Failure, Success
from scopeguard.domain.entities import Decision, RoleBinding
from scopeguard.domain.enums import (
    AuditAction,
    DecisionReason,
    Permission,
    ResourceKind,
)
from scopeguard.domain.errors import RoleBindingStoreError
from scopeguard.domain.permissions import SUPER_ADMIN_ROLE_ID
from scopeguard.domain.value_objects import ResourceIdentifier
from scopeguard.infrastructure.enums import InfrastructureErrorCode
from scopeguard.infrastructure.errors import CacheError
from tests.conftest import (
    CONNECTION,
    FIXED_NOW,
    GUEST_100,
    GUEST_200,
    NODE_PVE01,
    NODE_PVE02,
    OTHER_CONNECTION,
    OTHER_GUEST,
    create_binding,
)


# =============================================================================
# Test Helpers
# =============================================================================


def store_error() -> RoleBindingStoreError:
    return RoleBindingStoreError(
        code=ErrorCode.ROLE_BINDING_STORE_UNAVAILABLE,
        message="connection refused",
    )


def create_engine(
    store,
    *,
    catalog=None,
    cache=None,
    audit_sink=None,
    logger=None,
    **kwargs,
) -> tuple[AuthorizationEngine, AsyncMock, MagicMock]:
    """Create an engine with mocked audit sink and logger.

    Returns:
        Tuple of (engine, audit_sink, logger)
    """
    from scopeguard.domain.permissions import build_default_catalog
    from scopeguard.infrastructure.cache import InMemoryDecisionCache

    sink = audit_sink or AsyncMock()
    sink.record.return_value = Success(value=None)
    log = logger or MagicMock()
    engine = AuthorizationEngine(
        catalog=catalog or build_default_catalog(),
        store=store,
        cache=cache or InMemoryDecisionCache(),
        audit_sink=sink,
        logger=log,
        clock=kwargs.pop("clock", lambda: FIXED_NOW),
        **kwargs,
    )
    return engine, sink, log


def mock_store(
    bindings: list[RoleBinding] | None = None,
    permissions: dict[str, frozenset[str]] | None = None,
) -> AsyncMock:
    """Store mock answering from fixed bindings and role permission sets."""
    store = AsyncMock()
    store.roles_for_subject.return_value = Success(value=list(bindings or []))
    role_permissions = permissions or {}

    async def permissions_for_role(role_id: str):
        return Success(value=role_permissions.get(role_id, frozenset()))

    store.permissions_for_role.side_effect = permissions_for_role
    return store


def mock_decision_cache(generation: int = 0) -> AsyncMock:
    """Decision cache mock: fixed generation, always a miss, puts succeed."""
    cache = AsyncMock()
    cache.generation.return_value = Success(value=generation)
    cache.get.return_value = Success(value=None)
    cache.put.return_value = Success(value=None)
    return cache


# =============================================================================
# Hierarchy Matching
# =============================================================================


@pytest.mark.unit
class TestHierarchyMatching:
    """Tests for scope containment across the hierarchy."""

    async def test_super_admin_allowed_everywhere(self, engine, store):
        await store.grant(create_binding(role_id=SUPER_ADMIN_ROLE_ID))

        assert await engine.check("alice", Permission.VM_DELETE, GUEST_100)
        assert await engine.check("alice", Permission.NODE_MANAGE, NODE_PVE02)
        assert await engine.check("alice", Permission.CONNECTION_MANAGE, OTHER_CONNECTION)
        assert await engine.check("alice", Permission.ADMIN_COMPLIANCE)

    async def test_node_operator_scenario(self, engine, store):
        """Operator bound to pve01 controls guests on pve01 only."""
        await store.grant(
            create_binding(scope_kind=ResourceKind.NODE, scope_resource_id=NODE_PVE01)
        )

        allowed = await engine.evaluate("alice", Permission.VM_START, GUEST_100)
        other_node = await engine.evaluate("alice", Permission.VM_START, GUEST_200)
        node_view = await engine.evaluate("alice", Permission.NODE_VIEW, NODE_PVE01)
        connection_view = await engine.evaluate("alice", Permission.CONNECTION_VIEW, CONNECTION)
        not_in_role = await engine.evaluate("alice", Permission.VM_DELETE, GUEST_100)

        assert allowed.allowed is True
        assert allowed.matched_binding.scope_resource_id == NODE_PVE01
        assert other_node.reason is DecisionReason.NO_MATCHING_BINDING
        assert node_view.allowed is True
        assert connection_view.reason is DecisionReason.NO_MATCHING_BINDING
        assert not_in_role.reason is DecisionReason.NO_MATCHING_BINDING

    async def test_admin_compliance_scenario(self, engine, store):
        """Global viewer cannot run compliance checks; super admin can."""
        await store.grant(create_binding(subject_id="vera", role_id="role_viewer"))
        await store.grant(create_binding(subject_id="root", role_id=SUPER_ADMIN_ROLE_ID))

        viewer = await engine.evaluate("vera", Permission.ADMIN_COMPLIANCE)
        admin = await engine.evaluate("root", Permission.ADMIN_COMPLIANCE)

        assert viewer.reason is DecisionReason.NO_MATCHING_BINDING
        assert admin.allowed is True

    async def test_connection_binding_covers_descendants(self, engine, store):
        await store.grant(
            create_binding(
                role_id="role_viewer",
                scope_kind=ResourceKind.CONNECTION,
                scope_resource_id=CONNECTION,
            )
        )

        assert await engine.check("alice", Permission.CONNECTION_VIEW, CONNECTION)
        assert await engine.check("alice", Permission.NODE_VIEW, NODE_PVE02)
        assert await engine.check("alice", Permission.VM_VIEW, GUEST_200)
        assert not await engine.check("alice", Permission.VM_VIEW, OTHER_GUEST)

    async def test_containment_is_monotonic(self, engine, store):
        """Allowed at a resource implies allowed at every descendant."""
        await store.grant(
            create_binding(
                role_id="role_viewer",
                scope_kind=ResourceKind.NODE,
                scope_resource_id=NODE_PVE01,
            )
        )

        node = await engine.check("alice", Permission.VM_VIEW, NODE_PVE01)
        guest = await engine.check("alice", Permission.VM_VIEW, GUEST_100)

        assert node is True
        assert guest is True

    async def test_wildcard_node_binding(self, engine, store):
        await store.grant(create_binding(scope_kind=ResourceKind.NODE))

        assert await engine.check("alice", Permission.VM_START, GUEST_200)
        assert await engine.check("alice", Permission.VM_START, OTHER_GUEST)
        assert await engine.check("alice", Permission.NODE_VIEW, NODE_PVE02)
        assert not await engine.check("alice", Permission.CONNECTION_VIEW, CONNECTION)

    async def test_scoped_binding_never_grants_global_permission(self, engine, store):
        await store.grant(
            create_binding(
                role_id=SUPER_ADMIN_ROLE_ID,
                scope_kind=ResourceKind.CONNECTION,
                scope_resource_id=CONNECTION,
            )
        )

        decision = await engine.evaluate("alice", Permission.ADMIN_RBAC)

        assert decision.reason is DecisionReason.NO_MATCHING_BINDING

    async def test_most_specific_binding_reported(self, engine, store):
        await store.grant(create_binding(role_id="role_viewer"))
        await store.grant(
            create_binding(scope_kind=ResourceKind.NODE, scope_resource_id=NODE_PVE01)
        )

        decision = await engine.evaluate("alice", Permission.VM_VIEW, GUEST_100)

        assert decision.allowed is True
        assert decision.matched_binding.role_id == "role_operator"
        assert decision.matched_binding.scope_kind is ResourceKind.NODE

    async def test_global_permission_accepts_explicit_wildcard(self, engine, store):
        await store.grant(create_binding(role_id=SUPER_ADMIN_ROLE_ID))

        assert await engine.check("alice", Permission.ADMIN_AUDIT, "*")
        assert await engine.check("alice", Permission.ADMIN_AUDIT, "")

    async def test_accepts_parsed_identifier_and_plain_key(self, engine, store):
        await store.grant(create_binding(role_id="role_viewer"))

        decision = await engine.evaluate("alice", "vm.view", ResourceIdentifier.parse(GUEST_100))

        assert decision.allowed is True

    async def test_no_cross_subject_leakage(self, engine, store):
        await store.grant(create_binding(subject_id="alice", role_id=SUPER_ADMIN_ROLE_ID))

        decision = await engine.evaluate("bob", Permission.VM_VIEW, GUEST_100)

        assert decision.reason is DecisionReason.NO_ROLES_ASSIGNED

    async def test_evaluation_is_idempotent(self, engine, store):
        await store.grant(
            create_binding(scope_kind=ResourceKind.NODE, scope_resource_id=NODE_PVE01)
        )

        first = await engine.evaluate("alice", Permission.VM_START, GUEST_100)
        second = await engine.evaluate("alice", Permission.VM_START, GUEST_100)

        assert first == second

    async def test_decision_response_shape(self, engine):
        decision = await engine.evaluate("alice", Permission.VM_VIEW, GUEST_100)

        assert decision.as_response() == {"allowed": False, "reason": "no_roles_assigned"}


# =============================================================================
# Validation Denials
# =============================================================================


@pytest.mark.unit
class TestValidationDenials:
    """Tests for checks rejected before the store is consulted."""

    async def test_unknown_permission(self):
        store = mock_store()
        engine, _, logger = create_engine(store)

        decision = await engine.evaluate("alice", "vm.teleport", GUEST_100)

        assert decision.reason is DecisionReason.UNKNOWN_PERMISSION
        store.roles_for_subject.assert_not_called()
        assert logger.error.call_args.args[0] == "authorization_invalid_check"

    @pytest.mark.parametrize(
        ("permission", "resource_id"),
        [
            (Permission.VM_VIEW, None),
            (Permission.VM_VIEW, ""),
            (Permission.VM_VIEW, "*"),
            (Permission.VM_VIEW, "pve01"),
            (Permission.NODE_VIEW, "node=pve01"),
            (Permission.ADMIN_COMPLIANCE, NODE_PVE01),
            (Permission.ADMIN_COMPLIANCE, "garbage"),
        ],
    )
    async def test_scope_mismatch(self, permission, resource_id):
        store = mock_store()
        engine, _, _ = create_engine(store)

        decision = await engine.evaluate("alice", permission, resource_id)

        assert decision.reason is DecisionReason.SCOPE_MISMATCH
        store.roles_for_subject.assert_not_called()

    async def test_coarser_resource_is_not_a_scope_mismatch(self, engine, store):
        """A guest permission checked at a node is decided by containment."""
        await store.grant(create_binding(scope_kind=ResourceKind.GUEST, scope_resource_id=GUEST_100))

        decision = await engine.evaluate("alice", Permission.VM_VIEW, NODE_PVE01)

        assert decision.reason is DecisionReason.NO_MATCHING_BINDING

    async def test_empty_subject(self):
        store = mock_store()
        engine, _, _ = create_engine(store)

        decision = await engine.evaluate("", Permission.VM_VIEW, GUEST_100)

        assert decision.reason is DecisionReason.NO_ROLES_ASSIGNED
        store.roles_for_subject.assert_not_called()

    async def test_empty_subject_after_validation(self):
        engine, _, _ = create_engine(mock_store())

        decision = await engine.evaluate("", "vm.teleport", GUEST_100)

        assert decision.reason is DecisionReason.UNKNOWN_PERMISSION


# =============================================================================
# Fail-Closed Behavior
# =============================================================================


@pytest.mark.unit
class TestFailClosed:
    """Tests for store failures, exceptions and timeouts."""

    async def test_store_failure_denies(self):
        store = mock_store()
        store.roles_for_subject.return_value = Failure(error=store_error())
        engine, _, logger = create_engine(store)

        decision = await engine.evaluate("alice", Permission.VM_VIEW, GUEST_100)

        assert decision.reason is DecisionReason.STORE_UNAVAILABLE
        assert logger.warning.call_args.args[0] == "authorization_store_unavailable"

    async def test_store_failure_not_cached(self):
        store = mock_store()
        store.roles_for_subject.return_value = Failure(error=store_error())
        engine, _, _ = create_engine(store)

        await engine.evaluate("alice", Permission.VM_VIEW, GUEST_100)
        await engine.evaluate("alice", Permission.VM_VIEW, GUEST_100)

        assert store.roles_for_subject.await_count == 2

    async def test_store_exception_denies(self):
        store = mock_store()
        store.roles_for_subject.side_effect = ConnectionError("reset by peer")
        engine, _, _ = create_engine(store)

        decision = await engine.evaluate("alice", Permission.VM_VIEW, GUEST_100)

        assert decision.reason is DecisionReason.STORE_UNAVAILABLE

    async def test_role_expansion_failure_denies(self):
        store = mock_store(bindings=[create_binding()])
        store.permissions_for_role.side_effect = None
        store.permissions_for_role.return_value = Failure(error=store_error())
        engine, _, _ = create_engine(store)

        decision = await engine.evaluate("alice", Permission.VM_VIEW, GUEST_100)

        assert decision.reason is DecisionReason.STORE_UNAVAILABLE

    async def test_role_expansion_exception_denies(self):
        store = mock_store(bindings=[create_binding()])
        store.permissions_for_role.side_effect = RuntimeError("boom")
        engine, _, _ = create_engine(store)

        decision = await engine.evaluate("alice", Permission.VM_VIEW, GUEST_100)

        assert decision.reason is DecisionReason.STORE_UNAVAILABLE

    async def test_store_timeout_denies(self):
        store = mock_store()

        async def slow_roles(subject_id: str):
            await asyncio.sleep(5)
            return Success(value=[])

        store.roles_for_subject.side_effect = slow_roles
        engine, _, _ = create_engine(store, store_timeout_seconds=0.01)

        result = await engine.resolve_grants("alice")
        decision = await engine.evaluate("alice", Permission.VM_VIEW, GUEST_100)

        assert isinstance(result, Failure)
        assert result.error.code is ErrorCode.ROLE_BINDING_STORE_TIMEOUT
        assert decision.reason is DecisionReason.STORE_UNAVAILABLE

    async def test_role_expansion_timeout_denies(self):
        store = mock_store(bindings=[create_binding()])

        async def slow_permissions(role_id: str):
            await asyncio.sleep(5)
            return Success(value=frozenset({"vm.view"}))

        store.permissions_for_role.side_effect = slow_permissions
        engine, _, _ = create_engine(store, store_timeout_seconds=0.01)

        decision = await engine.evaluate("alice", Permission.VM_VIEW, GUEST_100)

        assert decision.reason is DecisionReason.STORE_UNAVAILABLE

    async def test_unexpected_exception_denies(self):
        catalog = MagicMock()
        catalog.kind_of.side_effect = RuntimeError("corrupted")
        engine, _, logger = create_engine(mock_store(), catalog=catalog)

        decision = await engine.evaluate("alice", Permission.VM_VIEW, GUEST_100)

        assert decision.reason is DecisionReason.STORE_UNAVAILABLE
        assert logger.error.call_args_list[0].args[0] == "authorization_evaluation_failed"

    async def test_roles_expanded_once_per_role(self):
        bindings = [
            create_binding(scope_kind=ResourceKind.NODE, scope_resource_id=NODE_PVE01),
            create_binding(scope_kind=ResourceKind.NODE, scope_resource_id=NODE_PVE02),
        ]
        store = mock_store(bindings, {"role_operator": frozenset({"vm.start"})})
        engine, _, _ = create_engine(store)

        decision = await engine.evaluate("alice", Permission.VM_START, GUEST_200)

        assert decision.allowed is True
        store.permissions_for_role.assert_awaited_once_with("role_operator")


# =============================================================================
# Binding Filtering
# =============================================================================


@pytest.mark.unit
class TestBindingFiltering:
    """Tests for expired, disabled and foreign bindings."""

    async def test_expired_binding_ignored(self, engine, store):
        await store.grant(create_binding(expires_at=FIXED_NOW - timedelta(minutes=1)))

        decision = await engine.evaluate("alice", Permission.VM_VIEW, GUEST_100)

        assert decision.reason is DecisionReason.NO_ROLES_ASSIGNED

    async def test_binding_not_yet_expired_applies(self, engine, store):
        await store.grant(create_binding(expires_at=FIXED_NOW + timedelta(minutes=1)))

        assert await engine.check("alice", Permission.VM_VIEW, GUEST_100)

    async def test_disabled_binding_ignored(self, engine, store):
        await store.grant(create_binding(disabled=True))

        decision = await engine.evaluate("alice", Permission.VM_VIEW, GUEST_100)

        assert decision.reason is DecisionReason.NO_ROLES_ASSIGNED

    async def test_expired_binding_ignored_among_active(self, engine, store):
        await store.grant(
            create_binding(role_id=SUPER_ADMIN_ROLE_ID, expires_at=FIXED_NOW - timedelta(days=1))
        )
        await store.grant(create_binding(role_id="role_viewer"))

        decision = await engine.evaluate("alice", Permission.VM_DELETE, GUEST_100)

        assert decision.reason is DecisionReason.NO_MATCHING_BINDING

    async def test_foreign_subject_bindings_dropped(self):
        store = mock_store(
            bindings=[create_binding(subject_id="bob", role_id=SUPER_ADMIN_ROLE_ID)],
            permissions={SUPER_ADMIN_ROLE_ID: frozenset({"vm.view"})},
        )
        engine, _, _ = create_engine(store)

        decision = await engine.evaluate("alice", Permission.VM_VIEW, GUEST_100)

        assert decision.reason is DecisionReason.NO_ROLES_ASSIGNED

    async def test_unknown_role_grants_nothing(self, engine, store):
        await store.grant(create_binding(role_id="role_deleted"))

        decision = await engine.evaluate("alice", Permission.VM_VIEW, GUEST_100)

        assert decision.reason is DecisionReason.NO_MATCHING_BINDING


# =============================================================================
# Decision Cache
# =============================================================================


@pytest.mark.unit
class TestDecisionCaching:
    """Tests for cache hits, misses and cache faults."""

    async def test_second_check_served_from_cache(self, engine, store, audit_sink):
        store.roles_for_subject = AsyncMock(wraps=store.roles_for_subject)
        await store.grant(create_binding(role_id="role_viewer"))

        await engine.evaluate("alice", Permission.NODE_VIEW, NODE_PVE01)
        await engine.evaluate("alice", Permission.NODE_VIEW, NODE_PVE01)

        assert store.roles_for_subject.await_count == 1

    async def test_cached_denial_audited_as_cached(self, engine, audit_sink):
        await engine.evaluate("alice", Permission.VM_VIEW, GUEST_100)
        await engine.evaluate("alice", Permission.VM_VIEW, GUEST_100)
        await engine.drain_audit()

        cached_flags = [call.args[0].cached for call in audit_sink.record.await_args_list]
        assert cached_flags == [False, True]

    async def test_cache_keyed_by_resource(self, engine, store):
        await store.grant(
            create_binding(scope_kind=ResourceKind.NODE, scope_resource_id=NODE_PVE01)
        )

        assert await engine.check("alice", Permission.VM_START, GUEST_100)
        assert not await engine.check("alice", Permission.VM_START, GUEST_200)
        assert await engine.check("alice", Permission.VM_START, GUEST_100)

    async def test_validation_denials_not_cached(self, engine, decision_cache):
        await engine.evaluate("alice", "vm.teleport", GUEST_100)
        await engine.evaluate("alice", Permission.VM_VIEW, None)

        assert len(decision_cache) == 0

    async def test_cache_read_failure_falls_through(self, store):
        await store.grant(create_binding(role_id="role_viewer"))
        cache = mock_decision_cache()
        cache.get.return_value = Failure(
            error=CacheError(
                code=ErrorCode.DECISION_CACHE_FAILED,
                infrastructure_code=InfrastructureErrorCode.CACHE_GET_ERROR,
                message="redis down",
            )
        )
        cache.put.return_value = Success(value=None)
        engine, _, logger = create_engine(store, cache=cache)

        decision = await engine.evaluate("alice", Permission.VM_VIEW, GUEST_100)

        assert decision.allowed is True
        warning_events = [call.args[0] for call in logger.warning.call_args_list]
        assert "decision_cache_get_failed" in warning_events

    async def test_cache_exception_falls_through(self, store):
        await store.grant(create_binding(role_id="role_viewer"))
        cache = mock_decision_cache()
        cache.get.side_effect = OSError("socket closed")
        cache.put.side_effect = OSError("socket closed")
        engine, _, _ = create_engine(store, cache=cache)

        decision = await engine.evaluate("alice", Permission.VM_VIEW, GUEST_100)

        assert decision.allowed is True

    async def test_cache_put_uses_configured_ttl(self, store):
        await store.grant(create_binding(role_id="role_viewer"))
        cache = mock_decision_cache(generation=7)
        engine, _, _ = create_engine(store, cache=cache, decision_ttl_seconds=30)

        await engine.evaluate("alice", Permission.VM_VIEW, GUEST_100)

        key, decision, ttl = cache.put.await_args.args
        assert key.subject_id == "alice"
        assert key.permission == "vm.view"
        assert key.resource_id == GUEST_100
        assert key.generation == 7
        assert isinstance(decision, Decision)
        assert ttl == 30

    async def test_generation_read_before_store(self, store):
        await store.grant(create_binding(role_id="role_viewer"))
        calls = []

        def generation(subject_id):
            calls.append("generation")
            return Success(value=0)

        cache = mock_decision_cache()
        cache.generation.side_effect = generation
        roles_for_subject = store.roles_for_subject

        async def tracked_roles_for_subject(subject_id):
            calls.append("roles_for_subject")
            return await roles_for_subject(subject_id)

        store.roles_for_subject = tracked_roles_for_subject
        engine, _, _ = create_engine(store, cache=cache)

        await engine.evaluate("alice", Permission.VM_VIEW, GUEST_100)

        assert calls == ["generation", "roles_for_subject"]

    async def test_revocation_during_role_expansion_not_cached(
        self, engine, store, decision_cache
    ):
        binding = create_binding(scope_kind=ResourceKind.NODE, scope_resource_id=NODE_PVE01)
        await store.grant(binding)
        expanding = asyncio.Event()
        release = asyncio.Event()
        permissions_for_role = store.permissions_for_role

        async def gated_permissions_for_role(role_id):
            expanding.set()
            await release.wait()
            return await permissions_for_role(role_id)

        store.permissions_for_role = gated_permissions_for_role
        in_flight = asyncio.create_task(
            engine.evaluate("alice", Permission.NODE_VIEW, NODE_PVE01)
        )
        await expanding.wait()
        await store.revoke("alice", "role_operator", NODE_PVE01)
        await decision_cache.invalidate_subject("alice")
        release.set()
        in_flight_decision = await in_flight
        store.permissions_for_role = permissions_for_role

        decision = await engine.evaluate("alice", Permission.NODE_VIEW, NODE_PVE01)

        # The in-flight check linearizes before the revoke; later ones must not see it.
        assert in_flight_decision.allowed is True
        assert decision.reason is DecisionReason.NO_ROLES_ASSIGNED
        assert len(decision_cache) == 1

    async def test_generation_failure_bypasses_cache(self, store):
        await store.grant(create_binding(role_id="role_viewer"))
        cache = mock_decision_cache()
        cache.generation.return_value = Failure(
            error=CacheError(
                code=ErrorCode.DECISION_CACHE_FAILED,
                infrastructure_code=InfrastructureErrorCode.CACHE_GET_ERROR,
                message="redis down",
            )
        )
        engine, _, logger = create_engine(store, cache=cache)

        decision = await engine.evaluate("alice", Permission.VM_VIEW, GUEST_100)

        assert decision.allowed is True
        cache.get.assert_not_awaited()
        cache.put.assert_not_awaited()
        warning_events = [call.args[0] for call in logger.warning.call_args_list]
        assert "decision_cache_generation_failed" in warning_events

    async def test_allow_ttl_capped_at_binding_expiry(self, store):
        await store.grant(
            create_binding(role_id="role_viewer", expires_at=FIXED_NOW + timedelta(seconds=3))
        )
        cache = mock_decision_cache()
        engine, _, _ = create_engine(store, cache=cache, decision_ttl_seconds=30)

        decision = await engine.evaluate("alice", Permission.VM_VIEW, GUEST_100)

        assert decision.allowed is True
        assert cache.put.await_args.args[2] == 3

    async def test_allow_expiring_within_a_second_not_cached(self, store):
        await store.grant(
            create_binding(
                role_id="role_viewer", expires_at=FIXED_NOW + timedelta(milliseconds=500)
            )
        )
        cache = mock_decision_cache()
        engine, _, _ = create_engine(store, cache=cache)

        decision = await engine.evaluate("alice", Permission.VM_VIEW, GUEST_100)

        assert decision.allowed is True
        cache.put.assert_not_awaited()


# =============================================================================
# Audit
# =============================================================================


@pytest.mark.unit
class TestAudit:
    """Tests for audit emission."""

    async def test_denials_always_audited(self, engine, audit_sink):
        await engine.evaluate("alice", Permission.ADMIN_RBAC)
        await engine.drain_audit()

        record = audit_sink.record.await_args.args[0]
        assert record.action is AuditAction.ACCESS_DENIED
        assert record.reason is DecisionReason.NO_ROLES_ASSIGNED
        assert record.permission == "admin.rbac"
        assert record.timestamp == FIXED_NOW

    async def test_validation_denials_audited(self, engine, audit_sink):
        await engine.evaluate("alice", "vm.teleport", GUEST_100)
        await engine.drain_audit()

        assert audit_sink.record.await_args.args[0].reason is DecisionReason.UNKNOWN_PERMISSION

    async def test_allows_not_audited_by_default(self, engine, store, audit_sink):
        await store.grant(create_binding(role_id="role_viewer"))

        await engine.evaluate("alice", Permission.VM_VIEW, GUEST_100)
        await engine.drain_audit()

        audit_sink.record.assert_not_awaited()

    async def test_allows_audited_when_enabled(self, store):
        await store.grant(create_binding(role_id="role_viewer"))
        engine, sink, _ = create_engine(store, audit_allowed_decisions=True)

        await engine.evaluate("alice", Permission.VM_VIEW, GUEST_100)
        await engine.drain_audit()

        record = sink.record.await_args.args[0]
        assert record.action is AuditAction.ACCESS_GRANTED
        assert record.matched_role_id == "role_viewer"
        assert record.matched_scope == "*"

    async def test_audit_failure_does_not_change_decision(self, store):
        sink = AsyncMock()
        engine, _, logger = create_engine(store, audit_sink=sink)
        sink.record.side_effect = RuntimeError("disk full")

        decision = await engine.evaluate("alice", Permission.VM_VIEW, GUEST_100)
        await engine.drain_audit()

        assert decision.reason is DecisionReason.NO_ROLES_ASSIGNED
        error_events = [call.args[0] for call in logger.error.call_args_list]
        assert "authorization_audit_failed" in error_events

    async def test_drain_without_pending_audits(self, engine):
        await engine.drain_audit()
