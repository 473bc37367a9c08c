"""Authorization engine.

Answers "may subject S exercise permission P on resource R?" with an
immutable Decision. The engine is the only place that combines catalog,
bindings and hierarchy matching; callers map a Deny to their own protocol
response (HTTP 403, RPC error...).

Evaluation order:
    1. Permission kind from catalog            → Deny(UNKNOWN_PERMISSION)
    2. Resource validated against the kind     → Deny(SCOPE_MISMATCH)
    3. Empty subject                           → Deny(NO_ROLES_ASSIGNED)
    4. Subject cache generation read, decision cache lookup (hit returns)
    5. Bindings fetched, expired/disabled dropped → Deny(NO_ROLES_ASSIGNED)
    6. Distinct roles expanded concurrently
       (any store failure or timeout)          → Deny(STORE_UNAVAILABLE)
    7. Bindings whose role grants P and whose scope contains R
       none                                    → Deny(NO_MATCHING_BINDING)
       some                                    → Allow(most specific binding)
    8. Decision cached (never STORE_UNAVAILABLE), audited, returned

Steps 1-3 perform no I/O. A failed store call is never retried.

Failure policy:
    ``evaluate`` never raises. Store errors, store timeouts, cache errors,
    audit errors and unexpected exceptions all end in a Deny (or, for the
    cache and audit, are logged and ignored). Task cancellation is the one
    exception that propagates.

Audit:
    Every Deny is audited; Allow decisions only when
    ``audit_allowed_decisions`` is set. Audit writes run as background
    tasks so a slow sink never delays a decision. ``drain_audit()`` awaits
    outstanding writes (shutdown, tests).

Usage:
    engine = AuthorizationEngine(
        catalog=build_default_catalog(),
        store=store,
        cache=InMemoryDecisionCache(),
        audit_sink=LoggingAuditSink(logger),
        logger=logger,
    )
    decision = await engine.evaluate(
        "alice", Permission.NODE_VIEW, build_node_resource_id("abc", "pve01")
    )
"""

import asyncio
import math
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime
from typing import Any, TypeVar

from scopeguard.core.enums import ErrorCode
from scopeguard.core.result import Failure, Result, Success
from scopeguard.domain.entities import AuditRecord, Decision, Grant
from scopeguard.domain.enums import DecisionReason, Permission, ResourceKind, permission_key
from scopeguard.domain.errors import (
    InvalidResourceIdentifierError,
    RoleBindingStoreError,
    UnknownPermissionError,
)
from scopeguard.domain.permissions import PermissionCatalog
from scopeguard.domain.protocols import (
    AuditSinkProtocol,
    DecisionCacheProtocol,
    DecisionKey,
    LoggerProtocol,
    RoleBindingStoreProtocol,
)
from scopeguard.domain.value_objects import ResourceIdentifier

T = TypeVar("T")


def _utc_now() -> datetime:
    return datetime.now(UTC)


class AuthorizationEngine:
    """Resource-scoped authorization decision engine.

    Implements AuthorizationProtocol. Safe to share across concurrent tasks:
    it holds no per-request state apart from the set of in-flight audit
    tasks.

    Args:
        catalog: Frozen permission catalog.
        store: Role binding store.
        cache: Decision cache.
        audit_sink: Audit destination.
        logger: Structured logger.
        decision_ttl_seconds: Lifetime of cached decisions.
        store_timeout_seconds: Deadline for each store round-trip.
        audit_allowed_decisions: Also audit Allow decisions.
        clock: Wall clock used for binding expiry and audit timestamps.
    """

    def __init__(
        self,
        *,
        catalog: PermissionCatalog,
        store: RoleBindingStoreProtocol,
        cache: DecisionCacheProtocol,
        audit_sink: AuditSinkProtocol,
        logger: LoggerProtocol,
        decision_ttl_seconds: int = 5,
        store_timeout_seconds: float = 2.0,
        audit_allowed_decisions: bool = False,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._catalog = catalog
        self._store = store
        self._cache = cache
        self._audit_sink = audit_sink
        self._logger = logger
        self._decision_ttl = decision_ttl_seconds
        self._store_timeout = store_timeout_seconds
        self._audit_allowed = audit_allowed_decisions
        self._clock = clock
        self._audit_tasks: set[asyncio.Task[None]] = set()

    @property
    def catalog(self) -> PermissionCatalog:
        return self._catalog

    async def evaluate(
        self,
        subject_id: str,
        permission: Permission | str,
        resource_id: ResourceIdentifier | str | None = None,
    ) -> Decision:
        """Decide a single check.

        Args:
            subject_id: Authenticated subject.
            permission: Permission key or Permission member.
            resource_id: Encoded resource identifier (or parsed one); None
                or empty for global permissions.

        Returns:
            Decision: Allow with the matching binding, or Deny with reason.
        """
        key = permission_key(permission)
        if isinstance(resource_id, ResourceIdentifier):
            resource_text: str | None = resource_id.encode()
        else:
            resource_text = resource_id or None

        context: dict[str, Any] = {}
        cached = False
        try:
            decision, cached = await self._decide(subject_id, key, resource_text, context)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            self._logger.error(
                "authorization_evaluation_failed",
                error=e,
                subject_id=subject_id,
                permission=key,
                resource_id=resource_text,
            )
            decision = Decision.deny(DecisionReason.STORE_UNAVAILABLE)

        self._log_decision(decision, subject_id, key, resource_text, cached, context)
        if not decision.allowed or self._audit_allowed:
            self._emit_audit(
                AuditRecord.from_decision(
                    timestamp=self._clock(),
                    subject_id=subject_id,
                    permission=key,
                    resource_id=resource_text,
                    decision=decision,
                    cached=cached,
                )
            )
        return decision

    async def check(
        self,
        subject_id: str,
        permission: Permission | str,
        resource_id: ResourceIdentifier | str | None = None,
    ) -> bool:
        """Boolean shorthand for ``evaluate(...).allowed``."""
        decision = await self.evaluate(subject_id, permission, resource_id)
        return decision.allowed

    async def resolve_grants(
        self, subject_id: str
    ) -> Result[list[Grant], RoleBindingStoreError]:
        """Active bindings of a subject paired with their roles' permissions.

        Expired, disabled and foreign-subject bindings are dropped. Each
        distinct role is expanded once; expansions run concurrently under a
        single deadline.

        Returns:
            Success(list[Grant]) (empty when no active bindings remain) or
            Failure(RoleBindingStoreError) on any store failure.
        """
        bindings_result = await self._call_store(
            self._store.roles_for_subject, subject_id
        )
        if isinstance(bindings_result, Failure):
            return bindings_result

        now = self._clock()
        active = [
            binding
            for binding in bindings_result.value
            if binding.subject_id == subject_id and binding.is_active(now)
        ]
        if not active:
            return Success(value=[])

        role_ids = list(dict.fromkeys(binding.role_id for binding in active))
        try:
            async with asyncio.timeout(self._store_timeout):
                results = await asyncio.gather(
                    *(self._store.permissions_for_role(role_id) for role_id in role_ids),
                    return_exceptions=True,
                )
        except TimeoutError:
            return Failure(error=self._timeout_error("permissions_for_role"))

        permissions: dict[str, frozenset[str]] = {}
        for role_id, result in zip(role_ids, results, strict=True):
            if isinstance(result, BaseException):
                return Failure(
                    error=self._unavailable_error("permissions_for_role", result, role_id=role_id)
                )
            if isinstance(result, Failure):
                return result
            permissions[role_id] = frozenset(result.value)

        return Success(
            value=[Grant(binding, permissions[binding.role_id]) for binding in active]
        )

    def resolve_resource(
        self, required_kind: ResourceKind, resource_id: str | None
    ) -> Result[ResourceIdentifier | None, str]:
        """Validate a requested resource against a permission's kind.

        Global permissions take no resource (``*`` is tolerated as an
        explicit spelling of "global"). Scoped permissions need a concrete,
        non-global identifier; it may be of any kind, containment decides
        the rest.

        Returns:
            Success(parsed identifier or None) or Failure(explanation).
        """
        if required_kind is ResourceKind.GLOBAL:
            if resource_id is None:
                return Success(value=None)
            try:
                parsed = ResourceIdentifier.parse(resource_id)
            except InvalidResourceIdentifierError as e:
                return Failure(error=str(e))
            if not parsed.is_global:
                return Failure(
                    error=f"Global permission checked against resource '{resource_id}'"
                )
            return Success(value=None)

        if resource_id is None:
            return Failure(error=f"A {required_kind.value} permission requires a resource")
        try:
            parsed = ResourceIdentifier.parse(resource_id)
        except InvalidResourceIdentifierError as e:
            return Failure(error=str(e))
        if parsed.is_global:
            return Failure(
                error=f"A {required_kind.value} permission cannot be checked globally"
            )
        return Success(value=parsed)

    async def drain_audit(self) -> None:
        """Wait for every in-flight audit write to finish."""
        while self._audit_tasks:
            await asyncio.gather(*list(self._audit_tasks), return_exceptions=True)

    async def _decide(
        self,
        subject_id: str,
        permission: str,
        resource_id: str | None,
        context: dict[str, Any],
    ) -> tuple[Decision, bool]:
        try:
            required_kind = self._catalog.kind_of(permission)
        except UnknownPermissionError as e:
            context["detail"] = str(e)
            return Decision.deny(DecisionReason.UNKNOWN_PERMISSION), False
        context["required_kind"] = required_kind.value

        match self.resolve_resource(required_kind, resource_id):
            case Failure(error=detail):
                context["detail"] = detail
                return Decision.deny(DecisionReason.SCOPE_MISMATCH), False
            case Success(value=resource):
                pass

        if not subject_id:
            context["detail"] = "empty subject"
            return Decision.deny(DecisionReason.NO_ROLES_ASSIGNED), False

        # Read before the store so an invalidation during evaluation
        # supersedes the key this decision would be cached under.
        cache_key: DecisionKey | None = None
        generation = await self._cache_generation(subject_id)
        if generation is not None:
            cache_key = DecisionKey(
                subject_id=subject_id,
                permission=permission,
                resource_id=resource.encode() if resource is not None else None,
                generation=generation,
            )
            cached_decision = await self._cache_get(cache_key)
            if cached_decision is not None:
                return cached_decision, True

        match await self.resolve_grants(subject_id):
            case Failure(error=error):
                context["error_code"] = error.code.value
                context["detail"] = error.message
                return Decision.deny(DecisionReason.STORE_UNAVAILABLE), False
            case Success(value=grants):
                pass

        if not grants:
            decision = Decision.deny(DecisionReason.NO_ROLES_ASSIGNED)
        else:
            decision = self._match(grants, permission, required_kind, resource)

        if cache_key is not None:
            await self._cache_put(cache_key, decision)
        return decision, False

    @staticmethod
    def _match(
        grants: list[Grant],
        permission: str,
        required_kind: ResourceKind,
        resource: ResourceIdentifier | None,
    ) -> Decision:
        matches = [
            grant.binding
            for grant in grants
            if grant.allows(permission, required_kind, resource)
        ]
        if not matches:
            return Decision.deny(DecisionReason.NO_MATCHING_BINDING)
        # max() keeps the first of equally specific bindings.
        best = max(matches, key=lambda binding: binding.specificity)
        return Decision.allow(best)

    async def _call_store(
        self,
        operation: Callable[[str], Awaitable[Result[T, RoleBindingStoreError]]],
        argument: str,
    ) -> Result[T, RoleBindingStoreError]:
        name = getattr(operation, "__name__", "store_call")
        try:
            async with asyncio.timeout(self._store_timeout):
                return await operation(argument)
        except TimeoutError:
            return Failure(error=self._timeout_error(name))
        except asyncio.CancelledError:
            raise
        except Exception as e:
            return Failure(error=self._unavailable_error(name, e))

    async def _cache_generation(self, subject_id: str) -> int | None:
        try:
            result = await self._cache.generation(subject_id)
        except Exception as e:
            self._logger.warning(
                "decision_cache_generation_failed",
                error_type=type(e).__name__,
                error_message=str(e),
            )
            return None
        if isinstance(result, Failure):
            self._logger.warning(
                "decision_cache_generation_failed",
                error_code=result.error.code.value,
                error_message=result.error.message,
            )
            return None
        return result.value

    async def _cache_get(self, key: DecisionKey) -> Decision | None:
        try:
            result = await self._cache.get(key)
        except Exception as e:
            self._logger.warning(
                "decision_cache_get_failed",
                error_type=type(e).__name__,
                error_message=str(e),
            )
            return None
        if isinstance(result, Failure):
            self._logger.warning(
                "decision_cache_get_failed",
                error_code=result.error.code.value,
                error_message=result.error.message,
            )
            return None
        return result.value

    async def _cache_put(self, key: DecisionKey, decision: Decision) -> None:
        if not decision.cacheable:
            return
        ttl = self._decision_ttl
        binding = decision.matched_binding
        if binding is not None and binding.expires_at is not None:
            # An Allow must not outlive the binding that granted it.
            remaining = math.floor((binding.expires_at - self._clock()).total_seconds())
            ttl = min(ttl, remaining)
            if ttl <= 0:
                return
        try:
            result = await self._cache.put(key, decision, ttl)
        except Exception as e:
            self._logger.warning(
                "decision_cache_put_failed",
                error_type=type(e).__name__,
                error_message=str(e),
            )
            return
        if isinstance(result, Failure):
            self._logger.warning(
                "decision_cache_put_failed",
                error_code=result.error.code.value,
                error_message=result.error.message,
            )

    def _emit_audit(self, record: AuditRecord) -> None:
        task = asyncio.create_task(self._write_audit(record))
        self._audit_tasks.add(task)
        task.add_done_callback(self._audit_tasks.discard)

    async def _write_audit(self, record: AuditRecord) -> None:
        try:
            result = await self._audit_sink.record(record)
        except Exception as e:
            self._logger.error(
                "authorization_audit_failed",
                error=e,
                subject_id=record.subject_id,
                permission=record.permission,
            )
            return
        if isinstance(result, Failure):
            self._logger.error(
                "authorization_audit_failed",
                error_code=result.error.code.value,
                error_message=result.error.message,
                subject_id=record.subject_id,
                permission=record.permission,
            )

    def _log_decision(
        self,
        decision: Decision,
        subject_id: str,
        permission: str,
        resource_id: str | None,
        cached: bool,
        context: dict[str, Any],
    ) -> None:
        fields: dict[str, Any] = {
            "subject_id": subject_id,
            "permission": permission,
            "resource_id": resource_id,
            "allowed": decision.allowed,
            "reason": decision.reason.value,
            "cached": cached,
            **context,
        }
        if decision.matched_binding is not None:
            fields["matched_role_id"] = decision.matched_binding.role_id
            fields["matched_scope"] = decision.matched_binding.scope_resource_id

        if decision.reason.is_caller_error:
            self._logger.error("authorization_invalid_check", **fields)
        elif decision.reason is DecisionReason.STORE_UNAVAILABLE:
            self._logger.warning("authorization_store_unavailable", **fields)
        else:
            self._logger.info("authorization_decision", **fields)

    def _timeout_error(self, operation: str) -> RoleBindingStoreError:
        return RoleBindingStoreError(
            code=ErrorCode.ROLE_BINDING_STORE_TIMEOUT,
            message=f"Role binding store {operation} exceeded {self._store_timeout}s",
            details={"operation": operation},
        )

    @staticmethod
    def _unavailable_error(
        operation: str, error: BaseException, **details: str
    ) -> RoleBindingStoreError:
        return RoleBindingStoreError(
            code=ErrorCode.ROLE_BINDING_STORE_UNAVAILABLE,
            message=f"Role binding store {operation} raised {type(error).__name__}: {error}",
            details={"operation": operation, "error_type": type(error).__name__, **details},
        )
