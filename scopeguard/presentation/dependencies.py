"""Authorization dependencies for FastAPI.

Gate routes on scoped permissions. Authentication happens upstream: some
middleware must place the authenticated subject on
``request.state.subject_id``. These dependencies only authorize.

Responses:
    401  no authenticated subject on the request
    403  "Permission denied" (the deny reason is logged and audited,
         never returned to the caller)

Usage:
    @router.post("/connections/{connection_id}/nodes/{node}/guests/{guest_type}/{vmid}/start")
    async def start_guest(
        _: None = Depends(
            require_permission(
                Permission.VM_START,
                resource_from=path_resource(
                    ResourceKind.GUEST, "connection_id", "node", "guest_type", "vmid"
                ),
            )
        ),
    ):
        ...

    @router.get("/admin/audit")
    async def audit_log(_: None = Depends(require_permission(Permission.ADMIN_AUDIT))):
        ...
"""

from collections.abc import Awaitable, Callable
from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from scopeguard.application.services import AuthorizationEngine
from scopeguard.core.config import get_settings
from scopeguard.core.container import (
    get_authorization_engine,
    get_logger,
    get_permission_catalog,
)
from scopeguard.domain.enums import Permission, ResourceKind, permission_key
from scopeguard.domain.errors import (
    InvalidResourceIdentifierError,
    UnknownPermissionError,
)
from scopeguard.domain.value_objects import (
    build_connection_resource_id,
    build_guest_resource_id,
    build_node_resource_id,
)

ResourceResolver = Callable[[Request], str | None]

PERMISSION_DENIED_DETAIL = "Permission denied"


def get_subject_id(request: Request) -> str:
    """Read the authenticated subject placed on the request upstream.

    Raises:
        HTTPException 401: No subject on the request.
    """
    subject_id = getattr(request.state, "subject_id", None)
    if not subject_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )
    return str(subject_id)


_PATH_BUILDERS: dict[ResourceKind, tuple[Callable[..., str], int]] = {
    ResourceKind.CONNECTION: (build_connection_resource_id, 1),
    ResourceKind.NODE: (build_node_resource_id, 2),
    ResourceKind.GUEST: (build_guest_resource_id, 4),
}


def path_resource(kind: ResourceKind, *param_names: str) -> ResourceResolver:
    """Build a resolver that encodes a resource from path parameters.

    Args:
        kind: Kind of the resource to build.
        *param_names: Path parameter names, outermost first:
            connection ``(connection_id)``, node ``(connection_id, node)``,
            guest ``(connection_id, node, guest_type, guest_id)``.

    Returns:
        Callable taking the request and returning the encoded identifier.

    Raises:
        ValueError: ``kind`` is global or the parameter count is wrong.
    """
    if kind not in _PATH_BUILDERS:
        raise ValueError(f"Cannot build a {kind.value} resource from path parameters")
    builder, arity = _PATH_BUILDERS[kind]
    if len(param_names) != arity:
        raise ValueError(
            f"A {kind.value} resource needs {arity} path parameter(s), got {len(param_names)}"
        )

    def resolve(request: Request) -> str:
        return builder(*(str(request.path_params[name]) for name in param_names))

    return resolve


def _validate_permissions(permissions: tuple[Permission | str, ...]) -> list[str]:
    # Unknown keys are a programming error: fail at import time outside
    # production; in production the route is left in place and every check
    # denies with unknown_permission.
    catalog = get_permission_catalog()
    keys = [permission_key(p) for p in permissions]
    for key in keys:
        if catalog.is_registered(key):
            continue
        if get_settings().is_production:
            get_logger().error(
                "route_permission_unknown",
                error=UnknownPermissionError(key),
                permission=key,
            )
        else:
            raise UnknownPermissionError(key)
    return keys


def _resolve_resource(request: Request, resource_from: ResourceResolver | None) -> str | None:
    if resource_from is None:
        return None
    try:
        return resource_from(request)
    except (InvalidResourceIdentifierError, KeyError) as e:
        get_logger().warning(
            "route_resource_unresolved",
            path=request.url.path,
            error_type=type(e).__name__,
            error_message=str(e),
        )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=PERMISSION_DENIED_DETAIL,
        ) from e


def require_permission(
    permission: Permission | str,
    resource_from: ResourceResolver | None = None,
) -> Callable[..., Awaitable[None]]:
    """Create a dependency that requires one permission.

    Args:
        permission: Permission to require.
        resource_from: Extracts the target resource from the request
            (omit for global permissions).

    Returns:
        Dependency function raising 403 when the engine denies.

    Raises:
        UnknownPermissionError: Permission not in the catalog (outside
            production, raised when the dependency is built).
    """
    (key,) = _validate_permissions((permission,))

    async def permission_checker(
        request: Request,
        subject_id: Annotated[str, Depends(get_subject_id)],
        engine: Annotated[AuthorizationEngine, Depends(get_authorization_engine)],
    ) -> None:
        resource_id = _resolve_resource(request, resource_from)
        decision = await engine.evaluate(subject_id, key, resource_id)
        if not decision.allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=PERMISSION_DENIED_DETAIL,
            )

    return permission_checker


def require_any_permission(
    *permissions: Permission | str,
    resource_from: ResourceResolver | None = None,
) -> Callable[..., Awaitable[None]]:
    """Create a dependency that requires at least one of the permissions.

    All permissions are checked against the same resource, so they should
    share a resource kind.
    """
    keys = _validate_permissions(permissions)

    async def permission_checker(
        request: Request,
        subject_id: Annotated[str, Depends(get_subject_id)],
        engine: Annotated[AuthorizationEngine, Depends(get_authorization_engine)],
    ) -> None:
        resource_id = _resolve_resource(request, resource_from)
        for key in keys:
            if await engine.check(subject_id, key, resource_id):
                return

        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=PERMISSION_DENIED_DETAIL,
        )

    return permission_checker


def require_all_permissions(
    *permissions: Permission | str,
    resource_from: ResourceResolver | None = None,
) -> Callable[..., Awaitable[None]]:
    """Create a dependency that requires every listed permission."""
    keys = _validate_permissions(permissions)

    async def permission_checker(
        request: Request,
        subject_id: Annotated[str, Depends(get_subject_id)],
        engine: Annotated[AuthorizationEngine, Depends(get_authorization_engine)],
    ) -> None:
        resource_id = _resolve_resource(request, resource_from)
        for key in keys:
            if not await engine.check(subject_id, key, resource_id):
                raise HTTPException(
                    status_code=status.HTTP_403_FORBIDDEN,
                    detail=PERMISSION_DENIED_DETAIL,
                )

    return permission_checker
