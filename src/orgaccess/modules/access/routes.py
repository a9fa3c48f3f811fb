"""Permission catalog and role grant routes."""

from uuid import UUID

from fastapi import Response, status

from orgaccess.api.dependencies import DBSession
from orgaccess.core.auth import CurrentUserId
from orgaccess.core.errors import NotFoundError
from orgaccess.core.permissions import (
    PermissionCatalog,
    RoleAssignmentStore,
    require_permission,
)
from orgaccess.modules.access import router
from orgaccess.modules.access.schemas import (
    PermissionCreate,
    PermissionResponse,
    RolePermissionResponse,
    RoleResponse,
)


# ============================================================
# Permissions
# ============================================================


@router.get(
    "/permissions",
    response_model=list[PermissionResponse],
    summary="List permissions",
)
@require_permission("permissions", "read")
async def list_permissions(
    current_user_id: CurrentUserId,  # noqa: ARG001 - required for permission check
    db: DBSession,
) -> list[PermissionResponse]:
    """List every permission definition."""
    permissions = await PermissionCatalog(db).get_all_permissions()
    return [PermissionResponse.model_validate(p) for p in permissions]


@router.post(
    "/permissions",
    response_model=PermissionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create permission",
    description="Fails with 409 when the module/action pair already exists.",
)
@require_permission("permissions", "create")
async def create_permission(
    data: PermissionCreate,
    current_user_id: CurrentUserId,  # noqa: ARG001 - required for permission check
    db: DBSession,
) -> PermissionResponse:
    """Define a new permission."""
    permission = await PermissionCatalog(db).create_permission(
        data.module, data.action, data.description
    )
    return PermissionResponse.model_validate(permission)


# ============================================================
# Roles
# ============================================================


@router.get(
    "/roles",
    response_model=list[RoleResponse],
    summary="List roles",
)
@require_permission("roles", "read")
async def list_roles(
    current_user_id: CurrentUserId,  # noqa: ARG001 - required for permission check
    db: DBSession,
) -> list[RoleResponse]:
    """List every role."""
    roles = await PermissionCatalog(db).get_all_roles()
    return [RoleResponse.model_validate(r) for r in roles]


@router.get(
    "/roles/{role_id}/permissions",
    response_model=list[PermissionResponse],
    summary="List role permissions",
)
@require_permission("roles", "read")
async def list_role_permissions(
    role_id: UUID,
    current_user_id: CurrentUserId,  # noqa: ARG001 - required for permission check
    db: DBSession,
) -> list[PermissionResponse]:
    """List the permissions granted to a role."""
    catalog = PermissionCatalog(db)
    if await catalog.get_role_by_id(role_id) is None:
        raise NotFoundError("Role not found", resource="role", resource_id=str(role_id))

    grants = await RoleAssignmentStore(db).get_permissions_by_role(role_id)
    permissions = [await catalog.get_permission_by_id(g.permission_id) for g in grants]
    return [PermissionResponse.model_validate(p) for p in permissions if p is not None]


@router.put(
    "/roles/{role_id}/permissions/{permission_id}",
    response_model=RolePermissionResponse,
    summary="Grant permission to role",
    description="Idempotent. Requires permissions:assign.",
)
@require_permission("permissions", "assign")
async def grant_permission(
    role_id: UUID,
    permission_id: UUID,
    current_user_id: CurrentUserId,  # noqa: ARG001 - required for permission check
    db: DBSession,
) -> RolePermissionResponse:
    """Grant a permission to a role."""
    grant = await RoleAssignmentStore(db).assign_permission_to_role(role_id, permission_id)
    return RolePermissionResponse.model_validate(grant)


@router.delete(
    "/roles/{role_id}/permissions/{permission_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Revoke permission from role",
    description="Idempotent. Requires permissions:assign.",
)
@require_permission("permissions", "assign")
async def revoke_permission(
    role_id: UUID,
    permission_id: UUID,
    current_user_id: CurrentUserId,  # noqa: ARG001 - required for permission check
    db: DBSession,
) -> Response:
    """Revoke a permission from a role."""
    await RoleAssignmentStore(db).remove_permission_from_role(role_id, permission_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
