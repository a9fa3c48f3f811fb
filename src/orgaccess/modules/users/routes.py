"""User access routes.

Profile endpoints describe what the caller may do and whom they manage;
role assignment endpoints are guarded by ``users:assign-role``.
"""

from uuid import UUID

from fastapi import Response, status

from orgaccess.api.dependencies import DBSession
from orgaccess.core.auth import CurrentUserId
from orgaccess.core.permissions import (
    OrgHierarchyResolver,
    PermissionEvaluator,
    RoleAssignmentStore,
    require_permission,
)
from orgaccess.modules.users import router
from orgaccess.modules.users.schemas import (
    PermissionProfileResponse,
    SubordinateListResponse,
    SubordinateResponse,
    UserRoleResponse,
)


# ============================================================
# Current User
# ============================================================


@router.get(
    "/me/permissions",
    response_model=PermissionProfileResponse,
    summary="Get current user's permissions",
    description="Returns the union of permissions across the caller's roles.",
)
async def get_my_permissions(
    current_user_id: CurrentUserId,
    db: DBSession,
) -> PermissionProfileResponse:
    """Get the caller's permission profile."""
    context = await PermissionEvaluator(db).get_permission_context(current_user_id)
    return PermissionProfileResponse(
        user_id=current_user_id,
        is_super_admin=context.is_super_admin,
        permissions=[permission.name for permission in context.permissions],
        permission_map=context.permission_map,
    )


@router.get(
    "/me/subordinates",
    response_model=SubordinateListResponse,
    summary="Get current user's subordinates",
    description="Returns everyone reporting to the caller, directly or indirectly.",
)
async def get_my_subordinates(
    current_user_id: CurrentUserId,
    db: DBSession,
) -> SubordinateListResponse:
    """List the caller's subordinates."""
    subordinates = await OrgHierarchyResolver(db).get_all_subordinates(current_user_id)
    return SubordinateListResponse(
        items=[SubordinateResponse.model_validate(user) for user in subordinates],
        total=len(subordinates),
    )


# ============================================================
# Role Assignment
# ============================================================


@router.put(
    "/{user_id}/roles/{role_id}",
    response_model=UserRoleResponse,
    summary="Assign role to user",
    description="Idempotent. Requires users:assign-role.",
)
@require_permission("users", "assign-role")
async def assign_role(
    user_id: UUID,
    role_id: UUID,
    current_user_id: CurrentUserId,
    db: DBSession,
) -> UserRoleResponse:
    """Assign a role to a user."""
    user_role = await RoleAssignmentStore(db).assign_role_to_user(
        user_id, role_id, assigned_by=current_user_id
    )
    return UserRoleResponse.model_validate(user_role)


@router.delete(
    "/{user_id}/roles/{role_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove role from user",
    description="Idempotent. Requires users:assign-role.",
)
@require_permission("users", "assign-role")
async def remove_role(
    user_id: UUID,
    role_id: UUID,
    current_user_id: CurrentUserId,  # noqa: ARG001 - required for permission check
    db: DBSession,
) -> Response:
    """Remove a role from a user."""
    await RoleAssignmentStore(db).remove_role_from_user(user_id, role_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
