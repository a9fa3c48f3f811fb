"""Permission decorators for route protection.

This module provides decorators that can be applied to FastAPI
routes to require specific module/action permissions.
"""

from collections.abc import Awaitable, Callable
from functools import wraps
from typing import TYPE_CHECKING, Any, ParamSpec, TypeVar, cast
from uuid import UUID

import structlog

from orgaccess.core.errors import ForbiddenError, UnauthorizedError
from orgaccess.core.permissions.evaluator import PermissionEvaluator, has_permission


if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession


logger = structlog.get_logger()

P = ParamSpec("P")
R = TypeVar("R")


async def _check_permissions(
    user_id: UUID,
    db: "AsyncSession",
    permissions: list[tuple[str, str]],
    require_all: bool,
) -> bool:
    """Evaluate the required permissions for a principal.

    Args:
        user_id: The principal to check
        db: Database session
        permissions: List of (module, action) tuples to check
        require_all: If True, every pair is required; if False, any one

    Returns:
        True if the check passes
    """
    perm_strs = [f"{m}:{a}" for m, a in permissions]
    context = await PermissionEvaluator(db).load_context(user_id, permissions=perm_strs)
    if context is None:
        return False

    if context.is_super_admin:
        logger.warning(
            "super_admin_access",
            user_id=str(user_id),
            permissions=perm_strs,
        )
        return True

    check = all if require_all else any
    allowed = check(
        has_permission(context.permission_map, module, action)
        for module, action in permissions
    )

    logger.debug(
        "permission_check",
        user_id=str(user_id),
        permissions=perm_strs,
        require_all=require_all,
        allowed=allowed,
    )
    return allowed


def _get_principal_and_db(
    kwargs: dict[str, Any],
) -> tuple[UUID | None, "AsyncSession | None"]:
    """Extract the principal id and db session from route kwargs."""
    user_id = cast("UUID | None", kwargs.get("current_user_id"))
    db = cast("AsyncSession | None", kwargs.get("db"))
    return user_id, db


def _permission_guard(
    permissions: list[tuple[str, str]],
    require_all: bool,
) -> Callable[[Callable[P, Awaitable[R]]], Callable[P, Awaitable[R]]]:
    def decorator(func: Callable[P, Awaitable[R]]) -> Callable[P, Awaitable[R]]:
        @wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            user_id, db = _get_principal_and_db(kwargs)

            if user_id is None:
                raise UnauthorizedError(
                    "Authentication required",
                    error_code="auth_required",
                )

            # No session means the evaluator cannot run; deny
            if db is None:
                raise ForbiddenError(
                    "Permission check failed",
                    error_code="permission_check_failed",
                )

            if not await _check_permissions(user_id, db, permissions, require_all):
                perm_strs = [f"{m}:{a}" for m, a in permissions]
                if require_all:
                    message = f"Missing required permissions: {', '.join(perm_strs)}"
                else:
                    message = f"Missing required permission. Need one of: {', '.join(perm_strs)}"
                raise ForbiddenError(
                    message,
                    error_code="permission_denied",
                    details={"required_permissions": perm_strs},
                )

            return await func(*args, **kwargs)

        return wrapper

    return decorator


def require_permission(
    module: str, action: str
) -> Callable[[Callable[P, Awaitable[R]]], Callable[P, Awaitable[R]]]:
    """Decorator that requires a specific permission to access a route.

    Usage:
        @router.delete("/contacts/{contact_id}")
        @require_permission("crm_contacts", "delete")
        async def delete_contact(contact_id: UUID, current_user_id: CurrentUserId, db: DBSession):
            ...

    Args:
        module: The module being accessed (e.g., "crm_contacts")
        action: The action being performed (e.g., "delete")

    Raises:
        UnauthorizedError: If no principal is present
        ForbiddenError: If the principal lacks the permission
    """
    return _permission_guard([(module, action)], require_all=True)


def require_any_permission(
    permissions: list[tuple[str, str]],
) -> Callable[[Callable[P, Awaitable[R]]], Callable[P, Awaitable[R]]]:
    """Decorator that requires any one of the specified permissions.

    Usage:
        @router.get("/reports")
        @require_any_permission([("reports", "read"), ("audit", "read")])
        async def get_reports(current_user_id: CurrentUserId, db: DBSession):
            ...
    """
    return _permission_guard(permissions, require_all=False)


def require_all_permissions(
    permissions: list[tuple[str, str]],
) -> Callable[[Callable[P, Awaitable[R]]], Callable[P, Awaitable[R]]]:
    """Decorator that requires all of the specified permissions."""
    return _permission_guard(permissions, require_all=True)
