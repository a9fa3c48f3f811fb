"""Permission evaluation.

The module-level functions answer questions about a permission map
(``module -> [action, ...]``) and hold the one alias table and the one
super-admin rule used across the application. ``PermissionEvaluator``
builds that map from the store for a given user and never grants access
when the store cannot be read.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Protocol
from uuid import UUID

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from orgaccess.config import settings
from orgaccess.core.constants import (
    ACTION_ALIASES,
    ADMIN_PRIVILEGE_BUNDLE,
    CANONICAL_ACTIONS,
    SUPER_ADMIN_ACTION,
    SUPER_ADMIN_MODULE,
)
from orgaccess.core.permissions.assignments import RoleAssignmentStore
from orgaccess.core.permissions.models import Permission


logger = structlog.get_logger()

PermissionMap = dict[str, list[str]]


class ModuleAction(Protocol):
    """Anything carrying a permission's identity."""

    module: str
    action: str


# ============================================================
# Permission map functions
# ============================================================


def action_aliases(action: str) -> tuple[str, ...]:
    """Return every action that satisfies ``action``, itself included."""
    return ACTION_ALIASES.get(action, (action,))


def map_permissions_by_module(permissions: Iterable[ModuleAction]) -> PermissionMap:
    """Group a flat permission list into ``module -> [action, ...]``."""
    permission_map: PermissionMap = {}
    for permission in permissions:
        actions = permission_map.setdefault(permission.module, [])
        if permission.action not in actions:
            actions.append(permission.action)
    return permission_map


def _holds(permission_map: PermissionMap, module: str, action: str) -> bool:
    return action in permission_map.get(module, ())


def _grants(permission_map: PermissionMap, module: str, action: str) -> bool:
    granted = permission_map.get(module, ())
    return any(alias in granted for alias in action_aliases(action))


def is_super_admin(permission_map: PermissionMap) -> bool:
    """Check whether a permission map grants full access.

    Either the explicit ``system:admin`` marker or the complete legacy
    administrator bundle qualifies.
    """
    if _holds(permission_map, SUPER_ADMIN_MODULE, SUPER_ADMIN_ACTION):
        return True

    if all(_holds(permission_map, module, action) for module, action in ADMIN_PRIVILEGE_BUNDLE):
        if settings.warn_on_legacy_admin_bundle:
            logger.warning(
                "legacy_admin_bundle_detected",
                hint=f"grant {SUPER_ADMIN_MODULE}:{SUPER_ADMIN_ACTION} explicitly",
            )
        return True

    return False


def has_permission(permission_map: PermissionMap, module: str, action: str) -> bool:
    """Check a single module/action, honouring super-admin and aliases.

    Examples:
        >>> has_permission({"sales": ["read"]}, "sales", "view")
        True
        >>> has_permission({"sales": ["read"]}, "sales", "delete")
        False
    """
    return is_super_admin(permission_map) or _grants(permission_map, module, action)


def get_module_permissions(permission_map: PermissionMap, module: str) -> list[str]:
    """List the actions a map grants on a module.

    Super-admins get the canonical action set; everyone else gets the
    stored actions verbatim, without alias expansion.
    """
    if is_super_admin(permission_map):
        return list(CANONICAL_ACTIONS)
    return list(permission_map.get(module, ()))


def has_module_access(permission_map: PermissionMap, module: str) -> bool:
    """Check whether a map grants at least one action on a module."""
    return is_super_admin(permission_map) or bool(permission_map.get(module))


# ============================================================
# Store-backed evaluation
# ============================================================


@dataclass
class PermissionContext:
    """A user's resolved permissions."""

    permissions: list[Permission] = field(default_factory=list)
    permission_map: PermissionMap = field(default_factory=dict)
    is_super_admin: bool = False


class PermissionEvaluator:
    """Service for checking user permissions.

    Evaluates whether a user may perform an action based on the union of
    their roles' permissions. Every check fails closed: a store error is
    logged and treated as a denial.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self.assignments = RoleAssignmentStore(session)

    async def get_permission_context(self, user_id: UUID) -> PermissionContext:
        """Resolve a user's permissions from the store.

        Raises:
            SQLAlchemyError: If the store cannot be read
        """
        permissions = await self.assignments.get_user_permissions(user_id)
        permission_map = map_permissions_by_module(permissions)
        return PermissionContext(
            permissions=permissions,
            permission_map=permission_map,
            is_super_admin=is_super_admin(permission_map),
        )

    async def load_context(self, user_id: UUID, **log_context: object) -> PermissionContext | None:
        """Resolve a user's permissions, or None when the store fails."""
        try:
            return await self.get_permission_context(user_id)
        except SQLAlchemyError as e:
            logger.exception(
                "permission_check_failed",
                user_id=str(user_id),
                error=str(e),
                **log_context,
            )
            return None

    async def check_user_permission(self, user_id: UUID, module: str, action: str) -> bool:
        """Check if a user has a specific permission.

        Args:
            user_id: The user's UUID
            module: The module to check (e.g., "crm_contacts")
            action: The action to check (e.g., "read", "view", "delete")

        Returns:
            True if the user has the permission, False otherwise
        """
        context = await self.load_context(user_id, module=module, action=action)
        if context is None:
            return False
        return context.is_super_admin or _grants(context.permission_map, module, action)

    async def has_any_permission(
        self,
        user_id: UUID,
        permissions: list[tuple[str, str]],
    ) -> bool:
        """Check if a user has at least one of several (module, action) pairs."""
        context = await self.load_context(user_id, permissions=permissions)
        if context is None:
            return False
        return context.is_super_admin or any(
            _grants(context.permission_map, module, action) for module, action in permissions
        )

    async def has_all_permissions(
        self,
        user_id: UUID,
        permissions: list[tuple[str, str]],
    ) -> bool:
        """Check if a user has every one of several (module, action) pairs."""
        context = await self.load_context(user_id, permissions=permissions)
        if context is None:
            return False
        return context.is_super_admin or all(
            _grants(context.permission_map, module, action) for module, action in permissions
        )

    async def get_user_module_permissions(
        self,
        user_id: UUID,
        modules: list[str],
    ) -> dict[str, list[str]]:
        """Get the granted actions for each requested module.

        Returns:
            Mapping of module to actions; empty when the store fails
        """
        context = await self.load_context(user_id, modules=modules)
        if context is None:
            return {}
        if context.is_super_admin:
            return {module: list(CANONICAL_ACTIONS) for module in modules}
        return {module: list(context.permission_map.get(module, ())) for module in modules}

    async def has_user_module_access(self, user_id: UUID, module: str) -> bool:
        """Check if a user has any permission in a module."""
        context = await self.load_context(user_id, module=module)
        if context is None:
            return False
        return context.is_super_admin or bool(context.permission_map.get(module))
