"""Role and permission assignment store.

Maintains the two join collections (role -> permission, user -> role).
Assigning is an upsert: a single ``INSERT ... ON CONFLICT DO NOTHING``
against the pair's unique constraint, so concurrent duplicate assigns
converge on exactly one row.
"""

from datetime import datetime, timezone
from typing import Any
from uuid import UUID, uuid4

import structlog
from sqlalchemy import delete, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from orgaccess.core.errors import NotFoundError
from orgaccess.core.permissions.models import Permission, Role, RolePermission, UserRole
from orgaccess.modules.users.models import User


logger = structlog.get_logger()

# Dialects whose insert supports ON CONFLICT DO NOTHING
_UPSERT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


class RoleAssignmentStore:
    """Repository for role-permission grants and user-role assignments."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    def _insert_ignoring_duplicates(
        self,
        model: type[RolePermission] | type[UserRole],
        values: dict[str, Any],
        conflict_columns: list[str],
    ) -> Any:
        """Build an insert that is a no-op when the pair already exists."""
        dialect = self.session.get_bind().dialect.name
        insert = _UPSERT_INSERTS.get(dialect)
        if insert is None:
            raise NotImplementedError(f"Idempotent assignment is not supported on {dialect!r}")
        return (
            insert(model)
            .values(**values)
            .on_conflict_do_nothing(index_elements=conflict_columns)
        )

    async def _require(self, model: type[Any], entity_id: UUID, resource: str) -> None:
        if await self.session.get(model, entity_id) is None:
            raise NotFoundError(resource=resource, resource_id=str(entity_id))

    # ============================================================
    # Role -> Permission
    # ============================================================

    async def assign_permission_to_role(
        self,
        role_id: UUID,
        permission_id: UUID,
    ) -> RolePermission:
        """Grant a permission to a role.

        Granting an already-granted permission returns the existing row.

        Raises:
            NotFoundError: If the role or permission does not exist
        """
        await self._require(Role, role_id, "role")
        await self._require(Permission, permission_id, "permission")

        stmt = self._insert_ignoring_duplicates(
            RolePermission,
            {"id": uuid4(), "role_id": role_id, "permission_id": permission_id},
            ["role_id", "permission_id"],
        )
        await self.session.execute(stmt)

        result = await self.session.execute(
            select(RolePermission).where(
                RolePermission.role_id == role_id,
                RolePermission.permission_id == permission_id,
            )
        )
        role_permission = result.scalar_one()

        logger.info(
            "permission_assigned_to_role",
            role_id=str(role_id),
            permission_id=str(permission_id),
        )
        return role_permission

    async def remove_permission_from_role(
        self,
        role_id: UUID,
        permission_id: UUID,
    ) -> bool:
        """Revoke a permission from a role.

        Returns:
            True if a grant was removed, False if none existed
        """
        stmt = delete(RolePermission).where(
            RolePermission.role_id == role_id,
            RolePermission.permission_id == permission_id,
        )
        result = await self.session.execute(stmt)
        removed = bool(result.rowcount)

        if removed:
            logger.info(
                "permission_removed_from_role",
                role_id=str(role_id),
                permission_id=str(permission_id),
            )
        return removed

    async def get_permissions_by_role(self, role_id: UUID) -> list[RolePermission]:
        """Get all permission grants of a role."""
        result = await self.session.execute(
            select(RolePermission).where(RolePermission.role_id == role_id)
        )
        return list(result.scalars().all())

    # ============================================================
    # User -> Role
    # ============================================================

    async def assign_role_to_user(
        self,
        user_id: UUID,
        role_id: UUID,
        assigned_by: UUID | None,
    ) -> UserRole:
        """Assign a role to a user.

        Re-assigning a held role returns the existing row unchanged,
        including its original ``assigned_at``.

        Raises:
            NotFoundError: If the user or role does not exist
        """
        await self._require(User, user_id, "user")
        await self._require(Role, role_id, "role")

        stmt = self._insert_ignoring_duplicates(
            UserRole,
            {
                "id": uuid4(),
                "user_id": user_id,
                "role_id": role_id,
                "assigned_by": assigned_by,
                "assigned_at": datetime.now(timezone.utc),
            },
            ["user_id", "role_id"],
        )
        await self.session.execute(stmt)

        result = await self.session.execute(
            select(UserRole).where(
                UserRole.user_id == user_id,
                UserRole.role_id == role_id,
            )
        )
        user_role = result.scalar_one()

        logger.info(
            "role_assigned_to_user",
            user_id=str(user_id),
            role_id=str(role_id),
            assigned_by=str(assigned_by) if assigned_by else None,
        )
        return user_role

    async def remove_role_from_user(self, user_id: UUID, role_id: UUID) -> bool:
        """Remove a role from a user.

        Returns:
            True if an assignment was removed, False if none existed
        """
        stmt = delete(UserRole).where(
            UserRole.user_id == user_id,
            UserRole.role_id == role_id,
        )
        result = await self.session.execute(stmt)
        removed = bool(result.rowcount)

        if removed:
            logger.info("role_removed_from_user", user_id=str(user_id), role_id=str(role_id))
        return removed

    async def get_user_roles_by_user(self, user_id: UUID) -> list[UserRole]:
        """Get all role assignments of a user."""
        result = await self.session.execute(
            select(UserRole).where(UserRole.user_id == user_id)
        )
        return list(result.scalars().all())

    async def get_user_roles_by_role(self, role_id: UUID) -> list[UserRole]:
        """Get all user assignments of a role."""
        result = await self.session.execute(
            select(UserRole).where(UserRole.role_id == role_id)
        )
        return list(result.scalars().all())

    async def get_user_permissions(self, user_id: UUID) -> list[Permission]:
        """Get the union of permissions across all of a user's roles.

        Args:
            user_id: The user's UUID

        Returns:
            Permissions de-duplicated by (module, action)
        """
        stmt = (
            select(Permission)
            .join(RolePermission, RolePermission.permission_id == Permission.id)
            .join(UserRole, UserRole.role_id == RolePermission.role_id)
            .where(UserRole.user_id == user_id)
            .order_by(Permission.module, Permission.action)
        )
        result = await self.session.execute(stmt)

        seen: set[tuple[str, str]] = set()
        permissions: list[Permission] = []
        for permission in result.scalars():
            key = (permission.module, permission.action)
            if key not in seen:
                seen.add(key)
                permissions.append(permission)

        return permissions
