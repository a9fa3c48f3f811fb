"""Permission and role catalog.

Stores permission definitions, identified by their ``(module, action)``
pair, and the roles they are granted to.
"""

from uuid import UUID

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from orgaccess.core.errors import AlreadyExistsError, ConflictError, NotFoundError
from orgaccess.core.permissions.models import Permission, Role, RolePermission


logger = structlog.get_logger()


class PermissionCatalog:
    """Repository for permission and role definitions."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def _insert_unique(
        self,
        entity: Permission | Role,
        duplicate: AlreadyExistsError,
    ) -> None:
        """Insert a row whose identity a concurrent writer may have taken.

        The unique constraint has the final say. A violation rolls back
        only this savepoint and surfaces as ``duplicate``.
        """
        try:
            async with self.session.begin_nested():
                self.session.add(entity)
        except IntegrityError as e:
            logger.info("duplicate_insert_rejected", details=duplicate.details, error=str(e.orig))
            raise duplicate from e

    # ============================================================
    # Permissions
    # ============================================================

    async def create_permission(
        self,
        module: str,
        action: str,
        description: str | None = None,
    ) -> Permission:
        """Create a new permission.

        Args:
            module: The resource category (e.g., "crm_contacts")
            action: The operation (e.g., "read")
            description: Optional human-readable description

        Returns:
            The created permission

        Raises:
            AlreadyExistsError: If the (module, action) pair is taken
        """
        duplicate = AlreadyExistsError(
            f"Permission {module}:{action} already exists",
            details={"module": module, "action": action},
        )
        if await self.get_permission(module, action) is not None:
            raise duplicate

        permission = Permission(module=module, action=action, description=description)
        await self._insert_unique(permission, duplicate)

        logger.info("permission_created", module=module, action=action)
        return permission

    async def get_all_permissions(self) -> list[Permission]:
        """Get every permission, ordered by module then action."""
        stmt = select(Permission).order_by(Permission.module, Permission.action)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_permission_by_id(self, permission_id: UUID) -> Permission | None:
        """Get a permission by its surrogate id."""
        return await self.session.get(Permission, permission_id)

    async def get_permission(self, module: str, action: str) -> Permission | None:
        """Get a permission by its (module, action) identity."""
        stmt = select(Permission).where(
            Permission.module == module,
            Permission.action == action,
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_permissions_by_module(self, module: str) -> list[Permission]:
        """Get all permissions defined for a module."""
        stmt = (
            select(Permission)
            .where(Permission.module == module)
            .order_by(Permission.action)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def delete_permission(self, permission_id: UUID) -> None:
        """Delete a permission that no role references.

        Raises:
            NotFoundError: If the permission does not exist
            ConflictError: If any role is granted the permission
        """
        permission = await self.get_permission_by_id(permission_id)
        if permission is None:
            raise NotFoundError(
                "Permission not found",
                resource="permission",
                resource_id=str(permission_id),
            )

        stmt = (
            select(RolePermission.id)
            .where(RolePermission.permission_id == permission_id)
            .limit(1)
        )
        if (await self.session.execute(stmt)).first() is not None:
            raise ConflictError(
                f"Permission {permission.name} is assigned to roles",
                error_code="permission_in_use",
                details={"permission_id": str(permission_id)},
            )

        await self.session.delete(permission)
        await self.session.flush()
        logger.info("permission_deleted", module=permission.module, action=permission.action)

    # ============================================================
    # Roles
    # ============================================================

    async def create_role(
        self,
        name: str,
        description: str | None = None,
        is_system_role: bool = False,
    ) -> Role:
        """Create a new role.

        Raises:
            AlreadyExistsError: If a role with this name exists
        """
        duplicate = AlreadyExistsError(f"Role {name!r} already exists", details={"name": name})
        if await self.get_role_by_name(name) is not None:
            raise duplicate

        role = Role(name=name, description=description, is_system_role=is_system_role)
        await self._insert_unique(role, duplicate)

        logger.info("role_created", role_name=name, is_system_role=is_system_role)
        return role

    async def get_role_by_id(self, role_id: UUID) -> Role | None:
        """Get a role by ID."""
        return await self.session.get(Role, role_id)

    async def get_role_by_name(self, name: str) -> Role | None:
        """Get a role by its unique name."""
        result = await self.session.execute(select(Role).where(Role.name == name))
        return result.scalar_one_or_none()

    async def get_all_roles(self) -> list[Role]:
        """Get every role, ordered by name."""
        result = await self.session.execute(select(Role).order_by(Role.name))
        return list(result.scalars().all())
