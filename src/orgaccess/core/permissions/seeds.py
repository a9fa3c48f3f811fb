"""Default permission catalog and roles.

``seed_defaults`` is idempotent: existing permissions, roles and grants are
left as they are and only the missing ones are created.
"""

from dataclasses import dataclass

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from orgaccess.core.permissions.assignments import RoleAssignmentStore
from orgaccess.core.permissions.catalog import PermissionCatalog


logger = structlog.get_logger()


DEFAULT_PERMISSIONS: list[tuple[str, str, str]] = [
    # System
    ("system", "admin", "Full system access"),
    # Users
    ("users", "read", "View users list and details"),
    ("users", "create", "Create new users"),
    ("users", "update", "Update user information"),
    ("users", "delete", "Delete users"),
    ("users", "assign-role", "Assign roles to users"),
    # Roles
    ("roles", "read", "View roles list and details"),
    ("roles", "create", "Create new roles"),
    ("roles", "update", "Update role information"),
    ("roles", "delete", "Delete roles"),
    # Permissions
    ("permissions", "read", "View permissions list"),
    ("permissions", "create", "Create new permissions"),
    ("permissions", "delete", "Delete permissions"),
    ("permissions", "assign", "Assign permissions to roles"),
    # CRM
    ("crm_contacts", "read", "View contacts"),
    ("crm_contacts", "create", "Create contacts"),
    ("crm_contacts", "update", "Update contacts"),
    ("crm_contacts", "delete", "Delete contacts"),
    # Tasks
    ("tasks", "read", "View tasks list and details"),
    ("tasks", "create", "Create new tasks"),
    ("tasks", "update", "Update task information"),
    ("tasks", "delete", "Delete tasks"),
    ("tasks", "assign", "Assign tasks to users"),
    # Reports
    ("reports", "read", "View reports"),
    ("reports", "export", "Export reports data"),
    # Settings
    ("settings", "read", "View system settings"),
    ("settings", "update", "Update system settings"),
]


@dataclass(frozen=True)
class RoleDefinition:
    """A seeded role and the permission names it is granted."""

    name: str
    description: str
    permissions: tuple[str, ...]
    is_system_role: bool = False


DEFAULT_ROLES: list[RoleDefinition] = [
    RoleDefinition(
        name="Super Admin",
        description="Full system access with all permissions",
        permissions=("system:admin",),
        is_system_role=True,
    ),
    RoleDefinition(
        name="Administrator",
        description="System administrator with most permissions",
        permissions=(
            "system:admin",
            "users:read",
            "users:create",
            "users:update",
            "users:assign-role",
            "roles:read",
            "roles:create",
            "roles:update",
            "permissions:read",
            "permissions:assign",
            "tasks:read",
            "tasks:create",
            "tasks:update",
            "tasks:delete",
            "tasks:assign",
            "reports:read",
            "reports:export",
            "settings:read",
            "settings:update",
        ),
        is_system_role=True,
    ),
    RoleDefinition(
        name="Manager",
        description="Department or team manager",
        permissions=(
            "users:read",
            "roles:read",
            "crm_contacts:read",
            "crm_contacts:create",
            "crm_contacts:update",
            "tasks:read",
            "tasks:create",
            "tasks:update",
            "tasks:assign",
            "reports:read",
        ),
        is_system_role=True,
    ),
    RoleDefinition(
        name="Team Leader",
        description="Team leader with task management",
        permissions=(
            "users:read",
            "tasks:read",
            "tasks:create",
            "tasks:update",
            "tasks:assign",
            "reports:read",
        ),
        is_system_role=True,
    ),
    RoleDefinition(
        name="Employee",
        description="Regular employee with basic access",
        permissions=(
            "users:read",
            "crm_contacts:read",
            "crm_contacts:create",
            "tasks:read",
            "tasks:update",
            "reports:read",
        ),
        is_system_role=True,
    ),
]


async def seed_defaults(session: AsyncSession) -> dict[str, int]:
    """Create the default permissions and roles if missing.

    Returns:
        Counts of created permissions and roles
    """
    catalog = PermissionCatalog(session)
    assignments = RoleAssignmentStore(session)
    created = {"permissions": 0, "roles": 0}

    permission_ids = {}
    for module, action, description in DEFAULT_PERMISSIONS:
        permission = await catalog.get_permission(module, action)
        if permission is None:
            permission = await catalog.create_permission(module, action, description)
            created["permissions"] += 1
        permission_ids[permission.name] = permission.id

    for definition in DEFAULT_ROLES:
        role = await catalog.get_role_by_name(definition.name)
        if role is None:
            role = await catalog.create_role(
                definition.name,
                definition.description,
                is_system_role=definition.is_system_role,
            )
            created["roles"] += 1

        for name in definition.permissions:
            await assignments.assign_permission_to_role(role.id, permission_ids[name])

    logger.info("defaults_seeded", **created)
    return created
