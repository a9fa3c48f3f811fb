"""Permission system database models.

This module defines the RBAC (Role-Based Access Control) collections:
- Permission: An action that can be performed on a module
- Role: A named set of permissions
- RolePermission: Join rows granting permissions to roles
- UserRole: Join rows assigning roles to users
"""

from datetime import datetime
from uuid import UUID

from sqlalchemy import Boolean, DateTime, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from orgaccess.core.constants import (
    MAX_DESCRIPTION_LENGTH,
    MAX_PERMISSION_ACTION_LENGTH,
    MAX_PERMISSION_MODULE_LENGTH,
    MAX_ROLE_NAME_LENGTH,
)
from orgaccess.core.database.base import Base, CreatedAtMixin, TimestampMixin, UUIDMixin


class Permission(Base, UUIDMixin, TimestampMixin):
    """Permission model representing an action on a module.

    The ``(module, action)`` pair is the permission's identity; ``id`` is a
    surrogate key. A permission referenced by a role is immutable.

    Attributes:
        module: The resource category being protected (e.g., "crm_contacts")
        action: The operation being performed (e.g., "read", "assign-role")
        description: Human-readable description of the permission

    Examples:
        - module="crm_contacts", action="read" -> Can view contacts
        - module="system", action="admin" -> Super-admin marker
    """

    __tablename__ = "permissions"
    __table_args__ = (
        UniqueConstraint("module", "action", name="uq_permission_module_action"),
    )

    module: Mapped[str] = mapped_column(
        String(MAX_PERMISSION_MODULE_LENGTH),
        nullable=False,
        index=True,
    )
    action: Mapped[str] = mapped_column(
        String(MAX_PERMISSION_ACTION_LENGTH),
        nullable=False,
    )
    description: Mapped[str | None] = mapped_column(
        String(MAX_DESCRIPTION_LENGTH),
        nullable=True,
    )

    @property
    def name(self) -> str:
        """Return the permission name as 'module:action'."""
        return f"{self.module}:{self.action}"

    def __repr__(self) -> str:
        return f"<Permission({self.module}:{self.action})>"


class Role(Base, UUIDMixin, TimestampMixin):
    """Role model representing a named set of permissions.

    Attributes:
        name: Unique role name (e.g., "Manager", "Employee")
        description: Human-readable description of the role
        is_system_role: Protected from rename/deletion by callers
    """

    __tablename__ = "roles"

    name: Mapped[str] = mapped_column(
        String(MAX_ROLE_NAME_LENGTH),
        nullable=False,
        unique=True,
    )
    description: Mapped[str | None] = mapped_column(
        String(MAX_DESCRIPTION_LENGTH),
        nullable=True,
    )
    is_system_role: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<Role(id={self.id}, name={self.name})>"


class RolePermission(Base, UUIDMixin, CreatedAtMixin):
    """Grant of one permission to one role."""

    __tablename__ = "role_permissions"
    __table_args__ = (
        UniqueConstraint("role_id", "permission_id", name="uq_role_permission"),
    )

    role_id: Mapped[UUID] = mapped_column(
        ForeignKey("roles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    permission_id: Mapped[UUID] = mapped_column(
        ForeignKey("permissions.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )

    def __repr__(self) -> str:
        return f"<RolePermission(role_id={self.role_id}, permission_id={self.permission_id})>"


class UserRole(Base, UUIDMixin):
    """Assignment of one role to one user.

    A user can hold several roles; their effective permissions are the
    union of all their roles' permissions.
    """

    __tablename__ = "user_roles"
    __table_args__ = (UniqueConstraint("user_id", "role_id", name="uq_user_role"),)

    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    role_id: Mapped[UUID] = mapped_column(
        ForeignKey("roles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    # Assigner may be removed later; kept as a plain audit value
    assigned_by: Mapped[UUID | None] = mapped_column(nullable=True)
    assigned_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<UserRole(user_id={self.user_id}, role_id={self.role_id})>"
