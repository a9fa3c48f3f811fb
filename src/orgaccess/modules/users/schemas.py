"""Pydantic schemas for users and their access."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class SubordinateResponse(BaseModel):
    """A user in the caller's reporting line."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    email: str
    full_name: str
    manager_id: UUID | None


class SubordinateListResponse(BaseModel):
    """Direct and indirect subordinates, breadth-first."""

    items: list[SubordinateResponse]
    total: int


class PermissionProfileResponse(BaseModel):
    """The caller's resolved permissions."""

    user_id: UUID
    is_super_admin: bool
    permissions: list[str]
    permission_map: dict[str, list[str]]


class UserRoleResponse(BaseModel):
    """A role assignment."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID
    role_id: UUID
    assigned_by: UUID | None
    assigned_at: datetime
